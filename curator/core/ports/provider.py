"""
Interface port pour le fournisseur de métadonnées externe.

Le fournisseur est un service en lecture seule indexé par un identifiant
numérique. Chaque appel est unique : aucune relance n'est intégrée au port
(la relance éventuelle relève de l'appelant, c'est-à-dire de
l'orchestrateur de synchronisation).

Les sous-champs optionnels absents (pas d'affiche, pas de logo) sont
représentés par None ou des tuples vides ; seules les erreurs réseau,
4xx et 5xx lèvent ProviderUnavailable.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Optional

from curator.core.entities.entry import CastMember, EntryType, Genre


@dataclass(frozen=True)
class SeasonSummary:
    """Résumé d'une saison tel que listé dans les détails d'une série."""

    season_number: int
    episode_count: int = 0
    name: Optional[str] = None


@dataclass(frozen=True)
class ProviderDetails:
    """
    Détails d'un film ou d'une série côté fournisseur.

    Les URL d'images sont déjà complètes (taille incluse).
    """

    id: str
    type: EntryType
    title: Optional[str] = None
    overview: Optional[str] = None
    tagline: Optional[str] = None
    status: Optional[str] = None
    poster_url: Optional[str] = None
    backdrop_url: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    runtime: Optional[int] = None
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None
    release_date: Optional[str] = None
    original_language: Optional[str] = None
    origin_country: tuple[str, ...] = ()
    genres: tuple[Genre, ...] = ()
    seasons: tuple[SeasonSummary, ...] = ()

    @property
    def release_year(self) -> Optional[int]:
        """Année extraite de la date de sortie/première diffusion (YYYY-MM-DD)."""
        if self.release_date and len(self.release_date) >= 4 and self.release_date[:4].isdigit():
            return int(self.release_date[:4])
        return None

    @property
    def regular_seasons(self) -> tuple[int, ...]:
        """Numéros de saisons hors épisodes spéciaux (saison 0), triés."""
        return tuple(sorted(s.season_number for s in self.seasons if s.season_number > 0))


@dataclass(frozen=True)
class ImageRef:
    """Image fournisseur avec sa langue (None = sans texte)."""

    url: str
    iso_639_1: Optional[str] = None


@dataclass(frozen=True)
class ProviderImages:
    """Images disponibles pour un média."""

    logos: tuple[ImageRef, ...] = ()
    posters: tuple[ImageRef, ...] = ()
    backdrops: tuple[ImageRef, ...] = ()

    def best_logo_url(self, language: str = "en") -> Optional[str]:
        """
        Sélectionne le logo à afficher.

        Priorité : logo dans la langue demandée, puis logo sans langue,
        puis premier logo disponible.
        """
        for logo in self.logos:
            if logo.iso_639_1 == language:
                return logo.url
        for logo in self.logos:
            if logo.iso_639_1 is None:
                return logo.url
        return self.logos[0].url if self.logos else None


@dataclass(frozen=True)
class ProviderEpisode:
    """Episode tel que retourné par les détails d'une saison."""

    episode_number: int
    name: Optional[str] = None
    overview: Optional[str] = None
    still_url: Optional[str] = None
    air_date: Optional[date] = None
    runtime: Optional[int] = None
    vote_average: Optional[float] = None


@dataclass(frozen=True)
class SeasonDetail:
    """Détail d'une saison avec ses épisodes."""

    season_number: int
    name: Optional[str] = None
    episodes: tuple[ProviderEpisode, ...] = ()


@dataclass(frozen=True)
class ExternalIds:
    """Identifiants externes (IMDb, TVDB, Wikidata)."""

    imdb_id: Optional[str] = None
    tvdb_id: Optional[int] = None
    wikidata_id: Optional[str] = None


@dataclass(frozen=True)
class SearchHit:
    """Résultat de recherche multi-types du fournisseur."""

    id: str
    type: EntryType
    title: str
    poster_url: Optional[str] = None
    release_date: Optional[str] = None

    @property
    def year(self) -> Optional[int]:
        if self.release_date and len(self.release_date) >= 4 and self.release_date[:4].isdigit():
            return int(self.release_date[:4])
        return None


class IMetadataProvider(ABC):
    """
    Contrat du fournisseur de métadonnées.

    Toutes les méthodes sont asynchrones et lèvent ProviderUnavailable
    en cas d'échec réseau ou HTTP.
    """

    @abstractmethod
    async def fetch_details(self, media_id: str, media_type: EntryType) -> ProviderDetails:
        """Récupère les détails d'un film ou d'une série."""
        ...

    @abstractmethod
    async def fetch_images(self, media_id: str, media_type: EntryType) -> ProviderImages:
        """Récupère les logos, affiches et fonds d'écran."""
        ...

    @abstractmethod
    async def fetch_credits(self, media_id: str, media_type: EntryType) -> tuple[CastMember, ...]:
        """Récupère le casting, dans l'ordre du fournisseur."""
        ...

    @abstractmethod
    async def fetch_season_details(self, media_id: str, season_number: int) -> SeasonDetail:
        """Récupère les épisodes d'une saison d'une série."""
        ...

    @abstractmethod
    async def fetch_external_ids(self, media_id: str, media_type: EntryType) -> ExternalIds:
        """Récupère les identifiants externes."""
        ...

    @abstractmethod
    async def search_multi(self, query: str) -> list[SearchHit]:
        """Recherche films et séries par titre."""
        ...

    @property
    @abstractmethod
    def source(self) -> str:
        """Identifiant de la source (ex: 'tmdb')."""
        ...
