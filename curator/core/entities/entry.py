"""
Entités du catalogue : entrées (films/séries) et métadonnées d'épisodes.

Une entrée est identifiée par l'identifiant du fournisseur (converti en chaîne).
Son contenu (liens de lecture/téléchargement) a une forme différente selon
le type : un couple de liens pour un film, un dictionnaire saison -> liens
pour une série.
"""

from dataclasses import dataclass, field, fields as dataclass_fields
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Union

from curator.core.value_objects.overrides import FieldGroup

MAX_CAST_MEMBERS = 12


class EntryType(str, Enum):
    """Type d'une entrée du catalogue."""

    MOVIE = "movie"
    SERIES = "series"


@dataclass(frozen=True)
class Genre:
    """Genre fournisseur (id + nom)."""

    id: int
    name: str


@dataclass(frozen=True)
class CastMember:
    """Membre du casting affiché sur la fiche."""

    id: int
    name: str
    character: Optional[str] = None
    profile_path: Optional[str] = None


@dataclass
class MovieContent:
    """Liens d'un film : un lien de lecture et un lien de téléchargement."""

    watch_link: str = ""
    download_link: str = ""

    def has_links(self) -> bool:
        return bool(self.watch_link or self.download_link)


@dataclass
class SeasonLinks:
    """Liens d'une saison : listes ordonnées (un lien par épisode)."""

    watch_links: list[str] = field(default_factory=list)
    download_links: list[str] = field(default_factory=list)

    def has_links(self) -> bool:
        return bool(self.watch_links or self.download_links)


SeriesContent = dict[int, SeasonLinks]
EntryContent = Union[MovieContent, SeriesContent]


@dataclass
class Entry:
    """
    Entrée du catalogue (film ou série).

    Attributs :
        id : Identifiant fournisseur (chaîne numérique, stable)
        type : movie ou series
        content : Liens (MovieContent ou dict saison -> SeasonLinks)
        overrides : Groupes de champs pris en charge par l'administrateur
        imdb_id : Identifiant IMDb (hors groupes admin, renseigné par synchronisation)
        media_updated_at : Date de la dernière écriture de métadonnées
        Les autres attributs sont les métadonnées de présentation.
    """

    id: str
    type: EntryType
    content: EntryContent = field(default_factory=MovieContent)
    title: Optional[str] = None
    poster_url: Optional[str] = None
    backdrop_url: Optional[str] = None
    logo_url: Optional[str] = None
    hover_image_url: Optional[str] = None
    overview: Optional[str] = None
    tagline: Optional[str] = None
    status: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    runtime: Optional[int] = None
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None
    release_year: Optional[int] = None
    original_language: Optional[str] = None
    origin_country: tuple[str, ...] = ()
    imdb_id: Optional[str] = None
    genres: tuple[Genre, ...] = ()
    cast: tuple[CastMember, ...] = ()
    overrides: FieldGroup = FieldGroup.NONE
    media_updated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def admin_edited(self) -> bool:
        """True si les métadonnées de présentation sont prises en charge par l'admin."""
        return FieldGroup.METADATA in self.overrides

    @property
    def is_series(self) -> bool:
        return self.type == EntryType.SERIES

    def season_numbers(self) -> list[int]:
        """Numéros des saisons présentes dans le contenu, triés."""
        if not isinstance(self.content, dict):
            return []
        return sorted(self.content)

    def has_links(self) -> bool:
        """True si au moins un lien est renseigné."""
        if isinstance(self.content, MovieContent):
            return self.content.has_links()
        return any(season.has_links() for season in self.content.values())


# Champs de présentation couverts par le groupe METADATA
METADATA_FIELDS: tuple[str, ...] = (
    "title",
    "poster_url",
    "backdrop_url",
    "logo_url",
    "hover_image_url",
    "overview",
    "tagline",
    "status",
    "vote_average",
    "vote_count",
    "runtime",
    "number_of_seasons",
    "number_of_episodes",
    "release_year",
    "original_language",
    "origin_country",
    "genres",
    "cast",
)


def metadata_of(entry: Entry) -> dict[str, Any]:
    """Extrait les champs de présentation d'une entrée."""
    return {name: getattr(entry, name) for name in METADATA_FIELDS}


def apply_metadata(entry: Entry, values: dict[str, Any]) -> Entry:
    """
    Applique des valeurs de présentation sur une entrée (en place).

    Les listes sont converties en tuples et le casting est tronqué à
    MAX_CAST_MEMBERS.

    Raises :
        ValueError : Si une clé n'est pas un champ de présentation
    """
    unknown = set(values) - set(METADATA_FIELDS)
    if unknown:
        raise ValueError(f"Champs non modifiables: {', '.join(sorted(unknown))}")

    for name, value in values.items():
        if name in ("genres", "origin_country"):
            value = tuple(value or ())
        elif name == "cast":
            value = tuple(value or ())[:MAX_CAST_MEMBERS]
        setattr(entry, name, value)
    return entry


@dataclass
class EpisodeMetadata:
    """
    Métadonnées d'un épisode (une ligne par entrée/saison/épisode).

    Le drapeau admin_edited protège l'épisode des synchronisations de saison,
    indépendamment des groupes de l'entrée parente.
    """

    entry_id: str
    season_number: int
    episode_number: int
    name: Optional[str] = None
    overview: Optional[str] = None
    still_url: Optional[str] = None
    air_date: Optional[date] = None
    runtime: Optional[int] = None
    vote_average: Optional[float] = None
    admin_edited: bool = False
    updated_at: Optional[datetime] = None
    id: Optional[int] = None

    @property
    def key(self) -> tuple[str, int, int]:
        return (self.entry_id, self.season_number, self.episode_number)


EPISODE_FIELDS: tuple[str, ...] = tuple(
    f.name
    for f in dataclass_fields(EpisodeMetadata)
    if f.name not in ("entry_id", "season_number", "episode_number", "admin_edited", "updated_at", "id")
)


# Prefixe des cles de saison dans la forme persistee du contenu d'une serie
SEASON_KEY_PREFIX = "season_"


def content_to_dict(content: EntryContent) -> dict[str, Any]:
    """Serialise le contenu d'une entree (cles "season_N" pour une serie)."""
    if isinstance(content, MovieContent):
        return {"watch_link": content.watch_link, "download_link": content.download_link}
    return {
        f"{SEASON_KEY_PREFIX}{number}": {
            "watch_links": list(links.watch_links),
            "download_links": list(links.download_links),
        }
        for number, links in sorted(content.items())
    }


def content_from_dict(entry_type: EntryType, data: dict[str, Any]) -> EntryContent:
    """Reconstruit le contenu d'une entree ; les cles de saison mal formees sont ignorees."""
    if entry_type == EntryType.MOVIE:
        return MovieContent(
            watch_link=data.get("watch_link") or "",
            download_link=data.get("download_link") or "",
        )

    seasons: dict[int, SeasonLinks] = {}
    for key, value in data.items():
        suffix = key[len(SEASON_KEY_PREFIX):] if key.startswith(SEASON_KEY_PREFIX) else ""
        if not suffix.isdigit() or not isinstance(value, dict):
            continue
        seasons[int(suffix)] = SeasonLinks(
            watch_links=list(value.get("watch_links") or []),
            download_links=list(value.get("download_links") or []),
        )
    return seasons
