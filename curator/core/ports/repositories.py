"""
Interfaces ports pour les repositories.

Interfaces abstraites (ports) définissant les contrats de la base principale.
Les implémentations (adaptateurs) fournissent le stockage concret
(SQLite via SQLModel, mocks pour les tests).

Toutes les écritures lèvent StoreWriteFailed en cas de rejet ; les lectures
lèvent StoreUnavailable si la base ne répond pas. Une écriture multi-lignes
est atomique et rapporte les lignes écrites.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from curator.core.entities.entry import Entry, EntryType, EpisodeMetadata
from curator.core.entities.trash import AdminRequest, RequestStatus


class SortOrder(str, Enum):
    """Tri des résultats de recherche en base."""

    NONE = "none"
    RECENT = "recent"
    YEAR_DESC = "year_desc"
    YEAR_ASC = "year_asc"
    NAME = "name"
    RATING = "rating"


@dataclass
class EntryFilters:
    """
    Filtres de recherche des entrées.

    Attributs :
        entry_type : Restreint à un type (None = tous)
        missing_poster / missing_backdrop / missing_logo / missing_overview :
            Ne garde que les entrées sans ce champ
        edited_since : Ne garde que les entrées écrites depuis cette date
        sort_by : Ordre de tri
        limit : Nombre maximum de résultats
    """

    entry_type: Optional[EntryType] = None
    missing_poster: bool = False
    missing_backdrop: bool = False
    missing_logo: bool = False
    missing_overview: bool = False
    edited_since: Optional[datetime] = None
    sort_by: SortOrder = SortOrder.NONE
    limit: int = 50


@dataclass
class UpsertReport:
    """Résultat d'une écriture multi-lignes : numéros d'épisodes écrits."""

    entry_id: str
    season_number: int
    written: list[int] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.written)


class IEntryRepository(ABC):
    """Stockage des entrées du catalogue."""

    @abstractmethod
    def get_by_id(self, entry_id: str) -> Optional[Entry]:
        """Récupère une entrée par son identifiant, None si absente."""
        ...

    @abstractmethod
    def get_many(self, entry_ids: list[str]) -> dict[str, Entry]:
        """Récupère plusieurs entrées, indexées par identifiant."""
        ...

    @abstractmethod
    def upsert(self, entry: Entry) -> Entry:
        """Crée ou remplace une entrée (clé : identifiant)."""
        ...

    @abstractmethod
    def delete(self, entry_id: str) -> bool:
        """Supprime une entrée. Retourne True si une ligne a été supprimée."""
        ...

    @abstractmethod
    def list_entries(
        self,
        entry_type: Optional[EntryType] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Entry]:
        """Liste les entrées dans l'ordre de stockage (identifiant croissant)."""
        ...

    @abstractmethod
    def search(self, query: str, filters: EntryFilters) -> list[Entry]:
        """
        Recherche des entrées.

        Args :
            query : Identifiant exact si numérique, fragment de titre sinon
                (vide = pas de filtre textuel)
            filters : Filtres et tri
        """
        ...


class IEpisodeRepository(ABC):
    """Stockage des métadonnées d'épisodes."""

    @abstractmethod
    def list_episodes(
        self, entry_id: str, season_number: Optional[int] = None
    ) -> list[EpisodeMetadata]:
        """Episodes d'une entrée (optionnellement d'une saison), triés saison/épisode."""
        ...

    @abstractmethod
    def upsert_episodes(
        self, entry_id: str, season_number: int, episodes: list[EpisodeMetadata]
    ) -> UpsertReport:
        """Ecrit un lot d'épisodes d'une saison en une transaction."""
        ...

    @abstractmethod
    def upsert_episode(self, episode: EpisodeMetadata) -> EpisodeMetadata:
        """Crée ou remplace un épisode (clé : entrée/saison/épisode)."""
        ...

    @abstractmethod
    def delete_episode(self, entry_id: str, season_number: int, episode_number: int) -> bool:
        """Supprime un épisode. Retourne True si une ligne a été supprimée."""
        ...

    @abstractmethod
    def delete_season(self, entry_id: str, season_number: int) -> int:
        """Supprime tous les épisodes d'une saison. Retourne le nombre supprimé."""
        ...

    @abstractmethod
    def delete_all(self, entry_id: str) -> int:
        """Supprime tous les épisodes d'une entrée."""
        ...


class IRequestRepository(ABC):
    """Stockage des demandes utilisateurs."""

    @abstractmethod
    def get_by_id(self, request_id: str) -> Optional[AdminRequest]:
        ...

    @abstractmethod
    def list_requests(self, status: Optional[RequestStatus] = None) -> list[AdminRequest]:
        """Demandes, les plus récentes en premier."""
        ...

    @abstractmethod
    def upsert(self, request: AdminRequest) -> AdminRequest:
        ...

    @abstractmethod
    def delete(self, request_id: str) -> bool:
        ...
