"""
Vue de recherche et de filtrage du catalogue.

Deux sources :
- la base (recherche par identifiant exact ou fragment de titre, filtres
  "champ manquant", fenetre "recemment edite", tri) ;
- le fournisseur (recherche multi-types, annotee avec la presence en base).

merge_candidates fusionne les deux listes : dedoublonnage par (id, type),
entrees de la base en premier, chaque groupe trie par annee decroissante
puis date decroissante.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from loguru import logger

from curator.core.entities.entry import Entry, EntryType
from curator.core.ports.provider import IMetadataProvider, SearchHit
from curator.core.ports.repositories import EntryFilters, IEntryRepository
from curator.utils.constants import RECENTLY_EDITED_WINDOWS, STORE_SEARCH_LIMIT
from curator.utils.helpers import utc_now


@dataclass(frozen=True)
class ProviderHit:
    """Resultat fournisseur annote avec l'etat de la base."""

    hit: SearchHit
    in_store: bool = False
    has_links: bool = False


@dataclass(frozen=True)
class SearchCandidate:
    """Element de la liste fusionnee base + fournisseur."""

    id: str
    type: EntryType
    title: str
    year: Optional[int] = None
    release_date: Optional[str] = None
    poster_url: Optional[str] = None
    in_store: bool = False
    has_links: bool = False

    @property
    def key(self) -> tuple[str, EntryType]:
        return (self.id, self.type)


def edited_since(window: str, now: Optional[datetime] = None) -> datetime:
    """
    Date de debut d'une fenetre "recemment edite".

    Args:
        window: "24h", "7d" ou "30d"
        now: Date de reference (defaut: maintenant)

    Raises:
        ValueError: Fenetre inconnue
    """
    if window not in RECENTLY_EDITED_WINDOWS:
        raise ValueError(f"Fenetre inconnue: {window} (attendu: {', '.join(RECENTLY_EDITED_WINDOWS)})")
    return (now or utc_now()) - RECENTLY_EDITED_WINDOWS[window]


class CatalogSearchService:
    """Service de recherche pour l'administration du catalogue."""

    def __init__(
        self,
        entry_repo: IEntryRepository,
        provider: IMetadataProvider,
        limit: int = STORE_SEARCH_LIMIT,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._entry_repo = entry_repo
        self._provider = provider
        self._limit = limit
        self._clock = clock or utc_now

    def search_store(
        self,
        query: str = "",
        filters: Optional[EntryFilters] = None,
        edited_within: Optional[str] = None,
    ) -> list[Entry]:
        """
        Recherche en base.

        Args:
            query: Identifiant exact si numerique, fragment de titre sinon
            filters: Filtres et tri (defaut: aucun filtre, limite du service)
            edited_within: Fenetre "recemment edite" ("24h", "7d", "30d")

        Returns:
            Entrees correspondantes
        """
        filters = filters or EntryFilters(limit=self._limit)
        if edited_within:
            filters.edited_since = edited_since(edited_within, self._clock())
        return self._entry_repo.search(query, filters)

    async def search_provider(self, query: str) -> list[ProviderHit]:
        """
        Recherche chez le fournisseur, annotee avec la presence en base.

        Raises:
            ProviderUnavailable: Echec de la recherche
        """
        hits = await self._provider.search_multi(query)
        stored = self._entry_repo.get_many([hit.id for hit in hits])

        annotated = []
        for hit in hits:
            entry = stored.get(hit.id)
            in_store = entry is not None and entry.type == hit.type
            annotated.append(
                ProviderHit(
                    hit=hit,
                    in_store=in_store,
                    has_links=in_store and entry.has_links(),
                )
            )
        logger.debug("Recherche fournisseur", query=query, results=len(annotated))
        return annotated

    @staticmethod
    def merge_candidates(
        store_entries: list[Entry], provider_hits: list[ProviderHit]
    ) -> list[SearchCandidate]:
        """
        Fusionne les resultats base et fournisseur.

        En cas de doublon (meme id et meme type), l'entree de la base
        l'emporte ; la date du fournisseur sert au departage.
        """
        dates = {(p.hit.id, p.hit.type): p.hit.release_date for p in provider_hits}

        store_items: dict[tuple[str, EntryType], SearchCandidate] = {}
        for entry in store_entries:
            key = (entry.id, entry.type)
            store_items[key] = SearchCandidate(
                id=entry.id,
                type=entry.type,
                title=entry.title or entry.id,
                year=entry.release_year,
                release_date=dates.get(key),
                poster_url=entry.poster_url,
                in_store=True,
                has_links=entry.has_links(),
            )

        provider_items: dict[tuple[str, EntryType], SearchCandidate] = {}
        for p in provider_hits:
            key = (p.hit.id, p.hit.type)
            if key in store_items or key in provider_items:
                continue
            provider_items[key] = SearchCandidate(
                id=p.hit.id,
                type=p.hit.type,
                title=p.hit.title,
                year=p.hit.year,
                release_date=p.hit.release_date,
                poster_url=p.hit.poster_url,
                in_store=p.in_store,
                has_links=p.has_links,
            )

        def _sort_key(item: SearchCandidate) -> tuple[int, str]:
            return (item.year or 0, item.release_date or "")

        return sorted(store_items.values(), key=_sort_key, reverse=True) + sorted(
            provider_items.values(), key=_sort_key, reverse=True
        )
