"""
Orchestrateur de synchronisation en masse.

Enveloppe le moteur de reconciliation dans une boucle cadencee :
- les unites (saisons d'une serie, ou entrees du catalogue) sont traitees
  strictement dans l'ordre croissant, une a la fois ;
- un limiteur de cadence injecte espace les unites (0.3s par defaut,
  0.25s pour les identifiants externes) ;
- une progression est emise apres chaque unite (current strictement croissant) ;
- l'echec d'une unite est compte mais n'interrompt jamais le lot ;
- les reponses 429 sont relancees (tenacity) avant de compter l'unite en echec ;
- l'annulation est cooperative : verifiee avant chaque unite.

Seules les preconditions (identifiant invalide, entree introuvable, base
injoignable, liste des saisons indisponible) levent une erreur globale.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Sequence, TypeVar

from loguru import logger

from curator.adapters.api.retry import SleepFunc, call_with_retry
from curator.core.entities.entry import Entry, EntryType
from curator.core.errors import CuratorError, NotFound, PartialFailure
from curator.core.ports.repositories import IEntryRepository
from curator.core.value_objects.identifiers import parse_catalog_id
from curator.services.rate_limiter import TokenBucket

if TYPE_CHECKING:
    from curator.services.reconciliation import ReconciliationService

U = TypeVar("U")


@dataclass
class ProgressEvent:
    """Information de progression pour le callback."""

    current: int
    total: int
    message: str
    succeeded: bool = True


@dataclass
class BatchReport:
    """
    Bilan d'un lot.

    Attributs :
        total_attempted : Unites tentees (succes + echecs)
        succeeded : Unites reussies
        failed : Unites en echec (apres relances eventuelles)
        cancelled : True si le lot a ete interrompu par annulation
        failures : (unite, message d'erreur) pour chaque echec
    """

    total_attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    cancelled: bool = False
    failures: list[tuple[str, str]] = field(default_factory=list)


class CancellationToken:
    """Jeton d'annulation cooperative, consulte entre deux unites."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


ProgressCallback = Callable[[ProgressEvent], None]


class BatchSyncOrchestrator:
    """
    Service de synchronisation en masse (saisons d'une serie, lot d'entrees).

    Example:
        orchestrator = BatchSyncOrchestrator(reconciliation, entry_repo, TokenBucket(0.3))
        report = await orchestrator.sync_seasons("1399", on_progress=print)
    """

    def __init__(
        self,
        reconciliation: "ReconciliationService",
        entry_repo: IEntryRepository,
        limiter: TokenBucket,
        max_attempts: int = 3,
        max_wait: int = 30,
        retry_sleep: Optional[SleepFunc] = None,
        external_ids_limiter: Optional[TokenBucket] = None,
    ) -> None:
        self._reconciliation = reconciliation
        self._entry_repo = entry_repo
        self._limiter = limiter
        self._external_ids_limiter = external_ids_limiter or limiter
        self._max_attempts = max_attempts
        self._max_wait = max_wait
        self._retry_sleep = retry_sleep

    async def _with_retry(self, func: Callable[..., Awaitable[U]], *args) -> U:
        return await call_with_retry(
            func,
            *args,
            max_attempts=self._max_attempts,
            max_wait=self._max_wait,
            sleep=self._retry_sleep,
        )

    async def sync_seasons(
        self,
        entry_id: str,
        seasons: Optional[Sequence[int]] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> BatchReport:
        """
        Synchronise les episodes des saisons d'une serie.

        Args:
            entry_id: Identifiant de la serie
            seasons: Saisons a traiter (defaut: toutes les saisons regulieres du fournisseur)
            on_progress: Callback de progression optionnel
            cancel: Jeton d'annulation optionnel

        Returns:
            Bilan du lot

        Raises:
            InvalidIdentifier: Identifiant mal forme
            NotFound: Entree absente de la base ou qui n'est pas une serie
            StoreUnavailable: Base injoignable
            ProviderUnavailable: Liste des saisons indisponible
        """
        try:
            entry_id = parse_catalog_id(entry_id)
            entry = self._entry_repo.get_by_id(entry_id)
            if entry is None:
                raise NotFound(f"Entree {entry_id} introuvable")
            if entry.type != EntryType.SERIES:
                raise NotFound(f"L'entree {entry_id} n'est pas une serie")

            if seasons is None:
                details = await self._with_retry(
                    self._reconciliation.provider.fetch_details, entry_id, EntryType.SERIES
                )
                seasons = details.regular_seasons
        except CuratorError as e:
            logger.error("Synchronisation des saisons impossible", entry_id=entry_id, error=str(e))
            raise

        units = sorted(set(seasons))
        logger.info("Synchronisation des saisons", entry_id=entry_id, seasons=units)

        async def _sync_one(season_number: int) -> None:
            await self._with_retry(self._reconciliation.backfill_season, entry_id, season_number)

        return await self._run(
            units,
            _sync_one,
            describe=lambda s: f"Saison {s}",
            on_progress=on_progress,
            cancel=cancel,
            context={"entry_id": entry_id},
        )

    def select_entries(
        self,
        entry_type: Optional[EntryType] = None,
        limit: Optional[int] = None,
        keep: Optional[Callable[[Entry], bool]] = None,
    ) -> list[Entry]:
        """
        Lit les entrees en base (ordre de stockage), filtrees puis limitees.

        Raises:
            StoreUnavailable: Base injoignable
        """
        try:
            entries = self._entry_repo.list_entries(
                entry_type=entry_type, limit=None if keep else limit
            )
        except CuratorError as e:
            logger.error("Lecture des entrees impossible", error=str(e))
            raise

        if keep is not None:
            entries = [e for e in entries if keep(e)]
            if limit is not None:
                entries = entries[:limit]
        return entries

    def needs_filling(self, entry: Entry) -> bool:
        """True si un champ completable de l'entree est vide."""
        return bool(self._reconciliation.fillable_fields(entry))

    async def backfill_entries(
        self,
        entries: Optional[Sequence[Entry]] = None,
        entry_type: Optional[EntryType] = None,
        limit: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancellationToken] = None,
        missing_only: bool = False,
    ) -> BatchReport:
        """
        Pre-remplit les metadonnees d'un lot d'entrees depuis le fournisseur.

        Les entrees dont les metadonnees sont prises en charge par l'admin
        ne voient pas leurs champs de presentation ecrases ; leurs episodes
        non proteges sont tout de meme synchronises.

        Avec missing_only, seules les entrees ayant un champ completable vide
        sont traitees, et seuls ces champs sont ecrits (pas d'episodes).
        Une serie dont une saison echoue compte comme unite en echec.

        Args:
            entries: Entrees a traiter (defaut: lecture en base, ordre de stockage)
            entry_type: Filtre par type quand les entrees sont lues en base
            limit: Nombre maximum d'entrees traitees
            on_progress: Callback de progression optionnel
            cancel: Jeton d'annulation optionnel
            missing_only: Ne completer que les champs vides

        Returns:
            Bilan du lot

        Raises:
            StoreUnavailable: Base injoignable
        """
        keep = self.needs_filling if missing_only else None
        if entries is None:
            entries = self.select_entries(entry_type=entry_type, limit=limit, keep=keep)
        elif keep is not None:
            entries = [e for e in entries if keep(e)]

        units = list(entries)
        logger.info("Pre-remplissage des entrees", count=len(units), missing_only=missing_only)

        async def _prefill_one(entry: Entry) -> None:
            outcome = await self._with_retry(self._reconciliation.prefill_entry, entry)
            if outcome.seasons_failed:
                raise PartialFailure(
                    f"{outcome.seasons_failed} saison(s) en echec "
                    f"({outcome.seasons} synchronisee(s))"
                )

        async def _fill_one(entry: Entry) -> None:
            await self._with_retry(self._reconciliation.fill_missing_fields, entry)

        return await self._run(
            units,
            _fill_one if missing_only else _prefill_one,
            describe=lambda e: f"{e.title or e.id} ({e.id})",
            on_progress=on_progress,
            cancel=cancel,
            context={},
        )

    async def sync_external_ids(
        self,
        entries: Optional[Sequence[Entry]] = None,
        entry_type: Optional[EntryType] = None,
        limit: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> BatchReport:
        """
        Renseigne l'identifiant IMDb des entrees qui n'en ont pas.

        Cadence par le limiteur des identifiants externes (0.25s par defaut).
        Une entree sans identifiant IMDb chez le fournisseur compte en echec.

        Raises:
            StoreUnavailable: Base injoignable
        """
        if entries is None:
            entries = self.select_entries(
                entry_type=entry_type, limit=limit, keep=lambda e: not e.imdb_id
            )

        units = list(entries)
        logger.info("Synchronisation des identifiants IMDb", count=len(units))

        async def _sync_one(entry: Entry) -> None:
            await self._with_retry(self._reconciliation.sync_external_ids, entry)

        return await self._run(
            units,
            _sync_one,
            describe=lambda e: f"{e.title or e.id} ({e.id})",
            on_progress=on_progress,
            cancel=cancel,
            context={},
            limiter=self._external_ids_limiter,
        )

    async def _run(
        self,
        units: list[U],
        worker: Callable[[U], Awaitable[None]],
        describe: Callable[[U], str],
        on_progress: Optional[ProgressCallback],
        cancel: Optional[CancellationToken],
        context: dict,
        limiter: Optional[TokenBucket] = None,
    ) -> BatchReport:
        """Boucle commune : cadence, relance, comptage, progression, annulation."""
        report = BatchReport()
        total = len(units)
        limiter = limiter or self._limiter

        for i, unit in enumerate(units):
            if cancel is not None and cancel.cancelled:
                report.cancelled = True
                logger.info("Lot annule", processed=i, total=total, **context)
                break

            await limiter.acquire()

            label = describe(unit)
            report.total_attempted += 1
            try:
                await worker(unit)
            except Exception as e:
                report.failed += 1
                report.failures.append((label, str(e)))
                logger.warning("Echec d'une unite du lot", unit=label, error=str(e), **context)
                succeeded = False
            else:
                report.succeeded += 1
                succeeded = True

            if on_progress:
                on_progress(ProgressEvent(
                    current=i + 1,
                    total=total,
                    message=label,
                    succeeded=succeeded,
                ))

        logger.info(
            "Lot termine",
            attempted=report.total_attempted,
            succeeded=report.succeeded,
            failed=report.failed,
            cancelled=report.cancelled,
            **context,
        )
        return report
