"""
Cycle de vie de la corbeille : suppression douce, restauration, purge.

Etats d'un enregistrement : active -> trashed -> purged (terminal), ou
trashed -> active (restauration).

Regles :
- L'instantane est ecrit dans la corbeille AVANT la suppression en base ;
  si l'ecriture de l'instantane echoue, rien n'est supprime.
- La restauration ecrit l'instantane complet en base (creation ou
  remplacement, cle : identifiant) puis retire l'instantane ; un
  identifiant absent de la corbeille est un no-op rapporte "not found".
- La purge ne touche jamais la base principale.
- La corbeille est la seule source de verite pour la restauration.
"""

from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Sequence, Union

from loguru import logger

from curator.core.entities.entry import Entry, content_to_dict
from curator.core.entities.trash import AdminRequest, RecordState, TrashedEntry, TrashKind
from curator.core.errors import CuratorError, NotFound, StoreWriteFailed
from curator.core.ports.repositories import IEntryRepository, IRequestRepository
from curator.core.ports.trash_cache import ITrashCache
from curator.utils.helpers import utc_now

TrashableRecord = Union[Entry, AdminRequest]


class RestoreStatus(str, Enum):
    """Resultat d'une restauration."""

    RESTORED = "restored"
    NOT_FOUND = "not_found"


@dataclass
class RestoreOutcome:
    """Resultat d'une restauration (origin_category pour l'affichage)."""

    record_id: str
    status: RestoreStatus
    origin_category: Optional[str] = None
    record: Optional[TrashableRecord] = None


@dataclass
class BulkReport:
    """Bilan d'une operation groupee sur la corbeille."""

    succeeded: list[str] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)


class TrashLifecycleManager:
    """
    Gestionnaire de corbeille pour une nature d'enregistrement.

    Une instance par nature (entrees, demandes), chacune avec son
    repository et son cache.

    Example:
        manager = TrashLifecycleManager(TrashKind.ENTRY, entry_repo, DiskTrashCache(path))
        manager.move_to_trash(entry, origin_category="movies")
        manager.restore(entry.id)
    """

    def __init__(
        self,
        kind: TrashKind,
        repository: Union[IEntryRepository, IRequestRepository],
        cache: ITrashCache,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._kind = kind
        self._repository = repository
        self._cache = cache
        self._clock = clock or utc_now

    @property
    def kind(self) -> TrashKind:
        return self._kind

    def _snapshot(self, record: TrashableRecord, origin_category: Optional[str]) -> TrashedEntry:
        if isinstance(record, Entry):
            return TrashedEntry(
                id=record.id,
                kind=TrashKind.ENTRY,
                title=record.title or record.id,
                deleted_at=self._clock(),
                type=record.type.value,
                content=content_to_dict(record.content),
                poster_url=record.poster_url,
                origin_category=origin_category or record.type.value,
                payload={"record": deepcopy(record)},
            )
        return TrashedEntry(
            id=record.id,
            kind=TrashKind.REQUEST,
            title=record.title,
            deleted_at=self._clock(),
            type=record.request_type.value,
            origin_category=origin_category or record.category,
            payload={"record": deepcopy(record)},
        )

    def move_to_trash(
        self, record: TrashableRecord, origin_category: Optional[str] = None
    ) -> TrashedEntry:
        """
        Met un enregistrement a la corbeille (instantane puis suppression).

        Args:
            record: Entree ou demande a supprimer
            origin_category: Categorie d'origine, conservee pour l'affichage

        Returns:
            L'instantane cree

        Raises:
            StoreWriteFailed: Instantane non ecrit (rien n'est supprime), ou
                suppression en base rejetee (l'instantane est conserve)
        """
        snapshot = self._snapshot(record, origin_category)
        try:
            self._cache.put(snapshot)
        except OSError as e:
            logger.error("Instantane non ecrit, suppression annulee", record_id=record.id, error=str(e))
            raise StoreWriteFailed(f"Instantane de {record.id} non ecrit: {e}") from e

        try:
            self._repository.delete(record.id)
        except CuratorError:
            logger.error(
                "Suppression en base rejetee, instantane conserve",
                record_id=record.id,
                kind=self._kind.value,
            )
            raise

        logger.info(
            "Enregistrement mis a la corbeille",
            record_id=record.id,
            kind=self._kind.value,
            origin=snapshot.origin_category,
        )
        return snapshot

    def trash_by_id(self, record_id: str, origin_category: Optional[str] = None) -> TrashedEntry:
        """Charge un enregistrement actif puis le met a la corbeille."""
        record = self._repository.get_by_id(record_id)
        if record is None:
            raise NotFound(f"{self._kind.value} {record_id} introuvable")
        return self.move_to_trash(record, origin_category)

    def move_many_to_trash(
        self, records: Sequence[TrashableRecord], origin_category: Optional[str] = None
    ) -> BulkReport:
        """Met plusieurs enregistrements a la corbeille ; un echec n'arrete pas les autres."""
        report = BulkReport()
        for record in records:
            try:
                self.move_to_trash(record, origin_category)
            except CuratorError as e:
                report.failed.append((record.id, str(e)))
            else:
                report.succeeded.append(record.id)
        return report

    def restore(self, record_id: str) -> RestoreOutcome:
        """
        Restaure un enregistrement depuis la corbeille.

        Idempotent : un identifiant absent de la corbeille retourne NOT_FOUND
        sans lever d'erreur.

        Raises:
            StoreWriteFailed: Ecriture rejetee (l'instantane est conserve)
        """
        snapshot = self._cache.get(record_id)
        if snapshot is None:
            logger.debug("Restauration ignoree, absent de la corbeille", record_id=record_id)
            return RestoreOutcome(record_id=record_id, status=RestoreStatus.NOT_FOUND)

        record = deepcopy(snapshot.payload["record"])
        stored = self._repository.upsert(record)
        self._cache.remove(record_id)

        logger.info(
            "Enregistrement restaure",
            record_id=record_id,
            kind=self._kind.value,
            origin=snapshot.origin_category,
        )
        return RestoreOutcome(
            record_id=record_id,
            status=RestoreStatus.RESTORED,
            origin_category=snapshot.origin_category,
            record=stored,
        )

    def restore_many(self, record_ids: Sequence[str]) -> BulkReport:
        report = BulkReport()
        for record_id in record_ids:
            try:
                outcome = self.restore(record_id)
            except CuratorError as e:
                report.failed.append((record_id, str(e)))
                continue
            if outcome.status == RestoreStatus.RESTORED:
                report.succeeded.append(record_id)
            else:
                report.not_found.append(record_id)
        return report

    def permanently_delete(self, record_id: str) -> bool:
        """Purge un instantane. Ne touche jamais la base principale."""
        removed = self._cache.remove(record_id)
        if removed:
            logger.info("Instantane purge", record_id=record_id, kind=self._kind.value)
        return removed

    def permanently_delete_many(self, record_ids: Sequence[str]) -> BulkReport:
        report = BulkReport()
        for record_id in record_ids:
            if self.permanently_delete(record_id):
                report.succeeded.append(record_id)
            else:
                report.not_found.append(record_id)
        return report

    def empty_trash(self) -> int:
        """Purge tous les instantanes. Retourne le nombre purge."""
        count = self._cache.clear()
        logger.info("Corbeille videe", kind=self._kind.value, purged=count)
        return count

    def list(self) -> list[TrashedEntry]:
        """Instantanes, les plus recemment supprimes en premier (sans reseau)."""
        return self._cache.list()

    def is_in_trash(self, record_id: str) -> bool:
        return self._cache.get(record_id) is not None

    def state_of(self, record_id: str) -> RecordState:
        """
        Etat du cycle de vie d'un enregistrement.

        Un identifiant ni en corbeille ni en base est considere purge.
        """
        if self.is_in_trash(record_id):
            return RecordState.TRASHED
        if self._repository.get_by_id(record_id) is not None:
            return RecordState.ACTIVE
        return RecordState.PURGED
