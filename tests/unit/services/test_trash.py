"""
Tests pour TrashLifecycleManager - corbeille des entrees et des demandes.

TDD tests couvrant:
- Instantane ecrit avant la suppression en base
- Restauration complete (contenu, groupes admin) puis retrait de l'instantane
- Restauration idempotente (NOT_FOUND sans erreur)
- Purge sans effet sur la base principale
- Etats du cycle de vie et operations groupees
"""

from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from curator.adapters.cache.trash_cache import DiskTrashCache
from curator.core.entities.entry import Entry, EntryType, SeasonLinks
from curator.core.entities.trash import (
    AdminRequest,
    RecordState,
    RequestStatus,
    TrashKind,
)
from curator.core.errors import NotFound, StoreWriteFailed
from curator.core.ports.trash_cache import ITrashCache
from curator.core.value_objects.overrides import FieldGroup
from curator.services.trash import RestoreStatus, TrashLifecycleManager


@pytest.fixture
def entry_trash(tmp_path, entry_repo, date_clock):
    cache = DiskTrashCache(tmp_path / "trash" / "entries")
    yield TrashLifecycleManager(TrashKind.ENTRY, entry_repo, cache, clock=date_clock)
    cache.close()


@pytest.fixture
def request_trash(tmp_path, request_repo, date_clock):
    cache = DiskTrashCache(tmp_path / "trash" / "requests")
    yield TrashLifecycleManager(TrashKind.REQUEST, request_repo, cache, clock=date_clock)
    cache.close()


def _edited_series() -> Entry:
    return Entry(
        id="93405",
        type=EntryType.SERIES,
        title="Squid Game (admin)",
        content={
            1: SeasonLinks(watch_links=["https://w/1"], download_links=["https://d/1"]),
            2: SeasonLinks(watch_links=["https://w/2"]),
        },
        overrides=FieldGroup.METADATA | FieldGroup.LINKS,
        poster_url="https://img/poster.jpg",
    )


class TestMoveToTrash:
    """Suppression douce."""

    def test_snapshot_then_delete(self, entry_trash, entry_repo, date_clock):
        entry_repo.upsert(_edited_series())

        snapshot = entry_trash.move_to_trash(entry_repo.get_by_id("93405"))

        assert entry_repo.get_by_id("93405") is None
        assert entry_trash.is_in_trash("93405")
        assert snapshot.deleted_at == date_clock.now
        assert snapshot.type == "series"
        assert snapshot.origin_category == "series"
        assert snapshot.title == "Squid Game (admin)"

    def test_explicit_origin_category_kept(self, entry_trash, entry_repo, movie_entry):
        entry_repo.upsert(movie_entry)

        snapshot = entry_trash.move_to_trash(movie_entry, origin_category="featured")

        assert snapshot.origin_category == "featured"

    def test_snapshot_failure_leaves_store_untouched(self, entry_repo, movie_entry):
        entry_repo.upsert(movie_entry)
        cache = MagicMock(spec=ITrashCache)
        cache.put.side_effect = OSError("disk full")
        manager = TrashLifecycleManager(TrashKind.ENTRY, entry_repo, cache)

        with pytest.raises(StoreWriteFailed):
            manager.move_to_trash(movie_entry)

        assert entry_repo.get_by_id("550") is not None

    def test_failed_delete_keeps_snapshot(self, tmp_path, movie_entry):
        repo = MagicMock()
        repo.delete.side_effect = StoreWriteFailed("locked")
        cache = DiskTrashCache(tmp_path / "trash")
        manager = TrashLifecycleManager(TrashKind.ENTRY, repo, cache)

        with pytest.raises(StoreWriteFailed):
            manager.move_to_trash(movie_entry)

        assert manager.is_in_trash("550")
        cache.close()

    def test_trash_by_id_missing(self, entry_trash):
        with pytest.raises(NotFound):
            entry_trash.trash_by_id("404")


class TestRestore:
    """Restauration depuis la corbeille."""

    def test_restore_roundtrip(self, entry_trash, entry_repo):
        entry_repo.upsert(_edited_series())
        entry_trash.trash_by_id("93405")

        outcome = entry_trash.restore("93405")

        assert outcome.status == RestoreStatus.RESTORED
        assert outcome.origin_category == "series"
        restored = entry_repo.get_by_id("93405")
        assert restored.title == "Squid Game (admin)"
        assert restored.content[1].download_links == ["https://d/1"]
        assert restored.content[2].watch_links == ["https://w/2"]
        assert restored.overrides == FieldGroup.METADATA | FieldGroup.LINKS
        assert not entry_trash.is_in_trash("93405")

    def test_restore_is_idempotent(self, entry_trash, entry_repo, movie_entry):
        entry_repo.upsert(movie_entry)
        entry_trash.move_to_trash(movie_entry)

        first = entry_trash.restore("550")
        second = entry_trash.restore("550")

        assert first.status == RestoreStatus.RESTORED
        assert second.status == RestoreStatus.NOT_FOUND
        assert entry_repo.get_by_id("550") is not None

    def test_restore_overwrites_existing_record(self, entry_trash, entry_repo, movie_entry):
        entry_repo.upsert(movie_entry)
        entry_trash.move_to_trash(movie_entry)
        entry_repo.upsert(Entry(id="550", type=EntryType.MOVIE, title="Recreated"))

        entry_trash.restore("550")

        assert entry_repo.get_by_id("550").title == "Fight Club"

    def test_restore_many_report(self, entry_trash, entry_repo, movie_entry):
        entry_repo.upsert(movie_entry)
        entry_trash.move_to_trash(movie_entry)

        report = entry_trash.restore_many(["550", "404"])

        assert report.succeeded == ["550"]
        assert report.not_found == ["404"]
        assert report.failed == []


class TestPurge:
    """Suppression definitive."""

    def test_purge_never_touches_store(self, tmp_path, movie_entry):
        repo = MagicMock()
        cache = DiskTrashCache(tmp_path / "trash")
        manager = TrashLifecycleManager(TrashKind.ENTRY, repo, cache)
        manager.move_to_trash(movie_entry)
        repo.reset_mock()

        assert manager.permanently_delete("550") is True
        assert manager.permanently_delete("550") is False

        repo.assert_not_called()
        assert repo.method_calls == []
        cache.close()

    def test_state_transitions(self, entry_trash, entry_repo, movie_entry):
        entry_repo.upsert(movie_entry)
        assert entry_trash.state_of("550") == RecordState.ACTIVE

        entry_trash.move_to_trash(movie_entry)
        assert entry_trash.state_of("550") == RecordState.TRASHED

        entry_trash.permanently_delete("550")
        assert entry_trash.state_of("550") == RecordState.PURGED
        assert entry_trash.restore("550").status == RestoreStatus.NOT_FOUND

    def test_permanently_delete_many_and_empty(self, entry_trash, entry_repo, movie_entry):
        entry_repo.upsert(movie_entry)
        entry_repo.upsert(_edited_series())
        entry_trash.move_many_to_trash(entry_repo.list_entries())

        report = entry_trash.permanently_delete_many(["550", "404"])
        assert report.succeeded == ["550"]
        assert report.not_found == ["404"]

        assert entry_trash.empty_trash() == 1
        assert entry_trash.list() == []


class TestListing:
    """Affichage de la corbeille."""

    def test_list_newest_first(self, entry_trash, entry_repo, movie_entry, date_clock):
        entry_repo.upsert(movie_entry)
        entry_repo.upsert(_edited_series())

        entry_trash.trash_by_id("550")
        date_clock.now = date_clock.now + timedelta(hours=1)
        entry_trash.trash_by_id("93405")

        assert [s.id for s in entry_trash.list()] == ["93405", "550"]


class TestRequestTrash:
    """Corbeille des demandes utilisateurs."""

    def test_origin_is_request_category(self, request_trash, request_repo):
        request_repo.upsert(
            AdminRequest(
                id="r1",
                user_id="u1",
                title="Add Dune",
                admin_response="Soon",
                created_at=datetime(2024, 5, 1),
            )
        )

        snapshot = request_trash.trash_by_id("r1")

        assert snapshot.kind == TrashKind.REQUEST
        assert snapshot.origin_category == "pending"
        assert request_repo.get_by_id("r1") is None

    def test_restore_request(self, request_trash, request_repo):
        request_repo.upsert(
            AdminRequest(
                id="r2",
                user_id="u1",
                title="Add Dune",
                status=RequestStatus.COMPLETED,
                created_at=datetime(2024, 5, 1),
            )
        )
        request_trash.trash_by_id("r2")

        outcome = request_trash.restore("r2")

        assert outcome.origin_category == "done"
        assert request_repo.get_by_id("r2").status == RequestStatus.COMPLETED
