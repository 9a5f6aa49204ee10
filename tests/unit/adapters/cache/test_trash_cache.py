"""
Tests pour DiskTrashCache - corbeille locale persistante (diskcache).

Verifie:
- Les instantanes sont persistes et survivent a la reouverture du cache
- list() trie par date de suppression decroissante
- remove() / clear() retournent ce qu'ils ont retire
"""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from curator.adapters.cache.trash_cache import DiskTrashCache
from curator.core.entities.entry import Entry, EntryType
from curator.core.entities.trash import TrashedEntry, TrashKind


def _snapshot(record_id: str, deleted_at: datetime) -> TrashedEntry:
    return TrashedEntry(
        id=record_id,
        kind=TrashKind.ENTRY,
        title=f"Title {record_id}",
        deleted_at=deleted_at,
        type="movie",
        content={"watch_link": "", "download_link": ""},
        payload={"record": Entry(id=record_id, type=EntryType.MOVIE, title=f"Title {record_id}")},
    )


@pytest.fixture
def cache(tmp_path: Path):
    trash = DiskTrashCache(tmp_path / "trash")
    yield trash
    trash.close()


class TestDiskTrashCache:
    """Tests de la corbeille sur disque."""

    def test_put_then_get(self, cache: DiskTrashCache):
        snapshot = _snapshot("550", datetime(2024, 5, 1))
        cache.put(snapshot)

        stored = cache.get("550")
        assert stored is not None
        assert stored.title == "Title 550"
        assert stored.payload["record"].id == "550"

    def test_get_missing_returns_none(self, cache: DiskTrashCache):
        assert cache.get("404") is None

    def test_list_newest_first(self, cache: DiskTrashCache):
        base = datetime(2024, 5, 1)
        cache.put(_snapshot("1", base))
        cache.put(_snapshot("2", base + timedelta(hours=2)))
        cache.put(_snapshot("3", base + timedelta(hours=1)))

        assert [s.id for s in cache.list()] == ["2", "3", "1"]

    def test_put_same_id_replaces(self, cache: DiskTrashCache):
        cache.put(_snapshot("1", datetime(2024, 5, 1)))
        cache.put(_snapshot("1", datetime(2024, 5, 2)))

        assert len(cache) == 1
        assert cache.get("1").deleted_at == datetime(2024, 5, 2)

    def test_remove(self, cache: DiskTrashCache):
        cache.put(_snapshot("1", datetime(2024, 5, 1)))

        assert cache.remove("1") is True
        assert cache.remove("1") is False
        assert cache.get("1") is None

    def test_clear_returns_count(self, cache: DiskTrashCache):
        for i in range(3):
            cache.put(_snapshot(str(i + 1), datetime(2024, 5, 1)))

        assert cache.clear() == 3
        assert cache.list() == []

    def test_snapshots_survive_reopen(self, tmp_path: Path):
        """La corbeille reste lisible apres un redemarrage."""
        first = DiskTrashCache(tmp_path / "trash")
        first.put(_snapshot("550", datetime(2024, 5, 1)))
        first.close()

        reopened = DiskTrashCache(tmp_path / "trash")
        try:
            assert [s.id for s in reopened.list()] == ["550"]
        finally:
            reopened.close()
