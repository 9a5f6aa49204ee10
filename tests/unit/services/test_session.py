"""
Tests pour DraftSession - copies de travail avec duree de vie.
"""

from datetime import timedelta

import pytest

from curator.core.entities.draft import WorkingCopy
from curator.core.entities.entry import EntryType, EpisodeMetadata
from curator.services.session import DraftSession


@pytest.fixture
def session(date_clock) -> DraftSession:
    return DraftSession(ttl_seconds=600, clock=date_clock)


def _episode(number: int) -> EpisodeMetadata:
    return EpisodeMetadata(entry_id="93405", season_number=1, episode_number=number, name="Draft")


class TestDraftSession:
    def test_stage_sets_timestamp(self, session, date_clock):
        copy = session.stage(WorkingCopy(entry_id="550", type=EntryType.MOVIE, fields={"title": "X"}))

        assert copy.staged_at == date_clock.now
        assert session.get("550") is copy
        assert "550" in session
        assert len(session) == 1

    def test_copy_expires_after_ttl(self, session, date_clock):
        session.stage(WorkingCopy(entry_id="550", type=EntryType.MOVIE))

        date_clock.now = date_clock.now + timedelta(seconds=600)
        assert session.get("550") is not None

        date_clock.now = date_clock.now + timedelta(seconds=1)
        assert session.get("550") is None
        assert "550" not in session
        assert len(session) == 0

    def test_restage_keeps_refreshed_episodes(self, session):
        session.stage_episode("93405", EntryType.SERIES, _episode(1))

        copy = session.stage(WorkingCopy(entry_id="93405", type=EntryType.SERIES))

        assert (1, 1) in copy.episodes

    def test_stage_episode_creates_copy(self, session):
        copy = session.stage_episode("93405", EntryType.SERIES, _episode(2))

        assert copy.type == EntryType.SERIES
        assert copy.fields == {}
        assert list(copy.episodes) == [(1, 2)]

    def test_discard_and_clear(self, session):
        session.stage(WorkingCopy(entry_id="550", type=EntryType.MOVIE))
        session.stage(WorkingCopy(entry_id="93405", type=EntryType.SERIES))

        assert session.discard("550") is True
        assert session.discard("550") is False
        session.clear()
        assert len(session) == 0

    def test_contains_rejects_non_string(self, session):
        session.stage(WorkingCopy(entry_id="550", type=EntryType.MOVIE))
        assert 550 not in session
