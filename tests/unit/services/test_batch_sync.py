"""
Tests pour BatchSyncOrchestrator - synchronisation en masse cadencee.

TDD tests couvrant:
- Ordre strictement croissant des unites et progression monotone
- Comptage des echecs sans interruption du lot
- Relance des reponses 429 avant de compter un echec
- Annulation cooperative entre deux unites
- Cadence via le limiteur (horloge simulee)
- Erreurs de precondition remontees globalement
- Saisons en echec lors du pre-remplissage comptees comme unite en echec
- Completion des champs vides et synchronisation des identifiants IMDb
"""

import pytest

from curator.core.entities.entry import Entry, EntryType, MovieContent
from curator.core.errors import InvalidIdentifier, NotFound, ProviderUnavailable, RateLimited
from curator.core.ports.provider import ExternalIds
from curator.core.value_objects.overrides import FieldGroup
from curator.services.batch_sync import BatchSyncOrchestrator, CancellationToken, ProgressEvent
from curator.services.rate_limiter import TokenBucket
from curator.services.reconciliation import ReconciliationService
from tests.fixtures.catalog import make_season


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def retry_sleep() -> RecordingSleep:
    return RecordingSleep()


def _build(entry_repo, episode_repo, provider, limiter, retry_sleep) -> BatchSyncOrchestrator:
    reconciliation = ReconciliationService(
        entry_repo, episode_repo, provider, limiter=limiter, retry_sleep=retry_sleep
    )
    return BatchSyncOrchestrator(
        reconciliation, entry_repo, limiter, max_attempts=3, max_wait=30, retry_sleep=retry_sleep
    )


@pytest.fixture
def orchestrator(entry_repo, episode_repo, mock_provider, no_pacing, retry_sleep, series_entry):
    entry_repo.upsert(series_entry)
    return _build(entry_repo, episode_repo, mock_provider, no_pacing, retry_sleep)


class TestSyncSeasons:
    """Synchronisation des saisons d'une serie."""

    @pytest.mark.asyncio
    async def test_progress_is_monotonic_with_stable_total(self, orchestrator, episode_repo):
        events: list[ProgressEvent] = []

        report = await orchestrator.sync_seasons("93405", on_progress=events.append)

        assert [e.current for e in events] == [1, 2, 3]
        assert {e.total for e in events} == {3}
        assert [e.message for e in events] == ["Saison 1", "Saison 2", "Saison 3"]
        assert report.total_attempted == 3
        assert report.succeeded == 3
        assert report.failed == 0
        assert len(episode_repo.list_episodes("93405")) == 9

    @pytest.mark.asyncio
    async def test_requested_seasons_processed_in_ascending_order(self, orchestrator, mock_provider):
        await orchestrator.sync_seasons("93405", seasons=[3, 1, 3])

        fetched = [call.args[1] for call in mock_provider.fetch_season_details.await_args_list]
        assert fetched == [1, 3]
        # Les saisons explicites ne necessitent pas la liste du fournisseur
        mock_provider.fetch_details.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_unit_counted_and_batch_continues(self, orchestrator, mock_provider):
        async def season(media_id, number):
            if number == 2:
                raise ProviderUnavailable("server error", status_code=500)
            return make_season(number)

        mock_provider.fetch_season_details.side_effect = season
        events: list[ProgressEvent] = []

        report = await orchestrator.sync_seasons("93405", on_progress=events.append)

        assert report.total_attempted == 3
        assert report.succeeded == 2
        assert report.failed == 1
        assert report.failures == [("Saison 2", "server error")]
        assert [e.succeeded for e in events] == [True, False, True]
        assert report.succeeded + report.failed == report.total_attempted

    @pytest.mark.asyncio
    async def test_rate_limited_unit_is_retried(self, orchestrator, mock_provider, retry_sleep):
        calls = {"count": 0}

        async def season(media_id, number):
            if number == 2 and calls["count"] == 0:
                calls["count"] += 1
                raise RateLimited(retry_after=2)
            return make_season(number)

        mock_provider.fetch_season_details.side_effect = season

        report = await orchestrator.sync_seasons("93405")

        assert report.succeeded == 3
        assert report.failed == 0
        assert retry_sleep.delays == [2.0]

    @pytest.mark.asyncio
    async def test_rate_limited_counted_after_retries_exhausted(self, orchestrator, mock_provider):
        async def season(media_id, number):
            if number == 1:
                raise RateLimited(retry_after=1)
            return make_season(number)

        mock_provider.fetch_season_details.side_effect = season

        report = await orchestrator.sync_seasons("93405")

        attempts_on_season_1 = [
            c for c in mock_provider.fetch_season_details.await_args_list if c.args[1] == 1
        ]
        assert len(attempts_on_season_1) == 3
        assert report.failed == 1
        assert report.succeeded == 2

    @pytest.mark.asyncio
    async def test_cancellation_between_units(self, orchestrator, mock_provider):
        token = CancellationToken()

        def on_progress(event: ProgressEvent) -> None:
            if event.current == 1:
                token.cancel()

        report = await orchestrator.sync_seasons("93405", on_progress=on_progress, cancel=token)

        assert report.cancelled is True
        assert report.total_attempted == 1
        assert mock_provider.fetch_season_details.await_count == 1

    @pytest.mark.asyncio
    async def test_cancelled_before_start_attempts_nothing(self, orchestrator):
        token = CancellationToken()
        token.cancel()

        report = await orchestrator.sync_seasons("93405", cancel=token)

        assert report.cancelled is True
        assert report.total_attempted == 0


class TestPreconditions:
    """Les preconditions levent une erreur globale, sans progression."""

    @pytest.mark.asyncio
    async def test_invalid_identifier(self, orchestrator):
        events = []
        with pytest.raises(InvalidIdentifier):
            await orchestrator.sync_seasons("abc", on_progress=events.append)
        assert events == []

    @pytest.mark.asyncio
    async def test_missing_entry(self, orchestrator):
        with pytest.raises(NotFound):
            await orchestrator.sync_seasons("1399")

    @pytest.mark.asyncio
    async def test_entry_must_be_a_series(self, orchestrator, entry_repo, movie_entry):
        entry_repo.upsert(movie_entry)
        with pytest.raises(NotFound):
            await orchestrator.sync_seasons("550")

    @pytest.mark.asyncio
    async def test_season_list_unavailable(self, orchestrator, mock_provider):
        mock_provider.fetch_details.side_effect = ProviderUnavailable("down", status_code=503)
        with pytest.raises(ProviderUnavailable):
            await orchestrator.sync_seasons("93405")
        mock_provider.fetch_season_details.assert_not_awaited()


class TestPacing:
    """Cadence des unites via le token bucket."""

    @pytest.mark.asyncio
    async def test_units_spaced_by_interval(
        self, entry_repo, episode_repo, mock_provider, fake_clock, retry_sleep, series_entry
    ):
        entry_repo.upsert(series_entry)
        limiter = TokenBucket(interval=0.3, clock=fake_clock, sleep=fake_clock.sleep)
        orchestrator = _build(entry_repo, episode_repo, mock_provider, limiter, retry_sleep)

        await orchestrator.sync_seasons("93405")

        # Premiere unite immediate, puis 0.3s entre chaque unite
        assert fake_clock.sleeps == [pytest.approx(0.3), pytest.approx(0.3)]


class TestBackfillEntries:
    """Pre-remplissage d'un lot d'entrees."""

    @pytest.mark.asyncio
    async def test_backfill_reads_store_in_order(self, orchestrator, entry_repo, mock_provider):
        entry_repo.upsert(Entry(id="550", type=EntryType.MOVIE, content=MovieContent()))
        events: list[ProgressEvent] = []

        report = await orchestrator.backfill_entries(on_progress=events.append)

        assert report.total_attempted == 2
        assert report.succeeded == 2
        assert [e.message for e in events] == ["550 (550)", "Squid Game (93405)"]
        assert entry_repo.get_by_id("550").title == "Fight Club"

    @pytest.mark.asyncio
    async def test_backfill_respects_admin_overrides(self, orchestrator, entry_repo):
        entry_repo.upsert(
            Entry(
                id="550",
                type=EntryType.MOVIE,
                content=MovieContent(),
                title="Admin Fight Club",
                overrides=FieldGroup.METADATA,
            )
        )

        await orchestrator.backfill_entries(entry_type=EntryType.MOVIE)

        assert entry_repo.get_by_id("550").title == "Admin Fight Club"

    @pytest.mark.asyncio
    async def test_backfill_failure_counted(self, orchestrator, entry_repo, mock_provider):
        entry_repo.upsert(Entry(id="550", type=EntryType.MOVIE, content=MovieContent()))
        mock_provider.fetch_images.side_effect = [
            ProviderUnavailable("images down", status_code=500),
            mock_provider.fetch_images.return_value,
        ]

        report = await orchestrator.backfill_entries()

        assert report.failed == 1
        assert report.succeeded == 1
        assert report.failures[0][0] == "550 (550)"

    @pytest.mark.asyncio
    async def test_backfill_limit(self, orchestrator, entry_repo, mock_provider):
        entry_repo.upsert(Entry(id="550", type=EntryType.MOVIE, content=MovieContent()))

        report = await orchestrator.backfill_entries(limit=1)

        assert report.total_attempted == 1

    @pytest.mark.asyncio
    async def test_series_with_failed_seasons_counted_as_failed(
        self, orchestrator, mock_provider, episode_repo
    ):
        mock_provider.fetch_season_details.side_effect = ProviderUnavailable(
            "server error", status_code=500
        )
        events: list[ProgressEvent] = []

        report = await orchestrator.backfill_entries(on_progress=events.append)

        assert report.total_attempted == 1
        assert report.succeeded == 0
        assert report.failed == 1
        assert report.failures == [("Squid Game (93405)", "3 saison(s) en echec (0 synchronisee(s))")]
        assert [e.succeeded for e in events] == [False]
        assert episode_repo.list_episodes("93405") == []

    @pytest.mark.asyncio
    async def test_one_failed_season_fails_the_unit(self, orchestrator, mock_provider):
        async def season(media_id, number):
            if number == 2:
                raise ProviderUnavailable("server error", status_code=500)
            return make_season(number)

        mock_provider.fetch_season_details.side_effect = season

        report = await orchestrator.backfill_entries()

        assert report.failed == 1
        assert report.failures[0][1] == "1 saison(s) en echec (2 synchronisee(s))"


class TestBackfillMissingOnly:
    """Completion des seuls champs vides sur un lot d'entrees."""

    @pytest.mark.asyncio
    async def test_only_entries_with_empty_fields_are_processed(
        self, orchestrator, entry_repo, mock_provider
    ):
        entry_repo.upsert(
            Entry(
                id="550",
                type=EntryType.MOVIE,
                content=MovieContent(),
                title="Fight Club",
                poster_url="p",
                backdrop_url="b",
                logo_url="l",
                vote_average=9.9,
                vote_count=1,
                original_language="en",
                origin_country=("US",),
            )
        )
        events: list[ProgressEvent] = []

        report = await orchestrator.backfill_entries(missing_only=True, on_progress=events.append)

        assert report.total_attempted == 1
        assert [e.message for e in events] == ["Squid Game (93405)"]
        assert entry_repo.get_by_id("550").vote_average == 9.9
        assert entry_repo.get_by_id("93405").poster_url == "https://image.tmdb.org/t/p/w342/poster.jpg"
        mock_provider.fetch_season_details.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_populated_fields_stay_unchanged(self, orchestrator, entry_repo):
        entry_repo.upsert(
            Entry(
                id="550",
                type=EntryType.MOVIE,
                content=MovieContent(),
                title="Fight Club (admin)",
                poster_url="https://admin/poster.jpg",
                vote_average=9.9,
            )
        )

        report = await orchestrator.backfill_entries(entry_type=EntryType.MOVIE, missing_only=True)

        stored = entry_repo.get_by_id("550")
        assert report.succeeded == 1
        assert stored.title == "Fight Club (admin)"
        assert stored.poster_url == "https://admin/poster.jpg"
        assert stored.vote_average == 9.9
        assert stored.overview is None
        assert stored.backdrop_url == "https://image.tmdb.org/t/p/original/fight_bg.jpg"
        assert stored.original_language == "en"

    @pytest.mark.asyncio
    async def test_limit_applies_after_selection(self, orchestrator, entry_repo):
        entry_repo.upsert(
            Entry(
                id="550",
                type=EntryType.MOVIE,
                content=MovieContent(),
                poster_url="p",
                backdrop_url="b",
                logo_url="l",
                vote_average=8.0,
                vote_count=1,
                original_language="en",
                origin_country=("US",),
            )
        )
        entry_repo.upsert(Entry(id="1399", type=EntryType.SERIES, content={}))
        events: list[ProgressEvent] = []

        await orchestrator.backfill_entries(limit=1, missing_only=True, on_progress=events.append)

        assert [e.message for e in events] == ["1399 (1399)"]


class TestSyncExternalIds:
    """Synchronisation en masse des identifiants IMDb."""

    @pytest.mark.asyncio
    async def test_only_entries_without_imdb_id(self, orchestrator, entry_repo, mock_provider):
        entry_repo.upsert(
            Entry(id="550", type=EntryType.MOVIE, content=MovieContent(), imdb_id="tt0137523")
        )

        report = await orchestrator.sync_external_ids()

        assert report.total_attempted == 1
        assert report.succeeded == 1
        mock_provider.fetch_external_ids.assert_awaited_once_with("93405", EntryType.SERIES)
        assert entry_repo.get_by_id("93405").imdb_id == "tt4574334"
        assert entry_repo.get_by_id("550").imdb_id == "tt0137523"

    @pytest.mark.asyncio
    async def test_entry_without_upstream_imdb_id_counted_as_failure(
        self, orchestrator, mock_provider
    ):
        mock_provider.fetch_external_ids.return_value = ExternalIds()

        report = await orchestrator.sync_external_ids()

        assert report.failed == 1
        assert report.failures[0][0] == "Squid Game (93405)"

    @pytest.mark.asyncio
    async def test_paced_by_external_ids_limiter(
        self, entry_repo, episode_repo, mock_provider, fake_clock, no_pacing, retry_sleep, series_entry
    ):
        entry_repo.upsert(series_entry)
        entry_repo.upsert(Entry(id="550", type=EntryType.MOVIE, content=MovieContent()))
        entry_repo.upsert(Entry(id="603", type=EntryType.MOVIE, content=MovieContent()))
        reconciliation = ReconciliationService(
            entry_repo, episode_repo, mock_provider, limiter=no_pacing, retry_sleep=retry_sleep
        )
        orchestrator = BatchSyncOrchestrator(
            reconciliation,
            entry_repo,
            no_pacing,
            retry_sleep=retry_sleep,
            external_ids_limiter=TokenBucket(interval=0.25, clock=fake_clock, sleep=fake_clock.sleep),
        )

        report = await orchestrator.sync_external_ids()

        assert report.succeeded == 3
        assert fake_clock.sleeps == [pytest.approx(0.25), pytest.approx(0.25)]
