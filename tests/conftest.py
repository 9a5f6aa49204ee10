"""
Fixtures pytest partagees pour les tests Curator.

Ce module contient les fixtures communes utilisees dans les tests:
- Base SQLite temporaire et repositories SQLModel
- Mock du fournisseur de metadonnees (IMetadataProvider)
- Horloges et fonctions d'attente simulees
- Settings de test avec chemins temporaires
"""

from pathlib import Path
from typing import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlmodel import Session

from curator.config import Settings
from curator.core.entities.entry import Entry, EntryType, MovieContent, SeasonLinks
from curator.core.ports.provider import (
    ExternalIds,
    IMetadataProvider,
    ProviderDetails,
    ProviderImages,
    SeasonDetail,
)
from curator.infrastructure.persistence.database import build_engine, init_db
from curator.infrastructure.persistence.repositories import (
    SQLModelEntryRepository,
    SQLModelEpisodeRepository,
    SQLModelRequestRepository,
)
from curator.services.rate_limiter import TokenBucket
from tests.fixtures.catalog import (
    FakeClock,
    FakeDateClock,
    make_movie_details,
    make_season,
    make_series_details,
)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings de test avec base et corbeille dans des repertoires temporaires."""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'curator.db'}",
        trash_dir=tmp_path / "trash",
        tmdb_api_key=None,
        log_file=tmp_path / "logs" / "curator.log",
    )


@pytest.fixture
def db_session(tmp_path: Path) -> Iterator[Session]:
    """Session SQLModel sur une base SQLite fraiche."""
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture
def entry_repo(db_session: Session) -> SQLModelEntryRepository:
    return SQLModelEntryRepository(db_session)


@pytest.fixture
def episode_repo(db_session: Session) -> SQLModelEpisodeRepository:
    return SQLModelEpisodeRepository(db_session)


@pytest.fixture
def request_repo(db_session: Session) -> SQLModelRequestRepository:
    return SQLModelRequestRepository(db_session)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def date_clock() -> FakeDateClock:
    return FakeDateClock()


@pytest.fixture
def no_pacing() -> TokenBucket:
    """Limiteur sans attente pour les tests de services."""
    return TokenBucket(interval=0)


@pytest.fixture
def mock_provider() -> MagicMock:
    """
    Mock de IMetadataProvider.

    Par defaut : la serie 93405 (saisons 0-3) et le film 550 existent,
    chaque saison contient les episodes 1 a 3.
    Configurer les side_effect dans chaque test pour des comportements specifiques.
    """
    provider = MagicMock(spec=IMetadataProvider)
    provider.source = "tmdb"

    async def fetch_details(media_id: str, media_type: EntryType) -> ProviderDetails:
        if media_type == EntryType.SERIES:
            return make_series_details(media_id)
        return make_movie_details(media_id)

    async def fetch_season_details(media_id: str, season_number: int) -> SeasonDetail:
        return make_season(season_number)

    provider.fetch_details = AsyncMock(side_effect=fetch_details)
    provider.fetch_images = AsyncMock(return_value=ProviderImages())
    provider.fetch_credits = AsyncMock(return_value=())
    provider.fetch_season_details = AsyncMock(side_effect=fetch_season_details)
    provider.fetch_external_ids = AsyncMock(return_value=ExternalIds(imdb_id="tt4574334"))
    provider.search_multi = AsyncMock(return_value=[])
    return provider


@pytest.fixture
def series_entry() -> Entry:
    return Entry(
        id="93405",
        type=EntryType.SERIES,
        title="Squid Game",
        content={1: SeasonLinks(watch_links=["https://w/1"], download_links=["https://d/1"])},
    )


@pytest.fixture
def movie_entry() -> Entry:
    return Entry(
        id="550",
        type=EntryType.MOVIE,
        title="Fight Club",
        content=MovieContent(watch_link="https://w/550", download_link="https://d/550"),
    )
