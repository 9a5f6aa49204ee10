"""
Container d'injection de dependances via dependency-injector.

Fournit une gestion centralisee des dependances pour l'interface CLI :
repositories SQLModel, client fournisseur, corbeilles locales et services.
"""

from dependency_injector import containers, providers

from .adapters.api.tmdb_client import TMDBClient
from .adapters.cache.trash_cache import DiskTrashCache
from .config import Settings
from .core.entities.trash import TrashKind
from .infrastructure.persistence.database import get_session, init_db
from .infrastructure.persistence.repositories import (
    SQLModelEntryRepository,
    SQLModelEpisodeRepository,
    SQLModelRequestRepository,
)
from .services.batch_sync import BatchSyncOrchestrator
from .services.rate_limiter import TokenBucket
from .services.reconciliation import ReconciliationService
from .services.search import CatalogSearchService
from .services.session import DraftSession
from .services.trash import TrashLifecycleManager


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        container.database.init()  # Initialise la DB une fois
        reconciliation = container.reconciliation_service()
        trash = container.entry_trash()
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Database - Resource pour initialisation unique
    database = providers.Resource(init_db)

    # Session factory - une session partagee par les repositories d'une commande
    session = providers.Singleton(lambda: next(get_session()))

    # Repositories
    entry_repository = providers.Factory(SQLModelEntryRepository, session=session)
    episode_repository = providers.Factory(SQLModelEpisodeRepository, session=session)
    request_repository = providers.Factory(SQLModelRequestRepository, session=session)

    # Client fournisseur - Singleton avec api_key depuis config
    # Si api_key est None/vide, le client est cree mais leve ProviderUnavailable a l'usage
    tmdb_client = providers.Singleton(
        TMDBClient,
        api_key=config.provided.tmdb_api_key,
        language=config.provided.tmdb_language,
        timeout=config.provided.tmdb_timeout_seconds,
    )

    # Corbeilles locales - une par nature d'enregistrement
    entry_trash_cache = providers.Singleton(
        DiskTrashCache,
        cache_dir=config.provided.entries_trash_dir,
    )
    request_trash_cache = providers.Singleton(
        DiskTrashCache,
        cache_dir=config.provided.requests_trash_dir,
    )

    # Cadence partagee par toutes les synchronisations
    rate_limiter = providers.Singleton(
        TokenBucket,
        interval=config.provided.sync_pacing_seconds,
    )
    external_ids_limiter = providers.Singleton(
        TokenBucket,
        interval=config.provided.external_ids_pacing_seconds,
    )

    draft_session = providers.Singleton(
        DraftSession,
        ttl_seconds=config.provided.draft_ttl_seconds,
    )

    # Services
    reconciliation_service = providers.Factory(
        ReconciliationService,
        entry_repo=entry_repository,
        episode_repo=episode_repository,
        provider=tmdb_client,
        limiter=rate_limiter,
        cast_limit=config.provided.cast_limit,
        retry_attempts=config.provided.rate_limit_retries,
    )

    batch_sync_orchestrator = providers.Factory(
        BatchSyncOrchestrator,
        reconciliation=reconciliation_service,
        entry_repo=entry_repository,
        limiter=rate_limiter,
        max_attempts=config.provided.rate_limit_retries,
        max_wait=config.provided.rate_limit_max_wait,
        external_ids_limiter=external_ids_limiter,
    )

    entry_trash = providers.Factory(
        TrashLifecycleManager,
        kind=TrashKind.ENTRY,
        repository=entry_repository,
        cache=entry_trash_cache,
    )
    request_trash = providers.Factory(
        TrashLifecycleManager,
        kind=TrashKind.REQUEST,
        repository=request_repository,
        cache=request_trash_cache,
    )

    search_service = providers.Factory(
        CatalogSearchService,
        entry_repo=entry_repository,
        provider=tmdb_client,
        limit=config.provided.search_limit,
    )
