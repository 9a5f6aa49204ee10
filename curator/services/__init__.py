"""
Services applicatifs du catalogue.

- ReconciliationService : precedence admin / fournisseur, edition explicite
- BatchSyncOrchestrator : synchronisation en masse cadencee
- TrashLifecycleManager : corbeille (suppression douce, restauration, purge)
- CatalogSearchService : recherche base + fournisseur
- DraftSession, TokenBucket : copie de travail et cadence
"""

from curator.services.batch_sync import (
    BatchReport,
    BatchSyncOrchestrator,
    CancellationToken,
    ProgressEvent,
)
from curator.services.rate_limiter import TokenBucket
from curator.services.reconciliation import (
    Candidate,
    PrefillOutcome,
    PrefillStatus,
    ReconciliationService,
    SaveResult,
    SeasonSyncResult,
)
from curator.services.search import CatalogSearchService, ProviderHit, SearchCandidate
from curator.services.session import DraftSession
from curator.services.trash import (
    BulkReport,
    RestoreOutcome,
    RestoreStatus,
    TrashLifecycleManager,
)

__all__ = [
    "BatchReport",
    "BatchSyncOrchestrator",
    "BulkReport",
    "CancellationToken",
    "Candidate",
    "CatalogSearchService",
    "DraftSession",
    "PrefillOutcome",
    "PrefillStatus",
    "ProgressEvent",
    "ProviderHit",
    "ReconciliationService",
    "RestoreOutcome",
    "RestoreStatus",
    "SaveResult",
    "SearchCandidate",
    "SeasonSyncResult",
    "TokenBucket",
    "TrashLifecycleManager",
]
