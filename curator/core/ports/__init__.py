"""
Ports (interfaces abstraites) définissant les contrats pour les adaptateurs.

Ports repository : Contrats de la base principale
- IEntryRepository : Entrées du catalogue
- IEpisodeRepository : Métadonnées d'épisodes
- IRequestRepository : Demandes utilisateurs

Port fournisseur : Contrat du service de métadonnées externe
- IMetadataProvider et ses objets de réponse

Port corbeille : Cache durable des instantanés supprimés
- ITrashCache
"""

from curator.core.ports.provider import (
    ExternalIds,
    IMetadataProvider,
    ImageRef,
    ProviderDetails,
    ProviderEpisode,
    ProviderImages,
    SearchHit,
    SeasonDetail,
    SeasonSummary,
)
from curator.core.ports.repositories import (
    EntryFilters,
    IEntryRepository,
    IEpisodeRepository,
    IRequestRepository,
    SortOrder,
    UpsertReport,
)
from curator.core.ports.trash_cache import ITrashCache

__all__ = [
    # Repositories
    "IEntryRepository",
    "IEpisodeRepository",
    "IRequestRepository",
    "EntryFilters",
    "SortOrder",
    "UpsertReport",
    # Fournisseur
    "IMetadataProvider",
    "ProviderDetails",
    "ProviderImages",
    "ProviderEpisode",
    "ImageRef",
    "SeasonDetail",
    "SeasonSummary",
    "ExternalIds",
    "SearchHit",
    # Corbeille
    "ITrashCache",
]
