"""
Entités métier du catalogue.

Exports:
- Entry, EntryType, MovieContent, SeasonLinks, Genre, CastMember : entrées du catalogue
- EpisodeMetadata : métadonnées par épisode
- WorkingCopy : copie de travail d'une entrée en cours d'édition
- TrashedEntry, TrashKind, RecordState : corbeille
- AdminRequest, RequestStatus, RequestType : demandes utilisateurs
"""

from curator.core.entities.draft import WorkingCopy
from curator.core.entities.entry import (
    EPISODE_FIELDS,
    MAX_CAST_MEMBERS,
    METADATA_FIELDS,
    CastMember,
    Entry,
    EntryType,
    EpisodeMetadata,
    Genre,
    MovieContent,
    SeasonLinks,
    apply_metadata,
    content_from_dict,
    content_to_dict,
    metadata_of,
)
from curator.core.entities.trash import (
    AdminRequest,
    RecordState,
    RequestStatus,
    RequestType,
    TrashedEntry,
    TrashKind,
)

__all__ = [
    "Entry",
    "EntryType",
    "MovieContent",
    "SeasonLinks",
    "Genre",
    "CastMember",
    "EpisodeMetadata",
    "METADATA_FIELDS",
    "EPISODE_FIELDS",
    "MAX_CAST_MEMBERS",
    "apply_metadata",
    "metadata_of",
    "content_to_dict",
    "content_from_dict",
    "WorkingCopy",
    "TrashedEntry",
    "TrashKind",
    "RecordState",
    "AdminRequest",
    "RequestStatus",
    "RequestType",
]
