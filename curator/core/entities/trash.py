"""
Entités de la corbeille et des demandes utilisateurs.

La corbeille conserve des instantanés complets des enregistrements supprimés
de la base principale. Elle est la seule source de vérité pour la
restauration : la base principale ne garde aucun historique.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class TrashKind(str, Enum):
    """Nature de l'enregistrement mis à la corbeille."""

    ENTRY = "entry"
    REQUEST = "request"


class RecordState(str, Enum):
    """Etats du cycle de vie d'un enregistrement supprimable."""

    ACTIVE = "active"
    TRASHED = "trashed"
    PURGED = "purged"


@dataclass
class TrashedEntry:
    """
    Instantané d'un enregistrement supprimé.

    Attributs :
        id : Identifiant de l'enregistrement (clé d'upsert à la restauration)
        kind : entry ou request
        title : Titre affiché dans la corbeille
        deleted_at : Date de mise à la corbeille
        type : movie/series pour une entrée, type de demande sinon
        content : Contenu (liens) de l'entrée au moment de la suppression
        poster_url : Affiche pour l'affichage
        origin_category : Catégorie d'origine (affichage/audit uniquement)
        payload : Enregistrement complet sérialisé pour la restauration
    """

    id: str
    kind: TrashKind
    title: str
    deleted_at: datetime
    type: Optional[str] = None
    content: Any = None
    poster_url: Optional[str] = None
    origin_category: Optional[str] = None
    payload: dict[str, Any] = field(default_factory=dict)


class RequestType(str, Enum):
    MOVIE = "movie"
    TV_SEASON = "tv_season"
    GENERAL = "general"


class RequestStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REJECTED = "rejected"


@dataclass
class AdminRequest:
    """Demande de contenu envoyée par un utilisateur."""

    id: str
    user_id: str
    title: str
    request_type: RequestType = RequestType.GENERAL
    season_number: Optional[int] = None
    message: str = ""
    status: RequestStatus = RequestStatus.PENDING
    admin_response: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def category(self) -> str:
        """
        Catégorie d'affichage dérivée du statut.

        Une demande en attente sans réponse admin est "new", avec réponse
        "pending" ; les demandes terminées ou rejetées sont "done".
        """
        if self.status == RequestStatus.PENDING:
            return "new" if not self.admin_response else "pending"
        if self.status == RequestStatus.IN_PROGRESS:
            return "in_progress"
        return "done"
