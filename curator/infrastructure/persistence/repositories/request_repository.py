"""
Implementation SQLModel du repository AdminRequest.

Implemente l'interface IRequestRepository pour la persistance des demandes
de contenu envoyees par les utilisateurs.
"""

from typing import Optional

from sqlmodel import Session, col, select

from curator.core.entities.trash import AdminRequest, RequestStatus, RequestType
from curator.core.ports.repositories import IRequestRepository
from curator.infrastructure.persistence.models import RequestModel
from curator.infrastructure.persistence.repositories.guards import read_guard, write_guard
from curator.utils.helpers import as_utc, utc_now


class SQLModelRequestRepository(IRequestRepository):
    """Repository SQLModel pour les demandes utilisateurs."""

    def __init__(self, session: Session) -> None:
        """
        Initialise le repository avec une session SQLModel.

        Args :
            session : Session SQLModel active pour les operations DB
        """
        self._session = session

    def _to_entity(self, model: RequestModel) -> AdminRequest:
        return AdminRequest(
            id=model.id,
            user_id=model.user_id,
            title=model.title,
            request_type=RequestType(model.request_type),
            season_number=model.season_number,
            message=model.message,
            status=RequestStatus(model.status),
            admin_response=model.admin_response,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )

    def get_by_id(self, request_id: str) -> Optional[AdminRequest]:
        with read_guard(f"lecture de la demande {request_id}"):
            model = self._session.get(RequestModel, request_id)
        if model:
            return self._to_entity(model)
        return None

    def list_requests(self, status: Optional[RequestStatus] = None) -> list[AdminRequest]:
        """Demandes, les plus recentes en premier (filtre optionnel par statut)."""
        statement = select(RequestModel)
        if status is not None:
            statement = statement.where(RequestModel.status == status.value)
        statement = statement.order_by(col(RequestModel.created_at).desc())
        with read_guard("liste des demandes"):
            models = self._session.exec(statement).all()
        return [self._to_entity(model) for model in models]

    def upsert(self, request: AdminRequest) -> AdminRequest:
        """Cree ou remplace une demande (cle : identifiant)."""
        with write_guard(self._session, f"ecriture de la demande {request.id}"):
            model = self._session.get(RequestModel, request.id)
            if model is None:
                model = RequestModel(id=request.id, user_id=request.user_id, title=request.title)
            model.user_id = request.user_id
            model.title = request.title
            model.request_type = request.request_type.value
            model.season_number = request.season_number
            model.message = request.message
            model.status = request.status.value
            model.admin_response = request.admin_response
            if request.created_at is not None:
                model.created_at = as_utc(request.created_at)
            model.updated_at = as_utc(request.updated_at) or utc_now()
            self._session.add(model)
            self._session.commit()
            self._session.refresh(model)
        return self._to_entity(model)

    def delete(self, request_id: str) -> bool:
        with write_guard(self._session, f"suppression de la demande {request_id}"):
            model = self._session.get(RequestModel, request_id)
            if model is None:
                return False
            self._session.delete(model)
            self._session.commit()
        return True
