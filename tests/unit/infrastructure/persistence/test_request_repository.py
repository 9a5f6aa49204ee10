"""
Tests pour SQLModelRequestRepository sur une base SQLite temporaire.
"""

from datetime import datetime

from curator.core.entities.trash import AdminRequest, RequestStatus, RequestType
from curator.infrastructure.persistence.repositories import SQLModelRequestRepository


def _request(request_id: str, created_at: datetime, **kwargs) -> AdminRequest:
    return AdminRequest(
        id=request_id, user_id="u1", title=f"Request {request_id}", created_at=created_at, **kwargs
    )


class TestRequestRepository:
    """Lecture / ecriture des demandes utilisateurs."""

    def test_upsert_then_get(self, request_repo: SQLModelRequestRepository):
        request_repo.upsert(
            _request(
                "r1",
                datetime(2024, 5, 1),
                request_type=RequestType.TV_SEASON,
                season_number=2,
                message="Please add season 2",
            )
        )

        stored = request_repo.get_by_id("r1")
        assert stored.request_type == RequestType.TV_SEASON
        assert stored.season_number == 2
        assert stored.status == RequestStatus.PENDING
        assert stored.updated_at is not None

    def test_list_newest_first_with_status_filter(self, request_repo: SQLModelRequestRepository):
        request_repo.upsert(_request("old", datetime(2024, 1, 1)))
        request_repo.upsert(_request("new", datetime(2024, 6, 1)))
        request_repo.upsert(_request("done", datetime(2024, 3, 1), status=RequestStatus.COMPLETED))

        assert [r.id for r in request_repo.list_requests()] == ["new", "done", "old"]
        assert [r.id for r in request_repo.list_requests(RequestStatus.PENDING)] == ["new", "old"]

    def test_delete(self, request_repo: SQLModelRequestRepository):
        request_repo.upsert(_request("r1", datetime(2024, 5, 1)))

        assert request_repo.delete("r1") is True
        assert request_repo.delete("r1") is False
        assert request_repo.get_by_id("r1") is None
