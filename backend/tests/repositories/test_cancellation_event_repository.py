from datetime import timedelta

import pytest

from swimdesk.core.enums import CatchUpApprovalStatus
from swimdesk.repositories.factory import RepositoryFactory
from swimdesk.utils.time_utils import utc_now


@pytest.fixture
def repo(db):
    return RepositoryFactory.create_cancellation_event_repository(db)


class TestTransitionStatus:
    def test_moves_pending_event_once(self, db, repo, catch_up_session, other_client_id):
        event = repo.list_for_client(other_client_id, catch_up_session.business_id)[0]
        decided_at = utc_now()

        first = repo.transition_status(
            event.id,
            from_status=CatchUpApprovalStatus.PENDING,
            to_status=CatchUpApprovalStatus.APPROVED,
            decided_at=decided_at,
            decided_by_id=None,
        )
        second = repo.transition_status(
            event.id,
            from_status=CatchUpApprovalStatus.PENDING,
            to_status=CatchUpApprovalStatus.REJECTED,
            decided_at=decided_at,
            decided_by_id=None,
        )
        db.commit()

        assert first is True
        assert second is False
        repo.refresh(event)
        assert event.status == CatchUpApprovalStatus.APPROVED
        assert event.decided_at is not None

    def test_unknown_event_is_not_transitioned(self, repo):
        moved = repo.transition_status(
            "01ARZ3NDEKTSV4RRFFQ69G5FAV",
            from_status=CatchUpApprovalStatus.PENDING,
            to_status=CatchUpApprovalStatus.APPROVED,
            decided_at=utc_now(),
            decided_by_id=None,
        )
        assert moved is False


class TestQueries:
    def test_status_counts_default_to_zero(self, repo, client_id, business_id):
        counts = repo.status_counts_for_client(client_id, business_id)

        assert set(counts) == set(CatchUpApprovalStatus)
        assert all(count == 0 for count in counts.values())

    def test_business_scoping(self, repo, catch_up_session, other_client_id, other_business_id):
        event = repo.list_for_client(other_client_id, catch_up_session.business_id)[0]

        assert repo.get_for_business(event.id, catch_up_session.business_id) is not None
        assert repo.get_for_business(event.id, other_business_id) is None
        assert repo.list_for_business(other_business_id) == []

    def test_pending_clients_summarises_each_client(
        self, repo, make_session, enroll, cancel, client_id, other_client_id, business_id
    ):
        first = make_session(starts_in=timedelta(days=2))
        second = make_session(starts_in=timedelta(days=4))
        for session in (first, second):
            enroll(session, client_id)
            cancel(session, client_id)
        enroll(first, other_client_id)
        cancel(first, other_client_id)

        summaries = {summary.client_id: summary for summary in repo.pending_clients(business_id)}

        assert summaries[client_id].pending_count == 2
        assert summaries[other_client_id].pending_count == 1
        assert len(repo.list_pending_ids_for_client(client_id, business_id)) == 2

    def test_status_counts_only_cover_one_business(
        self, repo, make_session, enroll, cancel, client_id, business_id, other_business_id
    ):
        home = make_session()
        away = make_session(business_id=other_business_id)
        enroll(home, client_id)
        cancel(home, client_id)
        enroll(away, client_id)
        cancel(away, client_id)

        assert repo.status_counts_for_client(client_id, business_id)[CatchUpApprovalStatus.PENDING] == 1
        assert repo.status_counts_for_client(client_id, other_business_id)[CatchUpApprovalStatus.PENDING] == 1
        assert [event.business_id for event in repo.list_for_client(client_id, business_id)] == [business_id]
