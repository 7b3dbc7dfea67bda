from datetime import timedelta

import pytest

from swimdesk.core.constants import EVENT_CATCH_UP_APPROVED, EVENT_CATCH_UP_REJECTED
from swimdesk.core.enums import CatchUpApprovalStatus
from swimdesk.core.exceptions import CancellationEventNotFoundException, InvalidTransitionException
from swimdesk.repositories.factory import RepositoryFactory
from swimdesk.services.catch_up_approval_service import CatchUpApprovalService, aggregate_status
from swimdesk.services.credit_ledger_service import CreditLedgerService


@pytest.fixture
def service(db):
    return CatchUpApprovalService(db)


@pytest.fixture
def pending_event(class_session, enroll, cancel, client_id):
    enroll(class_session, client_id)
    return cancel(class_session, client_id).event


class TestPerEventDecisions:
    def test_approve_credits_once(self, db, service, pending_event, client_id, business_id, staff_id):
        result = service.approve_catch_up(pending_event.id, business_id=business_id, decided_by_id=staff_id)

        assert result.event.status == CatchUpApprovalStatus.APPROVED
        assert result.event.decided_by_id == staff_id
        assert result.credit_balance == 1

        with pytest.raises(InvalidTransitionException) as exc_info:
            service.approve_catch_up(pending_event.id, business_id=business_id)

        assert exc_info.value.details["current_status"] == "approved"
        assert CreditLedgerService(db).get_balance(client_id, business_id) == 1

    def test_reject_never_touches_credits(self, db, service, pending_event, client_id, business_id):
        result = service.reject_catch_up(pending_event.id, business_id=business_id)

        assert result.event.status == CatchUpApprovalStatus.REJECTED
        assert result.credit_balance == 0
        assert RepositoryFactory.create_credit_ledger_repository(db).get_by_client(client_id, business_id) is None

    def test_rejected_is_terminal(self, service, pending_event, business_id):
        service.reject_catch_up(pending_event.id, business_id=business_id)

        with pytest.raises(InvalidTransitionException):
            service.approve_catch_up(pending_event.id, business_id=business_id)
        with pytest.raises(InvalidTransitionException):
            service.reject_catch_up(pending_event.id, business_id=business_id)

    def test_approved_cannot_be_rejected(self, db, service, pending_event, client_id, business_id):
        service.approve_catch_up(pending_event.id, business_id=business_id)

        with pytest.raises(InvalidTransitionException) as exc_info:
            service.reject_catch_up(pending_event.id, business_id=business_id)

        assert exc_info.value.code == "INVALID_TRANSITION"
        assert CreditLedgerService(db).get_balance(client_id, business_id) == 1

    def test_other_business_cannot_see_the_event(self, service, pending_event, other_business_id):
        with pytest.raises(CancellationEventNotFoundException):
            service.approve_catch_up(pending_event.id, business_id=other_business_id)

    def test_decision_notifies_the_client(self, db, service, pending_event, client_id, business_id):
        outbox = RepositoryFactory.create_event_outbox_repository(db)
        service.approve_catch_up(pending_event.id, business_id=business_id)

        event_types = [row.event_type for row in outbox.list_for_recipient(client_id)]
        assert event_types == [EVENT_CATCH_UP_APPROVED]
        assert EVENT_CATCH_UP_REJECTED not in event_types


class TestPerClientDecisions:
    def test_approve_all_pending_for_client(
        self, db, service, make_session, enroll, cancel, client_id, business_id
    ):
        events = []
        for day in (1, 2, 3):
            session = make_session(starts_in=timedelta(days=day))
            enroll(session, client_id)
            events.append(cancel(session, client_id).event)
        service.reject_catch_up(events[0].id, business_id=business_id)

        result = service.approve_catch_up_for_client(client_id, business_id=business_id)

        assert sorted(result.transitioned_event_ids) == sorted(e.id for e in events[1:])
        assert result.skipped_event_ids == []
        assert result.credit_balance == 2
        assert service.get_client_status(client_id, business_id) == CatchUpApprovalStatus.APPROVED

    def test_reject_all_pending_for_client(self, service, pending_event, client_id, business_id):
        result = service.reject_catch_up_for_client(client_id, business_id=business_id)

        assert result.transitioned_event_ids == [pending_event.id]
        assert result.credit_balance == 0
        assert service.get_client_status(client_id, business_id) == CatchUpApprovalStatus.REJECTED

    def test_bulk_with_nothing_pending_is_empty(self, service, client_id, business_id):
        result = service.approve_catch_up_for_client(client_id, business_id=business_id)

        assert result.transitioned_event_ids == []
        assert result.credit_balance == 0

    def test_bulk_does_not_cross_businesses(
        self, service, pending_event, client_id, business_id, other_business_id
    ):
        result = service.approve_catch_up_for_client(client_id, business_id=other_business_id)

        assert result.transitioned_event_ids == []
        assert service.get_client_status(client_id, business_id) == CatchUpApprovalStatus.PENDING


class TestReads:
    def test_pending_listing_and_clients(
        self, service, pending_event, catch_up_session, client_id, other_client_id, business_id
    ):
        pending = service.list_pending_catch_up_requests(business_id)
        clients = {client.client_id: client for client in service.list_clients_pending_approval(business_id)}

        assert {event.id for event in pending} >= {pending_event.id}
        assert set(clients) == {client_id, other_client_id}
        assert clients[client_id].pending_count == 1
        assert clients[client_id].cancellation_count == 1

    def test_status_filter(self, service, pending_event, business_id):
        service.approve_catch_up(pending_event.id, business_id=business_id)

        approved = service.list_catch_up_requests(business_id, CatchUpApprovalStatus.APPROVED)

        assert [event.id for event in approved] == [pending_event.id]
        assert service.list_pending_catch_up_requests(business_id) == []


@pytest.mark.parametrize(
    "counts, expected",
    [
        ({}, CatchUpApprovalStatus.NONE),
        ({CatchUpApprovalStatus.REJECTED: 2}, CatchUpApprovalStatus.REJECTED),
        ({CatchUpApprovalStatus.REJECTED: 1, CatchUpApprovalStatus.PENDING: 1}, CatchUpApprovalStatus.PENDING),
        ({CatchUpApprovalStatus.PENDING: 1, CatchUpApprovalStatus.APPROVED: 1}, CatchUpApprovalStatus.APPROVED),
        ({CatchUpApprovalStatus.NONE: 3}, CatchUpApprovalStatus.NONE),
    ],
)
def test_aggregate_status_precedence(counts, expected):
    assert aggregate_status(counts) == expected
