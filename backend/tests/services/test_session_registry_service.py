from datetime import date, datetime, timedelta, timezone

import pytest

from swimdesk.core.exceptions import SessionNotFoundException, ValidationException
from swimdesk.core.ulid_helper import generate_ulid
from swimdesk.schemas.session import RecurrenceRule, SessionCreate
from swimdesk.services.session_registry_service import SessionRegistryService
from swimdesk.utils.time_utils import utc_now


@pytest.fixture
def registry(db):
    return SessionRegistryService(db)


def _payload(starts_at: datetime, until: date = None, capacity: int = 6) -> SessionCreate:
    return SessionCreate(
        class_id=generate_ulid(),
        class_title="Adult Stroke Clinic",
        instructor_id=generate_ulid(),
        starts_at=starts_at,
        ends_at=starts_at + timedelta(minutes=30),
        capacity=capacity,
        recurrence=RecurrenceRule(until=until) if until else None,
    )


class TestCreateSession:
    def test_single_session(self, registry, business_id, staff_id):
        starts_at = (utc_now() + timedelta(days=1)).replace(microsecond=0)

        created = registry.create_session(business_id, _payload(starts_at), created_by_id=staff_id)

        assert len(created) == 1
        assert created[0].series_id is None
        assert created[0].duration_minutes == 30

    def test_weekly_series_shares_series_id(self, registry, business_id):
        starts_at = datetime(2031, 1, 6, 17, 0, tzinfo=timezone.utc)

        created = registry.create_session(business_id, _payload(starts_at, until=date(2031, 1, 27)))

        assert [s.starts_at.date() for s in created] == [
            date(2031, 1, 6),
            date(2031, 1, 13),
            date(2031, 1, 20),
            date(2031, 1, 27),
        ]
        assert len({s.series_id for s in created}) == 1
        assert created[0].series_id is not None

    def test_series_length_is_capped(self, registry, business_id):
        starts_at = datetime(2031, 1, 6, 17, 0, tzinfo=timezone.utc)

        with pytest.raises(ValidationException) as exc_info:
            registry.create_session(business_id, _payload(starts_at, until=date(2033, 1, 1)))

        assert exc_info.value.code == "TOO_MANY_OCCURRENCES"


class TestReads:
    def test_get_session_is_business_scoped(self, registry, class_session, business_id, other_business_id):
        assert registry.get_session(class_session.id, business_id).id == class_session.id
        with pytest.raises(SessionNotFoundException):
            registry.get_session(class_session.id, other_business_id)

    def test_deactivated_session_leaves_listing(self, registry, class_session, business_id):
        registry.deactivate_session(class_session.id, business_id)

        assert registry.list_sessions(business_id) == []
        assert [s.id for s in registry.list_sessions(business_id, include_inactive=True)] == [class_session.id]

    def test_roster_lists_active_enrollments(self, registry, class_session, enroll, cancel, client_id, business_id):
        enroll(class_session, client_id)
        staying = generate_ulid()
        enroll(class_session, staying)
        cancel(class_session, client_id)

        roster = registry.get_roster(class_session.id, business_id)

        assert [enrollment.client_id for enrollment in roster] == [staying]


class TestCatchUpSlots:
    def test_cancellation_opens_slot_with_reason(self, registry, catch_up_session, business_id, client_id):
        slots = registry.list_open_catch_up_slots(business_id, client_id)

        assert len(slots) == 1
        slot = slots[0]
        assert slot.session.id == catch_up_session.id
        assert slot.freed_seats == 1
        assert slot.available_seats == catch_up_session.capacity
        assert slot.reason == f"slot opened due to cancellation on {slot.last_cancelled_at.date().isoformat()}"

    def test_full_session_is_not_a_slot(self, registry, make_session, enroll, cancel, business_id, client_id):
        session = make_session(capacity=1)
        leaver = generate_ulid()
        enroll(session, leaver)
        cancel(session, leaver)
        enroll(session, generate_ulid())

        assert registry.list_open_catch_up_slots(business_id, client_id) == []

    def test_enrolled_client_is_not_offered_the_slot(self, registry, catch_up_session, enroll, business_id, client_id):
        enroll(catch_up_session, client_id)

        assert registry.list_open_catch_up_slots(business_id, client_id) == []

    def test_deactivated_session_is_not_a_slot(self, registry, catch_up_session, business_id, client_id):
        registry.deactivate_session(catch_up_session.id, business_id)

        assert registry.list_open_catch_up_slots(business_id, client_id) == []
        assert registry.get_open_slot(catch_up_session, client_id) is None

    def test_slot_beyond_lookahead_is_hidden(self, registry, make_session, enroll, cancel, business_id, client_id):
        far = make_session(starts_in=timedelta(days=60))
        leaver = generate_ulid()
        enroll(far, leaver)
        cancel(far, leaver)

        assert registry.list_open_catch_up_slots(business_id, client_id) == []
        assert registry.get_open_slot(far, client_id) is not None
