from datetime import timedelta

from swimdesk.repositories.factory import RepositoryFactory
from swimdesk.utils.time_utils import utc_now


def test_list_for_business_hides_inactive_by_default(db, make_session, business_id, other_business_id):
    repo = RepositoryFactory.create_session_repository(db)
    active = make_session()
    inactive = make_session(is_active=False)
    make_session(business_id=other_business_id)

    assert [s.id for s in repo.list_for_business(business_id)] == [active.id]
    assert {s.id for s in repo.list_for_business(business_id, include_inactive=True)} == {active.id, inactive.id}


def test_slot_counters(db, catch_up_session, enroll, client_id, other_client_id):
    repo = RepositoryFactory.create_session_repository(db)
    enroll(catch_up_session, client_id)
    ids = [catch_up_session.id]

    assert repo.active_counts(ids) == {catch_up_session.id: 1}
    assert repo.catch_up_counts(ids) == {}
    assert repo.cancellation_stats(ids)[catch_up_session.id][0] == 1
    assert repo.cancellation_stats(ids, exclude_client_id=other_client_id) == {}


def test_list_with_cancellations_respects_window(db, catch_up_session, business_id):
    repo = RepositoryFactory.create_session_repository(db)
    now = utc_now()

    inside = repo.list_with_cancellations(business_id, starts_after=now, starts_before=now + timedelta(days=7))
    outside = repo.list_with_cancellations(business_id, starts_after=now, starts_before=now + timedelta(days=1))

    assert [s.id for s in inside] == [catch_up_session.id]
    assert outside == []
