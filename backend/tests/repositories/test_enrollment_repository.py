from swimdesk.core.enums import EnrollmentStatus
from swimdesk.repositories.factory import RepositoryFactory
from swimdesk.utils.time_utils import utc_now


def test_mark_cancelled_only_once(db, class_session, enroll, client_id):
    repo = RepositoryFactory.create_enrollment_repository(db)
    enrollment = enroll(class_session, client_id)

    assert repo.mark_cancelled(enrollment.id, utc_now(), client_id) is True
    assert repo.mark_cancelled(enrollment.id, utc_now(), client_id) is False
    db.commit()

    repo.refresh(enrollment)
    assert enrollment.status == EnrollmentStatus.CANCELLED.value
    assert repo.get_active(class_session.id, client_id) is None


def test_list_upcoming_for_client_skips_cancelled(db, make_session, enroll, client_id):
    repo = RepositoryFactory.create_enrollment_repository(db)
    kept = make_session()
    dropped = make_session()
    enroll(kept, client_id)
    cancelled = enroll(dropped, client_id)
    repo.mark_cancelled(cancelled.id, utc_now(), client_id)
    db.commit()

    upcoming = repo.list_upcoming_for_client(client_id, kept.business_id, utc_now())

    assert [enrollment.session_id for enrollment in upcoming] == [kept.id]


def test_upcoming_and_history_are_scoped_to_the_business(
    db, make_session, enroll, client_id, business_id, other_business_id
):
    repo = RepositoryFactory.create_enrollment_repository(db)
    home = make_session()
    away = make_session(business_id=other_business_id)
    enroll(home, client_id)

    assert repo.client_has_history(client_id, business_id) is True
    assert repo.client_has_history(client_id, other_business_id) is False

    enroll(away, client_id)

    upcoming = repo.list_upcoming_for_client(client_id, business_id, utc_now())
    assert [enrollment.session_id for enrollment in upcoming] == [home.id]
