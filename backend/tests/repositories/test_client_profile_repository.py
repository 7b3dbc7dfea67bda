from datetime import timedelta

from swimdesk.repositories.factory import RepositoryFactory
from swimdesk.utils.time_utils import ensure_utc, utc_now


def test_record_cancellation_counts_and_latches(db, client_id, business_id):
    repo = RepositoryFactory.create_client_profile_repository(db)
    first_at = utc_now().replace(microsecond=0)
    second_at = first_at + timedelta(minutes=5)

    repo.record_cancellation(client_id, business_id, first_at)
    profile = repo.record_cancellation(client_id, business_id, second_at)
    db.commit()

    assert profile.cancellation_count == 2
    assert profile.has_cancelled_before is True
    assert ensure_utc(profile.first_cancelled_at) == first_at
    assert ensure_utc(profile.last_cancelled_at) == second_at


def test_get_or_create_returns_existing_profile(db, client_id, business_id):
    repo = RepositoryFactory.create_client_profile_repository(db)

    created = repo.get_or_create(client_id, business_id)
    again = repo.get_or_create(client_id, business_id)

    assert created.id == again.id
    assert again.cancellation_count == 0
    assert again.has_cancelled_before is False


def test_set_pre_approved_creates_profile(db, client_id, business_id):
    repo = RepositoryFactory.create_client_profile_repository(db)

    profile = repo.set_pre_approved(client_id, business_id, True)
    db.commit()

    assert profile.catch_up_pre_approved is True
    assert profile.has_cancelled_before is False


def test_profiles_are_kept_per_business(db, client_id, business_id, other_business_id):
    repo = RepositoryFactory.create_client_profile_repository(db)

    repo.set_pre_approved(client_id, other_business_id, True)
    home = repo.record_cancellation(client_id, business_id, utc_now())
    db.commit()

    assert home.catch_up_pre_approved is False
    assert home.cancellation_count == 1
    foreign = repo.get_by_client(client_id, other_business_id)
    assert foreign.catch_up_pre_approved is True
    assert foreign.cancellation_count == 0
