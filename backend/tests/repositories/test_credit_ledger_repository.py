import pytest

from swimdesk.repositories.factory import RepositoryFactory


@pytest.fixture
def repo(db):
    return RepositoryFactory.create_credit_ledger_repository(db)


def test_balance_is_zero_without_a_ledger_row(repo, client_id, business_id):
    assert repo.get_balance(client_id, business_id) == 0
    assert repo.get_by_client(client_id, business_id) is None


def test_get_or_create_is_idempotent(db, repo, client_id, business_id):
    first = repo.get_or_create(client_id, business_id)
    second = repo.get_or_create(client_id, business_id)
    db.commit()

    assert first.id == second.id
    assert first.balance == 0


def test_increment_tracks_totals(db, repo, client_id, business_id):
    assert repo.increment(client_id, business_id) == 1
    assert repo.increment(client_id, business_id, 2) == 3
    db.commit()

    entry = repo.get_by_client(client_id, business_id)
    assert entry.total_granted == 3
    assert entry.total_consumed == 0
    assert entry.version == 2


def test_try_decrement_never_goes_negative(db, repo, client_id, business_id):
    repo.increment(client_id, business_id)

    assert repo.try_decrement(client_id, business_id) is True
    assert repo.try_decrement(client_id, business_id) is False
    db.commit()

    entry = repo.get_by_client(client_id, business_id)
    assert entry.balance == 0
    assert entry.total_consumed == 1


def test_try_decrement_without_ledger_row(repo, client_id, business_id):
    assert repo.try_decrement(client_id, business_id) is False


def test_balances_are_kept_per_business(db, repo, client_id, business_id, other_business_id):
    repo.increment(client_id, business_id)
    db.commit()

    assert repo.try_decrement(client_id, other_business_id) is False
    assert repo.get_balance(client_id, other_business_id) == 0
    assert repo.get_balance(client_id, business_id) == 1

    repo.increment(client_id, other_business_id, 2)
    db.commit()

    assert repo.get_by_client(client_id, business_id).id != repo.get_by_client(client_id, other_business_id).id
    assert repo.get_balance(client_id, business_id) == 1
    assert repo.get_balance(client_id, other_business_id) == 2
