import pytest

from swimdesk.core.config import settings
from swimdesk.core.enums import CatchUpApprovalStatus
from swimdesk.core.exceptions import ClientNotFoundException
from swimdesk.repositories.client_profile_repository import ClientProfileRepository
from swimdesk.services.catch_up_policy_service import CatchUpPolicyService, EffectivePolicy


def test_defaults_apply_without_policy_row(db, business_id):
    policy = CatchUpPolicyService(db).get_policy(business_id)

    assert policy.is_default is True
    assert policy.catch_up_enabled == settings.catch_up_enabled_default
    assert policy.auto_approve == settings.catch_up_auto_approve_default


def test_update_policy_is_an_upsert(db, business_id, staff_id):
    service = CatchUpPolicyService(db)

    service.update_policy(business_id, catch_up_enabled=True, auto_approve=True, updated_by_id=staff_id)
    policy = service.update_policy(business_id, catch_up_enabled=False, auto_approve=False)

    assert policy.is_default is False
    assert policy.catch_up_enabled is False
    assert policy.auto_approve is False


@pytest.mark.parametrize(
    "enabled, auto_approve, pre_approved, expected",
    [
        (True, False, False, CatchUpApprovalStatus.PENDING),
        (True, True, False, CatchUpApprovalStatus.APPROVED),
        (True, False, True, CatchUpApprovalStatus.APPROVED),
        (False, True, True, CatchUpApprovalStatus.NONE),
    ],
)
def test_initial_status(enabled, auto_approve, pre_approved, expected):
    policy = EffectivePolicy(
        business_id="biz",
        catch_up_enabled=enabled,
        auto_approve=auto_approve,
        is_default=False,
    )
    assert policy.initial_status(pre_approved) == expected


def test_pre_approval_needs_history_with_the_business(db, client_id, other_business_id):
    with pytest.raises(ClientNotFoundException):
        CatchUpPolicyService(db).set_client_pre_approval(client_id, other_business_id, True)

    assert ClientProfileRepository(db).get_by_client(client_id, other_business_id) is None


def test_pre_approval_is_kept_per_business(db, class_session, enroll, client_id, business_id, other_business_id):
    enroll(class_session, client_id)

    profile = CatchUpPolicyService(db).set_client_pre_approval(client_id, business_id, True)

    assert profile.business_id == business_id
    assert profile.catch_up_pre_approved is True
    assert ClientProfileRepository(db).get_by_client(client_id, other_business_id) is None
