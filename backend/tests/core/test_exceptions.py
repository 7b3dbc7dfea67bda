from swimdesk.core.exceptions import (
    CapacityExceededException,
    CatchUpNotEligibleException,
    InsufficientCreditException,
    InvalidTransitionException,
    ServiceException,
    UnauthorizedException,
)


def test_each_failure_has_its_own_status_and_code():
    cases = [
        (CapacityExceededException("s1", 4), 409, "CAPACITY_EXCEEDED"),
        (InvalidTransitionException("e1", "approved", "approved"), 409, "INVALID_TRANSITION"),
        (InsufficientCreditException("c1", 0), 422, "INSUFFICIENT_CREDIT"),
        (CatchUpNotEligibleException("c1", "no_prior_cancellation"), 422, "CATCH_UP_NOT_ELIGIBLE"),
        (UnauthorizedException("Not authenticated", code="NOT_AUTHENTICATED"), 401, "NOT_AUTHENTICATED"),
    ]
    for exc, status_code, code in cases:
        http_exc = exc.to_http_exception()
        assert http_exc.status_code == status_code
        assert http_exc.detail["code"] == code
        assert http_exc.detail["message"] == exc.message


def test_eligibility_reasons_have_distinct_messages():
    never = CatchUpNotEligibleException("c1", "no_prior_cancellation")
    rejected = CatchUpNotEligibleException("c1", "catch_up_rejected")

    assert never.message != rejected.message
    assert rejected.details["reason"] == "catch_up_rejected"


def test_store_failures_are_retryable():
    http_exc = ServiceException("The scheduling store is temporarily unavailable", code="STORE_UNAVAILABLE").to_http_exception()

    assert http_exc.status_code == 503
    assert http_exc.headers["Retry-After"] == "2"


def test_unauthorized_advertises_bearer():
    assert UnauthorizedException("nope").to_http_exception().headers == {"WWW-Authenticate": "Bearer"}
