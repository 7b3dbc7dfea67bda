import pytest
from pydantic import ValidationError

from swimdesk.core.config import Settings


def test_environment_prefix(monkeypatch):
    monkeypatch.setenv("SWIMDESK_CATCH_UP_AUTO_APPROVE_DEFAULT", "true")
    monkeypatch.setenv("SWIMDESK_NOTIFICATION_MAX_ATTEMPTS", "3")

    settings = Settings()

    assert settings.catch_up_auto_approve_default is True
    assert settings.notification_max_attempts == 3


def test_log_level_is_normalized():
    assert Settings(log_level=" debug ").log_level == "DEBUG"


def test_unknown_log_level_is_rejected():
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")


def test_lookahead_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(catch_up_slot_lookahead_days=0)


def test_sqlite_detection():
    assert Settings(database_url="sqlite://").is_sqlite is True
    assert Settings(database_url="postgresql://localhost/swimdesk").is_sqlite is False
