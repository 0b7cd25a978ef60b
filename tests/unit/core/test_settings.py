"""
Unit tests for application settings.
"""

from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from medbook.config import settings as settings_module
from medbook.config.settings import Settings, get_settings


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


@pytest.mark.unit
def test_defaults():
    settings = _settings()

    assert settings.OPERATING_TIMEZONE == "Asia/Kolkata"
    assert settings.timezone == ZoneInfo("Asia/Kolkata")
    assert settings.AVAILABILITY_DEFAULT_DAYS == 7
    assert settings.AVAILABILITY_MAX_DAYS == 30
    assert settings.BOOKING_RESERVATION_RETRIES == 1
    assert settings.PLATFORM_FEE_PERCENTAGE == Decimal("0")


@pytest.mark.unit
def test_database_url_with_and_without_password():
    assert _settings(DB_USER="app", DB_HOST="db", DB_NAME="medbook").database_url == "postgresql://app@db:5432/medbook"
    assert (
        _settings(DB_USER="app", DB_PASSWORD="secret", DB_HOST="db", DB_NAME="medbook").database_url
        == "postgresql://app:secret@db:5432/medbook"
    )


@pytest.mark.unit
def test_environment_variables_are_read(monkeypatch):
    monkeypatch.setenv("OPERATING_TIMEZONE", "Europe/London")
    monkeypatch.setenv("PLATFORM_FEE_PERCENTAGE", "2.5")

    settings = _settings()

    assert settings.timezone == ZoneInfo("Europe/London")
    assert settings.PLATFORM_FEE_PERCENTAGE == Decimal("2.5")


@pytest.mark.unit
@pytest.mark.parametrize(
    "field,value",
    [
        ("OPERATING_TIMEZONE", "Mars/Olympus_Mons"),
        ("LOG_FORMAT", "xml"),
        ("SLOT_GENERATION_MAX_ITERATIONS", 0),
        ("DEFAULT_SLOT_DURATION_MINUTES", 0),
        ("AVAILABILITY_MAX_DAYS", 0),
        ("AVAILABILITY_MAX_DAYS", 400),
        ("BOOKING_RESERVATION_RETRIES", -1),
        ("PLATFORM_FEE_PERCENTAGE", Decimal("101")),
        ("DB_POOL_SIZE", 0),
        ("DB_MAX_OVERFLOW", -1),
    ],
)
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        _settings(**{field: value})


@pytest.mark.unit
@pytest.mark.parametrize(
    "environment,debug,expected",
    [("development", False, True), ("production", True, True), ("production", False, False)],
)
def test_is_development(environment, debug, expected):
    assert _settings(ENVIRONMENT=environment, DEBUG=debug).is_development is expected


@pytest.mark.unit
def test_get_settings_is_cached(monkeypatch):
    monkeypatch.setattr(settings_module, "_settings_instance", None)

    assert get_settings() is get_settings()
