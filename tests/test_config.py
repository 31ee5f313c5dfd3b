"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from change_control.config import Settings

_VARS = (
    "CHANGE_CONTROL_ADVANCE_MARGIN_SEC",
    "CHANGE_CONTROL_FLOATING_TZ",
    "CHANGE_CONTROL_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings()
    assert settings.advance_margin_sec == 3600
    assert settings.floating_tz == "UTC"
    assert settings.log_level == "INFO"


def test_reads_prefixed_variables(monkeypatch):
    monkeypatch.setenv("CHANGE_CONTROL_ADVANCE_MARGIN_SEC", "900")
    monkeypatch.setenv("CHANGE_CONTROL_FLOATING_TZ", "Europe/Paris")
    monkeypatch.setenv("CHANGE_CONTROL_LOG_LEVEL", "DEBUG")

    settings = Settings()
    assert settings.advance_margin_sec == 900
    assert settings.floating_tzinfo is not None
    assert settings.log_level == "DEBUG"


def test_empty_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("CHANGE_CONTROL_ADVANCE_MARGIN_SEC", "")
    assert Settings().advance_margin_sec == 3600


def test_negative_margin_rejected(monkeypatch):
    monkeypatch.setenv("CHANGE_CONTROL_ADVANCE_MARGIN_SEC", "-5")
    with pytest.raises(ValidationError):
        Settings()


def test_unknown_zone_rejected(monkeypatch):
    monkeypatch.setenv("CHANGE_CONTROL_FLOATING_TZ", "Mars/Olympus")
    settings = Settings()
    with pytest.raises(ValueError, match="Unknown time zone"):
        settings.floating_tzinfo
