"""Tests for ReviewSettings."""

import pytest
from pydantic import ValidationError
from reviews.config import ReviewSettings


def test_defaults():
    settings = ReviewSettings()
    assert settings.DEFAULT_STATUS == "Visible"
    assert settings.REQUIRE_VERIFIED_PURCHASE is False
    assert settings.MAX_TRANSACTION_ATTEMPTS == 3


def test_read_from_environment(monkeypatch):
    monkeypatch.setenv("REVIEWS_DEFAULT_STATUS", "Pending")
    monkeypatch.setenv("REVIEWS_REQUIRE_VERIFIED_PURCHASE", "true")
    settings = ReviewSettings()
    assert settings.DEFAULT_STATUS == "Pending"
    assert settings.REQUIRE_VERIFIED_PURCHASE is True


def test_hidden_default_rejected():
    with pytest.raises(ValidationError):
        ReviewSettings(DEFAULT_STATUS="Hidden")


def test_at_least_one_attempt():
    with pytest.raises(ValidationError):
        ReviewSettings(MAX_TRANSACTION_ATTEMPTS=0)


def test_retry_delay_from_environment(monkeypatch):
    monkeypatch.setenv("REVIEWS_RETRY_BASE_DELAY", "0.2")
    assert ReviewSettings().RETRY_BASE_DELAY == 0.2


def test_negative_retry_delay_rejected():
    with pytest.raises(ValidationError):
        ReviewSettings(RETRY_BASE_DELAY=-0.1)
