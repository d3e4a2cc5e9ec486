"""Tests for configuration."""

import pytest
from pydantic import SecretStr, ValidationError

from autorank.config import Settings, get_settings
from autorank.core.security import describe_config
from autorank.jobs.models import JobConfig


def test_settings_defaults():
    """Test that settings have correct default values."""
    settings = Settings()
    assert settings.app_name == "AutoRank"
    assert settings.app_version == "1.0.2"
    assert settings.environment in ["development", "staging", "production"]
    assert settings.api_v1_prefix == "/api/v1"
    assert settings.default_batch_size == 500
    assert settings.portal_login_url.endswith("/rank2/control/login")


def test_get_settings_returns_singleton():
    """Test that get_settings returns the same instance."""
    settings1 = get_settings()
    settings2 = get_settings()
    assert settings1 is settings2


def test_settings_cors_configuration():
    """Test CORS configuration defaults."""
    settings = Settings()
    assert settings.cors_origins == ["*"]
    assert settings.cors_credentials is True
    assert settings.cors_methods == ["*"]
    assert settings.cors_headers == ["*"]


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch):
    """Test that settings are loaded from environment variables."""
    monkeypatch.setenv("INTER_BATCH_DELAY_SECONDS", "0.5")
    monkeypatch.setenv("BROWSER_HEADLESS", "true")
    settings = Settings()
    assert settings.inter_batch_delay_seconds == 0.5
    assert settings.browser_headless is True


def test_job_config_rejects_non_positive_batch_size():
    """Test that batch size must be positive."""
    with pytest.raises(ValidationError):
        JobConfig(username="jdoe", password=SecretStr("pw"), batch_size=0)


def test_job_config_hides_password():
    """Test that the password never shows up in reprs or log descriptions."""
    config = JobConfig(username="jdoe", password=SecretStr("hunter22"))
    assert "hunter22" not in repr(config)
    assert "hunter22" not in describe_config(config)
    assert "user=jdoe" in describe_config(config)
