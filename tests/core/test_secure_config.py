"""
Tests for pulse/secure_config.py

Verifies defaults, environment overrides, fail-fast validation and
placeholder detection for the check credential.
"""

import os
from unittest.mock import patch

import pytest

from pulse.secure_config import (
    CheckCredentialConfig,
    ConfigurationError,
    SecureConfig,
    get_config,
    validate_config_on_startup,
)

VALID_KEY = "sk-ant-REDACTED"


@pytest.fixture
def clean_env():
    """Run with none of the engine's variables set."""
    names = [
        "PULSE_FEED_PAGE_SIZE",
        "PULSE_FEED_PAGE_INCREMENT",
        "PULSE_TREND_WINDOW",
        "PULSE_VELOCITY_WEEKS",
        "PULSE_SCHEDULER_POLL_SECONDS",
        "PULSE_SCHEDULER_STARTUP_DELAY_SECONDS",
        "PULSE_LOG_LEVEL",
        "ANTHROPIC_API_KEY",
    ]
    env = {k: v for k, v in os.environ.items() if k not in names}
    with patch.dict(os.environ, env, clear=True), patch("pulse.secure_config.load_dotenv"):
        yield


class TestDefaults:
    """Unset variables fall back to the domain constants."""

    def test_feed_defaults(self, clean_env):
        feed = SecureConfig().get_feed_config()
        assert (feed.page_size, feed.page_increment) == (10, 10)

    def test_trend_defaults(self, clean_env):
        trends = SecureConfig().get_trend_config()
        assert (trends.window, trends.velocity_weeks) == (12, 8)

    def test_scheduler_defaults(self, clean_env):
        scheduler = SecureConfig().get_scheduler_config()
        assert scheduler.poll_seconds == 900
        assert scheduler.startup_delay_seconds == 5

    def test_log_level_default(self, clean_env):
        assert SecureConfig().get_log_level() == "INFO"


class TestOverrides:
    def test_feed_override(self, clean_env):
        with patch.dict(os.environ, {"PULSE_FEED_PAGE_SIZE": "25", "PULSE_FEED_PAGE_INCREMENT": "5"}):
            feed = SecureConfig().get_feed_config()
        assert (feed.page_size, feed.page_increment) == (25, 5)

    def test_log_level_is_case_insensitive(self, clean_env):
        with patch.dict(os.environ, {"PULSE_LOG_LEVEL": "debug"}):
            assert SecureConfig().get_log_level() == "DEBUG"

    def test_zero_startup_delay_is_allowed(self, clean_env):
        with patch.dict(os.environ, {"PULSE_SCHEDULER_STARTUP_DELAY_SECONDS": "0"}):
            assert SecureConfig().get_scheduler_config().startup_delay_seconds == 0


class TestValidation:
    """Malformed values fail fast with ConfigurationError."""

    def test_non_integer_page_size(self, clean_env):
        with patch.dict(os.environ, {"PULSE_FEED_PAGE_SIZE": "ten"}):
            with pytest.raises(ConfigurationError, match="must be an integer"):
                SecureConfig().get_feed_config()

    def test_zero_page_size(self, clean_env):
        with patch.dict(os.environ, {"PULSE_FEED_PAGE_SIZE": "0"}):
            with pytest.raises(ConfigurationError, match="at least 1"):
                SecureConfig().get_feed_config()

    def test_negative_poll_period(self, clean_env):
        with patch.dict(os.environ, {"PULSE_SCHEDULER_POLL_SECONDS": "-1"}):
            with pytest.raises(ConfigurationError, match="must be positive"):
                SecureConfig().get_scheduler_config()

    def test_unknown_log_level(self, clean_env):
        with patch.dict(os.environ, {"PULSE_LOG_LEVEL": "LOUD"}):
            with pytest.raises(ConfigurationError, match="PULSE_LOG_LEVEL"):
                SecureConfig().get_log_level()


class TestCheckCredential:
    def test_valid_key(self, clean_env):
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": VALID_KEY}):
            config = SecureConfig()
            assert config.get_check_credential_config().api_key == VALID_KEY
            assert config.has_check_credential() is True

    def test_missing_key(self, clean_env):
        with pytest.raises(ConfigurationError, match="is required"):
            SecureConfig().get_check_credential_config()
        assert SecureConfig().has_check_credential() is False

    @pytest.mark.parametrize("value", ["your_api_key_goes_here_123", "placeholder-placeholder-xx"])
    def test_placeholder_rejected(self, value):
        with pytest.raises(ConfigurationError, match="placeholder"):
            CheckCredentialConfig(api_key=value)

    def test_short_key_rejected(self):
        with pytest.raises(ConfigurationError, match="too short"):
            CheckCredentialConfig(api_key="sk-ant-123")

    def test_repr_masks_key(self):
        assert VALID_KEY not in repr(CheckCredentialConfig(api_key=VALID_KEY))


class TestStartupValidation:
    def test_get_config_is_singleton(self):
        assert get_config() is get_config()

    def test_unknown_service(self, clean_env):
        with pytest.raises(ValueError, match="Unknown service"):
            validate_config_on_startup(["email"])

    def test_missing_credential_fails_startup(self, clean_env):
        with pytest.raises(ConfigurationError):
            validate_config_on_startup(["feed", "check"])
