"""
Secure Configuration Management

Provides centralized, validated configuration for the engine.
Values come from environment variables (optionally a .env file); missing
tuning values fall back to the defaults in ``pulse.domain.constants``, while
malformed values fail fast.

Usage:
    from pulse.secure_config import get_config

    config = get_config()
    feed = config.get_feed_config()
    print(feed.page_size)

Security Features:
    - Strict validation of all configuration values
    - Fail-fast on invalid configuration
    - Placeholder detection for the check credential (e.g., "your_api_key")
    - The credential is never logged or included in error messages

Raises:
    ConfigurationError: If configuration is invalid
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from pulse.domain.constants import feed_config, scheduler_config, trend_config

_PLACEHOLDERS = ("your_api_key", "your_key", "example", "placeholder", "xxx", "replace_me", "sk-ant-...")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


@dataclass(frozen=True)
class FeedSettings:
    """
    Validated activity feed pagination settings.
    """

    page_size: int
    page_increment: int

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ConfigurationError(f"PULSE_FEED_PAGE_SIZE must be at least 1, got {self.page_size}")
        if self.page_increment < 1:
            raise ConfigurationError(f"PULSE_FEED_PAGE_INCREMENT must be at least 1, got {self.page_increment}")


@dataclass(frozen=True)
class TrendSettings:
    """
    Validated trend window settings.
    """

    window: int
    velocity_weeks: int

    def __post_init__(self) -> None:
        if self.window < 1:
            raise ConfigurationError(f"PULSE_TREND_WINDOW must be at least 1, got {self.window}")
        if self.velocity_weeks < 1:
            raise ConfigurationError(f"PULSE_VELOCITY_WEEKS must be at least 1, got {self.velocity_weeks}")


@dataclass(frozen=True)
class SchedulerSettings:
    """
    Validated recheck scheduler timing.
    """

    poll_seconds: float
    startup_delay_seconds: float

    def __post_init__(self) -> None:
        if self.poll_seconds <= 0:
            raise ConfigurationError(f"PULSE_SCHEDULER_POLL_SECONDS must be positive, got {self.poll_seconds}")
        if self.startup_delay_seconds < 0:
            raise ConfigurationError(
                f"PULSE_SCHEDULER_STARTUP_DELAY_SECONDS must not be negative, got {self.startup_delay_seconds}"
            )


@dataclass(frozen=True)
class CheckCredentialConfig:
    """
    Validated credential for the external citation check.

    The engine never calls the check service itself; the credential only
    decides whether scheduled checks have their prerequisites.
    """

    api_key: str

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """
        Raises:
            ConfigurationError: If the key is missing, too short or a placeholder
        """
        if not self.api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY is required")

        if any(placeholder in self.api_key.lower() for placeholder in _PLACEHOLDERS):
            raise ConfigurationError("ANTHROPIC_API_KEY contains a placeholder value - please set a real key")

        if len(self.api_key) < 20:
            raise ConfigurationError(
                f"ANTHROPIC_API_KEY appears invalid (too short: {len(self.api_key)} chars, expected >=20)"
            )

    def __repr__(self) -> str:
        return "CheckCredentialConfig(api_key='****')"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


class SecureConfig:
    """
    Centralized secure configuration manager.

    Loads and validates all engine configuration from environment variables.
    """

    def __init__(self) -> None:
        """Initialize configuration (loads .env file)."""
        load_dotenv()

    def get_feed_config(self) -> FeedSettings:
        """
        Get validated activity feed pagination.

        Raises:
            ConfigurationError: If a value is not a positive integer
        """
        return FeedSettings(
            page_size=_int_env("PULSE_FEED_PAGE_SIZE", feed_config.PAGE_SIZE),
            page_increment=_int_env("PULSE_FEED_PAGE_INCREMENT", feed_config.PAGE_INCREMENT),
        )

    def get_trend_config(self) -> TrendSettings:
        """
        Get validated trend windows.

        Raises:
            ConfigurationError: If a value is not a positive integer
        """
        return TrendSettings(
            window=_int_env("PULSE_TREND_WINDOW", trend_config.ROLLING_WINDOW),
            velocity_weeks=_int_env("PULSE_VELOCITY_WEEKS", trend_config.VELOCITY_WEEKS),
        )

    def get_scheduler_config(self) -> SchedulerSettings:
        """
        Get validated scheduler timing.

        Raises:
            ConfigurationError: If a value is not a valid duration
        """
        return SchedulerSettings(
            poll_seconds=_float_env("PULSE_SCHEDULER_POLL_SECONDS", scheduler_config.POLL_SECONDS),
            startup_delay_seconds=_float_env(
                "PULSE_SCHEDULER_STARTUP_DELAY_SECONDS", scheduler_config.STARTUP_DELAY_SECONDS
            ),
        )

    def get_check_credential_config(self) -> CheckCredentialConfig:
        """
        Get the validated check credential.

        Raises:
            ConfigurationError: If the credential is missing or invalid
        """
        return CheckCredentialConfig(api_key=os.getenv("ANTHROPIC_API_KEY") or "")

    def has_check_credential(self) -> bool:
        """Whether a usable check credential is configured (never raises)."""
        try:
            self.get_check_credential_config()
        except ConfigurationError:
            return False
        return True

    def get_log_level(self) -> str:
        """
        Raises:
            ConfigurationError: If PULSE_LOG_LEVEL is not a standard level name
        """
        level = (os.getenv("PULSE_LOG_LEVEL") or "INFO").strip().upper()
        if level not in _LOG_LEVELS:
            raise ConfigurationError(f"PULSE_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got {level!r}")
        return level


_config_instance: SecureConfig | None = None


def get_config() -> SecureConfig:
    """
    Get the global configuration instance (singleton pattern).

    Returns:
        SecureConfig: The configuration manager
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = SecureConfig()
    return _config_instance


def validate_config_on_startup(required_services: list[str]) -> None:
    """
    Validate required configuration at application startup.

    Args:
        required_services: Any of "feed", "trends", "scheduler", "check", "logging"

    Raises:
        ConfigurationError: If any required configuration is missing or invalid
        ValueError: If a service name is unknown

    Example:
        validate_config_on_startup(["feed", "scheduler", "check"])
    """
    config = get_config()

    for service in required_services:
        if service == "feed":
            config.get_feed_config()
        elif service == "trends":
            config.get_trend_config()
        elif service == "scheduler":
            config.get_scheduler_config()
        elif service == "check":
            config.get_check_credential_config()
        elif service == "logging":
            config.get_log_level()
        else:
            raise ValueError(f"Unknown service: {service}")
