"""
Core Infrastructure - Logging and Secure Configuration

Usage:
    from pulse.core import get_config, get_logger

    logger = get_logger(__name__)
    feed = get_config().get_feed_config()
"""

from pulse.core.logging_config import ContextFormatter, JSONFormatter, get_logger, log_with_context, setup_logging
from pulse.secure_config import (
    CheckCredentialConfig,
    ConfigurationError,
    FeedSettings,
    SchedulerSettings,
    SecureConfig,
    TrendSettings,
    get_config,
    validate_config_on_startup,
)

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    "log_with_context",
    "JSONFormatter",
    "ContextFormatter",
    # Configuration
    "get_config",
    "validate_config_on_startup",
    "ConfigurationError",
    "SecureConfig",
    "FeedSettings",
    "TrendSettings",
    "SchedulerSettings",
    "CheckCredentialConfig",
]
