"""
Error Handling Utility Module

Reusable error handling patterns for the few places where the engine touches
code it does not own (the scheduler's external check callback, boundary
parsing of raw store documents). Everything else in the engine is a total
function and does not catch exceptions at all.

1. log_and_continue() - Log error and continue execution (expected failures)
2. log_and_return_default() - Log error and return a default value

All functions use structured logging with contextual information.
"""

import logging
from typing import Any, TypeVar

T = TypeVar("T")


def log_and_continue(
    logger: logging.Logger,
    error: BaseException,
    context: dict[str, Any],
    error_type: str = "Operation",
) -> None:
    """
    Log an error with structured context and continue execution gracefully.

    Args:
        logger: Logger instance from get_logger(__name__)
        error: The caught exception
        context: Structured data about what failed (project_id, check name, etc.)
        error_type: Human-readable description of the operation

    Example:
        try:
            await check()
        except Exception as e:
            log_and_continue(logger, e, context={"check": "citation_share"}, error_type="Recheck")
    """
    logger.warning(
        f"{error_type} failed: {error}",
        extra={
            "error_type": error_type,
            "exception_class": error.__class__.__name__,
            "context": context,
        },
    )


def log_and_return_default(
    logger: logging.Logger,
    error: Exception,
    context: dict[str, Any],
    default_value: T,
    error_type: str = "Operation",
) -> T:
    """
    Log an error and return a default value.

    Args:
        logger: Logger instance
        error: The caught exception
        context: Structured data about what failed
        default_value: Value to return on error (None, [], {}, etc.)
        error_type: Human-readable description

    Returns:
        default_value

    Example:
        try:
            created_at = parse_iso_timestamp(raw["createdAt"])
        except ValueError as e:
            created_at = log_and_return_default(
                logger, e, context={"field": "createdAt"}, default_value=None, error_type="Date parsing"
            )
    """
    logger.warning(
        f"{error_type} failed, returning default value: {error}",
        extra={
            "error_type": error_type,
            "exception_class": error.__class__.__name__,
            "context": context,
            "default_value": str(default_value),
        },
    )
    return default_value
