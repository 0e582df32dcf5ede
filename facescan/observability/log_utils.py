"""
Structured logging helpers.

Log records for ticks carry continuation tokens, image payloads and
result lists; these helpers reduce them to short, safe summaries before
they reach a handler.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import logging
from typing import Any

TOKEN_PREVIEW = 16


def safe_log_value(value: Any, max_length: int = 300) -> str:
    """
    Summarize a value for a log field.

    bytes → ``bytes(<size>)``; sequences → item count; dicts → key count;
    strings and anything else → text truncated to max_length.
    """
    if value is None:
        return "None"
    if isinstance(value, (bytes, bytearray)):
        return f"bytes({len(value)})"
    if isinstance(value, (list, tuple, set)):
        return f"{type(value).__name__}({len(value)} items)"
    if isinstance(value, dict):
        return f"dict({len(value)} keys)"
    try:
        text = str(value)
    except Exception as e:  # pylint: disable=broad-except
        return f"<unable to log: {type(e).__name__}>"
    if len(text) > max_length:
        return f"{text[:max_length]}... (truncated, {len(text)} total)"
    return text


def token_preview(token: str | None) -> str:
    """First characters and length of a continuation token."""
    if not token:
        return "None"
    return f"{token[:TOKEN_PREVIEW]}…({len(token)})"


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """
    Log with every context value passed through safe_log_value.

    A ``token`` key is shortened with token_preview.
    """
    extra = {}
    for key, value in context.items():
        extra[key] = token_preview(value) if key == "token" else safe_log_value(value)
    logger.log(level, message, extra=extra)


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: Exception,
    **context: Any,
) -> None:
    """Log an exception with traceback, its type and safe context."""
    extra = {key: safe_log_value(value) for key, value in context.items()}
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = safe_log_value(str(exc))
    logger.exception(message, extra=extra)
