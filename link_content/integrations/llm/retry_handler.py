"""
Error classification for provider failover.

Decides whether a failed generation attempt is worth repeating on another
provider: timeouts, rate limits, 5xx/429 responses and connection problems
are transient, everything else is terminal.
"""

import re

from ...core.models.errors import GenerationError

RETRYABLE_ERROR_TYPES = frozenset([
    "RateLimitError",
    "Timeout",
    "TimeoutError",
    "APITimeoutError",
    "APIConnectionError",
    "ConnectionError",
    "ClientConnectionError",
    "ServiceUnavailableError",
    "InternalServerError",
])

RETRYABLE_PATTERNS = re.compile(
    r"timeout|timed out|rate limit|too many requests|service unavailable|overloaded"
    r"|connection|network|\b(?:500|502|503|504|429)\b",
    re.IGNORECASE,
)


def is_retryable_error(error: BaseException) -> bool:
    """
    Check whether an error is transient.

    Args:
        error: Exception raised by a provider attempt

    Returns:
        True if another provider should be tried
    """
    if isinstance(error, GenerationError):
        return error.retryable

    type_names = {cls.__name__ for cls in type(error).__mro__}
    if type_names & RETRYABLE_ERROR_TYPES:
        return True

    return bool(RETRYABLE_PATTERNS.search(str(error)))


def classify_error(error: BaseException) -> str:
    """Short label for logs and stats."""
    message = str(error).lower()
    if "timeout" in message or "timed out" in message:
        return "timeout"
    if "rate limit" in message or "429" in message:
        return "rate_limit"
    if re.search(r"\b5\d\d\b", message) or "unavailable" in message:
        return "server_error"
    if "connection" in message or "network" in message:
        return "connection"
    return "other"
