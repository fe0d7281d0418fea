"""
Error Classification

Defines error types for agent calls.
Errors are classified as recoverable (retry with backoff) or unrecoverable
(surface immediately and count against the circuit breaker).
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from ...providers.llm.base import (
    LLMProviderAuthError,
    LLMProviderConnectionError,
    LLMProviderOverloadedError,
    LLMProviderRateLimitError,
)


class ErrorCategory(str, Enum):
    """Categories of errors for recovery decisions."""

    OVERLOADED = "overloaded"          # 503 / provider overloaded
    RATE_LIMIT = "rate_limit"          # 429
    NETWORK = "network"                # Connection refused, DNS, socket
    TIMEOUT = "timeout"                # Operation timed out
    AUTHENTICATION = "authentication"  # Bad or missing API key
    CIRCUIT_OPEN = "circuit_open"      # Breaker rejected the call
    UNAVAILABLE = "unavailable"        # Agent runtime never initialized
    UNKNOWN = "unknown"                # Unclassified error


USER_MESSAGES: Dict[ErrorCategory, str] = {
    ErrorCategory.OVERLOADED: "⚠️ AI service is experiencing high load. Please try again shortly.",
    ErrorCategory.RATE_LIMIT: "⚠️ Rate limit reached. Please try again in a moment.",
    ErrorCategory.NETWORK: "⚠️ Network issue detected. Please try again.",
    ErrorCategory.TIMEOUT: "⚠️ The AI service timed out. Please try again.",
    ErrorCategory.AUTHENTICATION: "❌ Configuration error. Please check API credentials.",
    ErrorCategory.CIRCUIT_OPEN: "⚠️ AI service temporarily unavailable due to repeated failures.",
    ErrorCategory.UNAVAILABLE: "⚠️ Agent initializing, please try again in a moment.",
    ErrorCategory.UNKNOWN: "⚠️ Agent query temporarily unavailable.",
}


@dataclass
class ErrorContext:
    """Additional context about an error."""

    category: ErrorCategory = ErrorCategory.UNKNOWN
    recoverable: bool = False
    suggested_action: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def user_message(self) -> str:
        return USER_MESSAGES[self.category]


class RecoverableError(Exception):
    """
    Base class for errors that can be retried.

    These errors are typically transient:
    - Provider overload
    - Rate limits
    - Network issues and timeouts
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.context = context or ErrorContext(category=category, recoverable=True)


class UnrecoverableError(Exception):
    """
    Base class for errors that must not be retried.

    - Authentication / configuration failures
    - Open circuit breaker
    - Anything unclassified
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.context = context or ErrorContext(category=category, recoverable=False)


class CircuitOpenError(UnrecoverableError):
    """Raised without calling upstream while the breaker is open."""

    def __init__(self, name: str, failure_count: int):
        super().__init__(
            f"Circuit breaker '{name}' is open after {failure_count} failures",
            category=ErrorCategory.CIRCUIT_OPEN,
            context=ErrorContext(
                category=ErrorCategory.CIRCUIT_OPEN,
                recoverable=False,
                suggested_action="Wait for the failure count to decay",
                details={"breaker": name, "failure_count": failure_count},
            ),
        )


class AgentUnavailableError(UnrecoverableError):
    """Raised when no agent runtime is configured."""

    def __init__(self, message: str = "Agent runtime not initialized"):
        super().__init__(message, category=ErrorCategory.UNAVAILABLE)


_TYPED_CATEGORIES = [
    (LLMProviderAuthError, ErrorCategory.AUTHENTICATION),
    (LLMProviderRateLimitError, ErrorCategory.RATE_LIMIT),
    (LLMProviderOverloadedError, ErrorCategory.OVERLOADED),
    (LLMProviderConnectionError, ErrorCategory.NETWORK),
]

_RECOVERABLE_CATEGORIES = {
    ErrorCategory.OVERLOADED,
    ErrorCategory.RATE_LIMIT,
    ErrorCategory.NETWORK,
    ErrorCategory.TIMEOUT,
}

_MESSAGE_PATTERNS = [
    (ErrorCategory.OVERLOADED, ["503", "overloaded", "unavailable"]),
    (ErrorCategory.RATE_LIMIT, ["429", "rate limit", "too many requests"]),
    (ErrorCategory.TIMEOUT, ["timeout", "timed out", "etimedout"]),
    (ErrorCategory.NETWORK, ["econnrefused", "connection", "network"]),
    (ErrorCategory.AUTHENTICATION, ["api key", "authentication", "401"]),
]


def _context_for(category: ErrorCategory) -> ErrorContext:
    recoverable = category in _RECOVERABLE_CATEGORIES
    return ErrorContext(
        category=category,
        recoverable=recoverable,
        suggested_action="Retry with exponential backoff" if recoverable else None,
    )


def classify_error(error: Exception) -> ErrorContext:
    """
    Classify an exception raised by an agent call.

    Already-classified errors keep their context; typed provider errors are
    classified by type; anything else by message. Unclassified errors are
    not retried.
    """
    if isinstance(error, (RecoverableError, UnrecoverableError)):
        return error.context

    for error_type, category in _TYPED_CATEGORIES:
        if isinstance(error, error_type):
            return _context_for(category)

    if isinstance(error, (TimeoutError, asyncio.TimeoutError)):
        return _context_for(ErrorCategory.TIMEOUT)

    message = str(error).lower()
    for category, patterns in _MESSAGE_PATTERNS:
        if any(p in message for p in patterns):
            return _context_for(category)

    return _context_for(ErrorCategory.UNKNOWN)
