"""
Error Recovery Module

Error classification, retry with exponential backoff and a decaying circuit
breaker for calls into the agent runtime.
"""

from .errors import (
    AgentUnavailableError,
    CircuitOpenError,
    ErrorCategory,
    ErrorContext,
    RecoverableError,
    UnrecoverableError,
    classify_error,
)
from .executor import RecoveryExecutor
from .strategies import CircuitBreaker, CircuitBreakerConfig, CircuitState, RetryConfig

__all__ = [
    # Errors
    "AgentUnavailableError",
    "CircuitOpenError",
    "ErrorCategory",
    "ErrorContext",
    "RecoverableError",
    "UnrecoverableError",
    "classify_error",
    # Executor
    "RecoveryExecutor",
    # Strategies
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitState",
    "RetryConfig",
]
