"""
Tests for the Agent Recovery System

Tests for error classification, backoff schedule, circuit breaker and the
recovery executor.
"""

import asyncio
import pytest
from unittest.mock import AsyncMock

from defipilot.core.recovery import (
    # Errors
    AgentUnavailableError,
    CircuitOpenError,
    RecoverableError,
    UnrecoverableError,
    classify_error,
    # Executor
    RecoveryExecutor,
    # Strategies
    CircuitBreaker,
)
from defipilot.core.recovery.errors import ErrorCategory
from defipilot.core.recovery.strategies import CircuitBreakerConfig, CircuitState, RetryConfig
from defipilot.providers.llm import (
    LLMProviderAuthError,
    LLMProviderConnectionError,
    LLMProviderOverloadedError,
    LLMProviderRateLimitError,
)


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _executor(max_retries: int = 3, threshold: int = 5, decay_seconds: float = 60.0):
    sleep = RecordingSleep()
    executor = RecoveryExecutor(
        retry_config=RetryConfig(max_retries=max_retries),
        circuit_breaker=CircuitBreaker(
            "agent",
            CircuitBreakerConfig(failure_threshold=threshold, decay_seconds=decay_seconds),
        ),
        sleep=sleep,
    )
    return executor, sleep


# =============================================================================
# Error Classification Tests
# =============================================================================

class TestErrorClassification:
    """Tests for error classification."""

    @pytest.mark.parametrize("message,category", [
        ("503 Service Unavailable", ErrorCategory.OVERLOADED),
        ("model is overloaded", ErrorCategory.OVERLOADED),
        ("429 Too Many Requests", ErrorCategory.RATE_LIMIT),
        ("rate limit exceeded", ErrorCategory.RATE_LIMIT),
        ("connect ECONNREFUSED 127.0.0.1:443", ErrorCategory.NETWORK),
        ("request ETIMEDOUT", ErrorCategory.TIMEOUT),
    ])
    def test_transient_messages_are_recoverable(self, message, category):
        ctx = classify_error(Exception(message))

        assert ctx.category == category
        assert ctx.recoverable is True

    @pytest.mark.parametrize("message", ["Invalid API key", "authentication failed", "HTTP 401"])
    def test_auth_messages_are_not_recoverable(self, message):
        ctx = classify_error(Exception(message))

        assert ctx.category == ErrorCategory.AUTHENTICATION
        assert ctx.recoverable is False
        assert ctx.user_message == "❌ Configuration error. Please check API credentials."

    @pytest.mark.parametrize("error,category,recoverable", [
        (LLMProviderAuthError("bad"), ErrorCategory.AUTHENTICATION, False),
        (LLMProviderRateLimitError("slow down"), ErrorCategory.RATE_LIMIT, True),
        (LLMProviderOverloadedError("busy"), ErrorCategory.OVERLOADED, True),
        (LLMProviderConnectionError("reset"), ErrorCategory.NETWORK, True),
        (TimeoutError(), ErrorCategory.TIMEOUT, True),
        (asyncio.TimeoutError(), ErrorCategory.TIMEOUT, True),
    ])
    def test_typed_errors(self, error, category, recoverable):
        ctx = classify_error(error)

        assert ctx.category == category
        assert ctx.recoverable is recoverable

    def test_unknown_error_is_not_recoverable(self):
        ctx = classify_error(ValueError("something odd"))

        assert ctx.category == ErrorCategory.UNKNOWN
        assert ctx.recoverable is False

    def test_classified_errors_keep_context(self):
        assert classify_error(RecoverableError("x")).recoverable is True
        assert classify_error(AgentUnavailableError()).category == ErrorCategory.UNAVAILABLE
        assert classify_error(CircuitOpenError("agent", 5)).category == ErrorCategory.CIRCUIT_OPEN


# =============================================================================
# Strategy Tests
# =============================================================================

class TestRetryConfig:

    def test_exponential_schedule(self):
        config = RetryConfig()

        assert [config.get_delay(i) for i in range(3)] == [1.0, 2.0, 4.0]

    def test_delay_is_capped(self):
        config = RetryConfig(max_delay_seconds=3.0)

        assert config.get_delay(5) == 3.0


class TestCircuitBreaker:

    def test_opens_at_threshold(self):
        breaker = CircuitBreaker("agent", CircuitBreakerConfig(failure_threshold=2))

        breaker.record_failure()
        assert breaker.state == CircuitState.CLOSED
        breaker.record_failure()

        assert breaker.state == CircuitState.OPEN
        with pytest.raises(CircuitOpenError):
            breaker.check()

    def test_success_resets(self):
        breaker = CircuitBreaker("agent", CircuitBreakerConfig(failure_threshold=2))
        breaker.record_failure()
        breaker.record_failure()

        breaker.record_success()

        assert breaker.failure_count == 0
        breaker.check()

    def test_decay_forgets_one_failure(self):
        breaker = CircuitBreaker("agent", CircuitBreakerConfig(failure_threshold=2))
        breaker.record_failure()
        breaker.record_failure()

        breaker.decay()

        assert breaker.failure_count == 1
        assert breaker.is_open is False

    @pytest.mark.asyncio
    async def test_failures_decay_on_the_event_loop(self):
        breaker = CircuitBreaker("agent", CircuitBreakerConfig(failure_threshold=2, decay_seconds=0.01))
        breaker.record_failure()
        breaker.record_failure()
        assert breaker.is_open

        await asyncio.sleep(0.1)

        assert breaker.failure_count == 0
        assert breaker.is_open is False

    @pytest.mark.asyncio
    async def test_reset_cancels_pending_decay(self):
        breaker = CircuitBreaker("agent", CircuitBreakerConfig(decay_seconds=60.0))
        breaker.record_failure()
        breaker.record_failure()
        handles = list(breaker._decay_handles)

        breaker.reset()

        assert len(handles) == 2
        assert all(handle.cancelled() for handle in handles)
        assert breaker._decay_handles == []


# =============================================================================
# Executor Tests
# =============================================================================

class TestRecoveryExecutor:

    @pytest.mark.asyncio
    async def test_success_first_try(self):
        executor, sleep = _executor()
        operation = AsyncMock(return_value="answer")

        result = await executor.execute(operation, "agent")

        assert result == "answer"
        assert operation.await_count == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_retries_transient_errors_with_backoff(self):
        executor, sleep = _executor()
        operation = AsyncMock(side_effect=[
            Exception("503 overloaded"),
            Exception("429 rate limit"),
            "answer",
        ])

        result = await executor.execute(operation, "agent")

        assert result == "answer"
        assert operation.await_count == 3
        assert sleep.delays == [1.0, 2.0]
        assert executor.circuit_breaker.failure_count == 0

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        executor, sleep = _executor(max_retries=3)
        operation = AsyncMock(side_effect=Exception("503 overloaded"))

        with pytest.raises(Exception, match="503"):
            await executor.execute(operation, "agent")

        assert operation.await_count == 4
        assert sleep.delays == [1.0, 2.0, 4.0]
        assert executor.circuit_breaker.failure_count == 1

    @pytest.mark.asyncio
    async def test_non_recoverable_error_is_not_retried(self):
        executor, sleep = _executor()
        operation = AsyncMock(side_effect=LLMProviderAuthError("invalid api key"))

        with pytest.raises(LLMProviderAuthError):
            await executor.execute(operation, "agent")

        assert operation.await_count == 1
        assert sleep.delays == []
        assert executor.circuit_breaker.failure_count == 1

    @pytest.mark.asyncio
    async def test_unrecoverable_error_is_not_retried(self):
        executor, sleep = _executor()
        operation = AsyncMock(side_effect=UnrecoverableError("nope"))

        with pytest.raises(UnrecoverableError):
            await executor.execute(operation, "agent")

        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_open_breaker_fails_fast(self):
        executor, _ = _executor(max_retries=0, threshold=5)
        failing = AsyncMock(side_effect=Exception("boom"))

        for _ in range(5):
            with pytest.raises(Exception, match="boom"):
                await executor.execute(failing, "agent")

        operation = AsyncMock(return_value="answer")
        with pytest.raises(CircuitOpenError):
            await executor.execute(operation, "agent")

        assert operation.await_count == 0

    @pytest.mark.asyncio
    async def test_success_after_failures_resets_breaker(self):
        executor, _ = _executor(max_retries=0, threshold=5)

        for _ in range(3):
            with pytest.raises(Exception):
                await executor.execute(AsyncMock(side_effect=Exception("boom")), "agent")
        assert executor.circuit_breaker.failure_count == 3

        await executor.execute(AsyncMock(return_value="ok"), "agent")

        assert executor.circuit_breaker.failure_count == 0
