"""
Recovery Executor

Runs agent calls behind the circuit breaker with exponential-backoff retries
for transient failures.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Coroutine, Optional, TypeVar

from .errors import UnrecoverableError, classify_error
from .strategies import CircuitBreaker, CircuitBreakerConfig, RetryConfig

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[Any]]


class RecoveryExecutor:
    """
    Executes operations with retry and circuit breaker protection.

    - Recoverable failures are retried up to ``max_retries`` extra times,
      waiting ``initial_delay * base ** attempt`` between attempts.
    - An unrecoverable failure, or a recoverable one that outlives its
      retries, counts one failure on the breaker and is re-raised.
    - While the breaker is open the operation is not invoked at all.
    """

    def __init__(
        self,
        retry_config: Optional[RetryConfig] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        sleep: Optional[SleepFunc] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.retry_config = retry_config or RetryConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            "agent", CircuitBreakerConfig(), logger=self.logger
        )
        self._sleep = sleep or asyncio.sleep

    @classmethod
    def from_settings(cls, settings: Any) -> "RecoveryExecutor":
        return cls(
            retry_config=RetryConfig(
                max_retries=settings.agent_max_retries,
                initial_delay_seconds=settings.agent_retry_initial_delay_seconds,
                exponential_base=settings.agent_retry_exponential_base,
            ),
            circuit_breaker=CircuitBreaker(
                "agent",
                CircuitBreakerConfig(
                    failure_threshold=settings.circuit_breaker_threshold,
                    decay_seconds=settings.circuit_breaker_decay_seconds,
                ),
            ),
        )

    async def execute(
        self,
        operation: Callable[[], Coroutine[Any, Any, T]],
        operation_name: str = "operation",
    ) -> T:
        """
        Execute an operation with full recovery support.

        Raises:
            CircuitOpenError: the breaker is open; ``operation`` was not called
            Exception: the last error from ``operation`` once recovery gives up
        """
        self.circuit_breaker.check()

        max_attempts = self.retry_config.max_retries + 1

        for attempt in range(max_attempts):
            try:
                result = await operation()
            except UnrecoverableError:
                self.circuit_breaker.record_failure()
                raise
            except Exception as e:
                error_ctx = classify_error(e)

                self.logger.warning(
                    f"{operation_name} attempt {attempt + 1}/{max_attempts} failed "
                    f"({error_ctx.category.value}, retryable={error_ctx.recoverable}): {e}"
                )

                if not error_ctx.recoverable or attempt == max_attempts - 1:
                    self.circuit_breaker.record_failure()
                    raise

                delay = self.retry_config.get_delay(attempt)
                self.logger.info(f"Retrying {operation_name} in {delay:.1f}s")
                await self._sleep(delay)
            else:
                self.circuit_breaker.record_success()
                return result

        raise RuntimeError(f"{operation_name}: max retries exceeded")  # pragma: no cover
