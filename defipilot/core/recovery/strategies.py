"""
Recovery Strategies

Backoff schedule and the circuit breaker guarding the agent runtime.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .errors import CircuitOpenError


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"      # Failing fast


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 3
    initial_delay_seconds: float = 1.0
    exponential_base: float = 2.0
    max_delay_seconds: float = 30.0

    def get_delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt + 1`` (1s, 2s, 4s with defaults)."""
        return min(
            self.initial_delay_seconds * (self.exponential_base ** attempt),
            self.max_delay_seconds,
        )


@dataclass
class CircuitBreakerConfig:
    """Configuration for circuit breaker."""

    failure_threshold: int = 5      # Failures before failing fast
    decay_seconds: float = 60.0     # Lifetime of one recorded failure


class CircuitBreaker:
    """
    Counts failed agent calls and rejects new ones once the count reaches
    the threshold.

    Each recorded failure schedules its own decrement after ``decay_seconds``,
    so the breaker closes again as old failures age out. Any success resets
    the count to zero.
    """

    def __init__(
        self,
        name: str,
        config: Optional[CircuitBreakerConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self.logger = logger or logging.getLogger(__name__)

        self._failure_count = 0
        self._decay_handles: List[asyncio.TimerHandle] = []

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def state(self) -> CircuitState:
        if self._failure_count >= self.config.failure_threshold:
            return CircuitState.OPEN
        return CircuitState.CLOSED

    @property
    def is_open(self) -> bool:
        return self.state == CircuitState.OPEN

    def check(self) -> None:
        """Raise CircuitOpenError if calls should fail fast."""
        if self.is_open:
            self.logger.warning(f"Circuit breaker '{self.name}' OPEN - failing fast")
            raise CircuitOpenError(self.name, self._failure_count)

    def record_success(self) -> None:
        if self._failure_count > 0:
            self.logger.info(f"Circuit breaker '{self.name}' reset - service recovered")
        self.reset()

    def record_failure(self) -> None:
        self._failure_count += 1
        self.logger.warning(
            f"Circuit breaker '{self.name}' recorded failure "
            f"{self._failure_count}/{self.config.failure_threshold}"
        )
        self._schedule_decay()

    def reset(self) -> None:
        self._failure_count = 0
        for handle in self._decay_handles:
            handle.cancel()
        self._decay_handles.clear()

    def decay(self) -> None:
        """Forget one recorded failure."""
        if self._failure_count > 0:
            self._failure_count -= 1
            self.logger.info(
                f"Circuit breaker '{self.name}' decayed to {self._failure_count} failures"
            )

    def _schedule_decay(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (sync caller): the failure stays until a success resets it
            return

        handle: Optional[asyncio.TimerHandle] = None

        def _expire() -> None:
            if handle in self._decay_handles:
                self._decay_handles.remove(handle)
            self.decay()

        handle = loop.call_later(self.config.decay_seconds, _expire)
        self._decay_handles.append(handle)
