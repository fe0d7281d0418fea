"""Process-wide services shared by the HTTP handlers."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from ..config import Settings
from ..core.agent import AgentRuntime, DataTools, create_agent_runtime
from ..core.execution import PendingTransactions
from ..core.pipeline import QueryPipeline
from ..core.recovery import RecoveryExecutor
from .session_store import SessionStore

logger = logging.getLogger(__name__)

RuntimeFactory = Callable[[Settings], AgentRuntime]


@dataclass
class AppServices:
    settings: Settings
    sessions: SessionStore
    pending: PendingTransactions
    executor: RecoveryExecutor
    pipeline: QueryPipeline

    @classmethod
    def from_settings(cls, settings: Settings, runtime: Optional[AgentRuntime] = None) -> "AppServices":
        pending = PendingTransactions()
        executor = RecoveryExecutor.from_settings(settings)
        return cls(
            settings=settings,
            sessions=SessionStore(),
            pending=pending,
            executor=executor,
            pipeline=QueryPipeline(executor, pending, data_tools=DataTools(), runtime=runtime),
        )

    @property
    def agent_ready(self) -> bool:
        return self.pipeline.runtime is not None

    async def initialize_agent(
        self,
        factory: RuntimeFactory = create_agent_runtime,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> bool:
        """Build the agent runtime, retrying with a linearly growing pause.

        Returns False when every attempt failed; queries are then answered by
        fallbacks only.
        """
        if self.agent_ready:
            return True

        if not self.settings.has_llm_key:
            logger.warning(
                f"No API key for {self.settings.llm_provider}; running with fallback responses only"
            )
            return False

        attempts = self.settings.agent_init_attempts
        for attempt in range(1, attempts + 1):
            try:
                self.pipeline.runtime = factory(self.settings)
                logger.info(f"Agent runtime initialized (attempt {attempt}/{attempts})")
                return True
            except Exception as e:
                logger.warning(f"Agent initialization attempt {attempt}/{attempts} failed: {e}")
                if attempt < attempts:
                    await sleep(self.settings.agent_init_retry_delay_seconds * attempt)

        logger.error("Agent runtime unavailable; running with fallback responses only")
        return False
