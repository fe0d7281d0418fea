"""
Query Pipeline

Routes a chat query, answers it directly when the router allows, and
otherwise runs the agent behind the recovery executor. Agent failures fall
back to deterministic answers so a query always gets a response.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..types import QueryType, RoutingDecision, StrategyAction, TransactionParams
from .agent import COORDINATOR, STRATEGY_AGENT, AgentRuntime, DataTools, build_request_registry
from .execution import PendingTransactions, TransactionBuildError, build_transaction_params
from .recovery import AgentUnavailableError, ErrorCategory, RecoveryExecutor, classify_error
from .routing import DEFAULT_PROTOCOL, DEFAULT_STRATEGY, STRATEGY_AGENT as STRATEGY_ROUTE
from .routing import build_direct_response, classify

FALLBACK_DEPOSIT_AMOUNT = "100"

FIRST_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")

RESEARCH_DEPOSIT_FALLBACK = (
    "⚠️ Research temporarily unavailable. Building transaction with Morpho (recommended)."
)
RESEARCH_FALLBACK = (
    "⚠️ Research service temporarily unavailable.\n\n"
    'Try: "What are the top protocols on Base?" or "Show me best yields"'
)


@dataclass
class PipelineResult:
    response: str
    transactions: Optional[List[TransactionParams]]
    requires_approval: bool
    decision: RoutingDecision


def agent_instruction(decision: RoutingDecision, query: str) -> Tuple[str, str]:
    """Pick the agent profile and the instruction it receives for ``decision``."""
    if decision.type == QueryType.STRATEGY_COMPLEX:
        return COORDINATOR, (
            f"{query}\n\n"
            "Steps:\n"
            "1. Call market_analyst to research protocols\n"
            "2. Recommend best option\n"
            "3. Call strategy_agent to build transaction\n\n"
            "Present research + transaction."
        )

    if decision.agent_to_use == STRATEGY_ROUTE:
        params = decision.params
        if params is not None and params.action == "deposit":
            amount = params.amount or FALLBACK_DEPOSIT_AMOUNT
            return STRATEGY_AGENT, (
                f'User wants to deposit {amount} USDC. Extract protocol from "{query}". '
                "Default to Morpho. Build the transaction now."
            )
        return STRATEGY_AGENT, f"{query}\n\nBuild the transaction now."

    return COORDINATOR, f"{query}\n\nCall market_analyst to fetch live DeFi data. Present results clearly."


def fallback_amount(decision: RoutingDecision, query: str) -> str:
    if decision.params is not None and decision.params.amount:
        return decision.params.amount
    match = FIRST_NUMBER_RE.search(query)
    return match.group(0) if match else FALLBACK_DEPOSIT_AMOUNT


class QueryPipeline:
    """Classify, then answer directly or through the agent with fallbacks."""

    def __init__(
        self,
        executor: RecoveryExecutor,
        pending: PendingTransactions,
        data_tools: Optional[DataTools] = None,
        runtime: Optional[AgentRuntime] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.executor = executor
        self.pending = pending
        self.data_tools = data_tools or DataTools()
        self.runtime = runtime
        self.logger = logger or logging.getLogger(__name__)

    async def handle(self, query: str, request_id: str) -> PipelineResult:
        decision = classify(query)
        self.logger.info(
            f"[{request_id}] Routed as {decision.type.value} "
            f"(confidence {decision.confidence}, bypass={decision.should_bypass_agent})"
        )

        if decision.should_bypass_agent:
            try:
                direct = build_direct_response(decision, query)
            except TransactionBuildError as e:
                self.logger.warning(f"[{request_id}] Direct build rejected: {e.message}")
                return PipelineResult(
                    response=f"⚠️ {e.message}. Please check the amount and try again.",
                    transactions=None,
                    requires_approval=False,
                    decision=decision,
                )
            return PipelineResult(
                response=direct.response,
                transactions=direct.transactions,
                requires_approval=direct.requires_approval,
                decision=decision,
            )

        try:
            return await self._ask_agent(query, request_id, decision)
        except Exception as e:
            return self._fallback(query, request_id, decision, e)
        finally:
            self.pending.clear(request_id)

    async def _ask_agent(self, query: str, request_id: str, decision: RoutingDecision) -> PipelineResult:
        runtime = self.runtime
        if runtime is None:
            raise AgentUnavailableError()

        agent, instruction = agent_instruction(decision, query)
        tools = build_request_registry(self.data_tools, self.pending, request_id)

        response = await self.executor.execute(
            lambda: runtime.ask(instruction, agent=agent, tools=tools),
            operation_name=f"agent:{agent}",
        )
        transactions = self.pending.take(request_id)

        return PipelineResult(
            response=response,
            transactions=transactions or None,
            requires_approval=bool(transactions),
            decision=decision,
        )

    def _fallback(
        self,
        query: str,
        request_id: str,
        decision: RoutingDecision,
        error: Exception,
    ) -> PipelineResult:
        context = classify_error(error)
        self.logger.error(
            f"[{request_id}] Agent call failed ({context.category.value}): {error}"
        )

        if decision.params is not None and decision.params.action == "deposit":
            amount = fallback_amount(decision, query)
            try:
                transactions = build_transaction_params(StrategyAction(
                    action="deposit",
                    amount=amount,
                    protocol=DEFAULT_PROTOCOL,
                    strategy=DEFAULT_STRATEGY,
                ))
            except TransactionBuildError as e:
                self.logger.warning(f"[{request_id}] Fallback deposit build failed: {e.message}")
            else:
                return PipelineResult(
                    response=(
                        f"{RESEARCH_DEPOSIT_FALLBACK}\n\n"
                        f"Transaction ready: Approve {amount} USDC + Deposit to {DEFAULT_PROTOCOL}"
                    ),
                    transactions=transactions,
                    requires_approval=True,
                    decision=decision,
                )

        if context.category in (ErrorCategory.AUTHENTICATION, ErrorCategory.UNAVAILABLE):
            response = context.user_message
        else:
            response = RESEARCH_FALLBACK

        return PipelineResult(
            response=response,
            transactions=None,
            requires_approval=False,
            decision=decision,
        )
