from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .transactions import StrategyAction, TransactionParams


class QueryType(str, Enum):
    """Intent kinds produced by the query router."""

    SIMPLE_DEPOSIT = "simple_deposit"      # "Deposit 100 USDC to Morpho"
    SIMPLE_WITHDRAW = "simple_withdraw"    # "Withdraw from position 0"
    PORTFOLIO_CHECK = "portfolio_check"    # "Show my portfolio"
    RESEARCH_SIMPLE = "research_simple"    # "What are top protocols on Base?"
    RESEARCH_COMPLEX = "research_complex"  # "Research and compare yields"
    STRATEGY_COMPLEX = "strategy_complex"  # "Analyze and deposit to safest"
    CONVERSATION = "conversation"          # "Hello", "Thanks"
    UNKNOWN = "unknown"


class RoutingDecision(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: QueryType
    confidence: float = Field(ge=0.0, le=1.0)
    params: Optional[StrategyAction] = None
    should_bypass_agent: bool = Field(default=False, alias="shouldBypassAgent")
    agent_to_use: Optional[str] = Field(default=None, alias="agentToUse")
    reasoning_needed: bool = Field(default=False, alias="reasoningNeeded")


class DirectResponse(BaseModel):
    """Answer produced without consulting the agent."""

    response: str
    transactions: Optional[List[TransactionParams]] = None
    requires_approval: bool = False
