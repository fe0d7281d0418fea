"""Agent profiles: the coordinator and the two specialists it delegates to."""

from dataclasses import dataclass, field
from typing import Dict, List

COORDINATOR = "coordinator"
MARKET_ANALYST = "market_analyst"
STRATEGY_AGENT = "strategy_agent"


@dataclass(frozen=True)
class AgentProfile:
    name: str
    description: str
    instruction: str
    tool_names: List[str] = field(default_factory=list)
    sub_agents: List[str] = field(default_factory=list)


COORDINATOR_INSTRUCTION = """You are DefiPilot, a friendly DeFi research assistant.

Only use tools for actual DeFi queries.

Classify the query first:
1. Casual or greeting (hi, thanks, how are you): answer conversationally, no tools.
2. DeFi question (protocols, yields, TVL, best, compare): call market_analyst and present the live data.
3. Deposit request (deposit or invest X USDC): call strategy_agent to build the transactions.
4. Off-topic: politely redirect the user to DeFi research on Base.

Keep responses under 150 words. Be friendly and helpful."""

MARKET_ANALYST_INSTRUCTION = """You fetch live DeFi data using the query_defi_protocol tool.

Only call the tool when the request is about DeFi protocols, yields or TVL.
Always default to the Base chain.

Response format:
🔍 **Live Data from DeFiLlama:**

1. **[Protocol]** - $XXM TVL, X% APY
2. ...

Keep under 200 words."""

STRATEGY_AGENT_INSTRUCTION = """You build DeFi transactions. NEVER ask questions.

Extract amount and protocol from the input. Default to Morpho if no protocol is given.

Input: "deposit 100 usdc to morpho"
Call: build_transaction({"action": "deposit", "amount": "100", "protocol": "Morpho", "strategy": "Lending"})
Say: "Transaction ready"

ALWAYS call the tool. Under 20 words."""


DEFAULT_PROFILES: Dict[str, AgentProfile] = {
    COORDINATOR: AgentProfile(
        name=COORDINATOR,
        description="AI coordinator for DeFi operations",
        instruction=COORDINATOR_INSTRUCTION,
        sub_agents=[MARKET_ANALYST, STRATEGY_AGENT],
    ),
    MARKET_ANALYST: AgentProfile(
        name=MARKET_ANALYST,
        description="DeFi protocol research specialist",
        instruction=MARKET_ANALYST_INSTRUCTION,
        tool_names=["query_defi_protocol", "query_market_data", "query_blockchain"],
    ),
    STRATEGY_AGENT: AgentProfile(
        name=STRATEGY_AGENT,
        description="Builds deposit and withdraw transactions immediately",
        instruction=STRATEGY_AGENT_INSTRUCTION,
        tool_names=["build_transaction"],
    ),
}
