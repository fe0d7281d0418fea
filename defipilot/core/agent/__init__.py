from .profiles import COORDINATOR, DEFAULT_PROFILES, MARKET_ANALYST, STRATEGY_AGENT, AgentProfile
from .runtime import AgentRuntime, create_agent_runtime
from .tools import DataTools, ToolExecutor, ToolRegistry, build_request_registry

__all__ = [
    "AgentProfile",
    "AgentRuntime",
    "COORDINATOR",
    "DEFAULT_PROFILES",
    "DataTools",
    "MARKET_ANALYST",
    "STRATEGY_AGENT",
    "ToolExecutor",
    "ToolRegistry",
    "build_request_registry",
    "create_agent_runtime",
]
