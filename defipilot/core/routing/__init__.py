from .replies import QUICK_REPLIES, build_direct_response, quick_reply
from .router import (
    COORDINATOR_AGENT,
    DEFAULT_PROTOCOL,
    DEFAULT_STRATEGY,
    ROUTING_RULES,
    STRATEGY_AGENT,
    classify,
    extract_amount,
    extract_position_id,
)

__all__ = [
    "classify",
    "build_direct_response",
    "quick_reply",
    "extract_amount",
    "extract_position_id",
    "QUICK_REPLIES",
    "ROUTING_RULES",
    "COORDINATOR_AGENT",
    "STRATEGY_AGENT",
    "DEFAULT_PROTOCOL",
    "DEFAULT_STRATEGY",
]
