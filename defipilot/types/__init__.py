from .requests import ApproveRequest, QueryRequest
from .responses import (
    ApproveResponse,
    ErrorResponse,
    QueryResponse,
    ResponseMetadata,
    SessionResponse,
    SessionView,
)
from .routing import DirectResponse, QueryType, RoutingDecision
from .session import Session, utc_timestamp
from .transactions import StrategyAction, StrategyActionType, TransactionParams

__all__ = [
    "StrategyAction",
    "StrategyActionType",
    "TransactionParams",
    "QueryType",
    "RoutingDecision",
    "DirectResponse",
    "Session",
    "utc_timestamp",
    "QueryRequest",
    "ApproveRequest",
    "QueryResponse",
    "ApproveResponse",
    "ResponseMetadata",
    "SessionView",
    "SessionResponse",
    "ErrorResponse",
]
