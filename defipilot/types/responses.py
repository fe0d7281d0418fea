from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .transactions import TransactionParams


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ResponseMetadata(_CamelModel):
    duration: Optional[int] = None
    timestamp: str
    transaction_count: int = Field(default=0, alias="transactionCount")


class QueryResponse(_CamelModel):
    success: bool = True
    response: str
    session_id: str = Field(alias="sessionId")
    requires_approval: bool = Field(alias="requiresApproval")
    transactions: Optional[List[TransactionParams]] = None
    metadata: ResponseMetadata


class ApproveResponse(_CamelModel):
    success: bool = True
    approved: bool
    message: str
    transactions: Optional[List[TransactionParams]] = None
    metadata: Optional[ResponseMetadata] = None


class SessionView(_CamelModel):
    query: str
    has_transactions: bool = Field(alias="hasTransactions")
    transaction_count: int = Field(alias="transactionCount")
    approved: bool
    timestamp: str
    duration: Optional[int] = None


class SessionResponse(_CamelModel):
    success: bool = True
    session: SessionView


class ErrorResponse(_CamelModel):
    error: str
    details: Optional[str] = None
    request_id: Optional[str] = Field(default=None, alias="requestId")
