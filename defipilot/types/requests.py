from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class QueryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Optional so a missing query is reported as 400 instead of a schema error
    query: Optional[str] = Field(default=None, description="Natural-language request")
    session_id: Optional[str] = Field(default=None, alias="sessionId", description="Client-supplied session id")


class ApproveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(default=None, alias="sessionId")
    approved: bool = Field(default=False, description="True to release transactions, False to cancel")
