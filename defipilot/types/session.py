from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from .transactions import TransactionParams


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class Session(BaseModel):
    query: str
    response: str
    transactions: Optional[List[TransactionParams]] = None
    timestamp: str = Field(default_factory=utc_timestamp)
    approved: bool = False
    duration: Optional[int] = Field(default=None, description="Query handling time in milliseconds")
