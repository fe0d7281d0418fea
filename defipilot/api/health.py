from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..services import AppServices
from ..types import utc_timestamp
from .deps import get_services

router = APIRouter()


@router.get("/health")
async def health_check(services: AppServices = Depends(get_services)) -> Dict[str, Any]:
    """Liveness probe with agent readiness and session count"""

    return {
        "status": "ok",
        "agent": "ready" if services.agent_ready else "unavailable",
        "timestamp": utc_timestamp(),
        "sessions": len(services.sessions),
    }
