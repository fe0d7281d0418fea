import time
import uuid

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..services import AppServices
from ..types import (
    ApproveRequest,
    ApproveResponse,
    ErrorResponse,
    QueryRequest,
    QueryResponse,
    ResponseMetadata,
    Session,
    SessionResponse,
    SessionView,
    utc_timestamp,
)
from .deps import get_request_id, get_services

logger = structlog.stdlib.get_logger(__name__)

router = APIRouter(prefix="/api")

APPROVED_MESSAGE = "Approved. Frontend will execute transactions via user wallet."
CANCELLED_MESSAGE = "Execution cancelled by user"


def _error(status_code: int, error: str, **extra) -> JSONResponse:
    body = ErrorResponse(error=error, **extra).model_dump(by_alias=True, exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


def _new_session_id() -> str:
    return f"session_{uuid.uuid4().hex[:12]}"


@router.post("/query", response_model=QueryResponse, response_model_exclude_none=True)
async def query_endpoint(
    body: QueryRequest,
    services: AppServices = Depends(get_services),
    request_id: str = Depends(get_request_id),
):
    """Answer a chat query, building transactions when the user asks for them."""

    if not body.query or not body.query.strip():
        return _error(400, "Query is required")

    started = time.perf_counter()
    try:
        result = await services.pipeline.handle(body.query, request_id)
    except Exception as e:
        logger.exception("query_failed", error=str(e))
        return _error(500, "Query failed", details=str(e), request_id=request_id)

    duration = int((time.perf_counter() - started) * 1000)
    timestamp = utc_timestamp()
    session_id = body.session_id or _new_session_id()
    transactions = result.transactions or None

    services.sessions.put(session_id, Session(
        query=body.query,
        response=result.response,
        transactions=transactions,
        timestamp=timestamp,
        duration=duration,
    ))

    logger.info(
        "query_handled",
        query_type=result.decision.type.value,
        bypassed=result.decision.should_bypass_agent,
        transaction_count=len(transactions or []),
        duration_ms=duration,
    )

    return QueryResponse(
        response=result.response,
        session_id=session_id,
        requires_approval=result.requires_approval,
        transactions=transactions,
        metadata=ResponseMetadata(
            duration=duration,
            timestamp=timestamp,
            transaction_count=len(transactions or []),
        ),
    )


@router.post("/approve", response_model=ApproveResponse, response_model_exclude_none=True)
async def approve_endpoint(
    body: ApproveRequest,
    services: AppServices = Depends(get_services),
):
    """Approve or cancel the transactions proposed in a session."""

    if not body.session_id:
        return _error(400, "Session ID required")

    if services.sessions.get(body.session_id) is None:
        return _error(404, "Session not found")

    if not body.approved:
        logger.info("execution_cancelled", session_id=body.session_id)
        return ApproveResponse(approved=False, message=CANCELLED_MESSAGE)

    session = services.sessions.approve(body.session_id)
    transaction_count = len(session.transactions or [])
    logger.info("execution_approved", session_id=body.session_id, transaction_count=transaction_count)

    return ApproveResponse(
        approved=True,
        message=APPROVED_MESSAGE,
        transactions=session.transactions,
        metadata=ResponseMetadata(timestamp=utc_timestamp(), transaction_count=transaction_count),
    )


@router.get("/session/{session_id}", response_model=SessionResponse, response_model_exclude_none=True)
async def session_endpoint(session_id: str, services: AppServices = Depends(get_services)):
    session = services.sessions.get(session_id)
    if session is None:
        return _error(404, "Session not found")

    return SessionResponse(session=SessionView(
        query=session.query,
        has_transactions=bool(session.transactions),
        transaction_count=len(session.transactions or []),
        approved=session.approved,
        timestamp=session.timestamp,
        duration=session.duration,
    ))
