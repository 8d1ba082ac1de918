"""Connection route handlers."""

import logging

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fairway.api.auth_dependencies import require_user
from fairway.api.routes import WRITE_RATE_LIMIT, limiter, to_http_exception
from fairway.database.db import get_db_session
from fairway.models.schemas import (
    ConnectionCreate,
    ConnectionListResponse,
    ConnectionResult,
)
from fairway.services import connection_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/connections", response_model=ConnectionResult)
@limiter.limit(WRITE_RATE_LIMIT)
async def create_connection(
    request: Request,
    payload: ConnectionCreate,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Send a connection request to another user."""
    try:
        connection = await connection_service.create_connection(
            session, user["id"], payload.recipient_id
        )
        return {"message": "Connection request sent", "connection": connection}
    except Exception as e:
        raise to_http_exception(e, "creating connection")


@router.get("/api/connections", response_model=ConnectionListResponse)
async def list_connections(
    status: str = Query("all"),
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Get the current user's connections, newest first."""
    try:
        connections = await connection_service.list_connections(session, user["id"], status)
        return {"connections": connections}
    except Exception as e:
        raise to_http_exception(e, "fetching connections")


@router.post("/api/connections/{connection_id}/accept", response_model=ConnectionResult)
async def accept_connection(
    connection_id: int,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Accept a pending connection request sent to the current user."""
    try:
        connection = await connection_service.accept_connection(session, connection_id, user["id"])
        return {"message": "Connection accepted", "connection": connection}
    except Exception as e:
        raise to_http_exception(e, "accepting connection")


@router.post("/api/connections/{connection_id}/decline", response_model=ConnectionResult)
async def decline_connection(
    connection_id: int,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Decline a pending connection request sent to the current user."""
    try:
        connection = await connection_service.decline_connection(
            session, connection_id, user["id"]
        )
        return {"message": "Connection declined", "connection": connection}
    except Exception as e:
        raise to_http_exception(e, "declining connection")
