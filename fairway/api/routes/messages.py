"""Direct message route handlers."""

import logging

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fairway.api.auth_dependencies import require_user
from fairway.api.routes import WRITE_RATE_LIMIT, limiter, to_http_exception
from fairway.database.db import get_db_session
from fairway.models.schemas import (
    MessageCreate,
    MessageListResponse,
    MessageSentResponse,
    UnreadCountResponse,
)
from fairway.services import message_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/api/messages",
    response_model=MessageSentResponse,
    response_model_by_alias=True,
)
@limiter.limit(WRITE_RATE_LIMIT)
async def send_message(
    request: Request,
    payload: MessageCreate,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Send a direct message to another user."""
    try:
        sent = await message_service.send_message(
            session, user["id"], payload.recipient_id, payload.message
        )
        return {"message": "Message sent", "sentMessage": sent}
    except Exception as e:
        raise to_http_exception(e, "sending message")


@router.get("/api/messages/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Get the number of unread direct messages for the current user."""
    try:
        count = await message_service.get_unread_message_count(session, user["id"])
        return {"count": count}
    except Exception as e:
        raise to_http_exception(e, "getting unread count")


@router.get("/api/messages", response_model=MessageListResponse)
async def get_messages(
    user_id: int = Query(None, alias="user"),
    limit: int = Query(message_service.DEFAULT_PAGE_SIZE, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Get the conversation with another user, newest first.

    Every unread message from that user to the caller is marked read
    afterwards, not only those on the returned page. The page shows the state
    before this fetch.
    """
    try:
        messages = await message_service.get_messages(
            session, user["id"], user_id, limit=limit, offset=offset
        )
        return {"messages": messages}
    except Exception as e:
        raise to_http_exception(e, "fetching messages")
