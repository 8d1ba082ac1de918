"""
Direct message service.

Handles sending messages between two users, fetching a conversation
(newest first, paginated) and read-tracking. Fetching a conversation marks
the other user's messages to the viewer as read; that update is best-effort
and never fails the fetch.
"""

from typing import List, Dict, Optional
import os
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func, and_, or_
from fairway.database.models import DirectMessage, NotificationType
from fairway.services import connection_service, notification_service, user_service
from fairway.services.exceptions import InvalidInputError, NotFoundError, PermissionDeniedError
from fairway.utils.best_effort import best_effort
from fairway.utils.datetime_utils import utcnow
import logging

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50


def messaging_requires_connection() -> bool:
    """Whether sending requires an accepted connection (MESSAGING_REQUIRES_CONNECTION)."""
    return os.getenv("MESSAGING_REQUIRES_CONNECTION", "false").lower() == "true"


async def send_message(
    session: AsyncSession, sender_id: int, recipient_id: Optional[int], body: Optional[str]
) -> Dict:
    """
    Send a direct message and notify the recipient.

    Args:
        session: Database session
        sender_id: User sending the message
        recipient_id: User receiving the message
        body: Message text (stored trimmed)

    Returns:
        Dict with the stored message

    Raises:
        InvalidInputError: If recipient is missing, equals the sender, or body is blank
        NotFoundError: If the recipient does not exist
        PermissionDeniedError: If messaging requires a connection and none is accepted
    """
    text = (body or "").strip()
    if not recipient_id or not text:
        raise InvalidInputError("Recipient ID and message are required")
    if recipient_id == sender_id:
        raise InvalidInputError("Cannot send a message to yourself")

    if not await user_service.user_exists(session, recipient_id):
        raise NotFoundError("Recipient not found")

    if messaging_requires_connection() and not await connection_service.are_connected(
        session, sender_id, recipient_id
    ):
        raise PermissionDeniedError("You must be connected to send messages")

    message = DirectMessage(
        sender_id=sender_id,
        recipient_id=recipient_id,
        message=text,
        is_read=False,
    )
    session.add(message)
    await session.flush()
    await session.commit()
    await session.refresh(message)

    formatted = (await _format_messages_batch(session, [message]))[0]
    sender_name = user_service.display_name(formatted["sender"])
    await best_effort(
        "new message notification",
        notification_service.send_notification(
            user_id=recipient_id,
            type=NotificationType.NEW_MESSAGE.value,
            title="New Message",
            message=f"You have a new message from {sender_name}",
            data={"message_id": message.id, "sender_id": sender_id},
        ),
    )
    return formatted


async def get_messages(
    session: AsyncSession,
    user_id: int,
    other_user_id: Optional[int],
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> List[Dict]:
    """
    Get the conversation between two users, newest first.

    Messages from other_user_id to user_id are marked read after the page is
    built, so the returned page shows the state before this fetch.

    Args:
        session: Database session
        user_id: Viewing user
        other_user_id: The other side of the conversation
        limit: Maximum number of messages to return
        offset: Number of messages to skip

    Returns:
        List of message dicts with sender/recipient summaries

    Raises:
        InvalidInputError: If other_user_id is missing or pagination is invalid
    """
    if not other_user_id:
        raise InvalidInputError("User ID parameter is required")
    if limit < 1 or offset < 0:
        raise InvalidInputError("limit must be positive and offset non-negative")

    result = await session.execute(
        select(DirectMessage)
        .where(
            or_(
                and_(
                    DirectMessage.sender_id == user_id,
                    DirectMessage.recipient_id == other_user_id,
                ),
                and_(
                    DirectMessage.sender_id == other_user_id,
                    DirectMessage.recipient_id == user_id,
                ),
            )
        )
        .order_by(DirectMessage.created_at.desc(), DirectMessage.id.desc())
        .limit(limit)
        .offset(offset)
        .execution_options(populate_existing=True)
    )
    messages = result.scalars().all()
    formatted = await _format_messages_batch(session, messages)

    await best_effort(
        "mark messages read",
        mark_messages_read(session, user_id, other_user_id),
        session=session,
    )
    return formatted


async def mark_messages_read(session: AsyncSession, user_id: int, other_user_id: int) -> int:
    """
    Mark every unread message from other_user_id to user_id as read.

    Idempotent: only rows with is_read = false are touched.

    Returns:
        Number of messages newly marked as read
    """
    result = await session.execute(
        update(DirectMessage)
        .where(
            and_(
                DirectMessage.recipient_id == user_id,
                DirectMessage.sender_id == other_user_id,
                DirectMessage.is_read == False,  # noqa: E712
            )
        )
        .values(is_read=True, read_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    return result.rowcount


async def get_unread_message_count(session: AsyncSession, user_id: int) -> int:
    """
    Get count of unread direct messages addressed to a user.

    Args:
        session: Database session
        user_id: ID of the user

    Returns:
        Integer count of unread messages
    """
    result = await session.execute(
        select(func.count())
        .select_from(DirectMessage)
        .where(
            and_(
                DirectMessage.recipient_id == user_id,
                DirectMessage.is_read == False,  # noqa: E712
            )
        )
    )
    return result.scalar_one() or 0


async def _format_messages_batch(
    session: AsyncSession, messages: List[DirectMessage]
) -> List[Dict]:
    """Format DirectMessage rows with sender/recipient summaries in one user query."""
    if not messages:
        return []

    user_map = await user_service.get_user_summaries(
        session, [m.sender_id for m in messages] + [m.recipient_id for m in messages]
    )
    return [
        {
            "id": m.id,
            "sender_id": m.sender_id,
            "recipient_id": m.recipient_id,
            "message": m.message,
            "is_read": m.is_read,
            "read_at": m.read_at.isoformat() if m.read_at else None,
            "created_at": m.created_at.isoformat() if m.created_at else None,
            "sender": user_map.get(m.sender_id),
            "recipient": user_map.get(m.recipient_id),
        }
        for m in messages
    ]
