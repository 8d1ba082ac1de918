"""
Connection service for managing connection requests between users.

Handles sending requests, accepting/declining them, and listing a user's
connections. At most one connection exists per unordered pair of users;
the pair is stored normalized (user_low_id < user_high_id) and protected by
a unique constraint, so concurrent requests in either direction cannot both
succeed.
"""

from typing import List, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_, or_
from fairway.database.db import dialect_insert
from fairway.database.models import Connection, ConnectionStatus, NotificationType
from fairway.services import notification_service, user_service
from fairway.services.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
)
from fairway.utils.best_effort import best_effort
from fairway.utils.datetime_utils import utcnow
import logging

logger = logging.getLogger(__name__)

STATUS_FILTERS = {"all"} | {s.value for s in ConnectionStatus}


def _normalize_pair(user_id: int, other_user_id: int):
    """Return the pair as (low, high) so both directions map to one key."""
    return (user_id, other_user_id) if user_id < other_user_id else (other_user_id, user_id)


async def get_connection_between(
    session: AsyncSession, user_id: int, other_user_id: int
) -> Optional[Connection]:
    """
    Get the connection between exactly these two users, in either direction.

    Args:
        session: Database session
        user_id: First user ID
        other_user_id: Second user ID

    Returns:
        Connection or None
    """
    low, high = _normalize_pair(user_id, other_user_id)
    result = await session.execute(
        select(Connection).where(
            and_(Connection.user_low_id == low, Connection.user_high_id == high)
        ).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def are_connected(session: AsyncSession, user_id: int, other_user_id: int) -> bool:
    """Check if two users have an accepted connection."""
    connection = await get_connection_between(session, user_id, other_user_id)
    return connection is not None and connection.status == ConnectionStatus.ACCEPTED.value


async def create_connection(
    session: AsyncSession, requester_id: int, recipient_id: Optional[int]
) -> Dict:
    """
    Send a connection request from one user to another.

    The insert uses ON CONFLICT DO NOTHING on the normalized pair, so an
    existing connection in any status (or a concurrent request from the
    other side) is detected by the database rather than a pre-check.
    Notifies the recipient after the request is committed.

    Args:
        session: Database session
        requester_id: User sending the request
        recipient_id: User receiving the request

    Returns:
        Dict with connection data

    Raises:
        InvalidInputError: If an id is missing or both ids are the same
        NotFoundError: If the recipient does not exist
        ConflictError: If a connection already exists between the users
    """
    if not requester_id:
        raise InvalidInputError("Requester ID is required")
    if not recipient_id:
        raise InvalidInputError("Recipient ID is required")
    if requester_id == recipient_id:
        raise InvalidInputError("Cannot send a connection request to yourself")

    if not await user_service.user_exists(session, recipient_id):
        raise NotFoundError("Recipient not found")

    low, high = _normalize_pair(requester_id, recipient_id)
    stmt = (
        dialect_insert(session, Connection)
        .values(
            requester_id=requester_id,
            recipient_id=recipient_id,
            user_low_id=low,
            user_high_id=high,
            status=ConnectionStatus.PENDING.value,
        )
        .on_conflict_do_nothing(index_elements=["user_low_id", "user_high_id"])
        .returning(Connection.id)
    )
    result = await session.execute(stmt)
    connection_id = result.scalar_one_or_none()
    if connection_id is None:
        raise ConflictError("A connection already exists between these users")

    await session.commit()
    connection = await session.get(Connection, connection_id, populate_existing=True)
    logger.info(f"User {requester_id} requested a connection with user {recipient_id}")

    formatted = await _format_connection(session, connection)
    requester_name = user_service.display_name(formatted["requester"])
    await best_effort(
        "connection request notification",
        notification_service.send_notification(
            user_id=recipient_id,
            type=NotificationType.CONNECTION_REQUEST.value,
            title="New Connection Request",
            message=f"{requester_name} wants to connect with you!",
            data={"connection_id": connection_id, "requester_id": requester_id},
        ),
    )
    return formatted


async def _respond_to_connection(
    session: AsyncSession, connection_id: int, user_id: int, new_status: ConnectionStatus
) -> Connection:
    """
    Move a pending connection to a terminal status on behalf of its recipient.

    Raises:
        NotFoundError: If the connection does not exist
        PermissionDeniedError: If user_id is not the recipient
        ConflictError: If the connection is no longer pending
    """
    connection = await session.get(Connection, connection_id, populate_existing=True)
    if not connection:
        raise NotFoundError("Connection not found")
    if connection.recipient_id != user_id:
        raise PermissionDeniedError("Only the recipient can respond to this connection request")
    if connection.status != ConnectionStatus.PENDING.value:
        raise ConflictError("Connection request is no longer pending")

    # Conditional update: a concurrent response finds no pending row
    result = await session.execute(
        update(Connection)
        .where(
            and_(
                Connection.id == connection_id,
                Connection.recipient_id == user_id,
                Connection.status == ConnectionStatus.PENDING.value,
            )
        )
        .values(status=new_status.value, responded_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await session.rollback()
        raise ConflictError("Connection request is no longer pending")

    await session.commit()
    await session.refresh(connection)
    logger.info(f"User {user_id} {new_status.value} connection {connection_id}")
    return connection


async def accept_connection(session: AsyncSession, connection_id: int, user_id: int) -> Dict:
    """
    Accept a pending connection request and notify the requester.

    Args:
        session: Database session
        connection_id: Connection ID
        user_id: Acting user (must be the recipient)

    Returns:
        Dict with updated connection data
    """
    connection = await _respond_to_connection(
        session, connection_id, user_id, ConnectionStatus.ACCEPTED
    )
    formatted = await _format_connection(session, connection)

    recipient_name = user_service.display_name(formatted["recipient"])
    await best_effort(
        "connection accepted notification",
        notification_service.send_notification(
            user_id=connection.requester_id,
            type=NotificationType.CONNECTION_ACCEPTED.value,
            title="Connection Accepted",
            message=f"{recipient_name} accepted your connection request",
            data={"connection_id": connection.id, "user_id": user_id},
        ),
    )
    return formatted


async def decline_connection(session: AsyncSession, connection_id: int, user_id: int) -> Dict:
    """
    Decline a pending connection request.

    The row is kept with status 'declined', which also blocks the requester
    from sending a new request to the same user.

    Args:
        session: Database session
        connection_id: Connection ID
        user_id: Acting user (must be the recipient)

    Returns:
        Dict with updated connection data
    """
    connection = await _respond_to_connection(
        session, connection_id, user_id, ConnectionStatus.DECLINED
    )
    return await _format_connection(session, connection)


async def list_connections(
    session: AsyncSession, user_id: int, status: str = "all"
) -> List[Dict]:
    """
    Get all connections where the user is either side, newest first.

    Args:
        session: Database session
        user_id: User to list connections for
        status: "all" or a ConnectionStatus value

    Returns:
        List of connection dicts with requester/recipient summaries

    Raises:
        InvalidInputError: If status is not a known filter
    """
    if status not in STATUS_FILTERS:
        raise InvalidInputError(f"Unknown status filter: {status}")

    query = select(Connection).where(
        or_(Connection.requester_id == user_id, Connection.recipient_id == user_id)
    )
    if status != "all":
        query = query.where(Connection.status == status)

    query = query.order_by(Connection.created_at.desc(), Connection.id.desc())
    result = await session.execute(query)
    connections = result.scalars().all()

    return await _format_connections_batch(session, connections)


async def _format_connections_batch(
    session: AsyncSession, connections: List[Connection]
) -> List[Dict]:
    """
    Batch-format Connection ORM objects into response dicts with user summaries.

    Fetches all referenced users in a single query instead of per-connection.
    """
    if not connections:
        return []

    user_map = await user_service.get_user_summaries(
        session,
        [c.requester_id for c in connections] + [c.recipient_id for c in connections],
    )

    return [
        {
            "id": c.id,
            "requester_id": c.requester_id,
            "recipient_id": c.recipient_id,
            "status": c.status,
            "created_at": c.created_at.isoformat() if c.created_at else None,
            "responded_at": c.responded_at.isoformat() if c.responded_at else None,
            "requester": user_map.get(c.requester_id),
            "recipient": user_map.get(c.recipient_id),
        }
        for c in connections
    ]


async def _format_connection(session: AsyncSession, connection: Connection) -> Dict:
    """Format a single Connection via _format_connections_batch."""
    results = await _format_connections_batch(session, [connection])
    return results[0]
