"""
Unit tests for connection service.

Tests the request/accept/decline lifecycle, pair uniqueness in both
directions, actor checks, listing, and notification side effects.
"""

import asyncio

import pytest
from sqlalchemy import select, func
from fairway.services import connection_service
from fairway.services.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
)
from fairway.database.models import Connection, NotificationType


# ──────────────────────────────────────────────────────────────
# Create
# ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_connection(db_session, users, sent_notifications):
    """Creating a connection stores a pending request and notifies the recipient."""
    result = await connection_service.create_connection(db_session, users["alice"], users["bob"])

    assert result["id"] > 0
    assert result["requester_id"] == users["alice"]
    assert result["recipient_id"] == users["bob"]
    assert result["status"] == "pending"
    assert result["responded_at"] is None
    assert result["requester"]["username"] == "alice"
    assert result["recipient"]["username"] == "bob"

    assert len(sent_notifications) == 1
    notification = sent_notifications[0]
    assert notification["user_id"] == users["bob"]
    assert notification["type"] == NotificationType.CONNECTION_REQUEST.value
    assert notification["title"] == "New Connection Request"
    assert notification["message"] == "Alice Alpha wants to connect with you!"


@pytest.mark.asyncio
async def test_notification_uses_username_without_full_name(db_session, users, sent_notifications):
    """Requesters without a first/last name are named by username."""
    await connection_service.create_connection(db_session, users["dave"], users["bob"])
    assert sent_notifications[0]["message"] == "dave wants to connect with you!"


@pytest.mark.asyncio
async def test_cannot_connect_to_yourself(db_session, users):
    """A self-connection is invalid input."""
    with pytest.raises(InvalidInputError, match="yourself"):
        await connection_service.create_connection(db_session, users["alice"], users["alice"])


@pytest.mark.asyncio
async def test_missing_recipient_is_invalid(db_session, users):
    """A missing recipient id is invalid input."""
    with pytest.raises(InvalidInputError, match="Recipient ID is required"):
        await connection_service.create_connection(db_session, users["alice"], None)


@pytest.mark.asyncio
async def test_unknown_recipient_not_found(db_session, users):
    """Requests to a user with no profile are rejected."""
    with pytest.raises(NotFoundError):
        await connection_service.create_connection(db_session, users["alice"], 99999)


@pytest.mark.asyncio
async def test_duplicate_request_conflicts(db_session, users, sent_notifications):
    """A second request in the same direction conflicts and does not notify."""
    await connection_service.create_connection(db_session, users["alice"], users["bob"])

    with pytest.raises(ConflictError):
        await connection_service.create_connection(db_session, users["alice"], users["bob"])

    assert len(sent_notifications) == 1


@pytest.mark.asyncio
async def test_reverse_request_conflicts(db_session, users):
    """A request in the opposite direction of an existing one also conflicts."""
    await connection_service.create_connection(db_session, users["alice"], users["bob"])

    with pytest.raises(ConflictError):
        await connection_service.create_connection(db_session, users["bob"], users["alice"])

    result = await db_session.execute(select(func.count()).select_from(Connection))
    assert result.scalar_one() == 1


@pytest.mark.asyncio
async def test_concurrent_opposite_requests_store_one_connection(
    db_session, session_factory, users, sent_notifications
):
    """A->B and B->A sent at the same time leave exactly one connection row."""

    async def request(requester_id, recipient_id):
        async with session_factory() as session:
            try:
                await connection_service.create_connection(session, requester_id, recipient_id)
                return "ok"
            except ConflictError:
                return "conflict"

    outcomes = await asyncio.gather(
        request(users["alice"], users["bob"]),
        request(users["bob"], users["alice"]),
    )

    assert sorted(outcomes) == ["conflict", "ok"]
    result = await db_session.execute(select(func.count()).select_from(Connection))
    assert result.scalar_one() == 1


@pytest.mark.asyncio
async def test_create_succeeds_when_notification_fails(db_session, users, failing_notifications):
    """A failing notification service does not fail the request."""
    result = await connection_service.create_connection(db_session, users["alice"], users["bob"])
    assert result["status"] == "pending"

    stored = await connection_service.get_connection_between(db_session, users["bob"], users["alice"])
    assert stored is not None


# ──────────────────────────────────────────────────────────────
# Accept / decline
# ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_accept_connection(db_session, users, sent_notifications):
    """The recipient can accept; the requester is notified."""
    created = await connection_service.create_connection(db_session, users["alice"], users["bob"])

    result = await connection_service.accept_connection(db_session, created["id"], users["bob"])

    assert result["status"] == "accepted"
    assert result["responded_at"] is not None
    assert await connection_service.are_connected(db_session, users["alice"], users["bob"])
    assert await connection_service.are_connected(db_session, users["bob"], users["alice"])

    accepted = sent_notifications[-1]
    assert accepted["user_id"] == users["alice"]
    assert accepted["type"] == NotificationType.CONNECTION_ACCEPTED.value


@pytest.mark.asyncio
async def test_requester_cannot_accept(db_session, users):
    """Only the recipient may respond."""
    created = await connection_service.create_connection(db_session, users["alice"], users["bob"])

    with pytest.raises(PermissionDeniedError):
        await connection_service.accept_connection(db_session, created["id"], users["alice"])

    with pytest.raises(PermissionDeniedError):
        await connection_service.decline_connection(db_session, created["id"], users["carol"])


@pytest.mark.asyncio
async def test_accept_twice_conflicts(db_session, users):
    """Accepted is terminal; a second response conflicts."""
    created = await connection_service.create_connection(db_session, users["alice"], users["bob"])
    await connection_service.accept_connection(db_session, created["id"], users["bob"])

    with pytest.raises(ConflictError):
        await connection_service.accept_connection(db_session, created["id"], users["bob"])
    with pytest.raises(ConflictError):
        await connection_service.decline_connection(db_session, created["id"], users["bob"])


@pytest.mark.asyncio
async def test_decline_connection_blocks_new_request(db_session, users):
    """Declined is terminal and keeps the pair occupied."""
    created = await connection_service.create_connection(db_session, users["alice"], users["bob"])

    result = await connection_service.decline_connection(db_session, created["id"], users["bob"])
    assert result["status"] == "declined"
    assert not await connection_service.are_connected(db_session, users["alice"], users["bob"])

    with pytest.raises(ConflictError):
        await connection_service.create_connection(db_session, users["alice"], users["bob"])


@pytest.mark.asyncio
async def test_respond_to_missing_connection(db_session, users):
    """Responding to an unknown connection id is not found."""
    with pytest.raises(NotFoundError):
        await connection_service.accept_connection(db_session, 424242, users["bob"])


# ──────────────────────────────────────────────────────────────
# List
# ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_list_connections_both_sides(db_session, users):
    """A user sees connections they sent and received, newest first."""
    first = await connection_service.create_connection(db_session, users["alice"], users["bob"])
    second = await connection_service.create_connection(db_session, users["carol"], users["alice"])

    connections = await connection_service.list_connections(db_session, users["alice"])

    assert [c["id"] for c in connections] == [second["id"], first["id"]]
    assert connections[0]["requester"]["username"] == "carol"
    assert connections[1]["recipient"]["username"] == "bob"

    assert await connection_service.list_connections(db_session, users["dave"]) == []


@pytest.mark.asyncio
async def test_list_connections_status_filter(db_session, users):
    """The status filter narrows results."""
    first = await connection_service.create_connection(db_session, users["alice"], users["bob"])
    await connection_service.create_connection(db_session, users["alice"], users["carol"])
    await connection_service.accept_connection(db_session, first["id"], users["bob"])

    accepted = await connection_service.list_connections(db_session, users["alice"], "accepted")
    pending = await connection_service.list_connections(db_session, users["alice"], "pending")

    assert [c["id"] for c in accepted] == [first["id"]]
    assert len(pending) == 1
    assert pending[0]["recipient_id"] == users["carol"]


@pytest.mark.asyncio
async def test_list_connections_unknown_filter(db_session, users):
    """Unknown status filters are invalid input."""
    with pytest.raises(InvalidInputError):
        await connection_service.list_connections(db_session, users["alice"], "blocked")
