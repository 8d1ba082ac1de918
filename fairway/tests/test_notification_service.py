"""
Unit tests for the notification service client.

The external service is replaced with an httpx.MockTransport.
"""

import json

import httpx
import pytest
from fairway.services import notification_service
from fairway.services.exceptions import DependencyFailureError


def _use_transport(monkeypatch, handler):
    """Route notification HTTP calls through a mock transport."""

    def fake_get_client(base_url):
        return httpx.AsyncClient(base_url=base_url, transport=httpx.MockTransport(handler))

    monkeypatch.setenv("NOTIFICATION_SERVICE_URL", "http://notifications.test")
    monkeypatch.setattr(notification_service, "_get_client", fake_get_client)


@pytest.mark.asyncio
async def test_send_notification_posts_payload(monkeypatch):
    """A notification is posted as JSON to /notifications."""
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(201, json={"id": 1})

    _use_transport(monkeypatch, handler)

    sent = await notification_service.send_notification(
        user_id=7,
        type="new_message",
        title="New Message",
        message="You have a new message from Alice",
        data={"message_id": 3},
    )

    assert sent is True
    assert len(requests) == 1
    assert requests[0].method == "POST"
    assert requests[0].url.path == "/notifications"
    assert json.loads(requests[0].content) == {
        "user_id": 7,
        "type": "new_message",
        "title": "New Message",
        "message": "You have a new message from Alice",
        "data": {"message_id": 3},
    }


@pytest.mark.asyncio
async def test_send_notification_skipped_without_url(monkeypatch):
    """Without NOTIFICATION_SERVICE_URL nothing is dispatched."""
    monkeypatch.delenv("NOTIFICATION_SERVICE_URL", raising=False)

    def fail_get_client(base_url):
        raise AssertionError("client should not be created")

    monkeypatch.setattr(notification_service, "_get_client", fail_get_client)

    assert await notification_service.send_notification(1, "new_message", "t", "m") is False


@pytest.mark.asyncio
async def test_send_notification_rejected(monkeypatch):
    """A non-2xx response is a dependency failure."""
    _use_transport(monkeypatch, lambda request: httpx.Response(503))

    with pytest.raises(DependencyFailureError, match="503"):
        await notification_service.send_notification(1, "new_message", "t", "m")


@pytest.mark.asyncio
async def test_send_notification_unreachable(monkeypatch):
    """Transport errors are dependency failures."""

    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    _use_transport(monkeypatch, handler)

    with pytest.raises(DependencyFailureError, match="unreachable"):
        await notification_service.send_notification(1, "new_message", "t", "m")


@pytest.mark.asyncio
async def test_send_notification_validation():
    """Required fields are checked before any dispatch."""
    with pytest.raises(ValueError, match="user_id is required"):
        await notification_service.send_notification(None, "new_message", "t", "m")
    with pytest.raises(ValueError, match="type is required"):
        await notification_service.send_notification(1, "", "t", "m")
    with pytest.raises(ValueError, match="title is required"):
        await notification_service.send_notification(1, "new_message", "", "m")
    with pytest.raises(ValueError, match="message is required"):
        await notification_service.send_notification(1, "new_message", "t", "")
