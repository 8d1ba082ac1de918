"""
Notification service client.

Notifications are stored and delivered by an external service. This module
posts (recipient, type, title, message) to it over HTTP. Callers wrap
``send_notification`` in ``best_effort`` so a failing or unreachable service
never fails the request that triggered it.
"""

import logging
import os
from typing import Dict, Optional

import httpx

from fairway.services.exceptions import DependencyFailureError

logger = logging.getLogger(__name__)


def _get_service_url() -> Optional[str]:
    """Read the notification service base URL from the environment."""
    return os.environ.get("NOTIFICATION_SERVICE_URL")


def _get_client(base_url: str) -> httpx.AsyncClient:
    """Build the HTTP client used for a single dispatch."""
    headers = {}
    token = os.environ.get("NOTIFICATION_SERVICE_TOKEN")
    if token:
        headers["Authorization"] = f"Bearer {token}"
    timeout = float(os.environ.get("NOTIFICATION_TIMEOUT_SECONDS", "5"))
    return httpx.AsyncClient(base_url=base_url, headers=headers, timeout=timeout)


async def send_notification(
    user_id: int,
    type: str,
    title: str,
    message: str,
    data: Optional[Dict] = None,
) -> bool:
    """
    Dispatch a single notification to the external notification service.

    Args:
        user_id: ID of the user to notify
        type: Notification type (NotificationType enum value)
        title: Notification title
        message: Notification message text
        data: Optional JSON metadata (ids the client can link to)

    Returns:
        True if the service accepted the notification, False if dispatch is
        disabled (no NOTIFICATION_SERVICE_URL configured)

    Raises:
        ValueError: If required fields are missing
        DependencyFailureError: If the service is unreachable or rejects the request
    """
    if not user_id:
        raise ValueError("user_id is required")
    if not type:
        raise ValueError("type is required")
    if not title:
        raise ValueError("title is required")
    if not message:
        raise ValueError("message is required")

    base_url = _get_service_url()
    if not base_url:
        logger.debug("NOTIFICATION_SERVICE_URL not set, skipping notification dispatch")
        return False

    payload = {
        "user_id": user_id,
        "type": type,
        "title": title,
        "message": message,
        "data": data,
    }
    try:
        async with _get_client(base_url) as client:
            resp = await client.post("/notifications", json=payload)
            resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise DependencyFailureError(
            f"Notification service rejected {type} for user {user_id}: {e.response.status_code}"
        ) from e
    except httpx.RequestError as e:
        raise DependencyFailureError(f"Notification service unreachable: {e}") from e

    logger.debug(f"Dispatched {type} notification to user {user_id}")
    return True
