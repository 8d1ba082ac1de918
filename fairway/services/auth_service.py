"""
Identity provider token verification.

Tokens are issued by the external identity provider and signed with a
shared secret. This service never issues tokens; it only verifies them and
extracts the user id.
"""

import logging
import os
from typing import Dict, Optional

import jwt

logger = logging.getLogger(__name__)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")


def verify_token(token: str) -> Optional[Dict]:
    """
    Verify a bearer token and return its payload.

    Args:
        token: Encoded JWT from the Authorization header

    Returns:
        Payload dict with an integer "user_id", or None if the token is
        invalid, expired, or carries no usable user id
    """
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        return None
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected invalid token: {e}")
        return None

    raw_user_id = payload.get("user_id", payload.get("sub"))
    try:
        payload["user_id"] = int(raw_user_id)
    except (TypeError, ValueError):
        return None
    return payload
