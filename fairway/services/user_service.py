"""
User service layer for profile lookups.

Accounts themselves are owned by the identity provider; this module only
reads the profile rows keyed by the provider's user id.
"""

from typing import Dict, Iterable, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fairway.database.models import User
import logging

logger = logging.getLogger(__name__)


async def get_user_by_id(session: AsyncSession, user_id: int) -> Optional[Dict]:
    """
    Get user by ID.

    Args:
        session: Database session
        user_id: User ID

    Returns:
        User dictionary or None if not found
    """
    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    return _user_to_dict(user) if user else None


async def user_exists(session: AsyncSession, user_id: int) -> bool:
    """Check whether a profile row exists for the user id."""
    result = await session.execute(select(User.id).where(User.id == user_id))
    return result.scalar_one_or_none() is not None


async def get_user_summaries(session: AsyncSession, user_ids: Iterable[int]) -> Dict[int, Dict]:
    """
    Batch-fetch public profile summaries for a set of users.

    Used to decorate connections, messages and tee times with the people
    involved, in a single query.

    Args:
        session: Database session
        user_ids: User IDs to look up (duplicates are fine)

    Returns:
        Dict mapping user_id to summary dict; unknown ids are omitted
    """
    ids = {uid for uid in user_ids if uid is not None}
    if not ids:
        return {}

    result = await session.execute(
        select(User.id, User.username, User.first_name, User.last_name, User.avatar_url).where(
            User.id.in_(list(ids))
        )
    )
    return {
        row.id: {
            "id": row.id,
            "username": row.username,
            "first_name": row.first_name,
            "last_name": row.last_name,
            "avatar_url": row.avatar_url,
        }
        for row in result.all()
    }


def display_name(user: Optional[Dict]) -> str:
    """Best human-readable name for a user dict, falling back to 'Someone'."""
    if not user:
        return "Someone"
    full_name = " ".join(p for p in (user.get("first_name"), user.get("last_name")) if p)
    return full_name or user.get("username") or user.get("email") or "Someone"


def _user_to_dict(user: User) -> Dict:
    """
    Convert a User ORM instance to a dictionary.

    Args:
        user: User ORM instance

    Returns:
        User dictionary
    """
    return {
        "id": user.id,
        "email": user.email,
        "username": user.username,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "avatar_url": user.avatar_url,
        "created_at": user.created_at.isoformat() if user.created_at else None,
        "updated_at": user.updated_at.isoformat() if user.updated_at else None,
    }
