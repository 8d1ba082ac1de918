"""Achievement route handlers."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fairway.api.routes import to_http_exception
from fairway.database.db import get_db_session
from fairway.models.schemas import AchievementListResponse
from fairway.services import achievement_service
from fairway.services.exceptions import InvalidInputError

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/achievements", response_model=AchievementListResponse)
async def get_achievements(
    user_id: Optional[int] = Query(None),
    session: AsyncSession = Depends(get_db_session),
):
    """Get a user's achievement counters."""
    try:
        if not user_id:
            raise InvalidInputError("User ID is required")
        achievements = await achievement_service.get_user_achievements(session, user_id)
        return {"success": True, "achievements": achievements}
    except Exception as e:
        raise to_http_exception(e, "fetching achievements")
