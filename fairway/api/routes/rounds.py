"""Golf round route handlers."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fairway.api.auth_dependencies import ensure_same_user, get_current_user_optional
from fairway.api.routes import WRITE_RATE_LIMIT, limiter, to_http_exception
from fairway.database.db import get_db_session
from fairway.models.schemas import GolfRoundCreate, GolfRoundListResponse, GolfRoundResult
from fairway.services import round_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/golf-rounds", response_model=GolfRoundResult)
@limiter.limit(WRITE_RATE_LIMIT)
async def record_round(
    request: Request,
    payload: GolfRoundCreate,
    user: Optional[dict] = Depends(get_current_user_optional),
    session: AsyncSession = Depends(get_db_session),
):
    """Record a golf round with optional hole-by-hole details."""
    try:
        ensure_same_user(user, payload.user_id)
        golf_round = await round_service.record_round(session, payload.model_dump())
        return {"success": True, "round": golf_round, "message": "Round saved successfully"}
    except Exception as e:
        raise to_http_exception(e, "saving golf round")


@router.get("/api/golf-rounds", response_model=GolfRoundListResponse)
async def list_rounds(
    user_id: Optional[int] = Query(None),
    user: Optional[dict] = Depends(get_current_user_optional),
    session: AsyncSession = Depends(get_db_session),
):
    """Get a user's rounds, most recently played first."""
    try:
        ensure_same_user(user, user_id)
        rounds = await round_service.get_rounds(session, user_id)
        return {"success": True, "rounds": rounds}
    except Exception as e:
        raise to_http_exception(e, "fetching golf rounds")
