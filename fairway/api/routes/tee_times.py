"""Tee time route handlers."""

import logging
from datetime import date as date_type
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fairway.api.auth_dependencies import require_user
from fairway.api.routes import WRITE_RATE_LIMIT, limiter, to_http_exception
from fairway.database.db import get_db_session
from fairway.database.models import TeeTimeStatus
from fairway.models.schemas import (
    ApplicationListResponse,
    ApplicationResult,
    ApprovalResult,
    TeeTimeCreate,
    TeeTimeListResponse,
    TeeTimeResult,
)
from fairway.services import tee_time_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/tee-times", response_model=TeeTimeResult)
@limiter.limit(WRITE_RATE_LIMIT)
async def create_tee_time(
    request: Request,
    payload: TeeTimeCreate,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Create a tee time with the current user as its first member."""
    try:
        tee_time = await tee_time_service.create_tee_time(
            session,
            creator_id=user["id"],
            course=payload.course,
            date=payload.tee_date,
            time=payload.tee_time,
            max_players=payload.max_players,
            handicap=payload.handicap,
            description=payload.description,
        )
        await session.commit()
        return {"success": True, "tee_time": tee_time}
    except Exception as e:
        raise to_http_exception(e, "creating tee time")


@router.get("/api/tee-times", response_model=TeeTimeListResponse)
async def search_tee_times(
    course: Optional[str] = Query(None),
    date: Optional[date_type] = Query(None),
    status: str = Query(TeeTimeStatus.ACTIVE.value),
    session: AsyncSession = Depends(get_db_session),
):
    """Search tee times by course name and earliest date (public)."""
    try:
        tee_times = await tee_time_service.search_tee_times(
            session, course=course, date=date, status=status
        )
        return {"success": True, "tee_times": tee_times}
    except Exception as e:
        raise to_http_exception(e, "searching tee times")


@router.post("/api/tee-times/{tee_time_id}/applications", response_model=ApplicationResult)
@limiter.limit(WRITE_RATE_LIMIT)
async def apply_to_tee_time(
    request: Request,
    tee_time_id: int,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Apply to join a tee time."""
    try:
        application = await tee_time_service.apply_to_tee_time(session, tee_time_id, user["id"])
        return {"success": True, "application": application}
    except Exception as e:
        raise to_http_exception(e, "applying to tee time")


@router.get("/api/tee-times/{tee_time_id}/applications", response_model=ApplicationListResponse)
async def list_applications(
    tee_time_id: int,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Get the roster of a tee time (creator only)."""
    try:
        applications = await tee_time_service.list_applications(session, tee_time_id, user["id"])
        return {"success": True, "applications": applications}
    except Exception as e:
        raise to_http_exception(e, "fetching applications")


@router.post(
    "/api/tee-times/{tee_time_id}/applications/{applicant_id}/approve",
    response_model=ApprovalResult,
)
async def approve_application(
    tee_time_id: int,
    applicant_id: int,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Approve a pending application, taking one seat (creator only)."""
    try:
        result = await tee_time_service.approve_application(
            session, tee_time_id, applicant_id, user["id"]
        )
        return {"success": True, **result}
    except Exception as e:
        raise to_http_exception(e, "approving application")


@router.post(
    "/api/tee-times/{tee_time_id}/applications/{applicant_id}/decline",
    response_model=ApplicationResult,
)
async def decline_application(
    tee_time_id: int,
    applicant_id: int,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Decline a pending application (creator only)."""
    try:
        application = await tee_time_service.decline_application(
            session, tee_time_id, applicant_id, user["id"]
        )
        return {"success": True, "application": application}
    except Exception as e:
        raise to_http_exception(e, "declining application")


@router.post("/api/tee-times/{tee_time_id}/cancel", response_model=TeeTimeResult)
async def cancel_tee_time(
    tee_time_id: int,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Cancel a tee time (creator only)."""
    try:
        tee_time = await tee_time_service.cancel_tee_time(session, tee_time_id, user["id"])
        return {"success": True, "tee_time": tee_time}
    except Exception as e:
        raise to_http_exception(e, "cancelling tee time")
