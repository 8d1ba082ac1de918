"""
Tee time service: bookable slots with a bounded roster.

A tee time is created with its creator as the first approved member, so
available_spots starts at max_players - 1. Other users apply and the
creator approves or declines. Seats are only taken by approval, through a
single conditional UPDATE that refuses to go below zero, so concurrent
approvals can never overbook a slot.
"""

from datetime import date as date_type, time as time_type
from typing import List, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, case, and_
from sqlalchemy.exc import SQLAlchemyError
from fairway.database.db import dialect_insert
from fairway.database.models import (
    TeeTime,
    TeeTimeApplication,
    TeeTimeStatus,
    ApplicationStatus,
    NotificationType,
)
from fairway.services import notification_service, user_service
from fairway.services.exceptions import (
    CapacityError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
    StorageFailureError,
)
from fairway.utils.best_effort import best_effort
from fairway.utils.datetime_utils import utcnow
import logging

logger = logging.getLogger(__name__)

DEFAULT_HANDICAP_REQUIREMENT = "Any level"


async def create_tee_time(
    session: AsyncSession,
    creator_id: int,
    course: Optional[str],
    date: Optional[date_type],
    time: Optional[time_type],
    max_players: Optional[int],
    handicap: Optional[str] = None,
    description: Optional[str] = None,
) -> Dict:
    """
    Create a tee time with the creator as its first approved member.

    The tee time and the creator's application are written in one
    transaction; if the application cannot be stored the whole unit is
    rolled back.

    Args:
        session: Database session
        creator_id: User creating the tee time
        course: Course name
        date: Tee time date
        time: Tee time start time
        max_players: Roster size including the creator (>= 1)
        handicap: Optional handicap requirement text
        description: Optional free-form description

    Returns:
        Dict with tee time data

    Raises:
        InvalidInputError: If a required field is missing or max_players < 1
        StorageFailureError: If the creator's application could not be stored
    """
    if not course or not course.strip() or not date or not time or max_players is None:
        raise InvalidInputError("Missing required fields")
    if max_players < 1:
        raise InvalidInputError("maxPlayers must be at least 1")

    available_spots = max_players - 1
    tee_time = TeeTime(
        course_name=course.strip(),
        tee_time_date=date,
        tee_time_time=time,
        max_players=max_players,
        available_spots=available_spots,
        handicap_requirement=handicap or DEFAULT_HANDICAP_REQUIREMENT,
        description=description or "",
        creator_id=creator_id,
        status=TeeTimeStatus.ACTIVE.value if available_spots > 0 else TeeTimeStatus.FULL.value,
    )
    session.add(tee_time)
    await session.flush()

    try:
        session.add(
            TeeTimeApplication(
                tee_time_id=tee_time.id,
                applicant_id=creator_id,
                status=ApplicationStatus.APPROVED.value,
                responded_at=utcnow(),
            )
        )
        await session.flush()
    except SQLAlchemyError as e:
        logger.error(f"Failed to add creator {creator_id} to tee time {tee_time.id}: {e}")
        await session.rollback()
        raise StorageFailureError("Failed to create tee time") from e

    await session.refresh(tee_time)
    logger.info(f"User {creator_id} created tee time {tee_time.id} at {tee_time.course_name}")
    return (await _format_tee_times_batch(session, [tee_time]))[0]


async def _get_tee_time(session: AsyncSession, tee_time_id: int) -> TeeTime:
    """Load a tee time with fresh state, raising NotFoundError if missing."""
    tee_time = await session.get(TeeTime, tee_time_id, populate_existing=True)
    if not tee_time:
        raise NotFoundError("Tee time not found")
    return tee_time


async def _get_application(
    session: AsyncSession, tee_time_id: int, applicant_id: int
) -> Optional[TeeTimeApplication]:
    result = await session.execute(
        select(TeeTimeApplication)
        .where(
            and_(
                TeeTimeApplication.tee_time_id == tee_time_id,
                TeeTimeApplication.applicant_id == applicant_id,
            )
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def apply_to_tee_time(session: AsyncSession, tee_time_id: int, applicant_id: int) -> Dict:
    """
    Apply to join a tee time.

    Args:
        session: Database session
        tee_time_id: Tee time ID
        applicant_id: User applying

    Returns:
        Dict with the pending application

    Raises:
        NotFoundError: If the tee time does not exist
        ConflictError: If the user already applied or the tee time is cancelled
        CapacityError: If the tee time has no available spots
    """
    tee_time = await _get_tee_time(session, tee_time_id)

    if await _get_application(session, tee_time_id, applicant_id):
        raise ConflictError("You have already applied to this tee time")
    if tee_time.status == TeeTimeStatus.CANCELLED.value:
        raise ConflictError("This tee time has been cancelled")
    if tee_time.available_spots <= 0:
        raise CapacityError("This tee time is full")

    # The unique constraint still guards a concurrent duplicate application
    stmt = (
        dialect_insert(session, TeeTimeApplication)
        .values(
            tee_time_id=tee_time_id,
            applicant_id=applicant_id,
            status=ApplicationStatus.PENDING.value,
        )
        .on_conflict_do_nothing(index_elements=["tee_time_id", "applicant_id"])
        .returning(TeeTimeApplication.id)
    )
    result = await session.execute(stmt)
    application_id = result.scalar_one_or_none()
    if application_id is None:
        raise ConflictError("You have already applied to this tee time")

    await session.commit()
    application = await session.get(TeeTimeApplication, application_id)
    logger.info(f"User {applicant_id} applied to tee time {tee_time_id}")

    formatted = (await _format_applications_batch(session, [application]))[0]
    applicant_name = user_service.display_name(formatted["applicant"])
    await best_effort(
        "tee time application notification",
        notification_service.send_notification(
            user_id=tee_time.creator_id,
            type=NotificationType.TEE_TIME_APPLICATION.value,
            title="New Tee Time Application",
            message=f"{applicant_name} wants to join your tee time at {tee_time.course_name}",
            data={"tee_time_id": tee_time_id, "applicant_id": applicant_id},
        ),
    )
    return formatted


async def _get_owned_pending_application(
    session: AsyncSession, tee_time_id: int, applicant_id: int, owner_id: int
):
    """
    Shared checks for owner decisions on an application.

    Returns:
        (tee_time, application)
    """
    tee_time = await _get_tee_time(session, tee_time_id)
    if tee_time.creator_id != owner_id:
        raise PermissionDeniedError("Only the tee time creator can manage applications")
    if tee_time.status == TeeTimeStatus.CANCELLED.value:
        raise ConflictError("This tee time has been cancelled")

    application = await _get_application(session, tee_time_id, applicant_id)
    if not application:
        raise NotFoundError("Application not found")
    if application.status != ApplicationStatus.PENDING.value:
        raise ConflictError("Application is no longer pending")
    return tee_time, application


async def _set_application_status(
    session: AsyncSession, application_id: int, new_status: ApplicationStatus
) -> bool:
    """Conditionally move a pending application to new_status; True if it moved."""
    result = await session.execute(
        update(TeeTimeApplication)
        .where(
            and_(
                TeeTimeApplication.id == application_id,
                TeeTimeApplication.status == ApplicationStatus.PENDING.value,
            )
        )
        .values(status=new_status.value, responded_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def approve_application(
    session: AsyncSession, tee_time_id: int, applicant_id: int, owner_id: int
) -> Dict:
    """
    Approve a pending application, taking one seat.

    The seat is taken with a single conditional UPDATE (available_spots > 0)
    that also flips the status to 'full' when the last seat goes. If the
    application was concurrently decided, the transaction is rolled back so
    the seat is returned.

    Args:
        session: Database session
        tee_time_id: Tee time ID
        applicant_id: User whose application is approved
        owner_id: Acting user (must be the creator)

    Returns:
        Dict with "tee_time" and "application"

    Raises:
        NotFoundError: If the tee time or application does not exist
        PermissionDeniedError: If owner_id is not the creator
        ConflictError: If the application is not pending or the tee time is cancelled
        CapacityError: If no spots are left at approval time
    """
    tee_time, application = await _get_owned_pending_application(
        session, tee_time_id, applicant_id, owner_id
    )

    result = await session.execute(
        update(TeeTime)
        .where(
            and_(
                TeeTime.id == tee_time_id,
                TeeTime.status == TeeTimeStatus.ACTIVE.value,
                TeeTime.available_spots > 0,
            )
        )
        .values(
            available_spots=TeeTime.available_spots - 1,
            status=case(
                (TeeTime.available_spots == 1, TeeTimeStatus.FULL.value),
                else_=TeeTime.status,
            ),
            updated_at=utcnow(),
        )
        .returning(TeeTime.available_spots)
        .execution_options(synchronize_session=False)
    )
    if result.scalar_one_or_none() is None:
        await session.rollback()
        raise CapacityError("This tee time is full")

    if not await _set_application_status(session, application.id, ApplicationStatus.APPROVED):
        await session.rollback()
        raise ConflictError("Application is no longer pending")

    await session.commit()
    await session.refresh(tee_time)
    await session.refresh(application)
    logger.info(
        f"Approved user {applicant_id} for tee time {tee_time_id} "
        f"({tee_time.available_spots} spots left)"
    )

    await best_effort(
        "tee time approval notification",
        notification_service.send_notification(
            user_id=applicant_id,
            type=NotificationType.TEE_TIME_APPROVED.value,
            title="You're In!",
            message=f"Your application for {tee_time.course_name} was approved",
            data={"tee_time_id": tee_time_id},
        ),
    )
    return {
        "tee_time": (await _format_tee_times_batch(session, [tee_time]))[0],
        "application": (await _format_applications_batch(session, [application]))[0],
    }


async def decline_application(
    session: AsyncSession, tee_time_id: int, applicant_id: int, owner_id: int
) -> Dict:
    """
    Decline a pending application. Seats are not affected.

    Raises:
        NotFoundError, PermissionDeniedError, ConflictError: as for approve_application
    """
    _, application = await _get_owned_pending_application(
        session, tee_time_id, applicant_id, owner_id
    )
    if not await _set_application_status(session, application.id, ApplicationStatus.DECLINED):
        await session.rollback()
        raise ConflictError("Application is no longer pending")

    await session.commit()
    await session.refresh(application)
    return (await _format_applications_batch(session, [application]))[0]


async def cancel_tee_time(session: AsyncSession, tee_time_id: int, owner_id: int) -> Dict:
    """
    Cancel a tee time. Cancelled tee times accept no applications or approvals.

    Raises:
        NotFoundError: If the tee time does not exist
        PermissionDeniedError: If owner_id is not the creator
        ConflictError: If it is already cancelled
    """
    tee_time = await _get_tee_time(session, tee_time_id)
    if tee_time.creator_id != owner_id:
        raise PermissionDeniedError("Only the tee time creator can cancel it")

    result = await session.execute(
        update(TeeTime)
        .where(
            and_(
                TeeTime.id == tee_time_id,
                TeeTime.status != TeeTimeStatus.CANCELLED.value,
            )
        )
        .values(status=TeeTimeStatus.CANCELLED.value, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise ConflictError("This tee time has already been cancelled")

    await session.commit()
    await session.refresh(tee_time)
    logger.info(f"User {owner_id} cancelled tee time {tee_time_id}")
    return (await _format_tee_times_batch(session, [tee_time]))[0]


async def list_applications(session: AsyncSession, tee_time_id: int, owner_id: int) -> List[Dict]:
    """
    Get every application for a tee time (creator only), oldest first.

    Raises:
        NotFoundError: If the tee time does not exist
        PermissionDeniedError: If owner_id is not the creator
    """
    tee_time = await _get_tee_time(session, tee_time_id)
    if tee_time.creator_id != owner_id:
        raise PermissionDeniedError("Only the tee time creator can view applications")

    result = await session.execute(
        select(TeeTimeApplication)
        .where(TeeTimeApplication.tee_time_id == tee_time_id)
        .order_by(TeeTimeApplication.created_at.asc(), TeeTimeApplication.id.asc())
        .execution_options(populate_existing=True)
    )
    return await _format_applications_batch(session, result.scalars().all())


async def search_tee_times(
    session: AsyncSession,
    course: Optional[str] = None,
    date: Optional[date_type] = None,
    status: str = TeeTimeStatus.ACTIVE.value,
) -> List[Dict]:
    """
    Search tee times by course name and earliest date.

    Args:
        session: Database session
        course: Case-insensitive substring of the course name
        date: Only tee times on or after this date
        status: Exact status to match (default: active)

    Returns:
        List of tee time dicts ordered by date then time
    """
    query = select(TeeTime).where(TeeTime.status == status)

    if course:
        query = query.where(TeeTime.course_name.ilike(f"%{course}%"))
    if date:
        query = query.where(TeeTime.tee_time_date >= date)

    query = query.order_by(
        TeeTime.tee_time_date.asc(), TeeTime.tee_time_time.asc(), TeeTime.id.asc()
    ).execution_options(populate_existing=True)
    result = await session.execute(query)
    return await _format_tee_times_batch(session, result.scalars().all())


async def _format_tee_times_batch(session: AsyncSession, tee_times: List[TeeTime]) -> List[Dict]:
    """Format TeeTime rows with creator summaries fetched in one query."""
    if not tee_times:
        return []

    user_map = await user_service.get_user_summaries(session, [t.creator_id for t in tee_times])
    return [
        {
            "id": t.id,
            "course_name": t.course_name,
            "tee_time_date": t.tee_time_date.isoformat() if t.tee_time_date else None,
            "tee_time_time": t.tee_time_time.strftime("%H:%M") if t.tee_time_time else None,
            "max_players": t.max_players,
            "available_spots": t.available_spots,
            "handicap_requirement": t.handicap_requirement,
            "description": t.description,
            "creator_id": t.creator_id,
            "status": t.status,
            "created_at": t.created_at.isoformat() if t.created_at else None,
            "creator": user_map.get(t.creator_id),
        }
        for t in tee_times
    ]


async def _format_applications_batch(
    session: AsyncSession, applications: List[TeeTimeApplication]
) -> List[Dict]:
    """Format TeeTimeApplication rows with applicant summaries fetched in one query."""
    if not applications:
        return []

    user_map = await user_service.get_user_summaries(
        session, [a.applicant_id for a in applications]
    )
    return [
        {
            "id": a.id,
            "tee_time_id": a.tee_time_id,
            "applicant_id": a.applicant_id,
            "status": a.status,
            "created_at": a.created_at.isoformat() if a.created_at else None,
            "responded_at": a.responded_at.isoformat() if a.responded_at else None,
            "applicant": user_map.get(a.applicant_id),
        }
        for a in applications
    ]
