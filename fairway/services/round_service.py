"""
Golf round recording.

A round and its hole details are stored as one unit. After the round is
committed, achievements are updated as a best-effort step: the round is the
source of truth and is never rolled back because aggregation failed.
"""

from typing import List, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from fairway.database.models import GolfRound, GolfRoundDetail
from fairway.services import achievement_service
from fairway.services.exceptions import InvalidInputError
from fairway.utils.best_effort import best_effort
import logging

logger = logging.getLogger(__name__)

ROUND_FIELDS = (
    "course_id",
    "total_score",
    "par",
    "holes_played",
    "weather_conditions",
    "notes",
)

HOLE_FIELDS = (
    "par",
    "score",
    "putts",
    "fairway_hit",
    "green_in_regulation",
)


async def record_round(session: AsyncSession, round_data: Dict) -> Dict:
    """
    Store a golf round (with optional hole details) and update achievements.

    Args:
        session: Database session
        round_data: Dict with user_id, course_name, date_played, optional
            course_id/total_score/par/holes_played/weather_conditions/notes,
            and optional hole_details (list of dicts)

    Returns:
        Dict with the stored round, including its hole details

    Raises:
        InvalidInputError: If user_id, course_name or date_played is missing,
            or two holes share a number
    """
    user_id = round_data.get("user_id")
    course_name = round_data.get("course_name")
    date_played = round_data.get("date_played")
    if not user_id or not course_name or not date_played:
        raise InvalidInputError("Missing required fields")

    hole_details = round_data.get("hole_details") or []

    # Holes sent without a number take their position in the list
    hole_numbers = [
        hole.get("hole_number") or position for position, hole in enumerate(hole_details, 1)
    ]
    if len(set(hole_numbers)) != len(hole_numbers):
        raise InvalidInputError("Duplicate hole numbers")

    golf_round = GolfRound(
        user_id=user_id,
        course_name=course_name,
        date_played=date_played,
        **{field: round_data.get(field) for field in ROUND_FIELDS},
    )
    golf_round.details = [
        GolfRoundDetail(
            **{field: hole.get(field) for field in HOLE_FIELDS},
            hole_number=hole_number,
            sand_saves=hole.get("sand_saves") or 0,
        )
        for hole_number, hole in zip(hole_numbers, hole_details)
    ]
    session.add(golf_round)
    await session.flush()
    await session.commit()
    await session.refresh(golf_round, attribute_names=["created_at"])
    logger.info(
        f"Recorded round {golf_round.id} for user {user_id} "
        f"at {course_name} ({len(hole_details)} holes)"
    )

    formatted = _format_round(golf_round)

    await best_effort(
        "achievement update",
        achievement_service.update_achievements_for_round(session, user_id, hole_details),
        session=session,
    )
    return formatted


async def get_rounds(session: AsyncSession, user_id: Optional[int]) -> List[Dict]:
    """
    Get a user's rounds with hole details, most recently played first.

    Raises:
        InvalidInputError: If user_id is missing
    """
    if not user_id:
        raise InvalidInputError("User ID is required")

    result = await session.execute(
        select(GolfRound)
        .options(selectinload(GolfRound.details))
        .where(GolfRound.user_id == user_id)
        .order_by(GolfRound.date_played.desc(), GolfRound.id.desc())
    )
    return [_format_round(r) for r in result.scalars().all()]


def _format_round(golf_round: GolfRound) -> Dict:
    """Convert a GolfRound (with details loaded) to a response dict."""
    return {
        "id": golf_round.id,
        "user_id": golf_round.user_id,
        "course_id": golf_round.course_id,
        "course_name": golf_round.course_name,
        "date_played": golf_round.date_played.isoformat() if golf_round.date_played else None,
        "total_score": golf_round.total_score,
        "par": golf_round.par,
        "holes_played": golf_round.holes_played,
        "weather_conditions": golf_round.weather_conditions,
        "notes": golf_round.notes,
        "created_at": golf_round.created_at.isoformat() if golf_round.created_at else None,
        "details": [
            {
                "hole_number": d.hole_number,
                "par": d.par,
                "score": d.score,
                "putts": d.putts,
                "fairway_hit": d.fairway_hit,
                "green_in_regulation": d.green_in_regulation,
                "sand_saves": d.sand_saves,
            }
            for d in golf_round.details
        ],
    }
