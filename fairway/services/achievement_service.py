"""
Achievement aggregation.

Achievements are derived counters per (user, type). They are updated once
per recorded round:

- rounds_played is raised to the user's current round count (never lowered)
- hole_in_one / eagles / birdies are incremented by what the round contains

Each update is a single INSERT ... ON CONFLICT DO UPDATE, so concurrent
rounds for the same user add up instead of overwriting each other.
"""

from typing import Dict, Iterable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, case
from fairway.database.db import dialect_insert
from fairway.database.models import AchievementType, GolfRound, UserAchievement
from fairway.utils.datetime_utils import utcnow
import logging

logger = logging.getLogger(__name__)

SCORING_ACHIEVEMENTS = (
    AchievementType.HOLE_IN_ONE,
    AchievementType.EAGLES,
    AchievementType.BIRDIES,
)


def _hole_value(hole, key: str):
    """Read a field from a hole given as a dict or an object."""
    if isinstance(hole, dict):
        return hole.get(key)
    return getattr(hole, key, None)


def count_scoring_holes(hole_details: Optional[Iterable]) -> Dict[AchievementType, int]:
    """
    Count hole-in-ones, eagles and birdies in a round's hole details.

    Each hole counts at most once, checked in that order (an ace on a par 3
    is a hole-in-one, not an eagle). Holes without a score or par are skipped.

    Args:
        hole_details: Iterable of hole dicts/objects with "score" and "par"

    Returns:
        Dict mapping each scoring AchievementType to its count
    """
    counts = {achievement: 0 for achievement in SCORING_ACHIEVEMENTS}
    for hole in hole_details or []:
        score = _hole_value(hole, "score")
        par = _hole_value(hole, "par")
        if score is None or par is None:
            continue
        if score == 1:
            counts[AchievementType.HOLE_IN_ONE] += 1
        elif score == par - 2:
            counts[AchievementType.EAGLES] += 1
        elif score == par - 1:
            counts[AchievementType.BIRDIES] += 1
    return counts


async def raise_achievement_to(
    session: AsyncSession, user_id: int, achievement_type: AchievementType, value: int
) -> None:
    """Upsert an achievement to max(stored, value)."""
    stmt = dialect_insert(session, UserAchievement).values(
        user_id=user_id, achievement_type=achievement_type.value, value=value
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "achievement_type"],
        set_=dict(
            value=case(
                (UserAchievement.value > stmt.excluded.value, UserAchievement.value),
                else_=stmt.excluded.value,
            ),
            updated_at=utcnow(),
        ),
    )
    await session.execute(stmt)


async def increment_achievement(
    session: AsyncSession, user_id: int, achievement_type: AchievementType, amount: int
) -> None:
    """Upsert an achievement by adding amount to the stored value."""
    stmt = dialect_insert(session, UserAchievement).values(
        user_id=user_id, achievement_type=achievement_type.value, value=amount
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "achievement_type"],
        set_=dict(value=UserAchievement.value + stmt.excluded.value, updated_at=utcnow()),
    )
    await session.execute(stmt)


async def update_achievements_for_round(
    session: AsyncSession, user_id: int, hole_details: Optional[List] = None
) -> Dict[str, int]:
    """
    Update a user's achievements after a round has been stored.

    Must run after the round is committed so the round count includes it.
    Commits its own transaction.

    Args:
        session: Database session
        user_id: Owner of the round
        hole_details: The round's hole details, if any

    Returns:
        Dict of the deltas applied, keyed by achievement type value
    """
    count_result = await session.execute(
        select(func.count()).select_from(GolfRound).where(GolfRound.user_id == user_id)
    )
    total_rounds = count_result.scalar_one() or 0

    applied = {AchievementType.ROUNDS_PLAYED.value: total_rounds}
    await raise_achievement_to(session, user_id, AchievementType.ROUNDS_PLAYED, total_rounds)

    if hole_details:
        for achievement_type, count in count_scoring_holes(hole_details).items():
            if count > 0:
                await increment_achievement(session, user_id, achievement_type, count)
                applied[achievement_type.value] = count

    await session.commit()
    logger.info(f"Updated achievements for user {user_id}: {applied}")
    return applied


async def get_user_achievements(session: AsyncSession, user_id: int) -> List[Dict]:
    """
    Get all achievement counters for a user.

    Args:
        session: Database session
        user_id: ID of the user

    Returns:
        List of achievement dicts ordered by type
    """
    result = await session.execute(
        select(UserAchievement)
        .where(UserAchievement.user_id == user_id)
        .order_by(UserAchievement.achievement_type.asc())
        .execution_options(populate_existing=True)
    )
    return [
        {
            "user_id": a.user_id,
            "achievement_type": a.achievement_type,
            "value": a.value,
            "updated_at": a.updated_at.isoformat() if a.updated_at else None,
        }
        for a in result.scalars().all()
    ]


async def get_achievement_value(
    session: AsyncSession, user_id: int, achievement_type: AchievementType
) -> int:
    """Get a single counter, 0 if the user has never earned it."""
    result = await session.execute(
        select(UserAchievement.value).where(
            UserAchievement.user_id == user_id,
            UserAchievement.achievement_type == achievement_type.value,
        )
    )
    return result.scalar_one_or_none() or 0
