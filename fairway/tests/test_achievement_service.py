"""
Unit tests for achievement aggregation.

Tests hole classification and the per-round counter updates.
"""

from datetime import date

import pytest
from fairway.services import achievement_service
from fairway.database.models import AchievementType, GolfRound


def test_count_scoring_holes_classification():
    """Each hole counts once: ace before eagle before birdie."""
    holes = [
        {"hole_number": 1, "par": 3, "score": 1},  # ace (also par - 2)
        {"hole_number": 2, "par": 5, "score": 3},  # eagle
        {"hole_number": 3, "par": 4, "score": 3},  # birdie
        {"hole_number": 4, "par": 4, "score": 4},  # par
        {"hole_number": 5, "par": 4, "score": 6},  # double
        {"hole_number": 6, "par": 4, "score": 1},  # ace on a par 4
        {"hole_number": 7, "par": 5, "score": 4},  # birdie
    ]

    counts = achievement_service.count_scoring_holes(holes)

    assert counts[AchievementType.HOLE_IN_ONE] == 2
    assert counts[AchievementType.EAGLES] == 1
    assert counts[AchievementType.BIRDIES] == 2


def test_count_scoring_holes_skips_incomplete():
    """Holes without score or par are ignored."""
    holes = [
        {"hole_number": 1, "par": None, "score": 1},
        {"hole_number": 2, "par": 4, "score": None},
        {"hole_number": 3},
    ]
    counts = achievement_service.count_scoring_holes(holes)
    assert all(v == 0 for v in counts.values())
    assert achievement_service.count_scoring_holes(None)[AchievementType.BIRDIES] == 0


async def _add_round(db_session, user_id, played=date(2026, 10, 1)):
    db_session.add(GolfRound(user_id=user_id, course_name="Torrey Pines", date_played=played))
    await db_session.commit()


@pytest.mark.asyncio
async def test_update_achievements_for_round(db_session, users):
    """A round raises rounds_played and adds scoring counters."""
    await _add_round(db_session, users["alice"])

    applied = await achievement_service.update_achievements_for_round(
        db_session,
        users["alice"],
        [
            {"hole_number": 1, "par": 4, "score": 3},
            {"hole_number": 2, "par": 5, "score": 3},
        ],
    )

    assert applied == {"rounds_played": 1, "birdies": 1, "eagles": 1}
    assert await achievement_service.get_achievement_value(
        db_session, users["alice"], AchievementType.ROUNDS_PLAYED
    ) == 1
    assert await achievement_service.get_achievement_value(
        db_session, users["alice"], AchievementType.HOLE_IN_ONE
    ) == 0


@pytest.mark.asyncio
async def test_counters_accumulate_across_rounds(db_session, users):
    """Scoring counters add up; rounds_played tracks the stored round count."""
    birdie = [{"hole_number": 1, "par": 4, "score": 3}]

    await _add_round(db_session, users["bob"])
    await achievement_service.update_achievements_for_round(db_session, users["bob"], birdie)
    await _add_round(db_session, users["bob"])
    await achievement_service.update_achievements_for_round(db_session, users["bob"], birdie)

    achievements = {
        a["achievement_type"]: a["value"]
        for a in await achievement_service.get_user_achievements(db_session, users["bob"])
    }
    assert achievements == {"birdies": 2, "rounds_played": 2}


@pytest.mark.asyncio
async def test_rounds_played_never_decreases(db_session, users):
    """Re-running aggregation for an old count does not lower rounds_played."""
    await achievement_service.raise_achievement_to(
        db_session, users["carol"], AchievementType.ROUNDS_PLAYED, 5
    )
    await db_session.commit()

    await _add_round(db_session, users["carol"])
    await achievement_service.update_achievements_for_round(db_session, users["carol"])

    assert await achievement_service.get_achievement_value(
        db_session, users["carol"], AchievementType.ROUNDS_PLAYED
    ) == 5


@pytest.mark.asyncio
async def test_achievements_are_per_user(db_session, users):
    """One user's rounds never touch another user's counters."""
    await _add_round(db_session, users["alice"])
    await achievement_service.update_achievements_for_round(
        db_session, users["alice"], [{"hole_number": 1, "par": 3, "score": 1}]
    )

    assert await achievement_service.get_user_achievements(db_session, users["bob"]) == []
