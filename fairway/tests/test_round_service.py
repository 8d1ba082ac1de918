"""
Unit tests for golf round service.

Tests round recording with hole details, validation, listing order, and
that achievement aggregation never fails a recorded round.
"""

from datetime import date

import pytest
from sqlalchemy import select, func
from fairway.services import achievement_service, round_service
from fairway.services.exceptions import InvalidInputError
from fairway.database.models import AchievementType, GolfRound


def _round(user_id, **overrides):
    data = {
        "user_id": user_id,
        "course_name": "Torrey Pines South",
        "date_played": date(2026, 10, 3),
        "total_score": 82,
        "par": 72,
        "holes_played": 18,
        "weather_conditions": "Sunny",
        "notes": "Windy back nine",
    }
    data.update(overrides)
    return data


@pytest.mark.asyncio
async def test_record_round_with_details(db_session, users):
    """A round is stored with its hole details and updates achievements."""
    result = await round_service.record_round(
        db_session,
        _round(
            users["alice"],
            hole_details=[
                {"hole_number": 2, "par": 5, "score": 3, "putts": 1, "fairway_hit": True},
                {"hole_number": 1, "par": 4, "score": 3, "putts": 2, "green_in_regulation": True},
                {"hole_number": 3, "par": 3, "score": 1},
            ],
        ),
    )

    assert result["id"] > 0
    assert result["user_id"] == users["alice"]
    assert result["course_name"] == "Torrey Pines South"
    assert result["date_played"] == "2026-10-03"
    assert result["total_score"] == 82
    assert len(result["details"]) == 3
    assert all(d["sand_saves"] == 0 for d in result["details"])

    values = {
        a["achievement_type"]: a["value"]
        for a in await achievement_service.get_user_achievements(db_session, users["alice"])
    }
    assert values == {"birdies": 1, "eagles": 1, "hole_in_one": 1, "rounds_played": 1}


@pytest.mark.asyncio
async def test_record_round_holes_without_numbers(db_session, users):
    """Holes sent without a number are stored by position and still count."""
    result = await round_service.record_round(
        db_session, _round(users["dave"], hole_details=[{"par": 4, "score": 1}])
    )

    assert result["id"] > 0
    assert [d["hole_number"] for d in result["details"]] == [1]
    assert await achievement_service.get_achievement_value(
        db_session, users["dave"], AchievementType.HOLE_IN_ONE
    ) == 1

    second = await round_service.record_round(
        db_session,
        _round(
            users["dave"],
            hole_details=[
                {"par": 4, "score": 4},
                {"hole_number": 7, "par": 3, "score": 2},
                {"par": 5, "score": 5},
            ],
        ),
    )
    assert sorted(d["hole_number"] for d in second["details"]) == [1, 3, 7]


@pytest.mark.asyncio
async def test_record_round_without_details(db_session, users):
    """Hole details are optional; rounds_played still counts the round."""
    result = await round_service.record_round(db_session, _round(users["bob"]))

    assert result["details"] == []
    assert await achievement_service.get_achievement_value(
        db_session, users["bob"], AchievementType.ROUNDS_PLAYED
    ) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["user_id", "course_name", "date_played"])
async def test_record_round_missing_fields(db_session, users, missing):
    """user_id, course_name and date_played are required."""
    data = _round(users["alice"])
    data[missing] = None
    with pytest.raises(InvalidInputError, match="Missing required fields"):
        await round_service.record_round(db_session, data)


@pytest.mark.asyncio
async def test_record_round_duplicate_hole_numbers(db_session, users):
    """A positional hole number may not collide with an explicit one."""
    with pytest.raises(InvalidInputError, match="Duplicate hole numbers"):
        await round_service.record_round(
            db_session,
            _round(users["alice"], hole_details=[{"par": 4, "score": 4}, {"hole_number": 1, "par": 4, "score": 5}]),
        )
    assert await round_service.get_rounds(db_session, users["alice"]) == []


@pytest.mark.asyncio
async def test_round_survives_aggregation_failure(db_session, users, monkeypatch):
    """If achievements cannot be updated, the round is still stored and returned."""

    async def broken_update(session, user_id, hole_details=None):
        raise RuntimeError("achievement store unavailable")

    monkeypatch.setattr(achievement_service, "update_achievements_for_round", broken_update)

    result = await round_service.record_round(
        db_session, _round(users["carol"], hole_details=[{"hole_number": 1, "par": 4, "score": 3}])
    )

    assert result["id"] > 0
    count = await db_session.execute(
        select(func.count()).select_from(GolfRound).where(GolfRound.user_id == users["carol"])
    )
    assert count.scalar_one() == 1
    assert await achievement_service.get_user_achievements(db_session, users["carol"]) == []


@pytest.mark.asyncio
async def test_get_rounds_most_recent_first(db_session, users):
    """Rounds are listed by date played, newest first, with details."""
    older = await round_service.record_round(
        db_session, _round(users["alice"], date_played=date(2026, 9, 1))
    )
    newer = await round_service.record_round(
        db_session,
        _round(
            users["alice"],
            date_played=date(2026, 10, 1),
            hole_details=[{"hole_number": 1, "par": 4, "score": 4}],
        ),
    )
    await round_service.record_round(db_session, _round(users["bob"]))

    rounds = await round_service.get_rounds(db_session, users["alice"])

    assert [r["id"] for r in rounds] == [newer["id"], older["id"]]
    assert rounds[0]["details"][0]["hole_number"] == 1
    assert rounds[1]["details"] == []


@pytest.mark.asyncio
async def test_get_rounds_requires_user(db_session):
    """user_id is required to list rounds."""
    with pytest.raises(InvalidInputError):
        await round_service.get_rounds(db_session, None)
