"""
Best-effort dependency calls.

Side effects such as notification dispatch, achievement aggregation and
read-marking must never fail the request that triggered them. Callers
commit their primary write first, then hand the side effect to
``best_effort``, which logs and discards any failure.
"""

import logging
from typing import Awaitable, Optional, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def best_effort(
    description: str,
    call: Awaitable[T],
    session: Optional[AsyncSession] = None,
) -> Optional[T]:
    """
    Await a side-effect call, swallowing and logging any failure.

    Args:
        description: Short label used in the log line
        call: Awaitable performing the side effect
        session: Session whose current transaction should be rolled back if
            the call fails. Only pass this when the primary write has already
            been committed (or nothing was written).

    Returns:
        The call's result, or None if it failed
    """
    try:
        return await call
    except Exception as e:
        logger.warning(f"Best-effort {description} failed: {e}", exc_info=True)
        if session is not None:
            try:
                await session.rollback()
            except Exception as rollback_error:
                logger.error(f"Rollback after failed {description} also failed: {rollback_error}")
        return None
