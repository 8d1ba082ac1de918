"""
API routes - combined router from all domain modules.

Shared infrastructure (limiter, error mapping) lives here; every sub-router
imports what it needs from this package.
"""

import logging
import os

from fastapi import APIRouter, HTTPException
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.exc import SQLAlchemyError

from fairway.services.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
    StorageFailureError,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Shared rate limiter
# ---------------------------------------------------------------------------
IS_TEST_ENV = os.getenv("ENV", "").lower() == "test"
if IS_TEST_ENV:
    limiter = Limiter(key_func=get_remote_address)

    def no_op_limit(*args, **kwargs):
        """No-op decorator for test mode - doesn't apply any rate limiting."""
        def decorator(func):
            return func
        return decorator

    limiter.limit = lambda *args, **kwargs: no_op_limit()
else:
    limiter = Limiter(key_func=get_remote_address)

WRITE_RATE_LIMIT = os.getenv("WRITE_RATE_LIMIT", "30/minute")


# ---------------------------------------------------------------------------
# Shared error mapping
# ---------------------------------------------------------------------------
def to_http_exception(e: Exception, action: str) -> HTTPException:
    """
    Map a service-layer exception to the HTTPException a route should raise.

    Args:
        e: Exception raised by a service call
        action: Short description for logs and the 500 detail, e.g. "sending message"

    Returns:
        HTTPException with the matching status code
    """
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, InvalidInputError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, PermissionDeniedError):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ConflictError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, (StorageFailureError, SQLAlchemyError)):
        logger.error(f"Database error {action}: {e}", exc_info=True)
        return HTTPException(status_code=500, detail="Database error")
    if isinstance(e, ValueError):
        return HTTPException(status_code=400, detail=str(e))
    logger.error(f"Error {action}: {e}", exc_info=True)
    return HTTPException(status_code=500, detail=f"Error {action}")


# ---------------------------------------------------------------------------
# Import sub-routers and combine
# ---------------------------------------------------------------------------
from fairway.api.routes.health import router as health_router  # noqa: E402
from fairway.api.routes.connections import router as connections_router  # noqa: E402
from fairway.api.routes.messages import router as messages_router  # noqa: E402
from fairway.api.routes.tee_times import router as tee_times_router  # noqa: E402
from fairway.api.routes.rounds import router as rounds_router  # noqa: E402
from fairway.api.routes.achievements import router as achievements_router  # noqa: E402

router = APIRouter()
router.include_router(health_router)
router.include_router(connections_router)
router.include_router(messages_router)
router.include_router(tee_times_router)
router.include_router(rounds_router)
router.include_router(achievements_router)
