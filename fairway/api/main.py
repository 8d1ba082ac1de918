"""
Fairway Social API Server

FastAPI server for golfer connections, direct messages, tee-time rosters,
golf rounds and achievements.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import os
import uvicorn

from fairway.api.routes import router, limiter as routes_limiter
from fairway.database import db

# Set up logging
# Allow log level to be configured via environment variable (default: INFO)
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
numeric_level = getattr(logging, log_level, logging.INFO)
logging.basicConfig(
    level=numeric_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

ERROR_NAMES = {
    400: "Bad request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not found",
    409: "Conflict",
    429: "Too many requests",
    500: "Internal server error",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler for startup and shutdown events."""
    logger.info("Starting up Fairway Social API...")

    # Fallback for local runs without migrations; Alembic owns the schema
    try:
        await db.init_database()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)
        # Don't raise - allow app to start so /api/health can report it

    if not os.getenv("NOTIFICATION_SERVICE_URL"):
        logger.warning("NOTIFICATION_SERVICE_URL not set, notifications will not be dispatched")

    yield  # App is running

    logger.info("Shutting down Fairway Social API...")
    await db.engine.dispose()


app = FastAPI(
    title="Fairway Social API",
    description="API for golfer connections, messaging, tee times and achievements",
    version="1.0.0",
    lifespan=lifespan,
)

# Setup rate limiter (RateLimitExceeded is an HTTPException, rendered below as 429)
app.state.limiter = routes_limiter


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render every HTTP error as {error, details}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": ERROR_NAMES.get(exc.status_code, "Error"),
            "details": exc.detail,
        },
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and query params are client errors (400)."""
    details = [
        {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": ERROR_NAMES[400], "details": details},
    )


# Add CORS middleware - origins configured via ALLOWED_ORIGINS env var
allowed_origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
