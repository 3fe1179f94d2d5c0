# src/clubrank/main.py

"""ClubRank application: routers, middleware and error mapping."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .api import match, player, ratings
from .db.session import create_tables, engine
from .exceptions import (
    ClubRankError,
    RatingEngineError,
    ResourceNotFoundError,
    ValidationError,
)
from .middleware.logging import RequestLoggingMiddleware

logger = logging.getLogger(__name__)

# Substrings SQLite and PostgreSQL use for unique violations
UNIQUE_VIOLATION_MARKERS = ("UNIQUE constraint failed", "duplicate key")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    yield
    await engine.dispose()


app = FastAPI(title="ClubRank API", lifespan=lifespan)

app.add_middleware(RequestLoggingMiddleware)


def _error(status_code: int, detail: str, exc: Exception | None = None) -> JSONResponse:
    content = {"detail": detail}
    if exc is not None:
        content["error_type"] = type(exc).__name__
    return JSONResponse(status_code=status_code, content=content)


# =============================================================================
# Global Exception Handlers
# =============================================================================


@app.exception_handler(ResourceNotFoundError)
async def not_found_handler(request: Request, exc: ResourceNotFoundError) -> JSONResponse:
    logger.warning("Not found: %s", exc.message, extra=exc.details)
    return _error(404, exc.message, exc)


@app.exception_handler(ValidationError)
async def invalid_match_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning("Rejected input: %s", exc.message, extra=exc.details)
    return _error(422, exc.message, exc)


@app.exception_handler(RatingEngineError)
async def rating_engine_handler(request: Request, exc: RatingEngineError) -> JSONResponse:
    """The transaction was rolled back, so no rating changed."""
    logger.error("Rating engine failure: %s", exc.message, extra=exc.details, exc_info=True)
    return _error(500, "Rating calculation failed", exc)


@app.exception_handler(ClubRankError)
async def clubrank_error_handler(request: Request, exc: ClubRankError) -> JSONResponse:
    logger.error("Unclassified ClubRank error: %s", exc.message, extra=exc.details, exc_info=True)
    return _error(500, exc.message, exc)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Unique violations become 409; other constraint failures 400."""
    reason = str(exc.orig) if exc.orig else str(exc)
    logger.warning("Integrity error: %s", reason)
    if any(marker in reason for marker in UNIQUE_VIOLATION_MARKERS):
        return _error(409, "Resource already exists with given unique field(s)")
    return _error(400, "Database constraint violation")


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return _error(500, "An internal database error occurred")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return _error(500, "An internal server error occurred")


app.include_router(player.router)
app.include_router(match.router)
app.include_router(ratings.router)


@app.get("/", tags=["Root"])
async def read_root() -> dict[str, str]:
    return {"message": "Welcome to the ClubRank API"}


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "healthy"}
