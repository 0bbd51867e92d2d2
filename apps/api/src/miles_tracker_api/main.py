"""FastAPI application factory."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from miles_tracker_api.config import settings

# Propagate DB URL so miles_tracker_db.database picks it up via os.getenv.
os.environ.setdefault("DATABASE_URL", settings.database_url)

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from miles_tracker_api.dependencies import require_token
from miles_tracker_api.routers import flights, programs
from miles_tracker_core.errors import (
    MilesTrackerError,
    NotFoundError,
    ParseError,
    ValidationError,
)
from miles_tracker_db.database import engine

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    ValidationError.kind: status.HTTP_400_BAD_REQUEST,
    ParseError.kind: status.HTTP_400_BAD_REQUEST,
    NotFoundError.kind: status.HTTP_404_NOT_FOUND,
}


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"ok": False, "error": {"code": code, "message": message}},
    )


async def _handle_domain_error(
    _request: Request, exc: MilesTrackerError
) -> JSONResponse:
    status_code = _STATUS_BY_KIND.get(
        exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    return JSONResponse(
        status_code=status_code, content={"ok": False, "error": exc.to_dict()}
    )


async def _handle_http_error(
    _request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    code = "Unauthorized" if exc.status_code == 401 else "HTTPError"
    response = _error_response(exc.status_code, code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def _handle_unexpected(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error: %s", exc)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "Internal server error",
    )


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage startup / shutdown resources."""
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    app = FastAPI(
        title="Miles Tracker API",
        version="0.1.0",
        lifespan=_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MilesTrackerError, _handle_domain_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_error)
    app.add_exception_handler(Exception, _handle_unexpected)

    @app.get("/ping")
    async def ping() -> dict[str, str]:
        return {"status": "ok"}

    # Routers
    _prefix = "/api"
    _auth = [Depends(require_token)]
    app.include_router(programs.router, prefix=_prefix, dependencies=_auth)
    app.include_router(flights.router, prefix=_prefix, dependencies=_auth)

    return app


app = create_app()
