"""FastAPI dependency injection providers."""

from __future__ import annotations

import hmac
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from miles_tracker_api.config import settings
from miles_tracker_core.errors import ParseError
from miles_tracker_core.limits import QueryLimits
from miles_tracker_db.database import get_db as _db_dependency

# Re-export the DB dependency unchanged.
get_db = _db_dependency

_bearer_scheme = HTTPBearer(auto_error=False)


async def json_body(request: Request) -> Any:
    """Decoded JSON request body; undecodable input is a :class:`ParseError`."""
    try:
        return await request.json()
    except ValueError as exc:
        msg = "Request body is not valid JSON"
        raise ParseError(msg) from exc


def get_limits() -> QueryLimits:
    """Query defaults and batch ceilings from the current settings."""
    return settings.limits


async def require_token(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)
    ],
) -> None:
    """Reject the request unless it carries the configured bearer token.

    An unset token rejects every request rather than leaving the API open.
    """
    expected = settings.auth_token
    if (
        not expected
        or credentials is None
        or not hmac.compare_digest(credentials.credentials, expected)
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
