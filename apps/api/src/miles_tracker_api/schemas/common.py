"""Shared response envelopes."""

from __future__ import annotations

from pydantic import BaseModel

from .flights import SearchMeta  # noqa: TC001


class ApiResponse[T](BaseModel):
    """Success envelope: ``{"ok": true, "data": ...}``."""

    ok: bool = True
    data: T


class SearchResponse[T](ApiResponse[T]):
    """Success envelope carrying pagination meta."""

    meta: SearchMeta


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error payload."""

    ok: bool = False
    error: ErrorDetail
