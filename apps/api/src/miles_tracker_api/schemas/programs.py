"""Loyalty program schemas."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel


class ProgramItem(BaseModel):
    """Single loyalty program entry."""

    id: str
    name: str
    airline: str
    alliance: str | None = None
    created_at: datetime | None = None
