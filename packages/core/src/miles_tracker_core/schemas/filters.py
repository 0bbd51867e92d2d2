"""Validated, fully typed filter and record structures."""

from __future__ import annotations

import datetime as dt  # noqa: TC003

from pydantic import BaseModel, ConfigDict

from .enums import Cabin, RouteType, SortOrder


class RouteFilters(BaseModel):
    """Filters shared by search, count and stats queries."""

    model_config = ConfigDict(frozen=True)

    origin: str
    destination: str
    date: dt.date | None = None
    date_from: dt.date | None = None
    date_to: dt.date | None = None
    cabin: Cabin | None = None
    tier: str | None = None
    program_id: str | None = None
    available_only: bool = True
    points_min: int | None = None
    points_max: int | None = None


class StatsFilters(RouteFilters):
    """Stats aggregate every match, so there is no pagination."""


class SearchFilters(RouteFilters):
    """Route filters plus ordering and pagination."""

    sort: SortOrder = SortOrder.DATE
    limit: int = 200
    offset: int = 0


class DeleteFilters(BaseModel):
    """Deletion is always scoped to one program and one route."""

    model_config = ConfigDict(frozen=True)

    program_id: str
    origin: str
    destination: str
    date_from: dt.date | None = None
    date_to: dt.date | None = None
    cabin: Cabin | None = None


class DestinationFilters(BaseModel):
    """Destination discovery from a fixed origin."""

    model_config = ConfigDict(frozen=True)

    origin: str
    date_from: dt.date | None = None
    date_to: dt.date | None = None
    cabin: Cabin | None = None
    available_only: bool = True


class CheapestByDateFilters(BaseModel):
    """Per-day cheapest fares on one route."""

    model_config = ConfigDict(frozen=True)

    origin: str
    destination: str
    date_from: dt.date | None = None
    date_to: dt.date | None = None
    cabin: Cabin | None = None
    program_id: str | None = None
    available_only: bool = True


class FlightRecord(BaseModel):
    """One normalized award flight snapshot, ready to be written."""

    model_config = ConfigDict(frozen=True)

    program_id: str
    origin: str
    destination: str
    flight_number: str
    departure_date: dt.date
    departure_time: dt.time
    arrival_time: dt.time
    arrival_day_offset: int = 0
    duration_minutes: int
    route_type: RouteType
    cabin: Cabin
    tier: str
    points: int
    available: bool = True
    seats_left: int | None = None
    taxes: float
    cash_equivalent: float | None = None
    notes: str | None = None


class ProgramInput(BaseModel):
    """Validated loyalty program upsert payload."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    airline: str
    alliance: str | None = None
