"""Coercion of raw store rows into response schemas.

Drivers disagree on column types: SQLite hands back ISO strings for dates and
timestamps and integers for booleans, Postgres returns ``Decimal`` for numeric
aggregates.  Everything read from the store passes through these helpers.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from miles_tracker_core.parsing import round2

from ..schemas.flights import AwardFlightRow
from ..schemas.programs import ProgramItem

if TYPE_CHECKING:
    from collections.abc import Mapping

AWARD_FLIGHT_COLUMNS = (
    "id, program_id, origin, destination, flight_number, departure_date, "
    "departure_time, arrival_time, arrival_day_offset, duration_minutes, "
    "route_type, cabin, tier, points, available, seats_left, taxes, "
    "cash_equivalent, notes, created_at, updated_at"
)

PROGRAM_COLUMNS = "id, name, airline, alliance, created_at"


def as_date(value: Any) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def as_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def as_int(value: Any, default: int = 0) -> int:
    return default if value is None else int(value)


def as_money(value: Any) -> float | None:
    return None if value is None else round2(float(value))


def to_award_flight_row(row: Mapping[str, Any]) -> AwardFlightRow:
    return AwardFlightRow(
        id=int(row["id"]),
        program_id=row["program_id"],
        origin=row["origin"],
        destination=row["destination"],
        flight_number=row["flight_number"],
        departure_date=as_date(row["departure_date"]),
        departure_time=row["departure_time"],
        arrival_time=row["arrival_time"],
        arrival_day_offset=as_int(row["arrival_day_offset"]),
        duration_minutes=int(row["duration_minutes"]),
        route_type=row["route_type"],
        cabin=row["cabin"],
        tier=row["tier"],
        points=int(row["points"]),
        available=bool(row["available"]),
        seats_left=None if row["seats_left"] is None else int(row["seats_left"]),
        taxes=as_money(row["taxes"]) or 0.0,
        cash_equivalent=as_money(row["cash_equivalent"]),
        notes=row["notes"],
        created_at=as_datetime(row["created_at"]),
        updated_at=as_datetime(row["updated_at"]),
    )


def to_program_item(row: Mapping[str, Any]) -> ProgramItem:
    return ProgramItem(
        id=row["id"],
        name=row["name"],
        airline=row["airline"],
        alliance=row["alliance"],
        created_at=as_datetime(row["created_at"]),
    )
