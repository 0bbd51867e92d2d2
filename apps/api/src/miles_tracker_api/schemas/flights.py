"""Award flight request / response schemas."""

from __future__ import annotations

from datetime import date, datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field


class AwardFlightRow(BaseModel):
    """One stored award flight snapshot."""

    id: int
    program_id: str
    origin: str
    destination: str
    flight_number: str
    departure_date: date
    departure_time: str
    arrival_time: str
    arrival_day_offset: int
    duration_minutes: int
    route_type: str
    cabin: str
    tier: str
    points: int
    available: bool
    seats_left: int | None = None
    taxes: float
    cash_equivalent: float | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SearchMeta(BaseModel):
    """Pagination info; ``total`` counts every match, not just this page."""

    total: int
    limit: int
    offset: int


class SearchResult(BaseModel):
    """Rows of one search page plus pagination meta."""

    data: list[AwardFlightRow]
    meta: SearchMeta


class DateRange(BaseModel):
    """Inclusive departure date bounds, serialized as ``{"from", "to"}``."""

    model_config = ConfigDict(populate_by_name=True)

    from_: date | None = Field(default=None, alias="from")
    to: date | None = None


class TierPointStats(BaseModel):
    """Points spread for one cabin/tier group."""

    min_points: int
    max_points: int
    avg_points: float
    available_count: int


class FlightStats(BaseModel):
    """Per-cabin, per-tier aggregates; a cabin with no rows is ``None``."""

    origin: str
    destination: str
    date_range: DateRange
    economy: dict[str, TierPointStats] | None = None
    business: dict[str, TierPointStats] | None = None
    first: dict[str, TierPointStats] | None = None
    total_flights: int
    last_updated: datetime | None = None


class DestinationSummary(BaseModel):
    """Aggregate over all flights from the origin to one destination."""

    destination: str
    flight_count: int
    date_range: DateRange
    economy_min_points: int | None = None
    business_min_points: int | None = None
    first_min_points: int | None = None
    available_count: int
    last_updated: datetime | None = None


class CabinDatePrice(BaseModel):
    """Cheapest points for a cabin on one day."""

    min_points: int
    available: bool


class DatePricing(BaseModel):
    """Cheapest fare per cabin for one departure date."""

    departure_date: date
    economy: CabinDatePrice | None = None
    business: CabinDatePrice | None = None
    first: CabinDatePrice | None = None
    last_updated: datetime | None = None


class UpsertResult(BaseModel):
    """Number of records submitted; updates count as well as inserts."""

    upserted: int


class DeleteResult(BaseModel):
    deleted: int
