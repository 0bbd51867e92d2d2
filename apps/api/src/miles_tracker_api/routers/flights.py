"""Award flight router.

Query strings are handed to the service untouched; every value is validated
by the core normalizer so malformed input fails with a ``ValidationError``
envelope instead of a framework 422.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request

from miles_tracker_core.limits import QueryLimits  # noqa: TC002
from miles_tracker_db.database import Database  # noqa: TC002

from ..dependencies import get_db, get_limits, json_body
from ..schemas.common import ApiResponse, SearchResponse
from ..schemas.flights import (
    AwardFlightRow,
    DatePricing,
    DeleteResult,
    DestinationSummary,
    FlightStats,
    UpsertResult,
)
from ..services.flight_service import FlightService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/flights", tags=["flights"])

DbDep = Annotated[Database, Depends(get_db)]
LimitsDep = Annotated[QueryLimits, Depends(get_limits)]
BodyDep = Annotated[Any, Depends(json_body)]


@router.get("", response_model=SearchResponse[list[AwardFlightRow]])
async def search_flights(
    request: Request, db: DbDep, limits: LimitsDep
) -> SearchResponse[list[AwardFlightRow]]:
    result = await FlightService(db, limits).search(dict(request.query_params))
    return SearchResponse[list[AwardFlightRow]](data=result.data, meta=result.meta)


@router.post("", response_model=ApiResponse[UpsertResult])
async def upsert_flights(
    body: BodyDep, db: DbDep, limits: LimitsDep
) -> ApiResponse[UpsertResult]:
    """Accepts a single record object or an array of records."""
    records = body if isinstance(body, list) else [body]
    result = await FlightService(db, limits).upsert(records)
    return ApiResponse[UpsertResult](data=result)


@router.delete("", response_model=ApiResponse[DeleteResult])
async def delete_flights(
    request: Request, db: DbDep, limits: LimitsDep
) -> ApiResponse[DeleteResult]:
    result = await FlightService(db, limits).delete(dict(request.query_params))
    return ApiResponse[DeleteResult](data=result)


@router.get("/stats", response_model=ApiResponse[FlightStats])
async def flight_stats(
    request: Request, db: DbDep, limits: LimitsDep
) -> ApiResponse[FlightStats]:
    result = await FlightService(db, limits).stats(dict(request.query_params))
    return ApiResponse[FlightStats](data=result)


@router.get("/destinations", response_model=ApiResponse[list[DestinationSummary]])
async def list_destinations(
    request: Request, db: DbDep, limits: LimitsDep
) -> ApiResponse[list[DestinationSummary]]:
    result = await FlightService(db, limits).destinations(dict(request.query_params))
    return ApiResponse[list[DestinationSummary]](data=result)


@router.get("/cheapest-by-date", response_model=ApiResponse[list[DatePricing]])
async def cheapest_by_date(
    request: Request, db: DbDep, limits: LimitsDep
) -> ApiResponse[list[DatePricing]]:
    result = await FlightService(db, limits).cheapest_by_date(
        dict(request.query_params)
    )
    return ApiResponse[list[DatePricing]](data=result)
