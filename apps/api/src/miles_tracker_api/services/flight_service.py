"""Award flight search, aggregation and bulk-write service."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from itertools import batched
from typing import TYPE_CHECKING, Any

from miles_tracker_core.errors import DatabaseError
from miles_tracker_core.limits import DEFAULT_LIMITS, QueryLimits
from miles_tracker_core.normalize import (
    normalize_cheapest_by_date_filters,
    normalize_delete_filters,
    normalize_destination_filters,
    normalize_flight_batch,
    normalize_search_filters,
    normalize_stats_filters,
)
from miles_tracker_core.parsing import round2
from miles_tracker_core.query import (
    build_cheapest_where,
    build_delete_where,
    build_destination_where,
    build_route_where,
    order_by,
)
from miles_tracker_core.schemas import Cabin
from miles_tracker_db.database import Statement, run_concurrently, storage_errors
from miles_tracker_db.models import IDENTITY_COLUMNS

from ..schemas.flights import (
    CabinDatePrice,
    DatePricing,
    DateRange,
    DeleteResult,
    DestinationSummary,
    FlightStats,
    SearchMeta,
    SearchResult,
    TierPointStats,
    UpsertResult,
)
from .rows import (
    AWARD_FLIGHT_COLUMNS,
    as_date,
    as_datetime,
    as_int,
    to_award_flight_row,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from miles_tracker_core.schemas import FlightRecord
    from miles_tracker_db.database import Database

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------
# Upsert statement
# ------------------------------------------------------------------

_MUTABLE_COLUMNS = (
    "departure_time",
    "arrival_time",
    "arrival_day_offset",
    "duration_minutes",
    "route_type",
    "points",
    "available",
    "seats_left",
    "taxes",
    "cash_equivalent",
    "notes",
    "updated_at",
)

_INSERT_COLUMNS = (
    "program_id",
    "origin",
    "destination",
    "flight_number",
    "departure_date",
    "departure_time",
    "arrival_time",
    "arrival_day_offset",
    "duration_minutes",
    "route_type",
    "cabin",
    "tier",
    "points",
    "available",
    "seats_left",
    "taxes",
    "cash_equivalent",
    "notes",
    "created_at",
    "updated_at",
)

_UPSERT_SQL = (
    f"INSERT INTO award_flights ({', '.join(_INSERT_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in _INSERT_COLUMNS)}) "
    f"ON CONFLICT ({', '.join(IDENTITY_COLUMNS)}) DO UPDATE SET "
    + ", ".join(f"{column} = excluded.{column}" for column in _MUTABLE_COLUMNS)
)

_AVAILABLE_COUNT = "SUM(CASE WHEN available THEN 1 ELSE 0 END)"


def _upsert_params(record: FlightRecord, now: datetime) -> list[Any]:
    return [
        record.program_id,
        record.origin,
        record.destination,
        record.flight_number,
        record.departure_date,
        record.departure_time.strftime("%H:%M"),
        record.arrival_time.strftime("%H:%M"),
        record.arrival_day_offset,
        record.duration_minutes,
        record.route_type,
        record.cabin,
        record.tier,
        record.points,
        record.available,
        record.seats_left,
        record.taxes,
        record.cash_equivalent,
        record.notes,
        now,
        now,
    ]


def _cabin_min_points() -> str:
    return ", ".join(
        f"MIN(CASE WHEN cabin = '{cabin.value}' THEN points END) "
        f"AS {cabin.value}_min_points"
        for cabin in Cabin
    )


def _cabin_min_available_points() -> str:
    return ", ".join(
        f"MIN(CASE WHEN cabin = '{cabin.value}' AND available THEN points END) "
        f"AS {cabin.value}_min_available_points"
        for cabin in Cabin
    )


class FlightService:
    """Reads, aggregates and writes award flight snapshots.

    Every public method takes the raw, untrusted input mapping and validates
    it before touching the store, so a rejected request never reaches SQL.
    """

    def __init__(self, db: Database, limits: QueryLimits = DEFAULT_LIMITS) -> None:
        self._db = db
        self._limits = limits

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(self, raw: Mapping[str, Any]) -> SearchResult:
        """One page of matching flights plus the total match count."""
        filters = normalize_search_filters(raw, self._limits)
        where = build_route_where(filters)

        rows_sql = (
            f"SELECT {AWARD_FLIGHT_COLUMNS} FROM award_flights {where.sql} "
            f"{order_by(filters.sort)} LIMIT ? OFFSET ?"
        )
        count_sql = f"SELECT COUNT(*) AS total FROM award_flights {where.sql}"

        with storage_errors("Failed to query award flights"):
            rows, count_row = await run_concurrently(
                self._db.fetch_all(
                    rows_sql, [*where.params, filters.limit, filters.offset]
                ),
                self._db.fetch_one(count_sql, where.params),
            )

        return SearchResult(
            data=[to_award_flight_row(row) for row in rows],
            meta=SearchMeta(
                total=as_int(count_row["total"] if count_row else None),
                limit=filters.limit,
                offset=filters.offset,
            ),
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def upsert(self, records: Sequence[Any]) -> UpsertResult:
        """Insert or update a batch of records keyed by flight identity.

        The whole batch is validated first.  Writes then go out in chunks of
        ``storage_batch_chunk_size``, one transaction per chunk; a failing
        chunk stops the run but earlier chunks stay committed.
        """
        normalized = normalize_flight_batch(records, self._limits)
        now = datetime.now(UTC)
        chunks = list(batched(normalized, self._limits.storage_batch_chunk_size))

        for index, chunk in enumerate(chunks):
            statements = [
                Statement(_UPSERT_SQL, _upsert_params(record, now))
                for record in chunk
            ]
            try:
                with storage_errors("Failed to upsert award flights"):
                    await self._db.batch(statements)
            except DatabaseError:
                logger.warning(
                    "Upsert stopped at chunk %d/%d; %d records were already written",
                    index + 1,
                    len(chunks),
                    index * self._limits.storage_batch_chunk_size,
                )
                raise

        logger.info(
            "Upserted %d award flights in %d chunks", len(normalized), len(chunks)
        )
        return UpsertResult(upserted=len(normalized))

    async def delete(self, raw: Mapping[str, Any]) -> DeleteResult:
        filters = normalize_delete_filters(raw, self._limits)
        where = build_delete_where(filters)

        with storage_errors("Failed to delete award flights"):
            deleted = await self._db.execute(
                f"DELETE FROM award_flights {where.sql}", where.params
            )

        logger.info(
            "Deleted %d award flights for %s %s-%s",
            deleted,
            filters.program_id,
            filters.origin,
            filters.destination,
        )
        return DeleteResult(deleted=deleted)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    async def stats(self, raw: Mapping[str, Any]) -> FlightStats:
        """Per-cabin, per-tier points spread for one route."""
        filters = normalize_stats_filters(raw, self._limits)
        where = build_route_where(filters)

        grouped_sql = (
            "SELECT cabin, tier, MIN(points) AS min_points, "
            "MAX(points) AS max_points, AVG(points) AS avg_points, "
            f"{_AVAILABLE_COUNT} AS available_count "
            f"FROM award_flights {where.sql} "
            "GROUP BY cabin, tier ORDER BY cabin, tier"
        )
        summary_sql = (
            "SELECT COUNT(*) AS total, MIN(departure_date) AS min_date, "
            "MAX(departure_date) AS max_date, MAX(updated_at) AS last_updated "
            f"FROM award_flights {where.sql}"
        )

        with storage_errors("Failed to compute award flight stats"):
            groups, summary = await run_concurrently(
                self._db.fetch_all(grouped_sql, where.params),
                self._db.fetch_one(summary_sql, where.params),
            )

        by_cabin: dict[Cabin, dict[str, TierPointStats]] = {c: {} for c in Cabin}
        for row in groups:
            try:
                cabin = Cabin(row["cabin"])
            except ValueError:
                continue
            if not row["tier"]:
                continue
            by_cabin[cabin][row["tier"]] = TierPointStats(
                min_points=int(row["min_points"]),
                max_points=int(row["max_points"]),
                avg_points=round2(float(row["avg_points"])),
                available_count=as_int(row["available_count"]),
            )

        summary = summary or {}
        computed_from = as_date(summary.get("min_date"))
        computed_to = as_date(summary.get("max_date"))
        date_from = filters.date or filters.date_from or computed_from
        date_to = filters.date or filters.date_to or computed_to

        return FlightStats(
            origin=filters.origin,
            destination=filters.destination,
            date_range=DateRange(from_=date_from, to=date_to),
            economy=by_cabin[Cabin.ECONOMY] or None,
            business=by_cabin[Cabin.BUSINESS] or None,
            first=by_cabin[Cabin.FIRST] or None,
            total_flights=as_int(summary.get("total")),
            last_updated=as_datetime(summary.get("last_updated")),
        )

    async def destinations(self, raw: Mapping[str, Any]) -> list[DestinationSummary]:
        """Cheapest points per cabin for every destination reachable from origin."""
        filters = normalize_destination_filters(raw, self._limits)
        where = build_destination_where(filters)

        sql = (
            "SELECT destination, COUNT(*) AS flight_count, "
            "MIN(departure_date) AS min_date, MAX(departure_date) AS max_date, "
            f"{_cabin_min_points()}, "
            f"{_AVAILABLE_COUNT} AS available_count, "
            "MAX(updated_at) AS last_updated "
            f"FROM award_flights {where.sql} "
            "GROUP BY destination ORDER BY destination ASC"
        )

        with storage_errors("Failed to list destinations"):
            rows = await self._db.fetch_all(sql, where.params)

        return [
            DestinationSummary(
                destination=row["destination"],
                flight_count=as_int(row["flight_count"]),
                date_range=DateRange(
                    from_=as_date(row["min_date"]), to=as_date(row["max_date"])
                ),
                economy_min_points=row["economy_min_points"],
                business_min_points=row["business_min_points"],
                first_min_points=row["first_min_points"],
                available_count=as_int(row["available_count"]),
                last_updated=as_datetime(row["last_updated"]),
            )
            for row in rows
        ]

    async def cheapest_by_date(self, raw: Mapping[str, Any]) -> list[DatePricing]:
        """Cheapest points per cabin for each departure date on a route."""
        filters = normalize_cheapest_by_date_filters(raw, self._limits)
        where = build_cheapest_where(filters)

        sql = (
            "SELECT departure_date, "
            f"{_cabin_min_points()}, {_cabin_min_available_points()}, "
            "MAX(updated_at) AS last_updated "
            f"FROM award_flights {where.sql} "
            "GROUP BY departure_date ORDER BY departure_date ASC"
        )

        with storage_errors("Failed to compute cheapest fares by date"):
            rows = await self._db.fetch_all(sql, where.params)

        return [self._to_date_pricing(row) for row in rows]

    @staticmethod
    def _to_date_pricing(row: Mapping[str, Any]) -> DatePricing:
        # A cabin's minimum counts as available when some available row
        # in that cabin carries the same points.
        prices: dict[str, CabinDatePrice | None] = {}
        for cabin in Cabin:
            min_points = row[f"{cabin.value}_min_points"]
            min_available = row[f"{cabin.value}_min_available_points"]
            prices[cabin.value] = (
                None
                if min_points is None
                else CabinDatePrice(
                    min_points=int(min_points),
                    available=min_available is not None
                    and int(min_available) == int(min_points),
                )
            )
        return DatePricing(
            departure_date=as_date(row["departure_date"]),
            last_updated=as_datetime(row["last_updated"]),
            **prices,
        )
