"""Turn raw query parameters and JSON bodies into validated filter sets.

Each ``normalize_*`` function reads a plain mapping (query string values or a
decoded JSON object), validates every field it knows about and returns a
frozen pydantic model.  The first violated rule raises
:class:`~miles_tracker_core.errors.ValidationError`; nothing is clamped or
silently defaulted when a value is present but malformed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .errors import ValidationError
from .limits import DEFAULT_LIMITS, QueryLimits
from .parsing import (
    Invalid,
    Valid,
    is_blank,
    parse_bool,
    parse_choice,
    parse_integer,
    parse_iata,
    parse_iso_date,
    parse_non_negative_int,
    parse_non_negative_number,
    parse_positive_int,
    parse_text,
    parse_time_of_day,
    round2,
)
from .schemas.enums import Cabin, RouteType, SortOrder
from .schemas.filters import (
    CheapestByDateFilters,
    DeleteFilters,
    DestinationFilters,
    FlightRecord,
    ProgramInput,
    SearchFilters,
    StatsFilters,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .parsing import ParseResult

logger = logging.getLogger(__name__)

_IATA_MESSAGE = "must be an uppercase 3-letter IATA code"


def _optional(result: ParseResult[Any], default: Any = None) -> Any:
    if isinstance(result, Invalid):
        raise ValidationError(result.reason)
    if isinstance(result, Valid):
        return result.value
    return default


def _required(result: ParseResult[Any], missing: str) -> Any:
    if isinstance(result, Invalid):
        raise ValidationError(result.reason)
    if isinstance(result, Valid):
        return result.value
    raise ValidationError(missing)


# ------------------------------------------------------------------
# Shared field groups
# ------------------------------------------------------------------


def _origin(raw: Mapping[str, Any], limits: QueryLimits) -> str:
    return _optional(parse_iata(raw.get("origin"), "origin"), limits.default_origin)


def _destination(raw: Mapping[str, Any]) -> str:
    return _required(
        parse_iata(raw.get("destination"), "destination"),
        f"destination {_IATA_MESSAGE}",
    )


def _date_filters(raw: Mapping[str, Any], *, allow_single: bool) -> dict[str, Any]:
    """Validate ``date`` / ``date_from`` / ``date_to``.

    A single date and a range are mutually exclusive.  When *allow_single* is
    False any ``date`` value is refused so a caller cannot widen a scoped
    operation by using the wrong key.
    """
    has_single = not is_blank(raw.get("date"))
    has_range = not is_blank(raw.get("date_from")) or not is_blank(raw.get("date_to"))

    if has_single and not allow_single:
        msg = "date is not supported here; use date_from/date_to"
        raise ValidationError(msg)
    if has_single and has_range:
        msg = "date cannot be combined with date_from/date_to"
        raise ValidationError(msg)

    single = _optional(parse_iso_date(raw.get("date"), "date"))
    date_from = _optional(parse_iso_date(raw.get("date_from"), "date_from"))
    date_to = _optional(parse_iso_date(raw.get("date_to"), "date_to"))

    if date_from is not None and date_to is not None and date_from > date_to:
        msg = "date_from cannot be after date_to"
        raise ValidationError(msg)

    dates: dict[str, Any] = {"date_from": date_from, "date_to": date_to}
    if allow_single:
        dates["date"] = single
    return dates


def _available_only(raw: Mapping[str, Any]) -> bool:
    return _optional(
        parse_bool(raw.get("available_only"), "available_only", textual=True),
        True,
    )


def _route_filters(raw: Mapping[str, Any], limits: QueryLimits) -> dict[str, Any]:
    """Fields common to search and stats, validated in a fixed order."""
    destination = _destination(raw)
    origin = _origin(raw, limits)
    dates = _date_filters(raw, allow_single=True)
    cabin = _optional(parse_choice(raw.get("cabin"), "cabin", Cabin))
    tier = _optional(parse_text(raw.get("tier"), "tier"))
    program_id = _optional(parse_text(raw.get("program_id"), "program_id"))
    available_only = _available_only(raw)
    points_min = _optional(parse_positive_int(raw.get("points_min"), "points_min"))
    points_max = _optional(parse_positive_int(raw.get("points_max"), "points_max"))

    if points_min is not None and points_max is not None and points_min > points_max:
        msg = "points_min cannot be greater than points_max"
        raise ValidationError(msg)

    return {
        "origin": origin,
        "destination": destination,
        **dates,
        "cabin": cabin,
        "tier": tier,
        "program_id": program_id,
        "available_only": available_only,
        "points_min": points_min,
        "points_max": points_max,
    }


# ------------------------------------------------------------------
# Read / delete filters
# ------------------------------------------------------------------


def normalize_search_filters(
    raw: Mapping[str, Any],
    limits: QueryLimits = DEFAULT_LIMITS,
) -> SearchFilters:
    """Validate search input; applies origin, limit, offset and sort defaults."""
    route = _route_filters(raw, limits)

    limit_message = f"must be an integer between 1 and {limits.max_limit}"
    limit = _optional(
        parse_integer(raw.get("limit"), "limit", limit_message),
        limits.default_limit,
    )
    if not 1 <= limit <= limits.max_limit:
        raise ValidationError(f"limit {limit_message}")
    offset = _optional(parse_non_negative_int(raw.get("offset"), "offset"), 0)
    sort = _optional(parse_choice(raw.get("sort"), "sort", SortOrder), SortOrder.DATE)

    return SearchFilters(**route, sort=sort, limit=limit, offset=offset)


def normalize_stats_filters(
    raw: Mapping[str, Any],
    limits: QueryLimits = DEFAULT_LIMITS,
) -> StatsFilters:
    """Same rules as search; pagination and sort keys are ignored."""
    return StatsFilters(**_route_filters(raw, limits))


def normalize_delete_filters(
    raw: Mapping[str, Any],
    limits: QueryLimits = DEFAULT_LIMITS,
) -> DeleteFilters:
    """Deletes need an explicit program and destination."""
    program_id = _required(
        parse_text(raw.get("program_id"), "program_id"), "program_id is required"
    )
    destination = _destination(raw)
    origin = _origin(raw, limits)
    dates = _date_filters(raw, allow_single=False)
    cabin = _optional(parse_choice(raw.get("cabin"), "cabin", Cabin))

    return DeleteFilters(
        program_id=program_id,
        origin=origin,
        destination=destination,
        cabin=cabin,
        **dates,
    )


def normalize_destination_filters(
    raw: Mapping[str, Any],
    limits: QueryLimits = DEFAULT_LIMITS,
) -> DestinationFilters:
    origin = _origin(raw, limits)
    dates = _date_filters(raw, allow_single=False)
    cabin = _optional(parse_choice(raw.get("cabin"), "cabin", Cabin))
    available_only = _available_only(raw)

    return DestinationFilters(
        origin=origin, cabin=cabin, available_only=available_only, **dates
    )


def normalize_cheapest_by_date_filters(
    raw: Mapping[str, Any],
    limits: QueryLimits = DEFAULT_LIMITS,
) -> CheapestByDateFilters:
    destination = _destination(raw)
    origin = _origin(raw, limits)
    dates = _date_filters(raw, allow_single=False)
    cabin = _optional(parse_choice(raw.get("cabin"), "cabin", Cabin))
    program_id = _optional(parse_text(raw.get("program_id"), "program_id"))
    available_only = _available_only(raw)

    return CheapestByDateFilters(
        origin=origin,
        destination=destination,
        cabin=cabin,
        program_id=program_id,
        available_only=available_only,
        **dates,
    )


# ------------------------------------------------------------------
# Write payloads
# ------------------------------------------------------------------


def normalize_flight_record(
    raw: Any,
    index: int,
    limits: QueryLimits = DEFAULT_LIMITS,
) -> FlightRecord:
    """Validate one record of a bulk upsert.

    Every message is prefixed with ``records[<index>]`` so the submitter can
    find the offending row.
    """
    pointer = f"records[{index}]"
    if not isinstance(raw, Mapping):
        raise ValidationError(f"{pointer} must be an object")

    def name(field: str) -> str:
        return f"{pointer}.{field}"

    def text(field: str) -> str:
        return _required(
            parse_text(raw.get(field), name(field)), f"{name(field)} is required"
        )

    def iata(field: str, default: str | None = None) -> str:
        result = parse_iata(raw.get(field), name(field))
        if default is not None:
            return _optional(result, default)
        return _required(result, f"{name(field)} {_IATA_MESSAGE}")

    def clock(field: str) -> Any:
        return _required(
            parse_time_of_day(raw.get(field), name(field)),
            f"{name(field)} must be HH:MM",
        )

    def positive(field: str) -> int:
        return _required(
            parse_positive_int(raw.get(field), name(field)),
            f"{name(field)} must be a positive integer",
        )

    program_id = text("program_id")
    origin = iata("origin", limits.default_origin)
    destination = iata("destination")
    flight_number = text("flight_number")
    departure_date = _required(
        parse_iso_date(raw.get("departure_date"), name("departure_date")),
        f"{name('departure_date')} must be YYYY-MM-DD",
    )
    departure_time = clock("departure_time")
    arrival_time = clock("arrival_time")

    offset_message = "must be one of: 0, 1, 2"
    arrival_day_offset = _optional(
        parse_integer(
            raw.get("arrival_day_offset"), name("arrival_day_offset"), offset_message
        ),
        0,
    )
    if arrival_day_offset not in (0, 1, 2):
        raise ValidationError(f"{name('arrival_day_offset')} {offset_message}")

    duration_minutes = positive("duration_minutes")
    route_type = _required(
        parse_choice(raw.get("route_type"), name("route_type"), RouteType),
        f"{name('route_type')} must be one of: direct, 1-stop, 2-stop",
    )
    cabin = _required(
        parse_choice(raw.get("cabin"), name("cabin"), Cabin),
        f"{name('cabin')} must be one of: economy, business, first",
    )
    tier = text("tier")
    points = positive("points")
    available = _optional(parse_bool(raw.get("available"), name("available")), True)
    seats_left = _optional(
        parse_non_negative_int(raw.get("seats_left"), name("seats_left"))
    )
    taxes = _required(
        parse_non_negative_number(raw.get("taxes"), name("taxes")),
        f"{name('taxes')} must be a non-negative number",
    )
    cash_equivalent = _optional(
        parse_non_negative_number(raw.get("cash_equivalent"), name("cash_equivalent"))
    )
    notes = _optional(parse_text(raw.get("notes"), name("notes")))

    return FlightRecord(
        program_id=program_id,
        origin=origin,
        destination=destination,
        flight_number=flight_number,
        departure_date=departure_date,
        departure_time=departure_time,
        arrival_time=arrival_time,
        arrival_day_offset=arrival_day_offset,
        duration_minutes=duration_minutes,
        route_type=route_type,
        cabin=cabin,
        tier=tier,
        points=points,
        available=available,
        seats_left=seats_left,
        taxes=round2(taxes),
        cash_equivalent=None if cash_equivalent is None else round2(cash_equivalent),
        notes=notes,
    )


def normalize_flight_batch(
    records: Sequence[Any],
    limits: QueryLimits = DEFAULT_LIMITS,
) -> list[FlightRecord]:
    """Check the batch size, then validate every record before any write."""
    if not records:
        msg = "Request body must include at least one flight record"
        raise ValidationError(msg)
    if len(records) > limits.max_upsert_records:
        msg = f"Maximum {limits.max_upsert_records} records allowed per request"
        raise ValidationError(msg)

    normalized = [
        normalize_flight_record(raw, index, limits)
        for index, raw in enumerate(records)
    ]
    logger.debug("Validated %d flight records", len(normalized))
    return normalized


def normalize_program(raw: Mapping[str, Any]) -> ProgramInput:
    """``id``, ``name`` and ``airline`` are required; ``alliance`` is optional."""
    fields = {
        field: _required(parse_text(raw.get(field), field), f"{field} is required")
        for field in ("id", "name", "airline")
    }
    alliance = _optional(parse_text(raw.get("alliance"), "alliance"))
    return ProgramInput(**fields, alliance=alliance)
