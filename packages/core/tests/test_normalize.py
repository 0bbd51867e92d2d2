"""Unit tests for filter and record normalization."""

from __future__ import annotations

from datetime import date, time

import pytest

from miles_tracker_core.errors import ValidationError
from miles_tracker_core.limits import QueryLimits
from miles_tracker_core.normalize import (
    normalize_cheapest_by_date_filters,
    normalize_delete_filters,
    normalize_destination_filters,
    normalize_flight_batch,
    normalize_flight_record,
    normalize_program,
    normalize_search_filters,
    normalize_stats_filters,
)
from miles_tracker_core.schemas import Cabin, RouteType, SortOrder


@pytest.fixture
def make_record():
    """Factory for a valid raw upsert record with per-test overrides."""

    def _make(**overrides):
        record = {
            "program_id": "enrich",
            "origin": "KUL",
            "destination": "AKL",
            "flight_number": "MH145",
            "departure_date": "2026-06-01",
            "departure_time": "09:30",
            "arrival_time": "23:55",
            "duration_minutes": 625,
            "route_type": "direct",
            "cabin": "economy",
            "tier": "saver",
            "points": 45000,
            "taxes": 120.0,
        }
        record.update(overrides)
        return record

    return _make


def _message(exc_info: pytest.ExceptionInfo[ValidationError]) -> str:
    return exc_info.value.message


# ---------------------------------------------------------------------------
# Search / stats
# ---------------------------------------------------------------------------


def test_search_defaults():
    filters = normalize_search_filters({"destination": "AKL"})
    assert filters.origin == "KUL"
    assert filters.limit == 200
    assert filters.offset == 0
    assert filters.sort is SortOrder.DATE
    assert filters.available_only is True
    assert filters.date is None


def test_search_parses_every_field():
    filters = normalize_search_filters(
        {
            "destination": "AKL",
            "origin": "SIN",
            "date_from": "2026-06-01",
            "date_to": "2026-06-30",
            "cabin": "business",
            "tier": "saver",
            "program_id": "enrich",
            "available_only": "false",
            "points_min": "10000",
            "points_max": "90000",
            "sort": "points",
            "limit": "25",
            "offset": "50",
        }
    )
    assert filters.origin == "SIN"
    assert filters.date_from == date(2026, 6, 1)
    assert filters.date_to == date(2026, 6, 30)
    assert filters.cabin is Cabin.BUSINESS
    assert filters.available_only is False
    assert (filters.points_min, filters.points_max) == (10000, 90000)
    assert filters.sort is SortOrder.POINTS
    assert (filters.limit, filters.offset) == (25, 50)


def test_destination_is_required():
    with pytest.raises(ValidationError) as exc_info:
        normalize_search_filters({})
    assert _message(exc_info) == "destination must be an uppercase 3-letter IATA code"


@pytest.mark.parametrize(
    "extra",
    [
        {"date_from": "2026-06-01"},
        {"date_to": "2026-06-30"},
        {"date_from": "2026-06-01", "date_to": "2026-06-30"},
        {"date_from": "2026-06-01", "cabin": "first", "limit": "5"},
    ],
)
def test_single_date_and_range_are_mutually_exclusive(extra):
    raw = {"destination": "AKL", "date": "2026-06-10", **extra}
    with pytest.raises(ValidationError) as exc_info:
        normalize_search_filters(raw)
    assert _message(exc_info) == "date cannot be combined with date_from/date_to"

    with pytest.raises(ValidationError):
        normalize_stats_filters(raw)


def test_mutual_exclusion_is_checked_before_date_format():
    with pytest.raises(ValidationError) as exc_info:
        normalize_search_filters(
            {"destination": "AKL", "date": "bogus", "date_from": "2026-06-01"}
        )
    assert "cannot be combined" in _message(exc_info)


def test_inverted_date_range_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        normalize_search_filters(
            {"destination": "AKL", "date_from": "2026-07-01", "date_to": "2026-06-01"}
        )
    assert _message(exc_info) == "date_from cannot be after date_to"


def test_inverted_points_range_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        normalize_search_filters(
            {"destination": "AKL", "points_min": "50000", "points_max": "10000"}
        )
    assert _message(exc_info) == "points_min cannot be greater than points_max"


@pytest.mark.parametrize("limit", ["0", "501", "-3", "ten", "2.5"])
def test_limit_outside_bounds_is_rejected_not_clamped(limit):
    with pytest.raises(ValidationError) as exc_info:
        normalize_search_filters({"destination": "AKL", "limit": limit})
    assert _message(exc_info) == "limit must be an integer between 1 and 500"


def test_limit_ceiling_follows_configured_limits():
    limits = QueryLimits(max_limit=50, default_limit=10)
    assert normalize_search_filters({"destination": "AKL"}, limits).limit == 10
    with pytest.raises(ValidationError) as exc_info:
        normalize_search_filters({"destination": "AKL", "limit": "51"}, limits)
    assert _message(exc_info) == "limit must be an integer between 1 and 50"


def test_malformed_values_are_not_replaced_by_defaults():
    with pytest.raises(ValidationError, match="origin must be"):
        normalize_search_filters({"destination": "AKL", "origin": "kul"})
    with pytest.raises(ValidationError, match="available_only must be true or false"):
        normalize_search_filters({"destination": "AKL", "available_only": "yes"})
    with pytest.raises(ValidationError, match="sort must be one of: date, points"):
        normalize_search_filters({"destination": "AKL", "sort": "price"})


def test_first_violation_wins():
    with pytest.raises(ValidationError) as exc_info:
        normalize_search_filters(
            {"destination": "AKL", "cabin": "coach", "points_min": "-1"}
        )
    assert _message(exc_info) == "cabin must be one of: economy, business, first"


def test_stats_ignores_pagination_keys():
    filters = normalize_stats_filters(
        {"destination": "AKL", "limit": "9999", "sort": "nonsense"}
    )
    assert filters.destination == "AKL"
    assert not hasattr(filters, "limit")


# ---------------------------------------------------------------------------
# Delete / destinations / cheapest-by-date
# ---------------------------------------------------------------------------


def test_delete_requires_program_and_destination():
    with pytest.raises(ValidationError) as exc_info:
        normalize_delete_filters({"destination": "AKL"})
    assert _message(exc_info) == "program_id is required"

    with pytest.raises(ValidationError) as exc_info:
        normalize_delete_filters({"program_id": "enrich"})
    assert "destination" in _message(exc_info)


def test_delete_rejects_single_date():
    with pytest.raises(ValidationError) as exc_info:
        normalize_delete_filters(
            {"program_id": "enrich", "destination": "AKL", "date": "2026-06-01"}
        )
    assert _message(exc_info) == "date is not supported here; use date_from/date_to"


def test_delete_filters():
    filters = normalize_delete_filters(
        {
            "program_id": "enrich",
            "destination": "AKL",
            "cabin": "business",
            "date_to": "2026-06-30",
        }
    )
    assert filters.origin == "KUL"
    assert filters.cabin is Cabin.BUSINESS
    assert filters.date_from is None
    assert filters.date_to == date(2026, 6, 30)


def test_destination_filters_need_no_destination():
    filters = normalize_destination_filters({"cabin": "first"})
    assert filters.origin == "KUL"
    assert filters.cabin is Cabin.FIRST
    assert filters.available_only is True


def test_cheapest_by_date_filters():
    filters = normalize_cheapest_by_date_filters(
        {"destination": "AKL", "program_id": " enrich ", "available_only": "False"}
    )
    assert filters.program_id == "enrich"
    assert filters.available_only is False
    with pytest.raises(ValidationError):
        normalize_cheapest_by_date_filters({"origin": "KUL"})


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


def test_record_defaults_and_types(make_record):
    record = normalize_flight_record(make_record(origin=None), 0)
    assert record.origin == "KUL"
    assert record.departure_date == date(2026, 6, 1)
    assert record.departure_time == time(9, 30)
    assert record.arrival_day_offset == 0
    assert record.available is True
    assert record.route_type is RouteType.DIRECT
    assert record.cash_equivalent is None


@pytest.mark.parametrize(
    ("raw_value", "expected"), [(123.456, 123.46), (123.454, 123.45), ("99.999", 100.0)]
)
def test_record_money_is_rounded_to_cents(make_record, raw_value, expected):
    record = normalize_flight_record(
        make_record(taxes=raw_value, cash_equivalent=raw_value), 0
    )
    assert record.taxes == expected
    assert record.cash_equivalent == expected


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"program_id": ""}, "records[3].program_id is required"),
        ({"destination": "akl"}, "records[3].destination must be an uppercase 3-letter IATA code"),
        ({"departure_date": "2026-02-30"}, "records[3].departure_date must be YYYY-MM-DD"),
        ({"arrival_time": "25:00"}, "records[3].arrival_time must be HH:MM"),
        ({"arrival_day_offset": 3}, "records[3].arrival_day_offset must be one of: 0, 1, 2"),
        ({"duration_minutes": 0}, "records[3].duration_minutes must be a positive integer"),
        ({"route_type": "3-stop"}, "records[3].route_type must be one of: direct, 1-stop, 2-stop"),
        ({"points": None}, "records[3].points must be a positive integer"),
        ({"available": "yes"}, "records[3].available must be a boolean"),
        ({"seats_left": -1}, "records[3].seats_left must be a non-negative integer"),
        ({"taxes": None}, "records[3].taxes must be a non-negative number"),
    ],
)
def test_record_violations_name_the_record(make_record, overrides, message):
    with pytest.raises(ValidationError) as exc_info:
        normalize_flight_record(make_record(**overrides), 3)
    assert _message(exc_info) == message


def test_record_must_be_an_object():
    with pytest.raises(ValidationError) as exc_info:
        normalize_flight_record(["not", "a", "dict"], 1)
    assert _message(exc_info) == "records[1] must be an object"


def test_batch_bounds(make_record):
    with pytest.raises(ValidationError) as exc_info:
        normalize_flight_batch([])
    assert _message(exc_info) == "Request body must include at least one flight record"

    with pytest.raises(ValidationError) as exc_info:
        normalize_flight_batch([make_record()] * 501)
    assert _message(exc_info) == "Maximum 500 records allowed per request"

    assert len(normalize_flight_batch([make_record()] * 500)) == 500


def test_batch_size_is_checked_before_record_contents():
    with pytest.raises(ValidationError) as exc_info:
        normalize_flight_batch([{}] * 501)
    assert _message(exc_info).startswith("Maximum 500")


def test_batch_reports_first_bad_record(make_record):
    records = [make_record(), make_record(points=-5), make_record(cabin="coach")]
    with pytest.raises(ValidationError) as exc_info:
        normalize_flight_batch(records)
    assert _message(exc_info) == "records[1].points must be a positive integer"


# ---------------------------------------------------------------------------
# Programs
# ---------------------------------------------------------------------------


def test_normalize_program():
    program = normalize_program(
        {"id": "enrich", "name": "Enrich", "airline": "Malaysia Airlines"}
    )
    assert program.alliance is None

    with pytest.raises(ValidationError) as exc_info:
        normalize_program({"id": "enrich", "name": "  ", "airline": "MH"})
    assert _message(exc_info) == "name is required"


# ---------------------------------------------------------------------------
# Oversized integers
# ---------------------------------------------------------------------------

_HUGE = "99999999999999999999"


@pytest.mark.parametrize(
    ("field", "message"),
    [
        ("limit", "limit must be an integer between 1 and 500"),
        ("offset", "offset must be a non-negative integer"),
        ("points_min", "points_min must be a positive integer"),
        ("points_max", "points_max must be a positive integer"),
    ],
)
def test_oversized_query_integers_fail_validation(field, message):
    with pytest.raises(ValidationError) as exc_info:
        normalize_search_filters({"destination": "AKL", field: _HUGE})
    assert _message(exc_info) == message


def test_oversized_record_points_fail_validation(make_record):
    with pytest.raises(ValidationError) as exc_info:
        normalize_flight_batch([make_record(points=10**20)])
    assert _message(exc_info) == "records[0].points must be a positive integer"
