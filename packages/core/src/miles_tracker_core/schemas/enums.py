"""Enums for award flight records and query options."""

from enum import StrEnum


class Cabin(StrEnum):
    """Travel class of an award seat."""

    ECONOMY = "economy"
    BUSINESS = "business"
    FIRST = "first"


class RouteType(StrEnum):
    """Hop count classification of an itinerary."""

    DIRECT = "direct"
    ONE_STOP = "1-stop"
    TWO_STOP = "2-stop"


class SortOrder(StrEnum):
    """Row ordering for flight search."""

    DATE = "date"
    POINTS = "points"
