"""SQLAlchemy ORM models for Miles Tracker."""

from .award_flight import IDENTITY_COLUMNS, AwardFlight
from .base import Base, TimestampMixin
from .program import Program

__all__ = [
    "IDENTITY_COLUMNS",
    "AwardFlight",
    "Base",
    "Program",
    "TimestampMixin",
]
