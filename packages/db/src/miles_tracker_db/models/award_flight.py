"""Award flight model."""

from __future__ import annotations

from datetime import date  # noqa: TC003

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin

IDENTITY_COLUMNS = (
    "program_id",
    "origin",
    "destination",
    "flight_number",
    "departure_date",
    "cabin",
    "tier",
)


class AwardFlight(TimestampMixin, Base):
    """Award flights table - one priced snapshot per flight, date, cabin and tier."""

    __tablename__ = "award_flights"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    program_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("programs.id"), nullable=False
    )
    origin: Mapped[str] = mapped_column(String(3), nullable=False)
    destination: Mapped[str] = mapped_column(String(3), nullable=False)
    flight_number: Mapped[str] = mapped_column(String(16), nullable=False)
    departure_date: Mapped[date] = mapped_column(Date, nullable=False)
    departure_time: Mapped[str] = mapped_column(String(5), nullable=False)
    arrival_time: Mapped[str] = mapped_column(String(5), nullable=False)
    arrival_day_offset: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default="0"
    )
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    route_type: Mapped[str] = mapped_column(String(10), nullable=False)
    cabin: Mapped[str] = mapped_column(String(10), nullable=False)
    tier: Mapped[str] = mapped_column(String(50), nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    seats_left: Mapped[int | None] = mapped_column(Integer)
    taxes: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False)
    cash_equivalent: Mapped[float | None] = mapped_column(Numeric(12, 2))
    notes: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        UniqueConstraint(*IDENTITY_COLUMNS, name="uq_flight_route_date_cabin_tier"),
        Index("ix_award_flights_route_date", "origin", "destination", "departure_date"),
        Index("ix_award_flights_program_date", "program_id", "departure_date"),
        Index(
            "ix_award_flights_destination",
            "destination",
            "departure_date",
            "cabin",
        ),
    )
