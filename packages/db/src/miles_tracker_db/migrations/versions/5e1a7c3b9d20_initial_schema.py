"""initial schema

Revision ID: 5e1a7c3b9d20
Revises:
Create Date: 2026-10-18 09:12:41.208114

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5e1a7c3b9d20"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create programs and award_flights."""

    # -- programs --
    op.create_table(
        "programs",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("airline", sa.String(255), nullable=False),
        sa.Column("alliance", sa.String(50), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )

    # -- award_flights --
    op.create_table(
        "award_flights",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "program_id",
            sa.String(64),
            sa.ForeignKey("programs.id"),
            nullable=False,
        ),
        sa.Column("origin", sa.String(3), nullable=False),
        sa.Column("destination", sa.String(3), nullable=False),
        sa.Column("flight_number", sa.String(16), nullable=False),
        sa.Column("departure_date", sa.Date(), nullable=False),
        sa.Column("departure_time", sa.String(5), nullable=False),
        sa.Column("arrival_time", sa.String(5), nullable=False),
        sa.Column(
            "arrival_day_offset", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("route_type", sa.String(10), nullable=False),
        sa.Column("cabin", sa.String(10), nullable=False),
        sa.Column("tier", sa.String(50), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("available", sa.Boolean(), nullable=False),
        sa.Column("seats_left", sa.Integer(), nullable=True),
        sa.Column("taxes", sa.Numeric(12, 2), nullable=False),
        sa.Column("cash_equivalent", sa.Numeric(12, 2), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint(
            "program_id",
            "origin",
            "destination",
            "flight_number",
            "departure_date",
            "cabin",
            "tier",
            name="uq_flight_route_date_cabin_tier",
        ),
    )
    op.create_index(
        "ix_award_flights_route_date",
        "award_flights",
        ["origin", "destination", "departure_date"],
    )
    op.create_index(
        "ix_award_flights_program_date",
        "award_flights",
        ["program_id", "departure_date"],
    )
    op.create_index(
        "ix_award_flights_destination",
        "award_flights",
        ["destination", "departure_date", "cabin"],
    )


def downgrade() -> None:
    """Drop all tables in reverse order."""
    op.drop_table("award_flights")
    op.drop_table("programs")
