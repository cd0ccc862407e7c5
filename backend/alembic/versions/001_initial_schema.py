"""Initial schema: venues, venue_settings, users, reservations.

Revision ID: 001
Revises: None
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Venues: ids assigned by the application
    op.create_table(
        "venues",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.String(255), nullable=False, server_default=""),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("image", sa.Text(), nullable=False, server_default=""),
        sa.Column("cuisine", sa.String(100), nullable=False, server_default=""),
        sa.Column("rating", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("reviews", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("price_range", sa.String(20), nullable=False, server_default=""),
        sa.Column("hours", sa.String(255), nullable=False, server_default=""),
        sa.Column("website", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        *_timestamps(),
        sa.CheckConstraint("capacity >= 0", name="check_venue_capacity_non_negative"),
    )
    op.create_index("ix_venues_cuisine_price", "venues", ["cuisine", "price_range"])

    # Per-venue overrides, one row per venue
    op.create_table(
        "venue_settings",
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id"), primary_key=True),
        sa.Column("unavailable_dates", sa.JSON(), nullable=False),
        sa.Column("daily_capacity", sa.JSON(), nullable=False),
        sa.Column("available_time_slots", sa.JSON(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("login_id", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="customer"),
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id"), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("role IN ('customer', 'restaurant_owner')", name="check_user_role"),
    )
    op.create_index("ix_users_login_id", "users", ["login_id"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # Reservations keep plain venue/user ids: they outlive both rows
    op.create_table(
        "reservations",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("venue_id", sa.Integer(), nullable=False),
        sa.Column("venue_name", sa.String(255), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("time", sa.String(5), nullable=False),
        sa.Column("party_size", sa.Integer(), nullable=False),
        sa.Column("guest_name", sa.String(100), nullable=False),
        sa.Column("guest_phone", sa.String(50), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("mode", sa.String(20), nullable=False, server_default="scheduled"),
        sa.Column("confirmation_number", sa.String(32), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("party_size > 0", name="check_reservation_party_size_positive"),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'rejected')",
            name="check_reservation_status",
        ),
        sa.CheckConstraint("mode IN ('instant', 'scheduled')", name="check_reservation_mode"),
    )
    op.create_index("ix_reservations_user_id", "reservations", ["user_id"])
    op.create_index("ix_reservations_venue_id", "reservations", ["venue_id"])
    op.create_index("ix_reservations_confirmation_number", "reservations", ["confirmation_number"])
    # Backs the confirmed party-size SUM behind every remaining-capacity check
    op.create_index(
        "ix_reservations_venue_date_status", "reservations", ["venue_id", "date", "status"]
    )


def downgrade() -> None:
    op.drop_table("reservations")
    op.drop_table("users")
    op.drop_table("venue_settings")
    op.drop_table("venues")
