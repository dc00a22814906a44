"""Initial schema: users, spaces, reservations with indexes and constraints.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users table
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # Spaces table
    op.create_table(
        "spaces",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("capacity > 0", name="check_space_capacity_positive"),
    )
    op.create_index("ix_spaces_id", "spaces", ["id"])

    # Reservations table
    op.create_table(
        "reservations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "space_id",
            sa.Integer(),
            sa.ForeignKey("spaces.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("user_email", sa.String(255), nullable=False),
        sa.Column("reservation_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("start_time < end_time", name="check_reservation_range"),
    )
    op.create_index("ix_reservations_id", "reservations", ["id"])
    # Overlap lookups filter on space_id then compare both ends of the range.
    op.create_index("ix_reservations_space_time", "reservations", ["space_id", "start_time", "end_time"])
    # The weekly quota counts one user's reservations between two dates.
    op.create_index("ix_reservations_user_date", "reservations", ["user_email", "reservation_date"])

    if op.get_bind().dialect.name == "postgresql":
        # No two reservations of one space may share an instant. '[)' matches
        # TimeRange.overlaps: a booking ending at 12:00 and one starting at
        # 12:00 coexist. btree_gist provides the equality operator on space_id.
        op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
        op.execute(
            """
            ALTER TABLE reservations
            ADD CONSTRAINT excl_reservations_space_overlap
            EXCLUDE USING gist (
                space_id WITH =,
                tstzrange(start_time, end_time, '[)') WITH &&
            )
            """
        )


def downgrade() -> None:
    op.drop_table("reservations")
    op.drop_table("spaces")
    op.drop_table("users")
