"""Create the club schema: members, rides, rosters, settings, polls, audit

Revision ID: 0a3c5e7f9b21
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0a3c5e7f9b21"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


def upgrade() -> None:
    """Create every table used by the dashboard."""
    op.create_table(
        "users",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("club_role", sa.String(20), nullable=True),
        sa.Column("password_hash", sa.String(100), nullable=False),
        sa.Column("total_rides", sa.Integer(), nullable=True),
        sa.Column("total_kms", sa.Integer(), nullable=True),
        sa.Column("leads", sa.Integer(), nullable=True),
        sa.Column("sweeps", sa.Integer(), nullable=True),
        sa.Column("rps", sa.Integer(), nullable=True),
        sa.Column("about", sa.Text(), nullable=True),
        sa.Column("dream_ride", sa.String(200), nullable=True),
        sa.Column("bike_model", sa.String(100), nullable=True),
        sa.Column("fav_destination", sa.String(200), nullable=True),
        sa.Column("blood_group", sa.String(10), nullable=True),
        sa.Column("emergency_contact", sa.String(50), nullable=True),
        sa.Column("riding_style", sa.String(100), nullable=True),
        sa.Column("experience_years", sa.String(20), nullable=True),
        sa.Column("fav_gear_brand", sa.String(100), nullable=True),
        sa.Column("ride_memory", sa.Text(), nullable=True),
        sa.Column("subscription_type", sa.String(20), nullable=True),
        sa.Column("subscription_expiry", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_status", sa.String(20), nullable=True),
        _created_at(),
    )
    op.create_index("ix_users_name", "users", ["name"])

    op.create_table(
        "rides",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("summary", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("duration_days", sa.Integer(), nullable=True),
        sa.Column("terrain_types", postgresql.JSONB(), nullable=True),
        sa.Column("custom_terrain", sa.String(200), nullable=True),
        sa.Column(
            "marshal_id",
            sa.String(20),
            sa.ForeignKey("users.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("map_link", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=True),
        sa.Column("feedback_link", sa.Text(), nullable=True),
        sa.Column("drive_link", sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_rides_date", "rides", ["date"])

    op.create_table(
        "ride_participants",
        sa.Column(
            "ride_id",
            sa.String(36),
            sa.ForeignKey("rides.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "user_id",
            sa.String(20),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("role", sa.String(10), nullable=True),
        sa.Column("attended", sa.Boolean(), nullable=True),
    )

    settings_columns = [
        sa.Column(name, sa.String(length), nullable=True)
        for name, length in (
            ("upi_id", 100),
            ("brand_name", 100),
            ("brand_sub_name", 100),
            ("primary_color", 50),
            ("dashboard_bg", 50),
            ("header_bg", 50),
            ("header_text", 50),
            ("card_bg", 50),
            ("card_border", 50),
            ("button_bg", 50),
            ("button_text", 50),
            ("stat_color", 50),
            ("global_font", 100),
            ("heading_font", 100),
            ("nav_font", 100),
            ("stat_font", 100),
            ("button_font", 100),
            ("input_font", 100),
            ("achievement_font", 100),
            ("card_header_font", 100),
            ("section_header_font", 100),
        )
    ]
    op.create_table(
        "club_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("gpay_qr_url", sa.Text(), nullable=True),
        sa.Column("annual_fee", sa.Integer(), nullable=True),
        sa.Column("lifetime_fee", sa.Integer(), nullable=True),
        sa.Column("logo_url", sa.Text(), nullable=True),
        *settings_columns,
        sa.Column("achievements", postgresql.JSONB(), nullable=True),
        sa.Column("updated_by", sa.String(20), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )

    op.create_table(
        "polls",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "created_by",
            sa.String(20),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        _created_at(),
    )
    op.create_table(
        "poll_options",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "poll_id",
            sa.String(36),
            sa.ForeignKey("polls.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("text", sa.String(200), nullable=False),
        sa.Column("votes", sa.Integer(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=True),
    )
    op.create_table(
        "user_votes",
        sa.Column(
            "poll_id",
            sa.String(36),
            sa.ForeignKey("polls.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "user_id",
            sa.String(20),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "option_id",
            sa.String(36),
            sa.ForeignKey("poll_options.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )

    op.create_table(
        "admin_log",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("actor_id", sa.String(20), nullable=False),
        sa.Column("action_type", sa.String(50), nullable=False),
        sa.Column("target_table", sa.String(50), nullable=False),
        sa.Column("target_id", sa.String(100), nullable=True),
        sa.Column("before_snapshot", postgresql.JSONB(), nullable=True),
        sa.Column("after_snapshot", postgresql.JSONB(), nullable=True),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_admin_log_actor_time", "admin_log", ["actor_id", "timestamp"])
    op.create_index(
        "ix_admin_log_target", "admin_log", ["target_table", "target_id", "timestamp"],
    )


def downgrade() -> None:
    """Drop the club schema."""
    op.drop_index("ix_admin_log_target", table_name="admin_log")
    op.drop_index("ix_admin_log_actor_time", table_name="admin_log")
    op.drop_table("admin_log")
    op.drop_table("user_votes")
    op.drop_table("poll_options")
    op.drop_table("polls")
    op.drop_table("club_settings")
    op.drop_table("ride_participants")
    op.drop_index("ix_rides_date", table_name="rides")
    op.drop_table("rides")
    op.drop_index("ix_users_name", table_name="users")
    op.drop_table("users")
