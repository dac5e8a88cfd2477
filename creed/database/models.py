"""
creed.database.models — SQLAlchemy 2.0 Data Models
===================================================

Tables:
- users              — Club members (phone number PK) with ride stats
- rides              — Scheduled expeditions
- ride_participants  — Command roles + attendance per ride
- club_settings      — The single club-wide branding / theme record
- polls              — Member polls
- poll_options       — Choices with running vote totals
- user_votes         — One vote per member per poll
- admin_log          — Append-only audit trail of marshal mutations
"""

from __future__ import annotations

import enum
from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Creed ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ClubRole(enum.StrEnum):
    """Standing of a member within the club."""
    RIDER = "Rider"
    MARSHAL = "Marshal"


class RideRole(enum.StrEnum):
    """Command role a member holds on one ride."""
    LEAD = "Lead"
    SWEEP = "Sweep"
    RP = "RP"
    RIDER = "Rider"


class SubscriptionType(enum.StrEnum):
    NONE = "None"
    ANNUAL = "Annual"
    LIFETIME = "Lifetime"


class PaymentStatus(enum.StrEnum):
    PAID = "Paid"
    PENDING = "Pending"


class RideStatus(enum.StrEnum):
    UPCOMING = "upcoming"
    COMPLETED = "completed"


class AchievementCategory(enum.StrEnum):
    """Tracked stat dimensions, in display order."""
    KMS = "Kms"
    LEADS = "Leads"
    SWEEPS = "Sweeps"
    RPS = "RPs"
    RIDES = "Rides"


class AdminActionType(enum.StrEnum):
    """Categories of marshal mutations recorded in admin_log."""
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    AUTHORIZE = "AUTHORIZE"


# ---------------------------------------------------------------------------
# Users — one row per club member
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(20), primary_key=True)  # phone number
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    avatar_url: Mapped[str] = mapped_column(Text, default="")
    club_role: Mapped[str] = mapped_column(String(20), default=ClubRole.RIDER)
    password_hash: Mapped[str] = mapped_column(String(100), nullable=False)

    # Stats
    total_rides: Mapped[int] = mapped_column(Integer, default=0)
    total_kms: Mapped[int] = mapped_column(Integer, default=0)
    leads: Mapped[int] = mapped_column(Integer, default=0)
    sweeps: Mapped[int] = mapped_column(Integer, default=0)
    rps: Mapped[int] = mapped_column(Integer, default=0)

    # Biker profile
    about: Mapped[str | None] = mapped_column(Text, default=None)
    dream_ride: Mapped[str | None] = mapped_column(String(200), default=None)
    bike_model: Mapped[str | None] = mapped_column(String(100), default=None)
    fav_destination: Mapped[str | None] = mapped_column(String(200), default=None)
    blood_group: Mapped[str | None] = mapped_column(String(10), default=None)
    emergency_contact: Mapped[str | None] = mapped_column(String(50), default=None)

    # Personal trivia
    riding_style: Mapped[str | None] = mapped_column(String(100), default=None)
    experience_years: Mapped[str | None] = mapped_column(String(20), default=None)
    fav_gear_brand: Mapped[str | None] = mapped_column(String(100), default=None)
    ride_memory: Mapped[str | None] = mapped_column(Text, default=None)

    # Subscription
    subscription_type: Mapped[str] = mapped_column(String(20), default=SubscriptionType.NONE)
    subscription_expiry: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )
    payment_status: Mapped[str] = mapped_column(String(20), default=PaymentStatus.PENDING)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    participations: Mapped[list[RideParticipant]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_users_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id!r} name={self.name!r} role={self.club_role}>"


# ---------------------------------------------------------------------------
# Rides — scheduled expeditions
# ---------------------------------------------------------------------------
class Ride(Base):
    __tablename__ = "rides"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, default=None)
    ride_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, default=1)
    terrain_types: Mapped[list | None] = mapped_column(JSONB, default=None)
    custom_terrain: Mapped[str | None] = mapped_column(String(200), default=None)
    marshal_id: Mapped[str] = mapped_column(
        String(20), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    map_link: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[str] = mapped_column(String(20), default=RideStatus.UPCOMING)
    feedback_link: Mapped[str | None] = mapped_column(Text, default=None)
    drive_link: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    participants: Mapped[list[RideParticipant]] = relationship(
        back_populates="ride", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_rides_date", "date"),
    )

    def __repr__(self) -> str:
        return f"<Ride id={self.id} title={self.title!r} status={self.status}>"


# ---------------------------------------------------------------------------
# RideParticipant — roster entry with role + attendance
# ---------------------------------------------------------------------------
class RideParticipant(Base):
    __tablename__ = "ride_participants"

    ride_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("rides.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[str] = mapped_column(
        String(20), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    role: Mapped[str] = mapped_column(String(10), default=RideRole.RIDER)
    attended: Mapped[bool] = mapped_column(Boolean, default=False)

    ride: Mapped[Ride] = relationship(back_populates="participants")
    user: Mapped[User] = relationship(back_populates="participations")

    def __repr__(self) -> str:
        return (
            f"<RideParticipant ride={self.ride_id} user={self.user_id!r} "
            f"role={self.role} attended={self.attended}>"
        )


# ---------------------------------------------------------------------------
# ClubSettings — one row (id = 1) holding brand, theme and honors
# ---------------------------------------------------------------------------
CLUB_SETTINGS_ID = 1


class ClubSettingsRow(Base):
    """The club-wide branding record.

    Always written wholesale by the marshal "authorize" action.  Color
    fields are stored exactly as submitted; the legacy-red migration
    happens on every read in :mod:`creed.services.settings_service`.
    """
    __tablename__ = "club_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Payments
    upi_id: Mapped[str | None] = mapped_column(String(100), default=None)
    gpay_qr_url: Mapped[str | None] = mapped_column(Text, default=None)
    annual_fee: Mapped[int | None] = mapped_column(Integer, default=None)
    lifetime_fee: Mapped[int | None] = mapped_column(Integer, default=None)

    # Global branding
    brand_name: Mapped[str | None] = mapped_column(String(100), default=None)
    brand_sub_name: Mapped[str | None] = mapped_column(String(100), default=None)
    logo_url: Mapped[str | None] = mapped_column(Text, default=None)
    primary_color: Mapped[str | None] = mapped_column(String(50), default=None)

    # Section colors
    dashboard_bg: Mapped[str | None] = mapped_column(String(50), default=None)
    header_bg: Mapped[str | None] = mapped_column(String(50), default=None)
    header_text: Mapped[str | None] = mapped_column(String(50), default=None)
    card_bg: Mapped[str | None] = mapped_column(String(50), default=None)
    card_border: Mapped[str | None] = mapped_column(String(50), default=None)
    button_bg: Mapped[str | None] = mapped_column(String(50), default=None)
    button_text: Mapped[str | None] = mapped_column(String(50), default=None)
    stat_color: Mapped[str | None] = mapped_column(String(50), default=None)

    # Typography
    global_font: Mapped[str | None] = mapped_column(String(100), default=None)
    heading_font: Mapped[str | None] = mapped_column(String(100), default=None)
    nav_font: Mapped[str | None] = mapped_column(String(100), default=None)
    stat_font: Mapped[str | None] = mapped_column(String(100), default=None)
    button_font: Mapped[str | None] = mapped_column(String(100), default=None)
    input_font: Mapped[str | None] = mapped_column(String(100), default=None)
    achievement_font: Mapped[str | None] = mapped_column(String(100), default=None)
    card_header_font: Mapped[str | None] = mapped_column(String(100), default=None)
    section_header_font: Mapped[str | None] = mapped_column(String(100), default=None)

    # Honors: [{"threshold": 1000, "label": "Iron Butt", "category": "Kms"}, …]
    achievements: Mapped[list | None] = mapped_column(JSONB, default=None)

    updated_by: Mapped[str | None] = mapped_column(String(20), default=None)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<ClubSettingsRow id={self.id} brand={self.brand_name!r}>"


# ---------------------------------------------------------------------------
# Polls
# ---------------------------------------------------------------------------
class Poll(Base):
    __tablename__ = "polls"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    created_by: Mapped[str] = mapped_column(
        String(20), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    options: Mapped[list[PollOption]] = relationship(
        back_populates="poll",
        cascade="all, delete-orphan",
        order_by="PollOption.position",
    )

    def __repr__(self) -> str:
        return f"<Poll id={self.id} title={self.title!r} active={self.is_active}>"


class PollOption(Base):
    __tablename__ = "poll_options"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    poll_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("polls.id", ondelete="CASCADE"), nullable=False
    )
    text: Mapped[str] = mapped_column(String(200), nullable=False)
    votes: Mapped[int] = mapped_column(Integer, default=0)
    position: Mapped[int] = mapped_column(Integer, default=0)

    poll: Mapped[Poll] = relationship(back_populates="options")


class UserVote(Base):
    __tablename__ = "user_votes"

    poll_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("polls.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[str] = mapped_column(
        String(20), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    option_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("poll_options.id", ondelete="CASCADE"), nullable=False
    )


# ---------------------------------------------------------------------------
# AdminLog — append-only audit trail
# ---------------------------------------------------------------------------
class AdminLog(Base):
    __tablename__ = "admin_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    actor_id: Mapped[str] = mapped_column(String(20), nullable=False)
    action_type: Mapped[str] = mapped_column(String(50), nullable=False)
    target_table: Mapped[str] = mapped_column(String(50), nullable=False)
    target_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    before_snapshot: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    after_snapshot: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_admin_log_actor_time", "actor_id", "timestamp"),
        Index("ix_admin_log_target", "target_table", "target_id", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<AdminLog id={self.id} actor={self.actor_id} action={self.action_type}>"
