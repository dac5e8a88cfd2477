"""
creed.services.member_service — Club Roster & Authentication
==============================================================

Members log in with their phone number and a password.  Passwords are
stored as bcrypt hashes; the plain value never reaches the database or
the audit log.

Reads raise :class:`~creed.errors.FetchFailure`, writes
:class:`~creed.errors.WriteFailure` (via :mod:`admin_service`), and a bad
login :class:`~creed.errors.AuthFailure`.
"""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime
from typing import Any

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from creed.constants import FROZEN_USER_FIELDS
from creed.database.models import (
    ClubRole,
    PaymentStatus,
    SubscriptionType,
    User,
)
from creed.engine.drafts import DraftError, ProfileDraft, profile_changes
from creed.errors import AuthFailure, FetchFailure
from creed.services import admin_service

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")

# bcrypt only reads the first 72 bytes and newer releases refuse longer input
MAX_PASSWORD_BYTES = 72


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------
def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def check_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        # Malformed hash in storage
        return False


def clean_password(plain: str | None) -> str:
    """Strip *plain* and check it can be hashed.

    Raises :class:`DraftError` for a blank password or one longer than
    ``MAX_PASSWORD_BYTES`` once encoded.
    """
    password = (plain or "").strip()
    if not password:
        raise DraftError("Password cannot be blank.")
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise DraftError(f"Password cannot exceed {MAX_PASSWORD_BYTES} bytes.")
    return password


def normalize_phone(raw: str) -> str:
    """Strip every whitespace character from a phone number."""
    return _WHITESPACE.sub("", raw or "")


def _clean_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise DraftError("Name cannot be blank.")
    return name


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------
def authenticate(engine, user_id: str, password: str) -> User:
    """Return the member matching the credentials.

    Raises
    ------
    AuthFailure
        Missing credentials, unknown member, wrong password, or a failed
        lookup.  Never retried.
    """
    user_id = normalize_phone(user_id)
    password = (password or "").strip()
    if not user_id or not password:
        raise AuthFailure("Credentials required.")

    try:
        with Session(engine, expire_on_commit=False) as session:
            user = session.get(User, user_id)
            if user is not None:
                session.expunge(user)
    except SQLAlchemyError as exc:
        logger.error("Credential lookup failed for %s: %s", user_id, exc)
        raise AuthFailure("Authentication failed: credential lookup error") from exc

    if user is None or not check_password(password, user.password_hash):
        logger.info("Rejected login for %s", user_id)
        raise AuthFailure("Authentication failed: Invalid Credentials")

    logger.info("Member %s logged in", user_id)
    return user


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def _select_users(engine, stmt) -> list[User]:
    try:
        with Session(engine, expire_on_commit=False) as session:
            rows = session.scalars(stmt).all()
            for r in rows:
                session.expunge(r)
            return list(rows)
    except SQLAlchemyError as exc:
        logger.error("Member query failed: %s", exc)
        raise FetchFailure("Failed to load members") from exc


def list_users(engine) -> list[User]:
    """Every member, alphabetically by name."""
    return _select_users(engine, select(User).order_by(User.name.asc()))


def list_marshals(engine) -> list[User]:
    """Members who can command a ride."""
    return _select_users(
        engine,
        select(User).where(User.club_role == ClubRole.MARSHAL).order_by(User.name.asc()),
    )


def get_user(engine, user_id: str) -> User | None:
    try:
        with Session(engine, expire_on_commit=False) as session:
            user = session.get(User, user_id)
            if user is not None:
                session.expunge(user)
            return user
    except SQLAlchemyError as exc:
        logger.error("Member lookup failed for %s: %s", user_id, exc)
        raise FetchFailure("Failed to load member") from exc


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
def add_rider(
    engine,
    *,
    user_id: str,
    name: str,
    password: str,
    actor_id: str,
    club_role: str = ClubRole.RIDER,
    avatar_url: str = "",
) -> User:
    """Enrol a new member with zeroed stats and no subscription.

    Raises ``DraftError`` for a blank phone number, name or password, and
    ``WriteFailure`` (``conflict=True``) if the phone number is already
    registered.
    """
    phone = normalize_phone(user_id)
    if not phone:
        raise DraftError("Phone number cannot be blank.")
    user = User(
        id=phone,
        name=_clean_name(name),
        password_hash=hash_password(clean_password(password)),
        club_role=ClubRole(club_role),
        avatar_url=avatar_url,
        total_rides=0,
        total_kms=0,
        leads=0,
        sweeps=0,
        rps=0,
        subscription_type=SubscriptionType.NONE,
        payment_status=PaymentStatus.PENDING,
    )
    created = admin_service.audited_create(
        engine, user, table_name="users", actor_id=actor_id, target_id=user.id,
    )
    logger.info("Rider %s enrolled by %s", created.id, actor_id)
    return created


def update_user(engine, user_id: str, *, actor_id: str, **fields: Any) -> User | None:
    """Apply a marshal's edits to a member record.

    A ``password`` key is hashed into ``password_hash``.  Identity fields
    cannot be changed.  Returns ``None`` if the member does not exist.
    Raises ``DraftError`` for a blank name or an unusable password.
    """
    if "password" in fields:
        plain = fields.pop("password")
        if plain is not None:
            fields["password_hash"] = hash_password(clean_password(str(plain)))
    if "name" in fields:
        fields["name"] = _clean_name(fields["name"])
    for key in ("club_role", "subscription_type", "payment_status"):
        if fields.get(key) is not None:
            fields[key] = str(fields[key])
    return admin_service.audited_update(
        engine, User, user_id,
        table_name="users",
        actor_id=actor_id,
        frozen_keys=tuple(k for k in FROZEN_USER_FIELDS if k != "password_hash"),
        **fields,
    )


def update_profile(engine, user_id: str, draft: ProfileDraft) -> User | None:
    """Save a member's own dossier edits."""
    return admin_service.audited_update(
        engine, User, user_id,
        table_name="users",
        actor_id=user_id,
        frozen_keys=FROZEN_USER_FIELDS,
        **profile_changes(draft),
    )


def delete_user(engine, user_id: str, *, actor_id: str) -> bool:
    return admin_service.audited_delete(
        engine, User, user_id, table_name="users", actor_id=actor_id,
    )


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------
def is_subscription_active(user: User, now: datetime | None = None) -> bool:
    """Lifetime members are always active; others until their expiry."""
    if user.subscription_type == SubscriptionType.LIFETIME:
        return True
    expiry = user.subscription_expiry
    if expiry is None:
        return False
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=UTC)
    return expiry > (now or datetime.now(UTC))


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "avatar_url": user.avatar_url or "",
        "club_role": user.club_role,
        "total_rides": user.total_rides,
        "total_kms": user.total_kms,
        "leads": user.leads,
        "sweeps": user.sweeps,
        "rps": user.rps,
        "about": user.about,
        "dream_ride": user.dream_ride,
        "bike_model": user.bike_model,
        "fav_destination": user.fav_destination,
        "blood_group": user.blood_group,
        "emergency_contact": user.emergency_contact,
        "riding_style": user.riding_style,
        "experience_years": user.experience_years,
        "fav_gear_brand": user.fav_gear_brand,
        "ride_memory": user.ride_memory,
        "subscription_type": user.subscription_type,
        "subscription_expiry": (
            user.subscription_expiry.isoformat() if user.subscription_expiry else None
        ),
        "payment_status": user.payment_status,
        "subscription_active": is_subscription_active(user),
    }
