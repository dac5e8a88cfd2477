"""
creed.services.ride_service — Expeditions & Rosters
=====================================================

CRUD for rides and their participant rosters.  Ride writes take a
validated :class:`~creed.engine.drafts.RideDraft`; roster writes upsert
one ``(ride, member)`` pair at a time.  Every marshal mutation is audited
through :mod:`creed.services.admin_service`.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from creed.constants import FROZEN_RIDE_FIELDS
from creed.database.models import Ride, RideParticipant, RideRole, RideStatus
from creed.engine.drafts import RideDraft, validate_ride_draft
from creed.errors import FetchFailure
from creed.services import admin_service
from creed.services.admin_service import row_to_dict

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Rides
# ---------------------------------------------------------------------------
def list_rides(engine, status: str | None = None) -> list[Ride]:
    """All rides, newest date first, optionally filtered by status."""
    stmt = select(Ride).order_by(Ride.ride_date.desc(), Ride.start_time.desc())
    if status is not None:
        stmt = stmt.where(Ride.status == status)
    try:
        with Session(engine, expire_on_commit=False) as session:
            rides = session.scalars(stmt).all()
            for r in rides:
                session.expunge(r)
            return list(rides)
    except SQLAlchemyError as exc:
        logger.error("Ride query failed: %s", exc)
        raise FetchFailure("Failed to load rides") from exc


def get_ride(engine, ride_id: str) -> Ride | None:
    try:
        with Session(engine, expire_on_commit=False) as session:
            ride = session.get(Ride, ride_id)
            if ride is not None:
                session.expunge(ride)
            return ride
    except SQLAlchemyError as exc:
        logger.error("Ride lookup failed for %s: %s", ride_id, exc)
        raise FetchFailure("Failed to load ride") from exc


def create_ride(engine, draft: RideDraft, *, actor_id: str) -> Ride:
    """Schedule a new ride from a draft.

    Raises
    ------
    DraftError
        Title or summary is blank.
    WriteFailure
        The insert failed.
    """
    validate_ride_draft(draft)
    ride = Ride(
        id=str(uuid.uuid4()),
        status=RideStatus.UPCOMING,
        **draft.to_columns(),
    )
    created = admin_service.audited_create(
        engine, ride, table_name="rides", actor_id=actor_id, target_id=ride.id,
    )
    logger.info("Ride %s (%s) scheduled by %s", created.id, created.title, actor_id)
    return created


def update_ride(engine, ride_id: str, draft: RideDraft, *, actor_id: str) -> Ride | None:
    """Replace a ride's editable fields with the draft's values."""
    validate_ride_draft(draft)
    return admin_service.audited_update(
        engine, Ride, ride_id,
        table_name="rides",
        actor_id=actor_id,
        frozen_keys=FROZEN_RIDE_FIELDS,
        **draft.to_columns(),
    )


def complete_ride(
    engine,
    ride_id: str,
    *,
    actor_id: str,
    feedback_link: str | None = None,
    drive_link: str | None = None,
) -> Ride | None:
    """Mark a ride completed, optionally attaching its debrief links."""
    changes: dict = {"status": RideStatus.COMPLETED}
    if feedback_link is not None:
        changes["feedback_link"] = feedback_link
    if drive_link is not None:
        changes["drive_link"] = drive_link
    ride = admin_service.audited_update(
        engine, Ride, ride_id,
        table_name="rides",
        actor_id=actor_id,
        frozen_keys=FROZEN_RIDE_FIELDS,
        **changes,
    )
    if ride is not None:
        logger.info("Ride %s completed", ride_id)
    return ride


def delete_ride(engine, ride_id: str, *, actor_id: str) -> bool:
    """Delete a ride together with its roster."""
    return admin_service.audited_delete(
        engine, Ride, ride_id, table_name="rides", actor_id=actor_id,
    )


# ---------------------------------------------------------------------------
# Roster
# ---------------------------------------------------------------------------
def list_participants(engine, ride_id: str | None = None) -> list[RideParticipant]:
    stmt = select(RideParticipant).order_by(
        RideParticipant.ride_id, RideParticipant.user_id,
    )
    if ride_id is not None:
        stmt = stmt.where(RideParticipant.ride_id == ride_id)
    try:
        with Session(engine, expire_on_commit=False) as session:
            rows = session.scalars(stmt).all()
            for r in rows:
                session.expunge(r)
            return list(rows)
    except SQLAlchemyError as exc:
        logger.error("Roster query failed: %s", exc)
        raise FetchFailure("Failed to load ride roster") from exc


def assign_participant(
    engine,
    ride_id: str,
    user_id: str,
    role: str = RideRole.RIDER,
    *,
    actor_id: str,
) -> RideParticipant:
    """Put a member on a ride's roster, or change their role if already there."""
    role = RideRole(role)
    updated = admin_service.audited_update(
        engine, RideParticipant, (ride_id, user_id),
        table_name="ride_participants",
        actor_id=actor_id,
        frozen_keys=("ride_id", "user_id"),
        role=role,
    )
    if updated is not None:
        return updated

    entry = RideParticipant(ride_id=ride_id, user_id=user_id, role=role, attended=False)
    return admin_service.audited_create(
        engine, entry,
        table_name="ride_participants",
        actor_id=actor_id,
        target_id=f"{ride_id}:{user_id}",
    )


def set_attendance(
    engine, ride_id: str, user_id: str, attended: bool, *, actor_id: str,
) -> RideParticipant | None:
    return admin_service.audited_update(
        engine, RideParticipant, (ride_id, user_id),
        table_name="ride_participants",
        actor_id=actor_id,
        frozen_keys=("ride_id", "user_id"),
        attended=bool(attended),
    )


def remove_participant(engine, ride_id: str, user_id: str, *, actor_id: str) -> bool:
    return admin_service.audited_delete(
        engine, RideParticipant, (ride_id, user_id),
        table_name="ride_participants", actor_id=actor_id,
    )


def group_roster(participants: Iterable[RideParticipant]) -> dict[str, list[str]]:
    """Member ids per ride role, command roles first."""
    roster: dict[str, list[str]] = {role.value: [] for role in RideRole}
    for p in participants:
        roster.setdefault(p.role, []).append(p.user_id)
    return roster


def ride_to_dict(ride: Ride) -> dict:
    data = row_to_dict(ride)
    data["terrain_types"] = list(ride.terrain_types or [])
    return data
