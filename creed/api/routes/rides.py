"""
creed.api.routes.rides — Expeditions, command roles & attendance
==================================================================
"""

from __future__ import annotations

import datetime as dt
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from creed.api.deps import get_current_marshal, get_current_user, get_engine
from creed.database.models import RideRole, RideStatus
from creed.engine.drafts import apply_ride_edits, new_ride_draft, ride_draft_from
from creed.services import member_service, ride_service

router = APIRouter(prefix="/rides", tags=["rides"])
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class RideEdit(BaseModel):
    """Ride form fields; each one is run through its own draft reducer."""

    title: str | None = None
    summary: str | None = None
    notes: str | None = None
    date: dt.date | str | None = None
    start_time: str | None = None
    end_time: str | None = None
    duration_days: int | str | None = None
    terrain_types: list[str] | None = None
    custom_terrain: str | None = None
    marshal_id: str | None = None
    map_link: str | None = None
    drive_link: str | None = None
    feedback_link: str | None = None


class RideCompletion(BaseModel):
    feedback_link: str | None = None
    drive_link: str | None = None


class ParticipantAssign(BaseModel):
    role: RideRole = RideRole.RIDER


class AttendanceUpdate(BaseModel):
    attended: bool


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _participant_dict(p) -> dict:
    return {"ride_id": p.ride_id, "user_id": p.user_id, "role": p.role, "attended": p.attended}


def _require_ride(engine, ride_id: str):
    ride = ride_service.get_ride(engine, ride_id)
    if ride is None:
        raise HTTPException(404, "Ride not found")
    return ride


def _edits(body: RideEdit) -> dict:
    edits = body.model_dump(exclude_unset=True)
    # An explicit null date means "leave as is"
    if edits.get("date") is None:
        edits.pop("date", None)
    return edits


# ---------------------------------------------------------------------------
# Rides
# ---------------------------------------------------------------------------
@router.get("")
def list_rides(
    status: RideStatus | None = None,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    rides = ride_service.list_rides(engine, status=status)
    return {"rides": [ride_service.ride_to_dict(r) for r in rides]}


@router.get("/{ride_id}")
def get_ride(
    ride_id: str,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    """One ride with its participants and the roster grouped by role."""
    ride = _require_ride(engine, ride_id)
    participants = ride_service.list_participants(engine, ride_id)
    return {
        **ride_service.ride_to_dict(ride),
        "participants": [_participant_dict(p) for p in participants],
        "roster": ride_service.group_roster(participants),
    }


@router.post("", status_code=201)
def create_ride(
    body: RideEdit,
    marshal: dict = Depends(get_current_marshal),
    engine=Depends(get_engine),
):
    draft = apply_ride_edits(new_ride_draft(marshal["sub"]), _edits(body))
    ride = ride_service.create_ride(engine, draft, actor_id=marshal["sub"])
    return ride_service.ride_to_dict(ride)


@router.patch("/{ride_id}")
def update_ride(
    ride_id: str,
    body: RideEdit,
    marshal: dict = Depends(get_current_marshal),
    engine=Depends(get_engine),
):
    ride = _require_ride(engine, ride_id)
    draft = apply_ride_edits(ride_draft_from(ride), _edits(body))
    updated = ride_service.update_ride(engine, ride_id, draft, actor_id=marshal["sub"])
    if updated is None:
        raise HTTPException(404, "Ride not found")
    return ride_service.ride_to_dict(updated)


@router.post("/{ride_id}/complete")
def complete_ride(
    ride_id: str,
    body: RideCompletion | None = None,
    marshal: dict = Depends(get_current_marshal),
    engine=Depends(get_engine),
):
    body = body or RideCompletion()
    ride = ride_service.complete_ride(
        engine, ride_id,
        actor_id=marshal["sub"],
        feedback_link=body.feedback_link,
        drive_link=body.drive_link,
    )
    if ride is None:
        raise HTTPException(404, "Ride not found")
    return ride_service.ride_to_dict(ride)


@router.delete("/{ride_id}")
def delete_ride(
    ride_id: str,
    marshal: dict = Depends(get_current_marshal),
    engine=Depends(get_engine),
):
    if not ride_service.delete_ride(engine, ride_id, actor_id=marshal["sub"]):
        raise HTTPException(404, "Ride not found")
    return {"deleted": True}


# ---------------------------------------------------------------------------
# Roster
# ---------------------------------------------------------------------------
@router.put("/{ride_id}/participants/{user_id}")
def assign_participant(
    ride_id: str,
    user_id: str,
    body: ParticipantAssign,
    marshal: dict = Depends(get_current_marshal),
    engine=Depends(get_engine),
):
    """Add a member to the roster or change their command role."""
    _require_ride(engine, ride_id)
    if member_service.get_user(engine, user_id) is None:
        raise HTTPException(404, "Member not found")
    entry = ride_service.assign_participant(
        engine, ride_id, user_id, body.role, actor_id=marshal["sub"],
    )
    return _participant_dict(entry)


@router.patch("/{ride_id}/participants/{user_id}/attendance")
def set_attendance(
    ride_id: str,
    user_id: str,
    body: AttendanceUpdate,
    marshal: dict = Depends(get_current_marshal),
    engine=Depends(get_engine),
):
    entry = ride_service.set_attendance(
        engine, ride_id, user_id, body.attended, actor_id=marshal["sub"],
    )
    if entry is None:
        raise HTTPException(404, "Participant not found")
    return _participant_dict(entry)


@router.delete("/{ride_id}/participants/{user_id}")
def remove_participant(
    ride_id: str,
    user_id: str,
    marshal: dict = Depends(get_current_marshal),
    engine=Depends(get_engine),
):
    if not ride_service.remove_participant(engine, ride_id, user_id, actor_id=marshal["sub"]):
        raise HTTPException(404, "Participant not found")
    return {"deleted": True}
