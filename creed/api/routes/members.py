"""
creed.api.routes.members — Club roster and marshal member management
======================================================================
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from creed.api.deps import get_current_marshal, get_current_user, get_engine
from creed.database.models import ClubRole, PaymentStatus, SubscriptionType
from creed.services import member_service

router = APIRouter(tags=["members"])
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class RiderCreate(BaseModel):
    phone: str = Field(min_length=1)
    name: str = Field(min_length=1)
    password: str = Field(min_length=1)
    club_role: ClubRole = ClubRole.RIDER
    avatar_url: str = ""


class MemberUpdate(BaseModel):
    name: str | None = None
    avatar_url: str | None = None
    club_role: ClubRole | None = None
    password: str | None = None
    total_rides: int | None = Field(None, ge=0)
    total_kms: int | None = Field(None, ge=0)
    leads: int | None = Field(None, ge=0)
    sweeps: int | None = Field(None, ge=0)
    rps: int | None = Field(None, ge=0)
    subscription_type: SubscriptionType | None = None
    subscription_expiry: datetime | None = None
    payment_status: PaymentStatus | None = None


# ---------------------------------------------------------------------------
# Roster
# ---------------------------------------------------------------------------
@router.get("/members")
def list_members(
    marshals_only: bool = False,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    """The club roster, alphabetically."""
    members = (
        member_service.list_marshals(engine) if marshals_only
        else member_service.list_users(engine)
    )
    return {"members": [member_service.user_to_dict(m) for m in members]}


# ---------------------------------------------------------------------------
# Marshal management
# ---------------------------------------------------------------------------
@router.post("/admin/members", status_code=201)
def add_member(
    body: RiderCreate,
    marshal: dict = Depends(get_current_marshal),
    engine=Depends(get_engine),
):
    created = member_service.add_rider(
        engine,
        user_id=body.phone,
        name=body.name,
        password=body.password,
        club_role=body.club_role,
        avatar_url=body.avatar_url,
        actor_id=marshal["sub"],
    )
    return member_service.user_to_dict(created)


@router.patch("/admin/members/{user_id}")
def update_member(
    user_id: str,
    body: MemberUpdate,
    marshal: dict = Depends(get_current_marshal),
    engine=Depends(get_engine),
):
    updated = member_service.update_user(
        engine, user_id, actor_id=marshal["sub"], **body.model_dump(exclude_unset=True),
    )
    if updated is None:
        raise HTTPException(404, "Member not found")
    return member_service.user_to_dict(updated)


@router.delete("/admin/members/{user_id}")
def delete_member(
    user_id: str,
    marshal: dict = Depends(get_current_marshal),
    engine=Depends(get_engine),
):
    if user_id == marshal["sub"]:
        raise HTTPException(400, "Marshals cannot remove themselves")
    if not member_service.delete_user(engine, user_id, actor_id=marshal["sub"]):
        raise HTTPException(404, "Member not found")
    return {"deleted": True}
