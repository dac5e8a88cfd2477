"""
creed.api.auth — Phone + password login and JWT issuance
==========================================================
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import jwt
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from creed.api.deps import (
    JWT_ALGORITHM,
    JWT_SECRET,
    get_config,
    get_current_user,
    get_engine,
)
from creed.config import CreedConfig
from creed.database.engine import run_db
from creed.database.models import ClubRole, User
from creed.services import member_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    phone: str
    password: str


def issue_token(user: User, ttl_hours: int) -> str:
    """Sign a session token for *user* valid for *ttl_hours*."""
    payload = {
        "sub": user.id,
        "name": user.name,
        "club_role": user.club_role,
        "is_marshal": user.club_role == ClubRole.MARSHAL,
        "exp": datetime.now(UTC) + timedelta(hours=ttl_hours),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


@router.post("/login")
async def login(
    body: LoginRequest,
    cfg: CreedConfig = Depends(get_config),
    engine=Depends(get_engine),
):
    """Exchange credentials for a bearer token.

    Whitespace around (and inside) the phone number and around the
    password is ignored.  Failures surface as 401 through the
    :class:`~creed.errors.AuthFailure` handler.
    """
    user = await run_db(member_service.authenticate, engine, body.phone, body.password)
    token = issue_token(user, cfg.session_ttl_hours)
    return {
        "token": token,
        "token_type": "bearer",
        "user": member_service.user_to_dict(user),
    }


@router.get("/me")
async def me(user: dict = Depends(get_current_user)):
    """Return the identity carried by the current token."""
    return {
        "id": user["sub"],
        "name": user.get("name", ""),
        "club_role": user.get("club_role", ClubRole.RIDER),
        "is_marshal": bool(user.get("is_marshal")),
    }
