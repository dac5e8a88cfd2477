"""
creed.api.routes.public — Club branding, theme & the member's own dossier
===========================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from creed.api.deps import (
    get_config,
    get_current_user,
    get_engine,
    get_settings_cache,
)
from creed.config import CreedConfig
from creed.engine.achievements import compute_progress, stats_for_user
from creed.engine.cache import SettingsCache
from creed.engine.drafts import apply_profile_edits, profile_draft_from
from creed.engine.theme import font_import_url, render_css
from creed.services import member_service, settings_service

router = APIRouter(tags=["public"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class ProfileUpdate(BaseModel):
    name: str | None = None
    avatar_url: str | None = None
    about: str | None = None
    dream_ride: str | None = None
    bike_model: str | None = None
    fav_destination: str | None = None
    blood_group: str | None = None
    emergency_contact: str | None = None
    riding_style: str | None = None
    experience_years: str | None = None
    fav_gear_brand: str | None = None
    ride_memory: str | None = None


# ---------------------------------------------------------------------------
# Settings & theme
# ---------------------------------------------------------------------------
@router.get("/settings")
def get_settings(cache: SettingsCache = Depends(get_settings_cache)):
    """Fetch the club settings afresh and install them as the current snapshot."""
    settings = cache.load()
    return settings_service.settings_to_dict(settings)


@router.get("/theme")
def get_theme(
    cache: SettingsCache = Depends(get_settings_cache),
    cfg: CreedConfig = Depends(get_config),
):
    """The projected theme: style variables plus font stylesheet URLs."""
    cache.get_or_load()
    projection = cache.theme()
    return {
        "fonts": list(projection.fonts),
        "font_urls": [
            font_import_url(f, service_url=cfg.font_service_url, weights=cfg.font_weights)
            for f in projection.fonts
        ],
        "variables": projection.variables,
    }


@router.get("/theme.css")
def get_theme_css(
    cache: SettingsCache = Depends(get_settings_cache),
    cfg: CreedConfig = Depends(get_config),
):
    cache.get_or_load()
    css = render_css(
        cache.theme(),
        service_url=cfg.font_service_url,
        weights=cfg.font_weights,
    )
    return Response(content=css, media_type="text/css")


# ---------------------------------------------------------------------------
# The signed-in member
# ---------------------------------------------------------------------------
def _load_self(engine, user: dict):
    member = member_service.get_user(engine, user["sub"])
    if member is None:
        raise HTTPException(404, "Member not found")
    return member


@router.get("/me")
def get_me(user: dict = Depends(get_current_user), engine=Depends(get_engine)):
    return member_service.user_to_dict(_load_self(engine, user))


@router.get("/me/progress")
def get_my_progress(
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
    cache: SettingsCache = Depends(get_settings_cache),
):
    """Per-category honor progress for the signed-in member."""
    member = _load_self(engine, user)
    settings = cache.get_or_load()
    progress = compute_progress(stats_for_user(member), settings.achievements)
    return {"progress": [p.to_dict() for p in progress]}


@router.patch("/me/profile")
def update_my_profile(
    body: ProfileUpdate,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    """Apply the member's dossier edits field by field."""
    member = _load_self(engine, user)
    draft = apply_profile_edits(
        profile_draft_from(member), body.model_dump(exclude_unset=True),
    )
    updated = member_service.update_profile(engine, member.id, draft)
    if updated is None:
        raise HTTPException(404, "Member not found")
    return member_service.user_to_dict(updated)
