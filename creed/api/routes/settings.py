"""
creed.api.routes.settings — Theme authorization, audit log & live logs
========================================================================
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from creed.api.deps import get_current_marshal, get_engine, get_session, get_settings_cache
from creed.database.models import AchievementCategory, AdminLog
from creed.engine.achievements import Achievement
from creed.engine.cache import SettingsCache
from creed.engine.theme import THEME_FIELDS, ClubSettings, theme_field
from creed.services import settings_service
from creed.services.log_buffer import (
    VALID_LEVELS,
    get_capture_level,
    get_logs,
    set_capture_level,
)

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class AchievementIn(BaseModel):
    threshold: int = Field(ge=0)
    label: str
    category: AchievementCategory
    icon: str | None = None


class SettingsPayload(BaseModel):
    """The full settings record; omitted fields are stored as unset."""

    upi_id: str = ""
    gpay_qr_url: str = ""
    annual_fee: int = Field(0, ge=0)
    lifetime_fee: int = Field(0, ge=0)
    brand_name: str | None = None
    brand_sub_name: str | None = None
    logo_url: str | None = None
    primary_color: str | None = None
    dashboard_bg: str | None = None
    header_bg: str | None = None
    header_text: str | None = None
    card_bg: str | None = None
    card_border: str | None = None
    button_bg: str | None = None
    button_text: str | None = None
    stat_color: str | None = None
    global_font: str | None = None
    heading_font: str | None = None
    nav_font: str | None = None
    stat_font: str | None = None
    button_font: str | None = None
    input_font: str | None = None
    achievement_font: str | None = None
    card_header_font: str | None = None
    section_header_font: str | None = None
    achievements: list[AchievementIn] = Field(default_factory=list)

    def to_settings(self) -> ClubSettings:
        data = self.model_dump(exclude={"achievements"})
        return ClubSettings(
            **data,
            achievements=tuple(
                Achievement(a.threshold, a.label, a.category, a.icon)
                for a in self.achievements
            ),
        )


class ThemePatch(BaseModel):
    values: dict[str, str | None]


class LogLevelUpdate(BaseModel):
    level: str


def _authorize(engine, cache: SettingsCache, settings: ClubSettings, actor_id: str) -> dict:
    stored = settings_service.update_club_settings(engine, settings, actor_id=actor_id)
    cache.set(stored)
    return settings_service.settings_to_dict(stored)


# ---------------------------------------------------------------------------
# Theme & settings
# ---------------------------------------------------------------------------
@router.get("/theme-fields")
def list_theme_fields(
    marshal: dict = Depends(get_current_marshal),
    cache: SettingsCache = Depends(get_settings_cache),
):
    """The editable color and font knobs with their current values."""
    settings = cache.get_or_load()
    return {
        "fields": [
            {
                "key": f.key,
                "label": f.label,
                "kind": f.kind,
                "css_var": f.css_var,
                "default": f.default,
                "value": f.get(settings),
            }
            for f in THEME_FIELDS
        ],
    }


@router.put("/settings")
def authorize_settings(
    body: SettingsPayload,
    marshal: dict = Depends(get_current_marshal),
    engine=Depends(get_engine),
    cache: SettingsCache = Depends(get_settings_cache),
):
    """Replace the club settings wholesale ("authorize")."""
    return _authorize(engine, cache, body.to_settings(), marshal["sub"])


@router.patch("/theme")
def patch_theme(
    body: ThemePatch,
    marshal: dict = Depends(get_current_marshal),
    engine=Depends(get_engine),
    cache: SettingsCache = Depends(get_settings_cache),
):
    """Change individual theme fields on top of the current settings.

    The merged record is then authorized wholesale, like ``PUT /settings``.
    """
    settings = cache.load()
    try:
        fields = [(theme_field(key), value) for key, value in body.values.items()]
    except KeyError as exc:
        raise HTTPException(422, f"Unknown theme field: {exc.args[0]}") from exc
    for f, value in fields:
        settings = f.set(settings, value or None)
    return _authorize(engine, cache, settings, marshal["sub"])


@router.post("/theme/reset")
def reset_theme(
    marshal: dict = Depends(get_current_marshal),
    engine=Depends(get_engine),
    cache: SettingsCache = Depends(get_settings_cache),
):
    """Restore every theme field to its default, keeping payments and honors."""
    settings = cache.load()
    defaults = settings_service.default_settings()
    for f in THEME_FIELDS:
        settings = f.set(settings, f.get(defaults))
    return _authorize(engine, cache, settings, marshal["sub"])


# ---------------------------------------------------------------------------
# Audit Log
# ---------------------------------------------------------------------------
@router.get("/audit")
def get_audit_log(
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=100),
    target_table: str | None = Query(None),
    marshal: dict = Depends(get_current_marshal),
    session: Session = Depends(get_session),
):
    """Paginated marshal audit trail, newest first."""
    count_stmt = select(func.count()).select_from(AdminLog)
    rows_stmt = select(AdminLog).order_by(AdminLog.timestamp.desc(), AdminLog.id.desc())
    if target_table:
        count_stmt = count_stmt.where(AdminLog.target_table == target_table)
        rows_stmt = rows_stmt.where(AdminLog.target_table == target_table)

    total = session.scalar(count_stmt) or 0
    rows = session.scalars(
        rows_stmt.offset((page - 1) * page_size).limit(page_size)
    ).all()

    return {
        "total": total,
        "page": page,
        "page_size": page_size,
        "entries": [_audit_entry(r) for r in rows],
    }


def _audit_entry(r: AdminLog) -> dict[str, Any]:
    return {
        "id": r.id,
        "actor_id": r.actor_id,
        "action_type": r.action_type,
        "target_table": r.target_table,
        "target_id": r.target_id,
        "before_snapshot": r.before_snapshot,
        "after_snapshot": r.after_snapshot,
        "timestamp": r.timestamp.isoformat() if r.timestamp else None,
    }


# ---------------------------------------------------------------------------
# Live Logs
# ---------------------------------------------------------------------------
@router.get("/logs")
def get_live_logs(
    tail: int = Query(200, ge=1, le=1000),
    level: str | None = Query(None),
    logger_prefix: str | None = Query(None, alias="logger"),
    marshal: dict = Depends(get_current_marshal),
):
    """Recent log entries from the in-memory buffer."""
    entries = get_logs(tail=tail, level=level, logger_prefix=logger_prefix)
    return {
        "entries": entries,
        "total": len(entries),
        "capture_level": get_capture_level(),
        "valid_levels": list(VALID_LEVELS),
    }


@router.put("/logs/level")
def update_log_level(
    body: LogLevelUpdate,
    marshal: dict = Depends(get_current_marshal),
):
    try:
        level = set_capture_level(body.level)
    except ValueError as exc:
        raise HTTPException(422, str(exc)) from exc
    logger.info("Log capture level set to %s by %s", level, marshal["sub"])
    return {"capture_level": level}
