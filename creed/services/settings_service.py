"""
creed.services.settings_service — Club Settings Fetch-or-Default & Upsert
===========================================================================

The club has exactly one settings row (``id = 1``).  Reads never fail:
a missing row or a database error yields the built-in defaults, so the
dashboard always has a theme to paint with.  Writes replace the whole
row ("authorize"); there is no partial merge and the last writer wins.

Brand-identity colors (primary accent, button background, statistic
color) pass through :func:`~creed.engine.theme.sanitize_color` on every
read.  Storage is never corrected, so a stored legacy red keeps being
migrated on each fetch.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from creed.constants import BODY_FONT, BRAND_GREEN, DISPLAY_FONT
from creed.database.models import CLUB_SETTINGS_ID, AdminActionType, ClubSettingsRow
from creed.engine.achievements import DEFAULT_ACHIEVEMENTS, parse_achievements
from creed.engine.theme import ClubSettings, sanitize_color
from creed.errors import WriteFailure
from creed.services.admin_service import log_admin_action, row_to_dict

logger = logging.getLogger(__name__)

_FONT_DEFAULTS: dict[str, str] = {
    "global_font": BODY_FONT,
    "heading_font": DISPLAY_FONT,
    "nav_font": DISPLAY_FONT,
    "stat_font": DISPLAY_FONT,
    "button_font": DISPLAY_FONT,
    "input_font": BODY_FONT,
    "achievement_font": DISPLAY_FONT,
    "card_header_font": DISPLAY_FONT,
    "section_header_font": DISPLAY_FONT,
}


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
def default_settings() -> ClubSettings:
    """The settings a brand-new club starts with."""
    return ClubSettings(
        upi_id="",
        gpay_qr_url="",
        annual_fee=0,
        lifetime_fee=0,
        brand_name="BIKERS",
        brand_sub_name="CREED",
        logo_url="",
        primary_color=BRAND_GREEN,
        dashboard_bg="#000000",
        header_bg="#000000",
        header_text="#ffffff",
        card_bg="#0a0a0a",
        card_border="#262626",
        button_bg=BRAND_GREEN,
        button_text="#000000",
        stat_color=BRAND_GREEN,
        achievements=DEFAULT_ACHIEVEMENTS,
        **_FONT_DEFAULTS,
    )


# ---------------------------------------------------------------------------
# Row <-> snapshot
# ---------------------------------------------------------------------------
def _row_to_settings(row: ClubSettingsRow) -> ClubSettings:
    """Build a snapshot from a stored row, applying read-time fixes."""
    if row.achievements is None:
        achievements = DEFAULT_ACHIEVEMENTS
    elif isinstance(row.achievements, list):
        achievements = parse_achievements(row.achievements)
    else:
        logger.warning(
            "Stored achievements is not a list (%r), using defaults", row.achievements,
        )
        achievements = DEFAULT_ACHIEVEMENTS
    return ClubSettings(
        upi_id=row.upi_id or "",
        gpay_qr_url=row.gpay_qr_url or "",
        annual_fee=row.annual_fee or 0,
        lifetime_fee=row.lifetime_fee or 0,
        brand_name=row.brand_name,
        brand_sub_name=row.brand_sub_name,
        logo_url=row.logo_url,
        primary_color=sanitize_color(row.primary_color),
        dashboard_bg=row.dashboard_bg or "#000000",
        header_bg=row.header_bg or "#000000",
        header_text=row.header_text,
        card_bg=row.card_bg or "#0a0a0a",
        card_border=row.card_border,
        button_bg=sanitize_color(row.button_bg),
        button_text=row.button_text,
        stat_color=sanitize_color(row.stat_color),
        global_font=row.global_font or _FONT_DEFAULTS["global_font"],
        heading_font=row.heading_font or _FONT_DEFAULTS["heading_font"],
        nav_font=row.nav_font or _FONT_DEFAULTS["nav_font"],
        stat_font=row.stat_font or _FONT_DEFAULTS["stat_font"],
        button_font=row.button_font or _FONT_DEFAULTS["button_font"],
        input_font=row.input_font or _FONT_DEFAULTS["input_font"],
        achievement_font=row.achievement_font or _FONT_DEFAULTS["achievement_font"],
        card_header_font=row.card_header_font or _FONT_DEFAULTS["card_header_font"],
        section_header_font=(
            row.section_header_font or _FONT_DEFAULTS["section_header_font"]
        ),
        achievements=achievements,
    )


def settings_columns(settings: ClubSettings) -> dict[str, Any]:
    """Column values for a wholesale write of *settings*."""
    columns = asdict(settings)
    columns["achievements"] = [a.to_dict() for a in settings.achievements]
    return columns


def settings_to_dict(settings: ClubSettings) -> dict[str, Any]:
    """JSON-ready representation for API responses."""
    return settings_columns(settings)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def get_club_settings(engine) -> ClubSettings:
    """Fetch the club settings, falling back to defaults.

    A database error is logged and absorbed; the dashboard must never
    block on settings being unavailable.
    """
    try:
        with Session(engine) as session:
            row = session.get(ClubSettingsRow, CLUB_SETTINGS_ID)
            if row is None:
                logger.info("No club settings row yet, using defaults")
                return default_settings()
            return _row_to_settings(row)
    except SQLAlchemyError as exc:
        logger.warning("Club settings unavailable, using defaults: %s", exc)
        return default_settings()


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
def update_club_settings(engine, settings: ClubSettings, *, actor_id: str) -> ClubSettings:
    """Replace the stored settings wholesale (the "authorize" action).

    Returns the snapshot as a subsequent read would see it.

    Raises
    ------
    WriteFailure
        If the upsert fails; the stored row is left unchanged.
    """
    columns = settings_columns(settings)
    try:
        with Session(engine, expire_on_commit=False) as session:
            row = session.get(ClubSettingsRow, CLUB_SETTINGS_ID)
            before = row_to_dict(row)
            if row is None:
                row = ClubSettingsRow(id=CLUB_SETTINGS_ID)
                session.add(row)
            for key, value in columns.items():
                setattr(row, key, value)
            row.updated_by = actor_id
            session.flush()
            log_admin_action(
                session,
                actor_id=actor_id,
                action_type=AdminActionType.AUTHORIZE,
                target_table="club_settings",
                target_id=str(CLUB_SETTINGS_ID),
                before=before,
                after=columns,
            )
            session.commit()
            stored = _row_to_settings(row)
    except SQLAlchemyError as exc:
        logger.error("Club settings write failed: %s", exc)
        raise WriteFailure("Failed to commit club settings") from exc

    logger.info("Club settings authorized by %s", actor_id)
    return stored
