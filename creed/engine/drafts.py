"""
creed.engine.drafts — Typed Ride & Profile Drafts
===================================================

Form state for "Create a New Ride", "Edit Ride" and "Modify Dossier" is a
frozen draft record.  Each field has its own reducer that coerces the
incoming value and returns a new draft; nothing is merged blindly.

This module is pure calculation — no database I/O.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import date
from typing import TYPE_CHECKING, Any

from creed.constants import DEFAULT_RIDE_END, DEFAULT_RIDE_START

if TYPE_CHECKING:
    from creed.database.models import Ride, User


class DraftError(ValueError):
    """A draft cannot be saved as it stands."""


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


# ---------------------------------------------------------------------------
# Ride draft
# ---------------------------------------------------------------------------
class RideField(enum.StrEnum):
    TITLE = "title"
    SUMMARY = "summary"
    NOTES = "notes"
    DATE = "date"
    START_TIME = "start_time"
    END_TIME = "end_time"
    DURATION_DAYS = "duration_days"
    TERRAIN_TYPES = "terrain_types"
    CUSTOM_TERRAIN = "custom_terrain"
    MARSHAL_ID = "marshal_id"
    MAP_LINK = "map_link"
    DRIVE_LINK = "drive_link"
    FEEDBACK_LINK = "feedback_link"


@dataclass(frozen=True, slots=True)
class RideDraft:
    title: str
    summary: str
    date: date
    marshal_id: str
    notes: str = ""
    start_time: str = DEFAULT_RIDE_START
    end_time: str = DEFAULT_RIDE_END
    duration_days: int = 1
    terrain_types: tuple[str, ...] = ()
    custom_terrain: str | None = None
    map_link: str = ""
    drive_link: str = ""
    feedback_link: str | None = None

    def to_columns(self) -> dict[str, Any]:
        """Column values for a :class:`~creed.database.models.Ride` row."""
        return {
            "title": self.title.strip(),
            "summary": self.summary.strip(),
            "notes": self.notes,
            "ride_date": self.date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_days": self.duration_days,
            "terrain_types": list(self.terrain_types),
            "custom_terrain": self.custom_terrain,
            "marshal_id": self.marshal_id,
            "map_link": self.map_link,
            "drive_link": self.drive_link,
            "feedback_link": self.feedback_link,
        }


def new_ride_draft(marshal_id: str, today: date | None = None) -> RideDraft:
    """Blank draft with the form defaults: today, 06:00–18:00, one day."""
    return RideDraft(
        title="",
        summary="",
        date=today or date.today(),
        marshal_id=marshal_id,
    )


def ride_draft_from(ride: Ride) -> RideDraft:
    """Start an edit session from a stored ride."""
    return RideDraft(
        title=ride.title,
        summary=ride.summary,
        date=ride.ride_date,
        marshal_id=ride.marshal_id,
        notes=ride.notes or "",
        start_time=ride.start_time,
        end_time=ride.end_time,
        duration_days=ride.duration_days or 1,
        terrain_types=tuple(ride.terrain_types or ()),
        custom_terrain=ride.custom_terrain,
        map_link=ride.map_link or "",
        drive_link=ride.drive_link or "",
        feedback_link=ride.feedback_link,
    )


def _coerce_duration(value: Any) -> int:
    try:
        days = int(value)
    except (TypeError, ValueError):
        return 1
    return days if days >= 1 else 1


def _coerce_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise DraftError(f"Invalid ride date: {value!r}") from exc


def _coerce_terrain(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(t) for t in value)


_RIDE_REDUCERS: dict[RideField, Callable[[RideDraft, Any], RideDraft]] = {
    RideField.TITLE: lambda d, v: replace(d, title=_text(v)),
    RideField.SUMMARY: lambda d, v: replace(d, summary=_text(v)),
    RideField.NOTES: lambda d, v: replace(d, notes=_text(v)),
    RideField.DATE: lambda d, v: replace(d, date=_coerce_date(v)),
    RideField.START_TIME: lambda d, v: replace(d, start_time=_text(v)),
    RideField.END_TIME: lambda d, v: replace(d, end_time=_text(v)),
    RideField.DURATION_DAYS: lambda d, v: replace(d, duration_days=_coerce_duration(v)),
    RideField.TERRAIN_TYPES: lambda d, v: replace(d, terrain_types=_coerce_terrain(v)),
    RideField.CUSTOM_TERRAIN: lambda d, v: replace(d, custom_terrain=_optional_text(v)),
    RideField.MARSHAL_ID: lambda d, v: replace(d, marshal_id=_text(v)),
    RideField.MAP_LINK: lambda d, v: replace(d, map_link=_text(v)),
    RideField.DRIVE_LINK: lambda d, v: replace(d, drive_link=_text(v)),
    RideField.FEEDBACK_LINK: lambda d, v: replace(d, feedback_link=_optional_text(v)),
}


def apply_ride_edit(draft: RideDraft, field: RideField | str, value: Any) -> RideDraft:
    """Return *draft* with one field changed.

    Raises ``ValueError`` for an unknown field name.
    """
    return _RIDE_REDUCERS[RideField(field)](draft, value)


def apply_ride_edits(draft: RideDraft, edits: dict[str, Any]) -> RideDraft:
    """Fold several field edits into *draft*, one reducer at a time."""
    for name, value in edits.items():
        draft = apply_ride_edit(draft, name, value)
    return draft


def toggle_terrain(draft: RideDraft, terrain: str) -> RideDraft:
    """Add *terrain* if missing, remove it if present."""
    if terrain in draft.terrain_types:
        updated = tuple(t for t in draft.terrain_types if t != terrain)
    else:
        updated = (*draft.terrain_types, terrain)
    return replace(draft, terrain_types=updated)


def validate_ride_draft(draft: RideDraft) -> RideDraft:
    """Raise :class:`DraftError` unless the draft can be saved."""
    if not draft.title.strip() or not draft.summary.strip():
        raise DraftError("Title and summary are required to schedule a ride.")
    if not draft.marshal_id:
        raise DraftError("A ride needs a commanding marshal.")
    return draft


# ---------------------------------------------------------------------------
# Profile draft
# ---------------------------------------------------------------------------
class ProfileField(enum.StrEnum):
    NAME = "name"
    AVATAR_URL = "avatar_url"
    ABOUT = "about"
    DREAM_RIDE = "dream_ride"
    BIKE_MODEL = "bike_model"
    FAV_DESTINATION = "fav_destination"
    BLOOD_GROUP = "blood_group"
    EMERGENCY_CONTACT = "emergency_contact"
    RIDING_STYLE = "riding_style"
    EXPERIENCE_YEARS = "experience_years"
    FAV_GEAR_BRAND = "fav_gear_brand"
    RIDE_MEMORY = "ride_memory"


@dataclass(frozen=True, slots=True)
class ProfileDraft:
    """The part of a member record the member edits themselves."""

    name: str
    avatar_url: str = ""
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


def profile_draft_from(user: User) -> ProfileDraft:
    return ProfileDraft(
        name=user.name,
        avatar_url=user.avatar_url or "",
        about=user.about,
        dream_ride=user.dream_ride,
        bike_model=user.bike_model,
        fav_destination=user.fav_destination,
        blood_group=user.blood_group,
        emergency_contact=user.emergency_contact,
        riding_style=user.riding_style,
        experience_years=user.experience_years,
        fav_gear_brand=user.fav_gear_brand,
        ride_memory=user.ride_memory,
    )


def _require_name(value: Any) -> str:
    name = _text(value).strip()
    if not name:
        raise DraftError("Name cannot be blank.")
    return name


_PROFILE_REDUCERS: dict[ProfileField, Callable[[ProfileDraft, Any], ProfileDraft]] = {
    ProfileField.NAME: lambda d, v: replace(d, name=_require_name(v)),
    ProfileField.AVATAR_URL: lambda d, v: replace(d, avatar_url=_text(v)),
    ProfileField.ABOUT: lambda d, v: replace(d, about=_optional_text(v)),
    ProfileField.DREAM_RIDE: lambda d, v: replace(d, dream_ride=_optional_text(v)),
    ProfileField.BIKE_MODEL: lambda d, v: replace(d, bike_model=_optional_text(v)),
    ProfileField.FAV_DESTINATION: lambda d, v: replace(d, fav_destination=_optional_text(v)),
    ProfileField.BLOOD_GROUP: lambda d, v: replace(d, blood_group=_optional_text(v)),
    ProfileField.EMERGENCY_CONTACT: lambda d, v: replace(d, emergency_contact=_optional_text(v)),
    ProfileField.RIDING_STYLE: lambda d, v: replace(d, riding_style=_optional_text(v)),
    ProfileField.EXPERIENCE_YEARS: lambda d, v: replace(d, experience_years=_optional_text(v)),
    ProfileField.FAV_GEAR_BRAND: lambda d, v: replace(d, fav_gear_brand=_optional_text(v)),
    ProfileField.RIDE_MEMORY: lambda d, v: replace(d, ride_memory=_optional_text(v)),
}


def apply_profile_edit(
    draft: ProfileDraft, field: ProfileField | str, value: Any,
) -> ProfileDraft:
    """Return *draft* with one profile field changed."""
    return _PROFILE_REDUCERS[ProfileField(field)](draft, value)


def apply_profile_edits(draft: ProfileDraft, edits: dict[str, Any]) -> ProfileDraft:
    for name, value in edits.items():
        draft = apply_profile_edit(draft, name, value)
    return draft


def profile_changes(draft: ProfileDraft) -> dict[str, Any]:
    """Column values for the member row."""
    return {
        "name": draft.name,
        "avatar_url": draft.avatar_url,
        "about": draft.about,
        "dream_ride": draft.dream_ride,
        "bike_model": draft.bike_model,
        "fav_destination": draft.fav_destination,
        "blood_group": draft.blood_group,
        "emergency_contact": draft.emergency_contact,
        "riding_style": draft.riding_style,
        "experience_years": draft.experience_years,
        "fav_gear_brand": draft.fav_gear_brand,
        "ride_memory": draft.ride_memory,
    }
