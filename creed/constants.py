"""
creed.constants — Shared Constants
===================================

Single source of truth for brand colors, typography defaults and ride
form options.  Import from here instead of duplicating in services,
engine modules and routes.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Brand colors
# ---------------------------------------------------------------------------
BRAND_GREEN = "#a4e636"

# Retired brand red.  Still found in older club_settings rows.
LEGACY_RED_HEX = "#e11d47"
LEGACY_RED_RGB = "rgb(225, 29, 71)"
LEGACY_RED_TRIPLET = "225, 29, 71"
PURE_RED_NAMES: frozenset[str] = frozenset({"#ff0000", "red"})

# ---------------------------------------------------------------------------
# Typography
# ---------------------------------------------------------------------------
BODY_FONT = "Montserrat"
DISPLAY_FONT = "Bebas Neue"

# ---------------------------------------------------------------------------
# Ride form options
# ---------------------------------------------------------------------------
TERRAIN_OPTIONS: tuple[str, ...] = (
    "Highway",
    "Broken Roads",
    "Off-roads",
    "Mountains",
    "Coastal",
    "City",
)

DEFAULT_RIDE_START = "06:00"
DEFAULT_RIDE_END = "18:00"

# ---------------------------------------------------------------------------
# Fields a member may never change through a generic update
# ---------------------------------------------------------------------------
FROZEN_USER_FIELDS: tuple[str, ...] = ("id", "password_hash", "created_at")
FROZEN_RIDE_FIELDS: tuple[str, ...] = ("id", "created_at")
