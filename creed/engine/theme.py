"""
creed.engine.theme — Club Settings Snapshot, Color Sanitizer & Theme Projector
================================================================================

Turns the club's branding record into the style variables and web-font
imports every dashboard screen is painted with.

* :class:`ClubSettings` is the immutable snapshot handed around after a
  fetch.  ``None`` fields mean "not set"; the projector fills them in.
* :func:`sanitize_color` migrates the retired brand red to the current
  brand green.  It runs at read time only.
* :data:`THEME_FIELDS` is the table of editable theme fields that drives
  the admin color/font inputs.  Every entry carries its own accessor and
  mutator, so no field is ever looked up by attribute name.
* :func:`project_theme` / :func:`render_css` are pure.

This module is pure calculation — no database I/O.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from creed.config import DEFAULT_FONT_SERVICE_URL, DEFAULT_FONT_WEIGHTS
from creed.constants import (
    BODY_FONT,
    BRAND_GREEN,
    DISPLAY_FONT,
    LEGACY_RED_HEX,
    LEGACY_RED_RGB,
    LEGACY_RED_TRIPLET,
    PURE_RED_NAMES,
)
from creed.engine.achievements import Achievement

__all__ = [
    "ClubSettings",
    "ThemeField",
    "ThemeProjection",
    "THEME_FIELDS",
    "font_import_url",
    "project_theme",
    "render_css",
    "sanitize_color",
    "theme_field",
]


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ClubSettings:
    """One fetched version of the club-wide branding record."""

    # Payments
    upi_id: str = ""
    gpay_qr_url: str = ""
    annual_fee: int = 0
    lifetime_fee: int = 0

    # Global branding
    brand_name: str | None = None
    brand_sub_name: str | None = None
    logo_url: str | None = None
    primary_color: str | None = None

    # Section colors
    dashboard_bg: str | None = None
    header_bg: str | None = None
    header_text: str | None = None
    card_bg: str | None = None
    card_border: str | None = None
    button_bg: str | None = None
    button_text: str | None = None
    stat_color: str | None = None

    # Typography
    global_font: str | None = None
    heading_font: str | None = None
    nav_font: str | None = None
    stat_font: str | None = None
    button_font: str | None = None
    input_font: str | None = None
    achievement_font: str | None = None
    card_header_font: str | None = None
    section_header_font: str | None = None

    achievements: tuple[Achievement, ...] = ()


# ---------------------------------------------------------------------------
# Color sanitizer
# ---------------------------------------------------------------------------
def sanitize_color(color: str | None) -> str:
    """Return *color* unless it is empty or a form of the retired red.

    The legacy red is recognised case-insensitively as ``#e11d47``,
    ``rgb(225, 29, 71)`` (or anything containing ``225, 29, 71``), and
    pure red as ``#ff0000`` / ``red``.  Every other value, malformed or
    not, is returned exactly as given.
    """
    if not color:
        return BRAND_GREEN
    c = color.strip().lower()
    if (
        c == LEGACY_RED_HEX
        or c == LEGACY_RED_RGB
        or LEGACY_RED_TRIPLET in c
        or c in PURE_RED_NAMES
    ):
        return BRAND_GREEN
    return color


# ---------------------------------------------------------------------------
# Field table
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ThemeField:
    """One editable theme knob.

    ``get`` reads the stored value (possibly ``None``); ``set`` returns a
    new snapshot with the value replaced.
    """

    key: str
    label: str
    kind: str  # "color" | "font"
    css_var: str
    default: str
    get: Callable[[ClubSettings], str | None]
    set: Callable[[ClubSettings, str | None], ClubSettings]


THEME_FIELDS: tuple[ThemeField, ...] = (
    # Colors
    ThemeField(
        "primary_color", "Primary Accent", "color", "--primary-color", BRAND_GREEN,
        lambda s: s.primary_color,
        lambda s, v: replace(s, primary_color=v),
    ),
    ThemeField(
        "dashboard_bg", "Background", "color", "--dashboard-bg", "#000000",
        lambda s: s.dashboard_bg,
        lambda s, v: replace(s, dashboard_bg=v),
    ),
    ThemeField(
        "header_bg", "Header BG", "color", "--header-bg", "#000000",
        lambda s: s.header_bg,
        lambda s, v: replace(s, header_bg=v),
    ),
    ThemeField(
        "header_text", "Header Text", "color", "--header-text", "#ffffff",
        lambda s: s.header_text,
        lambda s, v: replace(s, header_text=v),
    ),
    ThemeField(
        "card_bg", "Card BG", "color", "--card-bg", "#0a0a0a",
        lambda s: s.card_bg,
        lambda s, v: replace(s, card_bg=v),
    ),
    ThemeField(
        "card_border", "Card Border", "color", "--card-border", "#222222",
        lambda s: s.card_border,
        lambda s, v: replace(s, card_border=v),
    ),
    # Fonts
    ThemeField(
        "global_font", "Global Body Font", "font", "--global-font", BODY_FONT,
        lambda s: s.global_font,
        lambda s, v: replace(s, global_font=v),
    ),
    ThemeField(
        "heading_font", "Primary Heading Font", "font", "--heading-font", DISPLAY_FONT,
        lambda s: s.heading_font,
        lambda s, v: replace(s, heading_font=v),
    ),
    ThemeField(
        "nav_font", "Navigation Font", "font", "--nav-font", DISPLAY_FONT,
        lambda s: s.nav_font,
        lambda s, v: replace(s, nav_font=v),
    ),
    ThemeField(
        "stat_font", "Statistics Font", "font", "--stat-font", DISPLAY_FONT,
        lambda s: s.stat_font,
        lambda s, v: replace(s, stat_font=v),
    ),
    ThemeField(
        "button_font", "Button Font", "font", "--button-font", DISPLAY_FONT,
        lambda s: s.button_font,
        lambda s, v: replace(s, button_font=v),
    ),
    ThemeField(
        "input_font", "Form/Input Font", "font", "--input-font", BODY_FONT,
        lambda s: s.input_font,
        lambda s, v: replace(s, input_font=v),
    ),
    ThemeField(
        "achievement_font", "Achievement Label Font", "font", "--achievement-font",
        DISPLAY_FONT,
        lambda s: s.achievement_font,
        lambda s, v: replace(s, achievement_font=v),
    ),
    ThemeField(
        "card_header_font", "Card Header Font", "font", "--card-header-font",
        DISPLAY_FONT,
        lambda s: s.card_header_font,
        lambda s, v: replace(s, card_header_font=v),
    ),
    ThemeField(
        "section_header_font", "Section Header Font", "font", "--section-header-font",
        DISPLAY_FONT,
        lambda s: s.section_header_font,
        lambda s, v: replace(s, section_header_font=v),
    ),
    # Deep section colors
    ThemeField(
        "button_bg", "Button BG", "color", "--button-bg", BRAND_GREEN,
        lambda s: s.button_bg,
        lambda s, v: replace(s, button_bg=v),
    ),
    ThemeField(
        "button_text", "Button Text", "color", "--button-text", "#000000",
        lambda s: s.button_text,
        lambda s, v: replace(s, button_text=v),
    ),
    ThemeField(
        "stat_color", "Statistic Color", "color", "--stat-color", BRAND_GREEN,
        lambda s: s.stat_color,
        lambda s, v: replace(s, stat_color=v),
    ),
)

_FIELDS_BY_KEY: dict[str, ThemeField] = {f.key: f for f in THEME_FIELDS}


def theme_field(key: str) -> ThemeField:
    """Look up a field by key.  Raises ``KeyError`` for unknown keys."""
    return _FIELDS_BY_KEY[key]


# ---------------------------------------------------------------------------
# Projector
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ThemeProjection:
    """Fonts to import plus CSS custom properties, in emission order."""

    fonts: tuple[str, ...] = ()
    variables: dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.fonts and not self.variables


def project_theme(settings: ClubSettings | None) -> ThemeProjection:
    """Derive style variables and font families from *settings*.

    Returns an empty projection while no settings have been loaded yet so
    callers render with their baseline styles instead of premature
    defaults.
    """
    if settings is None:
        return ThemeProjection()

    fonts: list[str] = []
    variables: dict[str, str] = {}
    for f in THEME_FIELDS:
        value = f.get(settings) or f.default
        if f.kind == "font":
            if value not in fonts:
                fonts.append(value)
            variables[f.css_var] = f"'{value}', sans-serif"
        else:
            variables[f.css_var] = value
    return ThemeProjection(fonts=tuple(fonts), variables=variables)


_WHITESPACE = re.compile(r"\s+")


def font_import_url(
    family: str,
    *,
    service_url: str = DEFAULT_FONT_SERVICE_URL,
    weights: str = DEFAULT_FONT_WEIGHTS,
) -> str:
    """Build the web-font stylesheet URL for one font family."""
    name = _WHITESPACE.sub("+", family.strip())
    return f"{service_url}?family={name}:wght@{weights}&display=swap"


def render_css(
    projection: ThemeProjection,
    *,
    service_url: str = DEFAULT_FONT_SERVICE_URL,
    weights: str = DEFAULT_FONT_WEIGHTS,
) -> str:
    """Render *projection* as ``@import`` lines plus a ``:root`` block."""
    if projection.is_empty:
        return ""
    lines = [
        f"@import url('{font_import_url(f, service_url=service_url, weights=weights)}');"
        for f in projection.fonts
    ]
    lines.append(":root {")
    lines.extend(f"  {name}: {value};" for name, value in projection.variables.items())
    lines.append("}")
    return "\n".join(lines) + "\n"
