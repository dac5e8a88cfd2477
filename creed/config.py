"""
creed.config — YAML Configuration Loader
=========================================

Reads ``config.yaml`` for **infrastructure-only** settings (club identity
for logs, dashboard port, session lifetime, font service).  Everything the
marshals can change from the dashboard (brand, colors, fonts, achievement
catalogue) lives in the ``club_settings`` table instead.

Usage::

    from creed.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.club_name)         # "Bikers Creed"
    print(cfg.session_ttl_hours) # 12
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_FONT_SERVICE_URL = "https://fonts.googleapis.com/css2"
DEFAULT_FONT_WEIGHTS = "400;700;900"


# ---------------------------------------------------------------------------
# Typed settings object — infrastructure/identity only.
# Branding lives in the DB ``club_settings`` row.
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class CreedConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    club_name: str

    # Dashboard
    dashboard_port: int

    # Sessions
    session_ttl_hours: int = 12

    # Theme font imports
    font_service_url: str = DEFAULT_FONT_SERVICE_URL
    font_weights: str = DEFAULT_FONT_WEIGHTS


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> CreedConfig:
    """Read *path* and return a :class:`CreedConfig` instance.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return CreedConfig(
        club_name=raw["club_name"],
        dashboard_port=int(raw["dashboard_port"]),
        session_ttl_hours=int(raw.get("session_ttl_hours", 12)),
        font_service_url=raw.get("font_service_url") or DEFAULT_FONT_SERVICE_URL,
        font_weights=str(raw.get("font_weights") or DEFAULT_FONT_WEIGHTS),
    )
