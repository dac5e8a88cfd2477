"""
creed.database.seed — Default Club Settings Seeder
====================================================

Creates the single ``club_settings`` row with the built-in defaults so a
fresh deployment has a brand, a theme and an honors catalogue.

Idempotent — an existing row is never overwritten.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine

from creed.database.engine import get_session
from creed.database.models import CLUB_SETTINGS_ID, ClubSettingsRow
from creed.services.settings_service import default_settings, settings_columns

logger = logging.getLogger(__name__)


def seed_club_settings(engine: Engine) -> bool:
    """Insert the default settings row if it is missing.

    Returns ``True`` when a row was written.
    """
    with get_session(engine) as session:
        if session.get(ClubSettingsRow, CLUB_SETTINGS_ID) is not None:
            return False
        session.add(ClubSettingsRow(
            id=CLUB_SETTINGS_ID,
            **settings_columns(default_settings()),
        ))

    logger.info("Seeded default club settings.")
    return True
