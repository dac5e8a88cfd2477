"""
creed.engine.cache — Versioned Club Settings Snapshot
=======================================================

Holds the most recently fetched :class:`~creed.engine.theme.ClubSettings`
for the whole process.  Every :meth:`SettingsCache.set` bumps a version
number; the theme projection is computed at most once per version so the
font imports and style variables are not rebuilt on every request.

There is no staleness check: if two fetches race, whichever calls
``set()`` last wins.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from creed.engine.theme import ClubSettings, ThemeProjection, project_theme

logger = logging.getLogger(__name__)


class SettingsCache:
    """Thread-safe holder for the current club settings snapshot.

    Usage:
        cache = SettingsCache(lambda: settings_service.get_club_settings(engine))
        cache.load()

        settings = cache.get()          # None until the first load
        projection = cache.theme()      # projected once per version
    """

    def __init__(self, loader: Callable[[], ClubSettings] | None = None) -> None:
        self._loader = loader
        self._lock = threading.Lock()
        self._settings: ClubSettings | None = None
        self._version = 0
        self._projection: ThemeProjection | None = None
        self._projection_version = -1

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def set(self, settings: ClubSettings) -> int:
        """Install *settings* as the current snapshot; return its version."""
        with self._lock:
            self._settings = settings
            self._version += 1
            version = self._version
        logger.debug("Club settings snapshot v%d installed", version)
        return version

    def load(self) -> ClubSettings:
        """Fetch through the loader and install the result."""
        if self._loader is None:
            raise RuntimeError("SettingsCache has no loader configured")
        settings = self._loader()
        self.set(settings)
        return settings

    def clear(self) -> None:
        with self._lock:
            self._settings = None
            self._version += 1
            self._projection = None
            self._projection_version = -1

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def get(self) -> ClubSettings | None:
        with self._lock:
            return self._settings

    def get_or_load(self) -> ClubSettings:
        current = self.get()
        if current is not None:
            return current
        return self.load()

    def theme(self) -> ThemeProjection:
        """Projection of the current snapshot, memoised per version."""
        with self._lock:
            if self._projection is not None and self._projection_version == self._version:
                return self._projection
            settings = self._settings
            version = self._version

        projection = project_theme(settings)

        with self._lock:
            # Only keep it if no newer snapshot arrived meanwhile
            if self._version == version:
                self._projection = projection
                self._projection_version = version
        logger.debug("Theme projected for settings v%d", version)
        return projection
