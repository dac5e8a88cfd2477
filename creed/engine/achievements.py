"""
creed.engine.achievements — Achievement Progress Engine
=========================================================

Given a rider's cumulative stats and the club's honors catalogue, works out
for every stat category the next milestone still to earn and how far along
the rider is, as a percentage.

Rules per category (in the fixed order Kms, Leads, Sweeps, RPs, Rides):

1. Categories without any honor are left out entirely.
2. Honors are sorted by threshold; equal thresholds keep catalogue order.
3. ``next`` is the first honor above the current value, or the top honor
   once everything is earned.
4. ``prev_threshold`` is the highest threshold already reached (0 if none).
5. ``is_maxed`` compares the current value with the top threshold only.
6. A maxed category always shows 100%.  So does a category whose next and
   previous thresholds coincide, which would otherwise divide by zero.

This module is pure calculation — no database I/O.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from creed.database.models import AchievementCategory

if TYPE_CHECKING:
    from creed.database.models import User

logger = logging.getLogger(__name__)

# Map AchievementCategory → User stat column
CATEGORY_TO_STAT: dict[AchievementCategory, str] = {
    AchievementCategory.KMS: "total_kms",
    AchievementCategory.LEADS: "leads",
    AchievementCategory.SWEEPS: "sweeps",
    AchievementCategory.RPS: "rps",
    AchievementCategory.RIDES: "total_rides",
}

MAXED_HEADLINE = "MAXED OUT"
MAXED_CAPTION = "LEGENDARY"


# ---------------------------------------------------------------------------
# Catalogue entries
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Achievement:
    """A named milestone: reach *threshold* in *category* to earn it."""

    threshold: int
    label: str
    category: AchievementCategory
    icon: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "threshold": self.threshold,
            "label": self.label,
            "category": str(self.category),
        }
        if self.icon:
            data["icon"] = self.icon
        return data


DEFAULT_ACHIEVEMENTS: tuple[Achievement, ...] = (
    Achievement(1000, "Iron Butt", AchievementCategory.KMS),
    Achievement(5, "First Lead", AchievementCategory.LEADS),
    Achievement(10, "Road Master", AchievementCategory.LEADS),
    Achievement(10, "Guardian", AchievementCategory.SWEEPS),
    Achievement(5, "Tactician", AchievementCategory.RPS),
    Achievement(25, "Veteran", AchievementCategory.RIDES),
)


def parse_achievements(raw: Iterable[Any]) -> tuple[Achievement, ...]:
    """Build catalogue entries from stored JSON, dropping malformed ones.

    An entry is kept only when it is a mapping with an integer threshold
    ≥ 0 and a known category.
    """
    parsed: list[Achievement] = []
    for item in raw:
        if not isinstance(item, Mapping):
            logger.warning("Skipping non-object achievement entry: %r", item)
            continue
        threshold = item.get("threshold")
        if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 0:
            logger.warning("Skipping achievement with bad threshold: %r", item)
            continue
        try:
            category = AchievementCategory(item.get("category"))
        except ValueError:
            logger.warning("Skipping achievement with unknown category: %r", item)
            continue
        parsed.append(Achievement(
            threshold=threshold,
            label=str(item.get("label", "")),
            category=category,
            icon=item.get("icon") or None,
        ))
    return tuple(parsed)


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class CategoryProgress:
    """Where a rider stands in one category."""

    category: AchievementCategory
    current: int
    prev_threshold: int
    next: Achievement
    progress_fraction: float
    is_maxed: bool

    @property
    def headline(self) -> str:
        return MAXED_HEADLINE if self.is_maxed else self.next.label

    @property
    def caption(self) -> str:
        if self.is_maxed:
            return MAXED_CAPTION
        return f"{self.next.threshold} FOR {self.next.label}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": str(self.category),
            "current": self.current,
            "prev_threshold": self.prev_threshold,
            "next": self.next.to_dict(),
            "progress_fraction": self.progress_fraction,
            "is_maxed": self.is_maxed,
            "headline": self.headline,
            "caption": self.caption,
        }


def stats_for_user(user: User) -> dict[AchievementCategory, int]:
    """Read a member's counters into a category → value mapping."""
    return {
        category: getattr(user, column) or 0
        for category, column in CATEGORY_TO_STAT.items()
    }


def _category_progress(
    category: AchievementCategory,
    current: int,
    ladder: list[Achievement],
) -> CategoryProgress:
    top = ladder[-1]
    next_achievement = next((a for a in ladder if a.threshold > current), top)

    prev_threshold = 0
    for a in ladder:
        if a.threshold <= current:
            prev_threshold = a.threshold

    is_maxed = current >= top.threshold
    span = next_achievement.threshold - prev_threshold
    if is_maxed or span == 0:
        fraction = 100.0
    else:
        fraction = min(100.0, max(0.0, (current - prev_threshold) / span * 100))

    return CategoryProgress(
        category=category,
        current=current,
        prev_threshold=prev_threshold,
        next=next_achievement,
        progress_fraction=fraction,
        is_maxed=is_maxed,
    )


def compute_progress(
    stats: Mapping[AchievementCategory, int],
    achievements: Iterable[Achievement],
) -> list[CategoryProgress]:
    """Compute progress for every category that has at least one honor.

    Parameters
    ----------
    stats : Category → current counter.  Missing categories count as 0.
    achievements : The club catalogue, in any order.

    Returns
    -------
    One :class:`CategoryProgress` per non-empty category, in
    :class:`AchievementCategory` order.
    """
    catalogue = list(achievements)
    results: list[CategoryProgress] = []

    for category in AchievementCategory:
        ladder = sorted(
            (a for a in catalogue if a.category == category),
            key=lambda a: a.threshold,
        )
        if not ladder:
            continue
        current = stats.get(category, 0) or 0
        results.append(_category_progress(category, current, ladder))

    return results
