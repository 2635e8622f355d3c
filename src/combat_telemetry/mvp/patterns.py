"""Performance pattern classification.

Rules are checked top-down and the first match wins.  They are independent
of the MVP score: a high scorer can still fall through to ``None``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from combat_telemetry.models.summary import MvpPattern


@dataclass(frozen=True)
class DescriptionStats:
    """The figures a description template can mention."""

    hits: int = 0
    attempts: int = 0
    damage: int = 0
    crits: int = 0
    healing: int = 0
    fumbles: int = 0

    @property
    def accuracy(self) -> int:
        """Integer hit percentage, rounded half up; 0 with no attempts."""
        if self.attempts == 0:
            return 0
        return math.floor(self.hits / self.attempts * 100 + 0.5)

    @property
    def hit_rate(self) -> float:
        """Unrounded hit percentage; 0.0 with no attempts."""
        if self.attempts == 0:
            return 0.0
        return self.hits / self.attempts * 100


def classify_pattern(stats: DescriptionStats) -> MvpPattern | None:
    if stats.hit_rate >= 75 and stats.hits >= 2 and stats.crits >= 1:
        return MvpPattern.COMBAT_EXCELLENCE
    if stats.damage >= 5 and stats.hits >= 1:
        return MvpPattern.DAMAGE
    if stats.hit_rate >= 90 and stats.hits >= 1:
        return MvpPattern.PRECISION
    if stats.fumbles >= 1 and stats.damage >= 5:
        return MvpPattern.MIXED
    return None
