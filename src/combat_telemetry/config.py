"""Runtime settings for the telemetry engine.

Settings are a plain Pydantic model so they can be loaded from JSON,
overridden per test, and validated in one place.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TelemetrySettings(BaseModel):
    """Tunables for tracking, bounded logs, and history."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    track_combat_stats: bool = True
    """Master switch for round and encounter tracking."""

    track_player_stats: bool = True
    """Master switch for lifetime (cross-encounter) statistics."""

    turn_time_allotment_s: float = Field(default=60.0, gt=0)
    """Allotted turn time used when the timer does not report one."""

    planning_time_allotment_s: float = Field(default=60.0, gt=0)
    """Allotted planning-phase time used when the timer does not report one."""

    event_log_capacity: int = Field(default=1000, ge=1)
    """Capacity of the hit, miss, and expired-turn logs."""

    round_log_capacity: int = Field(default=1000, ge=1)
    """Capacity of the per-encounter round log."""

    history_capacity: int = Field(default=20, ge=1)
    """Number of combat summaries kept in history."""

    top_moments: int = Field(default=5, ge=1)
    """Length of the encounter top-hits and top-heals lists."""

    default_hit_threshold: int = 10
    """Attack total needed to hit when the event carries no target value."""

    hit_log_capacity: int = Field(default=20, ge=1)
    """Number of recent hits kept in each player's lifetime hit log."""


def load_settings(path: str | Path | None = None, **overrides: Any) -> TelemetrySettings:
    """Load settings from an optional JSON file, then apply *overrides*.

    Parameters
    ----------
    path:
        JSON file containing a subset of :class:`TelemetrySettings` fields.
        ``None`` means "defaults only".
    overrides:
        Field values that take precedence over the file.
    """
    data: dict[str, Any] = {}
    if path is not None:
        data.update(json.loads(Path(path).read_text()))
    data.update(overrides)
    return TelemetrySettings.model_validate(data)
