"""Durable per-participant lifetime records.

A :class:`LifetimeRecord` never stores totals directly.  It stores one
:class:`LifetimeContribution` per source (a recorded combat, or an imported
lifetime snapshot) plus a ``baseline`` for contributions that can no longer
be retracted.  :class:`PlayerLifetimeStats` is the derived view produced by
``combat_telemetry.history.lifetime.derive_stats``.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class HitRecord(BaseModel):
    amount: int
    combat_id: str | None = None
    recorded_at: datetime | None = None
    target_name: str | None = None
    is_critical: bool = False


class TurnRecord(BaseModel):
    duration_ms: int
    combat_id: str | None = None
    recorded_at: datetime | None = None


class LifetimeContribution(BaseModel):
    """Additive counters and extreme records from one source.

    Counters combine by sum; ``biggest_hit``, ``slowest_turn`` and
    ``mvp_high_score`` by max; ``weakest_hit`` and ``fastest_turn`` by
    min over non-zero values.
    """

    hits: int = 0
    misses: int = 0
    criticals: int = 0
    fumbles: int = 0
    damage_dealt: int = 0
    damage_taken: int = 0
    healing_given: int = 0
    healing_received: int = 0
    turn_total_ms: int = 0
    turn_count: int = 0
    biggest_hit: HitRecord | None = None
    weakest_hit: HitRecord | None = None
    fastest_turn: TurnRecord | None = None
    slowest_turn: TurnRecord | None = None
    mvp_total_score: float = 0.0
    mvp_combats: int = 0
    mvp_high_score: float = 0.0
    hit_log: list[HitRecord] = Field(default_factory=list)
    """Most recent notable hits, newest first."""


class LifetimeRecord(BaseModel):
    """Persisted lifetime state for one participant."""

    participant_id: str
    name: str
    baseline: LifetimeContribution = Field(default_factory=LifetimeContribution)
    contributions: dict[str, LifetimeContribution] = Field(default_factory=dict)
    """Retractable contributions keyed ``combat:<id>`` or ``import:<participant_id>``."""

    imported_lifetime: LifetimeContribution | None = None
    """Newest imported lifetime snapshot, before shipped combats are subtracted."""

    imported_combats: dict[str, LifetimeContribution] = Field(default_factory=dict)
    """What each combat delivered alongside an imported snapshot contributed to it."""

    imported_at: datetime | None = None
    last_updated: datetime | None = None


class MvpAggregate(BaseModel):
    total_score: float = 0.0
    combats: int = 0
    average_score: float = 0.0
    high_score: float = 0.0


class PlayerLifetimeStats(BaseModel):
    """Derived lifetime view: totals, best/worst records, MVP aggregate."""

    participant_id: str
    name: str
    hits: int = 0
    misses: int = 0
    hit_miss_ratio: float = 0.0
    criticals: int = 0
    fumbles: int = 0
    damage_dealt: int = 0
    damage_taken: int = 0
    healing_given: int = 0
    healing_received: int = 0
    turn_total_ms: int = 0
    turn_count: int = 0
    average_turn_ms: float = 0.0
    biggest_hit: HitRecord | None = None
    weakest_hit: HitRecord | None = None
    fastest_turn: TurnRecord | None = None
    slowest_turn: TurnRecord | None = None
    mvp: MvpAggregate = Field(default_factory=MvpAggregate)
    hit_log: list[HitRecord] = Field(default_factory=list)
    last_updated: datetime | None = None
