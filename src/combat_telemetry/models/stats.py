"""Live per-participant and party counters.

These are plain ``dataclass`` instances (not Pydantic models) because they
are mutated on every roll; snapshots handed to collaborators are built from
them as Pydantic summaries instead.

- **ParticipantStats**: attack, damage, and healing counters plus bounded
  hit/miss logs, for one participant on one horizon (round or encounter).
- **PartyAggregate**: round totals over player-controlled participants.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from combat_telemetry.core.bounded import BoundedLog


@dataclass
class AttackCounters:
    attempts: int = 0
    hits: int = 0
    misses: int = 0
    crits: int = 0
    fumbles: int = 0

    @property
    def accuracy(self) -> float:
        """Hit percentage in ``[0, 100]``; 0 when no attacks were made."""
        if self.attempts == 0:
            return 0.0
        return self.hits / self.attempts * 100


@dataclass
class DamageCounters:
    dealt: int = 0
    taken: int = 0


@dataclass
class HealingCounters:
    given: int = 0
    received: int = 0


@dataclass(frozen=True)
class AttackLogEntry:
    """One attack roll, as kept in the hit and miss logs."""

    actor_id: str
    actor_name: str
    roll_total: int
    is_hit: bool
    is_critical: bool
    is_fumble: bool
    round: int
    turn: int
    timestamp_ms: int


@dataclass
class ParticipantStats:
    """Accumulated counters for one participant.

    Attributes
    ----------
    turn_duration_ms:
        Duration of the participant's most recent completed turn.
    biggest_hit / weakest_hit:
        Largest and smallest non-zero damage dealt in a single roll.
    fastest_turn_ms / slowest_turn_ms:
        Extremes over completed turns (``None`` until a turn completes).
    hits / misses:
        Bounded logs of individual attack rolls.
    """

    participant_id: str
    name: str
    is_player: bool = False
    log_capacity: int = 1000
    damage: DamageCounters = field(default_factory=DamageCounters)
    healing: HealingCounters = field(default_factory=HealingCounters)
    attacks: AttackCounters = field(default_factory=AttackCounters)
    turn_duration_ms: int = 0
    last_turn_expired: bool = False
    turn_total_ms: int = 0
    turn_count: int = 0
    fastest_turn_ms: int | None = None
    slowest_turn_ms: int | None = None
    biggest_hit: int = 0
    weakest_hit: int = 0
    hits: BoundedLog[AttackLogEntry] = field(init=False, repr=False)
    misses: BoundedLog[AttackLogEntry] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.hits = BoundedLog(self.log_capacity)
        self.misses = BoundedLog(self.log_capacity)


@dataclass
class PartyAggregate:
    """Round totals over player-controlled participants."""

    hits: int = 0
    misses: int = 0
    damage_dealt: int = 0
    damage_taken: int = 0
    healing_done: int = 0
    turn_times: dict[str, int] = field(default_factory=dict)
    """Latest turn duration (ms) per player participant id."""

    turn_total_ms: int = 0
    turn_count: int = 0
    average_turn_ms: float = 0.0

    @property
    def hit_miss_ratio(self) -> float:
        """Hit percentage over party attacks; 0 when none were made."""
        total = self.hits + self.misses
        return self.hits / total * 100 if total else 0.0

    def record_turn(self, participant_id: str, duration_ms: int) -> None:
        """Store a player's turn time and recompute the rolling average."""
        self.turn_times[participant_id] = duration_ms
        self.turn_total_ms += duration_ms
        self.turn_count += 1
        self.average_turn_ms = self.turn_total_ms / self.turn_count
