"""Round and encounter summaries.

Everything here is a Pydantic model: these objects cross the engine
boundary (notification sink, history storage, export files) and must
round-trip through JSON.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from combat_telemetry.models.moments import NotableMoments


class MvpPattern(str, Enum):
    """Narrative category of an MVP performance."""

    COMBAT_EXCELLENCE = "combat_excellence"
    DAMAGE = "damage"
    PRECISION = "precision"
    MIXED = "mixed"


class MvpCandidate(BaseModel):
    """A scored participant, with its classified pattern and description."""

    participant_id: str
    name: str
    score: float
    pattern: MvpPattern | None = None
    description: str = ""
    hits: int = 0
    attempts: int = 0
    crits: int = 0
    fumbles: int = 0
    damage: int = 0
    healing: int = 0


# ---------------------------------------------------------------------------
# Round-level payloads
# ---------------------------------------------------------------------------


class ParticipantRoundBreakdown(BaseModel):
    participant_id: str
    name: str
    is_player: bool = False
    score: float = 0.0
    damage_dealt: int = 0
    damage_taken: int = 0
    healing_given: int = 0
    healing_received: int = 0
    attempts: int = 0
    hits: int = 0
    misses: int = 0
    crits: int = 0
    fumbles: int = 0
    turn_duration_ms: int = 0
    turn_expired: bool = False


class PartyBreakdown(BaseModel):
    hits: int = 0
    misses: int = 0
    hit_miss_ratio: float = 0.0
    damage_dealt: int = 0
    damage_taken: int = 0
    healing_done: int = 0
    average_turn_ms: float = 0.0


class ExpiredTurn(BaseModel):
    """A turn that ran out its full allotted time."""

    participant_id: str
    name: str
    round: int
    turn: int
    duration_ms: int


class RoundSummary(BaseModel):
    """Payload handed to the notification sink at the end of each round."""

    combat_id: str
    round: int
    duration_actual_ms: int
    """Wall-clock time from round start to round end."""

    duration_active_ms: int
    """Player turn time plus pause-adjusted planning time."""

    planning_ms: int = 0
    turn_allotment_ms: int = 0
    party: PartyBreakdown = Field(default_factory=PartyBreakdown)
    participants: list[ParticipantRoundBreakdown] = Field(default_factory=list)
    mvp: MvpCandidate | None = None
    rankings: list[MvpCandidate] = Field(default_factory=list)
    no_mvp_description: str | None = None
    notable_moments: NotableMoments = Field(default_factory=NotableMoments)
    expired_turns: list[ExpiredTurn] = Field(default_factory=list)

    @property
    def has_notable_moments(self) -> bool:
        return self.notable_moments.has_moments


class RoundRecord(BaseModel):
    """Compact per-round line kept in the encounter's round log."""

    round: int
    duration_actual_ms: int = 0
    duration_active_ms: int = 0
    hits: int = 0
    misses: int = 0
    damage_dealt: int = 0
    healing_done: int = 0
    expired_turns: int = 0
    mvp_name: str | None = None
    mvp_score: float | None = None


# ---------------------------------------------------------------------------
# Encounter-level snapshot
# ---------------------------------------------------------------------------


class ParticipantSummary(BaseModel):
    """Encounter totals for one participant."""

    participant_id: str
    name: str
    is_player: bool = False
    damage_dealt: int = 0
    damage_taken: int = 0
    healing_given: int = 0
    healing_received: int = 0
    attempts: int = 0
    hits: int = 0
    misses: int = 0
    criticals: int = 0
    fumbles: int = 0
    biggest_hit: int = 0
    weakest_hit: int = 0
    turn_total_ms: int = 0
    turn_count: int = 0
    fastest_turn_ms: int | None = None
    slowest_turn_ms: int | None = None


class CombatTotals(BaseModel):
    attempts: int = 0
    hits: int = 0
    misses: int = 0
    criticals: int = 0
    fumbles: int = 0
    damage_dealt: int = 0
    damage_taken: int = 0
    healing: int = 0

    @property
    def hit_rate(self) -> float:
        return self.hits / self.attempts * 100 if self.attempts else 0.0


class HitHighlight(BaseModel):
    attacker_id: str
    attacker_name: str
    target_id: str | None = None
    target_name: str | None = None
    amount: int
    is_critical: bool = False
    source_name: str | None = None
    round: int = 0


class HealHighlight(BaseModel):
    healer_id: str
    healer_name: str
    target_id: str | None = None
    target_name: str | None = None
    amount: int
    source_name: str | None = None
    round: int = 0


class CombatSummary(BaseModel):
    """Immutable encounter snapshot stored in history.

    The running snapshot of an encounter is rewritten after every round
    under the same ``combat_id``; history keeps only the newest one.
    """

    model_config = ConfigDict(frozen=True)

    combat_id: str
    recorded_at: datetime
    scene_name: str | None = None
    rounds: int = 0
    duration_ms: int = 0
    finished: bool = False
    totals: CombatTotals = Field(default_factory=CombatTotals)
    participants: list[ParticipantSummary] = Field(default_factory=list)
    mvp: MvpCandidate | None = None
    mvp_rankings: list[MvpCandidate] = Field(default_factory=list)
    """Encounter-wide rankings over player participants."""

    round_log: list[RoundRecord] = Field(default_factory=list)
    top_hits: list[HitHighlight] = Field(default_factory=list)
    top_heals: list[HealHighlight] = Field(default_factory=list)

    def participant(self, participant_id: str) -> ParticipantSummary | None:
        for entry in self.participants:
            if entry.participant_id == participant_id:
                return entry
        return None

    def ranking_score(self, participant_id: str) -> float | None:
        for entry in self.mvp_rankings:
            if entry.participant_id == participant_id:
                return entry.score
        return None
