"""Live state of the encounter being tracked."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from combat_telemetry.config import TelemetrySettings
from combat_telemetry.core.bounded import BoundedLog
from combat_telemetry.models.events import Participant
from combat_telemetry.models.summary import ExpiredTurn, RoundRecord, RoundSummary
from combat_telemetry.tracking.moments import NotableMomentsTracker
from combat_telemetry.tracking.stats_store import ParticipantStatsStore
from combat_telemetry.tracking.timing import ActiveTimeAccumulator


@dataclass
class CombatSession:
    """Mutable state for one combat, passed by reference to every handler.

    Attributes
    ----------
    round_started:
        ``True`` once a round >= 1 has begun; the round-end pipeline and the
        final flush only run after that.
    round_token:
        Incremented on every round start.  Async handlers capture it before
        awaiting and compare afterwards to detect a round change.
    deleted:
        Set first on teardown so that in-flight work stops at its next guard.
    lock:
        Serialises lifecycle processing (round-end pipeline) and teardown.
    """

    combat_id: str
    started_at_ms: int
    stats: ParticipantStatsStore
    expired_turns: BoundedLog[ExpiredTurn]
    round_log: BoundedLog[RoundRecord]
    round_summaries: BoundedLog[RoundSummary]
    scene_name: str | None = None
    round: int = 0
    turn: int = 0
    round_started: bool = False
    round_token: int = 0
    round_start_ms: int = 0
    current_combatant: Participant | None = None
    turn_start_ms: int = 0
    turn_expired: bool = False
    in_planning: bool = False
    planning: ActiveTimeAccumulator = field(default_factory=ActiveTimeAccumulator)
    moments: NotableMomentsTracker = field(default_factory=NotableMomentsTracker)
    last_attack_critical: dict[str, bool] = field(default_factory=dict)
    deleted: bool = False
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @classmethod
    def create(
        cls,
        combat_id: str,
        now_ms: int,
        settings: TelemetrySettings,
        scene_name: str | None = None,
    ) -> CombatSession:
        return cls(
            combat_id=combat_id,
            started_at_ms=now_ms,
            scene_name=scene_name,
            stats=ParticipantStatsStore(
                log_capacity=settings.event_log_capacity,
                top_n=settings.top_moments,
            ),
            expired_turns=BoundedLog(settings.event_log_capacity),
            round_log=BoundedLog(settings.round_log_capacity),
            round_summaries=BoundedLog(settings.round_log_capacity),
        )

    def round_summary(self, round: int | None = None) -> RoundSummary | None:
        """Summary of *round*, or of the latest completed round."""
        if round is None:
            return self.round_summaries.latest
        for summary in reversed(self.round_summaries.to_list()):
            if summary.round == round:
                return summary
        return None

    def start_round(self, round: int, turn: int, now_ms: int) -> None:
        """Enter *round*, clearing all round-scoped state."""
        self.round = round
        self.turn = turn
        self.round_started = True
        self.round_token += 1
        self.round_start_ms = now_ms
        self.reset_round_state()

    def reset_round_state(self) -> None:
        self.stats.reset_round()
        self.moments.reset()
        self.expired_turns.clear()
        self.planning.reset()
        self.in_planning = False
        self.turn_expired = False
        self.last_attack_critical.clear()
