"""The telemetry service object owned by the host process.

:class:`CombatTelemetry` wires the lifecycle controller to history and the
lifetime ledger and exposes the query surface.  It is constructed
explicitly; independent instances share nothing.

Typical use::

    telemetry = CombatTelemetry(resolver, storage=JsonFileStorage("data"))
    await telemetry.on_combat_start(CombatStart(combat_id="c1", round=1))
    await telemetry.on_attack_roll(AttackRoll(...))
    telemetry.history()
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from combat_telemetry.config import TelemetrySettings
from combat_telemetry.core.clock import Clock
from combat_telemetry.core.rng import TelemetryRNG
from combat_telemetry.history.lifetime import LifetimeLedger
from combat_telemetry.history.merge import ImportReport, export_payload, merge_import
from combat_telemetry.history.report import (
    LeaderboardEntry,
    build_leaderboard,
    build_stat_leaderboard,
    format_duration,
)
from combat_telemetry.history.storage import InMemoryStorage, Storage
from combat_telemetry.history.store import HistoryStore
from combat_telemetry.models.events import AttackRoll, CombatStart, CombatUpdate, DamageRoll
from combat_telemetry.models.lifetime import PlayerLifetimeStats
from combat_telemetry.models.moments import NotableMoments
from combat_telemetry.models.stats import ParticipantStats
from combat_telemetry.models.summary import CombatSummary, RoundSummary
from combat_telemetry.tracking.collaborators import IdentityResolver, NotificationSink, TurnTimer
from combat_telemetry.tracking.controller import RoundLifecycleController
from combat_telemetry.tracking.subscriptions import (
    TelemetryUpdate,
    UpdateBroadcaster,
    UpdateCallback,
)

logger = logging.getLogger(__name__)

Horizon = Literal["round", "encounter"]


class CombatTelemetry:
    """Service facade over tracking, history, and lifetime stats.

    Parameters
    ----------
    resolver:
        Host identity resolver.
    settings:
        Engine settings.
    storage:
        Persistence for history and lifetime records; in-memory by default.
    timer, sink, clock, rng:
        Passed through to :class:`RoundLifecycleController`.
    """

    def __init__(
        self,
        resolver: IdentityResolver,
        *,
        settings: TelemetrySettings | None = None,
        storage: Storage | None = None,
        timer: TurnTimer | None = None,
        sink: NotificationSink | None = None,
        clock: Clock | None = None,
        rng: TelemetryRNG | None = None,
    ) -> None:
        self.settings = settings or TelemetrySettings()
        self.storage: Storage = storage if storage is not None else InMemoryStorage()
        self.broadcaster = UpdateBroadcaster()
        self.ledger = LifetimeLedger(self.storage, self.settings.hit_log_capacity)
        self._history = HistoryStore(
            self.storage, self.settings.history_capacity, on_evict=self._fold_evicted
        )
        self.controller = RoundLifecycleController(
            resolver,
            settings=self.settings,
            timer=timer,
            sink=sink,
            clock=clock,
            rng=rng,
            on_combat_summary=self._record_summary,
            broadcaster=self.broadcaster,
        )

    # -- host events ---------------------------------------------------------

    async def on_combat_start(self, event: CombatStart) -> None:
        await self.controller.on_combat_start(event)

    async def on_combat_update(self, update: CombatUpdate) -> None:
        await self.controller.on_combat_update(update)

    async def on_combat_end(self, combat_id: str, *, deleted: bool = False) -> None:
        await self.controller.on_combat_end(combat_id, deleted=deleted)

    async def on_attack_roll(self, roll: AttackRoll) -> None:
        await self.controller.on_attack_roll(roll)

    async def on_damage_roll(self, roll: DamageRoll) -> None:
        await self.controller.on_damage_roll(roll)

    # -- live queries --------------------------------------------------------

    def current_round_stats(self) -> list[ParticipantStats]:
        session = self.controller.session
        return session.stats.round_participants() if session else []

    def participant_stats(
        self, participant_id: str, horizon: Horizon = "round"
    ) -> ParticipantStats | None:
        session = self.controller.session
        if session is None:
            return None
        if horizon == "round":
            return session.stats.round_stats(participant_id)
        return session.stats.encounter_stats(participant_id)

    def notable_moments(self) -> NotableMoments | None:
        session = self.controller.session
        return session.moments.snapshot() if session else None

    def round_summary(self, round: int | None = None) -> RoundSummary | None:
        session = self.controller.session
        return session.round_summary(round) if session else None

    # -- history -------------------------------------------------------------

    def history(self, limit: int | None = None) -> list[CombatSummary]:
        return self._history.list(limit)

    def latest_summary(self) -> CombatSummary | None:
        return self._history.latest

    def remove_summary(self, combat_id: str) -> bool:
        """Delete a summary and retract it from lifetime stats."""
        removed = self._history.remove(combat_id)
        if removed is None:
            return False
        affected = self.ledger.retract_combat(combat_id)
        logger.info("Removed combat %s (%d lifetime record(s) updated)", combat_id, len(affected))
        self.broadcaster.notify(TelemetryUpdate(kind="history_remove", combat_id=combat_id))
        return True

    # -- lifetime ------------------------------------------------------------

    def lifetime_stats(self, participant_id: str) -> PlayerLifetimeStats | None:
        return self.ledger.stats(participant_id)

    def all_lifetime_stats(self) -> list[PlayerLifetimeStats]:
        return self.ledger.all_stats()

    def leaderboard(self) -> list[LeaderboardEntry]:
        return build_leaderboard(self.ledger.all_stats())

    def stat_leaderboard(self, field: str) -> list[LeaderboardEntry]:
        return build_stat_leaderboard(self.ledger.all_stats(), field)

    # -- import / export -----------------------------------------------------

    def import_payload(self, payload: Any) -> ImportReport:
        """Merge an export document.  Raises ``MalformedImportError``."""
        ledger = self.ledger if self.settings.track_player_stats else None
        report = merge_import(payload, self._history, ledger)
        self.broadcaster.notify(TelemetryUpdate(kind="import"))
        return report

    def export_payload(self) -> dict[str, Any]:
        return export_payload(self._history, self.ledger)

    # -- subscriptions -------------------------------------------------------

    def subscribe(self, callback: UpdateCallback) -> str:
        return self.broadcaster.subscribe(callback)

    def unsubscribe(self, subscription_id: str) -> bool:
        return self.broadcaster.unsubscribe(subscription_id)

    @staticmethod
    def format_time(ms: int | float | None) -> str:
        return format_duration(ms)

    # -- wiring --------------------------------------------------------------

    def _record_summary(self, summary: CombatSummary) -> None:
        kept = self._history.record(summary)
        if kept and self.settings.track_player_stats:
            self.ledger.record_summary(summary)

    def _fold_evicted(self, summary: CombatSummary) -> None:
        self.ledger.fold_combat(summary.combat_id)
