"""Round/turn lifecycle state machine and the round-end pipeline.

The controller diffs each host update against the last processed
``(round, turn)`` pair:

- round increased: run the round-end pipeline for the previous round (if
  one was active), then start the new round;
- same round, different turn: close the previous participant's turn,
  unless the update names a ``previous_turn`` other than the current one;
- anything else: duplicate or out-of-order, ignored.

Handlers are coroutines.  Identity lookups are suspension points, so every
handler captures its session and round token before awaiting and checks
them again before writing.  Combat deletion flags the session first, which
makes an in-flight pipeline stop at its next guard.
"""

from __future__ import annotations

import logging
from typing import Callable

from combat_telemetry.config import TelemetrySettings
from combat_telemetry.core.clock import Clock, SystemClock
from combat_telemetry.core.rng import TelemetryRNG
from combat_telemetry.models.events import (
    AttackRoll,
    CombatStart,
    CombatUpdate,
    DamageRoll,
    Participant,
)
from combat_telemetry.models.stats import AttackLogEntry
from combat_telemetry.models.summary import CombatSummary, ExpiredTurn, RoundSummary
from combat_telemetry.mvp.descriptions import DescriptionGenerator
from combat_telemetry.mvp.scoring import select_mvp
from combat_telemetry.tracking.collaborators import (
    IdentityResolver,
    LoggingSink,
    NotificationSink,
    TurnTimer,
)
from combat_telemetry.tracking.session import CombatSession
from combat_telemetry.tracking.subscriptions import TelemetryUpdate, UpdateBroadcaster
from combat_telemetry.tracking.summaries import (
    build_combat_summary,
    build_round_record,
    build_round_summary,
)
from combat_telemetry.tracking.timing import turn_duration_ms

logger = logging.getLogger(__name__)

SummaryCallback = Callable[[CombatSummary], None]


class RoundLifecycleController:
    """Drive one :class:`CombatSession` from host notifications.

    Parameters
    ----------
    resolver:
        Turns participant references into :class:`Participant` records.
    settings:
        Engine settings; defaults are used when omitted.
    timer:
        Host turn timer.  Without one, turn durations fall back to
        wall-clock time capped at the configured allotment.
    sink:
        Receives round and final combat summaries.
    clock:
        Millisecond clock; injectable for tests.
    rng:
        Seeds description template choices.
    on_combat_summary:
        Called with the running encounter snapshot after every round and
        with the final snapshot at combat end.
    broadcaster:
        Notified after every state mutation.
    """

    def __init__(
        self,
        resolver: IdentityResolver,
        *,
        settings: TelemetrySettings | None = None,
        timer: TurnTimer | None = None,
        sink: NotificationSink | None = None,
        clock: Clock | None = None,
        rng: TelemetryRNG | None = None,
        on_combat_summary: SummaryCallback | None = None,
        broadcaster: UpdateBroadcaster | None = None,
    ) -> None:
        self._resolver = resolver
        self._settings = settings or TelemetrySettings()
        self._timer = timer
        self._sink: NotificationSink = sink or LoggingSink()
        self._clock: Clock = clock or SystemClock()
        rng = rng or TelemetryRNG()
        self._round_descriptions = DescriptionGenerator(rng.fork("round"))
        self._encounter_descriptions = DescriptionGenerator(rng.fork("encounter"))
        self._on_combat_summary = on_combat_summary
        self._broadcaster = broadcaster
        self._session: CombatSession | None = None

    @property
    def session(self) -> CombatSession | None:
        return self._session

    # -- lifecycle handlers --------------------------------------------------

    async def on_combat_start(self, event: CombatStart) -> None:
        if not self._settings.track_combat_stats:
            return
        current = self._session
        if current is not None:
            if current.combat_id == event.combat_id:
                logger.debug("Duplicate start for combat %s ignored", event.combat_id)
                return
            logger.info(
                "Combat %s started while %s was active; ending the old one",
                event.combat_id, current.combat_id,
            )
            await self.on_combat_end(current.combat_id)

        session = CombatSession.create(
            event.combat_id, self._clock.now_ms(), self._settings, scene_name=event.scene_name
        )
        self._session = session
        logger.info("Tracking combat %s", event.combat_id)

        if event.round >= 1:
            async with session.lock:
                session.start_round(event.round, event.turn, self._clock.now_ms())
                await self._begin_turn(session, event.combatant)
        self._notify("combat_start", session)

    async def on_combat_update(self, update: CombatUpdate) -> None:
        session = self._active_session(update.combat_id, "update")
        if session is None:
            return

        async with session.lock:
            if not self._is_current(session):
                logger.debug("Combat %s ended before update was processed", update.combat_id)
                return

            if update.round > session.round:
                if session.round_started:
                    completed = await self._run_round_end(session)
                    if not completed:
                        return
                session.start_round(update.round, update.turn, self._clock.now_ms())
                logger.debug("Combat %s entered round %d", session.combat_id, update.round)
            elif update.round == session.round and update.turn != session.turn:
                if update.previous_turn is not None and update.previous_turn != session.turn:
                    logger.debug(
                        "Ignoring stale turn change %s->%d for combat %s (at turn=%d)",
                        update.previous_turn, update.turn, update.combat_id, session.turn,
                    )
                    return
                self._close_turn(session)
                session.turn = update.turn
            else:
                logger.debug(
                    "Ignoring update round=%d turn=%d for combat %s (at round=%d turn=%d)",
                    update.round, update.turn, update.combat_id, session.round, session.turn,
                )
                return

            await self._begin_turn(session, update.combatant)
        self._notify("turn", session)

    async def on_combat_end(self, combat_id: str, *, deleted: bool = False) -> None:
        """Flush the final encounter summary and tear the session down.

        With ``deleted=True`` the session is flagged before waiting for the
        lock, so a round-end pipeline in flight aborts instead of finishing.
        """
        session = self._session
        if session is None or session.combat_id != combat_id:
            logger.debug("End for unknown combat %s ignored", combat_id)
            return
        if deleted:
            session.deleted = True

        async with session.lock:
            if self._session is not session:
                logger.debug("Combat %s already torn down", combat_id)
                return
            if session.round_started:
                self._close_turn(session)
                summary = build_combat_summary(
                    session, self._encounter_descriptions, self._clock.now_ms(), finished=True
                )
                self._emit_combat_summary(summary)
                await self._publish_combat(summary)

            session.deleted = True
            session.stats.reset_encounter()
            self._session = None
        logger.info("Stopped tracking combat %s (deleted=%s)", combat_id, deleted)
        self._notify("combat_end", session)

    # -- roll handlers -------------------------------------------------------

    async def on_attack_roll(self, roll: AttackRoll) -> None:
        session = self._active_session(roll.combat_id, "attack roll")
        if session is None:
            return
        token = session.round_token

        participant = await self._resolve(roll.participant)
        if participant is None or not self._still_valid(session, token, "attack roll"):
            return

        outcome = roll.outcome(self._settings.default_hit_threshold)
        entry = AttackLogEntry(
            actor_id=participant.id,
            actor_name=participant.name,
            roll_total=roll.roll_total,
            is_hit=outcome.is_hit,
            is_critical=outcome.is_critical,
            is_fumble=outcome.is_fumble,
            round=session.round,
            turn=session.turn,
            timestamp_ms=self._clock.now_ms(),
        )
        session.stats.record_attack(participant, outcome, entry)
        session.last_attack_critical[participant.id] = outcome.is_hit and outcome.is_critical
        logger.debug(
            "%s attack total=%d hit=%s crit=%s fumble=%s",
            participant.name, roll.roll_total, outcome.is_hit, outcome.is_critical,
            outcome.is_fumble,
        )
        self._notify("attack", session)

    async def on_damage_roll(self, roll: DamageRoll) -> None:
        session = self._active_session(roll.combat_id, "damage roll")
        if session is None:
            return
        token = session.round_token

        participant = await self._resolve(roll.participant)
        if participant is None:
            return
        targets: list[Participant] = []
        for ref in roll.targets:
            target = await self._resolve(ref)
            if target is not None:
                targets.append(target)
        if not self._still_valid(session, token, "damage roll"):
            return

        if roll.is_healing:
            self._record_heal(session, participant, targets, roll)
        else:
            self._record_damage(session, participant, targets, roll)
        self._notify("heal" if roll.is_healing else "damage", session)

    # -- timer hooks ---------------------------------------------------------

    def record_planning_start(self) -> None:
        session = self._timer_session()
        if session is not None:
            session.in_planning = True
            session.planning.start(self._clock.now_ms())

    def record_planning_end(self) -> None:
        session = self._timer_session()
        if session is not None:
            session.planning.pause(self._clock.now_ms())
            session.in_planning = False

    def record_timer_pause(self) -> None:
        session = self._timer_session()
        if session is not None and session.in_planning:
            session.planning.pause(self._clock.now_ms())

    def record_timer_unpause(self) -> None:
        session = self._timer_session()
        if session is not None and session.in_planning:
            session.planning.unpause(self._clock.now_ms())

    def record_timer_expired(self, planning: bool = False) -> None:
        """Mark the planning phase or the current turn as expired."""
        session = self._timer_session()
        if session is None:
            return
        if planning:
            session.planning.pause(self._clock.now_ms())
            session.in_planning = False
        else:
            session.turn_expired = True

    # -- round-end pipeline --------------------------------------------------

    async def _run_round_end(self, session: CombatSession) -> bool:
        """Close out ``session.round``.  Returns ``False`` if aborted."""
        now = self._clock.now_ms()

        self._close_turn(session)
        players = [s for s in session.stats.round_participants() if s.is_player]
        result = select_mvp(players, self._round_descriptions)
        summary = build_round_summary(
            session,
            result,
            duration_actual_ms=max(0, now - session.round_start_ms),
            planning_ms=session.planning.elapsed(now),
            turn_allotment_ms=int(round(self._allotted_seconds() * 1000)),
        )
        session.round_summaries.append(summary)

        await self._publish_round(summary)
        if not self._is_current(session):
            logger.debug(
                "Combat %s went away during round %d end; aborting",
                session.combat_id, summary.round,
            )
            return False

        session.round_log.append(build_round_record(summary))
        self._emit_combat_summary(
            build_combat_summary(session, self._encounter_descriptions, self._clock.now_ms())
        )
        session.reset_round_state()
        logger.info(
            "Round %d of combat %s complete (mvp=%s)",
            summary.round, session.combat_id, summary.mvp.name if summary.mvp else None,
        )
        self._notify("round_end", session)
        return True

    def _close_turn(self, session: CombatSession) -> None:
        combatant = session.current_combatant
        if combatant is None:
            return
        now = self._clock.now_ms()
        remaining = self._timer.remaining_seconds if self._timer is not None else None
        expired = session.turn_expired or (self._timer is not None and self._timer.expired)
        duration, expired = turn_duration_ms(
            self._allotted_seconds(), remaining, expired, now - session.turn_start_ms
        )

        session.stats.record_turn(combatant, duration, expired)
        session.moments.observe_turn(combatant, duration, session.round, session.turn)
        if expired:
            session.expired_turns.append(
                ExpiredTurn(
                    participant_id=combatant.id,
                    name=combatant.name,
                    round=session.round,
                    turn=session.turn,
                    duration_ms=duration,
                )
            )
        session.current_combatant = None
        session.turn_expired = False

    async def _begin_turn(self, session: CombatSession, ref: str | None) -> None:
        if ref is None:
            return
        token = session.round_token
        combatant = await self._resolve(ref)
        if combatant is None or not self._still_valid(session, token, "turn start"):
            return
        session.current_combatant = combatant
        session.turn_start_ms = self._clock.now_ms()
        session.turn_expired = False

    # -- recording helpers ---------------------------------------------------

    def _record_damage(
        self,
        session: CombatSession,
        attacker: Participant,
        targets: list[Participant],
        roll: DamageRoll,
    ) -> None:
        if roll.is_critical is None:
            is_critical = session.last_attack_critical.get(attacker.id, False)
        else:
            is_critical = roll.is_critical
        session.stats.record_damage(
            attacker,
            roll.amount,
            targets,
            is_critical=is_critical,
            source_name=roll.source_name,
            round=session.round,
        )

        moments = session.moments
        for target in targets or [None]:
            moments.observe_hit(
                attacker, target, roll.amount, session.round, session.turn, is_critical
            )
        dealt = session.stats.round_stats(attacker.id).damage.dealt
        moments.observe_damage_dealt(attacker, dealt, session.round, session.turn)
        for target in targets:
            taken = session.stats.round_stats(target.id).damage.taken
            moments.observe_damage_taken(target, taken, session.round, session.turn)

    def _record_heal(
        self,
        session: CombatSession,
        healer: Participant,
        targets: list[Participant],
        roll: DamageRoll,
    ) -> None:
        session.stats.record_heal(
            healer, roll.amount, targets, source_name=roll.source_name, round=session.round
        )
        for target in targets or [healer]:
            session.moments.observe_heal(
                healer, target, roll.amount, session.round, session.turn
            )

    # -- collaborators -------------------------------------------------------

    async def _resolve(self, ref: str) -> Participant | None:
        try:
            participant = await self._resolver.resolve(ref)
        except Exception:
            logger.warning("Identity lookup for %r failed", ref, exc_info=True)
            return None
        if participant is None:
            logger.warning("Could not resolve participant %r; skipping", ref)
        return participant

    async def _publish_round(self, summary: RoundSummary) -> None:
        try:
            await self._sink.publish_round_summary(summary)
        except Exception:
            logger.warning(
                "Sink rejected round %d summary of combat %s",
                summary.round, summary.combat_id, exc_info=True,
            )

    async def _publish_combat(self, summary: CombatSummary) -> None:
        try:
            await self._sink.publish_combat_summary(summary)
        except Exception:
            logger.warning(
                "Sink rejected final summary of combat %s", summary.combat_id, exc_info=True
            )

    def _emit_combat_summary(self, summary: CombatSummary) -> None:
        if self._on_combat_summary is not None:
            self._on_combat_summary(summary)

    def _notify(self, kind: str, session: CombatSession) -> None:
        if self._broadcaster is not None:
            self._broadcaster.notify(
                TelemetryUpdate(kind=kind, combat_id=session.combat_id, round=session.round)
            )

    def _allotted_seconds(self) -> float:
        if self._timer is not None and self._timer.allotted_seconds:
            return self._timer.allotted_seconds
        return self._settings.turn_time_allotment_s

    # -- guards --------------------------------------------------------------

    def _is_current(self, session: CombatSession) -> bool:
        return self._session is session and not session.deleted

    def _active_session(self, combat_id: str, what: str) -> CombatSession | None:
        if not self._settings.track_combat_stats:
            return None
        session = self._session
        if session is None or session.combat_id != combat_id or session.deleted:
            logger.debug("Dropping %s for inactive combat %s", what, combat_id)
            return None
        return session

    def _still_valid(self, session: CombatSession, token: int, what: str) -> bool:
        if not self._is_current(session):
            logger.debug("Combat %s ended during %s; skipping", session.combat_id, what)
            return False
        if session.round_token != token:
            logger.debug(
                "Round changed during %s for combat %s; skipping", what, session.combat_id
            )
            return False
        return True

    def _timer_session(self) -> CombatSession | None:
        session = self._session
        if session is None or session.deleted:
            logger.debug("Timer event with no active combat ignored")
            return None
        return session
