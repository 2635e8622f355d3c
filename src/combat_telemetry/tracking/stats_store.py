"""Per-participant counters for the current round and encounter.

Every recording operation updates both horizons.  The round horizon and
the party aggregate are cleared by :meth:`ParticipantStatsStore.reset_round`;
the encounter horizon survives until :meth:`reset_encounter`.
"""

from __future__ import annotations

import logging

from combat_telemetry.core.bounded import TopN
from combat_telemetry.models.events import AttackOutcome, Participant
from combat_telemetry.models.stats import AttackLogEntry, ParticipantStats, PartyAggregate
from combat_telemetry.models.summary import HealHighlight, HitHighlight

logger = logging.getLogger(__name__)


class ParticipantStatsStore:
    """Lazily created :class:`ParticipantStats` keyed by participant id.

    Parameters
    ----------
    log_capacity:
        Capacity of each participant's hit and miss logs.
    top_n:
        Length of the encounter top-hits and top-heals lists.
    """

    def __init__(self, log_capacity: int = 1000, top_n: int = 5) -> None:
        self._log_capacity = log_capacity
        self._round: dict[str, ParticipantStats] = {}
        self._encounter: dict[str, ParticipantStats] = {}
        self.party = PartyAggregate()
        self.top_hits: TopN[HitHighlight] = TopN(top_n, key=lambda h: h.amount)
        self.top_heals: TopN[HealHighlight] = TopN(top_n, key=lambda h: h.amount)

    # -- queries -------------------------------------------------------------

    def round_stats(self, participant_id: str) -> ParticipantStats | None:
        return self._round.get(participant_id)

    def encounter_stats(self, participant_id: str) -> ParticipantStats | None:
        return self._encounter.get(participant_id)

    def round_participants(self) -> list[ParticipantStats]:
        """Round stats in first-recorded order."""
        return list(self._round.values())

    def encounter_participants(self) -> list[ParticipantStats]:
        """Encounter stats in first-recorded order."""
        return list(self._encounter.values())

    # -- recording -----------------------------------------------------------

    def record_attack(
        self,
        participant: Participant,
        outcome: AttackOutcome,
        entry: AttackLogEntry,
    ) -> None:
        """Count one attack roll.  Criticals only count on hits."""
        for stats in self._both(participant):
            attacks = stats.attacks
            attacks.attempts += 1
            if outcome.is_hit:
                attacks.hits += 1
                stats.hits.append(entry)
                if outcome.is_critical:
                    attacks.crits += 1
            else:
                attacks.misses += 1
                stats.misses.append(entry)
            if outcome.is_fumble:
                attacks.fumbles += 1

        if participant.is_player:
            if outcome.is_hit:
                self.party.hits += 1
            else:
                self.party.misses += 1

    def record_damage(
        self,
        participant: Participant,
        amount: int,
        targets: list[Participant],
        *,
        is_critical: bool = False,
        source_name: str | None = None,
        round: int = 0,
    ) -> None:
        """Credit *amount* to *participant* and charge it to every target."""
        for stats in self._both(participant):
            stats.damage.dealt += amount
            if amount > 0:
                stats.biggest_hit = max(stats.biggest_hit, amount)
                if stats.weakest_hit == 0 or amount < stats.weakest_hit:
                    stats.weakest_hit = amount
        if participant.is_player:
            self.party.damage_dealt += amount

        for target in targets:
            for stats in self._both(target):
                stats.damage.taken += amount
            if target.is_player:
                self.party.damage_taken += amount

        if amount > 0:
            first = targets[0] if targets else None
            self.top_hits.offer(
                HitHighlight(
                    attacker_id=participant.id,
                    attacker_name=participant.name,
                    target_id=first.id if first else None,
                    target_name=first.name if first else None,
                    amount=amount,
                    is_critical=is_critical,
                    source_name=source_name,
                    round=round,
                )
            )

    def record_heal(
        self,
        participant: Participant,
        amount: int,
        targets: list[Participant],
        *,
        source_name: str | None = None,
        round: int = 0,
    ) -> None:
        """Credit healing; an empty *targets* list means self-healing."""
        recipients = targets or [participant]
        for stats in self._both(participant):
            stats.healing.given += amount
        if participant.is_player:
            self.party.healing_done += amount

        for target in recipients:
            for stats in self._both(target):
                stats.healing.received += amount

        if amount > 0:
            first = recipients[0]
            self.top_heals.offer(
                HealHighlight(
                    healer_id=participant.id,
                    healer_name=participant.name,
                    target_id=first.id,
                    target_name=first.name,
                    amount=amount,
                    source_name=source_name,
                    round=round,
                )
            )

    def record_turn(self, participant: Participant, duration_ms: int, expired: bool) -> None:
        for stats in self._both(participant):
            stats.turn_duration_ms = duration_ms
            stats.last_turn_expired = expired
            stats.turn_total_ms += duration_ms
            stats.turn_count += 1
            if stats.fastest_turn_ms is None or duration_ms < stats.fastest_turn_ms:
                stats.fastest_turn_ms = duration_ms
            if stats.slowest_turn_ms is None or duration_ms > stats.slowest_turn_ms:
                stats.slowest_turn_ms = duration_ms
        if participant.is_player:
            self.party.record_turn(participant.id, duration_ms)

    # -- lifecycle -----------------------------------------------------------

    def reset_round(self) -> None:
        self._round.clear()
        self.party = PartyAggregate()

    def reset_encounter(self) -> None:
        self.reset_round()
        self._encounter.clear()
        self.top_hits.clear()
        self.top_heals.clear()

    # -- internal ------------------------------------------------------------

    def _both(self, participant: Participant) -> tuple[ParticipantStats, ParticipantStats]:
        return (
            self._get(self._round, participant),
            self._get(self._encounter, participant),
        )

    def _get(
        self,
        horizon: dict[str, ParticipantStats],
        participant: Participant,
    ) -> ParticipantStats:
        stats = horizon.get(participant.id)
        if stats is None:
            stats = ParticipantStats(
                participant_id=participant.id,
                name=participant.name,
                is_player=participant.is_player,
                log_capacity=self._log_capacity,
            )
            horizon[participant.id] = stats
            logger.debug("Started tracking %s (%s)", participant.name, participant.id)
        return stats
