"""Record-holder slots updated as events arrive.

All comparisons are strict, so on an exact tie the first event to reach a
value keeps the record.
"""

from __future__ import annotations

from combat_telemetry.models.events import Participant
from combat_telemetry.models.moments import NotableMoment, NotableMoments


def _moment(
    actor: Participant,
    target: Participant | None,
    round: int,
    turn: int,
    amount: int = 0,
    duration_ms: int = 0,
    is_critical: bool = False,
) -> NotableMoment:
    return NotableMoment(
        amount=amount,
        duration_ms=duration_ms,
        actor_id=actor.id,
        actor_name=actor.name,
        target_id=target.id if target else None,
        target_name=target.name if target else None,
        is_critical=is_critical,
        round=round,
        turn=turn,
    )


class NotableMomentsTracker:
    def __init__(self) -> None:
        self.moments = NotableMoments()

    def observe_hit(
        self,
        attacker: Participant,
        target: Participant | None,
        amount: int,
        round: int,
        turn: int,
        is_critical: bool = False,
    ) -> None:
        """Update the biggest and weakest single-hit slots."""
        current = self.moments
        if amount > current.biggest_hit.amount:
            current.biggest_hit = _moment(
                attacker, target, round, turn, amount=amount, is_critical=is_critical
            )
        weakest = current.weakest_hit.amount
        if amount > 0 and (weakest == 0 or amount < weakest):
            current.weakest_hit = _moment(
                attacker, target, round, turn, amount=amount, is_critical=is_critical
            )

    def observe_damage_dealt(
        self, attacker: Participant, total_dealt: int, round: int, turn: int
    ) -> None:
        """*total_dealt* is the attacker's running damage for the round."""
        if total_dealt > self.moments.most_damage.amount:
            self.moments.most_damage = _moment(attacker, None, round, turn, amount=total_dealt)

    def observe_damage_taken(
        self, target: Participant, total_taken: int, round: int, turn: int
    ) -> None:
        """*total_taken* is the target's running damage taken for the round."""
        if total_taken > self.moments.most_hurt.amount:
            self.moments.most_hurt = _moment(target, None, round, turn, amount=total_taken)

    def observe_heal(
        self,
        healer: Participant,
        target: Participant | None,
        amount: int,
        round: int,
        turn: int,
    ) -> None:
        if amount > self.moments.biggest_heal.amount:
            self.moments.biggest_heal = _moment(healer, target, round, turn, amount=amount)

    def observe_turn(
        self, participant: Participant, duration_ms: int, round: int, turn: int
    ) -> None:
        if duration_ms > self.moments.longest_turn.duration_ms:
            self.moments.longest_turn = _moment(
                participant, None, round, turn, duration_ms=duration_ms
            )

    @property
    def has_moments(self) -> bool:
        return self.moments.has_moments

    def snapshot(self) -> NotableMoments:
        return self.moments.model_copy(deep=True)

    def reset(self) -> None:
        self.moments = NotableMoments()
