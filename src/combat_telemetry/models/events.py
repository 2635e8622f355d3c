"""Host notifications consumed by the telemetry engine.

The host delivers lifecycle updates (round/turn progression), attack rolls,
and damage/heal rolls.  Participants are referenced by opaque strings that
an :class:`~combat_telemetry.tracking.collaborators.IdentityResolver` turns
into :class:`Participant` records.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


class Participant(BaseModel):
    """A resolved, stable combat identity."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    is_player: bool = False
    """True for player-controlled participants (party members)."""


class CombatStart(BaseModel):
    """The host started tracking a combat."""

    combat_id: str
    round: int = 0
    turn: int = 0
    combatant: str | None = None
    """Reference of the participant whose turn is active, if any."""

    scene_name: str | None = None


class CombatUpdate(BaseModel):
    """A round and/or turn change reported by the host."""

    combat_id: str
    round: int
    turn: int
    previous_round: int | None = None
    previous_turn: int | None = None
    combatant: str | None = None
    """Reference of the participant whose turn starts with this update."""


@dataclass(frozen=True)
class AttackOutcome:
    """Classification of a single attack roll."""

    is_hit: bool
    is_critical: bool
    is_fumble: bool


class AttackRoll(BaseModel):
    """An attack roll made by *participant*."""

    combat_id: str
    participant: str
    roll_total: int
    dice_results: list[int] = Field(default_factory=list)
    """Natural results of the d20(s) rolled for this attack."""

    is_critical: bool = False
    """Explicit critical flag from the host (e.g. expanded crit range)."""

    target_value: int | None = None
    """Total needed to hit; ``None`` uses the configured default."""

    targets: list[str] = Field(default_factory=list)

    def outcome(self, default_threshold: int = 10) -> AttackOutcome:
        """Classify this roll as hit/miss, critical, and fumble.

        A fumble is exactly one die showing a natural 1 and is never a hit.
        A critical (natural 20 or explicit flag) always hits.
        """
        is_critical = self.is_critical or 20 in self.dice_results
        is_fumble = not is_critical and self.dice_results == [1]
        threshold = default_threshold if self.target_value is None else self.target_value
        is_hit = is_critical or (not is_fumble and self.roll_total >= threshold)
        return AttackOutcome(is_hit=is_hit, is_critical=is_critical, is_fumble=is_fumble)


class DamageRoll(BaseModel):
    """A damage or healing roll made by *participant*."""

    combat_id: str
    participant: str
    amount: int = Field(ge=0)
    is_healing: bool = False
    targets: list[str] = Field(default_factory=list)
    """Target references.  Empty healing targets mean self-healing."""

    is_critical: bool | None = None
    """``None`` inherits the critical state of the attacker's last attack."""

    source_name: str | None = None
    """Weapon or spell name, used for highlight records."""
