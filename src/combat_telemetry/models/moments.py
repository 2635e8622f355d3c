"""Notable-moment record slots for the current round."""

from __future__ import annotations

from pydantic import BaseModel, Field


class NotableMoment(BaseModel):
    """A record-holder slot.

    ``amount`` is used by damage/heal categories, ``duration_ms`` by the
    turn category; the other is left at 0.
    """

    amount: int = 0
    duration_ms: int = 0
    actor_id: str | None = None
    actor_name: str | None = None
    target_id: str | None = None
    target_name: str | None = None
    is_critical: bool = False
    round: int | None = None
    turn: int | None = None

    @property
    def is_set(self) -> bool:
        return self.amount > 0 or self.duration_ms > 0


class NotableMoments(BaseModel):
    """The six record slots tracked per round."""

    biggest_hit: NotableMoment = Field(default_factory=NotableMoment)
    weakest_hit: NotableMoment = Field(default_factory=NotableMoment)
    """Smallest non-zero single hit."""

    most_damage: NotableMoment = Field(default_factory=NotableMoment)
    """Highest cumulative damage dealt by one participant."""

    most_hurt: NotableMoment = Field(default_factory=NotableMoment)
    """Highest cumulative damage taken by one participant."""

    biggest_heal: NotableMoment = Field(default_factory=NotableMoment)
    longest_turn: NotableMoment = Field(default_factory=NotableMoment)

    @property
    def has_moments(self) -> bool:
        return any(
            moment.is_set
            for moment in (
                self.biggest_hit,
                self.weakest_hit,
                self.most_damage,
                self.most_hurt,
                self.biggest_heal,
                self.longest_turn,
            )
        )
