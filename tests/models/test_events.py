"""Tests for attack-roll classification."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from combat_telemetry.models.events import AttackRoll, DamageRoll


def _make_roll(total: int, dice: list[int], **kwargs) -> AttackRoll:
    return AttackRoll(combat_id="c1", participant="alice", roll_total=total, dice_results=dice, **kwargs)


class TestAttackOutcome:
    def test_hit_at_threshold(self):
        outcome = _make_roll(10, [7]).outcome(default_threshold=10)
        assert outcome.is_hit
        assert not outcome.is_critical
        assert not outcome.is_fumble

    def test_miss_below_threshold(self):
        assert not _make_roll(9, [6]).outcome(default_threshold=10).is_hit

    def test_target_value_overrides_default(self):
        roll = _make_roll(14, [11], target_value=15)
        assert not roll.outcome(default_threshold=10).is_hit

    def test_natural_twenty_is_critical_hit(self):
        outcome = _make_roll(5, [20], target_value=30).outcome()
        assert outcome.is_critical
        assert outcome.is_hit

    def test_explicit_critical_flag(self):
        outcome = _make_roll(22, [19], is_critical=True).outcome()
        assert outcome.is_critical and outcome.is_hit

    def test_single_natural_one_is_fumble_and_miss(self):
        outcome = _make_roll(25, [1]).outcome()
        assert outcome.is_fumble
        assert not outcome.is_hit

    def test_one_among_several_dice_is_not_fumble(self):
        outcome = _make_roll(18, [1, 15]).outcome()
        assert not outcome.is_fumble
        assert outcome.is_hit

    @pytest.mark.parametrize("dice", [[1], [20], [5], [1, 20], []])
    def test_fumble_and_hit_exclusive(self, dice):
        outcome = _make_roll(15, dice).outcome()
        assert not (outcome.is_fumble and outcome.is_hit)


class TestDamageRoll:
    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            DamageRoll(combat_id="c1", participant="alice", amount=-1)

    def test_critical_defaults_to_inherit(self):
        roll = DamageRoll(combat_id="c1", participant="alice", amount=4)
        assert roll.is_critical is None
        assert roll.targets == []
