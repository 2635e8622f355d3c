"""Tests for NotableMomentsTracker comparators."""

from __future__ import annotations

import random

from combat_telemetry.tracking.moments import NotableMomentsTracker
from tests.conftest import ALICE, BORIN, GOBLIN


class TestHitRecords:
    def test_biggest_hit_strictly_greater(self):
        tracker = NotableMomentsTracker()
        tracker.observe_hit(ALICE, GOBLIN, 10, round=1, turn=0)
        tracker.observe_hit(BORIN, GOBLIN, 10, round=1, turn=1)
        moment = tracker.moments.biggest_hit
        assert moment.amount == 10
        assert moment.actor_id == "alice"
        assert moment.target_name == "Goblin"
        assert moment.turn == 0

    def test_biggest_hit_monotonic(self):
        tracker = NotableMomentsTracker()
        rng = random.Random(9)
        best = 0
        for _ in range(100):
            tracker.observe_hit(ALICE, GOBLIN, rng.randint(0, 30), round=1, turn=0)
            assert tracker.moments.biggest_hit.amount >= best
            best = tracker.moments.biggest_hit.amount

    def test_weakest_ignores_zero(self):
        tracker = NotableMomentsTracker()
        tracker.observe_hit(ALICE, GOBLIN, 0, round=1, turn=0)
        assert tracker.moments.weakest_hit.amount == 0
        tracker.observe_hit(ALICE, GOBLIN, 6, round=1, turn=0)
        tracker.observe_hit(BORIN, GOBLIN, 3, round=1, turn=1)
        tracker.observe_hit(ALICE, GOBLIN, 3, round=1, turn=2)
        assert tracker.moments.weakest_hit.amount == 3
        assert tracker.moments.weakest_hit.actor_id == "borin"

    def test_critical_flag_stamped(self):
        tracker = NotableMomentsTracker()
        tracker.observe_hit(ALICE, None, 14, round=2, turn=1, is_critical=True)
        assert tracker.moments.biggest_hit.is_critical
        assert tracker.moments.biggest_hit.target_id is None


class TestCumulativeRecords:
    def test_most_damage_uses_running_total(self):
        tracker = NotableMomentsTracker()
        tracker.observe_damage_dealt(ALICE, 8, round=1, turn=0)
        tracker.observe_damage_dealt(BORIN, 8, round=1, turn=1)
        assert tracker.moments.most_damage.actor_id == "alice"
        tracker.observe_damage_dealt(BORIN, 9, round=1, turn=1)
        assert tracker.moments.most_damage.actor_id == "borin"

    def test_most_hurt(self):
        tracker = NotableMomentsTracker()
        tracker.observe_damage_taken(GOBLIN, 12, round=1, turn=0)
        assert tracker.moments.most_hurt.actor_name == "Goblin"
        assert tracker.moments.most_hurt.amount == 12


class TestOtherRecords:
    def test_biggest_heal_and_longest_turn(self):
        tracker = NotableMomentsTracker()
        tracker.observe_heal(ALICE, BORIN, 7, round=1, turn=0)
        tracker.observe_heal(BORIN, ALICE, 7, round=1, turn=1)
        tracker.observe_turn(ALICE, 5000, round=1, turn=0)
        tracker.observe_turn(BORIN, 4000, round=1, turn=1)
        assert tracker.moments.biggest_heal.actor_id == "alice"
        assert tracker.moments.longest_turn.duration_ms == 5000

    def test_reset_clears_all(self):
        tracker = NotableMomentsTracker()
        tracker.observe_hit(ALICE, GOBLIN, 5, round=1, turn=0)
        assert tracker.has_moments
        tracker.reset()
        assert not tracker.has_moments
        assert tracker.moments.biggest_hit.amount == 0

    def test_snapshot_is_independent(self):
        tracker = NotableMomentsTracker()
        tracker.observe_hit(ALICE, GOBLIN, 5, round=1, turn=0)
        snap = tracker.snapshot()
        tracker.observe_hit(ALICE, GOBLIN, 50, round=1, turn=0)
        assert snap.biggest_hit.amount == 5
