"""Tests for ParticipantStatsStore."""

from __future__ import annotations

import random

from combat_telemetry.models.events import AttackOutcome, Participant
from combat_telemetry.models.stats import AttackLogEntry
from combat_telemetry.tracking.stats_store import ParticipantStatsStore
from tests.conftest import ALICE, BORIN, GOBLIN


def _make_entry(actor: Participant, hit: bool, crit: bool = False, fumble: bool = False) -> AttackLogEntry:
    return AttackLogEntry(
        actor_id=actor.id,
        actor_name=actor.name,
        roll_total=15,
        is_hit=hit,
        is_critical=crit,
        is_fumble=fumble,
        round=1,
        turn=0,
        timestamp_ms=0,
    )


def _attack(store: ParticipantStatsStore, actor: Participant, hit: bool, crit=False, fumble=False):
    store.record_attack(
        actor,
        AttackOutcome(is_hit=hit, is_critical=crit, is_fumble=fumble),
        _make_entry(actor, hit, crit, fumble),
    )


class TestRecordAttack:
    def test_lazy_creation(self):
        store = ParticipantStatsStore()
        assert store.round_stats("alice") is None
        _attack(store, ALICE, hit=True)
        assert store.round_stats("alice").attacks.hits == 1
        assert store.encounter_stats("alice").attacks.hits == 1

    def test_attempts_equal_hits_plus_misses(self):
        store = ParticipantStatsStore()
        rng = random.Random(5)
        for _ in range(200):
            actor = rng.choice([ALICE, BORIN, GOBLIN])
            hit = rng.random() < 0.6
            _attack(store, actor, hit=hit, crit=hit and rng.random() < 0.1,
                    fumble=not hit and rng.random() < 0.1)
            for stats in store.round_participants() + store.encounter_participants():
                a = stats.attacks
                assert a.attempts == a.hits + a.misses

    def test_crit_and_fumble_counters(self):
        store = ParticipantStatsStore()
        _attack(store, ALICE, hit=True, crit=True)
        _attack(store, ALICE, hit=False, fumble=True)
        attacks = store.round_stats("alice").attacks
        assert attacks.crits == 1
        assert attacks.fumbles == 1
        assert attacks.misses == 1

    def test_hit_and_miss_logs(self):
        store = ParticipantStatsStore(log_capacity=2)
        for _ in range(5):
            _attack(store, ALICE, hit=True)
        _attack(store, ALICE, hit=False)
        stats = store.round_stats("alice")
        assert len(stats.hits) == 2
        assert len(stats.misses) == 1

    def test_party_counts_players_only(self):
        store = ParticipantStatsStore()
        _attack(store, ALICE, hit=True)
        _attack(store, GOBLIN, hit=True)
        _attack(store, BORIN, hit=False)
        assert store.party.hits == 1
        assert store.party.misses == 1


class TestRecordDamage:
    def test_dealt_and_taken(self):
        store = ParticipantStatsStore()
        store.record_damage(ALICE, 8, [GOBLIN])
        store.record_damage(GOBLIN, 3, [ALICE, BORIN])
        assert store.round_stats("alice").damage.dealt == 8
        assert store.round_stats("goblin").damage.taken == 8
        assert store.round_stats("alice").damage.taken == 3
        assert store.round_stats("borin").damage.taken == 3
        assert store.party.damage_dealt == 8
        assert store.party.damage_taken == 6

    def test_biggest_and_weakest_hit(self):
        store = ParticipantStatsStore()
        for amount in (5, 0, 12, 2):
            store.record_damage(ALICE, amount, [GOBLIN])
        stats = store.encounter_stats("alice")
        assert stats.biggest_hit == 12
        assert stats.weakest_hit == 2

    def test_top_hits(self):
        store = ParticipantStatsStore(top_n=2)
        for amount in (5, 9, 7, 0):
            store.record_damage(ALICE, amount, [GOBLIN], round=1)
        assert [h.amount for h in store.top_hits] == [9, 7]
        assert store.top_hits.to_list()[0].target_name == "Goblin"


class TestRecordHeal:
    def test_untargeted_heal_is_self_heal(self):
        store = ParticipantStatsStore()
        store.record_heal(ALICE, 6, [])
        stats = store.round_stats("alice")
        assert stats.healing.given == 6
        assert stats.healing.received == 6
        assert store.party.healing_done == 6

    def test_targeted_heal(self):
        store = ParticipantStatsStore()
        store.record_heal(ALICE, 4, [BORIN])
        assert store.round_stats("borin").healing.received == 4
        assert store.round_stats("alice").healing.received == 0
        assert store.top_heals.to_list()[0].target_id == "borin"


class TestRecordTurn:
    def test_turn_bookkeeping(self):
        store = ParticipantStatsStore()
        store.record_turn(ALICE, 4000, expired=False)
        store.record_turn(ALICE, 1000, expired=True)
        stats = store.encounter_stats("alice")
        assert stats.turn_duration_ms == 1000
        assert stats.last_turn_expired
        assert stats.turn_total_ms == 5000
        assert stats.fastest_turn_ms == 1000
        assert stats.slowest_turn_ms == 4000
        assert store.party.average_turn_ms == 2500

    def test_npc_turns_not_in_party(self):
        store = ParticipantStatsStore()
        store.record_turn(GOBLIN, 4000, expired=False)
        assert store.party.turn_times == {}


class TestReset:
    def test_reset_round_keeps_encounter(self):
        store = ParticipantStatsStore()
        _attack(store, ALICE, hit=True)
        store.record_damage(ALICE, 5, [GOBLIN])
        store.reset_round()
        assert store.round_stats("alice") is None
        assert store.party.hits == 0
        assert store.encounter_stats("alice").attacks.hits == 1
        assert len(store.top_hits) == 1

    def test_reset_encounter(self):
        store = ParticipantStatsStore()
        store.record_damage(ALICE, 5, [GOBLIN])
        store.reset_encounter()
        assert store.encounter_participants() == []
        assert len(store.top_hits) == 0
