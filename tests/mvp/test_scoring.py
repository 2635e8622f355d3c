"""Tests for MVP scoring and selection."""

from __future__ import annotations

from combat_telemetry.core.rng import TelemetryRNG
from combat_telemetry.models.stats import ParticipantStats
from combat_telemetry.models.summary import MvpPattern
from combat_telemetry.mvp.descriptions import DescriptionGenerator
from combat_telemetry.mvp.scoring import (
    compute_mvp_score,
    rank_candidates,
    score_participant,
    select_mvp,
)


def _make_stats(
    pid: str,
    hits: int = 0,
    misses: int = 0,
    crits: int = 0,
    fumbles: int = 0,
    damage: int = 0,
    healing: int = 0,
) -> ParticipantStats:
    stats = ParticipantStats(participant_id=pid, name=pid.title(), is_player=True)
    stats.attacks.hits = hits
    stats.attacks.misses = misses
    stats.attacks.attempts = hits + misses
    stats.attacks.crits = crits
    stats.attacks.fumbles = fumbles
    stats.damage.dealt = damage
    stats.healing.given = healing
    return stats


def _generator() -> DescriptionGenerator:
    return DescriptionGenerator(TelemetryRNG(3))


class TestComputeScore:
    def test_formula(self):
        assert compute_mvp_score(hits=2, crits=0, fumbles=0, damage=28, healing=0) == 6.8
        assert compute_mvp_score(hits=1, crits=1, fumbles=0, damage=25, healing=0) == 7.5

    def test_healing_and_fumbles(self):
        assert compute_mvp_score(hits=0, crits=0, fumbles=1, damage=0, healing=15) == 1.0

    def test_idle_participant_scores_zero(self):
        assert score_participant(_make_stats("idle")) == 0


class TestRankCandidates:
    def test_excludes_non_positive_scores(self):
        ranked = rank_candidates(
            [_make_stats("idle"), _make_stats("clumsy", misses=1, fumbles=1)]
        )
        assert ranked == []

    def test_sorted_by_score(self):
        ranked = rank_candidates([_make_stats("a", hits=1), _make_stats("b", hits=3)])
        assert [c.participant_id for c in ranked] == ["b", "a"]

    def test_tie_goes_to_first_recorded(self):
        ranked = rank_candidates(
            [_make_stats("first", hits=2), _make_stats("second", hits=2)]
        )
        assert ranked[0].participant_id == "first"
        assert ranked[0].score == ranked[1].score


class TestSelectMvp:
    def test_worked_example(self):
        a = _make_stats("a", hits=2, damage=28)
        b = _make_stats("b", hits=1, crits=1, damage=25)
        result = select_mvp([a, b], _generator())

        assert result.mvp is not None
        assert result.mvp.participant_id == "b"
        assert result.mvp.score == 7.5
        assert result.rankings[1].score == 6.8
        # 1/1 hits with a crit, but fewer than 2 hits: not Combat Excellence
        assert result.mvp.pattern == MvpPattern.DAMAGE
        assert result.mvp.description
        assert result.no_mvp_description is None

    def test_no_candidate_gives_no_mvp_text(self):
        result = select_mvp([_make_stats("idle")], _generator())
        assert result.mvp is None
        assert result.rankings == []
        assert result.no_mvp_description

    def test_only_winner_gets_description(self):
        result = select_mvp(
            [_make_stats("a", hits=3, damage=10), _make_stats("b", hits=1)], _generator()
        )
        assert result.rankings[0].description
        assert result.rankings[1].description == ""
