"""Tests for leaderboards and the text report."""

from __future__ import annotations

import pytest

from combat_telemetry.history.report import (
    build_leaderboard,
    build_stat_leaderboard,
    format_duration,
    generate_text_report,
)
from combat_telemetry.models.lifetime import MvpAggregate, PlayerLifetimeStats
from combat_telemetry.models.summary import CombatTotals
from tests.history.helpers import make_summary


def _stats(pid: str, name: str, score: float = 0.0, combats: int = 0, **kwargs):
    return PlayerLifetimeStats(
        participant_id=pid,
        name=name,
        mvp=MvpAggregate(total_score=score, combats=combats),
        **kwargs,
    )


class TestFormatDuration:
    @pytest.mark.parametrize(
        "ms, expected",
        [
            (None, "SKIPPED"),
            (0, "0s"),
            (4_400, "4s"),
            (65_000, "1m 5s"),
            (3_725_000, "1h 2m 5s"),
            (3_600_000, "1h 0m 0s"),
        ],
    )
    def test_formats(self, ms, expected):
        assert format_duration(ms) == expected


class TestLeaderboards:
    def test_mvp_leaderboard_excludes_unscored(self):
        board = build_leaderboard([
            _stats("a", "Alice", 12.0, 2),
            _stats("b", "Borin", 30.0, 3),
            _stats("c", "Cass"),
        ])
        assert [e.participant_id for e in board] == ["b", "a"]
        assert board[0].combats == 3

    def test_stat_leaderboard_ties_by_name_not_score(self):
        board = build_stat_leaderboard(
            [
                _stats("z", "Zed", 50.0, 5, criticals=4),
                _stats("a", "Alice", 1.0, 1, criticals=4),
                _stats("b", "Borin", 99.0, 9, criticals=2),
            ],
            "criticals",
        )
        assert [e.name for e in board] == ["Alice", "Zed", "Borin"]
        assert board[0].value == 4

    def test_unknown_stat_rejected(self):
        with pytest.raises(ValueError, match="Unknown stat"):
            build_stat_leaderboard([], "charisma")


class TestTextReport:
    def test_empty(self):
        report = generate_text_report([], [])
        assert "Combats: 0 | Players: 0" in report
        assert "MVP Leaderboard" not in report

    def test_sections(self):
        history = [
            make_summary(
                "c1",
                scene_name="Bridge Ambush",
                totals=CombatTotals(attempts=4, hits=3, damage_dealt=20),
            )
        ]
        stats = [_stats("alice", "Alice", 10.0, 1, hits=3, misses=1, criticals=2)]
        report = generate_text_report(history, stats)
        assert "Bridge Ambush" in report
        assert "hit=75.0%" in report
        assert "mvp=Alice (10.0)" in report
        assert "## MVP Leaderboard" in report
        assert "## Most Criticals" in report
        assert "## Most Fumbles" not in report
        assert "## Lifetime Records" in report
