"""Leaderboards and a plain-text report over history and lifetime stats."""

from __future__ import annotations

from pydantic import BaseModel

from combat_telemetry.models.lifetime import PlayerLifetimeStats
from combat_telemetry.models.summary import CombatSummary

STAT_FIELDS = (
    "hits",
    "misses",
    "criticals",
    "fumbles",
    "damage_dealt",
    "damage_taken",
    "healing_given",
    "healing_received",
)


class LeaderboardEntry(BaseModel):
    participant_id: str
    name: str
    value: float
    combats: int = 0


def format_duration(ms: int | float | None) -> str:
    """Format milliseconds as ``"1h 2m 5s"``; ``None`` means skipped."""
    if ms is None:
        return "SKIPPED"
    seconds = int(round(ms / 1000))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    parts: list[str] = []
    if hours:
        parts.append(f"{hours}h")
    if hours or minutes:
        parts.append(f"{minutes}m")
    parts.append(f"{secs}s")
    return " ".join(parts)


def build_leaderboard(stats: list[PlayerLifetimeStats]) -> list[LeaderboardEntry]:
    """Players with at least one scored combat, by lifetime MVP total."""
    entries = [
        LeaderboardEntry(
            participant_id=s.participant_id,
            name=s.name,
            value=s.mvp.total_score,
            combats=s.mvp.combats,
        )
        for s in stats
        if s.mvp.combats > 0
    ]
    entries.sort(key=lambda e: (-e.value, e.name, e.participant_id))
    return entries


def build_stat_leaderboard(
    stats: list[PlayerLifetimeStats],
    field: str,
) -> list[LeaderboardEntry]:
    """Rank players by one lifetime counter.

    Ties are broken by name, then participant id.  MVP score plays no part.
    """
    if field not in STAT_FIELDS:
        raise ValueError(f"Unknown stat {field!r}; expected one of {', '.join(STAT_FIELDS)}")
    entries = [
        LeaderboardEntry(
            participant_id=s.participant_id,
            name=s.name,
            value=getattr(s, field),
            combats=s.mvp.combats,
        )
        for s in stats
    ]
    entries.sort(key=lambda e: (-e.value, e.name, e.participant_id))
    return entries


def generate_text_report(
    history: list[CombatSummary],
    stats: list[PlayerLifetimeStats],
) -> str:
    """Generate a human-readable summary of history and lifetime stats."""
    lines: list[str] = []

    lines.append("=" * 60)
    lines.append("Combat Stats Report")
    lines.append(f"Combats: {len(history):,} | Players: {len(stats):,}")
    lines.append("=" * 60)

    if history:
        avg_hit_rate = sum(c.totals.hit_rate for c in history) / len(history)
        lines.append("")
        lines.append("## Recent Combats")
        lines.append(f"  Avg hit rate: {avg_hit_rate:.1f}%")
        for c in history:
            mvp = f"{c.mvp.name} ({c.mvp.score:.1f})" if c.mvp else "-"
            lines.append(
                f"  {c.recorded_at:%Y-%m-%d %H:%M}  {c.scene_name or c.combat_id:20s}"
                f"  rounds={c.rounds}  time={format_duration(c.duration_ms)}"
                f"  dmg={c.totals.damage_dealt:,}  hit={c.totals.hit_rate:.1f}%"
                f"  mvp={mvp}"
            )

    leaderboard = build_leaderboard(stats)
    if leaderboard:
        lines.append("")
        lines.append("## MVP Leaderboard")
        for rank, e in enumerate(leaderboard, start=1):
            lines.append(f"  {rank:2d}. {e.name:20s}  total={e.value:.1f}  combats={e.combats}")

    for field, title in (("criticals", "Most Criticals"), ("fumbles", "Most Fumbles")):
        board = [e for e in build_stat_leaderboard(stats, field) if e.value > 0]
        if board:
            lines.append("")
            lines.append(f"## {title}")
            for e in board[:5]:
                lines.append(f"  {e.name:20s}  {int(e.value):,}")

    if stats:
        lines.append("")
        lines.append("## Lifetime Records")
        for s in sorted(stats, key=lambda s: s.name):
            biggest = s.biggest_hit.amount if s.biggest_hit else 0
            fastest = s.fastest_turn.duration_ms if s.fastest_turn else None
            lines.append(
                f"  {s.name:20s}  hit={s.hit_miss_ratio:.1f}%  dmg={s.damage_dealt:,}"
                f"  heal={s.healing_given:,}  biggest={biggest:,}"
                f"  avg_turn={format_duration(s.average_turn_ms)}"
                f"  fastest={format_duration(fastest)}"
            )

    lines.append("")
    return "\n".join(lines)
