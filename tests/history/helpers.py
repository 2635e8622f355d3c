"""Builders for combat summaries used across history tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from combat_telemetry.models.summary import (
    CombatSummary,
    HitHighlight,
    MvpCandidate,
    ParticipantSummary,
)

BASE_TIME = datetime(2026, 3, 1, 18, 0, tzinfo=timezone.utc)


def make_participant(pid: str, **kwargs) -> ParticipantSummary:
    defaults = dict(
        participant_id=pid,
        name=pid.title(),
        is_player=True,
        hits=3,
        misses=1,
        attempts=4,
        criticals=1,
        fumbles=0,
        damage_dealt=20,
        damage_taken=5,
        healing_given=0,
        healing_received=2,
        biggest_hit=12,
        weakest_hit=3,
        turn_total_ms=40_000,
        turn_count=2,
        fastest_turn_ms=15_000,
        slowest_turn_ms=25_000,
    )
    defaults.update(kwargs)
    return ParticipantSummary(**defaults)


def make_summary(
    combat_id: str,
    minutes: int = 0,
    participants: list[ParticipantSummary] | None = None,
    scores: dict[str, float] | None = None,
    **kwargs,
) -> CombatSummary:
    participants = participants if participants is not None else [make_participant("alice")]
    scores = scores if scores is not None else {p.participant_id: 10.0 for p in participants}
    rankings = [
        MvpCandidate(participant_id=pid, name=pid.title(), score=score)
        for pid, score in sorted(scores.items(), key=lambda kv: -kv[1])
    ]
    top_hits = [
        HitHighlight(
            attacker_id=p.participant_id,
            attacker_name=p.name,
            target_name="Goblin",
            amount=p.biggest_hit,
        )
        for p in participants
        if p.biggest_hit > 0
    ]
    fields = dict(
        combat_id=combat_id,
        recorded_at=BASE_TIME + timedelta(minutes=minutes),
        rounds=3,
        duration_ms=90_000,
        finished=True,
        participants=participants,
        mvp=rankings[0] if rankings else None,
        mvp_rankings=rankings,
        top_hits=top_hits,
    )
    fields.update(kwargs)
    return CombatSummary(**fields)
