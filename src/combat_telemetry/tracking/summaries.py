"""Build round and encounter summaries from live session state."""

from __future__ import annotations

from datetime import datetime, timezone

from combat_telemetry.models.stats import ParticipantStats
from combat_telemetry.models.summary import (
    CombatSummary,
    CombatTotals,
    ParticipantRoundBreakdown,
    ParticipantSummary,
    PartyBreakdown,
    RoundRecord,
    RoundSummary,
)
from combat_telemetry.mvp.descriptions import DescriptionGenerator
from combat_telemetry.mvp.scoring import MvpResult, score_participant, select_mvp
from combat_telemetry.tracking.session import CombatSession


def ms_to_datetime(now_ms: int) -> datetime:
    return datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc)


def _round_breakdown(stats: ParticipantStats) -> ParticipantRoundBreakdown:
    return ParticipantRoundBreakdown(
        participant_id=stats.participant_id,
        name=stats.name,
        is_player=stats.is_player,
        score=score_participant(stats),
        damage_dealt=stats.damage.dealt,
        damage_taken=stats.damage.taken,
        healing_given=stats.healing.given,
        healing_received=stats.healing.received,
        attempts=stats.attacks.attempts,
        hits=stats.attacks.hits,
        misses=stats.attacks.misses,
        crits=stats.attacks.crits,
        fumbles=stats.attacks.fumbles,
        turn_duration_ms=stats.turn_duration_ms,
        turn_expired=stats.last_turn_expired,
    )


def build_round_summary(
    session: CombatSession,
    result: MvpResult,
    *,
    duration_actual_ms: int,
    planning_ms: int,
    turn_allotment_ms: int,
) -> RoundSummary:
    """Assemble the end-of-round payload for the current round."""
    party = session.stats.party
    return RoundSummary(
        combat_id=session.combat_id,
        round=session.round,
        duration_actual_ms=duration_actual_ms,
        duration_active_ms=party.turn_total_ms + planning_ms,
        planning_ms=planning_ms,
        turn_allotment_ms=turn_allotment_ms,
        party=PartyBreakdown(
            hits=party.hits,
            misses=party.misses,
            hit_miss_ratio=round(party.hit_miss_ratio, 1),
            damage_dealt=party.damage_dealt,
            damage_taken=party.damage_taken,
            healing_done=party.healing_done,
            average_turn_ms=party.average_turn_ms,
        ),
        participants=[_round_breakdown(s) for s in session.stats.round_participants()],
        mvp=result.mvp,
        rankings=result.rankings,
        no_mvp_description=result.no_mvp_description,
        notable_moments=session.moments.snapshot(),
        expired_turns=session.expired_turns.to_list(),
    )


def build_round_record(summary: RoundSummary) -> RoundRecord:
    return RoundRecord(
        round=summary.round,
        duration_actual_ms=summary.duration_actual_ms,
        duration_active_ms=summary.duration_active_ms,
        hits=summary.party.hits,
        misses=summary.party.misses,
        damage_dealt=summary.party.damage_dealt,
        healing_done=summary.party.healing_done,
        expired_turns=len(summary.expired_turns),
        mvp_name=summary.mvp.name if summary.mvp else None,
        mvp_score=summary.mvp.score if summary.mvp else None,
    )


def _participant_summary(stats: ParticipantStats) -> ParticipantSummary:
    return ParticipantSummary(
        participant_id=stats.participant_id,
        name=stats.name,
        is_player=stats.is_player,
        damage_dealt=stats.damage.dealt,
        damage_taken=stats.damage.taken,
        healing_given=stats.healing.given,
        healing_received=stats.healing.received,
        attempts=stats.attacks.attempts,
        hits=stats.attacks.hits,
        misses=stats.attacks.misses,
        criticals=stats.attacks.crits,
        fumbles=stats.attacks.fumbles,
        biggest_hit=stats.biggest_hit,
        weakest_hit=stats.weakest_hit,
        turn_total_ms=stats.turn_total_ms,
        turn_count=stats.turn_count,
        fastest_turn_ms=stats.fastest_turn_ms,
        slowest_turn_ms=stats.slowest_turn_ms,
    )


def build_combat_summary(
    session: CombatSession,
    generator: DescriptionGenerator,
    now_ms: int,
    *,
    finished: bool = False,
) -> CombatSummary:
    """Snapshot the encounter so far.

    Totals and MVP rankings cover player participants only; the per-
    participant list covers everyone seen in the encounter.
    """
    everyone = session.stats.encounter_participants()
    players = [s for s in everyone if s.is_player]
    totals = CombatTotals()
    for stats in players:
        totals.attempts += stats.attacks.attempts
        totals.hits += stats.attacks.hits
        totals.misses += stats.attacks.misses
        totals.criticals += stats.attacks.crits
        totals.fumbles += stats.attacks.fumbles
        totals.damage_dealt += stats.damage.dealt
        totals.damage_taken += stats.damage.taken
        totals.healing += stats.healing.given
    result = select_mvp(players, generator)

    return CombatSummary(
        combat_id=session.combat_id,
        recorded_at=ms_to_datetime(now_ms),
        scene_name=session.scene_name,
        rounds=session.round,
        duration_ms=max(0, now_ms - session.started_at_ms),
        finished=finished,
        totals=totals,
        participants=[_participant_summary(s) for s in everyone],
        mvp=result.mvp,
        mvp_rankings=result.rankings,
        round_log=session.round_log.to_list(),
        top_hits=session.stats.top_hits.to_list(),
        top_heals=session.stats.top_heals.to_list(),
    )
