"""MVP scoring and selection.

Score per participant::

    hits * 2 + crits * 3 + damage_dealt * 0.1 + healing_given * 0.2 - fumbles * 2

rounded to one decimal.  Candidates scoring ``<= 0`` are excluded; the
remaining ones are ranked by score with a stable sort, so the participant
recorded first wins an exact tie.
"""

from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel, Field

from combat_telemetry.models.stats import ParticipantStats
from combat_telemetry.models.summary import MvpCandidate
from combat_telemetry.mvp.descriptions import DescriptionGenerator
from combat_telemetry.mvp.patterns import DescriptionStats, classify_pattern


class MvpResult(BaseModel):
    mvp: MvpCandidate | None = None
    rankings: list[MvpCandidate] = Field(default_factory=list)
    no_mvp_description: str | None = None
    """Set only when no candidate qualified."""


def compute_mvp_score(
    hits: int,
    crits: int,
    fumbles: int,
    damage: int,
    healing: int,
) -> float:
    score = hits * 2 + crits * 3 + damage * 0.1 + healing * 0.2 - fumbles * 2
    return round(score, 1)


def description_stats(stats: ParticipantStats) -> DescriptionStats:
    return DescriptionStats(
        hits=stats.attacks.hits,
        attempts=stats.attacks.attempts,
        damage=stats.damage.dealt,
        crits=stats.attacks.crits,
        healing=stats.healing.given,
        fumbles=stats.attacks.fumbles,
    )


def score_participant(stats: ParticipantStats) -> float:
    return compute_mvp_score(
        hits=stats.attacks.hits,
        crits=stats.attacks.crits,
        fumbles=stats.attacks.fumbles,
        damage=stats.damage.dealt,
        healing=stats.healing.given,
    )


def rank_candidates(stats: Iterable[ParticipantStats]) -> list[MvpCandidate]:
    """Score every participant and return qualifying ones, best first.

    Candidates carry their pattern but no description.
    """
    candidates: list[MvpCandidate] = []
    for entry in stats:
        score = score_participant(entry)
        if score <= 0:
            continue
        figures = description_stats(entry)
        candidates.append(
            MvpCandidate(
                participant_id=entry.participant_id,
                name=entry.name,
                score=score,
                pattern=classify_pattern(figures),
                hits=figures.hits,
                attempts=figures.attempts,
                crits=figures.crits,
                fumbles=figures.fumbles,
                damage=figures.damage,
                healing=figures.healing,
            )
        )
    # sorted() is stable: first recorded keeps precedence on equal scores
    return sorted(candidates, key=lambda c: c.score, reverse=True)


def select_mvp(
    stats: Iterable[ParticipantStats],
    generator: DescriptionGenerator,
) -> MvpResult:
    """Rank *stats* and describe the winner (or the absence of one)."""
    rankings = rank_candidates(stats)
    if not rankings:
        return MvpResult(no_mvp_description=generator.describe_no_mvp())

    best = rankings[0]
    figures = DescriptionStats(
        hits=best.hits,
        attempts=best.attempts,
        damage=best.damage,
        crits=best.crits,
        healing=best.healing,
        fumbles=best.fumbles,
    )
    mvp = best.model_copy(
        update={"description": generator.describe(best.name, figures, best.pattern)}
    )
    rankings[0] = mvp
    return MvpResult(mvp=mvp, rankings=rankings)
