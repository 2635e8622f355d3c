"""MVP scoring, pattern classification, and description rendering."""

from combat_telemetry.mvp.descriptions import DescriptionGenerator
from combat_telemetry.mvp.patterns import DescriptionStats, classify_pattern
from combat_telemetry.mvp.scoring import (
    MvpResult,
    compute_mvp_score,
    rank_candidates,
    score_participant,
    select_mvp,
)
from combat_telemetry.mvp.templates import TEMPLATE_POOLS, build_environment

__all__ = [
    # scoring
    "MvpResult",
    "compute_mvp_score",
    "rank_candidates",
    "score_participant",
    "select_mvp",
    # patterns
    "DescriptionStats",
    "classify_pattern",
    # descriptions
    "DescriptionGenerator",
    "TEMPLATE_POOLS",
    "build_environment",
]
