"""Data model: host events, live counters, summaries, and lifetime records."""

from combat_telemetry.models.events import (
    AttackOutcome,
    AttackRoll,
    CombatStart,
    CombatUpdate,
    DamageRoll,
    Participant,
)
from combat_telemetry.models.lifetime import (
    HitRecord,
    LifetimeContribution,
    LifetimeRecord,
    MvpAggregate,
    PlayerLifetimeStats,
    TurnRecord,
)
from combat_telemetry.models.moments import NotableMoment, NotableMoments
from combat_telemetry.models.stats import (
    AttackCounters,
    AttackLogEntry,
    DamageCounters,
    HealingCounters,
    ParticipantStats,
    PartyAggregate,
)
from combat_telemetry.models.summary import (
    CombatSummary,
    CombatTotals,
    ExpiredTurn,
    HealHighlight,
    HitHighlight,
    MvpCandidate,
    MvpPattern,
    ParticipantRoundBreakdown,
    ParticipantSummary,
    PartyBreakdown,
    RoundRecord,
    RoundSummary,
)

__all__ = [
    # events
    "AttackOutcome",
    "AttackRoll",
    "CombatStart",
    "CombatUpdate",
    "DamageRoll",
    "Participant",
    # stats
    "AttackCounters",
    "AttackLogEntry",
    "DamageCounters",
    "HealingCounters",
    "ParticipantStats",
    "PartyAggregate",
    # moments
    "NotableMoment",
    "NotableMoments",
    # summary
    "CombatSummary",
    "CombatTotals",
    "ExpiredTurn",
    "HealHighlight",
    "HitHighlight",
    "MvpCandidate",
    "MvpPattern",
    "ParticipantRoundBreakdown",
    "ParticipantSummary",
    "PartyBreakdown",
    "RoundRecord",
    "RoundSummary",
    # lifetime
    "HitRecord",
    "LifetimeContribution",
    "LifetimeRecord",
    "MvpAggregate",
    "PlayerLifetimeStats",
    "TurnRecord",
]
