"""Live combat tracking: lifecycle controller, counters, and notable moments."""

from combat_telemetry.tracking.collaborators import (
    IdentityResolver,
    LoggingSink,
    NotificationSink,
    TurnTimer,
)
from combat_telemetry.tracking.controller import RoundLifecycleController
from combat_telemetry.tracking.moments import NotableMomentsTracker
from combat_telemetry.tracking.session import CombatSession
from combat_telemetry.tracking.stats_store import ParticipantStatsStore
from combat_telemetry.tracking.subscriptions import TelemetryUpdate, UpdateBroadcaster
from combat_telemetry.tracking.timing import ActiveTimeAccumulator, turn_duration_ms

__all__ = [
    # collaborators
    "IdentityResolver",
    "LoggingSink",
    "NotificationSink",
    "TurnTimer",
    # controller
    "CombatSession",
    "RoundLifecycleController",
    # counters
    "NotableMomentsTracker",
    "ParticipantStatsStore",
    # timing
    "ActiveTimeAccumulator",
    "turn_duration_ms",
    # subscriptions
    "TelemetryUpdate",
    "UpdateBroadcaster",
]
