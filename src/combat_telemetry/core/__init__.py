"""Core primitives: bounded logs, clock, and seeded RNG."""

from combat_telemetry.core.bounded import BoundedLog, TopN
from combat_telemetry.core.clock import Clock, SystemClock
from combat_telemetry.core.rng import TelemetryRNG

__all__ = [
    # bounded
    "BoundedLog",
    "TopN",
    # clock
    "Clock",
    "SystemClock",
    # rng
    "TelemetryRNG",
]
