"""Interfaces of the host-side collaborators the engine depends on."""

from __future__ import annotations

import logging
from typing import Protocol

from combat_telemetry.models.events import Participant
from combat_telemetry.models.summary import CombatSummary, RoundSummary

logger = logging.getLogger(__name__)


class IdentityResolver(Protocol):
    """Resolve an opaque participant reference to a stable identity.

    Returns ``None`` for references that no longer exist or cannot be
    resolved.  Callers treat an exception the same way.
    """

    async def resolve(self, ref: str) -> Participant | None: ...


class TurnTimer(Protocol):
    """State of the host's turn timer for the active turn.

    ``None`` values mean "not reported"; the engine then falls back to its
    configured allotment and to wall-clock time.
    """

    allotted_seconds: float | None
    remaining_seconds: float | None
    expired: bool


class NotificationSink(Protocol):
    async def publish_round_summary(self, summary: RoundSummary) -> None: ...

    async def publish_combat_summary(self, summary: CombatSummary) -> None: ...


class LoggingSink:
    """Sink that only logs what it receives."""

    async def publish_round_summary(self, summary: RoundSummary) -> None:
        mvp = summary.mvp.name if summary.mvp else None
        logger.info(
            "Round %d of %s ended: mvp=%s, active=%dms",
            summary.round, summary.combat_id, mvp, summary.duration_active_ms,
        )

    async def publish_combat_summary(self, summary: CombatSummary) -> None:
        logger.info(
            "Combat %s summary: %d rounds, %d damage",
            summary.combat_id, summary.rounds, summary.totals.damage_dealt,
        )
