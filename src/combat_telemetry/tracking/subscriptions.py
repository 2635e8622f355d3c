"""Subscribe/unsubscribe for telemetry update notifications."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TelemetryUpdate:
    """What changed: ``kind`` is e.g. ``"attack"``, ``"round_end"``."""

    kind: str
    combat_id: str | None = None
    round: int | None = None


UpdateCallback = Callable[[TelemetryUpdate], None]


class UpdateBroadcaster:
    def __init__(self) -> None:
        self._subscribers: dict[str, UpdateCallback] = {}

    def subscribe(self, callback: UpdateCallback) -> str:
        """Register *callback*; returns an id for :meth:`unsubscribe`."""
        subscription_id = uuid.uuid4().hex
        self._subscribers[subscription_id] = callback
        return subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        return self._subscribers.pop(subscription_id, None) is not None

    def notify(self, update: TelemetryUpdate) -> None:
        """Call every subscriber; a failing callback does not stop the rest."""
        for subscription_id, callback in list(self._subscribers.items()):
            try:
                callback(update)
            except Exception:
                logger.warning(
                    "Subscriber %s failed on %s update", subscription_id, update.kind,
                    exc_info=True,
                )

    def __len__(self) -> int:
        return len(self._subscribers)
