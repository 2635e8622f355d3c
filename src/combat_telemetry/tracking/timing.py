"""Turn durations and pause-aware active time."""

from __future__ import annotations

from dataclasses import dataclass


def turn_duration_ms(
    allotted_s: float,
    remaining_s: float | None,
    expired: bool,
    elapsed_ms: int,
) -> tuple[int, bool]:
    """Return ``(duration_ms, expired)`` for a finished turn.

    An expired timer, or one showing zero remaining, counts as the full
    allotment.  Otherwise the duration is ``allotted - remaining``; when the
    timer reports no remaining time at all, wall-clock *elapsed_ms* is used.
    The result is clamped to ``[0, allotted]``.
    """
    allotted_ms = int(round(allotted_s * 1000))
    if expired or remaining_s == 0:
        return allotted_ms, True
    if remaining_s is None:
        duration = elapsed_ms
    else:
        duration = int(round((allotted_s - remaining_s) * 1000))
    return max(0, min(duration, allotted_ms)), False


@dataclass
class ActiveTimeAccumulator:
    """Accumulate running time across pause/unpause cycles.

    On pause, ``active_ms += now - last_unpause_ms`` and ``last_unpause_ms``
    is cleared, so paused wall-clock time never counts.
    """

    active_ms: int = 0
    last_unpause_ms: int | None = None

    @property
    def running(self) -> bool:
        return self.last_unpause_ms is not None

    def unpause(self, now_ms: int) -> None:
        if self.last_unpause_ms is None:
            self.last_unpause_ms = now_ms

    start = unpause

    def pause(self, now_ms: int) -> None:
        if self.last_unpause_ms is not None:
            self.active_ms += max(0, now_ms - self.last_unpause_ms)
            self.last_unpause_ms = None

    def elapsed(self, now_ms: int) -> int:
        """Active time so far, including the currently running stretch."""
        if self.last_unpause_ms is None:
            return self.active_ms
        return self.active_ms + max(0, now_ms - self.last_unpause_ms)

    def reset(self) -> None:
        self.active_ms = 0
        self.last_unpause_ms = None
