"""Bounded, persisted history of combat summaries.

Entries are kept newest first by ``recorded_at`` and keyed by
``combat_id``: recording a summary whose id is already present replaces
the old entry.  When the store is over capacity the oldest entries are
evicted and handed to ``on_evict``.
"""

from __future__ import annotations

import logging
from typing import Callable

from pydantic import ValidationError

from combat_telemetry.errors import StorageError
from combat_telemetry.history.storage import Storage
from combat_telemetry.models.summary import CombatSummary

logger = logging.getLogger(__name__)

HISTORY_KEY = "combat_history"


class HistoryStore:
    """Most-recent-first list of :class:`CombatSummary`, unique by combat id.

    Parameters
    ----------
    storage:
        Backing key-value store; the list lives under ``combat_history``.
    capacity:
        Maximum number of summaries kept.
    on_evict:
        Called with each summary dropped for capacity.
    """

    def __init__(
        self,
        storage: Storage,
        capacity: int = 20,
        on_evict: Callable[[CombatSummary], None] | None = None,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._storage = storage
        self._capacity = capacity
        self.on_evict = on_evict
        self._entries: list[CombatSummary] = self._load()

    # -- queries -------------------------------------------------------------

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def latest(self) -> CombatSummary | None:
        return self._entries[0] if self._entries else None

    def get(self, combat_id: str) -> CombatSummary | None:
        for entry in self._entries:
            if entry.combat_id == combat_id:
                return entry
        return None

    def list(self, limit: int | None = None) -> list[CombatSummary]:
        """Summaries newest first, at most *limit* of them."""
        if limit is None:
            return list(self._entries)
        return self._entries[: max(0, limit)]

    def would_keep(self, summary: CombatSummary) -> bool:
        """Whether recording *summary* would leave it in the store."""
        if self.get(summary.combat_id) is not None or len(self._entries) < self._capacity:
            return True
        return summary.recorded_at > self._entries[-1].recorded_at

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, combat_id: object) -> bool:
        return any(entry.combat_id == combat_id for entry in self._entries)

    # -- mutation ------------------------------------------------------------

    def record(self, summary: CombatSummary) -> bool:
        """Insert or replace *summary*.

        Returns ``False`` without changing anything when the store is full
        and *summary* is older than every entry it holds.
        """
        if not self.would_keep(summary):
            logger.debug("Combat %s is older than all of history; not kept", summary.combat_id)
            return False

        entries = [summary] + [e for e in self._entries if e.combat_id != summary.combat_id]
        # stable sort: on equal timestamps the latest recording stays ahead
        entries.sort(key=lambda e: e.recorded_at, reverse=True)

        evicted = entries[self._capacity :]
        self._entries = entries[: self._capacity]
        self._persist()
        for old in evicted:
            logger.debug("Evicted combat %s from history", old.combat_id)
            if self.on_evict is not None:
                self.on_evict(old)
        return True

    def remove(self, combat_id: str) -> CombatSummary | None:
        removed = self.get(combat_id)
        if removed is None:
            return None
        self._entries = [e for e in self._entries if e.combat_id != combat_id]
        self._persist()
        return removed

    def clear(self) -> None:
        self._entries = []
        self._persist()

    # -- persistence ---------------------------------------------------------

    def _load(self) -> list[CombatSummary]:
        try:
            raw = self._storage.get(HISTORY_KEY, []) or []
        except StorageError as exc:
            logger.warning("Could not load combat history: %s", exc)
            return []
        entries: list[CombatSummary] = []
        for item in raw:
            try:
                entries.append(CombatSummary.model_validate(item))
            except ValidationError:
                logger.warning("Discarding unreadable history entry")
        entries.sort(key=lambda e: e.recorded_at, reverse=True)
        return entries[: self._capacity]

    def _persist(self) -> None:
        try:
            self._storage.set(
                HISTORY_KEY, [entry.model_dump(mode="json") for entry in self._entries]
            )
        except StorageError as exc:
            logger.warning("Could not save combat history: %s", exc)
