"""Import and export of history plus lifetime stats.

An export document looks like::

    {
      "combatHistory": [<CombatSummary>, ...],
      "playerStats":   [{"participant_id": ..., "name": ..., "lifetime": {...}}, ...]
    }

Importing is all-or-nothing at the top level (both keys must be present
and be lists) and per-entry after that: invalid entries are skipped and
counted.  The merge is idempotent:

- combats are keyed by ``combat_id``; an incoming entry replaces the local
  one only if its ``recorded_at`` is strictly newer;
- each player has one imported lifetime snapshot, keyed by participant
  id; a newer snapshot replaces it and an older one is ignored;
- an imported snapshot already counts the combats shipped with it and
  with earlier imports, so those combats' contributions are subtracted
  before storing, and nothing is counted twice.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from combat_telemetry.errors import MalformedImportError
from combat_telemetry.history.lifetime import (
    LifetimeLedger,
    contribution_from_summary,
)
from combat_telemetry.history.store import HistoryStore
from combat_telemetry.models.lifetime import LifetimeContribution
from combat_telemetry.models.summary import CombatSummary

logger = logging.getLogger(__name__)

COMBAT_HISTORY = "combatHistory"
PLAYER_STATS = "playerStats"


class ImportedPlayerStats(BaseModel):
    participant_id: str
    name: str
    lifetime: LifetimeContribution = Field(default_factory=LifetimeContribution)
    last_updated: datetime | None = None


class ExportPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    combat_history: list[CombatSummary] = Field(default_factory=list, alias=COMBAT_HISTORY)
    player_stats: list[ImportedPlayerStats] = Field(default_factory=list, alias=PLAYER_STATS)


class ImportReport(BaseModel):
    combats_added: int = 0
    combats_replaced: int = 0
    combats_skipped: int = 0
    """Already present with an equal or newer timestamp, or too old to keep."""

    combats_invalid: int = 0
    players_applied: int = 0
    players_unchanged: int = 0
    players_outdated: int = 0
    """Older than the lifetime snapshot already imported for the player."""

    players_invalid: int = 0

    @property
    def applied(self) -> int:
        return self.combats_added + self.combats_replaced + self.players_applied

    @property
    def skipped(self) -> int:
        return (
            self.combats_skipped
            + self.combats_invalid
            + self.players_unchanged
            + self.players_outdated
            + self.players_invalid
        )


def validate_payload(payload: Any) -> tuple[list[Any], list[Any]]:
    """Check the top-level shape.  Raises :class:`MalformedImportError`."""
    if not isinstance(payload, dict):
        raise MalformedImportError(
            f"Import payload must be an object, got {type(payload).__name__}"
        )
    missing = [key for key in (COMBAT_HISTORY, PLAYER_STATS) if key not in payload]
    if missing:
        raise MalformedImportError(f"Import payload is missing {', '.join(missing)}")
    combats, players = payload[COMBAT_HISTORY], payload[PLAYER_STATS]
    if not isinstance(combats, list) or not isinstance(players, list):
        raise MalformedImportError(f"{COMBAT_HISTORY} and {PLAYER_STATS} must be lists")
    return combats, players


def merge_import(
    payload: Any,
    history: HistoryStore,
    ledger: LifetimeLedger | None = None,
) -> ImportReport:
    """Merge an export document into *history* and *ledger*.

    Parameters
    ----------
    payload:
        Parsed JSON document (see module docstring).
    history:
        Destination for combat summaries.
    ledger:
        Destination for lifetime stats; ``None`` skips player stats and
        the per-combat lifetime contributions.
    """
    raw_combats, raw_players = validate_payload(payload)
    report = ImportReport()

    # -- combats -----------------------------------------------------------
    kept: dict[str, CombatSummary] = {}
    for raw in raw_combats:
        try:
            incoming = CombatSummary.model_validate(raw)
        except ValidationError as exc:
            report.combats_invalid += 1
            logger.warning("Skipping invalid combat entry: %s", exc.errors()[0]["msg"])
            continue

        existing = history.get(incoming.combat_id)
        if existing is not None and incoming.recorded_at <= existing.recorded_at:
            report.combats_skipped += 1
            kept[incoming.combat_id] = incoming
            continue
        if not history.record(incoming):
            report.combats_skipped += 1
            continue

        kept[incoming.combat_id] = incoming
        if existing is None:
            report.combats_added += 1
        else:
            report.combats_replaced += 1
        if ledger is not None:
            ledger.record_summary(incoming)

    # -- player stats -------------------------------------------------------
    if ledger is not None:
        for raw in raw_players:
            try:
                entry = ImportedPlayerStats.model_validate(raw)
            except ValidationError as exc:
                report.players_invalid += 1
                logger.warning("Skipping invalid player entry: %s", exc.errors()[0]["msg"])
                continue

            shipped = {
                combat_id: part
                for combat_id, summary in kept.items()
                if (part := contribution_from_summary(summary, entry.participant_id))
                is not None
            }
            updated_at = entry.last_updated or max(
                (s.recorded_at for s in kept.values()), default=None
            )
            applied = ledger.import_lifetime(
                entry.participant_id, entry.name, entry.lifetime, shipped, updated_at
            )
            if applied is None:
                report.players_outdated += 1
            elif applied:
                report.players_applied += 1
            else:
                report.players_unchanged += 1

    logger.info(
        "Import finished: %d applied, %d skipped (%s)",
        report.applied, report.skipped, report.model_dump(),
    )
    return report


def export_payload(history: HistoryStore, ledger: LifetimeLedger) -> dict[str, Any]:
    """Build the export document accepted by :func:`merge_import`."""
    players = []
    for participant_id in ledger.participant_ids:
        record = ledger.record(participant_id)
        total = ledger.total(participant_id)
        if record is None or total is None:
            continue
        players.append(
            ImportedPlayerStats(
                participant_id=participant_id,
                name=record.name,
                lifetime=total,
                last_updated=record.last_updated,
            )
        )
    document = ExportPayload(combat_history=history.list(), player_stats=players)
    return document.model_dump(mode="json", by_alias=True)
