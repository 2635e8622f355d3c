"""Merge a combat-stats export into a storage directory.

Usage:
    python scripts/merge_history.py export.json [--data data/telemetry/] [--history-capacity 20]
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from combat_telemetry.config import load_settings
from combat_telemetry.errors import MalformedImportError
from combat_telemetry.history.lifetime import LifetimeLedger
from combat_telemetry.history.merge import merge_import
from combat_telemetry.history.storage import JsonFileStorage
from combat_telemetry.history.store import HistoryStore


def main() -> None:
    parser = argparse.ArgumentParser(description="Merge a combat stats export")
    parser.add_argument("export", type=str, help="Export JSON file")
    parser.add_argument("--data", type=str, default="data/telemetry/", help="Storage directory")
    parser.add_argument("--settings", type=str, default=None, help="Settings JSON file")
    parser.add_argument("--history-capacity", type=int, default=None, help="History size")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    overrides = {}
    if args.history_capacity is not None:
        overrides["history_capacity"] = args.history_capacity
    settings = load_settings(args.settings, **overrides)

    storage = JsonFileStorage(Path(args.data))
    ledger = LifetimeLedger(storage, settings.hit_log_capacity)
    history = HistoryStore(
        storage,
        settings.history_capacity,
        on_evict=lambda summary: ledger.fold_combat(summary.combat_id),
    )

    payload = json.loads(Path(args.export).read_text())
    try:
        report = merge_import(payload, history, ledger)
    except MalformedImportError as exc:
        print(f"Import rejected: {exc}", file=sys.stderr)
        sys.exit(1)

    print(f"Combats added:    {report.combats_added}")
    print(f"Combats replaced: {report.combats_replaced}")
    print(f"Combats skipped:  {report.combats_skipped} (+{report.combats_invalid} invalid)")
    print(f"Players applied:  {report.players_applied}")
    print(
        f"Players skipped:  {report.players_unchanged + report.players_outdated}"
        f" (+{report.players_invalid} invalid)"
    )


if __name__ == "__main__":
    main()
