"""Print the combat stats report for a storage directory.

Usage:
    python scripts/history_report.py [--data data/telemetry/] [--export out.json]
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from combat_telemetry.config import load_settings
from combat_telemetry.history.lifetime import LifetimeLedger
from combat_telemetry.history.merge import export_payload
from combat_telemetry.history.report import generate_text_report
from combat_telemetry.history.storage import JsonFileStorage
from combat_telemetry.history.store import HistoryStore


def main() -> None:
    parser = argparse.ArgumentParser(description="Report on stored combat history")
    parser.add_argument("--data", type=str, default="data/telemetry/", help="Storage directory")
    parser.add_argument("--settings", type=str, default=None, help="Settings JSON file")
    parser.add_argument("--limit", type=int, default=None, help="Max combats to list")
    parser.add_argument("--export", type=str, default=None, help="Also write an export file")
    args = parser.parse_args()

    settings = load_settings(args.settings)
    storage = JsonFileStorage(Path(args.data))
    ledger = LifetimeLedger(storage, settings.hit_log_capacity)
    history = HistoryStore(storage, settings.history_capacity)

    print(generate_text_report(history.list(args.limit), ledger.all_stats()))

    if args.export:
        out = Path(args.export)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(export_payload(history, ledger), indent=2))
        print(f"Wrote export to {out}")


if __name__ == "__main__":
    main()
