"""Combat history, lifetime ledger, import/export, and reports."""

from combat_telemetry.history.lifetime import (
    LifetimeLedger,
    combine,
    contribution_from_summary,
    derive_stats,
    subtract,
)
from combat_telemetry.history.merge import (
    ExportPayload,
    ImportedPlayerStats,
    ImportReport,
    export_payload,
    merge_import,
)
from combat_telemetry.history.report import (
    LeaderboardEntry,
    build_leaderboard,
    build_stat_leaderboard,
    format_duration,
    generate_text_report,
)
from combat_telemetry.history.storage import InMemoryStorage, JsonFileStorage, Storage
from combat_telemetry.history.store import HistoryStore

__all__ = [
    # storage
    "InMemoryStorage",
    "JsonFileStorage",
    "Storage",
    # store
    "HistoryStore",
    # lifetime
    "LifetimeLedger",
    "combine",
    "contribution_from_summary",
    "derive_stats",
    "subtract",
    # merge
    "ExportPayload",
    "ImportReport",
    "ImportedPlayerStats",
    "export_payload",
    "merge_import",
    # report
    "LeaderboardEntry",
    "build_leaderboard",
    "build_stat_leaderboard",
    "format_duration",
    "generate_text_report",
]
