"""Exception types raised by the telemetry engine.

Most failure modes inside the engine degrade to "statistics may be
incomplete" and are only logged.  The exceptions here cover the cases that
must reach a caller: storage adapters signalling an I/O failure, and import
payloads rejected before any state is touched.
"""

from __future__ import annotations


class TelemetryError(Exception):
    """Base class for all telemetry errors."""


class StorageError(TelemetryError):
    """A storage adapter could not read or write a key."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"{key}: {message}")
        self.key = key


class MalformedImportError(TelemetryError, ValueError):
    """An import payload is missing required keys or has the wrong shape."""
