"""Key-value persistence adapters.

Values are JSON-compatible Python objects.  Adapters raise
:class:`~combat_telemetry.errors.StorageError` when a read or write cannot
be completed; callers decide whether that is fatal.
"""

from __future__ import annotations

import copy
import json
import re
from pathlib import Path
from typing import Any, Protocol

from combat_telemetry.errors import StorageError

_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]")


class Storage(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def unset(self, key: str) -> None: ...


class InMemoryStorage:
    """Dict-backed storage.  Values are deep-copied in and out."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def unset(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileStorage:
    """One ``<key>.json`` file per key under *directory*.

    Characters outside ``[A-Za-z0-9_.-]`` in keys are replaced with ``_``
    (so ``lifetime/abc`` is stored as ``lifetime_abc.json``).
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE.sub('_', key)}.json"

    def get(self, key: str, default: Any = None) -> Any:
        path = self.path_for(key)
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text())
        except (OSError, ValueError) as exc:
            raise StorageError(key, f"could not read {path}: {exc}") from exc

    def set(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(value, indent=2, sort_keys=True))
        except (OSError, TypeError) as exc:
            raise StorageError(key, f"could not write {path}: {exc}") from exc

    def unset(self, key: str) -> None:
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(key, f"could not delete: {exc}") from exc
