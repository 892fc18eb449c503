"""File-based key-value storage implementation.

All keys live in a single JSON document:

    state_dir/state.json   {"authToken": "...", "permissions": "[...]", ...}

Values are strings, exactly as a browser's local storage would hold them.
The document is rewritten through a temp file on every change so a crash
never leaves a half-written file behind.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import structlog

log = structlog.get_logger()

STATE_FILE = "state.json"


class FileKeyValueStore:
    """KeyValueStore backed by one JSON file on disk."""

    def __init__(self, state_dir: str | Path) -> None:
        self._state_dir = Path(state_dir)
        self._state_dir.mkdir(parents=True, exist_ok=True)
        self._path = self._state_dir / STATE_FILE
        self._data: dict[str, str] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError, OSError):
            log.warning("state_file_unreadable", path=str(self._path), exc_info=True)
            return {}
        if not isinstance(raw, dict):
            log.warning("state_file_unexpected_shape", path=str(self._path))
            return {}
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _flush(self) -> None:
        tmp_path = self._path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, ensure_ascii=False, separators=(",", ":"))
        os.replace(tmp_path, self._path)

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()
        log.debug("state_written", key=key)

    def remove(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._flush()
            log.debug("state_removed", key=key)

    def keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._data if k.startswith(prefix))
