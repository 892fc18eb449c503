"""Local annotation cache for SWR pivot notes.

The authoritative copy of a note is the backend history record's
``notes`` field. A per-(year, channel) mirror is kept in the durable
key-value store and merged over every fresh fetch; for the same month the
local note wins over the server's.
"""

from __future__ import annotations

import json
from dataclasses import replace
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from opsdash.core.models import PivotRow
    from opsdash.storage.base import KeyValueStore

log = structlog.get_logger()

KEY_PREFIX = "swr_notes"


class AnnotationCache:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    @staticmethod
    def key(year: int, channel_name: str) -> str:
        return f"{KEY_PREFIX}_{year}_{channel_name}"

    def get(self, year: int, channel_name: str) -> dict[str, str]:
        raw = self._store.get(self.key(year, channel_name))
        if not raw:
            return {}
        try:
            notes = json.loads(raw)
        except json.JSONDecodeError:
            log.warning("annotation_cache_corrupt", year=year, channel=channel_name)
            return {}
        if not isinstance(notes, dict):
            return {}
        return {str(k): str(v) for k, v in notes.items() if v}

    def set(self, year: int, channel_name: str, notes: dict[str, str]) -> None:
        """Rewrite the whole per-channel entry; an empty map removes it."""
        key = self.key(year, channel_name)
        if notes:
            self._store.set(key, json.dumps(notes, ensure_ascii=False))
        else:
            self._store.remove(key)

    def set_note(self, year: int, channel_name: str, month_key: str, text: str) -> None:
        notes = self.get(year, channel_name)
        if text:
            notes[month_key] = text
        else:
            notes.pop(month_key, None)
        self.set(year, channel_name, notes)

    def remove_note(self, year: int, channel_name: str, month_key: str) -> None:
        self.set_note(year, channel_name, month_key, "")

    def merge(self, rows: list[PivotRow], year: int) -> list[PivotRow]:
        """Overlay cached notes onto freshly fetched rows."""
        merged = []
        for row in rows:
            local = self.get(year, row.channel_name)
            if local:
                row = replace(row, notes={**row.notes, **local})
            merged.append(row)
        return merged
