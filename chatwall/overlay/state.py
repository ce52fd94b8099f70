"""
Display-side mirror of the pipeline's columns, served by /api/state.

The pipeline stays the source of truth: this state is only ever updated
from ProcessResult objects and full rebuilds after relayout or clear.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from chatwall.pipeline import MessageEntry, ProcessResult, render_entry_html

logger = logging.getLogger(__name__)


def entry_record(entry: MessageEntry) -> Dict[str, Any]:
    return {
        "fingerprint": entry.fingerprint,
        "html": render_entry_html(entry),
        "count": entry.count,
        "column": entry.column_index,
    }


class OverlayState:
    """Rendered entries per column, oldest first"""

    def __init__(self, columns: int = 1, bump_repeats: bool = False):
        self.bump_repeats = bump_repeats
        self.columns: List[List[Dict[str, Any]]] = [[] for _ in range(columns)]
        self.version = 0

    @staticmethod
    def _index(column: List[Dict[str, Any]], fingerprint: str) -> Optional[int]:
        for i, record in enumerate(column):
            if record["fingerprint"] == fingerprint:
                return i
        return None

    def apply(self, result: ProcessResult) -> None:
        entry = result.entry
        column = self.columns[entry.column_index]
        record = entry_record(entry)

        index = None if result.is_new else self._index(column, entry.fingerprint)
        if index is None:
            column.append(record)
        elif self.bump_repeats:
            column.pop(index)
            column.append(record)
        else:
            column[index] = record

        # evictions only ever come from the column that just grew
        for fingerprint in result.evicted:
            evicted_at = self._index(column, fingerprint)
            if evicted_at is not None:
                column.pop(evicted_at)
        self.version += 1

    def rebuild(self, columns: List[List[MessageEntry]]) -> None:
        self.columns = [[entry_record(entry) for entry in column] for column in columns]
        self.version += 1
        logger.info(f"overlay state rebuilt: {len(self.columns)} columns")

    def snapshot(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "columns": [list(column) for column in self.columns],
        }
