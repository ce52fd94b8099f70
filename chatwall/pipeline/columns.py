"""
Column placement and eviction.

New fingerprints go round-robin over the columns; every column is a bounded
FIFO (oldest at the front). Evicting an entry also retracts it from the
aggregator, so the two never disagree about what is on screen.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List

from .aggregator import DuplicateAggregator
from .models import MessageEntry

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100


class ColumnAllocator:
    """Round-robin allocator + per-column FIFO evictor."""

    def __init__(
        self,
        aggregator: DuplicateAggregator,
        columns: int = 1,
        capacity: int = DEFAULT_CAPACITY,
        bump_repeats: bool = False,
    ):
        """
        Args:
            aggregator: index to retract evicted fingerprints from
            columns: number of columns (>= 1)
            capacity: max entries per column (>= 1)
            bump_repeats: move a repeated entry to the tail of its column
        """
        if columns < 1:
            raise ValueError(f"columns must be >= 1, got {columns}")
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.aggregator = aggregator
        self.capacity = capacity
        self.bump_repeats = bump_repeats
        self._columns: List[Deque[MessageEntry]] = [deque() for _ in range(columns)]
        # advanced once per new fingerprint only
        self._counter = 0

    @property
    def column_count(self) -> int:
        return len(self._columns)

    def column(self, index: int) -> List[MessageEntry]:
        return list(self._columns[index])

    def columns(self) -> List[List[MessageEntry]]:
        return [list(col) for col in self._columns]

    def place(self, entry: MessageEntry) -> List[str]:
        """
        Place a new entry at the tail of the next round-robin column.

        Returns:
            fingerprints evicted from that column, oldest first
        """
        index = self._counter % len(self._columns)
        self._counter += 1
        entry.column_index = index
        self._columns[index].append(entry)
        return self._evict(index)

    def append_repeat(self, entry: MessageEntry) -> List[str]:
        """
        Repeat of a placed entry: never changes column or the counter.

        The column does not grow, so nothing is evicted here; a column left
        over capacity by reconfigure() is trimmed by its next placement.
        """
        if self.bump_repeats:
            col = self._columns[entry.column_index]
            col.remove(entry)
            col.append(entry)
        return []

    def _evict(self, index: int) -> List[str]:
        col = self._columns[index]
        evicted = []
        while len(col) > self.capacity:
            oldest = col.popleft()
            self.aggregator.retract(oldest.fingerprint)
            evicted.append(oldest.fingerprint)
        if evicted:
            logger.debug(f"column {index}: evicted {len(evicted)} entries")
        return evicted

    def reconfigure(self, columns: int) -> None:
        """
        Re-layout every displayed entry over a new column count.

        Entries are taken front-to-back, column by column, and dealt out by
        index modulo the new count. Nothing is evicted here even if a column
        ends up over capacity; the next insertion into it trims it.
        """
        if columns < 1:
            raise ValueError(f"columns must be >= 1, got {columns}")
        entries = [entry for col in self._columns for entry in col]
        self._columns = [deque() for _ in range(columns)]
        for i, entry in enumerate(entries):
            entry.column_index = i % columns
            self._columns[entry.column_index].append(entry)
        logger.info(f"columns reconfigured: {columns} columns, {len(entries)} entries")

    def clear(self) -> None:
        for col in self._columns:
            col.clear()
        self._counter = 0
