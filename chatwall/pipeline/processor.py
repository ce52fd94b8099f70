"""
Chat pipeline: resolve -> canonicalize -> fingerprint -> aggregate -> place/evict.

Single-threaded by contract: one message runs to completion before the next
one starts, and nothing but the pipeline mutates the aggregator or columns.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from .aggregator import DuplicateAggregator
from .canonical import canonicalize, fingerprint
from .columns import DEFAULT_CAPACITY, ColumnAllocator
from .emotes import EmoteResolver
from .models import MessageEntry, ProcessResult, User

logger = logging.getLogger(__name__)


class ChatPipeline:
    """Turns chat lines into deduplicated, column-placed entries."""

    def __init__(
        self,
        columns: int = 1,
        capacity: int = DEFAULT_CAPACITY,
        name_catalog: Optional[Mapping[str, str]] = None,
        bump_repeats: bool = False,
    ):
        self.resolver = EmoteResolver(name_catalog)
        self.aggregator = DuplicateAggregator()
        self.allocator = ColumnAllocator(
            self.aggregator,
            columns=columns,
            capacity=capacity,
            bump_repeats=bump_repeats,
        )

    @property
    def column_count(self) -> int:
        return self.allocator.column_count

    def set_name_catalog(self, name_catalog: Optional[Mapping[str, str]]) -> None:
        self.resolver.set_name_catalog(name_catalog)

    def process(
        self,
        text: str,
        user: User,
        emote_positions: Optional[Mapping] = None,
    ) -> ProcessResult:
        """
        Run one message through the pipeline.

        Args:
            text: raw message text
            user: sender
            emote_positions: position catalog attached to this message

        Returns:
            ProcessResult with the (new or updated) entry and any evicted
            fingerprints
        """
        rendered = self.resolver.resolve(text, emote_positions)
        canonical = canonicalize(rendered)
        key = fingerprint(canonical)

        entry, is_new = self.aggregator.observe(key, user, rendered)
        if is_new:
            evicted = self.allocator.place(entry)
        else:
            evicted = self.allocator.append_repeat(entry)
            logger.debug(f"repeat {key} x{entry.count} (column {entry.column_index})")

        return ProcessResult(entry=entry, is_new=is_new, evicted=evicted, canonical=canonical)

    def reconfigure(self, columns: int) -> None:
        self.allocator.reconfigure(columns)

    def columns(self) -> List[List[MessageEntry]]:
        return self.allocator.columns()

    def clear(self) -> None:
        self.allocator.clear()
        self.aggregator.clear()
        logger.info("pipeline cleared")
