"""
Duplicate aggregation: fingerprint -> MessageEntry.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, Optional, Tuple

from .models import MessageEntry, User

logger = logging.getLogger(__name__)


class DuplicateAggregator:
    """Owns every live MessageEntry, keyed by fingerprint."""

    def __init__(self):
        self._entries: Dict[str, MessageEntry] = {}

    def observe(self, fingerprint: str, user: User, rendered_text: str) -> Tuple[MessageEntry, bool]:
        """
        Record one occurrence of a fingerprint.

        Returns:
            (entry, is_new). On a repeat the user is appended as another
            contributor (same user twice counts twice) and rendered_text is
            ignored: the first rendering sticks.
        """
        entry = self._entries.get(fingerprint)
        if entry is not None:
            entry.contributors.append(user)
            return entry, False

        entry = MessageEntry(
            fingerprint=fingerprint,
            rendered_text=rendered_text,
            contributors=[user],
        )
        self._entries[fingerprint] = entry
        return entry, True

    def retract(self, fingerprint: str) -> Optional[MessageEntry]:
        entry = self._entries.pop(fingerprint, None)
        if entry is None:
            logger.debug(f"retract: unknown fingerprint {fingerprint}")
        return entry

    def get(self, fingerprint: str) -> Optional[MessageEntry]:
        return self._entries.get(fingerprint)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, fingerprint: str) -> bool:
        return fingerprint in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
