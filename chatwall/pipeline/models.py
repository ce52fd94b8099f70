"""
Pipeline data models
User / MessageEntry / ProcessResult
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_COLOR = "#ffffff"


@dataclass(frozen=True)
class User:
    """Chat sender as shown on the overlay."""
    name: str
    color: str = DEFAULT_COLOR


@dataclass(eq=False)
class MessageEntry:
    """One display unit: every message sharing a fingerprint."""
    fingerprint: str
    rendered_text: str  # first-seen rendering, emotes already substituted
    contributors: List[User] = field(default_factory=list)
    column_index: int = 0

    @property
    def count(self) -> int:
        return len(self.contributors)


@dataclass
class ProcessResult:
    """Outcome of one message run through the pipeline."""
    entry: MessageEntry
    is_new: bool
    evicted: List[str] = field(default_factory=list)  # fingerprints removed from columns
    canonical: Optional[str] = None
