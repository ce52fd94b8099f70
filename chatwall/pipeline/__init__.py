"""
Message pipeline: emote resolution, dedup keying, aggregation, column layout.
"""

from .aggregator import DuplicateAggregator
from .canonical import canonicalize, fingerprint
from .columns import ColumnAllocator
from .emotes import EmoteResolver, NameEmoteMatcher, resolve
from .models import MessageEntry, ProcessResult, User
from .processor import ChatPipeline
from .render import render_entry_html

__all__ = [
    "ChatPipeline",
    "ColumnAllocator",
    "DuplicateAggregator",
    "EmoteResolver",
    "MessageEntry",
    "NameEmoteMatcher",
    "ProcessResult",
    "User",
    "canonicalize",
    "fingerprint",
    "render_entry_html",
    "resolve",
]
