"""
Dedup key: canonical text + 32-bit FNV-1a fingerprint.

canonicalize() is lossy on purpose: "LOL", "lol   lol" and "looooool" all
end up as "lol". The canonical string is only ever compared, never shown.
"""

from __future__ import annotations

import html
import re

FNV32_OFFSET_BASIS = 0x811C9DC5
_MASK32 = 0xFFFFFFFF

_WHITESPACE_RE = re.compile(r"\s+")
_EMOTE_TAG_RE = re.compile(r'<img\s*src="[^"]+"[^>]*>')
_TAG_RE = re.compile(r"<[^>]+>")
_DISALLOWED_RE = re.compile(r"[^a-z0-9 <>/]")
_REPEAT_RE = re.compile(r"(.)\1+")

EMOTE_PLACEHOLDER = "<img />"


def _drop_repeated_tokens(tokens):
    return [tok for i, tok in enumerate(tokens) if i == 0 or tok != tokens[i - 1]]


def canonicalize(rendered_text: str) -> str:
    """
    Rendered (emote-substituted, HTML-escaped) text -> canonical dedup string.

    Character references outside emote tags are decoded so escaping never
    changes the key of plain text.
    """
    text = rendered_text.lower()
    text = _WHITESPACE_RE.sub(" ", text)
    text = _EMOTE_TAG_RE.sub(EMOTE_PLACEHOLDER, text)
    text = html.unescape(text)
    text = _TAG_RE.sub(lambda m: m.group(0).strip(), text)
    text = "".join(_drop_repeated_tokens(text.split(" ")))
    text = _DISALLOWED_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return _REPEAT_RE.sub(r"\1", text)


def fnv1a32(text: str) -> int:
    h = FNV32_OFFSET_BASIS
    for ch in text:
        h ^= ord(ch)
        # h * 16777619 (FNV prime) spelled as shifts
        h = (h + (h << 1) + (h << 4) + (h << 7) + (h << 8) + (h << 24)) & _MASK32
    return h


def fingerprint(canonical: str) -> str:
    """8 lowercase hex digits."""
    return f"{fnv1a32(canonical):08x}"[-8:]
