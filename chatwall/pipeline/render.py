"""
Entry -> HTML fragment for the overlay.

Single contributor: "<name>: message". Several: message + "×N" badge whose
background goes from green to red as log(N) grows, saturating at N >= e^4.
"""

from __future__ import annotations

import html
import math
import re
from typing import Tuple

from .models import DEFAULT_COLOR, MessageEntry

_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_MENTION_RE = re.compile(r"(@\w+)")
# mentions are only wrapped in text, not inside <img ... alt="@x">
_TAG_SPLIT_RE = re.compile(r"(<[^>]*>)")

INTENSITY_LOG_SCALE = 4.0


def safe_color(color: str) -> str:
    if color and _COLOR_RE.match(color):
        return color
    return DEFAULT_COLOR


def badge_intensity(count: int) -> float:
    """0.0 for one message, rising with ln(count), capped at 1.0."""
    if count <= 1:
        return 0.0
    return min(1.0, math.log(count) / INTENSITY_LOG_SCALE)


def badge_rgb(count: int) -> Tuple[int, int, int]:
    intensity = badge_intensity(count)
    return round(255 * intensity), round(255 - 255 * intensity), 50


def format_mentions(text: str) -> str:
    parts = _TAG_SPLIT_RE.split(text)
    for i in range(0, len(parts), 2):
        parts[i] = _MENTION_RE.sub(r'<span class="mention">\1</span>', parts[i])
    return "".join(parts)


def render_entry_html(entry: MessageEntry) -> str:
    out = []
    if entry.count == 1:
        user = entry.contributors[0]
        out.append(
            f'<span class="username" style="color: {safe_color(user.color)}">'
            f"{html.escape(user.name)}</span>: "
        )
    out.append(format_mentions(entry.rendered_text))
    if entry.count > 1:
        r, g, b = badge_rgb(entry.count)
        out.append(
            f'<span class="duplicate-count" style="background-color: rgb({r}, {g}, {b})">'
            f"×{entry.count}</span>"
        )
    return "".join(out)
