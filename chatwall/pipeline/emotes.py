"""
Emote resolution: replace emote tokens in a raw chat line with <img> markup.

Two catalogs are applied, in this order:
- position catalog ({emote_id: ["start-end", ...]}), indices into the raw text
- name catalog ({name: url}), whole-word, case-sensitive matches

Position indices refer to the raw text, so position substitution always runs
first. Untouched characters are HTML-escaped on the way through.
"""

from __future__ import annotations

import html
import logging
import re
from typing import Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

TWITCH_EMOTE_URL = "https://static-cdn.jtvnw.net/emoticons/v2/{emote_id}/default/dark/1.0"

# existing tags and character references are matched as units and left as they are
_TAG_PATTERN = r"<[^>]*>"
_CHARREF_PATTERN = r"&#?\w+;"


def emote_img(src: str, alt: str, css_class: str) -> str:
    return (
        f'<img src="{html.escape(src)}" class="emote {css_class}" '
        f'alt="{html.escape(alt)}">'
    )


def _parse_range(position) -> Optional[Tuple[int, int]]:
    """Parse "start-end" into (start, end); None when malformed."""
    if not isinstance(position, str):
        return None
    start_s, sep, end_s = position.partition("-")
    if not sep:
        return None
    try:
        start, end = int(start_s), int(end_s)
    except ValueError:
        return None
    if start < 0 or end < start:
        return None
    return start, end


def _utf16_slice(text: str, start: int, end: int) -> str:
    """Inclusive [start, end] slice in UTF-16 code units."""
    data = text.encode("utf-16-le", "surrogatepass")
    return data[start * 2:(end + 1) * 2].decode("utf-16-le", "replace")


def substitute_positions(text: str, positions: Optional[Mapping]) -> str:
    """
    Position-based substitution.

    Args:
        text: raw message text
        positions: {emote_id: ["start-end", ...]} in UTF-16 code units

    Returns:
        HTML-safe text with emote ranges replaced by <img> tags
    """
    replacements: Dict[int, str] = {}
    for emote_id, ranges in (positions or {}).items():
        if not isinstance(ranges, (list, tuple)):
            logger.debug(f"emote {emote_id}: ranges is not a list ({ranges!r}), skipped")
            continue
        for position in ranges:
            bounds = _parse_range(position)
            if bounds is None:
                logger.debug(f"emote {emote_id}: malformed range {position!r}, skipped")
                continue
            start, end = bounds
            tag = emote_img(
                TWITCH_EMOTE_URL.format(emote_id=emote_id),
                _utf16_slice(text, start, end),
                "twitch-emote",
            )
            # later entries overwrite earlier ones on shared indices
            for i in range(start, end + 1):
                replacements[i] = tag if i == start else ""

    out = []
    unit = 0
    for ch in text:
        # quotes only need escaping inside attributes
        out.append(replacements.get(unit, html.escape(ch, quote=False)))
        unit += 2 if ord(ch) > 0xFFFF else 1
    return "".join(out)


class NameEmoteMatcher:
    """Whole-word, case-sensitive matcher compiled once per name catalog."""

    def __init__(self, catalog: Optional[Mapping[str, str]] = None, css_class: str = "seventv-emote"):
        self.css_class = css_class
        self._emotes: Dict[str, Tuple[str, str]] = {}  # escaped name -> (name, url)
        alternatives = []
        for name, url in (catalog or {}).items():
            if not isinstance(name, str) or not name or not isinstance(url, str):
                logger.debug(f"name emote {name!r}: invalid entry, skipped")
                continue
            escaped = html.escape(name, quote=False)
            try:
                re.compile(rf"(?<!\w){re.escape(escaped)}(?!\w)")
            except re.error as e:
                logger.warning(f"name emote {name!r}: matcher build failed ({e}), skipped")
                continue
            self._emotes[escaped] = (name, url)
            alternatives.append(escaped)

        # longest first so "catJAM" wins over "cat" at the same offset; names
        # come before character references so an escaped name like "&lt;3"
        # matches whole, while "amp" never fires inside "&amp;"
        alternatives.sort(key=len, reverse=True)
        self._pattern = (
            re.compile(
                rf"({_TAG_PATTERN})"
                r"|(?<!\w)(?P<name>" + "|".join(re.escape(a) for a in alternatives) + r")(?!\w)"
                rf"|({_CHARREF_PATTERN})"
            )
            if alternatives
            else None
        )

    def __len__(self) -> int:
        return len(self._emotes)

    def _replace(self, match: re.Match) -> str:
        escaped = match.group("name")
        if escaped is None:
            return match.group(0)
        name, url = self._emotes[escaped]
        return emote_img(url, name, self.css_class)

    def substitute(self, text: str) -> str:
        if self._pattern is None:
            return text
        return self._pattern.sub(self._replace, text)


class EmoteResolver:
    """Resolver bound to one session's name catalog."""

    def __init__(self, name_catalog: Optional[Mapping[str, str]] = None):
        self.set_name_catalog(name_catalog)

    def set_name_catalog(self, name_catalog: Optional[Mapping[str, str]]) -> None:
        self.matcher = NameEmoteMatcher(name_catalog)
        logger.info(f"name emote catalog loaded: {len(self.matcher)} emotes")

    def resolve(self, text: str, positions: Optional[Mapping] = None) -> str:
        return self.matcher.substitute(substitute_positions(text, positions))


def resolve(
    text: str,
    position_catalog: Optional[Mapping] = None,
    name_catalog: Optional[Mapping[str, str]] = None,
) -> str:
    """One-shot resolve; builds the name matcher on every call."""
    return NameEmoteMatcher(name_catalog).substitute(substitute_positions(text, position_catalog))
