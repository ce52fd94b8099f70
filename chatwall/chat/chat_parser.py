"""
Chat message parsing and filtering
IRCv3 (Twitch) lines -> ChatMessage, plus the upstream filters that keep
commands, privileged senders and short messages off the overlay.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from .base_client import ChatMessage

logger = logging.getLogger(__name__)

_TAG_ESCAPES = {":": ";", "s": " ", "\\": "\\", "r": "\r", "n": "\n"}
_ACTION_PREFIX = "\x01ACTION "


@dataclass
class IrcMessage:
    """One parsed IRC line"""
    command: str
    params: List[str] = field(default_factory=list)
    tags: Dict[str, str] = field(default_factory=dict)
    prefix: Optional[str] = None

    @property
    def trailing(self) -> str:
        return self.params[-1] if self.params else ""


@dataclass
class FilterConfig:
    """Filter settings"""
    min_words: int = 1  # minimum whitespace-separated words
    command_prefix: str = "!"  # bot commands (e.g. !uptime)
    blocked_badges: Tuple[str, ...] = ("broadcaster", "moderator")


def unescape_tag_value(value: str) -> str:
    out = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch == "\\":
            if i + 1 < len(value):
                nxt = value[i + 1]
                out.append(_TAG_ESCAPES.get(nxt, nxt))
            # a lone trailing backslash is dropped
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def parse_irc(line: str) -> Optional[IrcMessage]:
    """
    Parse a raw IRC line.

    Args:
        line: one line without the trailing CRLF

    Returns:
        IrcMessage or None for empty input
    """
    line = line.rstrip("\r\n")
    if not line:
        return None

    tags: Dict[str, str] = {}
    if line.startswith("@"):
        raw_tags, _, line = line[1:].partition(" ")
        for item in raw_tags.split(";"):
            if not item:
                continue
            key, _, value = item.partition("=")
            tags[key] = unescape_tag_value(value)

    prefix = None
    if line.startswith(":"):
        prefix, _, line = line[1:].partition(" ")

    trailing = None
    if " :" in line:
        line, _, trailing = line.partition(" :")
    elif line.startswith(":"):
        trailing = line[1:]
        line = ""

    parts = line.split()
    if not parts:
        return None
    params = parts[1:]
    if trailing is not None:
        params.append(trailing)
    return IrcMessage(command=parts[0].upper(), params=params, tags=tags, prefix=prefix)


def parse_emote_positions(value: str) -> Dict[str, List[str]]:
    """'25:0-4,12-16/1902:6-10' -> {'25': ['0-4', '12-16'], '1902': ['6-10']}"""
    positions: Dict[str, List[str]] = {}
    for chunk in (value or "").split("/"):
        emote_id, sep, ranges = chunk.partition(":")
        if not sep or not emote_id:
            continue
        positions.setdefault(emote_id, []).extend(r for r in ranges.split(",") if r)
    return positions


def parse_badges(value: str) -> Dict[str, str]:
    """'broadcaster/1,subscriber/12' -> {'broadcaster': '1', 'subscriber': '12'}"""
    badges: Dict[str, str] = {}
    for chunk in (value or "").split(","):
        if not chunk:
            continue
        name, _, version = chunk.partition("/")
        badges[name] = version
    return badges


def _parse_timestamp(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now()
    try:
        return datetime.fromtimestamp(int(value) / 1000)
    except (TypeError, ValueError, OSError):
        return datetime.now()


class ChatParser:
    """Chat message parsing and filtering"""

    def __init__(self, filter_config: Optional[FilterConfig] = None):
        """
        Args:
            filter_config: filter settings (defaults when None)
        """
        self.filter_config = filter_config or FilterConfig()

    def parse(self, raw: "IrcMessage | str", platform: str = "twitch") -> Optional[ChatMessage]:
        """
        IRC PRIVMSG -> ChatMessage

        Args:
            raw: parsed IrcMessage or a raw line
            platform: platform name (default: twitch)

        Returns:
            ChatMessage, or None for anything that is not a chat line
        """
        irc = parse_irc(raw) if isinstance(raw, str) else raw
        if irc is None or irc.command != "PRIVMSG" or len(irc.params) < 2:
            return None

        tags = irc.tags
        text = irc.trailing
        is_action = False
        if text.startswith(_ACTION_PREFIX) and text.endswith("\x01"):
            text = text[len(_ACTION_PREFIX):-1]
            is_action = True

        login = (irc.prefix or "").split("!", 1)[0]
        return ChatMessage(
            user=login or tags.get("display-name", "").lower(),
            text=text,
            timestamp=_parse_timestamp(tags.get("tmi-sent-ts")),
            channel_id=irc.params[0].lstrip("#"),
            platform=platform,
            color=tags.get("color") or "#ffffff",
            emote_positions=parse_emote_positions(tags.get("emotes", "")),
            badges=parse_badges(tags.get("badges", "")),
            message_id=tags.get("id"),
            user_id=tags.get("user-id"),
            is_action=is_action,
        )

    def filter(self, message: ChatMessage) -> bool:
        """
        Message filtering

        Args:
            message: message to check

        Returns:
            True: pass, False: blocked
        """
        prefix = self.filter_config.command_prefix
        if prefix and message.text.startswith(prefix):
            logger.debug(f"command blocked: {message.text[:50]}")
            return False

        for badge in self.filter_config.blocked_badges:
            if badge in message.badges:
                logger.debug(f"privileged sender blocked: {message.user} ({badge})")
                return False

        if len(message.text.split()) < self.filter_config.min_words:
            return False

        return True

    def parse_and_filter(self, raw: "IrcMessage | str", platform: str = "twitch") -> Optional[ChatMessage]:
        """
        Parse and filter in one go

        Returns:
            parsed and accepted ChatMessage, or None
        """
        message = self.parse(raw, platform=platform)
        if message and self.filter(message):
            return message
        return None
