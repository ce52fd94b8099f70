"""
Overlay settings from environment variables (.env is loaded by the runner).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = 1
DEFAULT_MIN_WORDS = 1
DEFAULT_MAX_MESSAGES = 100  # per column
DEFAULT_PORT = 8765
DEFAULT_TOKEN_TTL = 86400


def _env_int(env: Mapping[str, str], key: str, default: int, minimum: int) -> int:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"{key}={raw!r} is not an integer, using {default}")
        return default
    return max(minimum, value)


def _env_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = (env.get(key) or "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _env_str(env: Mapping[str, str], key: str) -> Optional[str]:
    return (env.get(key) or "").strip() or None


@dataclass
class OverlayConfig:
    """Overlay session settings"""
    channel: Optional[str] = None
    columns: int = DEFAULT_COLUMNS
    min_words: int = DEFAULT_MIN_WORDS
    max_messages: int = DEFAULT_MAX_MESSAGES
    bump_repeats: bool = False  # move repeated messages to the column bottom
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    twitch_client_id: Optional[str] = None
    twitch_client_secret: Optional[str] = None
    userdata_url: Optional[str] = None  # user-data proxy, used when no client id/secret
    token_ttl: int = DEFAULT_TOKEN_TTL

    @property
    def has_twitch_credentials(self) -> bool:
        return bool(self.twitch_client_id and self.twitch_client_secret)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "OverlayConfig":
        env = os.environ if environ is None else environ
        channel = _env_str(env, "TWITCH_CHANNEL")
        return cls(
            channel=channel.lstrip("#").lower() if channel else None,
            columns=_env_int(env, "OVERLAY_COLUMNS", DEFAULT_COLUMNS, 1),
            min_words=_env_int(env, "OVERLAY_MIN_WORDS", DEFAULT_MIN_WORDS, 0),
            max_messages=_env_int(env, "OVERLAY_MAX_MESSAGES", DEFAULT_MAX_MESSAGES, 1),
            bump_repeats=_env_bool(env, "OVERLAY_BUMP_REPEATS", False),
            host=_env_str(env, "OVERLAY_HOST") or "127.0.0.1",
            port=_env_int(env, "OVERLAY_PORT", DEFAULT_PORT, 1),
            twitch_client_id=_env_str(env, "TWITCH_CLIENT_ID"),
            twitch_client_secret=_env_str(env, "TWITCH_CLIENT_SECRET"),
            userdata_url=_env_str(env, "TWITCH_USERDATA_URL"),
            token_ttl=_env_int(env, "TWITCH_TOKEN_TTL", DEFAULT_TOKEN_TTL, 1),
        )
