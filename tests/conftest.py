from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

import pytest

from chatwall.app import OverlaySession
from chatwall.chat import ChatMessage
from chatwall.providers import HttpError, UserData
from chatwall.utils import OverlayConfig


class FakeUserSource:
    """Stands in for TwitchAPI / UserDataClient."""

    def __init__(self, data: Optional[UserData] = None, error: Optional[Exception] = None) -> None:
        self.data = data or UserData(user_id="1234", twitch_emotes={"chanHype": "https://static/hype.png"})
        self.error = error
        self.requested: List[str] = []

    async def fetch_user_data(self, username: str) -> UserData:
        self.requested.append(username)
        if self.error is not None:
            raise self.error
        return self.data


def make_message(
    text: str,
    user: str = "viewer",
    color: str = "#00ff00",
    emote_positions: Optional[Dict[str, List[str]]] = None,
    badges: Optional[Dict[str, str]] = None,
) -> ChatMessage:
    return ChatMessage(
        user=user,
        text=text,
        timestamp=datetime(2024, 1, 1),
        channel_id="somechannel",
        platform="twitch",
        color=color,
        emote_positions=emote_positions or {},
        badges=badges or {},
    )


@pytest.fixture
def config() -> OverlayConfig:
    return OverlayConfig(channel="somechannel", columns=2, min_words=1, max_messages=3)


@pytest.fixture
def session(config: OverlayConfig) -> OverlaySession:
    return OverlaySession(config)


@pytest.fixture
def not_found_source() -> FakeUserSource:
    return FakeUserSource(error=HttpError("User not found", 404))
