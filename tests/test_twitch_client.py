from __future__ import annotations

import asyncio
from typing import List

import pytest

from chatwall.chat import ChatClientFactory, ChatMessage, TwitchChatClient
from chatwall.chat import twitch_client as twitch_client_module
from chatwall.chat.base_client import ChatClient

PRIVMSG = "@color=#00FF00;emotes= :fan!fan@fan.tmi.twitch.tv PRIVMSG #somechannel :{text}"


class FakeWebSocket:
    def __init__(self, frames: List[str], client: TwitchChatClient | None = None) -> None:
        self.frames = list(frames)
        self.sent: List[str] = []
        self.closed = False
        self.client = client

    async def send(self, data: str) -> None:
        self.sent.append(data)

    async def recv(self) -> str:
        if not self.frames:
            # nothing left to read: end the listen loop
            self.client._running = False
            return ""
        return self.frames.pop(0)

    async def close(self) -> None:
        self.closed = True


def test_connect_logs_in_anonymously(monkeypatch: pytest.MonkeyPatch) -> None:
    ws = FakeWebSocket([])
    urls: List[str] = []

    async def fake_connect(url: str) -> FakeWebSocket:
        urls.append(url)
        return ws

    monkeypatch.setattr(twitch_client_module.websockets, "connect", fake_connect)
    client = TwitchChatClient("#SomeChannel")
    asyncio.run(client.connect())

    assert urls == ["wss://irc-ws.chat.twitch.tv:443"]
    assert client.is_connected
    assert ws.sent[0] == "CAP REQ :twitch.tv/tags twitch.tv/commands"
    assert ws.sent[2].startswith("NICK justinfan")
    assert ws.sent[-1] == "JOIN #somechannel"


def test_listen_dispatches_messages_and_answers_ping() -> None:
    received: List[ChatMessage] = []
    client = TwitchChatClient("somechannel", on_message=received.append)
    ws = FakeWebSocket(
        [
            "PING :tmi.twitch.tv",
            PRIVMSG.format(text="first") + "\r\n" + PRIVMSG.format(text="second") + "\r\n",
        ],
        client,
    )
    client.ws = ws
    client.is_connected = True

    asyncio.run(client.listen())

    assert ws.sent == ["PONG :tmi.twitch.tv"]
    assert [m.text for m in received] == ["first", "second"]
    assert received[0].color == "#00FF00"
    assert received[0].user == "fan"


def test_async_and_failing_callbacks() -> None:
    received: List[str] = []
    calls = {"n": 0}

    async def on_message(message: ChatMessage) -> None:
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("boom")
        received.append(message.text)

    client = TwitchChatClient("somechannel", on_message=on_message)
    client.ws = FakeWebSocket(
        [PRIVMSG.format(text="first"), PRIVMSG.format(text="second")],
        client,
    )
    client.is_connected = True

    asyncio.run(client.listen())
    assert received == ["second"]


def test_reconnect_request_closes_socket() -> None:
    client = TwitchChatClient("somechannel")
    ws = FakeWebSocket([], client)
    client.ws = ws
    client.is_connected = True

    asyncio.run(client._handle_line(":tmi.twitch.tv RECONNECT"))

    assert ws.closed
    assert not client.is_connected


def test_reconnect_gives_up_after_max_attempts() -> None:
    client = TwitchChatClient("somechannel", max_reconnect_attempts=0)
    assert asyncio.run(client._reconnect()) is False


def test_factory() -> None:
    client = ChatClientFactory.create("twitch", channel_id="somechannel", reconnect_delay=1.0)
    assert isinstance(client, TwitchChatClient)
    assert client.platform_name == "twitch"
    assert "twitch" in ChatClientFactory.get_supported_platforms()

    with pytest.raises(ValueError):
        ChatClientFactory.create("nowhere", channel_id="x")
    with pytest.raises(TypeError):
        ChatClientFactory.register_platform("bogus", dict)


def test_register_platform(monkeypatch: pytest.MonkeyPatch) -> None:
    class DummyClient(ChatClient):
        platform_name = "dummy"

        async def connect(self):
            pass

        async def disconnect(self):
            pass

        async def listen(self):
            pass

    monkeypatch.setattr(ChatClientFactory, "_platforms", dict(ChatClientFactory._platforms))
    ChatClientFactory.register_platform("dummy", DummyClient)
    assert isinstance(ChatClientFactory.create("dummy", channel_id="x"), DummyClient)
