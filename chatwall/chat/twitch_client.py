"""
Twitch chat client (IRC over WebSocket)
Joins a channel anonymously and receives chat messages with IRCv3 tags.

Reference: https://dev.twitch.tv/docs/chat/irc/
"""

import asyncio
import logging
import random
from typing import Optional

import websockets
from websockets.exceptions import ConnectionClosed

from .base_client import ChatClient, MessageCallback
from .chat_parser import ChatParser, parse_irc

logger = logging.getLogger(__name__)

TWITCH_IRC_URL = "wss://irc-ws.chat.twitch.tv:443"


class TwitchChatClient(ChatClient):
    """Twitch IRC WebSocket client

    Anonymous login (justinfan<digits>) is read-only, which is all the
    overlay needs.
    """

    @property
    def platform_name(self) -> str:
        """Platform name"""
        return "twitch"

    def __init__(
        self,
        channel_id: str,
        on_message: Optional[MessageCallback] = None,
        reconnect_delay: float = 5.0,
        max_reconnect_attempts: int = 10,
        url: str = TWITCH_IRC_URL,
        parser: Optional[ChatParser] = None,
    ):
        """
        Args:
            channel_id: channel login (without '#')
            on_message: callback for every received message
            reconnect_delay: base reconnect delay (seconds)
            max_reconnect_attempts: reconnect attempts before giving up
            url: IRC WebSocket endpoint
            parser: IRC -> ChatMessage parser
        """
        super().__init__(channel_id.lstrip("#").lower(), on_message, reconnect_delay, max_reconnect_attempts)
        self.url = url
        self.parser = parser or ChatParser()
        self.nick = f"justinfan{random.randint(10000, 99999)}"
        self.ws = None

    async def connect(self):
        """WebSocket connect + login + join"""
        try:
            logger.info(f"[{self.platform_name}] connecting to {self.url}")
            self.ws = await websockets.connect(self.url)
            await self.ws.send("CAP REQ :twitch.tv/tags twitch.tv/commands")
            await self.ws.send("PASS SCHMOOPIIE")
            await self.ws.send(f"NICK {self.nick}")
            await self.ws.send(f"JOIN #{self.channel_id}")

            self.is_connected = True
            self.reconnect_attempts = 0
            logger.info(f"[{self.platform_name}] joined #{self.channel_id} as {self.nick}")

        except Exception as e:
            logger.error(f"[{self.platform_name}] connect failed: {e}")
            self.is_connected = False
            raise

    async def disconnect(self):
        """WebSocket close"""
        if self.ws:
            await self.ws.close()
            self.is_connected = False
            logger.info(f"[{self.platform_name}] connection closed")

    async def _handle_line(self, line: str) -> None:
        irc = parse_irc(line)
        if irc is None:
            return

        if irc.command == "PING":
            await self.ws.send(f"PONG :{irc.trailing}")
        elif irc.command == "RECONNECT":
            # server asks us to reconnect; listen() picks it up
            logger.warning(f"[{self.platform_name}] server requested reconnect")
            self.is_connected = False
            await self.ws.close()
        elif irc.command == "NOTICE":
            logger.warning(f"[{self.platform_name}] NOTICE: {irc.trailing}")
        elif irc.command == "PRIVMSG":
            message = self.parser.parse(irc, platform=self.platform_name)
            if message:
                await self._dispatch(message)

    async def listen(self):
        """Receive loop"""
        self._running = True

        while self._running:
            try:
                if not self.is_connected:
                    exhausted = self.reconnect_attempts >= self.max_reconnect_attempts
                    if not await self._reconnect() and exhausted:
                        break
                    continue

                frame = await self.ws.recv()
                if isinstance(frame, bytes):
                    frame = frame.decode("utf-8", "replace")
                # one frame may carry several CRLF-separated lines
                for line in frame.split("\r\n"):
                    if line:
                        await self._handle_line(line)

            except ConnectionClosed as e:
                if self._running:
                    logger.warning(f"[{self.platform_name}] connection closed: {e}")
                self.is_connected = False
            except Exception as e:
                logger.error(f"[{self.platform_name}] unexpected error: {e}")
                self.is_connected = False
                await asyncio.sleep(1)
