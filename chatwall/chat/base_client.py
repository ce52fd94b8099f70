"""
Transport side of the overlay: the raw chat message and the client contract.

A ChatClient owns one connection to one channel and hands every chat line to
its on_message callback as a ChatMessage. Reconnect policy and callback
dispatch live here so platform clients only implement connect/listen.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

MessageCallback = Callable[["ChatMessage"], Any]


@dataclass(frozen=True)
class ChatMessage:
    """One received chat line. Never mutated after parsing."""
    user: str
    text: str
    timestamp: datetime
    channel_id: str
    platform: str
    color: str = "#ffffff"
    emote_positions: Dict[str, List[str]] = field(default_factory=dict)  # {emote_id: ["start-end", ...]}
    badges: Dict[str, str] = field(default_factory=dict)  # {"moderator": "1", ...}
    message_id: Optional[str] = None
    user_id: Optional[str] = None
    is_action: bool = False  # /me


class ChatClient(ABC):
    """Single-channel chat connection with backoff reconnects"""

    def __init__(
        self,
        channel_id: str,
        on_message: Optional[MessageCallback] = None,
        reconnect_delay: float = 5.0,
        max_reconnect_attempts: int = 10,
    ):
        """
        Args:
            channel_id: channel to join
            on_message: called with each ChatMessage; may be a coroutine function
            reconnect_delay: first backoff delay in seconds, doubled per attempt
            max_reconnect_attempts: consecutive failed attempts before listen() gives up
        """
        self.channel_id = channel_id
        self.on_message = on_message
        self.reconnect_delay = reconnect_delay
        self.max_reconnect_attempts = max_reconnect_attempts

        self.is_connected = False
        self.reconnect_attempts = 0
        self._running = False

    @property
    @abstractmethod
    def platform_name(self) -> str:
        """Short name used in log lines, e.g. 'twitch'"""

    @abstractmethod
    async def connect(self):
        """Open the connection and join the channel; raises on failure"""

    @abstractmethod
    async def disconnect(self):
        ...

    @abstractmethod
    async def listen(self):
        """Receive until stop() or until reconnects are exhausted"""

    async def _reconnect(self) -> bool:
        if self.reconnect_attempts >= self.max_reconnect_attempts:
            logger.error(
                f"[{self.platform_name}] giving up after "
                f"{self.max_reconnect_attempts} reconnect attempts"
            )
            return False

        delay = self.reconnect_delay * (2 ** self.reconnect_attempts)
        self.reconnect_attempts += 1
        logger.info(
            f"[{self.platform_name}] reconnect "
            f"{self.reconnect_attempts}/{self.max_reconnect_attempts} in {delay}s"
        )
        await asyncio.sleep(delay)

        try:
            await self.connect()
        except Exception as e:
            logger.error(f"[{self.platform_name}] reconnect failed: {e}")
            return False
        return True

    async def _dispatch(self, message: ChatMessage) -> None:
        """Run the callback; its failures are logged, never raised into listen()."""
        if not self.on_message:
            return
        try:
            result = self.on_message(message)
            if asyncio.iscoroutine(result):
                await result
        except Exception as e:
            logger.error(f"[{self.platform_name}] on_message failed: {e}", exc_info=True)

    async def start(self):
        await self.connect()
        await self.listen()

    async def stop(self):
        self._running = False
        await self.disconnect()
