"""
Platform name -> ChatClient class registry.
"""

from typing import Dict, List, Type

from .base_client import ChatClient
from .twitch_client import TwitchChatClient


class ChatClientFactory:
    """Builds transport clients by platform name"""

    _platforms: Dict[str, Type[ChatClient]] = {"twitch": TwitchChatClient}

    @classmethod
    def create(cls, platform: str, channel_id: str, **kwargs) -> ChatClient:
        """
        Args:
            platform: registered platform name, e.g. "twitch"
            channel_id: channel to join
            **kwargs: forwarded to the client (on_message, reconnect_delay, ...)

        Raises:
            ValueError: platform is not registered
        """
        client_class = cls._platforms.get(platform)
        if client_class is None:
            raise ValueError(
                f"Unsupported platform: {platform} "
                f"(registered: {', '.join(cls.get_supported_platforms())})"
            )
        return client_class(channel_id=channel_id, **kwargs)

    @classmethod
    def register_platform(cls, platform: str, client_class: Type[ChatClient]) -> None:
        if not (isinstance(client_class, type) and issubclass(client_class, ChatClient)):
            raise TypeError(f"{client_class!r} is not a ChatClient subclass")
        cls._platforms[platform] = client_class

    @classmethod
    def get_supported_platforms(cls) -> List[str]:
        return sorted(cls._platforms)
