"""
Chat ingestion
Receives chat from streaming platforms
"""

from .base_client import ChatClient, ChatMessage
from .twitch_client import TwitchChatClient
from .chat_parser import ChatParser, FilterConfig, parse_irc
from .client_factory import ChatClientFactory

__all__ = [
    "ChatClient",
    "ChatMessage",
    "TwitchChatClient",
    "ChatParser",
    "FilterConfig",
    "parse_irc",
    "ChatClientFactory",
]
