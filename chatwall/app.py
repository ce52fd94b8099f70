"""
Overlay session: one channel, one pipeline, one overlay state.

Chat client -> filters -> ChatPipeline -> OverlayState, plus runtime settings.
Everything here runs on a single event loop; nothing else mutates the
pipeline.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from chatwall.chat import ChatMessage, ChatParser, FilterConfig
from chatwall.overlay.state import OverlayState
from chatwall.pipeline import ChatPipeline, ProcessResult, User
from chatwall.providers import TwitchAPI, UserData, UserDataClient, fetch_7tv_emotes
from chatwall.utils.config import OverlayConfig

logger = logging.getLogger(__name__)


class OverlaySession:
    """Ties the chat feed, the pipeline and the overlay state together"""

    def __init__(
        self,
        config: OverlayConfig,
        twitch_api: Optional[TwitchAPI] = None,
        userdata_client: Optional[UserDataClient] = None,
        seventv_fetcher: Callable[[str], Awaitable[Dict[str, str]]] = fetch_7tv_emotes,
    ):
        """
        Args:
            config: session settings
            twitch_api: Helix client (direct lookups, also backs the proxy endpoint)
            userdata_client: user-data proxy client, used when twitch_api is None
            seventv_fetcher: coroutine user_id -> {name: url}
        """
        self.config = config
        self.twitch_api = twitch_api
        self.userdata_client = userdata_client
        self.seventv_fetcher = seventv_fetcher
        self.user_id: Optional[str] = None

        self.parser = ChatParser(FilterConfig(min_words=config.min_words))
        self.pipeline = ChatPipeline(
            columns=config.columns,
            capacity=config.max_messages,
            bump_repeats=config.bump_repeats,
        )
        self.state = OverlayState(columns=config.columns, bump_repeats=config.bump_repeats)

    @classmethod
    def from_config(cls, config: OverlayConfig) -> "OverlaySession":
        twitch_api = None
        userdata_client = None
        if config.has_twitch_credentials:
            twitch_api = TwitchAPI(
                config.twitch_client_id,
                config.twitch_client_secret,
                token_ttl=config.token_ttl,
            )
        elif config.userdata_url:
            userdata_client = UserDataClient(config.userdata_url)
        return cls(config, twitch_api=twitch_api, userdata_client=userdata_client)

    async def load_catalogs(self, username: Optional[str] = None) -> Dict[str, str]:
        """
        Fetch channel + 7TV emotes once per session and install the name catalog.
        Failures degrade to fewer emotes, never to an error.

        Returns:
            the installed name catalog ({name: url})
        """
        username = username or self.config.channel
        source = self.twitch_api or self.userdata_client
        user_data = UserData(user_id=None)

        if source is None:
            logger.warning("No Twitch credentials or user-data URL; channel and 7TV emotes disabled")
        elif username:
            try:
                user_data = await source.fetch_user_data(username)
            except Exception as e:
                logger.error(f"User data fetch failed for {username}: {e}")

        seventv: Dict[str, str] = {}
        if user_data.user_id:
            seventv = await self.seventv_fetcher(user_data.user_id)

        self.user_id = user_data.user_id
        # 7TV wins on name clashes
        catalog = {**user_data.twitch_emotes, **seventv}
        self.pipeline.set_name_catalog(catalog)
        logger.info(
            f"Emote catalogs for {username}: {len(user_data.twitch_emotes)} channel, {len(seventv)} 7TV"
        )
        return catalog

    def on_message(self, message: ChatMessage) -> Optional[ProcessResult]:
        """Chat client callback. Returns None for filtered or failed messages."""
        if not self.parser.filter(message):
            return None

        try:
            result = self.pipeline.process(
                message.text,
                User(name=message.user, color=message.color),
                message.emote_positions,
            )
        except Exception as e:
            logger.exception(f"Pipeline failed for message from {message.user}: {e}")
            return None

        self.state.apply(result)
        return result

    def settings(self) -> Dict[str, Any]:
        return {
            "columns": self.pipeline.column_count,
            "min_words": self.parser.filter_config.min_words,
            "max_messages": self.config.max_messages,
        }

    def apply_settings(self, columns: Optional[int] = None, min_words: Optional[int] = None) -> Dict[str, Any]:
        """Runtime reconfiguration; a column change re-lays out displayed entries."""
        if min_words is not None:
            self.parser.filter_config.min_words = max(0, min_words)
        if columns is not None and columns != self.pipeline.column_count:
            self.pipeline.reconfigure(columns)
            self.state.rebuild(self.pipeline.columns())
        return self.settings()

    def clear(self) -> None:
        self.pipeline.clear()
        self.state.rebuild(self.pipeline.columns())
