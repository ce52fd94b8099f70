"""
Client for a user-data proxy (GET /twitch/userdata?username=...).

The proxy holds the Twitch app credentials and answers with
{"userId": "...", "twitchEmotes": {name: url}}; chatwall's own overlay
server can play that role (see chatwall.overlay.server).
"""

import logging
from typing import Optional

import httpx

from .twitch_api import UserData, handle_response

logger = logging.getLogger(__name__)


class UserDataClient:
    """User-data proxy client"""

    def __init__(self, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.transport = transport

    async def fetch_user_data(self, username: str) -> UserData:
        """
        Raises:
            HttpError: proxy answered with an error status
        """
        async with httpx.AsyncClient(transport=self.transport, timeout=10.0) as client:
            response = await client.get(
                f"{self.base_url}/twitch/userdata",
                params={"username": username},
            )
            data = handle_response(response, "Failed to fetch Twitch data")

        user_id = data.get("userId")
        return UserData(
            user_id=str(user_id) if user_id is not None else None,
            twitch_emotes=dict(data.get("twitchEmotes") or {}),
        )
