"""
Twitch Helix API helpers
App access token (client credentials) + user lookup + channel emotes.

Reference: https://dev.twitch.tv/docs/authentication/getting-tokens-oauth/
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL = 86400  # seconds


class HttpError(Exception):
    """Upstream HTTP failure carrying the status to report"""

    def __init__(self, message: str, status: int = 500):
        super().__init__(message)
        self.status = status


@dataclass
class TokenCache:
    """App access token with its acquisition time"""
    value: Optional[str] = None
    acquired_at: float = 0.0
    ttl: float = DEFAULT_TOKEN_TTL

    def is_expired(self, now: float) -> bool:
        return not self.value or (now - self.acquired_at) > self.ttl

    def update(self, value: str, now: float) -> None:
        self.value = value
        self.acquired_at = now


@dataclass
class UserData:
    """Broadcaster id + channel emote catalog ({name: url})"""
    user_id: Optional[str]
    twitch_emotes: Dict[str, str] = field(default_factory=dict)


def handle_response(response: httpx.Response, error_prefix: str) -> Any:
    if not response.is_success:
        raise HttpError(f"{error_prefix}: {response.text}", response.status_code)
    return response.json()


class TwitchAPI:
    """Twitch Helix client"""

    TOKEN_URL = "https://id.twitch.tv/oauth2/token"
    USERS_URL = "https://api.twitch.tv/helix/users"
    EMOTES_URL = "https://api.twitch.tv/helix/chat/emotes"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        token_ttl: float = DEFAULT_TOKEN_TTL,
        clock: Callable[[], float] = time.time,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            client_id: Twitch application Client ID
            client_secret: Twitch application Client Secret
            token_ttl: seconds an app token is reused before refreshing
            clock: time source for token expiry (injectable for tests)
            transport: httpx transport override (tests)
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.clock = clock
        self.transport = transport
        self.token_cache = TokenCache(ttl=token_ttl)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport, timeout=10.0)

    def _headers(self, token: str) -> Dict[str, str]:
        return {
            "Client-ID": self.client_id,
            "Authorization": f"Bearer {token}",
        }

    async def refresh_token(self) -> str:
        """
        Cached app access token, refreshed once the TTL has passed

        Raises:
            HttpError: token endpoint failure
        """
        if not self.token_cache.is_expired(self.clock()):
            return self.token_cache.value

        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": "client_credentials",
        }
        async with self._client() as client:
            response = await client.post(self.TOKEN_URL, data=data)
            result = handle_response(response, "Token refresh failed")

        self.token_cache.update(result["access_token"], self.clock())
        logger.info("Twitch app token refreshed")
        return self.token_cache.value

    async def get_user(self, username: str) -> Dict[str, Any]:
        """
        Helix user by login

        Raises:
            HttpError: 404 when the user does not exist
        """
        token = await self.refresh_token()
        async with self._client() as client:
            response = await client.get(
                self.USERS_URL,
                params={"login": username},
                headers=self._headers(token),
            )
            data = handle_response(response, "User fetch failed")

        users = data.get("data") or []
        if not users:
            raise HttpError("User not found", 404)
        return users[0]

    async def get_emotes(self, user_id: str) -> Dict[str, str]:
        """Channel emotes as {name: 1x image url}"""
        token = await self.refresh_token()
        async with self._client() as client:
            response = await client.get(
                self.EMOTES_URL,
                params={"broadcaster_id": user_id},
                headers=self._headers(token),
            )
            data = handle_response(response, "Emotes fetch failed")

        return {
            emote["name"]: emote["images"]["url_1x"]
            for emote in data.get("data") or []
            if emote.get("name") and emote.get("images", {}).get("url_1x")
        }

    async def fetch_user_data(self, username: str) -> UserData:
        user = await self.get_user(username)
        emotes = await self.get_emotes(user["id"])
        logger.info(f"user data for {username}: id={user['id']}, {len(emotes)} channel emotes")
        return UserData(user_id=str(user["id"]), twitch_emotes=emotes)
