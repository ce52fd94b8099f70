"""Emote catalog and user lookups (Twitch Helix, user-data proxy, 7TV)"""
from .seventv import fetch_7tv_emotes
from .twitch_api import HttpError, TokenCache, TwitchAPI, UserData
from .userdata import UserDataClient

__all__ = [
    "HttpError",
    "TokenCache",
    "TwitchAPI",
    "UserData",
    "UserDataClient",
    "fetch_7tv_emotes",
]
