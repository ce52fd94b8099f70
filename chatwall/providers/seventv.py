"""
7TV channel emotes -> name catalog ({name: url}).

Every failure mode degrades to an empty catalog; the overlay keeps running
without 7TV emotes.
"""

import logging
from typing import Dict, Optional

import httpx

logger = logging.getLogger(__name__)

SEVENTV_USER_URL = "https://7tv.io/v3/users/twitch/{user_id}"
SEVENTV_EMOTE_URL = "https://cdn.7tv.app/emote/{emote_id}/1x.webp"


async def fetch_7tv_emotes(
    user_id: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, str]:
    """
    Args:
        user_id: Twitch user id of the channel
        transport: httpx transport override (tests)

    Returns:
        {emote name: 1x webp url}, {} on any failure
    """
    try:
        async with httpx.AsyncClient(transport=transport, timeout=10.0) as client:
            response = await client.get(SEVENTV_USER_URL.format(user_id=user_id))

        if response.status_code != 200:
            logger.warning(
                f"7TV emotes fetch failed with status {response.status_code}. "
                "Continuing without 7TV emotes."
            )
            return {}

        data = response.json()
        emotes = ((data or {}).get("emote_set") or {}).get("emotes")
        if not emotes:
            logger.warning("7TV emote set is empty or missing. Continuing without 7TV emotes.")
            return {}

        return {
            emote["name"]: SEVENTV_EMOTE_URL.format(emote_id=emote["id"])
            for emote in emotes
            if emote.get("name") and emote.get("id")
        }
    except Exception as e:
        logger.error(f"7TV emotes fetch error: {e}")
        return {}
