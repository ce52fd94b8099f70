"""
Twitch chat -> deduplicated multi-column overlay

Set TWITCH_CHANNEL in .env, plus either TWITCH_CLIENT_ID/TWITCH_CLIENT_SECRET
(direct Helix lookups) or TWITCH_USERDATA_URL (user-data proxy) for channel
emotes. Without either, the overlay still runs with Twitch-tagged emotes only.

Run: python examples/twitch_overlay_example.py  (from the project root)
Overlay: add a browser source in OBS pointing at http://127.0.0.1:8765/
Runtime settings: POST /api/settings {"columns": 3, "min_words": 2}
"""

import sys
from pathlib import Path

# put the project root on sys.path so 'import chatwall' works without installing
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import asyncio
import logging

import uvicorn
from dotenv import load_dotenv

from chatwall.app import OverlaySession
from chatwall.chat import ChatClientFactory
from chatwall.overlay.server import create_app
from chatwall.utils import OverlayConfig, setup_logging

load_dotenv(Path(__file__).resolve().parent.parent / ".env")
LOG_DIR = setup_logging()
logger = logging.getLogger(__name__)


async def main():
    config = OverlayConfig.from_env()
    if not config.channel:
        print("Set TWITCH_CHANNEL in .env (e.g. TWITCH_CHANNEL=zackrawrr)")
        return

    session = OverlaySession.from_config(config)
    await session.load_catalogs()

    server = uvicorn.Server(
        uvicorn.Config(
            create_app(session),
            host=config.host,
            port=config.port,
            log_level="warning",
        )
    )
    server_task = asyncio.create_task(server.serve())

    client = ChatClientFactory.create(
        platform="twitch",
        channel_id=config.channel,
        on_message=session.on_message,
        reconnect_delay=5.0,
        max_reconnect_attempts=10,
    )

    print(f"Platform: {client.platform_name}, channel: {config.channel}")
    print(f"Overlay: http://{config.host}:{config.port}/ ({config.columns} columns)")
    print(f"Logs: {LOG_DIR}")
    print("Receiving chat... (Ctrl+C to quit)\n")
    try:
        await client.start()
    except KeyboardInterrupt:
        pass
    finally:
        await client.stop()
        server.should_exit = True
        try:
            await server_task
        except asyncio.CancelledError:
            pass


if __name__ == "__main__":
    asyncio.run(main())
