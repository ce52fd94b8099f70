"""
Local HTTP server for the overlay. / serves the overlay page, /api/state the JSON.
Runs in the same event loop as the chat client (see examples/twitch_overlay_example.py)
so every endpoint touches the session from the pipeline's own thread.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, Field

from chatwall.providers import HttpError

if TYPE_CHECKING:
    from chatwall.app import OverlaySession

logger = logging.getLogger(__name__)


class SettingsUpdate(BaseModel):
    columns: Optional[int] = Field(default=None, ge=1, le=32)
    min_words: Optional[int] = Field(default=None, ge=0)


def create_app(session: "OverlaySession") -> FastAPI:
    """FastAPI app bound to one overlay session."""
    app = FastAPI(title="chatwall overlay", docs_url=None, redoc_url=None)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.get("/", response_class=HTMLResponse)
    async def overlay_page():
        return HTMLResponse(OVERLAY_HTML)

    @app.get("/api/state")
    async def get_state():
        """Columns of rendered entries + current settings."""
        state = session.state.snapshot()
        state["settings"] = session.settings()
        return JSONResponse(state)

    @app.post("/api/settings")
    async def update_settings(update: SettingsUpdate):
        """Runtime column count / minimum word count."""
        settings = session.apply_settings(columns=update.columns, min_words=update.min_words)
        logger.info(f"Overlay API: settings {settings}")
        return JSONResponse(settings)

    @app.post("/api/clear")
    async def clear_chat():
        """Drop every entry from the overlay."""
        session.clear()
        logger.info("Overlay API: clear")
        return JSONResponse({"ok": True})

    @app.get("/twitch/userdata")
    async def twitch_userdata(username: Optional[str] = None):
        """User-data proxy: {"userId", "twitchEmotes"} for a channel login."""
        if session.twitch_api is None:
            return JSONResponse({"error": "Twitch credentials are not configured"}, status_code=404)
        if not username:
            return JSONResponse({"error": "Invalid endpoint or missing username"}, status_code=400)
        try:
            data = await session.twitch_api.fetch_user_data(username)
        except HttpError as e:
            logger.warning(f"userdata proxy: {e} ({e.status})")
            return JSONResponse({"error": str(e)}, status_code=e.status)
        except Exception as e:
            logger.exception(f"userdata proxy error: {e}")
            return JSONResponse({"error": str(e)}, status_code=500)
        return JSONResponse({"userId": data.user_id, "twitchEmotes": data.twitch_emotes})

    return app


OVERLAY_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>chatwall</title>
  <style>
    * { margin: 0; padding: 0; box-sizing: border-box; }
    ::-webkit-scrollbar { display: none; }
    body {
      font-family: sans-serif;
      background-color: transparent;
      height: 100vh;
      width: 100vw;
      display: flex;
      gap: 12px;
      overflow: hidden;
      color: #f1f5f9;
    }
    .column { flex: 1; min-width: 0; overflow-y: auto; padding: 8px; }
    .chat-message { margin-bottom: 6px; line-height: 1.5; word-break: break-word; }
    .username { font-weight: bold; }
    .mention { color: #bae6fd; }
    .emote { height: 1.6em; vertical-align: middle; }
    .duplicate-count { margin-left: 6px; padding: 0 6px; border-radius: 8px; font-size: 0.85em; }
  </style>
</head>
<body>
  <div id="chat-container" style="display: contents"></div>
  <script>
    var container = document.getElementById("chat-container");
    var hovering = {};
    var lastVersion = -1;

    function ensureColumns(count) {
      while (container.children.length < count) {
        var col = document.createElement("div");
        var index = container.children.length;
        col.className = "column";
        col.id = "column-" + index;
        col.addEventListener("mouseenter", function() { hovering[this.id] = true; });
        col.addEventListener("mouseleave", function() { hovering[this.id] = false; });
        container.appendChild(col);
      }
      while (container.children.length > count) {
        container.removeChild(container.lastChild);
      }
    }

    // reconcile by fingerprint instead of replacing the whole column
    function updateColumn(col, records) {
      var wanted = new Set(records.map(function(r) { return "msg-" + r.fingerprint; }));
      Array.from(col.children).forEach(function(el) {
        if (!wanted.has(el.id)) col.removeChild(el);
      });
      records.forEach(function(record) {
        var id = "msg-" + record.fingerprint;
        var el = document.getElementById(id);
        if (!el) {
          el = document.createElement("div");
          el.id = id;
          el.className = "chat-message";
        }
        if (el.dataset.count !== String(record.count) || !el.innerHTML) {
          el.innerHTML = record.html;
          el.dataset.count = String(record.count);
        }
        col.appendChild(el);
      });
      if (!hovering[col.id]) {
        col.scrollTo({ top: col.scrollHeight, behavior: "smooth" });
      }
    }

    function render() {
      fetch("/api/state")
        .then(function(r) { return r.json(); })
        .then(function(data) {
          if (data.version === lastVersion) return;
          lastVersion = data.version;
          ensureColumns(data.columns.length);
          data.columns.forEach(function(records, i) {
            updateColumn(container.children[i], records);
          });
        })
        .catch(function(err) { console.error(err); });
    }

    render();
    setInterval(render, 500);
  </script>
</body>
</html>
"""
