from __future__ import annotations

import asyncio
from typing import Dict, List

from chatwall.app import OverlaySession
from chatwall.providers import UserData
from chatwall.utils import OverlayConfig
from conftest import FakeUserSource, make_message


def _seventv(catalog: Dict[str, str], seen: List[str]):
    async def fetch(user_id: str) -> Dict[str, str]:
        seen.append(user_id)
        return catalog

    return fetch


def test_load_catalogs_merges_channel_and_7tv(config: OverlayConfig) -> None:
    seen: List[str] = []
    source = FakeUserSource(
        UserData(user_id="1234", twitch_emotes={"chanHype": "https://static/hype.png", "shared": "twitch"})
    )
    session = OverlaySession(
        config,
        twitch_api=source,
        seventv_fetcher=_seventv({"catJAM": "https://cdn.7tv.app/emote/a/1x.webp", "shared": "7tv"}, seen),
    )

    catalog = asyncio.run(session.load_catalogs())

    assert source.requested == ["somechannel"]
    assert seen == ["1234"]
    assert session.user_id == "1234"
    assert catalog == {
        "chanHype": "https://static/hype.png",
        "catJAM": "https://cdn.7tv.app/emote/a/1x.webp",
        "shared": "7tv",
    }

    result = session.on_message(make_message("catJAM chanHype"))
    assert result.entry.rendered_text.count("<img") == 2


def test_load_catalogs_survives_lookup_failure(config: OverlayConfig, not_found_source: FakeUserSource) -> None:
    seen: List[str] = []
    session = OverlaySession(config, userdata_client=not_found_source, seventv_fetcher=_seventv({}, seen))

    assert asyncio.run(session.load_catalogs()) == {}
    assert seen == []
    assert session.user_id is None


def test_load_catalogs_without_sources(session: OverlaySession) -> None:
    assert asyncio.run(session.load_catalogs()) == {}


def test_on_message_filters_and_updates_state(session: OverlaySession) -> None:
    assert session.on_message(make_message("!uptime")) is None
    assert session.on_message(make_message("hello", badges={"moderator": "1"})) is None

    first = session.on_message(make_message("LOL", user="alice"))
    second = session.on_message(make_message("lol lol", user="bob"))
    assert first.is_new and not second.is_new

    columns = session.state.snapshot()["columns"]
    assert len(columns) == 2
    assert len(columns[0]) == 1
    record = columns[0][0]
    assert record["count"] == 2
    assert "×2" in record["html"]


def test_state_tracks_evictions(session: OverlaySession) -> None:
    for word in ["alpha", "bravo", "charlie", "delta", "echo", "foxtrot", "golf", "hotel"]:
        session.on_message(make_message(word))

    snapshot = session.state.snapshot()
    pipeline_columns = session.pipeline.columns()
    assert [[r["fingerprint"] for r in col] for col in snapshot["columns"]] == [
        [e.fingerprint for e in col] for col in pipeline_columns
    ]
    assert all(len(col) == 3 for col in snapshot["columns"])


def test_pipeline_failure_is_contained(session: OverlaySession, monkeypatch) -> None:
    def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(session.pipeline, "process", explode)
    assert session.on_message(make_message("hello")) is None
    assert session.state.snapshot()["version"] == 0


def test_apply_settings_and_clear(session: OverlaySession) -> None:
    for word in ["alpha", "bravo", "charlie"]:
        session.on_message(make_message(word))

    settings = session.apply_settings(columns=1, min_words=2)
    assert settings == {"columns": 1, "min_words": 2, "max_messages": 3}
    assert len(session.state.snapshot()["columns"]) == 1
    assert len(session.state.snapshot()["columns"][0]) == 3
    assert session.on_message(make_message("short")) is None

    session.clear()
    assert session.state.snapshot()["columns"] == [[]]
    assert len(session.pipeline.aggregator) == 0
