from __future__ import annotations

from chatwall.utils import OverlayConfig


def test_defaults() -> None:
    config = OverlayConfig.from_env({})
    assert config.channel is None
    assert config.columns == 1
    assert config.min_words == 1
    assert config.max_messages == 100
    assert not config.bump_repeats
    assert config.host == "127.0.0.1"
    assert config.port == 8765
    assert not config.has_twitch_credentials


def test_values_from_environment() -> None:
    config = OverlayConfig.from_env(
        {
            "TWITCH_CHANNEL": "#SomeChannel",
            "OVERLAY_COLUMNS": "3",
            "OVERLAY_MIN_WORDS": "0",
            "OVERLAY_MAX_MESSAGES": "50",
            "OVERLAY_BUMP_REPEATS": "yes",
            "OVERLAY_PORT": "9000",
            "TWITCH_CLIENT_ID": "id",
            "TWITCH_CLIENT_SECRET": "secret",
            "TWITCH_USERDATA_URL": "https://proxy.example",
            "TWITCH_TOKEN_TTL": "600",
        }
    )
    assert config.channel == "somechannel"
    assert config.columns == 3
    assert config.min_words == 0
    assert config.max_messages == 50
    assert config.bump_repeats
    assert config.port == 9000
    assert config.has_twitch_credentials
    assert config.userdata_url == "https://proxy.example"
    assert config.token_ttl == 600


def test_bad_values_fall_back() -> None:
    config = OverlayConfig.from_env(
        {"OVERLAY_COLUMNS": "many", "OVERLAY_MAX_MESSAGES": "-5", "OVERLAY_BUMP_REPEATS": "nope"}
    )
    assert config.columns == 1
    assert config.max_messages == 1
    assert not config.bump_repeats
