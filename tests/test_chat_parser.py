from __future__ import annotations

from datetime import datetime

from chatwall.chat import ChatParser, FilterConfig, parse_irc
from chatwall.chat.chat_parser import parse_badges, parse_emote_positions, unescape_tag_value

SAMPLE = (
    "@badge-info=;badges=subscriber/12,premium/1;color=#FF4500;display-name=Viewer;"
    "emotes=25:0-4,12-16/1902:6-10;id=abc;tmi-sent-ts=1700000000000;user-id=42 "
    ":viewer!viewer@viewer.tmi.twitch.tv PRIVMSG #somechannel :Kappa Keepo Kappa"
)


def test_parse_irc_splits_tags_prefix_and_params() -> None:
    irc = parse_irc(SAMPLE)
    assert irc is not None
    assert irc.command == "PRIVMSG"
    assert irc.prefix == "viewer!viewer@viewer.tmi.twitch.tv"
    assert irc.params == ["#somechannel", "Kappa Keepo Kappa"]
    assert irc.tags["color"] == "#FF4500"
    assert irc.tags["badge-info"] == ""


def test_parse_irc_server_lines() -> None:
    ping = parse_irc("PING :tmi.twitch.tv\r\n")
    assert ping.command == "PING"
    assert ping.trailing == "tmi.twitch.tv"

    reconnect = parse_irc(":tmi.twitch.tv RECONNECT")
    assert reconnect.command == "RECONNECT"
    assert reconnect.params == []

    assert parse_irc("") is None


def test_tag_value_unescaping() -> None:
    assert unescape_tag_value(r"hello\sworld\:") == "hello world;"
    assert unescape_tag_value("back\\\\slash") == "back\\slash"
    assert unescape_tag_value("dangling\\") == "dangling"


def test_emote_positions_and_badges() -> None:
    assert parse_emote_positions("25:0-4,12-16/1902:6-10") == {
        "25": ["0-4", "12-16"],
        "1902": ["6-10"],
    }
    assert parse_emote_positions("") == {}
    assert parse_badges("broadcaster/1,subscriber/12") == {"broadcaster": "1", "subscriber": "12"}


def test_parse_privmsg_into_chat_message() -> None:
    message = ChatParser().parse(SAMPLE)

    assert message is not None
    assert message.user == "viewer"
    assert message.text == "Kappa Keepo Kappa"
    assert message.channel_id == "somechannel"
    assert message.platform == "twitch"
    assert message.color == "#FF4500"
    assert message.emote_positions == {"25": ["0-4", "12-16"], "1902": ["6-10"]}
    assert message.badges == {"subscriber": "12", "premium": "1"}
    assert message.message_id == "abc"
    assert message.user_id == "42"
    assert message.timestamp == datetime.fromtimestamp(1700000000)
    assert not message.is_action


def test_parse_action_and_missing_color() -> None:
    line = ":someone!someone@someone.tmi.twitch.tv PRIVMSG #chan :\x01ACTION waves\x01"
    message = ChatParser().parse(line)
    assert message.text == "waves"
    assert message.is_action
    assert message.color == "#ffffff"


def test_non_chat_lines_are_ignored() -> None:
    parser = ChatParser()
    assert parser.parse("PING :tmi.twitch.tv") is None
    assert parser.parse(":tmi.twitch.tv 001 justinfan123 :Welcome, GLHF!") is None


def test_filter_rules() -> None:
    parser = ChatParser(FilterConfig(min_words=2))
    base = ":u!u@u.tmi.twitch.tv PRIVMSG #chan :"

    assert parser.parse_and_filter(base + "hello there") is not None
    assert parser.parse_and_filter(base + "hello") is None
    assert parser.parse_and_filter(base + "!uptime please") is None

    moderator = "@badges=moderator/1 " + base + "hello there"
    assert parser.parse_and_filter(moderator) is None
    broadcaster = "@badges=broadcaster/1 " + base + "hello there"
    assert parser.parse_and_filter(broadcaster) is None


def test_zero_min_words_passes_everything_but_commands() -> None:
    parser = ChatParser(FilterConfig(min_words=0))
    message = parser.parse(":u!u@u PRIVMSG #chan :x")
    assert parser.filter(message)
