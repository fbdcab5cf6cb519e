"""Tests for the media session."""

import pytest

from ytm_proxy.domain.playback.media_session import MediaSession


@pytest.mark.anyio
async def test_dispatch_calls_handler_with_details() -> None:
    session = MediaSession()
    received = []
    session.set_action_handler("seekto", received.append)

    handled = await session.dispatch("seekto", seek_time=12.0)

    assert handled is True
    assert received == [{"action": "seekto", "seek_time": 12.0}]


@pytest.mark.anyio
async def test_dispatch_awaits_async_handlers() -> None:
    session = MediaSession()
    calls = []

    async def on_next(details):
        calls.append(details["action"])

    session.set_action_handler("nexttrack", on_next)
    await session.dispatch("nexttrack")

    assert calls == ["nexttrack"]


@pytest.mark.anyio
async def test_dispatch_without_handler() -> None:
    assert await MediaSession().dispatch("play") is False


def test_unregister_handler() -> None:
    session = MediaSession()
    session.set_action_handler("play", lambda details: None)
    session.set_action_handler("play", None)
    assert not session.has_handler("play")


def test_unknown_action() -> None:
    with pytest.raises(ValueError):
        MediaSession().set_action_handler("rewind", lambda details: None)


def test_playback_state_validation() -> None:
    session = MediaSession()
    assert session.playback_state == "none"

    session.playback_state = "playing"
    assert session.playback_state == "playing"

    with pytest.raises(ValueError):
        session.playback_state = "buffering"
