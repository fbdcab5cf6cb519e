"""Pytest configuration for backend tests.

Every test gets a fresh application context with in-memory storage, a fake
audio engine and a mocked YouTube Music service, installed before the app
starts so the lifespan picks it up.
"""

from typing import List
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from ytm_proxy.context import AppContext, set_app_context
from ytm_proxy.core.config import Config
from ytm_proxy.core.storage import MemoryStore
from ytm_proxy.domain.playback.engine import AudioEngine, AudioHandle, PlaybackStartError
from ytm_proxy.services.ytmusic import YTMusicService


class FakeHandle(AudioHandle):
    def __init__(self, src: str, fail: bool = False) -> None:
        super().__init__(src)
        self.fail = fail
        self.seeks: List[float] = []
        self.duration_value = 0.0

    async def play(self) -> None:
        if self.fail:
            raise PlaybackStartError(f"cannot play {self.src}")
        self._paused = False

    def pause(self) -> None:
        self._paused = True

    def _seek(self, seconds: float) -> None:
        self.seeks.append(seconds)

    def _apply_volume(self, value: float) -> None:
        pass

    @property
    def duration(self) -> float:
        return self.duration_value


class FakeEngine(AudioEngine):
    def __init__(self) -> None:
        super().__init__()
        self.created: List[FakeHandle] = []
        self.fail = False

    def _create_handle(self, src: str) -> FakeHandle:
        handle = FakeHandle(src, fail=self.fail)
        self.created.append(handle)
        return handle


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def ytmusic() -> MagicMock:
    return MagicMock(spec=YTMusicService)


@pytest.fixture
def context(engine: FakeEngine, ytmusic: MagicMock):
    context = AppContext.create(Config(), storage=MemoryStore(), engine=engine, ytmusic=ytmusic)
    set_app_context(context)
    yield context
    set_app_context(None)


@pytest.fixture
def client(context: AppContext):
    from web.backend.main import app

    with patch("ytm_proxy.context.check_mpv_available", return_value=True):
        with TestClient(app) as client:
            yield client


@pytest.fixture
def track_payload() -> dict:
    return {
        "id": "song1aaaaaa",
        "title": "First Song",
        "artist": "Artist A",
        "album": "Album A",
        "duration": "3:45",
    }


@pytest.fixture
def playlist_payload(track_payload: dict) -> list:
    return [
        track_payload,
        {"id": "song2bbbbbb", "title": "Second Song", "artist": "Artist B"},
        {"id": "song3cccccc", "title": "Third Song", "artist": "Artist C"},
    ]
