"""Shared fixtures for the session core tests."""

import asyncio
from typing import List, Optional

import pytest

from ytm_proxy.core.location import PageLocation
from ytm_proxy.core.storage import MemoryStore
from ytm_proxy.domain.models import Track
from ytm_proxy.domain.playback.engine import AudioEngine, AudioHandle, PlaybackStartError
from ytm_proxy.domain.settings import SettingsManager


class FakeHandle(AudioHandle):
    """Audio handle whose start either resolves at once or waits for the test."""

    def __init__(self, src: str, auto_start: bool = True, fail: bool = False) -> None:
        super().__init__(src)
        self.auto_start = auto_start
        self.fail = fail
        self.start_future: Optional[asyncio.Future] = None
        self.play_calls = 0
        self.pause_calls = 0
        self.seeks: List[float] = []
        self.duration_value = 0.0

    async def play(self) -> None:
        self.play_calls += 1
        if self.fail:
            raise PlaybackStartError(f"cannot play {self.src}")
        if not self.auto_start:
            self.start_future = asyncio.get_running_loop().create_future()
            await self.start_future
        self._paused = False

    def resolve(self) -> None:
        self.start_future.set_result(None)

    def reject(self, error: Optional[Exception] = None) -> None:
        self.start_future.set_exception(error or PlaybackStartError("rejected"))

    def pause(self) -> None:
        self.pause_calls += 1
        self._paused = True

    def _seek(self, seconds: float) -> None:
        self.seeks.append(seconds)

    def _apply_volume(self, value: float) -> None:
        pass

    @property
    def duration(self) -> float:
        return self.duration_value


class FakeEngine(AudioEngine):
    """Engine that records every handle it creates."""

    def __init__(self) -> None:
        super().__init__()
        self.created: List[FakeHandle] = []
        self.auto_start = True
        self.fail = False
        self.suspend_calls = 0

    def _create_handle(self, src: str) -> FakeHandle:
        handle = FakeHandle(src, auto_start=self.auto_start, fail=self.fail)
        self.created.append(handle)
        return handle

    def suspend(self) -> None:
        self.suspend_calls += 1

    def playing(self) -> List[FakeHandle]:
        return [handle for handle in self.created if not handle.paused]


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def location() -> PageLocation:
    return PageLocation("http://localhost:5000/")


@pytest.fixture
def settings(store: MemoryStore, location: PageLocation) -> SettingsManager:
    return SettingsManager(storage=store, location=location)


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def tracks() -> List[Track]:
    return [
        Track(id="song1aaaaaa", title="First Song", artist="Artist A", album="Album A"),
        Track(id="song2bbbbbb", title="Second Song", artist="Artist B"),
        Track(id="song3cccccc", title="Third Song", artist="Artist C"),
    ]
