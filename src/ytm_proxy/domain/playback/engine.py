"""
Audio engine contract.

An ``AudioHandle`` mirrors the browser media element surface the playback
coordinator was designed around: an awaitable ``play()``, ``pause()``,
``current_time``/``duration``/``volume`` properties and the events below.
An ``AudioEngine`` creates handles and keeps track of every live one so the
coordinator can silence handles it no longer owns.
"""

from typing import List

from ...core.events import EventEmitter

# Handle events
PLAY = "play"
PAUSE = "pause"
ENDED = "ended"
ERROR = "error"
TIMEUPDATE = "timeupdate"
VOLUMECHANGE = "volumechange"


class PlaybackStartError(Exception):
    """Raised by ``AudioHandle.play`` when the media cannot start."""


class AudioHandle(EventEmitter):
    """One media source. Subclasses implement the transport methods."""

    def __init__(self, src: str) -> None:
        super().__init__()
        self.src = src
        self.closed = False
        self._paused = True
        self._current_time = 0.0
        self._duration = 0.0
        self._volume = 1.0

    async def play(self) -> None:
        """Start or resume playback.

        Raises:
            PlaybackStartError: If playback cannot start
        """
        raise NotImplementedError

    def pause(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Release engine resources. The handle is unusable afterwards."""
        self.closed = True

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def current_time(self) -> float:
        return self._current_time

    @current_time.setter
    def current_time(self, seconds: float) -> None:
        self._current_time = seconds
        self._seek(seconds)

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._volume = value
        self._apply_volume(value)

    def _seek(self, seconds: float) -> None:
        raise NotImplementedError

    def _apply_volume(self, value: float) -> None:
        raise NotImplementedError


class AudioEngine:
    """Factory and registry for audio handles."""

    def __init__(self) -> None:
        self._handles: List[AudioHandle] = []

    def create(self, src: str) -> AudioHandle:
        handle = self._create_handle(src)
        self._handles.append(handle)
        return handle

    def _create_handle(self, src: str) -> AudioHandle:
        raise NotImplementedError

    def handles(self) -> List[AudioHandle]:
        """Every live handle, including ones the caller no longer references."""
        return list(self._handles)

    def release(self, handle: AudioHandle) -> None:
        if handle in self._handles:
            self._handles.remove(handle)
        if not handle.closed:
            handle.close()

    def suspend(self) -> None:
        """Suspend any shared output the engine keeps open. Best effort."""

    def close(self) -> None:
        for handle in self.handles():
            self.release(handle)
