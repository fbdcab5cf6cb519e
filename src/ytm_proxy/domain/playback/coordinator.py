"""
Playback coordinator.

Owns the single active audio handle, the playlist and the current position.
Every transport operation goes through here; UI and the settings layer learn
about playback through the events in ``PlaybackEvents``.

State is published before any await. A start that resolves after a newer
``play_track`` has taken over finds its handle is no longer the active one
and leaves shared state alone.
"""

import asyncio
import math
from typing import Any, Coroutine, Dict, List, NamedTuple, Optional, Sequence, Set, Tuple

from loguru import logger

from ...core.state import STATE_CHANGED, StateChange, StateManager
from ..models import ERROR_RECOVERY_SECONDS, REPEAT_ALL, Track
from ..settings import SettingsManager
from . import engine as handle_events
from .engine import AudioEngine, AudioHandle
from .media_session import MediaMetadata, MediaSession


class PlaybackEvents:
    """Event names emitted by ``PlaybackManager``."""

    PLAY = "play"
    PAUSE = "pause"
    STOP = "stop"
    SONG_END = "song_end"
    SONG_CHANGE = "song_change"
    PLAYBACK_ERROR = "playback_error"
    TIME_UPDATE = "time_update"
    VOLUME_CHANGE = "volume_change"
    PLAYLIST_CHANGE = "playlist_change"


class PlaybackState(NamedTuple):
    active_handle: Optional[AudioHandle] = None
    is_playing: bool = False
    position: float = 0.0
    duration: float = 0.0
    volume: float = 1.0
    current_track: Optional[Track] = None
    playlist: Tuple[Track, ...] = ()
    current_index: int = -1
    pending_recovery: Optional[asyncio.TimerHandle] = None
    auto_skip: bool = False


def _clamp_volume(volume: float) -> float:
    return max(0.0, min(1.0, float(volume)))


class PlaybackManager(StateManager[PlaybackState]):
    """Transport control over one audio engine.

    Playback state is never persisted: a new session always starts silent.

    Args:
        settings: Session settings (repeat mode is read from here)
        engine: Audio engine that creates handles for stream URLs
        stream_base_url: Prefix for ``/api/stream/{id}`` URLs
        media_session: Optional media key integration
        volume: Initial volume in [0, 1]
        auto_skip: Skip to the next track after a playback error
        recovery_delay: Seconds to wait before skipping after an error
        loop: Event loop for timers and background tasks (default: running loop)
    """

    def __init__(
        self,
        settings: SettingsManager,
        engine: AudioEngine,
        stream_base_url: str = "",
        media_session: Optional[MediaSession] = None,
        volume: float = 1.0,
        auto_skip: bool = False,
        recovery_delay: float = ERROR_RECOVERY_SECONDS,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        super().__init__(PlaybackState(volume=_clamp_volume(volume), auto_skip=auto_skip))
        self.settings = settings
        self.engine = engine
        self.stream_base_url = stream_base_url.rstrip("/")
        self.media_session = media_session
        self.recovery_delay = recovery_delay
        self._loop = loop
        self._tasks: Set[asyncio.Task] = set()

        self._unsubscribe_settings = settings.subscribe(self._on_settings_changed)
        if media_session is not None:
            self._setup_media_session(media_session)
            self.on(STATE_CHANGED, self._sync_media_session)

    def stream_url(self, track_id: str) -> str:
        return f"{self.stream_base_url}/api/stream/{track_id}"

    # Read-only views

    @property
    def current_track(self) -> Optional[Track]:
        return self._state.current_track

    @property
    def playlist(self) -> List[Track]:
        return list(self._state.playlist)

    @property
    def current_index(self) -> int:
        return self._state.current_index

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def volume(self) -> float:
        return self._state.volume

    # Transport

    async def play_track(self, track: Track, index: int = -1) -> None:
        """Tear down whatever is playing and start ``track``.

        Start failures are reported through ``playback_error``; nothing is
        raised and nothing is retried here.
        """
        self._cancel_recovery()
        self.stop_all_audio()

        handle = self.engine.create(self.stream_url(track.id))
        handle.volume = self._state.volume
        self._attach_handle_events(handle)

        self.set_state(current_track=track, current_index=index, active_handle=handle)
        self.emit(PlaybackEvents.SONG_CHANGE, {"song": track, "index": index})
        if self.media_session is not None:
            self.media_session.metadata = MediaMetadata(
                title=track.title,
                artist=track.artist,
                album=track.album,
                artwork=track.thumbnail,
            )

        logger.info(f"Starting playback: {track.title} ({track.id})")
        await self._start(handle, track)

    async def _start(self, handle: AudioHandle, track: Track) -> None:
        try:
            await handle.play()
        except Exception as e:
            if self._state.active_handle is not handle:
                logger.debug(f"Ignoring failure of superseded start: {track.id}")
                return
            logger.error(f"Playback failed for {track.id}: {e}")
            self.engine.release(handle)
            self.set_state(active_handle=None, is_playing=False, position=0.0, duration=0.0)
            self._report_error(e, track)
            return

        if self._state.active_handle is not handle:
            logger.debug(f"Ignoring superseded start: {track.id}")
            self._silence(handle)
            return

        if not self._state.is_playing:
            self.set_state(is_playing=True)
            self.emit(PlaybackEvents.PLAY, {"song": track})

    async def play(self) -> None:
        """Resume the current track. No-op if already playing or nothing is loaded."""
        state = self._state
        if state.is_playing:
            return

        handle = state.active_handle
        if handle is None or handle.closed:
            if state.current_track is not None:
                await self.play_track(state.current_track, state.current_index)
            else:
                logger.debug("Nothing to play")
            return

        self._cancel_recovery()
        await self._start(handle, state.current_track)

    def pause(self) -> None:
        """Pause the current track. No-op if not playing."""
        handle = self._state.active_handle
        if handle is None or not self._state.is_playing:
            return

        handle.pause()
        self.set_state(is_playing=False)
        self.emit(PlaybackEvents.PAUSE, {"song": self._state.current_track})

    async def toggle_play(self) -> None:
        if self._state.is_playing:
            self.pause()
        else:
            await self.play()

    def stop(self) -> None:
        self._cancel_recovery()
        self.stop_all_audio()
        self.emit(PlaybackEvents.STOP)

    def stop_all_audio(self) -> None:
        """Silence every handle the engine knows about and clear the track.

        Other live handles are paused too, so overlapping play requests can
        never leave two tracks audible.
        """
        handle = self._state.active_handle
        if handle is not None:
            self._silence(handle)
            self.engine.release(handle)

        for other in self.engine.handles():
            if not other.paused:
                self._silence(other)

        try:
            self.engine.suspend()
        except Exception as e:
            logger.debug(f"Audio engine suspend failed: {e}")

        self.set_state(
            active_handle=None,
            current_track=None,
            is_playing=False,
            position=0.0,
            duration=0.0,
        )

    @staticmethod
    def _silence(handle: AudioHandle) -> None:
        try:
            handle.pause()
            handle.current_time = 0
        except Exception as e:
            logger.warning(f"Failed to silence audio handle {handle.src}: {e}")

    async def next(self) -> None:
        playlist = self._state.playlist
        if not playlist:
            logger.debug("No playlist loaded")
            return

        index = self._state.current_index + 1
        if index >= len(playlist):
            if self.settings.repeat_mode != REPEAT_ALL:
                logger.info("Reached end of playlist")
                return
            index = 0

        await self._play_index(index)

    async def previous(self) -> None:
        playlist = self._state.playlist
        if not playlist:
            logger.debug("No playlist loaded")
            return

        index = self._state.current_index - 1
        if index < 0:
            if self.settings.repeat_mode != REPEAT_ALL:
                logger.info("Reached start of playlist")
                return
            index = len(playlist) - 1

        await self._play_index(index)

    async def _play_index(self, index: int) -> None:
        playlist = self._state.playlist
        if not 0 <= index < len(playlist):
            logger.debug(f"No song at playlist index {index}")
            return
        await self.play_track(playlist[index], index)

    def set_volume(self, volume: float) -> None:
        """Clamp to [0, 1] and apply to the active handle, if any."""
        if math.isnan(volume):
            return
        volume = _clamp_volume(volume)

        handle = self._state.active_handle
        if handle is not None:
            handle.volume = volume
        self.set_state(volume=volume)

    def seek(self, position: float) -> None:
        """Move the active handle to ``position`` seconds, clamped to the track."""
        handle = self._state.active_handle
        if handle is None or math.isnan(position):
            return

        position = max(0.0, float(position))
        duration = handle.duration
        if duration and duration > 0:
            position = min(position, duration)

        handle.current_time = position
        self.set_state(position=position)

    def set_playlist_songs(self, songs: Sequence[Track]) -> None:
        """Replace the playlist. ``current_index`` is deliberately left as is."""
        self.set_state(playlist=tuple(songs))
        self.emit(PlaybackEvents.PLAYLIST_CHANGE, {"playlist": list(self._state.playlist)})

    def set_auto_skip(self, enabled: bool) -> None:
        self.set_state(auto_skip=bool(enabled))
        if not enabled:
            self._cancel_recovery()

    def shutdown(self) -> None:
        """Stop playback, cancel timers and tasks, and release the engine."""
        self._cancel_recovery()
        self.stop_all_audio()
        for task in list(self._tasks):
            task.cancel()
        self.engine.close()
        self._unsubscribe_settings()
        logger.debug("Playback manager shut down")

    # Handle events

    def _attach_handle_events(self, handle: AudioHandle) -> None:
        handle.on(handle_events.PLAY, lambda _: self._on_handle_play(handle))
        handle.on(handle_events.PAUSE, lambda _: self._on_handle_pause(handle))
        handle.on(handle_events.ENDED, lambda _: self._on_handle_ended(handle))
        handle.on(handle_events.ERROR, lambda error: self._on_handle_error(handle, error))
        handle.on(handle_events.TIMEUPDATE, lambda _: self._on_handle_time_update(handle))
        handle.on(handle_events.VOLUMECHANGE, lambda _: self._on_handle_volume_change(handle))

    def _is_active(self, handle: AudioHandle) -> bool:
        return self._state.active_handle is handle

    def _on_handle_play(self, handle: AudioHandle) -> None:
        if not self._is_active(handle) or self._state.is_playing:
            return
        self.set_state(is_playing=True)
        self.emit(PlaybackEvents.PLAY, {"song": self._state.current_track})

    def _on_handle_pause(self, handle: AudioHandle) -> None:
        if not self._is_active(handle) or not self._state.is_playing:
            return
        self.set_state(is_playing=False)
        self.emit(PlaybackEvents.PAUSE, {"song": self._state.current_track})

    def _on_handle_ended(self, handle: AudioHandle) -> None:
        if not self._is_active(handle):
            return
        track = self._state.current_track
        self.set_state(is_playing=False)
        self.emit(PlaybackEvents.SONG_END, {"song": track})

        if self.settings.repeat_mode == REPEAT_ALL and self._state.playlist:
            self._spawn(self.next())

    def _on_handle_error(self, handle: AudioHandle, error: Any) -> None:
        if not self._is_active(handle):
            return
        logger.error(f"Audio error for {handle.src}: {error}")
        if self._state.is_playing:
            self.set_state(is_playing=False)
        self._report_error(error, self._state.current_track)

    def _on_handle_time_update(self, handle: AudioHandle) -> None:
        if not self._is_active(handle):
            return
        self.set_state(position=handle.current_time, duration=handle.duration)
        self.emit(
            PlaybackEvents.TIME_UPDATE,
            {"position": self._state.position, "duration": self._state.duration},
        )

    def _on_handle_volume_change(self, handle: AudioHandle) -> None:
        if not self._is_active(handle):
            return
        self.set_state(volume=handle.volume)
        self.emit(PlaybackEvents.VOLUME_CHANGE, {"volume": self._state.volume})

    # Error recovery

    def _report_error(self, error: Any, track: Optional[Track]) -> None:
        self.emit(PlaybackEvents.PLAYBACK_ERROR, {"error": error, "song": track})
        if self._state.auto_skip and self._state.playlist:
            self._schedule_recovery()

    def _schedule_recovery(self) -> None:
        self._cancel_recovery()
        loop = self._loop or asyncio.get_running_loop()
        handle = loop.call_later(self.recovery_delay, self._recover)
        self.set_state(pending_recovery=handle)
        logger.info(f"Skipping to next track in {self.recovery_delay}s")

    def _recover(self) -> None:
        self.set_state(pending_recovery=None)
        self._spawn(self.next())

    def _cancel_recovery(self) -> None:
        pending = self._state.pending_recovery
        if pending is not None:
            pending.cancel()
            self.set_state(pending_recovery=None)

    def _spawn(self, coro: Coroutine) -> None:
        loop = self._loop or asyncio.get_running_loop()
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error("Background playback task failed")

    # Collaborators

    def _on_settings_changed(self, change: StateChange) -> None:
        if change.old_state.repeat_mode != change.new_state.repeat_mode:
            logger.debug(f"Repeat mode is now {change.new_state.repeat_mode}")

    def _setup_media_session(self, session: MediaSession) -> None:
        session.set_action_handler("play", lambda details: self.play())
        session.set_action_handler("pause", lambda details: self.pause())
        session.set_action_handler("previoustrack", lambda details: self.previous())
        session.set_action_handler("nexttrack", lambda details: self.next())
        session.set_action_handler(
            "seekto", lambda details: self.seek(float(details.get("seek_time", math.nan)))
        )
        session.set_action_handler("stop", lambda details: self.stop())

    def _sync_media_session(self, change: StateChange) -> None:
        if "is_playing" not in change.changes and "active_handle" not in change.changes:
            return
        state = change.new_state
        if state.is_playing:
            self.media_session.playback_state = "playing"
        elif state.active_handle is not None:
            self.media_session.playback_state = "paused"
        else:
            self.media_session.playback_state = "none"

    def snapshot(self) -> Dict[str, Any]:
        """JSON-friendly view of the current state."""
        state = self._state
        return {
            "is_playing": state.is_playing,
            "position": state.position,
            "duration": state.duration,
            "volume": state.volume,
            "current_track": state.current_track.to_dict() if state.current_track else None,
            "playlist": [track.to_dict() for track in state.playlist],
            "current_index": state.current_index,
            "auto_skip": state.auto_skip,
            "recovery_pending": state.pending_recovery is not None,
        }
