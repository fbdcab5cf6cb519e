"""Application context: the single owner of every session service.

Each service exists exactly once per process. ``AppContext.create`` builds
them, wires their events together, and the result is passed explicitly to
whoever needs it (the web layer gets it through ``get_app_context``).
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from ytm_proxy.core.config import Config, PlayerConfig, get_data_dir, load_config
from ytm_proxy.core.location import PageLocation
from ytm_proxy.core.storage import KeyValueStore, SqliteStore
from ytm_proxy.domain.notifications import DesktopNotifier, NotificationManager
from ytm_proxy.domain.playback.coordinator import PlaybackEvents, PlaybackManager
from ytm_proxy.domain.playback.engine import AudioEngine
from ytm_proxy.domain.playback.media_session import MediaSession
from ytm_proxy.domain.playback.mpv import MpvEngine, check_mpv_available
from ytm_proxy.domain.settings import SettingsManager
from ytm_proxy.services.ytmusic import YTMusicService


def get_storage_path(config: Config) -> Path:
    if config.session.storage_path:
        return Path(config.session.storage_path).expanduser()
    return get_data_dir() / "session.db"


def create_engine(config: PlayerConfig) -> AudioEngine:
    """Build the audio engine named in the player config."""
    if config.engine == "mpv":
        return MpvEngine(mpv_path=config.mpv_path, start_timeout=config.start_timeout_seconds)
    raise ValueError(f"Unsupported player engine: {config.engine!r}")


@dataclass
class AppContext:
    """Every long-lived service of a running proxy.

    Attributes:
        config: Application configuration
        storage: Durable store backing persisted settings
        location: Shareable page URL kept in step with the settings
        settings: Session settings (repeat mode, panels, active playlist/song)
        playback: Playback coordinator
        notifications: User-facing notifications
        media_session: Media key integration
        ytmusic: YouTube Music metadata and stream resolution
    """

    config: Config
    storage: KeyValueStore
    location: PageLocation
    settings: SettingsManager
    playback: PlaybackManager
    notifications: NotificationManager
    media_session: MediaSession
    ytmusic: YTMusicService

    @classmethod
    def create(
        cls,
        config: Config,
        storage: Optional[KeyValueStore] = None,
        engine: Optional[AudioEngine] = None,
        ytmusic: Optional[YTMusicService] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> "AppContext":
        """Create and wire the application services.

        Args:
            config: Application configuration
            storage: Settings store (default: SQLite file in the data directory)
            engine: Audio engine (default: the one named in ``config.player``)
            ytmusic: YouTube Music service (default: built from ``config.ytmusic``)
            loop: Event loop for timers (default: the running loop when needed)
        """
        storage = storage if storage is not None else SqliteStore(get_storage_path(config))
        location = PageLocation(config.session.page_url or f"{config.server.base_url}/")
        settings = SettingsManager(storage=storage, location=location)

        notifications = NotificationManager(
            default_duration_ms=config.notifications.default_duration_ms, loop=loop
        )
        if config.notifications.desktop:
            DesktopNotifier().attach(notifications)

        media_session = MediaSession()
        playback = PlaybackManager(
            settings,
            engine if engine is not None else create_engine(config.player),
            stream_base_url=config.server.base_url,
            media_session=media_session,
            volume=config.player.volume,
            auto_skip=config.player.auto_skip,
            recovery_delay=config.player.error_recovery_seconds,
            loop=loop,
        )

        context = cls(
            config=config,
            storage=storage,
            location=location,
            settings=settings,
            playback=playback,
            notifications=notifications,
            media_session=media_session,
            ytmusic=ytmusic if ytmusic is not None else YTMusicService(config.ytmusic),
        )
        context._wire_events()
        return context

    def _wire_events(self) -> None:
        self.playback.on(PlaybackEvents.SONG_CHANGE, self._on_song_change)
        self.playback.on(PlaybackEvents.PLAY, self._on_play)
        self.playback.on(PlaybackEvents.PLAYBACK_ERROR, self._on_playback_error)

    def _on_song_change(self, data: Dict[str, Any]) -> None:
        self.settings.set_current_song(data["song"].id)

    def _on_play(self, data: Dict[str, Any]) -> None:
        song = data.get("song")
        if song is not None:
            logger.info(f"Now playing: {song.artist} - {song.title}")

    def _on_playback_error(self, data: Dict[str, Any]) -> None:
        song = data.get("song")
        title = song.title if song is not None else "track"
        self.notifications.error("Playback Error", f"Could not play {title}: {data.get('error')}")

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Start background work. Call from inside the running loop."""
        if self.config.player.engine == "mpv" and not check_mpv_available(self.config.player.mpv_path):
            logger.warning(
                f"mpv not found at {self.config.player.mpv_path!r}; session playback will fail"
            )
        self.settings.start_autosave(self.config.session.autosave_seconds, loop)

    def shutdown(self) -> None:
        """Persist settings and release every playback resource."""
        self.settings.stop_autosave()
        self.settings.save()
        self.playback.shutdown()
        self.notifications.clear()
        logger.info("Session services shut down")


_context: Optional[AppContext] = None


def get_app_context() -> AppContext:
    """Return the process-wide context, creating it on first use."""
    global _context
    if _context is None:
        _context = AppContext.create(load_config())
    return _context


def set_app_context(context: Optional[AppContext]) -> None:
    """Install (or clear, with None) the process-wide context."""
    global _context
    _context = context
