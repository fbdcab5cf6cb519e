"""
Session settings: repeat mode, side panel state and the active playlist/song.

Settings load from durable storage, then from the page URL (URL wins), and
the ``playlist``/``song`` query parameters follow every change to those fields.
"""

import asyncio
import math
from typing import Any, Dict, NamedTuple, Optional

from loguru import logger

from ..core.location import PageLocation
from ..core.state import StateManager
from ..core.storage import KeyValueStore
from .models import (
    DEFAULT_SIDE_PANEL_WIDTH,
    MAX_SIDE_PANEL_WIDTH,
    MIN_SIDE_PANEL_WIDTH,
    REPEAT_MODES,
    REPEAT_NONE,
    TAB_INFO,
    TABS,
)

SETTINGS_STORAGE_KEY = "app-settings"

# Settings field -> URL query parameter
URL_PARAMS = {"playlist_id": "playlist", "song_id": "song"}


def _clamp_width(width: float) -> int:
    return max(MIN_SIDE_PANEL_WIDTH, min(MAX_SIDE_PANEL_WIDTH, int(width)))


class AppSettings(NamedTuple):
    repeat_mode: str = REPEAT_NONE
    playlist_id: Optional[str] = None
    song_id: Optional[str] = None
    active_tab: str = TAB_INFO
    side_panel_width: int = DEFAULT_SIDE_PANEL_WIDTH


class SettingsManager(StateManager[AppSettings]):
    """Owns the session's AppSettings and keeps the page URL in step.

    One instance exists per session; it is built by the application context
    and passed to whoever needs it.

    Args:
        storage: Durable store for the settings snapshot
        location: Page URL to read on startup and rewrite on change
        storage_key: Key used in ``storage``
    """

    def __init__(
        self,
        storage: Optional[KeyValueStore] = None,
        location: Optional[PageLocation] = None,
        storage_key: str = SETTINGS_STORAGE_KEY,
    ) -> None:
        self._location = location
        self._autosave_handle: Optional[asyncio.TimerHandle] = None
        super().__init__(AppSettings(), storage_key, storage)
        self._load_from_url()

    def _load_from_url(self) -> None:
        if self._location is None:
            return

        updates: Dict[str, Any] = {}
        for field, param in URL_PARAMS.items():
            value = self._location.get_param(param)
            if value:
                updates[field] = value

        if updates:
            self.set_state(**updates)

    def _update_url(self) -> None:
        if self._location is None:
            return
        state = self._state
        self._location.set_params({
            param: getattr(state, field) for field, param in URL_PARAMS.items()
        })

    def set_state(self, **changes: Any) -> None:
        """Merge ``changes``; rewrite the URL if the playlist or song was included."""
        super().set_state(**changes)

        if any(field in changes for field in URL_PARAMS):
            self._update_url()

    def _parse_persisted(self, data: Dict[str, Any]) -> Dict[str, Any]:
        parsed = super()._parse_persisted(data)

        if parsed.get("repeat_mode", REPEAT_NONE) not in REPEAT_MODES:
            logger.warning(f"Ignoring stored repeat mode: {parsed['repeat_mode']!r}")
            del parsed["repeat_mode"]

        if parsed.get("active_tab", TAB_INFO) not in TABS:
            logger.warning(f"Ignoring stored tab: {parsed['active_tab']!r}")
            del parsed["active_tab"]

        if "side_panel_width" in parsed:
            width = parsed["side_panel_width"]
            if (
                isinstance(width, bool)
                or not isinstance(width, (int, float))
                or not math.isfinite(width)
            ):
                logger.warning(f"Ignoring stored side panel width: {width!r}")
                del parsed["side_panel_width"]
            else:
                parsed["side_panel_width"] = _clamp_width(width)

        for field in URL_PARAMS:
            if field in parsed and parsed[field] is not None and not isinstance(parsed[field], str):
                logger.warning(f"Ignoring stored {field}: {parsed[field]!r}")
                del parsed[field]

        return parsed

    # Derived setters and getters

    def set_repeat_mode(self, mode: str) -> None:
        if mode not in REPEAT_MODES:
            raise ValueError(f"Invalid repeat mode: {mode!r}")
        self.set_state(repeat_mode=mode)

    @property
    def repeat_mode(self) -> str:
        return self._state.repeat_mode

    def set_active_tab(self, tab: str) -> None:
        if tab not in TABS:
            raise ValueError(f"Invalid tab: {tab!r}")
        self.set_state(active_tab=tab)

    @property
    def active_tab(self) -> str:
        return self._state.active_tab

    def set_sidebar_split(self, width: int) -> None:
        """Set the side panel width, clamped to the supported range."""
        self.set_state(side_panel_width=_clamp_width(width))

    @property
    def sidebar_split(self) -> int:
        return self._state.side_panel_width

    def set_current_playlist(self, playlist_id: Optional[str]) -> None:
        self.set_state(playlist_id=playlist_id)

    @property
    def current_playlist(self) -> Optional[str]:
        return self._state.playlist_id

    def set_current_song(self, song_id: Optional[str]) -> None:
        self.set_state(song_id=song_id)

    @property
    def current_song(self) -> Optional[str]:
        return self._state.song_id

    def cycle_repeat_mode(self) -> str:
        """Advance none -> one -> all -> none and return the new mode."""
        index = REPEAT_MODES.index(self.repeat_mode)
        next_mode = REPEAT_MODES[(index + 1) % len(REPEAT_MODES)]
        self.set_repeat_mode(next_mode)
        return next_mode

    def reset(self) -> None:
        """Restore defaults.

        The URL is left alone; clear it with ``set_current_playlist(None)`` and
        ``set_current_song(None)``.
        """
        self.replace_state(AppSettings())

    # Autosave

    def start_autosave(
        self, interval: float = 30.0, loop: Optional[asyncio.AbstractEventLoop] = None
    ) -> None:
        """Persist settings every ``interval`` seconds until ``stop_autosave``."""
        self.stop_autosave()
        loop = loop or asyncio.get_running_loop()

        def tick() -> None:
            self.save()
            self._autosave_handle = loop.call_later(interval, tick)

        self._autosave_handle = loop.call_later(interval, tick)
        logger.debug(f"Settings autosave every {interval}s")

    def stop_autosave(self) -> None:
        if self._autosave_handle is not None:
            self._autosave_handle.cancel()
            self._autosave_handle = None
