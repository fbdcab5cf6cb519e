"""
Media key integration.

Stands in for the system media session: transport actions arrive through
``dispatch`` (from the HTTP layer or a desktop key binding) and are forwarded
to whichever handler the playback coordinator registered.
"""

import inspect
from typing import Any, Callable, Dict, NamedTuple, Optional

from loguru import logger

ACTIONS = ("play", "pause", "previoustrack", "nexttrack", "seekto", "stop")

PLAYBACK_STATES = ("none", "paused", "playing")

ActionHandler = Callable[[Dict[str, Any]], Any]


class MediaMetadata(NamedTuple):
    title: str
    artist: str = ""
    album: str = ""
    artwork: Optional[str] = None


class MediaSession:
    """Registry of media action handlers plus the now-playing metadata."""

    def __init__(self) -> None:
        self._handlers: Dict[str, ActionHandler] = {}
        self.metadata: Optional[MediaMetadata] = None
        self._playback_state = "none"

    @property
    def playback_state(self) -> str:
        return self._playback_state

    @playback_state.setter
    def playback_state(self, value: str) -> None:
        if value not in PLAYBACK_STATES:
            raise ValueError(f"Invalid playback state: {value!r}")
        self._playback_state = value

    def set_action_handler(self, action: str, handler: Optional[ActionHandler]) -> None:
        """Register ``handler`` for ``action``; None unregisters it."""
        if action not in ACTIONS:
            raise ValueError(f"Unsupported media action: {action!r}")
        if handler is None:
            self._handlers.pop(action, None)
        else:
            self._handlers[action] = handler

    def has_handler(self, action: str) -> bool:
        return action in self._handlers

    async def dispatch(self, action: str, **details: Any) -> bool:
        """Run the handler for ``action``.

        Returns:
            False if no handler is registered for the action
        """
        handler = self._handlers.get(action)
        if handler is None:
            logger.debug(f"No media session handler for {action}")
            return False

        result = handler({"action": action, **details})
        if inspect.isawaitable(result):
            await result
        return True
