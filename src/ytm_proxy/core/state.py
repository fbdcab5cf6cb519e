"""
Observable state container with optional durable persistence.

State values are NamedTuples: snapshots are immutable, ``_replace`` gives the
shallow field merge, and ``_asdict`` gives the persisted JSON shape.
"""

import json
from typing import Any, Callable, Dict, Generic, NamedTuple, Optional, TypeVar

from loguru import logger

from .events import EventEmitter
from .storage import KeyValueStore

S = TypeVar("S")

STATE_CHANGED = "state_changed"


class StateChange(NamedTuple):
    """Payload of a ``state_changed`` event.

    ``new_state`` always equals ``old_state`` merged with ``changes``.
    """

    old_state: Any
    new_state: Any
    changes: Dict[str, Any]


class StateManager(EventEmitter, Generic[S]):
    """Holds one state snapshot and mediates all reads and writes.

    Args:
        initial_state: Default snapshot (a NamedTuple instance)
        storage_key: Key under which the state is persisted; None disables persistence
        storage: Backend used when ``storage_key`` is set
    """

    def __init__(
        self,
        initial_state: S,
        storage_key: Optional[str] = None,
        storage: Optional[KeyValueStore] = None,
    ) -> None:
        super().__init__()
        self._state: S = initial_state
        self._storage_key = storage_key if storage is not None else None
        self._storage = storage

        if self._storage_key:
            self._load_from_storage()

    def get_state(self) -> S:
        """Return a shallow copy of the current snapshot."""
        return self._state._replace()

    def set_state(self, **changes: Any) -> None:
        """Shallow-merge ``changes`` over the current state, notify, then persist.

        Raises:
            ValueError: If a key is not a field of the state
        """
        old_state = self._state
        self._state = old_state._replace(**changes)

        self.emit(STATE_CHANGED, StateChange(old_state, self._state, dict(changes)))
        self._save_to_storage()

    def replace_state(self, new_state: S) -> None:
        """Swap in a whole new snapshot. ``changes`` carries every field."""
        old_state = self._state
        self._state = new_state._replace()

        self.emit(STATE_CHANGED, StateChange(old_state, self._state, self._state._asdict()))
        self._save_to_storage()

    def subscribe(self, handler: Callable[[StateChange], None]) -> Callable[[], None]:
        """Register a ``state_changed`` handler and return its unsubscribe function."""
        self.on(STATE_CHANGED, handler)

        def unsubscribe() -> None:
            self.off(STATE_CHANGED, handler)

        return unsubscribe

    def save(self) -> None:
        """Persist the current state immediately."""
        self._save_to_storage()

    def clear_storage(self) -> None:
        """Drop the persisted copy; in-memory state is untouched."""
        if not self._storage_key:
            return
        try:
            self._storage.remove(self._storage_key)
        except Exception as e:
            logger.warning(f"Failed to clear stored state ({self._storage_key}): {e}")

    def _serialize(self, state: S) -> Dict[str, Any]:
        return state._asdict()

    def _parse_persisted(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Filter persisted data down to fields this state actually has.

        Subclasses extend this to drop values of the wrong shape so that each
        field falls back to its default independently.
        """
        fields = self._state._fields
        return {key: value for key, value in data.items() if key in fields}

    def _save_to_storage(self) -> None:
        if not self._storage_key:
            return
        try:
            self._storage.set(self._storage_key, json.dumps(self._serialize(self._state)))
        except Exception as e:
            logger.error(f"Failed to save state to storage ({self._storage_key}): {e}")

    def _load_from_storage(self) -> None:
        try:
            stored = self._storage.get(self._storage_key)
            if not stored:
                return
            parsed = json.loads(stored)
            if not isinstance(parsed, dict):
                logger.warning(
                    f"Ignoring stored state ({self._storage_key}): expected object, got {type(parsed).__name__}"
                )
                return
            self._state = self._state._replace(**self._parse_persisted(parsed))
        except Exception as e:
            logger.error(f"Failed to load state from storage ({self._storage_key}): {e}")
