"""
Synchronous publish/subscribe primitive shared by the session services.
"""

from typing import Any, Callable, Dict, List, Optional

from loguru import logger

EventHandler = Callable[[Any], None]


class EventEmitter:
    """Named-event dispatcher.

    Handlers run synchronously in registration order. Registering the same
    handler twice makes it fire twice. A handler that raises is logged and
    skipped; the remaining handlers still run and ``emit`` never raises.
    """

    def __init__(self) -> None:
        self._events: Dict[str, List[EventHandler]] = {}

    def on(self, event: str, handler: EventHandler) -> None:
        """Register ``handler`` for ``event``."""
        self._events.setdefault(event, []).append(handler)

    def off(self, event: str, handler: EventHandler) -> None:
        """Remove the first registration of ``handler`` for ``event``, if any."""
        handlers = self._events.get(event)
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return
        if not handlers:
            del self._events[event]

    def emit(self, event: str, data: Any = None) -> None:
        """Invoke every handler currently registered for ``event``.

        The handler list is copied first so handlers may subscribe,
        unsubscribe or emit again while dispatch is in progress.
        """
        for handler in list(self._events.get(event, ())):
            try:
                handler(data)
            except Exception:
                logger.exception(f"Error in event handler for {event}")

    def remove_all_listeners(self, event: Optional[str] = None) -> None:
        """Clear the handlers of one event, or of every event when ``event`` is None."""
        if event is None:
            self._events.clear()
        else:
            self._events.pop(event, None)

    def listener_count(self, event: str) -> int:
        return len(self._events.get(event, ()))
