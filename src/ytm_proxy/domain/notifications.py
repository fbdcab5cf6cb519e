"""
Timed, dismissible user-facing notifications.

The manager owns the records and their expiry timers. Rendering happens in
subscribers of ``notification_shown``/``notification_removed``: a log
renderer is always attached, and ``DesktopNotifier`` mirrors to notify-send.
"""

import asyncio
import shutil
import subprocess
import time
import uuid
from typing import Dict, List, NamedTuple, Optional

from loguru import logger

from ..core.events import EventEmitter
from .models import DEFAULT_NOTIFICATION_DURATION_MS, SEVERITIES

NOTIFICATION_SHOWN = "notification_shown"
NOTIFICATION_REMOVED = "notification_removed"
NOTIFICATIONS_CLEARED = "notifications_cleared"

_LOG_LEVELS = {"success": "SUCCESS", "error": "ERROR", "warning": "WARNING", "info": "INFO"}


class Notification(NamedTuple):
    id: str
    severity: str
    title: str
    message: str
    created_at_ms: int
    duration_ms: int  # 0 = sticky


class NotificationManager(EventEmitter):
    """Tracks active notifications and expires them on the event loop.

    Args:
        default_duration_ms: Duration used when callers do not pass one
        loop: Loop for expiry timers (default: the running loop at ``show`` time)
    """

    def __init__(
        self,
        default_duration_ms: int = DEFAULT_NOTIFICATION_DURATION_MS,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        super().__init__()
        self.default_duration_ms = default_duration_ms
        self._loop = loop
        self._notifications: Dict[str, Notification] = {}
        self._timers: Dict[str, asyncio.TimerHandle] = {}
        self.on(NOTIFICATION_SHOWN, _log_notification)

    def show(
        self,
        severity: str,
        title: str,
        message: str,
        duration_ms: Optional[int] = None,
    ) -> str:
        """Show a notification and return its id.

        Args:
            severity: One of success, error, warning, info
            title: Short headline
            message: Body text
            duration_ms: Auto-removal delay; 0 keeps it until removed

        Raises:
            ValueError: If severity is unknown
        """
        if severity not in SEVERITIES:
            raise ValueError(f"Invalid severity: {severity!r}")
        if duration_ms is None:
            duration_ms = self.default_duration_ms

        notification = Notification(
            id=self._generate_id(),
            severity=severity,
            title=title,
            message=message,
            created_at_ms=int(time.time() * 1000),
            duration_ms=duration_ms,
        )
        self._notifications[notification.id] = notification

        if duration_ms > 0:
            loop = self._loop or asyncio.get_running_loop()
            self._timers[notification.id] = loop.call_later(
                duration_ms / 1000, self.remove, notification.id
            )

        self.emit(NOTIFICATION_SHOWN, notification)
        return notification.id

    def remove(self, notification_id: str) -> None:
        """Dismiss a notification. Unknown ids are ignored."""
        notification = self._notifications.pop(notification_id, None)
        if notification is None:
            return

        timer = self._timers.pop(notification_id, None)
        if timer is not None:
            timer.cancel()

        self.emit(NOTIFICATION_REMOVED, notification)

    def clear(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._notifications.clear()
        self.emit(NOTIFICATIONS_CLEARED)

    def get(self, notification_id: str) -> Optional[Notification]:
        return self._notifications.get(notification_id)

    def get_all(self) -> List[Notification]:
        return list(self._notifications.values())

    @property
    def count(self) -> int:
        return len(self._notifications)

    def has_notifications(self) -> bool:
        return bool(self._notifications)

    def success(self, title: str, message: str, duration_ms: Optional[int] = None) -> str:
        return self.show("success", title, message, duration_ms)

    def error(self, title: str, message: str, duration_ms: Optional[int] = None) -> str:
        return self.show("error", title, message, duration_ms)

    def warning(self, title: str, message: str, duration_ms: Optional[int] = None) -> str:
        return self.show("warning", title, message, duration_ms)

    def info(self, title: str, message: str, duration_ms: Optional[int] = None) -> str:
        return self.show("info", title, message, duration_ms)

    @staticmethod
    def _generate_id() -> str:
        return f"notification-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def _log_notification(notification: Notification) -> None:
    logger.log(
        _LOG_LEVELS[notification.severity],
        f"[notification] {notification.title}: {notification.message}",
    )


class DesktopNotifier:
    """Mirror shown notifications to the desktop using notify-send.

    Silently does nothing when notify-send is not installed. Errors are
    logged but never interrupt the caller.
    """

    URGENCY = {"error": "critical", "warning": "normal", "success": "normal", "info": "low"}

    def __init__(self, app_name: str = "ytm-proxy") -> None:
        self.app_name = app_name
        self.available = shutil.which("notify-send") is not None

    def attach(self, manager: NotificationManager) -> None:
        manager.on(NOTIFICATION_SHOWN, self.render)

    def render(self, notification: Notification) -> None:
        if not self.available:
            return

        command = [
            "notify-send",
            "--urgency",
            self.URGENCY.get(notification.severity, "normal"),
            "--app-name",
            self.app_name,
        ]
        if notification.duration_ms > 0:
            command += ["--expire-time", str(notification.duration_ms)]
        command += [notification.title, notification.message]

        try:
            subprocess.run(
                command,
                check=False,  # Don't raise on error
                timeout=2.0,
                capture_output=True,
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            logger.debug(f"notify-send failed: {e}")
