"""Tests for the notification manager."""

import asyncio
from unittest.mock import patch

import pytest

from ytm_proxy.domain.notifications import (
    NOTIFICATION_REMOVED,
    NOTIFICATION_SHOWN,
    NOTIFICATIONS_CLEARED,
    DesktopNotifier,
    Notification,
    NotificationManager,
)

pytestmark = pytest.mark.anyio


async def test_show_returns_id_and_stores_record() -> None:
    manager = NotificationManager()

    notification_id = manager.show("success", "Saved", "Playlist saved")

    notification = manager.get(notification_id)
    assert notification.severity == "success"
    assert notification.title == "Saved"
    assert notification.message == "Playlist saved"
    assert notification.duration_ms == 5000
    assert manager.count == 1
    assert manager.has_notifications()


async def test_auto_removal_after_duration() -> None:
    manager = NotificationManager()
    notification_id = manager.show("error", "Oops", "failed", 100)

    await asyncio.sleep(0.15)

    assert manager.get(notification_id) is None
    manager.remove(notification_id)  # Second removal is a no-op


async def test_zero_duration_is_sticky() -> None:
    manager = NotificationManager(default_duration_ms=10)
    notification_id = manager.info("Sticky", "stays", duration_ms=0)

    await asyncio.sleep(0.05)

    assert manager.get(notification_id) is not None


async def test_remove_cancels_timer() -> None:
    manager = NotificationManager()
    removed = []
    manager.on(NOTIFICATION_REMOVED, removed.append)
    notification_id = manager.warning("Careful", "slow network", 50)

    manager.remove(notification_id)
    await asyncio.sleep(0.1)

    assert [n.id for n in removed] == [notification_id]


async def test_clear_removes_everything() -> None:
    manager = NotificationManager()
    cleared = []
    manager.on(NOTIFICATIONS_CLEARED, lambda data: cleared.append(True))
    manager.info("One", "first")
    manager.error("Two", "second")

    manager.clear()

    assert manager.get_all() == []
    assert not manager.has_notifications()
    assert cleared == [True]


async def test_ids_are_unique() -> None:
    manager = NotificationManager()
    ids = {manager.info("Hi", str(i)) for i in range(50)}
    assert len(ids) == 50
    assert all(notification_id.startswith("notification-") for notification_id in ids)


async def test_invalid_severity() -> None:
    with pytest.raises(ValueError):
        NotificationManager().show("fatal", "Bad", "severity")


async def test_shown_event_carries_notification() -> None:
    manager = NotificationManager()
    shown = []
    manager.on(NOTIFICATION_SHOWN, shown.append)

    manager.success("Done", "all good")

    assert isinstance(shown[0], Notification)
    assert shown[0].title == "Done"


def test_desktop_notifier_calls_notify_send() -> None:
    notifier = DesktopNotifier()
    notifier.available = True
    notification = Notification("n1", "error", "Playback Error", "boom", 0, 3000)

    with patch("ytm_proxy.domain.notifications.subprocess.run") as mock_run:
        notifier.render(notification)

    command = mock_run.call_args[0][0]
    assert command[0] == "notify-send"
    assert "critical" in command
    assert command[-2:] == ["Playback Error", "boom"]


def test_desktop_notifier_skips_when_unavailable() -> None:
    notifier = DesktopNotifier()
    notifier.available = False

    with patch("ytm_proxy.domain.notifications.subprocess.run") as mock_run:
        notifier.render(Notification("n1", "info", "Hi", "there", 0, 0))

    mock_run.assert_not_called()
