"""
Notification module for the focus core.
Shows a desktop notification when a countdown completes.
"""

import sys
import subprocess
from typing import Optional

from loguru import logger
from PySide6.QtCore import QObject

from .models import CompletedEvent, SessionMode


MESSAGES = {
    SessionMode.FOCUS: ("Focus Complete!", "Great work! Time for a break."),
    SessionMode.BREAK: ("Break Over", "Ready for another focus session?"),
}


class NotificationManager(QObject):
    """
    Best-effort desktop notifications.
    Uses the system tray when one is set, native commands otherwise.
    Display failures are logged and never raised.
    """

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)

        self._tray_icon = None
        self._notification_enabled = True

    def set_tray_icon(self, tray_icon):
        """Set the QSystemTrayIcon used for showing notifications."""
        self._tray_icon = tray_icon

    @property
    def notification_enabled(self) -> bool:
        return self._notification_enabled

    @notification_enabled.setter
    def notification_enabled(self, value: bool):
        self._notification_enabled = value

    def on_completed(self, event: CompletedEvent):
        """Slot for TimerEngine.session_completed."""
        title, body = MESSAGES[event.mode]
        self.display(title, body)

    def display(self, title: str, body: str):
        """Show a desktop notification, ignoring any failure."""
        if not self._notification_enabled:
            return

        try:
            if self._tray_icon is not None and self._tray_icon.isSystemTrayAvailable():
                self._tray_icon.showMessage(title, body)
            else:
                self._show_native_notification(title, body)
        except Exception as e:
            logger.warning("Could not show notification: {}", e)

    def _show_native_notification(self, title: str, message: str):
        """Show notification using native OS commands without waiting for them."""
        system = sys.platform.lower()

        if system == 'darwin':
            script = f'display notification "{message}" with title "{title}"'
            subprocess.Popen(
                ['osascript', '-e', script],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL
            )
        elif system.startswith('linux'):
            subprocess.Popen(
                ['notify-send', title, message],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL
            )
        else:
            logger.debug("No native notifier on {}: {}", system, title)
