"""Desktop notifications for connectivity transitions."""

from PyQt6.QtWidgets import QSystemTrayIcon


class NotificationManager:
    """Shows tray messages when the daemon connects or disconnects."""

    def __init__(self, tray_icon: QSystemTrayIcon, enabled: bool = True):
        """Initialize the notification manager.

        Args:
            tray_icon: System tray icon to use for notifications
            enabled: Whether to show notifications at all
        """
        self.tray = tray_icon
        self._notifications_enabled = enabled

    def show(self, title: str, message: str, duration_ms: int = 5000) -> None:
        """Show a desktop notification.

        Args:
            title: Notification title
            message: Notification message
            duration_ms: How long to show the notification (milliseconds)
        """
        if not self._notifications_enabled:
            return

        self.tray.showMessage(
            title, message, QSystemTrayIcon.MessageIcon.Information, duration_ms
        )

    def transition(self, connected: bool, target: str = "") -> None:
        """Notify about a connectivity change.

        Args:
            connected: New connectivity
            target: Country or group connected to, if known
        """
        if connected:
            message = f"Connected to {target}" if target else "VPN connection established"
            self.show("VPN Connected", message)
        else:
            self.show("VPN Disconnected", "VPN connection closed")
