"""System tray icon and menu for the NordVPN tray."""

import logging
from typing import List, Optional

from PyQt6.QtCore import QObject, pyqtSlot
from PyQt6.QtGui import QAction, QActionGroup, QIcon
from PyQt6.QtWidgets import QMenu, QSystemTrayIcon

from nordvpn_tray.constants import (
    APP_NAME,
    ICON_CONNECTED,
    ICON_DISCONNECTED,
    ICONS_DIR,
)
from nordvpn_tray.notifications import NotificationManager
from nordvpn_tray.presenter import (
    CHECK,
    RADIO,
    SEPARATOR,
    SUBMENU,
    Action,
    ActionHandler,
    MenuEntry,
    build_menu,
)
from nordvpn_tray.state import StateStore, TrayState
from nordvpn_tray.worker import ActionThread, create_action_thread

log = logging.getLogger(__name__)


def get_icon(name: str) -> QIcon:
    """Get an icon, trying bundled resources first, then system icons.

    Args:
        name: Icon name (without extension)

    Returns:
        QIcon instance
    """
    for ext in [".svg", ".png"]:
        resource_path = ICONS_DIR / f"{name}{ext}"
        if resource_path.exists():
            return QIcon(str(resource_path))

    icon = QIcon.fromTheme(name)
    if not icon.isNull():
        return icon

    # Fallback mappings to system icons
    fallbacks = {
        ICON_CONNECTED: "network-vpn-symbolic",
        ICON_DISCONNECTED: "network-vpn-disconnected-symbolic",
    }

    if name in fallbacks:
        icon = QIcon.fromTheme(fallbacks[name])
        if not icon.isNull():
            return icon

    return QIcon()


class VPNTrayIcon(QObject):
    """System tray icon whose menu mirrors the shared tray state."""

    def __init__(
        self,
        store: StateStore,
        handler: ActionHandler,
        notifications_enabled: bool = True,
        parent: Optional[QObject] = None,
    ):
        """Initialize the tray icon.

        Args:
            store: Shared tray state
            handler: Handler executing menu actions
            notifications_enabled: Show messages on connectivity changes
            parent: Parent QObject
        """
        super().__init__(parent)

        self.store = store
        self.handler = handler

        self.tray = QSystemTrayIcon(parent)
        self.tray.setToolTip(APP_NAME)
        self.notifications = NotificationManager(self.tray, notifications_enabled)

        self._icons = {
            ICON_CONNECTED: get_icon(ICON_CONNECTED),
            ICON_DISCONNECTED: get_icon(ICON_DISCONNECTED),
        }

        self.menu = QMenu()
        self.tray.setContextMenu(self.menu)
        self._submenus: List[QMenu] = []
        self._rendered: Optional[TrayState] = None
        self._action_thread: Optional[ActionThread] = None

        self.refresh()

    @pyqtSlot()
    def refresh(self, force: bool = False) -> None:
        """Re-render icon, tooltip and menu from the current state.

        Nothing is rebuilt if the state did not change since the last call,
        so an open menu is not closed by an idle poll.

        Args:
            force: Rebuild even if the state did not change
        """
        state = self.store.snapshot()
        if not force and state == self._rendered:
            return

        previous = self._rendered
        self._rendered = state

        self.tray.setIcon(self._icons[state.icon_name])
        if state.connected:
            self.tray.setToolTip(f"{APP_NAME} - Connected")
        else:
            self.tray.setToolTip(f"{APP_NAME} - Disconnected")

        self._render_menu(build_menu(state))

        if previous is not None and previous.connected != state.connected:
            self.notifications.transition(state.connected, state.selected_target or "")

    def _render_menu(self, entries: List[MenuEntry]) -> None:
        self.menu.clear()
        for submenu in self._submenus:
            submenu.deleteLater()
        self._submenus = []

        self._add_entries(self.menu, entries)

    def _add_entries(self, menu: QMenu, entries: List[MenuEntry]) -> None:
        group: Optional[QActionGroup] = None

        for entry in entries:
            if entry.kind == SEPARATOR:
                menu.addSeparator()
                continue

            if entry.kind == SUBMENU:
                submenu = menu.addMenu(entry.label)
                self._submenus.append(submenu)
                self._add_entries(submenu, entry.children)
                continue

            action = QAction(entry.label, menu)
            action.setEnabled(entry.enabled)

            if entry.kind in (RADIO, CHECK):
                action.setCheckable(True)
                action.setChecked(entry.checked)

            if entry.kind == RADIO:
                if group is None:
                    group = QActionGroup(menu)
                    group.setExclusive(True)
                group.addAction(action)

            if entry.action is not None:
                # Use default arguments to capture the entry correctly in lambda
                action.triggered.connect(
                    lambda checked, a=entry.action, i=entry.index: self._on_triggered(a, i)
                )

            menu.addAction(action)

    def _on_triggered(self, action: Action, index: Optional[int]) -> None:
        """Run a menu action on a worker thread.

        Args:
            action: Menu action
            index: Entry index for per-entry actions
        """
        if action is Action.EXIT:
            self.handler.dispatch(action)
            return

        if self._action_thread and self._action_thread.isRunning():
            log.info(f"Ignoring {action.value}: another action is still running")
            # Undo the check state Qt toggled on click
            self.refresh(force=True)
            return

        self._action_thread = create_action_thread(self.handler, action, index)
        self._action_thread.finished.connect(self._on_action_finished)
        self._action_thread.error.connect(self._on_action_error)
        self._action_thread.start()

    @pyqtSlot(bool)
    def _on_action_finished(self, success: bool) -> None:
        """Handle action finished signal.

        Args:
            success: Whether the daemon accepted the action
        """
        self._cleanup_action_thread()

        if not success:
            log.info("Action was not applied")
        # Redraw so radio and check marks Qt toggled on click match the state
        self.refresh(force=True)

    @pyqtSlot(str)
    def _on_action_error(self, message: str) -> None:
        """Handle action error signal.

        Args:
            message: Error message
        """
        self.notifications.show("VPN Error", message)

    def _cleanup_action_thread(self) -> None:
        if self._action_thread is None:
            return

        if self._action_thread.isRunning():
            self._action_thread.wait(1000)

        self._action_thread.deleteLater()
        self._action_thread = None

    def show(self) -> None:
        """Show the tray icon."""
        self.tray.show()

    def hide(self) -> None:
        """Hide the tray icon."""
        self.tray.hide()

    @staticmethod
    def is_system_tray_available() -> bool:
        """Check if system tray is available.

        Returns:
            True if system tray is available
        """
        return QSystemTrayIcon.isSystemTrayAvailable()
