"""Main application controller for the NordVPN tray."""

import argparse
import logging
import signal
import sys
from dataclasses import dataclass
from typing import List, Optional

from PyQt6.QtCore import QTimer
from PyQt6.QtWidgets import QApplication

from nordvpn_tray.constants import APP_ID, APP_NAME, COMMAND, POLL_INTERVAL, VERSION
from nordvpn_tray.gateway import NordVPN, is_daemon_running
from nordvpn_tray.log import setup_logging
from nordvpn_tray.presenter import ActionHandler
from nordvpn_tray.reconciler import Reconciler, fetch_state
from nordvpn_tray.state import StateStore
from nordvpn_tray.tray import VPNTrayIcon
from nordvpn_tray.worker import PollThread

log = logging.getLogger(__name__)


@dataclass
class AppConfig:
    """Runtime options from the command line."""

    command: str = COMMAND
    interval: float = POLL_INTERVAL
    debug: bool = False
    notifications: bool = True


def parse_args(argv: Optional[List[str]] = None) -> AppConfig:
    """Parse command line options.

    Args:
        argv: Arguments without the program name, defaults to sys.argv

    Returns:
        Parsed options
    """
    parser = argparse.ArgumentParser(
        prog="nordvpn-tray",
        description="Tray indicator for the NordVPN command line client",
    )
    parser.add_argument(
        "--command", default=COMMAND,
        help=f"nordvpn executable to run (default: {COMMAND})",
    )
    parser.add_argument(
        "--interval", type=float, default=POLL_INTERVAL,
        help=f"seconds between status polls (default: {POLL_INTERVAL:g})",
    )
    parser.add_argument("--debug", action="store_true", help="log debug messages")
    parser.add_argument(
        "--no-notifications", dest="notifications", action="store_false",
        help="do not show messages when the connection changes",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")

    args = parser.parse_args(argv)
    if args.interval <= 0:
        parser.error("--interval must be positive")

    return AppConfig(
        command=args.command,
        interval=args.interval,
        debug=args.debug,
        notifications=args.notifications,
    )


class TrayApplication:
    """Wires the gateway, state, poll thread and tray together."""

    def __init__(self, config: AppConfig):
        """Initialize the application.

        Args:
            config: Runtime options
        """
        self.config = config
        self.app = QApplication(sys.argv[:1])

        # Set application metadata
        self.app.setApplicationName(APP_NAME)
        self.app.setApplicationDisplayName(APP_NAME)
        self.app.setDesktopFileName(APP_ID)
        self.app.setQuitOnLastWindowClosed(False)  # Keep running in tray

        self.gateway = NordVPN(config.command)
        self.store = StateStore(fetch_state(self.gateway))

        if not self.store.state.connected:
            log.error("Failed to connect. Please ensure that the NordVPN daemon is running.")
            if not is_daemon_running():
                log.warning("No NordVPN daemon process found")

        if not VPNTrayIcon.is_system_tray_available():
            log.warning(
                "System tray is not available. On GNOME, install the "
                "'gnome-shell-extension-appindicator' extension."
            )

        self.handler = ActionHandler(self.gateway, self.store)
        self.tray = VPNTrayIcon(self.store, self.handler, config.notifications)

        self.poller = PollThread(Reconciler(self.gateway, self.store), config.interval)
        self.poller.state_changed.connect(self.tray.refresh)

    def run(self) -> int:
        """Run the application until the event loop quits.

        Returns:
            Exit code
        """
        self.tray.show()
        self.poller.start()

        # Let Python handle SIGINT while the Qt event loop runs
        signal.signal(signal.SIGINT, lambda *_: self.app.quit())
        timer = QTimer()
        timer.timeout.connect(lambda: None)
        timer.start(500)

        try:
            return self.app.exec()
        finally:
            self.poller.stop()
            self.tray.hide()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point.

    Returns:
        Exit code
    """
    config = parse_args(argv)
    setup_logging(config.debug)
    log.info(f"{APP_NAME} {VERSION} starting")

    app = TrayApplication(config)
    return app.run()


if __name__ == "__main__":
    sys.exit(main())
