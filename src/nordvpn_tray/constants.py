"""Constants and configuration for the NordVPN tray."""

from pathlib import Path

# Application info
APP_NAME = "NordVPN Tray"
APP_ID = "nordvpn_tray_app"
VERSION = "1.0.0"

# Paths
RESOURCES_DIR = Path(__file__).parent / "resources"
ICONS_DIR = RESOURCES_DIR / "icons"

# External program
COMMAND = "nordvpn"
DAEMON_PROCESS = "nordvpnd"

# Daemon defaults
DEFAULT_COUNTRY = "Netherlands"
DNS_SERVERS = ("103.86.96.100", "103.86.99.100")

# Seconds between two status polls
POLL_INTERVAL = 3.0

# Status values reported by `nordvpn status`
STATUS_CONNECTED = "Connected"
STATUS_DISCONNECTED = "Disconnected"

# Setting values that can be toggled
SETTING_ENABLED = "enabled"
SETTING_DISABLED = "disabled"

# Menu labels
LABEL_CONNECT = "Connect"
LABEL_DISCONNECT = "Disconnect"

# Theme icon names
ICON_CONNECTED = "emblem-default"
ICON_DISCONNECTED = "face-monkey"
