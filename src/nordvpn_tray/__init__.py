"""NordVPN Tray - tray indicator for the NordVPN command line client."""

from nordvpn_tray.constants import VERSION as __version__

__all__ = ["__version__"]
