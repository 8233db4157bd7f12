"""Keeps the tray state in sync with the daemon by polling it."""

import logging
from typing import Optional

from nordvpn_tray.gateway import NordVPN
from nordvpn_tray.state import StateStore, TrayState, is_connected

log = logging.getLogger(__name__)


def fetch_state(gateway: NordVPN) -> TrayState:
    """Build a fresh state from a full round of daemon queries.

    Used once at startup; unreachable parts fall back to empty lists and
    the default country.

    Args:
        gateway: Gateway to the nordvpn program

    Returns:
        New TrayState
    """
    status = gateway.status()
    state = TrayState(status=status or [], connected=is_connected(status))
    state.refresh_targets(status, gateway.countries(), gateway.groups())
    state.settings = gateway.settings() or []
    return state


class Reconciler:
    """Runs status refresh cycles against a shared StateStore."""

    def __init__(self, gateway: NordVPN, store: StateStore):
        """Initialize the reconciler.

        Args:
            gateway: Gateway to the nordvpn program
            store: Shared tray state
        """
        self.gateway = gateway
        self.store = store

    def poll(self) -> Optional[bool]:
        """Run one refresh cycle.

        The status is always refreshed. When the derived connectivity
        changed since the last cycle the target lists and settings are
        fetched again as well, since the daemon may report different ones
        now.

        Returns:
            The new connectivity if a transition was applied, else None
        """
        status = self.gateway.status()
        if status is None:
            # Daemon unreachable; keep showing the last known state
            return None

        connected = is_connected(status)
        with self.store.lock:
            previous = self.store.state.connected

        if connected == previous:
            with self.store.lock:
                self.store.state.status = status
            return None

        log.info(f"Connectivity changed: {'connected' if connected else 'disconnected'}")
        countries = self.gateway.countries()
        groups = self.gateway.groups()
        settings = self.gateway.settings()

        with self.store.lock:
            state = self.store.state
            state.status = status
            if state.connected != previous:
                # A menu action confirmed a new connectivity meanwhile
                log.debug("Connectivity already updated by an action, skipping transition")
                return None
            state.connected = connected
            state.refresh_targets(status, countries, groups)
            state.settings = settings or []

        return connected
