"""In-memory model of what the tray shows."""

import copy
import enum
import threading
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from nordvpn_tray.constants import (
    DEFAULT_COUNTRY,
    ICON_CONNECTED,
    ICON_DISCONNECTED,
    LABEL_CONNECT,
    LABEL_DISCONNECT,
    SETTING_DISABLED,
    SETTING_ENABLED,
    STATUS_CONNECTED,
)

Pairs = List[Tuple[str, str]]


class SelectionSpace(enum.Enum):
    """Which target list the selected index points into."""

    COUNTRIES = "countries"
    GROUPS = "groups"


def is_connected(status: Optional[Pairs]) -> bool:
    """Derive connectivity from status pairs.

    Args:
        status: Status pairs, or None if the daemon was unreachable

    Returns:
        True if a status entry reports 'Connected'
    """
    if not status:
        return False
    return any("Status" in key and value == STATUS_CONNECTED for key, value in status)


def current_country(status: Optional[Pairs]) -> Optional[str]:
    """Get the country the daemon reports, if any."""
    for key, value in status or []:
        if key == "Country":
            return value
    return None


def locate_country(
    country: Optional[str],
    countries: Optional[List[str]],
) -> Tuple[int, List[str]]:
    """Find the reported country in the country list.

    Falls back to the default country as the only entry when the daemon is
    unreachable, reports no country, or reports one missing from the list.

    Args:
        country: Country reported by status
        countries: Fetched country list

    Returns:
        (selected index, country list)
    """
    if country is not None and countries and country in countries:
        return countries.index(country), countries
    return 0, [DEFAULT_COUNTRY]


def is_toggleable(value: str) -> bool:
    return value in (SETTING_ENABLED, SETTING_DISABLED)


def flip_setting(value: str) -> str:
    """Invert an enabled/disabled value, leaving others untouched."""
    if value == SETTING_ENABLED:
        return SETTING_DISABLED
    if value == SETTING_DISABLED:
        return SETTING_ENABLED
    return value


@dataclass
class TrayState:
    """Everything the tray menu is rendered from."""

    status: Pairs = field(default_factory=list)
    countries: List[str] = field(default_factory=lambda: [DEFAULT_COUNTRY])
    groups: List[str] = field(default_factory=list)
    settings: Pairs = field(default_factory=list)
    target_index: int = 0
    space: SelectionSpace = SelectionSpace.COUNTRIES
    connected: bool = False

    @property
    def targets(self) -> List[str]:
        """The target list of the active selection space."""
        if self.space is SelectionSpace.COUNTRIES:
            return self.countries
        return self.groups

    @property
    def selected_target(self) -> Optional[str]:
        targets = self.targets
        if 0 <= self.target_index < len(targets):
            return targets[self.target_index]
        return None

    @property
    def connectivity_label(self) -> str:
        return LABEL_DISCONNECT if self.connected else LABEL_CONNECT

    @property
    def icon_name(self) -> str:
        return ICON_CONNECTED if self.connected else ICON_DISCONNECTED

    def selected_index(self, space: SelectionSpace) -> Optional[int]:
        """Index shown as selected in a submenu, None if none is."""
        if space is not self.space:
            return None
        return self.target_index

    def refresh_targets(
        self,
        status: Optional[Pairs],
        countries: Optional[List[str]],
        groups: Optional[List[str]],
    ) -> None:
        """Replace both target lists and reselect the reported country."""
        self.target_index, self.countries = locate_country(current_country(status), countries)
        self.space = SelectionSpace.COUNTRIES
        self.groups = groups or []


class StateStore:
    """Owner of the shared TrayState.

    The poll thread and the menu action handler both mutate the state.
    Each batch of mutations must happen inside ``with store.lock:``; the
    lock must never be held while the nordvpn program runs.
    """

    def __init__(self, state: Optional[TrayState] = None):
        self.state = state or TrayState()
        self.lock = threading.Lock()

    def snapshot(self) -> TrayState:
        """Get a consistent copy of the state for rendering."""
        with self.lock:
            return copy.deepcopy(self.state)
