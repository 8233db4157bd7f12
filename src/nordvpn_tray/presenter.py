"""Menu model of the tray and the handler for its actions.

The menu is described with plain ``MenuEntry`` objects so it can be built
and checked without a running Qt application. Every interactive entry
carries an ``Action`` and an optional index, and all of them are executed
by ``ActionHandler.dispatch``.
"""

import enum
import logging
import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from nordvpn_tray.constants import SETTING_ENABLED
from nordvpn_tray.gateway import NordVPN
from nordvpn_tray.state import (
    SelectionSpace,
    StateStore,
    TrayState,
    flip_setting,
    is_toggleable,
)

log = logging.getLogger(__name__)


class Action(enum.Enum):
    """User actions available from the menu."""

    SELECT_COUNTRY = "select_country"
    SELECT_GROUP = "select_group"
    TOGGLE_SETTING = "toggle_setting"
    TOGGLE_CONNECTION = "toggle_connection"
    EXIT = "exit"


# Entry kinds
SUBMENU = "submenu"
RADIO = "radio"
CHECK = "check"
ITEM = "item"
SEPARATOR = "separator"


@dataclass
class MenuEntry:
    kind: str
    label: str = ""
    enabled: bool = True
    checked: bool = False
    action: Optional[Action] = None
    index: Optional[int] = None
    children: List["MenuEntry"] = field(default_factory=list)


def _target_menu(label: str, targets: List[str], selected: Optional[int], action: Action) -> MenuEntry:
    return MenuEntry(
        SUBMENU,
        label,
        children=[
            MenuEntry(RADIO, target, checked=(i == selected), action=action, index=i)
            for i, target in enumerate(targets)
        ],
    )


def build_menu(state: TrayState) -> List[MenuEntry]:
    """Render the tray menu from a state snapshot.

    Args:
        state: State to render

    Returns:
        Top level menu entries
    """
    info = [MenuEntry(ITEM, f"{key}: {value}", enabled=False) for key, value in state.status]
    settings = [
        MenuEntry(
            CHECK,
            f"{key}: {value}",
            enabled=is_toggleable(value),
            checked=(value == SETTING_ENABLED),
            action=Action.TOGGLE_SETTING,
            index=i,
        )
        for i, (key, value) in enumerate(state.settings)
    ]

    return [
        _target_menu(
            "Countries",
            state.countries,
            state.selected_index(SelectionSpace.COUNTRIES),
            Action.SELECT_COUNTRY,
        ),
        _target_menu(
            "Groups",
            state.groups,
            state.selected_index(SelectionSpace.GROUPS),
            Action.SELECT_GROUP,
        ),
        MenuEntry(SUBMENU, "Connection info", children=info),
        MenuEntry(SUBMENU, "Settings", children=settings),
        MenuEntry(ITEM, state.connectivity_label, action=Action.TOGGLE_CONNECTION),
        MenuEntry(SEPARATOR),
        MenuEntry(ITEM, "Exit", action=Action.EXIT),
    ]


class ActionHandler:
    """Executes menu actions against the daemon and the shared state.

    The nordvpn program always runs outside the state lock; only the
    resulting state changes are applied under it.
    """

    def __init__(
        self,
        gateway: NordVPN,
        store: StateStore,
        exit_func: Callable[[int], None] = os._exit,
    ):
        """Initialize the handler.

        Args:
            gateway: Gateway to the nordvpn program
            store: Shared tray state
            exit_func: Called with the exit code on Action.EXIT
        """
        self.gateway = gateway
        self.store = store
        self._exit = exit_func

    def dispatch(self, action: Action, index: Optional[int] = None) -> bool:
        """Execute one menu action.

        Args:
            action: Action to execute
            index: Entry index for per-entry actions

        Returns:
            True if the daemon reported success and the state was updated
        """
        log.debug(f"Dispatching {action.value} (index={index})")

        if action is Action.SELECT_COUNTRY:
            return self.connect(index, SelectionSpace.COUNTRIES)
        if action is Action.SELECT_GROUP:
            return self.connect(index, SelectionSpace.GROUPS)
        if action is Action.TOGGLE_SETTING:
            return self.toggle_setting(index)
        if action is Action.TOGGLE_CONNECTION:
            return self.toggle_connection()
        if action is Action.EXIT:
            log.info("Exit requested")
            self._exit(0)
            return False
        raise ValueError(f"Unknown action: {action}")

    def connect(self, index: Optional[int], space: SelectionSpace) -> bool:
        """Connect to the target at index of a selection space."""
        with self.store.lock:
            state = self.store.state
            targets = state.countries if space is SelectionSpace.COUNTRIES else state.groups
            if index is None or not 0 <= index < len(targets):
                log.warning(f"No {space.value} entry at index {index}")
                return False
            target = targets[index]

        log.info(f"Connecting to {target}")
        if not self.gateway.connect(target):
            return False

        with self.store.lock:
            state = self.store.state
            # A poll may have replaced the lists while connecting
            targets = state.countries if space is SelectionSpace.COUNTRIES else state.groups
            state.space = space
            state.target_index = targets.index(target) if target in targets else 0
            state.connected = True
        return True

    def disconnect(self) -> bool:
        log.info("Disconnecting")
        if not self.gateway.disconnect():
            return False

        with self.store.lock:
            self.store.state.connected = False
        return True

    def toggle_connection(self) -> bool:
        """Disconnect if connected, else connect to the selected target."""
        with self.store.lock:
            state = self.store.state
            connected = state.connected
            index = state.target_index
            space = state.space

        if connected:
            return self.disconnect()
        return self.connect(index, space)

    def toggle_setting(self, index: Optional[int]) -> bool:
        """Toggle the setting at index.

        The local value is flipped as soon as the daemon accepts the change
        and then replaced by a fresh settings listing.
        """
        with self.store.lock:
            settings = self.store.state.settings
            if index is None or not 0 <= index < len(settings):
                log.warning(f"No setting at index {index}")
                return False
            key, value = settings[index]

        if not self.gateway.set_setting(key, value):
            return False

        with self.store.lock:
            settings = self.store.state.settings
            if index < len(settings) and settings[index][0] == key:
                settings[index] = (key, flip_setting(value))

        fresh = self.gateway.settings()

        with self.store.lock:
            self.store.state.settings = fresh or []
        return True
