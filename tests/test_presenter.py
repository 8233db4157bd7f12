"""Tests for the menu model and action handler."""

import threading

import pytest

from nordvpn_tray.presenter import (
    CHECK,
    ITEM,
    RADIO,
    SEPARATOR,
    SUBMENU,
    Action,
    ActionHandler,
    build_menu,
)
from nordvpn_tray.reconciler import Reconciler
from nordvpn_tray.state import SelectionSpace, TrayState

from conftest import CONNECTED_STATUS


def _submenu(entries, label):
    for entry in entries:
        if entry.kind == SUBMENU and entry.label == label:
            return entry
    raise AssertionError(f"no submenu {label}")


@pytest.fixture
def handler(gateway, store):
    exits = []
    h = ActionHandler(gateway, store, exit_func=exits.append)
    h.exits = exits
    return h


class TestBuildMenu:
    """Tests for build_menu."""

    def test_layout(self, store):
        """Test that all items are always present in order."""
        entries = build_menu(store.state)

        assert [(e.kind, e.label) for e in entries] == [
            (SUBMENU, "Countries"),
            (SUBMENU, "Groups"),
            (SUBMENU, "Connection info"),
            (SUBMENU, "Settings"),
            (ITEM, "Connect"),
            (SEPARATOR, ""),
            (ITEM, "Exit"),
        ]
        assert entries[4].action is Action.TOGGLE_CONNECTION
        assert entries[6].action is Action.EXIT

    def test_empty_state_keeps_layout(self):
        entries = build_menu(TrayState(countries=[]))
        assert len(entries) == 7
        assert _submenu(entries, "Countries").children == []

    def test_countries_selection(self, store):
        """Test that the selected country is checked in countries mode."""
        countries = _submenu(build_menu(store.state), "Countries")
        groups = _submenu(build_menu(store.state), "Groups")

        assert [c.label for c in countries.children] == ["France", "Germany", "Netherlands"]
        assert [c.checked for c in countries.children] == [False, False, True]
        assert all(c.kind == RADIO and c.action is Action.SELECT_COUNTRY for c in countries.children)
        assert [c.index for c in countries.children] == [0, 1, 2]
        assert not any(g.checked for g in groups.children)

    def test_groups_selection(self, store):
        store.state.space = SelectionSpace.GROUPS
        store.state.target_index = 0
        entries = build_menu(store.state)

        assert [g.checked for g in _submenu(entries, "Groups").children] == [True, False, False]
        assert not any(c.checked for c in _submenu(entries, "Countries").children)

    def test_connection_info_is_read_only(self, store):
        info = _submenu(build_menu(store.state), "Connection info")

        assert [e.label for e in info.children] == ["Status: Disconnected", "Country: Netherlands"]
        assert all(not e.enabled and e.action is None for e in info.children)

    def test_settings_entries(self, store):
        """Test that only enabled/disabled settings are interactive."""
        settings = _submenu(build_menu(store.state), "Settings").children

        assert [s.label for s in settings] == ["Kill Switch: enabled", "Technology: NORDLYNX"]
        assert all(s.kind == CHECK for s in settings)
        assert settings[0].enabled and settings[0].checked
        assert not settings[1].enabled and not settings[1].checked
        assert settings[1].index == 1

    def test_connected_label(self, store):
        store.state.connected = True
        assert build_menu(store.state)[4].label == "Disconnect"


class TestActionHandler:
    """Tests for ActionHandler.dispatch."""

    def test_select_country_from_groups_mode(self, handler, gateway, store):
        """Test that connecting to a country leaves groups mode."""
        store.state.space = SelectionSpace.GROUPS
        store.state.target_index = 1

        assert handler.dispatch(Action.SELECT_COUNTRY, 2) is True

        assert gateway.connected_to == ["Netherlands"]
        state = store.state
        assert state.space is SelectionSpace.COUNTRIES
        assert state.target_index == 2
        assert state.connected is True
        groups = _submenu(build_menu(state), "Groups")
        assert not any(g.checked for g in groups.children)

    def test_select_group(self, handler, gateway, store):
        assert handler.dispatch(Action.SELECT_GROUP, 1) is True

        assert gateway.connected_to == ["Double VPN"]
        assert store.state.space is SelectionSpace.GROUPS
        assert store.state.target_index == 1
        assert store.state.connectivity_label == "Disconnect"

    def test_failed_connect_leaves_state(self, handler, gateway, store):
        """Test that a refused connect changes nothing."""
        gateway.succeed = False
        before = store.snapshot()

        assert handler.dispatch(Action.SELECT_GROUP, 0) is False
        assert store.state == before

    def test_index_out_of_range(self, handler, gateway):
        assert handler.dispatch(Action.SELECT_COUNTRY, 9) is False
        assert handler.dispatch(Action.SELECT_GROUP, None) is False
        assert gateway.calls["connect"] == 0

    def test_toggle_connection_connects_selected_target(self, handler, gateway, store):
        assert handler.dispatch(Action.TOGGLE_CONNECTION) is True

        assert gateway.connected_to == ["Netherlands"]
        assert store.state.connected is True

    def test_toggle_connection_uses_selection_space(self, handler, gateway, store):
        store.state.space = SelectionSpace.GROUPS
        store.state.target_index = 2

        handler.dispatch(Action.TOGGLE_CONNECTION)
        assert gateway.connected_to == ["Onion Over VPN"]

    def test_toggle_connection_disconnects(self, handler, gateway, store):
        store.state.connected = True

        assert handler.dispatch(Action.TOGGLE_CONNECTION) is True
        assert gateway.calls["disconnect"] == 1
        assert gateway.calls["connect"] == 0
        assert store.state.connected is False
        assert store.state.connectivity_label == "Connect"

    def test_failed_disconnect(self, handler, gateway, store):
        store.state.connected = True
        gateway.succeed = False

        assert handler.dispatch(Action.TOGGLE_CONNECTION) is False
        assert store.state.connected is True

    def test_toggle_setting_flips_then_refetches(self, handler, gateway, store):
        """Test the optimistic flip followed by the authoritative listing."""
        seen_before_refetch = []
        gateway.on_settings = lambda: seen_before_refetch.append(list(store.state.settings))
        gateway.settings_result = [("Kill Switch", "enabled"), ("Technology", "OPENVPN")]

        assert handler.dispatch(Action.TOGGLE_SETTING, 0) is True

        assert gateway.set_calls == [("Kill Switch", "enabled")]
        assert seen_before_refetch == [[("Kill Switch", "disabled"), ("Technology", "NORDLYNX")]]
        assert store.state.settings == [("Kill Switch", "enabled"), ("Technology", "OPENVPN")]

    def test_toggle_setting_failure(self, handler, gateway, store):
        gateway.succeed = False

        assert handler.dispatch(Action.TOGGLE_SETTING, 0) is False
        assert store.state.settings[0] == ("Kill Switch", "enabled")
        assert gateway.calls["settings"] == 0

    def test_toggle_setting_out_of_range(self, handler, gateway):
        assert handler.dispatch(Action.TOGGLE_SETTING, 5) is False
        assert gateway.calls["set_setting"] == 0

    def test_exit(self, handler, gateway):
        handler.dispatch(Action.EXIT)

        assert handler.exits == [0]
        assert sum(gateway.calls.values()) == 0

    def test_lock_not_held_during_program_calls(self, handler, gateway, store):
        """Test that the gateway runs without the state lock."""
        held = []
        real_connect = gateway.connect

        def connect(target):
            held.append(store.lock.locked())
            return real_connect(target)

        gateway.connect = connect
        handler.dispatch(Action.SELECT_COUNTRY, 0)

        assert held == [False]

    def test_action_and_poll_are_serialized(self, handler, gateway, store):
        """Test that an action waits for a poll batch holding the lock."""
        locked = threading.Event()
        release = threading.Event()
        done = threading.Event()

        def poll_batch():
            with store.lock:
                locked.set()
                release.wait(5)
                store.state.status = [("Status", "Connected")]

        def click():
            handler.dispatch(Action.SELECT_GROUP, 0)
            done.set()

        poller = threading.Thread(target=poll_batch)
        poller.start()
        assert locked.wait(5)
        clicker = threading.Thread(target=click)
        clicker.start()

        assert not done.wait(0.2)
        release.set()
        poller.join()
        clicker.join()

        assert done.is_set()
        assert store.state.status == [("Status", "Connected")]
        assert store.state.space is SelectionSpace.GROUPS

    def _poll_during_connect(self, gateway, store):
        real_connect = gateway.connect

        def connect(target):
            Reconciler(gateway, store).poll()
            return real_connect(target)

        gateway.connect = connect

    def test_poll_shrinking_countries_during_connect(self, handler, gateway, store):
        """Test that the selection stays valid when a poll replaces the list."""
        gateway.status_result = [("Status", "Connected"), ("Country", "Atlantis")]
        self._poll_during_connect(gateway, store)

        assert handler.dispatch(Action.SELECT_COUNTRY, 2) is True

        state = store.state
        assert state.countries == ["Netherlands"]
        assert state.target_index == 0
        assert state.selected_target == "Netherlands"
        assert handler.dispatch(Action.TOGGLE_CONNECTION) is True
        assert gateway.calls["disconnect"] == 1

    def test_poll_reordering_countries_during_connect(self, handler, gateway, store):
        """Test that the connected target keeps its selection after a reorder."""
        gateway.status_result = CONNECTED_STATUS
        gateway.countries_result = ["Germany", "Netherlands", "Poland"]
        self._poll_during_connect(gateway, store)

        assert handler.dispatch(Action.SELECT_COUNTRY, 2) is True

        assert gateway.connected_to == ["Netherlands"]
        state = store.state
        assert state.space is SelectionSpace.COUNTRIES
        assert state.target_index == 1
        assert state.selected_target == "Netherlands"

    def test_poll_during_group_connect(self, handler, gateway, store):
        """Test that a group selection is looked up again after a poll."""
        gateway.status_result = CONNECTED_STATUS
        gateway.groups_result = ["Double VPN", "P2P"]
        self._poll_during_connect(gateway, store)

        assert handler.dispatch(Action.SELECT_GROUP, 0) is True

        state = store.state
        assert state.space is SelectionSpace.GROUPS
        assert state.selected_target == "P2P"
        assert state.target_index == 1
