"""Shared fixtures for nordvpn_tray tests."""

import os
from collections import Counter

import pytest

from nordvpn_tray.gateway import NordVPN
from nordvpn_tray.state import StateStore, TrayState

CONNECTED_STATUS = [
    ("Status", "Connected"),
    ("Hostname", "nl123.nordvpn.com"),
    ("Country", "Germany"),
    ("City", "Berlin"),
]

DISCONNECTED_STATUS = [("Status", "Disconnected"), ("Country", "Netherlands")]


class FakeNordVPN(NordVPN):
    """Gateway returning canned answers and counting calls."""

    def __init__(self):
        super().__init__("nordvpn-fake")
        self.calls = Counter()
        self.connected_to = []
        self.set_calls = []
        self.status_result = list(DISCONNECTED_STATUS)
        self.countries_result = ["France", "Germany", "Netherlands"]
        self.groups_result = ["P2P", "Double VPN", "Onion Over VPN"]
        self.settings_result = [("Kill Switch", "enabled"), ("Technology", "NORDLYNX")]
        self.succeed = True
        self.on_settings = None

    def run(self, subcommand, *args):
        raise AssertionError("fake gateway must not spawn processes")

    def connect(self, target):
        self.calls["connect"] += 1
        self.connected_to.append(target)
        return self.succeed

    def disconnect(self):
        self.calls["disconnect"] += 1
        return self.succeed

    def status(self):
        self.calls["status"] += 1
        return self.status_result

    def countries(self):
        self.calls["countries"] += 1
        return self.countries_result

    def groups(self):
        self.calls["groups"] += 1
        return self.groups_result

    def settings(self):
        self.calls["settings"] += 1
        if self.on_settings is not None:
            self.on_settings()
        return self.settings_result

    def set_setting(self, key, value):
        self.calls["set_setting"] += 1
        self.set_calls.append((key, value))
        return self.succeed


@pytest.fixture
def gateway():
    return FakeNordVPN()


@pytest.fixture
def store():
    return StateStore(
        TrayState(
            status=list(DISCONNECTED_STATUS),
            countries=["France", "Germany", "Netherlands"],
            groups=["P2P", "Double VPN", "Onion Over VPN"],
            settings=[("Kill Switch", "enabled"), ("Technology", "NORDLYNX")],
            target_index=2,
        )
    )


@pytest.fixture(scope="session")
def qapp():
    """QApplication on the offscreen platform, shared by the Qt tests."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    QtWidgets = pytest.importorskip("PyQt6.QtWidgets")
    return QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
