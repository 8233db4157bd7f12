"""Interface to the nordvpn command line program.

Every daemon interaction goes through one fixed executable. Arguments are
passed as a list so nothing is ever interpreted by a shell.
"""

import logging
import subprocess
from typing import List, Optional, Tuple

import psutil

from nordvpn_tray.constants import (
    COMMAND,
    DAEMON_PROCESS,
    DEFAULT_COUNTRY,
    DNS_SERVERS,
    SETTING_ENABLED,
    STATUS_DISCONNECTED,
)
from nordvpn_tray.errors import DaemonFailure, ExecutionError
from nordvpn_tray.parser import parse_key_value, parse_list

log = logging.getLogger(__name__)


def target_slug(target: str) -> str:
    """Turn a display name like 'New York' into 'New_York'."""
    return target.replace(" ", "_")


def setting_args(key: str, value: str) -> List[str]:
    """Build the arguments of ``nordvpn set`` that toggle a setting.

    Args:
        key: Setting name as shown by ``nordvpn settings``
        value: Current value of the setting

    Returns:
        Arguments following the program name
    """
    key = key.lower()
    option = "off" if value == SETTING_ENABLED else "on"

    if key == "dns":
        return ["set", key, *DNS_SERVERS]
    if key == "lan discovery":
        return ["set", "lan-discovery", option]
    return ["set", key.replace(" ", ""), option]


def default_status() -> List[Tuple[str, str]]:
    """Status reported when the daemon says it is not connected."""
    return [("Status", STATUS_DISCONNECTED), ("Country", DEFAULT_COUNTRY)]


class NordVPN:
    """Runs subcommands of the nordvpn program."""

    def __init__(self, command: str = COMMAND):
        """Initialize the gateway.

        Args:
            command: Name or path of the nordvpn executable
        """
        self.command = command

    def run(self, subcommand: str, *args: str) -> subprocess.CompletedProcess:
        """Run one subcommand and capture its output.

        Args:
            subcommand: First argument, e.g. 'status'
            *args: Further arguments

        Returns:
            The completed process; a non-zero exit is not an error here

        Raises:
            ExecutionError: If the program could not be started
        """
        cmd = [self.command, subcommand, *args]
        log.debug(f"Running {' '.join(cmd)}")

        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise ExecutionError(f"{self.command} {subcommand}: {e}") from e

    def _check(self, subcommand: str, *args: str) -> str:
        """Run a subcommand that must succeed.

        Returns:
            Captured stdout

        Raises:
            ExecutionError: If the program could not be started
            DaemonFailure: If the program exited with non-zero status
        """
        result = self.run(subcommand, *args)
        if result.returncode != 0:
            raise DaemonFailure(subcommand, result.returncode, result.stdout)
        return result.stdout

    def _succeeds(self, action: str, subcommand: str, *args: str) -> bool:
        try:
            self._check(subcommand, *args)
            return True
        except ExecutionError as e:
            log.error(f"Failed to {action}: {e}")
        except DaemonFailure as e:
            log.debug(f"Failed to {action}: {e}: {e.output.strip()}")
        return False

    def connect(self, target: str) -> bool:
        """Connect to a country or group.

        Args:
            target: Display name of the target

        Returns:
            True if the daemon reported success
        """
        return self._succeeds("connect", "connect", target_slug(target))

    def disconnect(self) -> bool:
        """Disconnect the current session.

        Returns:
            True if the daemon reported success
        """
        return self._succeeds("disconnect", "disconnect")

    def status(self) -> Optional[List[Tuple[str, str]]]:
        """Query the connection status.

        Returns:
            Status pairs, the disconnected default if the daemon reports
            failure, or None if the program could not be run
        """
        try:
            return parse_key_value(self._check("status"))
        except DaemonFailure as e:
            log.debug(f"Status query reported failure: {e}: {e.output.strip()}")
            return default_status()
        except ExecutionError as e:
            log.error(f"Failed to get status: {e}")
            return None

    def _listing(self, subcommand: str) -> Optional[str]:
        # Output is parsed whatever the exit status, like the program prints it
        try:
            return self.run(subcommand).stdout
        except ExecutionError as e:
            log.error(f"Failed to get {subcommand}: {e}")
            return None

    def countries(self) -> Optional[List[str]]:
        """List the countries servers are available in."""
        output = self._listing("countries")
        return None if output is None else parse_list(output)

    def groups(self) -> Optional[List[str]]:
        """List the server groups."""
        output = self._listing("groups")
        return None if output is None else parse_list(output)

    def settings(self) -> Optional[List[Tuple[str, str]]]:
        """List the daemon settings as (key, value) pairs."""
        output = self._listing("settings")
        return None if output is None else parse_key_value(output)

    def set_setting(self, key: str, value: str) -> bool:
        """Toggle a setting to the inverse of its current value.

        Args:
            key: Setting name
            value: Current value

        Returns:
            True if the daemon reported success
        """
        return self._succeeds("set settings", *setting_args(key, value))


def is_daemon_running(name: str = DAEMON_PROCESS) -> bool:
    """Check whether the NordVPN daemon process is alive.

    Args:
        name: Process name of the daemon

    Returns:
        True if a process with that exact name is running
    """
    for proc in psutil.process_iter(["name"]):
        try:
            if proc.info["name"] == name:
                return True
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    return False
