"""Logging setup: syslog for errors, console for everything else."""

import logging
import logging.handlers
import os
from typing import Optional

from nordvpn_tray.constants import APP_ID

SYSLOG_ADDRESS = "/dev/log"

CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
SYSLOG_FORMAT = APP_ID + "[%(process)d]: %(message)s"


def _syslog_handler(address: str) -> Optional[logging.Handler]:
    """Create a handler writing to the local syslog socket.

    Returns:
        The handler, or None if the syslog socket is unavailable
    """
    if not os.path.exists(address):
        return None

    try:
        handler = logging.handlers.SysLogHandler(
            address=address,
            facility=logging.handlers.SysLogHandler.LOG_LOCAL0,
        )
    except OSError:
        return None

    handler.setLevel(logging.ERROR)
    handler.setFormatter(logging.Formatter(SYSLOG_FORMAT))
    return handler


def setup_logging(debug: bool = False, syslog_address: str = SYSLOG_ADDRESS) -> logging.Logger:
    """Configure the root logger once for the whole process.

    Errors go to the system log (facility LOCAL0) when it is reachable.
    A failing log delivery is reported on stderr by logging itself and
    never propagates into the caller.

    Args:
        debug: Log debug messages to the console
        syslog_address: Path of the syslog socket

    Returns:
        The configured root logger
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root.addHandler(console)

    syslog = _syslog_handler(syslog_address)
    if syslog is not None:
        root.addHandler(syslog)
    else:
        root.warning(f"System log at {syslog_address} unavailable, logging to console only")

    logging.raiseExceptions = False
    return root
