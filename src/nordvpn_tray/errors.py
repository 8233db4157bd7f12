"""Exceptions raised around the nordvpn command line program."""


class TrayError(Exception):
    """Base error for the tray."""
    pass


class ExecutionError(TrayError):
    """The nordvpn program could not be run at all."""
    pass


class DaemonFailure(TrayError):
    """The nordvpn program ran but reported a failure.

    A failing ``status`` query simply means the VPN is disconnected, so this
    is information rather than an error worth logging.
    """

    def __init__(self, subcommand: str, returncode: int, output: str = ""):
        super().__init__(f"'{subcommand}' exited with status {returncode}")
        self.subcommand = subcommand
        self.returncode = returncode
        self.output = output
