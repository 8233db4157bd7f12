"""QThread workers so the nordvpn program never runs on the UI thread."""

import logging
import threading
from typing import Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal

from nordvpn_tray.constants import POLL_INTERVAL
from nordvpn_tray.presenter import Action, ActionHandler
from nordvpn_tray.reconciler import Reconciler

log = logging.getLogger(__name__)


class ActionWorker(QObject):
    """Worker executing one menu action."""

    # Signals
    finished = pyqtSignal(bool)  # success
    error = pyqtSignal(str)

    def __init__(self, handler: ActionHandler, action: Action, index: Optional[int] = None):
        """Initialize the action worker.

        Args:
            handler: Handler executing the action
            action: Menu action
            index: Entry index for per-entry actions
        """
        super().__init__()
        self.handler = handler
        self.action = action
        self.index = index

    def run(self) -> None:
        """Execute the action."""
        try:
            success = self.handler.dispatch(self.action, self.index)
        except Exception as e:
            log.exception(f"Action {self.action.value} failed")
            self.error.emit(str(e))
            success = False
        self.finished.emit(success)


class ActionThread(QThread):
    """Thread wrapper for an ActionWorker."""

    # Forward signals from worker
    finished = pyqtSignal(bool)
    error = pyqtSignal(str)

    def __init__(self, worker: ActionWorker):
        """Initialize the action thread.

        Args:
            worker: Worker to run
        """
        super().__init__()
        self.worker = worker

        self.worker.finished.connect(self.finished.emit)
        self.worker.error.connect(self.error.emit)

        self.worker.moveToThread(self)

    def run(self) -> None:
        """Run the worker."""
        self.worker.run()


def create_action_thread(
    handler: ActionHandler,
    action: Action,
    index: Optional[int] = None,
) -> ActionThread:
    """Create a thread executing one menu action.

    Args:
        handler: Handler executing the action
        action: Menu action
        index: Entry index for per-entry actions

    Returns:
        Configured ActionThread
    """
    return ActionThread(ActionWorker(handler, action, index))


class PollThread(QThread):
    """Thread running the reconciler on a fixed interval.

    The interval is measured from the end of one cycle to the start of the
    next, so cycles never overlap. The first cycle also waits one interval.
    """

    state_changed = pyqtSignal()

    def __init__(self, reconciler: Reconciler, interval: float = POLL_INTERVAL):
        """Initialize the poll thread.

        Args:
            reconciler: Reconciler running the refresh cycles
            interval: Seconds between cycles
        """
        super().__init__()
        self.reconciler = reconciler
        self.interval = interval
        self._stop_event = threading.Event()

    def run(self) -> None:
        """Poll until stopped."""
        log.debug(f"Polling every {self.interval}s")
        while not self._stop_event.wait(self.interval):
            try:
                self.reconciler.poll()
            except Exception:
                log.exception("Status refresh failed")
                continue
            self.state_changed.emit()

    def stop(self, timeout_ms: int = 5000) -> None:
        """Stop polling and wait for the current cycle to end.

        Args:
            timeout_ms: Milliseconds to wait for the thread
        """
        self._stop_event.set()
        self.wait(timeout_ms)
