"""
Polling fallback for configuration sync.

Runs a callback on a fixed interval in a background thread until stopped.
At most one polling thread exists per poller: start() checks the handle
before creating a thread, stop() clears it.
"""
import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class SyncPoller:
    """Cancellable interval task."""

    def __init__(self, callback: Callable[[], None], interval: float = 2.0, name: str = "dice-config-poller"):
        """Initialize poller.

        Args:
            callback: Called once per tick; exceptions are logged, not raised
            interval: Seconds between ticks
            name: Thread name (shows up in logs)
        """
        self._callback = callback
        self._interval = interval
        self._name = name
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None
        self._lock = threading.Lock()
        self._ticks = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def ticks(self) -> int:
        """Number of completed ticks since construction."""
        return self._ticks

    def is_running(self) -> bool:
        """Check if a polling thread is currently active."""
        with self._lock:
            return self._thread is not None

    def start(self) -> bool:
        """Start polling if not already running.

        Returns:
            True if a new thread was started, False if one was already active
        """
        with self._lock:
            if self._thread is not None:
                return False
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name=self._name,
                daemon=True,
            )
            self._thread.start()
        logger.info(f"Sync polling started (every {self._interval}s)")
        return True

    def stop(self) -> bool:
        """Stop polling.

        Safe to call from the polling thread itself (e.g. when a tick
        succeeds and the owner switches back to notifications).

        Returns:
            True if a running thread was stopped, False if none was active
        """
        with self._lock:
            thread, stop_event = self._thread, self._stop_event
            self._thread = None
            self._stop_event = None

        if thread is None:
            return False

        stop_event.set()
        if thread is not threading.current_thread():
            thread.join(timeout=self._interval + 1.0)
        logger.info("Sync polling stopped")
        return True

    def _run(self, stop_event: threading.Event) -> None:
        """Tick loop; each thread owns its own stop event."""
        while not stop_event.wait(self._interval):
            try:
                self._callback()
            except Exception as e:
                logger.error(f"Sync poll tick failed: {e}", exc_info=True)
            self._ticks += 1

    def stats(self) -> dict:
        """Get poller statistics."""
        return {
            "running": self.is_running(),
            "interval": self._interval,
            "ticks": self._ticks,
        }
