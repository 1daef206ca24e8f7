"""
Graceful shutdown on process signals.
"""

import signal
import threading
from typing import Dict, Iterable, Optional

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownCoordinator:
    """Waits for a termination signal and stops the scheduler."""

    def __init__(self, scheduler, signals: Iterable[int] = DEFAULT_SIGNALS):
        """Initialize shutdown coordinator.

        Args:
            scheduler: CleanupScheduler to stop on shutdown
            signals: Signals that trigger shutdown
        """
        self.scheduler = scheduler
        self.signals = tuple(signals)
        self.received: Optional[int] = None
        self._requested = threading.Event()
        self._previous_handlers: Dict[int, object] = {}

    def install(self) -> None:
        """Register signal handlers. Must be called from the main thread."""
        for signum in self.signals:
            self._previous_handlers[signum] = signal.signal(signum, self._handle_signal)

    def restore(self) -> None:
        """Put back the handlers that were active before install()."""
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

    def _handle_signal(self, signum, frame) -> None:
        self.request_shutdown(signum)

    def request_shutdown(self, signum: int = signal.SIGTERM) -> None:
        """Ask for a shutdown as if the given signal had been received."""
        if self.received is None:
            self.received = signum
        self._requested.set()

    def wait(self, poll: float = 0.5) -> int:
        """Block until shutdown is requested, then stop the scheduler.

        Args:
            poll: Seconds between checks, keeps the main thread responsive

        Returns:
            Number of the signal that triggered the shutdown
        """
        while not self._requested.wait(poll):
            pass

        print(f"[i] Received signal '{signal.Signals(self.received).name}'. Sending signal to shutdown ticker loop")
        self.scheduler.stop()

        thread = self.scheduler.thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()

        print("[i] Shutting down application")
        return self.received
