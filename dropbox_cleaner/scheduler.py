"""
Fixed-interval scheduler for cleanup passes.

Runs one pass immediately, then one pass per interval until stopped. Passes
never overlap and a stop request only takes effect between passes.
"""

import math
import threading
import time
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Callable, Optional

RUNNING = "running"
STOPPED = "stopped"


class CleanupScheduler:
    """Owns the recurring schedule of cleanup passes."""

    def __init__(self, run_pass: Callable[[], object], interval: timedelta,
                 stop_event: Optional[threading.Event] = None,
                 clock: Callable[[], float] = time.monotonic):
        """Initialize scheduler.

        Args:
            run_pass: Callable executing a single cleanup pass
            interval: Time between ticks
            stop_event: Event signalling a stop request
            clock: Monotonic clock in seconds
        """
        if interval <= timedelta(0):
            raise ValueError("interval must be positive")
        self.run_pass = run_pass
        self.interval = interval.total_seconds()
        self.clock = clock
        self.state: Optional[str] = None
        self.passes = 0
        self._stop_event = stop_event or threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def thread(self) -> Optional[threading.Thread]:
        return self._thread

    def _tick(self) -> None:
        print("[i] Received interval tick. Executing Dropbox cleaning operation")
        try:
            self.run_pass()
        except Exception as e:
            print(f"[!] Cleaning operation failed unexpectedly: {e}")
        self.passes += 1
        print("[i] Dropbox cleaning operation done")

    def _report_next_tick(self, deadline: float) -> None:
        remaining = max(0.0, deadline - self.clock())
        next_tick = datetime.now(timezone.utc) + timedelta(seconds=remaining)
        print(f"[i] Next interval tick: {format_datetime(next_tick, usegmt=True)}")

    def run(self) -> None:
        """Run passes until stop() is called. Blocks the calling thread."""
        self.state = RUNNING
        print("[i] Starting ticker")

        self._tick()
        deadline = self.clock() + self.interval
        self._report_next_tick(deadline)

        while True:
            timeout = max(0.0, deadline - self.clock())
            if self._stop_event.wait(timeout):
                break

            self._tick()

            deadline += self.interval
            now = self.clock()
            if deadline <= now:
                # Missed ticks are dropped; only the latest one fires
                missed = math.floor((now - deadline) / self.interval)
                deadline += missed * self.interval
            self._report_next_tick(deadline)

        self._shutdown()

    def _shutdown(self) -> None:
        print("[i] Signal received to shutdown ticker loop")
        self.state = STOPPED
        print("[i] Ticker loop shutdown")

    def start(self) -> threading.Thread:
        """Run the scheduler on a background thread.

        Returns:
            The started thread
        """
        self._thread = threading.Thread(target=self.run, name="cleanup-scheduler", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self) -> None:
        """Request a stop. An in-flight pass is allowed to finish."""
        self._stop_event.set()

    def is_stopped(self) -> bool:
        return self.state == STOPPED
