"""
Tests for signal-driven shutdown.
"""

import os
import signal
import threading
from datetime import timedelta

from dropbox_cleaner.scheduler import CleanupScheduler
from dropbox_cleaner.shutdown import ShutdownCoordinator


def started_scheduler():
    first_pass = threading.Event()
    scheduler = CleanupScheduler(first_pass.set, timedelta(hours=1))
    scheduler.start()
    assert first_pass.wait(5)
    return scheduler


def test_request_shutdown_stops_scheduler(capsys):
    scheduler = started_scheduler()
    coordinator = ShutdownCoordinator(scheduler)

    coordinator.request_shutdown(signal.SIGINT)
    received = coordinator.wait(poll=0.01)

    assert received == signal.SIGINT
    assert scheduler.is_stopped()
    assert not scheduler.thread.is_alive()
    assert scheduler.passes == 1

    output = capsys.readouterr().out
    assert "Received signal 'SIGINT'" in output
    assert "Shutting down application" in output


def test_first_request_wins():
    scheduler = started_scheduler()
    coordinator = ShutdownCoordinator(scheduler)

    coordinator.request_shutdown(signal.SIGTERM)
    coordinator.request_shutdown(signal.SIGINT)

    assert coordinator.wait(poll=0.01) == signal.SIGTERM


def test_sigterm_triggers_shutdown():
    scheduler = started_scheduler()
    coordinator = ShutdownCoordinator(scheduler)
    previous = signal.getsignal(signal.SIGTERM)

    coordinator.install()
    try:
        os.kill(os.getpid(), signal.SIGTERM)
        received = coordinator.wait(poll=0.01)
    finally:
        coordinator.restore()

    assert received == signal.SIGTERM
    assert scheduler.is_stopped()
    assert signal.getsignal(signal.SIGTERM) is previous


def test_wait_without_scheduler_thread():
    """Test shutdown works when the scheduler was never started on a thread."""
    scheduler = CleanupScheduler(lambda: None, timedelta(hours=1))
    coordinator = ShutdownCoordinator(scheduler)

    coordinator.request_shutdown()
    assert coordinator.wait(poll=0.01) == signal.SIGTERM
