"""
Dropbox Cleaner Package

Periodically deletes files older than a configured age from a Dropbox folder.
"""

__version__ = "1.0.0"

from .cleaner import CleanupResult, run_cleanup, should_delete
from .config import CleanupConfig, ConfigError, ConfigManager
from .scheduler import CleanupScheduler
from .shutdown import ShutdownCoordinator
from .storage_client import Entry, StorageClient, StorageError

__all__ = [
    "CleanupConfig",
    "CleanupResult",
    "CleanupScheduler",
    "ConfigError",
    "ConfigManager",
    "Entry",
    "ShutdownCoordinator",
    "StorageClient",
    "StorageError",
    "run_cleanup",
    "should_delete",
]
