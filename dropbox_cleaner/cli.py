"""
Command Line Interface for Dropbox Cleaner.

Provides the CLI entry point that parses flags, authenticates and runs the
cleanup scheduler until the process receives SIGINT or SIGTERM.
"""

import argparse
import os
import sys
import time
from typing import Callable, List, Optional

from dotenv import load_dotenv

from . import __version__
from .auth import AuthError, init_dropbox_client
from .cleaner import run_cleanup
from .config import CleanupConfig, ConfigError, ConfigManager
from .durations import format_duration
from .scheduler import CleanupScheduler
from .shutdown import ShutdownCoordinator
from .storage_client import StorageClient

API_TOKEN_ENV = "DROPBOX_CLEANER_API_TOKEN"
PATH_ENV = "DROPBOX_PATH"
APP_KEY_ENV = "DROPBOX_CLEANER_APP_KEY"
APP_SECRET_ENV = "DROPBOX_CLEANER_APP_SECRET"


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="dropbox-cleaner",
        description="Periodically delete files older than a given age from a Dropbox folder.",
    )
    parser.add_argument("--token-storage",
                        help="File path to store the auth token. Example value: '/home/user/auth.json'.")
    parser.add_argument("--path",
                        help="Folder path to observe and clean. Example value: '/Apps/Netatmo/Your Name'. "
                             f"Required unless {PATH_ENV} is set.")
    parser.add_argument("--interval",
                        help="Interval in which the cleaning operation is triggered. Example value: '24h'.")
    parser.add_argument("--file-age",
                        help="Every file inside path that is older than this is deleted. Default: '168h' (7 days).")
    parser.add_argument("--dry", action="store_true", default=None,
                        help="Run in dry mode: files to be deleted are printed, nothing is deleted.")
    parser.add_argument("--abort-timeout", type=int,
                        help="Seconds to wait before the first pass in production mode.")
    parser.add_argument("--config", default="config.json", help="Main configuration file.")
    parser.add_argument("--local-config", default="config.local.json", help="Local overrides configuration file.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_config(args: argparse.Namespace) -> CleanupConfig:
    """Merge config files, environment and flags into a CleanupConfig.

    Raises:
        ConfigError: If the configuration is invalid
    """
    config_manager = ConfigManager(args.config, args.local_config)
    config_manager.apply_overrides(
        path=args.path or os.getenv(PATH_ENV) or None,
        token_storage=args.token_storage,
        interval=args.interval,
        file_age=args.file_age,
        dry_run=args.dry,
        abort_timeout=args.abort_timeout,
    )
    return config_manager.build_cleanup_config()


def make_cleanup_pass(client, config: CleanupConfig) -> Callable[[], None]:
    """Bind a storage client and settings into a pass for the scheduler."""
    def cleanup_pass() -> None:
        result = run_cleanup(client, config.folder_path, config.max_age, config.dry_run,
                             verbose=config.verbose)
        if result.aborted:
            return
        if config.dry_run:
            print(f"[i] {result.eligible} of {result.listed} entries would be deleted")
        else:
            print(f"[i] Deleted {result.deleted} of {result.eligible} eligible files ({result.failed} failed)")

    return cleanup_pass


def print_settings(config: CleanupConfig) -> None:
    """Print the settings the cleaner operates with."""
    print("[i] Settings under which we operate:")
    print(f"  * Cleaning path: '{config.folder_path}'")
    print(f"  * Every {format_duration(config.interval)}")
    print(f"  * Delete files older than {format_duration(config.max_age)}")
    if config.dry_run:
        print("  * Not deleting files. Printing them instead. Running in dry run mode")
        print("=" * 40)
    else:
        print("*" * 5)
        print("  * Running in production mode: Files will be deleted")
        print(f"  * Sleeping for {config.abort_timeout} seconds to provide you the opportunity to abort the process")
        print("  * If everything is fine, just wait and the app will do the rest")
        print("=" * 40)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for Dropbox Cleaner."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        api_token = os.getenv(API_TOKEN_ENV, "")
        if not api_token:
            raise ConfigError(
                f"No Dropbox API token was found. Please ensure the environment variable "
                f"{API_TOKEN_ENV} is set correctly."
            )
        config = load_config(args)

        print("=" * 40)
        print(f"Dropbox Cleaner v{__version__}")
        print("=" * 40)

        dbx = init_dropbox_client(
            config.token_storage,
            api_token,
            app_key=os.getenv(APP_KEY_ENV),
            app_secret=os.getenv(APP_SECRET_ENV),
        )
        print_settings(config)
        if not config.dry_run and config.abort_timeout:
            time.sleep(config.abort_timeout)

    except ConfigError as e:
        print(f"[!] {e}")
        return 1
    except AuthError as e:
        print(f"[!] Initialization of the Dropbox API client failed: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n[!] Interrupted by user")
        return 1

    client = StorageClient(dbx)
    scheduler = CleanupScheduler(make_cleanup_pass(client, config), config.interval)
    coordinator = ShutdownCoordinator(scheduler)
    coordinator.install()
    try:
        scheduler.start()
        coordinator.wait()
    finally:
        coordinator.restore()

    return 0


if __name__ == "__main__":
    sys.exit(main())
