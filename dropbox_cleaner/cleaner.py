"""
Cleanup pass over a Dropbox folder.

Lists the folder tree once, decides per file whether it is older than the
cutoff, and deletes (or reports, in dry-run mode) the files that are.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from .durations import format_duration
from .storage_client import Entry


@dataclass
class CleanupResult:
    """Summary of one cleanup pass."""

    listed: int = 0
    eligible: int = 0
    deleted: int = 0
    failed: int = 0
    aborted: bool = False


def should_delete(entry: Entry, cutoff: datetime) -> bool:
    """Decide whether an entry is old enough to be deleted.

    Folders are always kept; only the files inside them are evaluated.

    Args:
        entry: Listed entry
        cutoff: Files modified strictly before this moment are eligible

    Returns:
        True if the entry should be deleted
    """
    if entry.is_folder or entry.last_modified is None:
        return False
    return entry.last_modified < cutoff


def run_cleanup(client, folder_path: str, max_age: timedelta, dry_run: bool,
                now: Optional[datetime] = None, verbose: bool = True) -> CleanupResult:
    """Run one cleanup pass. Remote failures are logged, never raised.

    Args:
        client: Object providing list_folder(path, recursive) and delete(path)
        folder_path: Folder to clean
        max_age: Files older than this are deleted
        dry_run: Report eligible files instead of deleting them
        now: Reference time for the cutoff, defaults to the current UTC time
        verbose: Whether to print per-file decisions

    Returns:
        CleanupResult with counts for this pass
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - max_age
    result = CleanupResult()

    if verbose:
        print(f"[i] Calling Dropbox API for path '{folder_path}'")

    try:
        entries = client.list_folder(folder_path, recursive=True)
    except Exception as e:
        print(f"[!] Error while calling Dropbox API for path '{folder_path}': {e}")
        print("[!] Aborting and skipping this tick.")
        result.aborted = True
        return result

    result.listed = len(entries)
    if verbose:
        print(f"[i] Dropbox API returned {len(entries)} entries (files and folders) ... Start processing")

    for entry in entries:
        if not should_delete(entry, cutoff):
            continue

        result.eligible += 1
        if verbose:
            print(f"  - File {entry.path} is {format_duration(now - entry.last_modified)} old")

        if dry_run:
            print(f"  - Dry run enabled: The file '{entry.path}' would be deleted")
            continue

        if verbose:
            print(f"  - Deleting file '{entry.path}'")
        try:
            client.delete(entry.path)
        except Exception as e:
            result.failed += 1
            print(f"[!] Error while deleting '{entry.path}': {e}")
            print("[!] Skipping this file.")
            continue

        result.deleted += 1
        if verbose:
            print(f"  - Deleting file '{entry.path}' ... OK")

    return result
