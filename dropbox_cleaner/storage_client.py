"""
Dropbox listing and deletion operations.

Wraps the Dropbox SDK behind a small client that returns flat Entry objects
and raises StorageError for every remote failure.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

import dropbox
import requests
from dropbox.exceptions import DropboxException
from dropbox.files import FileMetadata, FolderMetadata


class StorageError(Exception):
    """Raised when a Dropbox listing or deletion call fails."""


@dataclass(frozen=True)
class Entry:
    """One item returned by a folder listing."""

    path: str
    is_folder: bool
    last_modified: Optional[datetime] = None


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # The SDK returns naive datetimes that are already in UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def entry_from_metadata(metadata) -> Optional[Entry]:
    """Convert SDK metadata into an Entry.

    Args:
        metadata: FileMetadata, FolderMetadata or DeletedMetadata instance

    Returns:
        Entry for files and folders, None for anything else
    """
    if isinstance(metadata, FileMetadata):
        return Entry(
            path=metadata.path_display,
            is_folder=False,
            last_modified=_as_utc(metadata.server_modified),
        )
    if isinstance(metadata, FolderMetadata):
        return Entry(path=metadata.path_display, is_folder=True)
    return None


class StorageClient:
    """Lists and deletes Dropbox files."""

    def __init__(self, dbx: dropbox.Dropbox):
        """Initialize storage client.

        Args:
            dbx: Authenticated Dropbox SDK handle
        """
        self.dbx = dbx

    def list_folder(self, path: str, recursive: bool = True) -> List[Entry]:
        """List a folder, following continuation cursors until exhausted.

        Args:
            path: Dropbox folder path, e.g. "/Apps/Netatmo/Your Name"
            recursive: Whether to include the contents of sub-folders

        Returns:
            Entries in the order the API returned them

        Raises:
            StorageError: If any page of the listing fails
        """
        # The API addresses the root folder as an empty string
        api_path = "" if path == "/" else path
        entries: List[Entry] = []

        try:
            result = self.dbx.files_list_folder(api_path, recursive=recursive)
            while True:
                for metadata in result.entries:
                    entry = entry_from_metadata(metadata)
                    if entry is not None:
                        entries.append(entry)
                if not result.has_more:
                    break
                result = self.dbx.files_list_folder_continue(result.cursor)
        except (DropboxException, requests.exceptions.RequestException) as e:
            raise StorageError(f"listing '{path}' failed: {e}") from e

        return entries

    def delete(self, path: str) -> None:
        """Delete a single file.

        Args:
            path: Dropbox path of the file to delete

        Raises:
            StorageError: If the deletion fails
        """
        try:
            self.dbx.files_delete_v2(path)
        except (DropboxException, requests.exceptions.RequestException) as e:
            raise StorageError(f"deleting '{path}' failed: {e}") from e
