"""
Tests for the Dropbox listing and deletion client.
"""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
import requests
from dropbox.exceptions import DropboxException
from dropbox.files import DeletedMetadata, FileMetadata, FolderMetadata

from dropbox_cleaner.storage_client import Entry, StorageClient, StorageError, entry_from_metadata

MODIFIED = datetime(2024, 1, 15, 8, 30, 0)


def file_metadata(path):
    name = path.rsplit("/", 1)[-1]
    return FileMetadata(
        name=name,
        id=f"id:{name}",
        client_modified=MODIFIED,
        server_modified=MODIFIED,
        rev="015f0a1b2c3d4e5f6",
        size=1024,
        path_lower=path.lower(),
        path_display=path,
    )


def folder_metadata(path):
    name = path.rsplit("/", 1)[-1]
    return FolderMetadata(name=name, id=f"id:{name}", path_lower=path.lower(), path_display=path)


class FakeDropbox:
    """Serves pre-built listing pages and records calls."""

    def __init__(self, pages, error=None, continue_error=None):
        self.pages = list(pages)
        self.error = error
        self.continue_error = continue_error
        self.list_calls = []
        self.continue_calls = []
        self.deleted = []

    def _page(self, index):
        return SimpleNamespace(
            entries=self.pages[index],
            has_more=index < len(self.pages) - 1,
            cursor=f"cursor-{index + 1}",
        )

    def files_list_folder(self, path, recursive=False):
        self.list_calls.append((path, recursive))
        if self.error is not None:
            raise self.error
        return self._page(0)

    def files_list_folder_continue(self, cursor):
        self.continue_calls.append(cursor)
        if self.continue_error is not None:
            raise self.continue_error
        return self._page(int(cursor.split("-")[1]))

    def files_delete_v2(self, path):
        if self.error is not None:
            raise self.error
        self.deleted.append(path)


def test_entry_from_file_metadata():
    entry = entry_from_metadata(file_metadata("/Camera/Photo.jpg"))

    assert entry == Entry(
        path="/Camera/Photo.jpg",
        is_folder=False,
        last_modified=MODIFIED.replace(tzinfo=timezone.utc),
    )


def test_entry_from_folder_metadata():
    entry = entry_from_metadata(folder_metadata("/Camera"))

    assert entry.is_folder
    assert entry.last_modified is None


def test_deleted_metadata_is_ignored():
    assert entry_from_metadata(DeletedMetadata(name="gone.jpg", path_display="/gone.jpg")) is None


def test_list_folder_follows_pagination():
    dbx = FakeDropbox([
        [folder_metadata("/Camera"), file_metadata("/Camera/a.jpg")],
        [file_metadata("/Camera/b.jpg")],
        [file_metadata("/Camera/c.jpg")],
    ])

    entries = StorageClient(dbx).list_folder("/Camera")

    assert [e.path for e in entries] == ["/Camera", "/Camera/a.jpg", "/Camera/b.jpg", "/Camera/c.jpg"]
    assert dbx.list_calls == [("/Camera", True)]
    assert dbx.continue_calls == ["cursor-1", "cursor-2"]


def test_root_folder_uses_empty_path():
    dbx = FakeDropbox([[]])

    assert StorageClient(dbx).list_folder("/", recursive=False) == []
    assert dbx.list_calls == [("", False)]


@pytest.mark.parametrize("error", [
    DropboxException("req-1", "path/not_found"),
    requests.exceptions.ConnectionError("connection reset"),
])
def test_list_folder_wraps_errors(error):
    dbx = FakeDropbox([[]], error=error)

    with pytest.raises(StorageError, match="listing '/Camera' failed"):
        StorageClient(dbx).list_folder("/Camera")


def test_failure_on_later_page_fails_listing():
    dbx = FakeDropbox([[file_metadata("/a.jpg")], [file_metadata("/b.jpg")]],
                      continue_error=DropboxException("req-2", "reset"))

    with pytest.raises(StorageError):
        StorageClient(dbx).list_folder("/")


def test_delete():
    dbx = FakeDropbox([])

    StorageClient(dbx).delete("/Camera/a.jpg")

    assert dbx.deleted == ["/Camera/a.jpg"]


def test_delete_wraps_errors():
    dbx = FakeDropbox([], error=DropboxException("req-3", "path_lookup/not_found"))

    with pytest.raises(StorageError, match="deleting '/Camera/a.jpg' failed"):
        StorageClient(dbx).delete("/Camera/a.jpg")
