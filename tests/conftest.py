"""Shared fakes for the Dropbox Cleaner tests."""

from datetime import datetime, timedelta, timezone

import pytest

from dropbox_cleaner.storage_client import Entry, StorageError

NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeStorageClient:
    """Records listing and delete calls instead of talking to Dropbox."""

    def __init__(self, entries=None, list_error=None, failing_paths=()):
        self.entries = list(entries or [])
        self.list_error = list_error
        self.failing_paths = set(failing_paths)
        self.list_calls = []
        self.delete_calls = []

    def list_folder(self, path, recursive=True):
        self.list_calls.append((path, recursive))
        if self.list_error is not None:
            raise self.list_error
        return list(self.entries)

    def delete(self, path):
        self.delete_calls.append(path)
        if path in self.failing_paths:
            raise StorageError(f"deleting '{path}' failed: path_lookup/not_found")


def file_entry(path, age, now=NOW):
    return Entry(path=path, is_folder=False, last_modified=now - age)


def folder_entry(path):
    return Entry(path=path, is_folder=True)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def sample_entries():
    """Three files aged 10, 5 and 0 days plus the folder holding them."""
    return [
        folder_entry("/Camera"),
        file_entry("/Camera/old.jpg", timedelta(days=10)),
        file_entry("/Camera/recent.jpg", timedelta(days=5)),
        file_entry("/Camera/today.jpg", timedelta(days=0)),
    ]
