"""
Per-user file storage for conversion results.

Provides the FileStore interface and its filesystem backend.
"""

from src.storage.adapter import (
    FileStore,
    FileRecord,
    StorageError,
    FileNotFoundInStore,
    format_file_size,
)
from src.storage.filesystem import FilesystemFileStore
from src.storage.factory import get_file_store, reset_file_store

__all__ = [
    "FileStore",
    "FileRecord",
    "StorageError",
    "FileNotFoundInStore",
    "format_file_size",
    "FilesystemFileStore",
    "get_file_store",
    "reset_file_store",
]
