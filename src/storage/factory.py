"""
Storage factory for creating file store instances.

Provides singleton access to the configured store.
"""

from functools import lru_cache

from src.config.settings import get_settings
from src.storage.adapter import FileStore
from src.storage.filesystem import FilesystemFileStore


@lru_cache()
def get_file_store() -> FileStore:
    """
    Get or create the file store instance.

    Returns:
        FileStore instance (FilesystemFileStore)
    """
    settings = get_settings()
    return FilesystemFileStore(base_path=settings.storage_path)


def reset_file_store() -> None:
    """Reset the file store instance (useful for testing)."""
    get_file_store.cache_clear()
