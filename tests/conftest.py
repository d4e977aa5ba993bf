# Test configuration

import os
import random
import sys
from datetime import datetime, timezone

import pytest

# Add repository root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

FIXED_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
FIXED_TIMESTAMP = "2024-01-15T12:00:00.000Z"


@pytest.fixture
def fixed_clock():
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def seeded_rng():
    """Deterministic random source for document identifiers."""
    return random.Random(42)


@pytest.fixture
def file_store(tmp_path, fixed_clock):
    """Filesystem file store rooted in a temporary directory."""
    from src.storage.filesystem import FilesystemFileStore
    return FilesystemFileStore(str(tmp_path / "storage"), clock=fixed_clock)


@pytest.fixture
def test_settings(tmp_path):
    """Override settings for testing"""
    from src.config.settings import Settings
    return Settings(
        storage_path=str(tmp_path / "storage"),
        log_json=False,
    )
