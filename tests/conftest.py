"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from kaizen.core.config.loader import ServerConfig
from kaizen.core.persistence.local_store import LocalStorage
from kaizen.core.store import StateStore

TEST_SECRET = "test-secret"


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    """Local storage backed by a temp file."""
    return LocalStorage(tmp_path / "storage.json")


@pytest.fixture
def store(storage: LocalStorage) -> StateStore:
    """A loaded store over empty storage (fresh default document)."""
    s = StateStore(storage)
    s.load()
    yield s
    s.stop_autosave()


@pytest.fixture
def server_config(tmp_path: Path) -> ServerConfig:
    """Server config writing into a temp data dir."""
    return ServerConfig(api_secret=TEST_SECRET, data_dir=tmp_path / "data")
