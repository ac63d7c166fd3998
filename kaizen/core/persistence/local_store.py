"""
Local storage — a small key/value store backed by one JSON file.

Stands in for the browser's localStorage: string values addressed by
fixed keys. The whole file is rewritten on every set (atomic: write to
temp file, then rename) so a crash mid-write never leaves it truncated.

No locking between processes — two writers race and the later rename wins.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

# Fixed keys
STATE_KEY = "kaizen_state_v1"
SERVER_URL_KEY = "kaizen_server_url"
API_KEY_KEY = "kaizen_api_key"

DEFAULT_STORAGE_DIR = ".kaizen"
DEFAULT_STORAGE_FILE = "storage.json"


class StorageError(Exception):
    """Raised when the storage file cannot be written."""


def default_storage_path() -> Path:
    """Storage path from KAIZEN_STORAGE, else ~/.kaizen/storage.json."""
    env = os.environ.get("KAIZEN_STORAGE")
    if env:
        return Path(env).expanduser()
    return Path.home() / DEFAULT_STORAGE_DIR / DEFAULT_STORAGE_FILE


def atomic_write_text(path: Path, content: str, prefix: str = ".kaizen_") -> None:
    """Write ``content`` to ``path`` via temp file + rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=prefix, suffix=".tmp")
    os.close(fd)
    tmp = Path(tmp_path)
    try:
        tmp.write_text(content, encoding="utf-8")
        tmp.replace(path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise


class LocalStorage:
    """String key/value store persisted to a JSON file."""

    def __init__(self, path: Path | None = None):
        self._path = path or default_storage_path()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        if not self._path.is_file():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Unreadable storage file %s: %s — treating as empty", self._path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Storage file %s is not an object — treating as empty", self._path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, items: dict[str, str]) -> None:
        content = json.dumps(items, indent=2, ensure_ascii=False) + "\n"
        try:
            atomic_write_text(self._path, content, prefix=".storage_")
        except OSError as e:
            logger.error("Failed to write storage %s: %s", self._path, e)
            raise StorageError(f"Cannot write {self._path}: {e}") from e

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read()
        items[key] = value
        self._write(items)

    def remove_item(self, key: str) -> None:
        items = self._read()
        if items.pop(key, None) is not None:
            self._write(items)

    def keys(self) -> list[str]:
        return list(self._read())

    def clear(self) -> None:
        self._write({})
