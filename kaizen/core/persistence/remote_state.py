"""
Remote state file — the server's single stored document.

One JSON file, overwritten wholesale on every save. No locking, no
versioning: two near-simultaneous saves race and the later rename wins.
The document is stored as received and never validated here.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from kaizen.core.persistence.local_store import atomic_write_text

logger = logging.getLogger(__name__)

DEFAULT_STATE_FILE = "state.json"


class RemoteStateFile:
    """Read/overwrite the stored state document."""

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def read_raw(self) -> str | None:
        """Stored JSON text, or None if nothing was ever saved.

        Raises:
            OSError: The file exists but cannot be read.
        """
        if not self._path.is_file():
            return None
        return self._path.read_text(encoding="utf-8")

    def write(self, document: Any) -> str:
        """Overwrite the stored document. Returns the savedAt timestamp.

        Raises:
            OSError: The file cannot be written.
        """
        content = json.dumps(document, indent=2, ensure_ascii=False)
        atomic_write_text(self._path, content, prefix=".state_")
        saved_at = datetime.now(UTC).isoformat()
        logger.info("Remote state saved to %s", self._path)
        return saved_at
