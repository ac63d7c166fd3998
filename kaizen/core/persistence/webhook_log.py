"""
Webhook log — append-only record of inbound webhook calls.

Every accepted call appends one JSON line (NDJSON) with the source name,
request headers and body exactly as received. Payloads are never parsed
for meaning, validated or dispatched anywhere.

The log is append-only: entries are never modified or deleted.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

DEFAULT_WEBHOOK_LOG = "webhooks.log"


class WebhookEntry(BaseModel):
    """A single logged webhook call."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    source_name: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None


class WebhookLog:
    """Append-only NDJSON writer/reader for webhook calls."""

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def append(self, entry: WebhookEntry) -> bool:
        """Append an entry. Returns False (and logs) if the write failed."""
        data = entry.model_dump(mode="json", by_alias=True)
        line = json.dumps(data, ensure_ascii=False) + "\n"

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)
            logger.debug("Webhook logged: %s", entry.source_name)
            return True
        except OSError as e:
            logger.error("Failed to write webhook log: %s", e)
            return False

    def read_all(self) -> list[WebhookEntry]:
        """Read all entries, oldest first."""
        if not self._path.is_file():
            return []

        entries = []
        try:
            with self._path.open("r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entries.append(WebhookEntry.model_validate(json.loads(line)))
                    except ValueError as e:
                        logger.warning("Skipping corrupt webhook entry at line %d: %s", line_num, e)
        except OSError as e:
            logger.error("Failed to read webhook log: %s", e)

        return entries

    def read_recent(self, n: int = 20) -> list[WebhookEntry]:
        """Read the most recent N entries."""
        return self.read_all()[-n:]

    def entry_count(self) -> int:
        """Count entries without parsing them."""
        if not self._path.is_file():
            return 0
        try:
            with self._path.open("r", encoding="utf-8") as f:
                return sum(1 for line in f if line.strip())
        except OSError:
            return 0
