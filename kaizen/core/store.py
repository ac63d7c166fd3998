"""
State store — holds the single live StateDocument and persists it.

One ``StateStore`` is created per entry point and handed to every
consumer (CLI commands, sync operations). Persistence is whole-document
and last-writer-wins: ``save`` overwrites the stored copy without any
version check.

The autosave thread and user actions both go through the store's lock,
so a save never observes a half-applied mutation.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from kaizen.core.models.state import StateDocument
from kaizen.core.persistence.local_store import (
    API_KEY_KEY,
    SERVER_URL_KEY,
    STATE_KEY,
    LocalStorage,
)
from kaizen.core.roadmap import generate_roadmap
from kaizen.core.schema import SchemaError, parse_document

logger = logging.getLogger(__name__)


def default_document() -> StateDocument:
    """A fresh document with a freshly generated roadmap."""
    return StateDocument(roadmap=generate_roadmap())


class StateStore:
    """Explicit load / mutate / save handle for the live document."""

    def __init__(self, storage: LocalStorage):
        self._storage = storage
        self._doc: StateDocument | None = None
        # True when the last load found nothing usable and generated defaults
        self.using_defaults = False
        self._lock = threading.RLock()
        self._autosave_thread: threading.Thread | None = None
        self._autosave_stop = threading.Event()

    # ── Document access ─────────────────────────────────────────────

    @property
    def storage(self) -> LocalStorage:
        return self._storage

    @property
    def document(self) -> StateDocument:
        """The live document (loaded on first access)."""
        if self._doc is None:
            self.load()
        assert self._doc is not None
        return self._doc

    def load(self) -> StateDocument:
        """Load the persisted document, falling back to defaults.

        Never raises for bad stored data: a corrupt or invalid document
        is logged and treated as "no saved state". Check
        ``using_defaults`` afterwards to know whether the generated
        document still needs saving.
        """
        with self._lock:
            raw = self._storage.get_item(STATE_KEY)
            doc = None
            if raw:
                try:
                    doc = parse_document(json.loads(raw))
                    logger.debug("Loaded state (lastSaved=%s)", doc.meta.last_saved)
                except json.JSONDecodeError as e:
                    logger.warning("Corrupt local state: %s — resetting", e)
                except SchemaError as e:
                    logger.warning("Unusable local state: %s — resetting", e)
            else:
                logger.info("No saved state — starting fresh")

            self.using_defaults = doc is None
            self._doc = doc or default_document()
            return self._doc

    def save(self, doc: StateDocument | None = None) -> StateDocument:
        """Stamp meta.lastSaved and overwrite the persisted copy."""
        with self._lock:
            if doc is not None:
                self._doc = doc
            current = self.document
            current.touch()
            self._storage.set_item(STATE_KEY, json.dumps(current.to_json_dict(), ensure_ascii=False))
            logger.debug("State saved (lastSaved=%s)", current.meta.last_saved)
            return current

    def replace(self, doc: StateDocument) -> StateDocument:
        """Substitute the live document wholesale, then save."""
        with self._lock:
            logger.info("Replacing live document (%s)", doc.meta.project_name)
            return self.save(doc)

    @contextmanager
    def mutate(self) -> Iterator[StateDocument]:
        """Yield the live document for in-place edits; save on success.

        An exception inside the block skips the save and propagates. The
        in-memory document keeps whatever edits were applied before it.
        """
        with self._lock:
            yield self.document
            self.save()

    # ── Import / export ─────────────────────────────────────────────

    def export_json(self, doc: StateDocument | None = None) -> str:
        """The document as pretty-printed JSON."""
        with self._lock:
            target = doc or self.document
            return json.dumps(target.to_json_dict(), indent=2, ensure_ascii=False)

    def import_json(self, text: str) -> StateDocument:
        """Parse, migrate and validate ``text``, then replace the live document.

        Raises:
            SchemaError: Invalid JSON or an invalid document. The live
                document is left untouched.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SchemaError(f"Invalid JSON: {e}") from e
        doc = parse_document(data)
        return self.replace(doc)

    # ── Remote settings ─────────────────────────────────────────────

    @property
    def server_url(self) -> str:
        return self._storage.get_item(SERVER_URL_KEY) or ""

    @server_url.setter
    def server_url(self, value: str) -> None:
        self._storage.set_item(SERVER_URL_KEY, value)

    @property
    def api_key(self) -> str:
        return self._storage.get_item(API_KEY_KEY) or ""

    @api_key.setter
    def api_key(self, value: str) -> None:
        self._storage.set_item(API_KEY_KEY, value)

    # ── Autosave ────────────────────────────────────────────────────

    @property
    def autosave_running(self) -> bool:
        return self._autosave_thread is not None and self._autosave_thread.is_alive()

    def start_autosave(self) -> threading.Thread:
        """Start a daemon thread saving every settings.autoSaveIntervalMs.

        Any running timer is stopped first.
        """
        self.stop_autosave()
        interval_s = self.document.settings.auto_save_interval_ms / 1000.0
        stop = threading.Event()
        self._autosave_stop = stop
        t = threading.Thread(
            target=self._autosave_loop,
            args=(interval_s, stop),
            daemon=True,
            name="kaizen-autosave",
        )
        self._autosave_thread = t
        t.start()
        logger.info("Autosave started (every %.1fs)", interval_s)
        return t

    def stop_autosave(self) -> None:
        t = self._autosave_thread
        if t is None:
            return
        self._autosave_stop.set()
        if t is not threading.current_thread():
            t.join(timeout=5)
        self._autosave_thread = None
        logger.debug("Autosave stopped")

    def restart_autosave(self) -> threading.Thread:
        """Restart the timer so a changed interval takes effect."""
        return self.start_autosave()

    def _autosave_loop(self, interval_s: float, stop: threading.Event) -> None:
        while not stop.wait(interval_s):
            try:
                self.save()
            except Exception as e:
                # A failed tick is retried on the next one
                logger.warning("Autosave failed: %s", e)
