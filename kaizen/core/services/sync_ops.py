"""
Sync operations — wire the SyncClient to a StateStore.

    push_state  → send the live document (saved locally first)
    pull_state  → fetch the remote document and replace the live one

Whole-document, last-writer-wins. A pull followed by local edits and a
push silently overwrites anything another device saved in between.
"""

from __future__ import annotations

import logging
from typing import Any

from kaizen.core.models.state import StateDocument
from kaizen.core.schema import SchemaError, parse_document
from kaizen.core.services.sync_client import DEFAULT_TIMEOUT, SyncClient, SyncError
from kaizen.core.store import StateStore

logger = logging.getLogger(__name__)


def client_for(store: StateStore, timeout: float = DEFAULT_TIMEOUT) -> SyncClient:
    """Build a client from the store's configured server URL and key."""
    return SyncClient(store.server_url, store.api_key, timeout=timeout)


def push_state(store: StateStore, client: SyncClient | None = None) -> dict[str, Any]:
    """Save locally, then overwrite the remote document with the live one."""
    client = client or client_for(store)
    doc = store.save()
    return client.push(doc.to_json_dict())


def pull_state(store: StateStore, client: SyncClient | None = None) -> StateDocument:
    """Replace the live document with the remote one.

    Raises:
        SyncError: Network/HTTP failure, an empty remote, or a remote
            document that fails validation. The live document is kept.
    """
    client = client or client_for(store)
    data = client.pull()
    if not data:
        raise SyncError("Load failed: remote has no saved state")
    try:
        doc = parse_document(data)
    except SchemaError as e:
        raise SyncError(f"Load failed: {e}") from e
    logger.info("Remote document accepted (lastSaved=%s)", doc.meta.last_saved)
    return store.replace(doc)
