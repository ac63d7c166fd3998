"""
Shared CLI plumbing — store resolution and error reporting.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import NoReturn

import click

from kaizen.core.models.state import StateDocument
from kaizen.core.persistence.local_store import LocalStorage, StorageError
from kaizen.core.schema import SchemaError
from kaizen.core.services.sync_client import SyncError
from kaizen.core.services.tracker_ops import TrackerError
from kaizen.core.store import StateStore

# Errors the user can act on: shown as a message, exit code 1
USER_ERRORS = (TrackerError, SchemaError, SyncError, StorageError)


def get_store(ctx: click.Context) -> StateStore:
    """The StateStore for this invocation (created once per context)."""
    obj = ctx.ensure_object(dict)
    store = obj.get("store")
    if store is None:
        path: Path | None = obj.get("storage_path")
        store = StateStore(LocalStorage(path))
        store.load()
        if store.using_defaults:
            # Persist the generated document so task ids stay stable between runs
            with reported():
                store.save()
        obj["store"] = store
    return store


def fail(message: str) -> NoReturn:
    click.secho(f"❌ {message}", fg="red")
    sys.exit(1)


@contextmanager
def reported() -> Iterator[None]:
    """Turn user-facing errors into a red message and exit code 1."""
    try:
        yield
    except USER_ERRORS as e:
        fail(str(e))


def apply(ctx: click.Context, action: Callable[[StateDocument], object]) -> object:
    """Run ``action`` on the live document and save it."""
    store = get_store(ctx)
    with reported(), store.mutate() as doc:
        return action(doc)


def money(value: float) -> str:
    return f"${value:,.2f}".replace(".00", "")
