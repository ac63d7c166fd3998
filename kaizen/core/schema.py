"""
Schema migration — bring any persisted document up to the current shape.

Every document read from storage, imported from a file or pulled from
the remote service goes through :func:`parse_document`:

    1. Detect ``schemaVersion`` (absent → 0, the legacy browser format).
    2. Apply migrations in order until the current version.
    3. Reject documents newer than this code understands.
    4. Validate with Pydantic and check roadmap phase names.

Only missing top-level sections are backfilled. An absent or empty
roadmap is regenerated from scratch; a partial roadmap is kept as is.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from kaizen.core.models.state import (
    CURRENT_SCHEMA_VERSION,
    Costs,
    Meta,
    Settings,
    StateDocument,
    Templates,
    default_tools,
)
from kaizen.core.roadmap import PHASE_NAMES, generate_roadmap

logger = logging.getLogger(__name__)


class SchemaError(Exception):
    """Raised when a document cannot be migrated or fails validation."""


# ── v0 → v1 ────────────────────────────────────────────────────────

# Field renames from the legacy browser format, per section
_TOOL_RENAMES = {"daily": "dailyCost", "purchase": "purchaseCost"}
_COST_RENAMES = {
    "numWorkers": "workerCount",
    "perWorker": "costPerWorker",
    "miscDaily": "miscDailyCost",
}
_TASK_RENAMES = {"desc": "description", "estMinutes": "estimatedMinutes"}
_SETTINGS_RENAMES = {"autoSaveInterval": "autoSaveIntervalMs"}


def _rename(obj: Any, renames: dict[str, str]) -> None:
    if not isinstance(obj, dict):
        return
    for old, new in renames.items():
        if old in obj and new not in obj:
            obj[new] = obj.pop(old)


def _items(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _migrate_v0_to_v1(data: dict[str, Any]) -> dict[str, Any]:
    for tool in _items(data.get("tools")):
        _rename(tool, _TOOL_RENAMES)

    costs = data.get("costs")
    _rename(costs, _COST_RENAMES)
    if isinstance(costs, dict):
        presets = costs.get("presets")
        for preset in (presets.values() if isinstance(presets, dict) else []):
            _rename(preset, _COST_RENAMES)

    for plan in _items(data.get("roadmap")):
        if isinstance(plan, dict):
            for task in _items(plan.get("tasks")):
                _rename(task, _TASK_RENAMES)

    _rename(data.get("settings"), _SETTINGS_RENAMES)
    return data


# Ordered: _MIGRATIONS[n] upgrades version n to n + 1
_MIGRATIONS: list[Callable[[dict[str, Any]], dict[str, Any]]] = [
    _migrate_v0_to_v1,
]


def detect_version(data: dict[str, Any]) -> int:
    version = data.get("schemaVersion", data.get("schema_version", 0))
    if not isinstance(version, int) or isinstance(version, bool) or version < 0:
        raise SchemaError(f"Invalid schemaVersion: {version!r}")
    return version


def backfill(data: dict[str, Any]) -> dict[str, Any]:
    """Fill each missing top-level section independently from defaults."""
    if not data.get("roadmap"):
        logger.info("Document has no roadmap — regenerating")
        data["roadmap"] = [p.model_dump(mode="json", by_alias=True) for p in generate_roadmap()]
    if not data.get("meta"):
        data["meta"] = Meta().model_dump(mode="json", by_alias=True)
    if "tools" not in data or data["tools"] is None:
        data["tools"] = [t.model_dump(mode="json", by_alias=True) for t in default_tools()]
    if not data.get("costs"):
        data["costs"] = Costs().model_dump(mode="json", by_alias=True)
    if "diary" not in data or data["diary"] is None:
        data["diary"] = []
    if not data.get("templates"):
        data["templates"] = Templates().model_dump(mode="json", by_alias=True)
    if not data.get("settings"):
        data["settings"] = Settings().model_dump(mode="json", by_alias=True)
    return data


def migrate(data: Any) -> dict[str, Any]:
    """Upgrade a raw JSON object to the current schema version.

    The input is not modified.

    Raises:
        SchemaError: Not an object, or a version newer than supported.
    """
    if not isinstance(data, dict):
        raise SchemaError(f"Expected a JSON object, got {type(data).__name__}")

    data = copy.deepcopy(data)
    version = detect_version(data)
    if version > CURRENT_SCHEMA_VERSION:
        raise SchemaError(
            f"Document schema version {version} is newer than supported "
            f"({CURRENT_SCHEMA_VERSION})"
        )

    while version < CURRENT_SCHEMA_VERSION:
        logger.debug("Migrating document schema %d → %d", version, version + 1)
        data = _MIGRATIONS[version](data)
        version += 1

    data.pop("schema_version", None)
    data["schemaVersion"] = version
    return backfill(data)


def parse_document(data: Any) -> StateDocument:
    """Migrate and validate a raw JSON object into a StateDocument.

    Raises:
        SchemaError: Migration or validation failed.
    """
    migrated = migrate(data)
    try:
        doc = StateDocument.model_validate(migrated)
    except ValidationError as e:
        raise SchemaError(f"Invalid document: {e}") from e

    unknown = sorted({p.phase for p in doc.roadmap} - set(PHASE_NAMES))
    if unknown:
        raise SchemaError(f"Invalid document: unknown phase(s) {', '.join(unknown)}")
    return doc
