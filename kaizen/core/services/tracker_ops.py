"""
Tracker operations — every user action on the live document.

Pure functions over a ``StateDocument``: they mutate in place and never
persist. Callers wrap them in ``StateStore.mutate()`` so each action is
saved, mirroring the save-after-every-change behaviour of the UI.

Unknown ids raise ``TrackerError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ValidationError

from kaizen.core.models.state import (
    DayPlan,
    Note,
    StateDocument,
    Task,
    Tool,
)

logger = logging.getLogger(__name__)


class TrackerError(Exception):
    """Raised when an action references something that doesn't exist."""


def _assign(model: BaseModel, field: str, value: Any) -> None:
    """Set a validated field, reporting bad values as TrackerError."""
    try:
        setattr(model, field, value)
    except ValidationError as e:
        raise TrackerError(f"Invalid {field}: {e.errors()[0]['msg']}") from e


def _percent(done: int, total: int) -> int:
    if total == 0:
        return 0
    return round(done / total * 100)


# ═══════════════════════════════════════════════════════════════════
#  Roadmap tasks
# ═══════════════════════════════════════════════════════════════════


def find_task(doc: StateDocument, task_id: str) -> tuple[DayPlan, Task]:
    """Locate a task and its owning day."""
    for plan in doc.roadmap:
        for task in plan.tasks:
            if task.id == task_id:
                return plan, task
    raise TrackerError(f"Task not found: {task_id}")


def toggle_task(doc: StateDocument, task_id: str) -> Task:
    """Flip a task's done state, stamping or clearing doneAt."""
    _, task = find_task(doc, task_id)
    task.toggle()
    logger.info("Task %s → %s", task_id, "done" if task.done else "open")
    return task


def remove_task(doc: StateDocument, task_id: str) -> Task:
    plan, task = find_task(doc, task_id)
    plan.tasks = [t for t in plan.tasks if t.id != task_id]
    return task


def set_task_notes(doc: StateDocument, task_id: str, notes: str) -> Task:
    _, task = find_task(doc, task_id)
    task.notes = notes
    return task


def archive_task_notes(doc: StateDocument, task_id: str) -> Task:
    """Prefix the task's notes with an ``[ARCHIVED <timestamp>]`` line."""
    _, task = find_task(doc, task_id)
    if not task.notes:
        raise TrackerError("No note to archive")
    stamp = datetime.now(UTC).isoformat()
    task.notes = f"[ARCHIVED {stamp}]\n{task.notes}"
    return task


def day_progress(plan: DayPlan) -> int:
    """Percentage of the day's tasks that are done."""
    return _percent(sum(1 for t in plan.tasks if t.done), len(plan.tasks))


def overall_progress(doc: StateDocument) -> int:
    """Percentage of all roadmap tasks that are done."""
    tasks = doc.all_tasks()
    return _percent(sum(1 for t in tasks if t.done), len(tasks))


def phase_names(doc: StateDocument) -> list[str]:
    """Distinct phases in roadmap order."""
    seen: list[str] = []
    for plan in doc.roadmap:
        if plan.phase not in seen:
            seen.append(plan.phase)
    return seen


def days_in_phase(doc: StateDocument, phase: str | None = None) -> list[DayPlan]:
    """Days filtered by phase (all days when ``phase`` is None or "all")."""
    if phase in (None, "all"):
        return list(doc.roadmap)
    return [p for p in doc.roadmap if p.phase == phase]


def completed_tasks(doc: StateDocument, limit: int = 20) -> list[Task]:
    """Most recently completed tasks, newest first."""
    done = [t for t in doc.all_tasks() if t.done]
    done.sort(key=lambda t: t.done_at or "")
    return list(reversed(done[-limit:]))


# ═══════════════════════════════════════════════════════════════════
#  Tools
# ═══════════════════════════════════════════════════════════════════


def _find_tool(doc: StateDocument, tool_id: str) -> Tool:
    for tool in doc.tools:
        if tool.id == tool_id:
            return tool
    raise TrackerError(f"Tool not found: {tool_id}")


def add_tool(
    doc: StateDocument,
    name: str = "New Tool",
    daily_cost: float = 0,
    purchase_cost: float = 0,
    enabled: bool = True,
) -> Tool:
    tool = Tool(name=name, daily_cost=daily_cost, purchase_cost=purchase_cost, enabled=enabled)
    doc.tools.append(tool)
    return tool


def update_tool(doc: StateDocument, tool_id: str, **changes: Any) -> Tool:
    """Update name / daily_cost / purchase_cost / enabled on a tool.

    ``None`` values are ignored. Values are validated by the model.
    """
    tool = _find_tool(doc, tool_id)
    for key, value in changes.items():
        if value is None:
            continue
        if key not in ("name", "daily_cost", "purchase_cost", "enabled"):
            raise TrackerError(f"Unknown tool field: {key}")
        _assign(tool, key, value)
    return tool


def remove_tool(doc: StateDocument, tool_id: str) -> Tool:
    tool = _find_tool(doc, tool_id)
    doc.tools = [t for t in doc.tools if t.id != tool_id]
    return tool


# ═══════════════════════════════════════════════════════════════════
#  Cost calculator
# ═══════════════════════════════════════════════════════════════════


@dataclass
class CostBreakdown:
    """Daily cost totals."""

    tools: float = 0.0
    labor: float = 0.0
    misc: float = 0.0

    @property
    def total(self) -> float:
        return self.tools + self.labor + self.misc

    def to_dict(self) -> dict[str, float]:
        return {
            "tools": self.tools,
            "labor": self.labor,
            "misc": self.misc,
            "total": self.total,
        }


def compute_costs(doc: StateDocument) -> CostBreakdown:
    """Enabled tools + workers × per-worker + misc."""
    return CostBreakdown(
        tools=sum(t.daily_cost for t in doc.tools if t.enabled),
        labor=doc.costs.worker_count * doc.costs.cost_per_worker,
        misc=doc.costs.misc_daily_cost,
    )


def set_costs(
    doc: StateDocument,
    worker_count: int | None = None,
    cost_per_worker: float | None = None,
    misc_daily_cost: float | None = None,
) -> None:
    if worker_count is not None:
        _assign(doc.costs, "worker_count", worker_count)
    if cost_per_worker is not None:
        _assign(doc.costs, "cost_per_worker", cost_per_worker)
    if misc_daily_cost is not None:
        _assign(doc.costs, "misc_daily_cost", misc_daily_cost)


def save_preset(doc: StateDocument, name: str) -> None:
    """Snapshot the current calculator inputs under ``name`` (overwrites)."""
    if not name:
        raise TrackerError("Preset name is required")
    doc.costs.presets[name] = doc.costs.snapshot()


def apply_preset(doc: StateDocument, name: str) -> None:
    preset = doc.costs.presets.get(name)
    if preset is None:
        raise TrackerError(f"Preset not found: {name}")
    set_costs(
        doc,
        worker_count=preset.worker_count,
        cost_per_worker=preset.cost_per_worker,
        misc_daily_cost=preset.misc_daily_cost,
    )


# ═══════════════════════════════════════════════════════════════════
#  Diary
# ═══════════════════════════════════════════════════════════════════


def _find_note(doc: StateDocument, note_id: str) -> Note:
    for note in doc.diary:
        if note.id == note_id:
            return note
    raise TrackerError(f"Note not found: {note_id}")


def add_note(doc: StateDocument, content: str) -> Note:
    """Add a diary note at the top of the list."""
    if not content.strip():
        raise TrackerError("Write something first")
    note = Note(title=Note.derive_title(content), content=content)
    doc.diary.insert(0, note)
    return note


def edit_note(doc: StateDocument, note_id: str, content: str) -> Note:
    note = _find_note(doc, note_id)
    note.content = content
    note.title = Note.derive_title(content)
    return note


def toggle_archive_note(doc: StateDocument, note_id: str) -> Note:
    note = _find_note(doc, note_id)
    note.archived = not note.archived
    return note


def toggle_pin_note(doc: StateDocument, note_id: str) -> Note:
    note = _find_note(doc, note_id)
    note.pinned = not note.pinned
    return note


def delete_note(doc: StateDocument, note_id: str) -> Note:
    note = _find_note(doc, note_id)
    doc.diary = [n for n in doc.diary if n.id != note_id]
    return note


# ═══════════════════════════════════════════════════════════════════
#  Meta / settings
# ═══════════════════════════════════════════════════════════════════


def rename_project(doc: StateDocument, name: str) -> None:
    doc.meta.project_name = name


def set_autosave_interval(doc: StateDocument, interval_ms: int) -> None:
    """Change the autosave interval. The timer must be restarted to apply it."""
    _assign(doc.settings, "auto_save_interval_ms", interval_ms)
