"""
StateDocument — the root state model.

This is the single document that captures everything the tracker knows:
project meta, tool costs, the 60-day roadmap, the diary and settings.
It's serialized under the ``kaizen_state_v1`` storage key, exported as
pretty-printed JSON and pushed wholesale to the remote state service.

Python attributes are snake_case; the JSON form is camelCase
(``dailyCost``, ``estimatedMinutes``, ``doneAt`` ...). Either spelling
is accepted on input.
"""

from __future__ import annotations

import random
import string
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

CURRENT_SCHEMA_VERSION = 1

_ID_ALPHABET = string.ascii_lowercase + string.digits


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


def random_suffix(length: int = 7) -> str:
    """Random base36 suffix used in every generated identifier."""
    return "".join(random.choices(_ID_ALPHABET, k=length))


def new_id(prefix: str = "id") -> str:
    """Generate an identifier like ``tool-k3j9x0a``."""
    return f"{prefix}-{random_suffix()}"


class _Model(BaseModel):
    """Base for all document parts — camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )


class Meta(_Model):
    """Project identity and save bookkeeping."""

    project_name: str = "Kaizen Automation"
    created_at: str = Field(default_factory=_now_iso)
    last_saved: str | None = None


class Tool(_Model):
    """A paid tool that contributes to the daily cost."""

    id: str = Field(default_factory=lambda: new_id("tool"))
    name: str = "New Tool"
    daily_cost: float = Field(default=0, ge=0)
    purchase_cost: float = Field(default=0, ge=0)
    enabled: bool = True


class CostPreset(_Model):
    """Snapshot of the calculator inputs, saved under a user-chosen name."""

    worker_count: int = Field(default=0, ge=0)
    cost_per_worker: float = Field(default=0, ge=0)
    misc_daily_cost: float = Field(default=0, ge=0)


class Costs(CostPreset):
    """Live calculator inputs plus named presets."""

    worker_count: int = Field(default=3, ge=0)
    cost_per_worker: float = Field(default=80, ge=0)
    misc_daily_cost: float = Field(default=10, ge=0)
    presets: dict[str, CostPreset] = Field(default_factory=dict)

    def snapshot(self) -> CostPreset:
        return CostPreset(
            worker_count=self.worker_count,
            cost_per_worker=self.cost_per_worker,
            misc_daily_cost=self.misc_daily_cost,
        )


class Task(_Model):
    """A single checklist item within a day.

    ``done_at`` is set exactly when ``done`` is True. Use
    :meth:`set_done` / :meth:`toggle` rather than assigning ``done``
    directly so the two never drift apart.
    """

    id: str
    title: str
    description: str = ""
    estimated_minutes: int = Field(default=30, gt=0)
    done: bool = False
    done_at: str | None = None
    notes: str = ""

    @model_validator(mode="after")
    def _check_done_at(self) -> Task:
        if self.done and self.done_at is None:
            raise ValueError("doneAt must be set when done is true")
        if not self.done and self.done_at is not None:
            raise ValueError("doneAt must be null when done is false")
        return self

    def set_done(self, done: bool) -> None:
        """Transition the done flag, stamping or clearing done_at."""
        if done == self.done:
            return
        # Assign both at once so the validator never sees a half-updated task
        stamp = _now_iso() if done else None
        self.__dict__["done"] = done
        self.__dict__["done_at"] = stamp

    def toggle(self) -> bool:
        """Flip the done flag. Returns the new value."""
        self.set_done(not self.done)
        return self.done


class DayPlan(_Model):
    """One day's worth of scheduled tasks within the 60-day roadmap."""

    day: int = Field(ge=1, le=60)
    phase: str
    tasks: list[Task] = Field(default_factory=list)


class Note(_Model):
    """A diary entry."""

    id: str = Field(default_factory=lambda: new_id("note"))
    title: str = "Note"
    content: str = ""
    pinned: bool = False
    created_at: str = Field(default_factory=_now_iso)
    archived: bool = False

    @staticmethod
    def derive_title(content: str) -> str:
        return content[:40] or "Note"


class Templates(_Model):
    """Free-form message trees and SOP snippets."""

    message_trees: dict[str, Any] = Field(default_factory=dict)
    sops: dict[str, Any] = Field(default_factory=dict)


class Settings(_Model):
    """Client-side behaviour settings."""

    auto_save_interval_ms: int = Field(default=10000, gt=0)


def default_tools() -> list[Tool]:
    """The three tools every fresh document starts with."""
    return [
        Tool(id=new_id("twilio"), name="Twilio", daily_cost=8),
        Tool(id=new_id("vapi"), name="Vapi", daily_cost=6),
        Tool(id=new_id("wa"), name="WhatsApp Cloud", daily_cost=2),
    ]


class StateDocument(_Model):
    """Root aggregate — replaced wholesale on import and remote load.

    Persistence is last-writer-wins over the whole document: nothing
    here tracks versions of individual fields.
    """

    # ── Schema ───────────────────────────────────────────────────
    schema_version: int = CURRENT_SCHEMA_VERSION

    # ── Content ──────────────────────────────────────────────────
    meta: Meta = Field(default_factory=Meta)
    tools: list[Tool] = Field(default_factory=default_tools)
    costs: Costs = Field(default_factory=Costs)
    roadmap: list[DayPlan] = Field(default_factory=list)
    templates: Templates = Field(default_factory=Templates)
    diary: list[Note] = Field(default_factory=list)
    settings: Settings = Field(default_factory=Settings)

    def touch(self) -> None:
        """Update the meta.last_saved timestamp."""
        self.meta.last_saved = _now_iso()

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape."""
        return self.model_dump(mode="json", by_alias=True)

    def all_tasks(self) -> list[Task]:
        return [task for plan in self.roadmap for task in plan.tasks]

    def get_day(self, day: int) -> DayPlan | None:
        for plan in self.roadmap:
            if plan.day == day:
                return plan
        return None
