"""
Roadmap generator — the fixed 60-day schedule.

Seven phases each own a contiguous range of days and a short list of
task templates. Day ``d`` gets ``4 + d % 3`` tasks; task ``i`` uses
template ``(d + i) % len(templates)``, so templates rotate predictably
through each phase.

Titles, descriptions and estimates are deterministic per day. Task ids
carry a random suffix unless an ``id_factory`` is supplied.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from kaizen.core.models.state import DayPlan, Task, random_suffix

logger = logging.getLogger(__name__)

TOTAL_DAYS = 60


class RoadmapError(Exception):
    """Raised when the phase table does not cover a requested day."""


@dataclass(frozen=True)
class TaskTemplate:
    title: str
    description: str
    estimated_minutes: int


@dataclass(frozen=True)
class Phase:
    name: str
    first_day: int
    last_day: int
    templates: tuple[TaskTemplate, ...]

    def covers(self, day: int) -> bool:
        return self.first_day <= day <= self.last_day


PHASES: tuple[Phase, ...] = (
    Phase("Foundation", 1, 3, (
        TaskTemplate("Register Twilio account", "Create Twilio account, record SID/auth token, buy numbers", 30),
        TaskTemplate("Set up Vapi", "Create Vapi account, voice model selection, assign number", 30),
        TaskTemplate("WhatsApp Cloud setup", "Create app, templates, phone number & webhook", 30),
        TaskTemplate("Project skeleton", "Create repo, server stub, deploy plan", 20),
    )),
    Phase("Data & GHL", 4, 10, (
        TaskTemplate("Define GHL custom fields", "List fields required and data types", 40),
        TaskTemplate("Create tags list", "Create TAGS like TRADE-, CERT-, etc", 30),
        TaskTemplate("Map field validation rules", "Decide regexes and constraints", 25),
        TaskTemplate("Build sample contact import CSV", "Prepare sample CSV with mapping", 20),
    )),
    Phase("Integrations", 11, 20, (
        TaskTemplate("Setup Twilio webhooks", "Configure webhook URLs and test payloads", 30),
        TaskTemplate("Connect n8n/Make", "Create webhook flow and test", 40),
        TaskTemplate("Build webhook receivers", "Implement server endpoints to accept webhooks", 30),
        TaskTemplate("Test retry/backoff", "Define behavior for failures", 20),
    )),
    Phase("Workflows", 21, 30, (
        TaskTemplate("Implement WhatsApp validation tree", "Phone validation and opt-in flows", 40),
        TaskTemplate("Implement Opt-in flow", "Opt-in confirmation messages & logging", 30),
        TaskTemplate("Availability checks", "Agent availability, shift mapping", 30),
        TaskTemplate("Tools capability checks", "Service checks for Twilio/Vapi", 25),
    )),
    Phase("Pre-start", 31, 40, (
        TaskTemplate("Create pre-start pack templates", "Messages, checklist for agents", 30),
        TaskTemplate("24-hour flows", "Define messages for 24h cycle", 30),
        TaskTemplate("ETA capture", "Implement ETA capture and reminders", 25),
        TaskTemplate("Training scripts", "Create agent training SOPs", 30),
    )),
    Phase("Test & Validate", 41, 50, (
        TaskTemplate("Persona tests", "Run 5 persona tests end-to-end", 45),
        TaskTemplate("Failover tests", "Simulate Twilio/Vapi failure", 40),
        TaskTemplate("Template approvals", "Legal & compliance review", 30),
        TaskTemplate("Logging & metrics", "Wire basic metrics dashboards", 30),
    )),
    Phase("Launch & Monitor", 51, 60, (
        TaskTemplate("Phase roll-out plan", "Plan staged go-live", 40),
        TaskTemplate("Dashboard monitoring", "Set up monitoring & alerts", 30),
        TaskTemplate("Optimization loops", "Collect feedback and iterate", 30),
        TaskTemplate("Post-launch SOPs", "Oncall, incident response", 30),
    )),
)

PHASE_NAMES: tuple[str, ...] = tuple(p.name for p in PHASES)

IdFactory = Callable[[int, int], str]


def _default_task_id(day: int, index: int) -> str:
    return f"d{day}t{index}-{random_suffix(4)}"


def phase_for_day(day: int, phases: tuple[Phase, ...] = PHASES) -> Phase:
    """Resolve the phase owning ``day``.

    Raises:
        RoadmapError: No phase covers the day (a broken phase table).
    """
    for phase in phases:
        if phase.covers(day):
            return phase
    raise RoadmapError(f"No phase covers day {day}")


def tasks_for_day(day: int) -> int:
    """Number of tasks scheduled on ``day`` (4, 5 or 6)."""
    return 4 + day % 3


def generate_roadmap(
    id_factory: IdFactory | None = None,
    phases: tuple[Phase, ...] = PHASES,
) -> list[DayPlan]:
    """Build the full 60-day roadmap.

    Args:
        id_factory: ``(day, index) -> id``. Defaults to ``d<day>t<i>-xxxx``.
        phases: Phase table (overridable for tests).

    Returns:
        Exactly one DayPlan per day 1..60, ascending, each with 4–6
        pending tasks.
    """
    make_id = id_factory or _default_task_id
    roadmap: list[DayPlan] = []

    for day in range(1, TOTAL_DAYS + 1):
        phase = phase_for_day(day, phases)
        templates = phase.templates
        tasks = []
        for i in range(tasks_for_day(day)):
            tpl = templates[(day + i) % len(templates)]
            tasks.append(Task(
                id=make_id(day, i),
                title=tpl.title,
                description=tpl.description,
                estimated_minutes=tpl.estimated_minutes,
            ))
        roadmap.append(DayPlan(day=day, phase=phase.name, tasks=tasks))

    logger.debug("Generated roadmap: %d days, %d tasks",
                 len(roadmap), sum(len(d.tasks) for d in roadmap))
    return roadmap
