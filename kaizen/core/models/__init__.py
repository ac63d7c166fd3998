"""
Domain models — Pydantic types for the tracker state.

All models are re-exported here for convenient access:

    from kaizen.core.models import StateDocument, DayPlan, Task, Tool
"""

from kaizen.core.models.state import (
    CURRENT_SCHEMA_VERSION,
    CostPreset,
    Costs,
    DayPlan,
    Meta,
    Note,
    Settings,
    StateDocument,
    Task,
    Templates,
    Tool,
    default_tools,
    new_id,
)

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "CostPreset",
    "Costs",
    "DayPlan",
    "Meta",
    "Note",
    "Settings",
    "StateDocument",
    "Task",
    "Templates",
    "Tool",
    "default_tools",
    "new_id",
]
