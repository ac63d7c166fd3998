"""
Tests for the roadmap generator.
"""

import pytest

from kaizen.core.roadmap import (
    PHASE_NAMES,
    PHASES,
    Phase,
    RoadmapError,
    TaskTemplate,
    generate_roadmap,
    phase_for_day,
    tasks_for_day,
)


def _constant_ids(day: int, index: int) -> str:
    return "fixed"


class TestPhaseTable:
    def test_phases_cover_every_day_once(self):
        for day in range(1, 61):
            owners = [p.name for p in PHASES if p.covers(day)]
            assert len(owners) == 1, f"day {day} owned by {owners}"

    def test_phase_for_day(self):
        assert phase_for_day(1).name == "Foundation"
        assert phase_for_day(3).name == "Foundation"
        assert phase_for_day(4).name == "Data & GHL"
        assert phase_for_day(20).name == "Integrations"
        assert phase_for_day(21).name == "Workflows"
        assert phase_for_day(40).name == "Pre-start"
        assert phase_for_day(50).name == "Test & Validate"
        assert phase_for_day(60).name == "Launch & Monitor"

    def test_uncovered_day_raises(self):
        with pytest.raises(RoadmapError):
            phase_for_day(61)

    def test_broken_table_raises_instead_of_falling_back(self):
        tpl = (TaskTemplate("t", "d", 10),)
        short = (Phase("Only", 1, 30, tpl),)
        with pytest.raises(RoadmapError, match="day 31"):
            generate_roadmap(phases=short)

    def test_tasks_for_day(self):
        assert tasks_for_day(1) == 5
        assert tasks_for_day(2) == 6
        assert tasks_for_day(3) == 4


class TestGenerateRoadmap:
    def test_sixty_days_ascending(self):
        roadmap = generate_roadmap()
        assert [d.day for d in roadmap] == list(range(1, 61))

    def test_each_day_has_4_to_6_tasks_and_known_phase(self):
        for plan in generate_roadmap():
            assert 4 <= len(plan.tasks) <= 6
            assert plan.phase in PHASE_NAMES
            assert plan.phase == phase_for_day(plan.day).name

    def test_template_rotation(self):
        roadmap = generate_roadmap()
        day5 = roadmap[4]
        templates = phase_for_day(5).templates
        for i, task in enumerate(day5.tasks):
            tpl = templates[(5 + i) % len(templates)]
            assert task.title == tpl.title
            assert task.description == tpl.description
            assert task.estimated_minutes == tpl.estimated_minutes

    def test_tasks_start_pending(self):
        for task in generate_roadmap()[0].tasks:
            assert task.done is False
            assert task.done_at is None
            assert task.notes == ""

    def test_deterministic_with_stubbed_ids(self):
        a = generate_roadmap(id_factory=_constant_ids)
        b = generate_roadmap(id_factory=_constant_ids)
        assert [d.model_dump() for d in a] == [d.model_dump() for d in b]

    def test_default_ids_unique_and_prefixed(self):
        roadmap = generate_roadmap()
        ids = [t.id for d in roadmap for t in d.tasks]
        assert len(ids) == len(set(ids))
        assert roadmap[0].tasks[0].id.startswith("d1t0-")
