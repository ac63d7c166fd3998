"""
Tests for tracker operations — tasks, tools, costs, diary.
"""

import pytest

from kaizen.core.services import tracker_ops as ops
from kaizen.core.store import default_document


@pytest.fixture
def doc():
    return default_document()


def _first_task_id(doc) -> str:
    return doc.roadmap[0].tasks[0].id


class TestTasks:
    def test_toggle_task(self, doc):
        task_id = _first_task_id(doc)
        task = ops.toggle_task(doc, task_id)
        assert task.done is True
        assert task.done_at is not None

        task = ops.toggle_task(doc, task_id)
        assert task.done is False
        assert task.done_at is None

    def test_unknown_task(self, doc):
        with pytest.raises(ops.TrackerError, match="Task not found"):
            ops.toggle_task(doc, "nope")

    def test_remove_task(self, doc):
        task_id = _first_task_id(doc)
        count = len(doc.roadmap[0].tasks)
        ops.remove_task(doc, task_id)
        assert len(doc.roadmap[0].tasks) == count - 1
        with pytest.raises(ops.TrackerError):
            ops.find_task(doc, task_id)

    def test_notes_and_archive(self, doc):
        task_id = _first_task_id(doc)
        ops.set_task_notes(doc, task_id, "called vendor")
        task = ops.archive_task_notes(doc, task_id)
        first, rest = task.notes.split("\n", 1)
        assert first.startswith("[ARCHIVED ")
        assert rest == "called vendor"

    def test_archive_empty_notes_fails(self, doc):
        with pytest.raises(ops.TrackerError, match="No note"):
            ops.archive_task_notes(doc, _first_task_id(doc))


class TestProgress:
    def test_empty_progress_is_zero(self, doc):
        assert ops.overall_progress(doc) == 0
        doc.roadmap[0].tasks = []
        assert ops.day_progress(doc.roadmap[0]) == 0

    def test_day_progress(self, doc):
        plan = doc.roadmap[2]  # day 3 → 4 tasks
        ops.toggle_task(doc, plan.tasks[0].id)
        assert ops.day_progress(plan) == 25

    def test_overall_progress(self, doc):
        for task in doc.all_tasks():
            task.set_done(True)
        assert ops.overall_progress(doc) == 100

    def test_phase_filter(self, doc):
        assert ops.phase_names(doc)[0] == "Foundation"
        assert len(ops.phase_names(doc)) == 7
        assert [d.day for d in ops.days_in_phase(doc, "Foundation")] == [1, 2, 3]
        assert len(ops.days_in_phase(doc, "all")) == 60

    def test_completed_tasks_newest_first(self, doc):
        a, b = doc.roadmap[0].tasks[:2]
        a.set_done(True)
        b.set_done(True)
        b.__dict__["done_at"] = "2999-01-01T00:00:00+00:00"
        assert [t.id for t in ops.completed_tasks(doc)] == [b.id, a.id]


class TestTools:
    def test_add_tool_defaults(self, doc):
        tool = ops.add_tool(doc)
        assert tool.name == "New Tool"
        assert tool.daily_cost == 0
        assert tool.enabled is True
        assert doc.tools[-1] is tool

    def test_update_tool(self, doc):
        tool_id = doc.tools[0].id
        tool = ops.update_tool(doc, tool_id, daily_cost=12, enabled=False, name=None)
        assert tool.daily_cost == 12
        assert tool.enabled is False
        assert tool.name == "Twilio"

    def test_update_tool_rejects_negative(self, doc):
        with pytest.raises(ops.TrackerError, match="daily_cost"):
            ops.update_tool(doc, doc.tools[0].id, daily_cost=-1)

    def test_update_tool_rejects_unknown_field(self, doc):
        with pytest.raises(ops.TrackerError, match="Unknown tool field"):
            ops.update_tool(doc, doc.tools[0].id, colour="red")

    def test_remove_tool(self, doc):
        tool_id = doc.tools[0].id
        ops.remove_tool(doc, tool_id)
        assert tool_id not in [t.id for t in doc.tools]
        with pytest.raises(ops.TrackerError):
            ops.remove_tool(doc, tool_id)


class TestCosts:
    def test_default_breakdown(self, doc):
        b = ops.compute_costs(doc)
        assert b.tools == 16
        assert b.labor == 240
        assert b.misc == 10
        assert b.total == 266

    def test_disabled_tools_excluded(self, doc):
        ops.update_tool(doc, doc.tools[0].id, enabled=False)
        assert ops.compute_costs(doc).tools == 8

    def test_presets(self, doc):
        ops.save_preset(doc, "baseline")
        ops.set_costs(doc, worker_count=1, cost_per_worker=100, misc_daily_cost=0)
        assert ops.compute_costs(doc).labor == 100

        ops.apply_preset(doc, "baseline")
        assert doc.costs.worker_count == 3
        assert doc.costs.cost_per_worker == 80
        assert doc.costs.misc_daily_cost == 10

    def test_preset_overwrite_by_name(self, doc):
        ops.save_preset(doc, "p")
        ops.set_costs(doc, worker_count=9)
        ops.save_preset(doc, "p")
        assert doc.costs.presets["p"].worker_count == 9

    def test_unknown_preset(self, doc):
        with pytest.raises(ops.TrackerError, match="Preset not found"):
            ops.apply_preset(doc, "missing")

    def test_invalid_costs_rejected(self, doc):
        with pytest.raises(ops.TrackerError):
            ops.set_costs(doc, worker_count=-2)


class TestDiary:
    def test_add_note_prepends(self, doc):
        first = ops.add_note(doc, "first")
        second = ops.add_note(doc, "second")
        assert doc.diary == [second, first]
        assert second.title == "second"
        assert second.archived is False
        assert second.pinned is False

    def test_long_content_title_truncated(self, doc):
        note = ops.add_note(doc, "a" * 100)
        assert note.title == "a" * 40

    def test_empty_note_rejected(self, doc):
        with pytest.raises(ops.TrackerError):
            ops.add_note(doc, "   ")

    def test_edit_archive_pin_delete(self, doc):
        note = ops.add_note(doc, "draft")
        ops.edit_note(doc, note.id, "final text")
        assert note.content == "final text"
        assert note.title == "final text"

        assert ops.toggle_archive_note(doc, note.id).archived is True
        assert ops.toggle_archive_note(doc, note.id).archived is False
        assert ops.toggle_pin_note(doc, note.id).pinned is True

        ops.delete_note(doc, note.id)
        assert doc.diary == []
        with pytest.raises(ops.TrackerError):
            ops.delete_note(doc, note.id)


class TestMeta:
    def test_rename(self, doc):
        ops.rename_project(doc, "Renamed")
        assert doc.meta.project_name == "Renamed"

    def test_autosave_interval_validated(self, doc):
        ops.set_autosave_interval(doc, 5000)
        assert doc.settings.auto_save_interval_ms == 5000
        with pytest.raises(ops.TrackerError):
            ops.set_autosave_interval(doc, 0)
