"""
CLI commands for the 60-day roadmap and its tasks.

Thin wrappers over ``kaizen.core.services.tracker_ops``.
"""

from __future__ import annotations

import json

import click

from kaizen.ui.cli.common import apply, fail, get_store


@click.command("roadmap")
@click.option("--phase", default="all", help="Only show days in this phase.")
@click.option("--day", "day_num", type=int, default=None, help="Only show one day.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def roadmap(ctx: click.Context, phase: str, day_num: int | None, as_json: bool) -> None:
    """Show the roadmap, optionally filtered by phase or day."""
    from kaizen.core.services.tracker_ops import day_progress, days_in_phase, phase_names

    doc = get_store(ctx).document
    days = days_in_phase(doc, phase)
    if day_num is not None:
        days = [d for d in days if d.day == day_num]
    if phase != "all" and phase not in phase_names(doc):
        fail(f"Unknown phase '{phase}' (choose from {', '.join(phase_names(doc))})")

    if as_json:
        click.echo(json.dumps([d.model_dump(mode="json", by_alias=True) for d in days], indent=2))
        return

    for plan in days:
        click.echo()
        click.secho(f"Day {plan.day} — {plan.phase}", fg="cyan", bold=True, nl=False)
        click.echo(f"  ({day_progress(plan)}%, {len(plan.tasks)} tasks)")
        for task in plan.tasks:
            mark = click.style("✓", fg="green") if task.done else " "
            click.echo(f"  [{mark}] {task.title}  ({task.estimated_minutes}m)  {task.id}")
            if ctx.obj.get("verbose"):
                click.echo(f"        {task.description}")
                if task.notes:
                    for line in task.notes.splitlines():
                        click.echo(f"        │ {line}")
    click.echo()


@click.group()
def task() -> None:
    """Roadmap tasks — toggle, annotate, remove."""


@task.command("toggle")
@click.argument("task_id")
@click.pass_context
def task_toggle(ctx: click.Context, task_id: str) -> None:
    """Mark a task done (or not done again)."""
    from kaizen.core.services.tracker_ops import toggle_task

    result = apply(ctx, lambda doc: toggle_task(doc, task_id))
    if result.done:
        click.secho(f"✓ {result.title} — done at {result.done_at}", fg="green")
    else:
        click.echo(f"○ {result.title} — reopened")


@task.command("notes")
@click.argument("task_id")
@click.argument("text")
@click.pass_context
def task_notes(ctx: click.Context, task_id: str, text: str) -> None:
    """Replace a task's notes."""
    from kaizen.core.services.tracker_ops import set_task_notes

    apply(ctx, lambda doc: set_task_notes(doc, task_id, text))
    click.echo("Notes saved")


@task.command("archive-notes")
@click.argument("task_id")
@click.pass_context
def task_archive_notes(ctx: click.Context, task_id: str) -> None:
    """Mark a task's notes as archived."""
    from kaizen.core.services.tracker_ops import archive_task_notes

    apply(ctx, lambda doc: archive_task_notes(doc, task_id))
    click.echo("Notes archived")


@task.command("remove")
@click.argument("task_id")
@click.confirmation_option(prompt="Remove task? (This deletes the task)")
@click.pass_context
def task_remove(ctx: click.Context, task_id: str) -> None:
    """Delete a task from its day."""
    from kaizen.core.services.tracker_ops import remove_task

    removed = apply(ctx, lambda doc: remove_task(doc, task_id))
    click.echo(f"Removed: {removed.title}")
