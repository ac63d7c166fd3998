"""
CLI commands for the project diary.
"""

from __future__ import annotations

import click

from kaizen.ui.cli.common import apply, get_store


@click.group()
def diary() -> None:
    """Diary — quick dated notes."""


@diary.command("add")
@click.argument("content")
@click.pass_context
def diary_add(ctx: click.Context, content: str) -> None:
    """Add a note."""
    from kaizen.core.services.tracker_ops import add_note

    note = apply(ctx, lambda doc: add_note(doc, content.strip()))
    click.echo(f"Note added ({note.id})")


@diary.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include archived notes.")
@click.pass_context
def diary_list(ctx: click.Context, show_all: bool) -> None:
    """List notes, pinned first."""
    notes = get_store(ctx).document.diary
    if not show_all:
        notes = [n for n in notes if not n.archived]
    if not notes:
        click.echo("No notes")
        return

    for note in sorted(notes, key=lambda n: not n.pinned):
        flags = ("📌 " if note.pinned else "") + ("[archived] " if note.archived else "")
        click.secho(f"{flags}{note.title}", bold=True, nl=False)
        click.echo(f"  {note.created_at}  {note.id}")
        for line in note.content.splitlines():
            click.echo(f"   {line}")
        click.echo()


@diary.command("edit")
@click.argument("note_id")
@click.argument("content")
@click.pass_context
def diary_edit(ctx: click.Context, note_id: str, content: str) -> None:
    """Replace a note's content."""
    from kaizen.core.services.tracker_ops import edit_note

    apply(ctx, lambda doc: edit_note(doc, note_id, content))
    click.echo("Note saved")


@diary.command("archive")
@click.argument("note_id")
@click.pass_context
def diary_archive(ctx: click.Context, note_id: str) -> None:
    """Archive or unarchive a note."""
    from kaizen.core.services.tracker_ops import toggle_archive_note

    note = apply(ctx, lambda doc: toggle_archive_note(doc, note_id))
    click.echo("Archived" if note.archived else "Unarchived")


@diary.command("pin")
@click.argument("note_id")
@click.pass_context
def diary_pin(ctx: click.Context, note_id: str) -> None:
    """Pin or unpin a note."""
    from kaizen.core.services.tracker_ops import toggle_pin_note

    note = apply(ctx, lambda doc: toggle_pin_note(doc, note_id))
    click.echo("Pinned" if note.pinned else "Unpinned")


@diary.command("delete")
@click.argument("note_id")
@click.confirmation_option(prompt="Delete note?")
@click.pass_context
def diary_delete(ctx: click.Context, note_id: str) -> None:
    """Delete a note."""
    from kaizen.core.services.tracker_ops import delete_note

    apply(ctx, lambda doc: delete_note(doc, note_id))
    click.echo("Note deleted")
