"""
Kaizen Automation — CLI entrypoint.

Usage:
    kaizen --help
    kaizen status
    kaizen task toggle d1t0-ab12
    kaizen serve --port 3000
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import click

from kaizen import __version__
from kaizen.core.observability.logging_config import (
    ENV_FILE,
    ENV_FILE_LEVEL,
    level_from_flags,
    setup_logging,
)
from kaizen.ui.cli.common import apply, fail, get_store, money, reported


@click.group()
@click.version_option(version=__version__, prog_name="kaizen")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--storage",
    "storage_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Local storage file (default: $KAIZEN_STORAGE or ~/.kaizen/storage.json).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    storage_path: str | None,
) -> None:
    """Kaizen Automation — 60-day roadmap, checklist and cost tracker."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["storage_path"] = Path(storage_path) if storage_path else None

    setup_logging(
        level=level_from_flags(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
        quiet_third_party=not debug,
    )


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show project progress and daily cost."""
    from kaizen.core.services.tracker_ops import (
        completed_tasks,
        compute_costs,
        overall_progress,
    )

    doc = get_store(ctx).document
    tasks = doc.all_tasks()
    done = sum(1 for t in tasks if t.done)
    breakdown = compute_costs(doc)

    if as_json:
        click.echo(json.dumps({
            "project": doc.meta.project_name,
            "created_at": doc.meta.created_at,
            "last_saved": doc.meta.last_saved,
            "days": len(doc.roadmap),
            "tasks": {"total": len(tasks), "done": done},
            "progress": overall_progress(doc),
            "costs": breakdown.to_dict(),
            "tools": len(doc.tools),
            "notes": len(doc.diary),
        }, indent=2))
        return

    click.secho(f"\n📋 {doc.meta.project_name}", fg="cyan", bold=True)
    click.echo(f"   Created: {doc.meta.created_at}")
    click.echo(f"   Last saved: {doc.meta.last_saved or 'never'}")
    click.echo()
    click.echo(f"   Progress: {done}/{len(tasks)} ({overall_progress(doc)}%)")
    click.echo(f"   Costs/day: {money(breakdown.total)}")
    click.echo(f"   Tools: {len(doc.tools)}   Notes: {len(doc.diary)}")

    recent = completed_tasks(doc, limit=5)
    if recent and not ctx.obj.get("quiet"):
        click.echo()
        click.secho("   Recently completed:", bold=True)
        for t in recent:
            click.echo(f"     ✓ {t.title} ({t.done_at})")
    click.echo()


@cli.command()
@click.argument("name")
@click.pass_context
def rename(ctx: click.Context, name: str) -> None:
    """Rename the project."""
    from kaizen.core.services.tracker_ops import rename_project

    apply(ctx, lambda doc: rename_project(doc, name))
    click.echo(f"Project renamed to {name}")


@cli.command()
@click.pass_context
def save(ctx: click.Context) -> None:
    """Save the live document to local storage."""
    with reported():
        doc = get_store(ctx).save()
    click.secho(f"Saved locally ({doc.meta.last_saved})", fg="green")


@cli.command("export")
@click.argument("path", type=click.Path(dir_okay=False), required=False)
@click.option("--day", "day_num", type=int, default=None, help="Export a single day instead.")
@click.pass_context
def export_cmd(ctx: click.Context, path: str | None, day_num: int | None) -> None:
    """Export the document as pretty-printed JSON (stdout if no PATH).

    With --day N only that day's plan is exported, as a single object.
    """
    store = get_store(ctx)
    if day_num is None:
        text = store.export_json()
    else:
        plan = store.document.get_day(day_num)
        if plan is None:
            fail(f"Day not found: {day_num}")
        text = json.dumps(plan.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)
    if path is None:
        click.echo(text)
        return
    Path(path).write_text(text + "\n", encoding="utf-8")
    click.echo(f"Exported to {path}")


@cli.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_cmd(ctx: click.Context, path: str) -> None:
    """Replace the live document with a previously exported JSON file."""
    store = get_store(ctx)
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        fail(f"Cannot read {path}: {e}")
    with reported():
        doc = store.import_json(text)
    click.secho(f"Imported JSON: {doc.meta.project_name}", fg="green")


@cli.command()
@click.option("--interval-ms", type=int, default=None, help="Change the interval first.")
@click.option("--duration", type=float, default=None, help="Stop after N seconds (default: until Ctrl-C).")
@click.pass_context
def autosave(ctx: click.Context, interval_ms: int | None, duration: float | None) -> None:
    """Run the autosave timer in the foreground."""
    import threading

    from kaizen.core.services.tracker_ops import set_autosave_interval

    store = get_store(ctx)
    if interval_ms is not None:
        apply(ctx, lambda doc: set_autosave_interval(doc, interval_ms))

    store.start_autosave()
    click.echo(f"Autosaving every {store.document.settings.auto_save_interval_ms}ms "
               "(Ctrl-C to stop)")
    try:
        threading.Event().wait(duration)
    except KeyboardInterrupt:
        pass
    finally:
        store.stop_autosave()
        with reported():
            store.save()


@cli.command()
@click.option("--host", default=None, help="Bind address (default from config).")
@click.option("--port", "-p", default=None, type=int, help="Port number (default: $PORT or 3000).")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to kaizen.yml (default: auto-detect).",
)
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, config_path: str | None) -> None:
    """Start the remote state service and webhook sink."""
    from kaizen.core.config.loader import ConfigError, load_server_config
    from kaizen.ui.web.server import create_app, run_server

    try:
        config = load_server_config(Path(config_path) if config_path else None)
    except ConfigError as e:
        fail(str(e))

    host = host or config.host
    port = port or config.port
    app = create_app(config)

    click.echo()
    click.secho("⚡ Kaizen Automation server", bold=True)
    click.echo(f"   Listening: http://{host}:{port}")
    click.echo(f"   Data dir:  {config.data_dir}")
    click.echo(f"   API_SECRET is {'SET' if config.api_secret else 'NOT SET'}")
    click.echo()

    run_server(app, host=host, port=port, debug=ctx.obj.get("debug", False))


# ── Register sub-command groups from kaizen/ui/cli/ ─────────────────

from kaizen.ui.cli.costs import costs, tool
from kaizen.ui.cli.diary import diary
from kaizen.ui.cli.remote import remote
from kaizen.ui.cli.roadmap import roadmap, task

cli.add_command(roadmap)
cli.add_command(task)
cli.add_command(tool)
cli.add_command(costs)
cli.add_command(diary)
cli.add_command(remote)


if __name__ == "__main__":
    cli()
