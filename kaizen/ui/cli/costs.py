"""
CLI commands for tools and the daily cost calculator.
"""

from __future__ import annotations

import json

import click

from kaizen.ui.cli.common import apply, get_store, money


# ── Tools ───────────────────────────────────────────────────────────


@click.group()
def tool() -> None:
    """Tools — the paid services that make up the daily cost."""


@tool.command("list")
@click.pass_context
def tool_list(ctx: click.Context) -> None:
    """List tools with their daily and purchase cost."""
    doc = get_store(ctx).document
    if not doc.tools:
        click.echo("No tools")
        return
    for t in doc.tools:
        state = click.style("on ", fg="green") if t.enabled else click.style("off", fg="yellow")
        click.echo(f"  {state} {t.name:<20} {money(t.daily_cost)}/day  "
                   f"purchase {money(t.purchase_cost)}  {t.id}")


@tool.command("add")
@click.option("--name", default="New Tool", help="Tool name.")
@click.option("--daily", "daily_cost", type=float, default=0, help="Daily cost.")
@click.option("--purchase", "purchase_cost", type=float, default=0, help="One-off purchase cost.")
@click.pass_context
def tool_add(ctx: click.Context, name: str, daily_cost: float, purchase_cost: float) -> None:
    """Add a tool."""
    from kaizen.core.services.tracker_ops import add_tool

    added = apply(ctx, lambda doc: add_tool(doc, name, daily_cost, purchase_cost))
    click.echo(f"Added {added.name} ({added.id})")


@tool.command("set")
@click.argument("tool_id")
@click.option("--name", default=None)
@click.option("--daily", "daily_cost", type=float, default=None)
@click.option("--purchase", "purchase_cost", type=float, default=None)
@click.option("--enable/--disable", "enabled", default=None, help="Include in the calculator.")
@click.pass_context
def tool_set(
    ctx: click.Context,
    tool_id: str,
    name: str | None,
    daily_cost: float | None,
    purchase_cost: float | None,
    enabled: bool | None,
) -> None:
    """Update a tool."""
    from kaizen.core.services.tracker_ops import update_tool

    updated = apply(ctx, lambda doc: update_tool(
        doc, tool_id,
        name=name, daily_cost=daily_cost, purchase_cost=purchase_cost, enabled=enabled,
    ))
    click.echo(f"Updated {updated.name}")


@tool.command("remove")
@click.argument("tool_id")
@click.pass_context
def tool_remove(ctx: click.Context, tool_id: str) -> None:
    """Remove a tool."""
    from kaizen.core.services.tracker_ops import remove_tool

    removed = apply(ctx, lambda doc: remove_tool(doc, tool_id))
    click.echo(f"Removed {removed.name}")


# ── Calculator ──────────────────────────────────────────────────────


@click.group()
def costs() -> None:
    """Cost calculator — workers, misc spend and presets."""


@costs.command("show")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def costs_show(ctx: click.Context, as_json: bool) -> None:
    """Show daily totals."""
    from kaizen.core.services.tracker_ops import compute_costs

    doc = get_store(ctx).document
    breakdown = compute_costs(doc)

    if as_json:
        click.echo(json.dumps(breakdown.to_dict(), indent=2))
        return

    c = doc.costs
    click.echo(f"  Workers: {c.worker_count} × {money(c.cost_per_worker)}   "
               f"Misc: {money(c.misc_daily_cost)}")
    click.echo(f"  Tools/day:  {money(breakdown.tools)}")
    click.echo(f"  Labor/day:  {money(breakdown.labor)}")
    click.echo(f"  Misc/day:   {money(breakdown.misc)}")
    click.secho(f"  Total/day:  {money(breakdown.total)}", bold=True)
    if c.presets:
        click.echo(f"  Presets: {', '.join(c.presets)}")


@costs.command("set")
@click.option("--workers", "worker_count", type=int, default=None)
@click.option("--per-worker", "cost_per_worker", type=float, default=None)
@click.option("--misc", "misc_daily_cost", type=float, default=None)
@click.pass_context
def costs_set(
    ctx: click.Context,
    worker_count: int | None,
    cost_per_worker: float | None,
    misc_daily_cost: float | None,
) -> None:
    """Change calculator inputs."""
    from kaizen.core.services.tracker_ops import set_costs

    apply(ctx, lambda doc: set_costs(doc, worker_count, cost_per_worker, misc_daily_cost))
    ctx.invoke(costs_show)


@costs.command("preset-save")
@click.argument("name")
@click.pass_context
def costs_preset_save(ctx: click.Context, name: str) -> None:
    """Save the current inputs as a named preset."""
    from kaizen.core.services.tracker_ops import save_preset

    apply(ctx, lambda doc: save_preset(doc, name))
    click.echo(f"Preset '{name}' saved")


@costs.command("preset-apply")
@click.argument("name")
@click.pass_context
def costs_preset_apply(ctx: click.Context, name: str) -> None:
    """Load a named preset into the calculator."""
    from kaizen.core.services.tracker_ops import apply_preset

    apply(ctx, lambda doc: apply_preset(doc, name))
    ctx.invoke(costs_show)
