"""
CLI commands for the remote state service.

``push`` and ``pull`` replace the whole document on the other side;
there is no merge. Failures are reported once — no retry.
"""

from __future__ import annotations

import click

from kaizen.ui.cli.common import get_store, reported


@click.group()
def remote() -> None:
    """Remote sync — save/load the state document on a server."""


@remote.command("configure")
@click.option("--url", "server_url", default=None, help="Server base URL.")
@click.option("--api-key", default=None, help="Shared secret sent as x-api-key.")
@click.pass_context
def remote_configure(ctx: click.Context, server_url: str | None, api_key: str | None) -> None:
    """Store the server URL and API key."""
    store = get_store(ctx)
    with reported():
        if server_url is not None:
            store.server_url = server_url
        if api_key is not None:
            store.api_key = api_key
    click.echo(f"Server: {store.server_url or '(not set)'}")
    click.echo(f"API key: {'set' if store.api_key else '(not set)'}")


@remote.command("push")
@click.pass_context
def remote_push(ctx: click.Context) -> None:
    """Save the live document to the server (overwrites it)."""
    from kaizen.core.services.sync_ops import push_state

    with reported():
        ack = push_state(get_store(ctx))
    click.secho(f"✅ Saved to server ({ack.get('savedAt', '?')})", fg="green")


@remote.command("pull")
@click.confirmation_option(prompt="Replace the local document with the server copy?")
@click.pass_context
def remote_pull(ctx: click.Context) -> None:
    """Replace the live document with the server copy."""
    from kaizen.core.services.sync_ops import pull_state

    with reported():
        doc = pull_state(get_store(ctx))
    click.secho(f"✅ Loaded from server: {doc.meta.project_name}", fg="green")


@remote.command("test-webhook")
@click.argument("kind", type=click.Choice(["twilio", "wa", "vapi", "webhook", "ghl"]))
@click.pass_context
def remote_test_webhook(ctx: click.Context, kind: str) -> None:
    """Send a sample webhook payload to the server."""
    from kaizen.core.services.sync_ops import client_for

    with reported():
        client_for(get_store(ctx)).send_webhook_test(kind)
    click.secho("✅ Webhook test sent", fg="green")
