"""CLI command: proxyctl list <endpoint ID> — show active proxy policies."""

from __future__ import annotations

import json

import click
from rich.table import Table

from proxyctl.cli.common import console, error_out, get_store
from proxyctl.errors import ProxyctlError
from proxyctl.policy.codec import policy_to_dict
from proxyctl.proxy import list_policies


@click.command(name="list")
@click.argument("endpoint_id")
@click.option("--json", "as_json", is_flag=True, help="Print policies as JSON.")
@click.pass_context
def list_(ctx: click.Context, endpoint_id: str, as_json: bool) -> None:
    """List the active proxy policies on an endpoint."""
    try:
        policies = list_policies(get_store(ctx), endpoint_id)
    except ProxyctlError as e:
        error_out(e)

    if as_json:
        click.echo(json.dumps([policy_to_dict(p) for p in policies], indent=2))
        return

    if not policies:
        console.print("[yellow]No proxy policies on this endpoint.[/yellow]")
        return

    table = Table(title=f"Proxy policies on {endpoint_id}", show_lines=False)
    table.add_column("Port", justify="right", style="bold")
    table.add_column("User SID", style="cyan")
    table.add_column("Compartment", justify="right")
    table.add_column("Local address")
    table.add_column("Remote address")
    table.add_column("Priority", justify="right")
    table.add_column("Protocol", justify="right")

    for policy in policies:
        table.add_row(
            str(policy.proxy_port),
            policy.user_sid or "-",
            str(policy.compartment_id),
            str(policy.local_addr) if policy.local_addr else "-",
            str(policy.remote_addr) if policy.remote_addr else "-",
            str(policy.priority),
            str(int(policy.protocol)),
        )

    console.print(table)
