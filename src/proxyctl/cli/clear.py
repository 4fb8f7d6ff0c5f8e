"""CLI command: proxyctl clear <endpoint ID> — remove all proxy policies."""

from __future__ import annotations

import click

from proxyctl.cli.common import console, error_out, get_store
from proxyctl.errors import ProxyctlError
from proxyctl.proxy import clear_policies


@click.command()
@click.argument("endpoint_id")
@click.pass_context
def clear(ctx: click.Context, endpoint_id: str) -> None:
    """Remove all proxy policies from an endpoint."""
    try:
        num_removed = clear_policies(get_store(ctx), endpoint_id)
    except ProxyctlError as e:
        error_out(e)
    console.print(f"Removed {num_removed} policies")
