"""CLI command: proxyctl lookup <container ID> — find a container's endpoint."""

from __future__ import annotations

import click

from proxyctl.cli.common import error_out
from proxyctl.errors import ProxyctlError
from proxyctl.proxy import get_endpoint_from_container


@click.command()
@click.argument("container_id")
@click.pass_context
def lookup(ctx: click.Context, container_id: str) -> None:
    """Report the ID of the HNS endpoint the container is attached to."""
    try:
        endpoint_id = get_endpoint_from_container(container_id, ctx.obj["config"])
    except ProxyctlError as e:
        error_out(e)
    click.echo(endpoint_id)
