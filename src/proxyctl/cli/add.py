"""CLI command: proxyctl add <endpoint ID> — add a proxy policy."""

from __future__ import annotations

import click

from proxyctl.cli.common import IP_ADDRESS, console, error_out, get_store
from proxyctl.errors import ProxyctlError
from proxyctl.policy.loader import load_policies
from proxyctl.policy.models import IPAddress, Policy
from proxyctl.policy.validator import validate_policy
from proxyctl.proxy import add_policy


@click.command()
@click.argument("endpoint_id")
@click.option(
    "--port",
    "-p",
    type=click.IntRange(0, 65535),
    default=None,
    help="Port the proxy is listening on.",
)
@click.option(
    "--usersid",
    default="",
    help="Ignore traffic originating from the specified user SID.",
)
@click.option(
    "--compartment",
    type=click.IntRange(0, 0xFFFFFFFF),
    default=0,
    help="Only proxy traffic originating from the specified network compartment.",
)
@click.option(
    "--localaddr",
    type=IP_ADDRESS,
    default=None,
    help="Only proxy traffic originating from the specified address.",
)
@click.option(
    "--remoteaddr",
    type=IP_ADDRESS,
    default=None,
    help="Only proxy traffic destined to the specified address.",
)
@click.option(
    "--priority",
    type=click.IntRange(0, 255),
    default=0,
    help="The priority of this policy.",
)
@click.option(
    "--file",
    "-f",
    "policy_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Add the policies listed in a YAML file instead.",
)
@click.pass_context
def add(
    ctx: click.Context,
    endpoint_id: str,
    port: int | None,
    usersid: str,
    compartment: int,
    localaddr: IPAddress | None,
    remoteaddr: IPAddress | None,
    priority: int,
    policy_file: str | None,
) -> None:
    """Add a proxy policy to an endpoint."""
    if policy_file is None and port is None:
        raise click.UsageError("Missing option '--port' / '-p' (or use --file).")
    if policy_file is not None and port is not None:
        raise click.UsageError("--port and --file are mutually exclusive.")

    store = get_store(ctx)
    try:
        if policy_file is not None:
            policies = load_policies(policy_file)
        else:
            policies = [
                Policy(
                    proxy_port=port,
                    user_sid=usersid,
                    compartment_id=compartment,
                    local_addr=localaddr,
                    remote_addr=remoteaddr,
                    priority=priority,
                )
            ]
        # Reject the whole batch before any policy reaches the store.
        for policy in policies:
            validate_policy(policy)
        for policy in policies:
            add_policy(store, endpoint_id, policy)
    except ProxyctlError as e:
        error_out(e)

    if len(policies) == 1:
        console.print("[green]Successfully added the policy[/green]")
    else:
        console.print(f"[green]Successfully added {len(policies)} policies[/green]")
