"""Helpers shared by the CLI commands."""

from __future__ import annotations

import ipaddress
import sys
from typing import NoReturn

import click
from rich.console import Console
from rich.markup import escape

from proxyctl.errors import ProxyctlError
from proxyctl.policy.models import IPAddress
from proxyctl.store.base import EndpointPolicyStore

console = Console(stderr=True)


class IPAddressType(click.ParamType):
    """An IPv4 or IPv6 address."""

    name = "ip"

    def convert(
        self, value: object, param: click.Parameter | None, ctx: click.Context | None
    ) -> IPAddress:
        if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
            return value
        try:
            return ipaddress.ip_address(str(value))
        except ValueError:
            self.fail(f"{value!r} is not a valid IP address", param, ctx)


IP_ADDRESS = IPAddressType()


def get_store(ctx: click.Context) -> EndpointPolicyStore:
    """Return the store for this invocation; tests inject one via ``obj``."""
    store = ctx.obj.get("store")
    if store is None:
        from proxyctl.store.hcn import HcnEndpointStore

        store = HcnEndpointStore()
        ctx.obj["store"] = store
    return store


def error_out(err: ProxyctlError) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(str(err))}", highlight=False)
    sys.exit(1)
