"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging

import click

from proxyctl import __version__
from proxyctl.config import ProxyctlConfig


@click.group()
@click.version_option(version=__version__, prog_name="proxyctl")
@click.option(
    "--hnsdiag",
    type=str,
    default=None,
    help="Path to hnsdiag (default: hnsdiag on PATH, or $PROXYCTL_HNSDIAG).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, hnsdiag: str | None, verbose: bool) -> None:
    """proxyctl — program layer-4 proxy policies on HNS endpoints."""
    ctx.ensure_object(dict)

    config = ProxyctlConfig.load()
    if hnsdiag:
        config.hnsdiag_path = hnsdiag
    ctx.obj["config"] = config

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    from proxyctl.cli.add import add  # noqa: F811
    from proxyctl.cli.clear import clear  # noqa: F811
    from proxyctl.cli.list_ import list_  # noqa: F811
    from proxyctl.cli.lookup import lookup  # noqa: F811

    main.add_command(add)
    main.add_command(clear)
    main.add_command(list_)
    main.add_command(lookup)


_register_commands()
