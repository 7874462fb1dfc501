# SPDX-License-Identifier: MIT
"""CLI entry point for the roast-registry command."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from .config import RegistryConfig
from .middleware.errors import RegistryError
from .registry import Registry


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: RegistryConfig = RegistryConfig.from_env()
        self.verbose: bool = False


pass_context = click.make_pass_decorator(Context, ensure=True)


def echo_error(message: str) -> None:
    """Print an error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.secho(message, fg="green")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _with_registry(config: RegistryConfig, action):
    registry = Registry.from_config(config)
    await registry.start()
    try:
        return await action(registry)
    finally:
        await registry.close()


@click.group()
@click.version_option(package_name="roast-registry")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@pass_context
def cli(ctx: Context, verbose: bool) -> None:
    """Roast package registry server.

    \b
    Examples:
        roast-registry serve --port 8000
        roast-registry register-user dev@example.com "Dev Name"
        roast-registry stats
    """
    ctx.verbose = verbose
    configure_logging("DEBUG" if verbose else ctx.config.log_level)


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind.")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to listen on.")
@click.option("--reload", is_flag=True, help="Reload on code changes (development only).")
@pass_context
def serve(ctx: Context, host: str, port: int, reload: bool) -> None:
    """Run the registry HTTP API."""
    import uvicorn

    uvicorn.run(
        "roast_registry.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="debug" if ctx.verbose else ctx.config.log_level.lower(),
    )


@cli.command("register-user")
@click.argument("email")
@click.argument("name")
@pass_context
def register_user(ctx: Context, email: str, name: str) -> None:
    """Register an identity and print its API token."""
    if ctx.config.backend != "sql":
        echo_error("register-user needs the persistent backend (ROAST_BACKEND=sql)")
        sys.exit(1)

    try:
        identity, token = asyncio.run(
            _with_registry(ctx.config, lambda r: r.register_identity(email, name))
        )
    except RegistryError as e:
        echo_error(e.message)
        sys.exit(1)

    echo_success(f"Registered {identity.email} ({identity.owner_id})")
    click.echo(f"API token: {token}")


@cli.command()
@pass_context
def stats(ctx: Context) -> None:
    """Print registry totals."""
    totals = asyncio.run(_with_registry(ctx.config, lambda r: r.stats()))
    click.echo(f"Packages:  {totals.total_packages}")
    click.echo(f"Versions:  {totals.total_versions}")
    click.echo(f"Downloads: {totals.total_downloads}")


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
