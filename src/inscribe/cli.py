"""
Inscribe CLI

Command-line interface for building, signing and pushing transactions.

Commands:
  actions  - List the known action types
  usage    - Show an action's fields and an example
  push     - Build, sign and push a single action
  keygen   - Create a signing key
  whoami   - Show the signing key address(es)
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Optional

import click

from .config import DEFAULT_RPC_URL, WriteConfig
from .errors import WriteApiError
from .sigil.keys import generate_key, get_address, load_private_keys, local_signer, save_private_key
from .spec.schemas import SchemaRegistry
from .write.api import WriteApi
from .write.usage import usage as usage_text


# ============ Constants ============

VERSION = "0.3.0"


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=VERSION, prog_name="inscribe")
@click.option("--verbose", "-v", is_flag=True, help="Log pipeline stages")
def cli(verbose: bool) -> None:
    """Inscribe - build, batch, sign and push transactions."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ============ Schema ============


@cli.command()
def actions() -> None:
    """List the known action types."""
    registry = SchemaRegistry.default()
    for name, definition in registry.actions.items():
        click.echo(f"{name}({', '.join(definition.field_names)})")


@cli.command()
@click.argument("action")
def usage(action: str) -> None:
    """Show an action's fields and an example structure."""
    try:
        click.echo(usage_text(SchemaRegistry.default(), action), nl=False)
    except WriteApiError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)


# ============ Push ============


@cli.command()
@click.argument("action")
@click.argument("values", nargs=-1)
@click.option("--settings", "settings_json", default="{}", help="Extra settings as a JSON object")
@click.option("--no-broadcast", is_flag=True, help="Sign but do not push")
@click.option("--no-sign", is_flag=True, help="Do not sign")
@click.option("--expire-in", default=60, type=int, help="Expiration in seconds")
@click.option("--rpc-url", envvar="INSCRIBE_RPC_URL", default=DEFAULT_RPC_URL, help="Node URL")
@click.option("--chain-id", envvar="INSCRIBE_CHAIN_ID", required=True, help="Hex chain id")
def push(
    action: str,
    values: tuple[str, ...],
    settings_json: str,
    no_broadcast: bool,
    no_sign: bool,
    expire_in: int,
    rpc_url: str,
    chain_id: str,
) -> None:
    """
    Build one action from VALUES (in field order) and push it.

    Prints the final transaction as JSON.
    """
    if not values:
        click.get_current_context().invoke(usage, action=action)
        sys.exit(1)

    try:
        settings = json.loads(settings_json)
        if not isinstance(settings, dict):
            raise ValueError("Settings must be a JSON object")
    except (json.JSONDecodeError, ValueError) as exc:
        click.secho(f"ERROR: Invalid settings: {exc}", fg="red")
        sys.exit(1)

    settings.update(
        {"broadcast": not no_broadcast, "sign": not no_sign, "expire_in_seconds": expire_in}
    )

    try:
        config = WriteConfig(
            chain_id=chain_id,
            sign_provider=None if no_sign else local_signer(),
            rpc_url=rpc_url,
        )
        api = WriteApi(config)
        tr = asyncio.run(api[action](*values, settings))
    except WriteApiError as exc:
        click.secho(f"Transaction failed: {exc}", fg="red")
        sys.exit(1)

    click.echo(json.dumps(tr, indent=2))


# ============ Keys ============


@cli.command()
@click.option("--force", is_flag=True, help="Replace an existing key")
def keygen(force: bool) -> None:
    """Create a signing key and store it in ~/.inscribe/.env."""
    try:
        existing = load_private_keys()
    except WriteApiError:
        existing = []
    if existing and not force:
        click.secho("A key already exists (use --force to replace it).", fg="yellow")
        sys.exit(1)

    private_key, address = generate_key()
    path = save_private_key(private_key)
    click.echo(f"Address: {address}")
    click.echo(f"Saved to: {path}")


@cli.command()
def whoami() -> None:
    """Show the signing key address(es)."""
    try:
        keys = load_private_keys()
    except WriteApiError:
        click.echo("No key found.")
        click.echo("Run 'inscribe keygen' to create one.")
        sys.exit(1)
    for key in keys:
        click.echo(f"Address: {get_address(key)}")


# ============ Entry Points ============


def main(argv: Optional[list[str]] = None) -> None:
    """Inscribe CLI entry point."""
    cli(args=argv)


if __name__ == "__main__":
    main()
