#!/usr/bin/env python3
"""
tokenctl entrypoint.

Wires the token, alias, credentials and ledger command groups under one
Typer application. The global --network option is stashed on the context
and picked up by cli.runtime when a command opens its services.
"""

from typing import Optional

import typer
from rich.table import Table

from cli import __version__
from cli.commands import alias, credentials, ledger, token
from cli.runtime import console
from tokenops import __version__ as core_version

app = typer.Typer(
    name="tokenctl",
    help="Create, associate and transfer tokens against a hash-chained ledger.",
    add_completion=False,
)

COMMAND_GROUPS = (
    (token.app, "token", "Create, associate, transfer and bulk-load tokens"),
    (alias.app, "alias", "Name accounts, tokens and keys per network"),
    (credentials.app, "credentials", "Private keys and per-network default operators"),
    (ledger.app, "ledger", "Inspect and verify the local ledger log"),
)

for group, group_name, group_help in COMMAND_GROUPS:
    app.add_typer(group, name=group_name, help=group_help)


@app.callback()
def select_network(
    ctx: typer.Context,
    network: Optional[str] = typer.Option(
        None, "--network", "-N", help="Target network; defaults to TOKENOPS_NETWORK"
    ),
):
    ctx.obj = {"network": network.strip().lower() if network else None}


@app.command()
def version():
    """Print the CLI and core library versions."""
    table = Table(show_header=False, box=None)
    table.add_row("[bold]tokenctl[/bold]", f"v{__version__}")
    table.add_row("tokenops", f"v{core_version}")
    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()
