"""
Credential commands: import, list, remove, set-operator, get-operator
"""

from typing import Any, Dict, List, Optional

import typer
from rich.table import Table

from cli.runtime import console, run
from tokenops.core.errors import InvalidReference, TokenOpsError
from tokenops.core.references import IdWithSecret, parse_reference
from tokenops.tokens.commands import CommandResult

app = typer.Typer()


@app.command("import")
def import_command(
    ctx: typer.Context,
    secret: str = typer.Argument(..., help="Private key (hex or DER hex)"),
    labels: Optional[List[str]] = typer.Option(None, "--label", "-l", help="Label (repeatable)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Import a private key into the credential store."""

    def handler(services, log):
        try:
            handle = services.kcs.import_secret(secret, labels=labels or [])
        except TokenOpsError as ex:
            return CommandResult.failure(f"Failed to import key: {ex}")
        return CommandResult.success({"keyRefId": handle.key_ref_id, "publicKey": handle.public_key})

    def render(output: Dict[str, Any]) -> None:
        console.print(f"[green]✅ Key imported:[/green] {output['keyRefId']}")
        console.print(f"   Public key: {output['publicKey']}")

    run(ctx, handler, render, json_output)


@app.command("list")
def list_command(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List stored keys (public data only)."""

    def handler(services, log):
        keys = services.kcs.list_keys()
        return CommandResult.success({"keys": keys, "count": len(keys)})

    def render(output: Dict[str, Any]) -> None:
        if not output["keys"]:
            console.print("[yellow]No keys stored[/yellow]")
            return
        table = Table(title="Credentials")
        table.add_column("Key Ref", style="cyan")
        table.add_column("Algorithm", style="green")
        table.add_column("Public Key", style="dim")
        table.add_column("Labels", style="yellow")
        for key in output["keys"]:
            table.add_row(key["keyRefId"], key["keyAlgorithm"], key["publicKey"], ", ".join(key.get("labels", [])))
        console.print(table)

    run(ctx, handler, render, json_output)


@app.command()
def remove(
    ctx: typer.Context,
    key_ref_id: str = typer.Argument(..., help="Key reference id (kr_...)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Remove a key and its private material."""

    def handler(services, log):
        if services.kcs.get_public_key(key_ref_id) is None:
            return CommandResult.failure(f"Failed to remove key: Unknown keyRefId: {key_ref_id}")
        services.kcs.remove_key(key_ref_id)
        return CommandResult.success({"keyRefId": key_ref_id, "removed": True})

    def render(output: Dict[str, Any]) -> None:
        console.print(f"[green]✅ Key removed:[/green] {output['keyRefId']}")

    run(ctx, handler, render, json_output)


@app.command("set-operator")
def set_operator(
    ctx: typer.Context,
    operator: str = typer.Argument(..., help="account-id:private-key"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Set the default operator of the current network.

    Examples:
        tokenctl credentials set-operator 0.0.2:302e...
        tokenctl --network mainnet credentials set-operator 0.0.1234:abc123
    """

    def handler(services, log):
        try:
            parsed = parse_reference(operator)
            if not isinstance(parsed, IdWithSecret):
                raise InvalidReference("Operator must be given as account-id:private-key")
            handle = services.kcs.import_secret(parsed.secret, labels=["operator"])
            record = services.kcs.set_default_operator(services.network, parsed.entity_id, handle.key_ref_id)
        except TokenOpsError as ex:
            return CommandResult.failure(f"Failed to set operator: {ex}")
        return CommandResult.success(
            {
                "network": services.network,
                "accountId": record.account_id,
                "keyRefId": record.key_ref_id,
                "publicKey": handle.public_key,
            }
        )

    def render(output: Dict[str, Any]) -> None:
        console.print(f"[green]✅ Operator for {output['network']}:[/green] {output['accountId']}")
        console.print(f"   Key ref: {output['keyRefId']}")

    run(ctx, handler, render, json_output)


@app.command("get-operator")
def get_operator(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show the default operator of the current network."""

    def handler(services, log):
        record = services.kcs.get_default_operator(services.network)
        if record is None:
            return CommandResult.failure(f"No operator configured for {services.network}")
        return CommandResult.success(
            {
                "network": services.network,
                "accountId": record.account_id,
                "keyRefId": record.key_ref_id,
                "publicKey": services.kcs.get_public_key(record.key_ref_id),
            }
        )

    def render(output: Dict[str, Any]) -> None:
        console.print(f"[bold]Operator ({output['network']}):[/bold] {output['accountId']}")
        console.print(f"   Key ref: {output['keyRefId']}")
        console.print(f"   Public key: {output['publicKey']}")

    run(ctx, handler, render, json_output)
