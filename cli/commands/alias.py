"""
Alias commands: add, list, remove
"""

from typing import Any, Dict, Optional

import typer
from rich.table import Table

from cli.runtime import console, run
from tokenops.core.errors import DuplicateAlias, InvalidReference, TokenOpsError
from tokenops.core.models import AliasRecord, EntityType
from tokenops.core.references import BareId, IdWithSecret, parse_reference
from tokenops.tokens.commands import CommandResult

app = typer.Typer()


def _entity_type(value: str) -> EntityType:
    try:
        return EntityType(value.lower())
    except ValueError:
        raise typer.BadParameter(f"type must be one of: {', '.join(t.value for t in EntityType)}") from None


def add_alias(services, name: str, value: str, entity_type: EntityType) -> CommandResult:
    """
    Register an alias.

    account: <id> (address only) or <id>:<privateKey> (signing alias)
    token:   <id>
    key:     <privateKey>, imported into the credential store
    """
    try:
        network = services.network
        key_ref_id = None
        public_key = None

        if entity_type == EntityType.KEY:
            handle = services.kcs.import_secret(value, labels=[f"alias:{name}"])
            entity_id, key_ref_id, public_key = handle.key_ref_id, handle.key_ref_id, handle.public_key
        else:
            parsed = parse_reference(value)
            if isinstance(parsed, IdWithSecret) and entity_type == EntityType.ACCOUNT:
                if services.aliases.resolve(name, entity_type, network):
                    raise DuplicateAlias(name, entity_type.value, network)
                handle = services.kcs.import_secret(parsed.secret, labels=[f"alias:{name}"])
                entity_id, key_ref_id, public_key = parsed.entity_id, handle.key_ref_id, handle.public_key
            elif isinstance(parsed, BareId):
                entity_id = parsed.entity_id
            else:
                raise InvalidReference(f"Invalid {entity_type.value} reference for alias: {value}")

        record = services.aliases.register(
            AliasRecord(
                alias=name,
                entity_type=entity_type,
                network=network,
                entity_id=entity_id,
                key_ref_id=key_ref_id,
                public_key=public_key,
                created_at=services.clock.now_iso(),
            )
        )
        return CommandResult.success(record.to_dict())
    except TokenOpsError as ex:
        return CommandResult.failure(f"Failed to add alias: {ex}")


@app.command()
def add(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Alias name"),
    value: str = typer.Argument(..., help="Entity id, id:privateKey (account) or privateKey (key)"),
    entity_type: str = typer.Option("account", "--type", "-t", help="account, token or key"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Register an alias on the current network.

    Examples:
        tokenctl alias add alice 0.0.2002:302e...
        tokenctl alias add bob 0.0.3003
        tokenctl alias add gold 0.0.1001 --type token
    """
    kind = _entity_type(entity_type)

    def render(output: Dict[str, Any]) -> None:
        console.print(
            f"[green]✅ Alias registered:[/green] {output['alias']} -> {output['entityId']} "
            f"({output['type']}, {output['network']})"
        )

    run(ctx, lambda services, log: add_alias(services, name, value, kind), render, json_output)


@app.command("list")
def list_command(
    ctx: typer.Context,
    entity_type: Optional[str] = typer.Option(None, "--type", "-t", help="Filter by type"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List aliases on the current network."""
    kind = _entity_type(entity_type) if entity_type else None

    def handler(services, log):
        records = services.aliases.list(network=services.network, entity_type=kind)
        return CommandResult.success({"aliases": [r.to_dict() for r in records], "count": len(records)})

    def render(output: Dict[str, Any]) -> None:
        if not output["aliases"]:
            console.print("[yellow]No aliases found[/yellow]")
            return
        table = Table(title="Aliases")
        table.add_column("Alias", style="cyan")
        table.add_column("Type", style="green")
        table.add_column("Entity ID", style="yellow")
        table.add_column("Key Ref", style="dim")
        for record in output["aliases"]:
            table.add_row(record["alias"], record["type"], record["entityId"], record.get("keyRefId", ""))
        console.print(table)

    run(ctx, handler, render, json_output)


@app.command()
def remove(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Alias name"),
    entity_type: str = typer.Option("account", "--type", "-t", help="account, token or key"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Remove an alias from the current network."""
    kind = _entity_type(entity_type)

    def handler(services, log):
        if not services.aliases.remove(name, kind, services.network):
            return CommandResult.failure(
                f'Failed to remove alias: Alias "{name}" not found for {kind.value} on {services.network}'
            )
        return CommandResult.success({"alias": name, "type": kind.value, "removed": True})

    def render(output: Dict[str, Any]) -> None:
        console.print(f"[green]✅ Alias removed:[/green] {output['alias']}")

    run(ctx, handler, render, json_output)
