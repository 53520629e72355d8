"""
Token commands: create, associate, transfer, create-from-file, list, stats, remove
"""

from typing import Any, Dict, Optional

import typer
from rich.table import Table

from cli.runtime import console, run
from tokenops.tokens import commands

app = typer.Typer()


def _render_created(output: Dict[str, Any]) -> None:
    console.print(f"[green]✅ Token created successfully:[/green] [bold]{output['tokenId']}[/bold]")
    console.print(f"   Name: {output['name']} ({output['symbol']})")
    console.print(f"   Treasury: {output['treasuryId']}")
    console.print(f"   Decimals: {output['decimals']}")
    console.print(f"   Initial Supply: {output['initialSupply']}")
    console.print(f"   Supply Type: {output['supplyType']}")
    if output.get("supplyType") == "FINITE":
        console.print(f"   Max Supply: {output['maxSupply']}")
    if output.get("alias"):
        console.print(f"   Alias: {output['alias']}")
    console.print(f"   Network: {output['network']}")
    console.print(f"   Transaction ID: [dim]{output['transactionId']}[/dim]")


@app.command()
def create(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", "-n", help="Token name"),
    symbol: str = typer.Option(..., "--symbol", "-s", help="Token symbol"),
    treasury: Optional[str] = typer.Option(
        None, "--treasury", "-t", help="Treasury alias or account-id:private-key (default: operator)"
    ),
    decimals: int = typer.Option(0, "--decimals", "-d", help="Decimal places"),
    initial_supply: str = typer.Option("1000000", "--initial-supply", "-i", help="Initial supply in base units"),
    supply_type: str = typer.Option("INFINITE", "--supply-type", help="FINITE or INFINITE"),
    max_supply: Optional[str] = typer.Option(None, "--max-supply", "-m", help="Max supply (FINITE only)"),
    admin_key: Optional[str] = typer.Option(None, "--admin-key", "-a", help="Admin key (alias or public key)"),
    alias: Optional[str] = typer.Option(None, "--alias", help="Register a token alias"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Create a new token.

    Examples:
        tokenctl token create -n "My Token" -s MTK
        tokenctl token create -n Gold -s GLD -t 0.0.1234:302e... --supply-type finite -m 5000
    """
    args = {
        "name": name,
        "symbol": symbol,
        "treasury": treasury,
        "decimals": decimals,
        "initial_supply": initial_supply,
        "supply_type": supply_type,
        "max_supply": max_supply,
        "admin_key": admin_key,
        "alias": alias,
    }
    run(ctx, lambda services, log: commands.create_token(args, services, log), _render_created, json_output)


@app.command()
def associate(
    ctx: typer.Context,
    token: str = typer.Option(..., "--token", "-T", help="Token id or alias"),
    account: str = typer.Option(..., "--account", "-a", help="Account alias or account-id:private-key"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Associate an account with a token.

    Examples:
        tokenctl token associate -T my-token -a alice
        tokenctl token associate -T 0.0.1001 -a 0.0.2002:302e...
    """

    def render(output: Dict[str, Any]) -> None:
        console.print(
            f"[green]✅ Token association successful:[/green] {output['accountId']} -> {output['tokenId']}"
        )
        console.print(f"   Transaction ID: [dim]{output['transactionId']}[/dim]")

    args = {"token": token, "account": account}
    run(ctx, lambda services, log: commands.associate_token(args, services, log), render, json_output)


@app.command()
def transfer(
    ctx: typer.Context,
    token: str = typer.Option(..., "--token", "-T", help="Token id or alias"),
    to: str = typer.Option(..., "--to", help="Destination alias or account id"),
    amount: str = typer.Option(..., "--amount", "-b", help="Amount in base units"),
    from_: Optional[str] = typer.Option(
        None, "--from", "-f", help="Source alias or account-id:private-key (default: operator)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Transfer tokens between accounts.

    Examples:
        tokenctl token transfer -T my-token --to bob -b 100
        tokenctl token transfer -T 0.0.1001 -f alice --to 0.0.3003 -b 5
    """

    def render(output: Dict[str, Any]) -> None:
        console.print(
            f"[green]✅ Transfer successful:[/green] {output['amount']} of {output['tokenId']} "
            f"from {output['from']} to {output['to']}"
        )
        console.print(f"   Transaction ID: [dim]{output['transactionId']}[/dim]")

    args = {"token": token, "from": from_, "to": to, "amount": amount}
    run(ctx, lambda services, log: commands.transfer_token(args, services, log), render, json_output)


@app.command("create-from-file")
def create_from_file(
    ctx: typer.Context,
    file: str = typer.Option(..., "--file", "-f", help="Definition name (token.<name>.json) or .json path"),
    alias: Optional[str] = typer.Option(None, "--alias", help="Register a token alias"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Create a token and its associations from a JSON definition.

    Examples:
        tokenctl token create-from-file -f gold
        tokenctl token create-from-file -f ./defs/token.gold.json --json
    """

    def render(output: Dict[str, Any]) -> None:
        _render_created(output)
        if output.get("associations"):
            table = Table(title="Associations")
            table.add_column("Account", style="cyan")
            table.add_column("Name", style="yellow")
            table.add_column("Status")
            for entry in output["associations"]:
                status = "[green]associated[/green]" if entry["success"] else "[red]failed[/red]"
                table.add_row(entry["accountId"], entry["name"], status)
            console.print(table)

    args = {"file": file, "alias": alias}
    run(ctx, lambda services, log: commands.create_token_from_file(args, services, log), render, json_output)


@app.command("list")
def list_command(
    ctx: typer.Context,
    all_networks: bool = typer.Option(False, "--all", help="Include tokens of every network"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List tokens stored locally (current network by default)."""

    def handler(services, log):
        network = None if all_networks else services.network
        return commands.list_tokens({"network": network}, services, log)

    def render(output: Dict[str, Any]) -> None:
        if not output["tokens"]:
            console.print("[yellow]No tokens found[/yellow]")
            return
        table = Table(title="Tokens")
        table.add_column("Token ID", style="cyan")
        table.add_column("Name", style="green")
        table.add_column("Symbol")
        table.add_column("Alias", style="yellow")
        table.add_column("Supply")
        table.add_column("Network", style="dim")
        table.add_column("Associations")
        for token in output["tokens"]:
            table.add_row(
                token["tokenId"],
                token["name"],
                token["symbol"],
                token.get("alias", ""),
                f"{token['initialSupply']} ({token['supplyType']})",
                token["network"],
                str(len(token["associations"])),
            )
        console.print(table)
        console.print(f"\n[bold]Total tokens:[/bold] {output['count']}")

    run(ctx, handler, render, json_output)


@app.command()
def stats(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show statistics over locally stored tokens."""

    def render(output: Dict[str, Any]) -> None:
        table = Table(show_header=False, box=None)
        table.add_row("[bold]Total tokens[/bold]", str(output["total"]))
        table.add_row("With associations", str(output["withAssociations"]))
        table.add_row("Total associations", str(output["totalAssociations"]))
        for network, count in sorted(output["byNetwork"].items()):
            table.add_row(f"Network {network}", str(count))
        for supply_type, count in sorted(output["bySupplyType"].items()):
            table.add_row(f"Supply {supply_type}", str(count))
        console.print(table)

    run(ctx, lambda services, log: commands.token_stats({}, services, log), render, json_output)


@app.command()
def remove(
    ctx: typer.Context,
    token: str = typer.Option(..., "--token", "-T", help="Token id or alias"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Remove a token from local state (the ledger is not touched)."""

    def render(output: Dict[str, Any]) -> None:
        console.print(f"[green]✅ Token removed:[/green] {output['tokenId']}")

    run(ctx, lambda services, log: commands.remove_token({"token": token}, services, log), render, json_output)
