"""
Local ledger commands: tail, verify
"""

from typing import Any, Dict, Optional

import typer
from rich.table import Table

from cli.runtime import console, run
from tokenops.ledger.local import LocalLedgerService
from tokenops.tokens.commands import CommandResult

app = typer.Typer()


def _local_ledger(services) -> LocalLedgerService:
    if not isinstance(services.ledger, LocalLedgerService):
        raise TypeError("Ledger inspection requires the local ledger")
    return services.ledger


@app.command()
def tail(
    ctx: typer.Context,
    lines: Optional[int] = typer.Option(None, "--lines", "-n", help="Number of records to show"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show the most recent ledger records of the current network.

    Examples:
        tokenctl ledger tail
        tokenctl ledger tail --lines 10 --json
    """

    def handler(services, log):
        records = list(_local_ledger(services).log.records())
        if lines:
            records = records[-lines:]
        return CommandResult.success({"events": records, "count": len(records), "network": services.network})

    def render(output: Dict[str, Any]) -> None:
        if not output["events"]:
            console.print("[yellow]Ledger log is empty[/yellow]")
            return
        table = Table(title=f"Ledger: {output['network']}")
        table.add_column("Seq", style="cyan")
        table.add_column("Type", style="green")
        table.add_column("Token", style="yellow")
        table.add_column("Transaction ID")
        table.add_column("Hash (prefix)", style="dim")
        for rec in output["events"]:
            ev = rec["event"]
            table.add_row(
                str(ev.get("seq", "N/A")),
                ev.get("type", "N/A"),
                ev.get("aggregate_id", "N/A"),
                (ev.get("meta") or {}).get("transactionId", "N/A"),
                rec.get("event_hash", "")[:16] or "N/A",
            )
        console.print(table)
        console.print(f"\n[bold]Total records:[/bold] {output['count']}")

    run(ctx, handler, render, json_output)


@app.command()
def verify(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Verify the hash chain of the current network's ledger log."""

    def handler(services, log):
        result = _local_ledger(services).verify_chain()
        output = {
            "network": services.network,
            "valid": result.valid,
            "checked": result.checked,
        }
        if not result.valid:
            return CommandResult.failure(
                f"Ledger chain broken at seq={result.mismatch_seq}: {result.error} "
                f"(expected {result.expected}, got {result.actual})"
            )
        return CommandResult.success(output)

    def render(output: Dict[str, Any]) -> None:
        console.print(f"[green]✅ Ledger chain valid[/green] ({output['checked']} records, {output['network']})")

    run(ctx, handler, render, json_output)
