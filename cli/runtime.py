"""
Per-invocation wiring shared by all command groups.

Exit codes:
    0: success
    1: command failure (CommandResult.status == "failure")
    2: unexpected error
"""

import json
from typing import Any, Callable, Dict, Optional, Tuple

import typer
from rich.console import Console

from tokenops.config import Settings
from tokenops.core.errors import TokenOpsError
from tokenops.core.ids import new_trace_id
from tokenops.logging_config import get_logger, setup_logging
from tokenops.services import CoreServices, build_services
from tokenops.tokens.commands import CommandResult

console = Console()

Handler = Callable[[CoreServices, Any], CommandResult]
Renderer = Callable[[Dict[str, Any]], None]


def network_option(ctx: typer.Context) -> Optional[str]:
    return (ctx.obj or {}).get("network")


def open_services(ctx: typer.Context) -> Tuple[CoreServices, Any]:
    """Load settings, configure logging and wire services for this invocation."""
    settings = Settings.from_env(network=network_option(ctx))
    setup_logging(settings)
    logger = get_logger("tokenctl", trace_id=new_trace_id())
    return build_services(settings), logger


def print_json(data: Dict[str, Any]) -> None:
    print(json.dumps(data, indent=2))


def fail(message: str, json_output: bool, code: int) -> None:
    if json_output:
        print_json({"error": message})
    else:
        console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(code)


def run(ctx: typer.Context, handler: Handler, render: Renderer, json_output: bool) -> None:
    """
    Run handler against fresh services and print its result.

    Raises:
        typer.Exit: 1 on command failure, 2 on unexpected errors
    """
    try:
        services, logger = open_services(ctx)
        result = handler(services, logger)
    except TokenOpsError as ex:
        result = CommandResult.failure(str(ex))
    except Exception as ex:
        fail(f"Unexpected error: {ex}", json_output, 2)
        return

    if not result.ok:
        fail(result.error_message or "Command failed", json_output, 1)
    if json_output:
        print_json(result.output)
    else:
        render(result.output)
