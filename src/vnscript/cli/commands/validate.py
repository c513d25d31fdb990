"""Validate the node graph of a script."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from vnscript.cli.formatters.json_formatter import JsonFormatter
from vnscript.cli.utils.cli_handler import CLIHandler
from vnscript.cli.utils.loaders import compile_script
from vnscript.config import get_settings
from vnscript.exceptions import VNScriptError
from vnscript.validators import ScriptGraphValidator

console = Console()


def validate_command(
    script: Annotated[
        Path,
        typer.Argument(
            help="Script file to validate",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    assets: Annotated[
        Path | None,
        typer.Option("--assets", "-a", help="Asset manifest (YAML, TOML or JSON)"),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Check that every reachable node leads somewhere.

    Exits with code 1 when the graph has errors (missing start node or
    links to missing nodes). Compiler diagnostics and unreachable nodes
    are reported as warnings.
    """
    handler = CLIHandler(console)
    try:
        result = compile_script(script, get_settings(), assets)
    except VNScriptError as e:
        handler.handle_error(e, json_output)
        return

    validation = ScriptGraphValidator().validate(result.script)
    warnings = [str(d) for d in result.diagnostics] + validation.warnings

    if json_output:
        print(
            JsonFormatter().format(
                {
                    "valid": validation.is_valid,
                    "nodes": len(result.script),
                    "reachable": sorted(validation.reachable),
                    "errors": validation.errors,
                    "warnings": warnings,
                }
            )
        )
    else:
        for error in validation.errors:
            console.print(f"[red]✗ {escape(error)}[/red]")
        for warning in warnings:
            console.print(f"[yellow]⚠ {escape(warning)}[/yellow]")
        if validation.is_valid:
            console.print(
                f"[green]✓ {escape(script.name)} is valid[/green] "
                f"({len(validation.reachable)}/{len(result.script)} nodes reachable)"
            )

    if not validation.is_valid:
        raise typer.Exit(1)
