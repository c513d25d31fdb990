"""Compile a script and show the resulting node graph."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from vnscript.cli.formatters.base import OutputFormat
from vnscript.cli.formatters.script_formatter import ScriptFormatter
from vnscript.cli.utils.cli_handler import CLIHandler
from vnscript.cli.utils.loaders import compile_script
from vnscript.config import get_settings
from vnscript.exceptions import VNScriptError

console = Console()


def compile_command(
    script: Annotated[
        Path,
        typer.Argument(
            help="Script file to compile",
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
    """Compile a script and print its nodes.

    Compilation never fails on script content; lines that could not be
    fully understood are reported as diagnostics below the node table.
    """
    handler = CLIHandler(console)
    try:
        result = compile_script(script, get_settings(), assets)
    except VNScriptError as e:
        handler.handle_error(e, json_output)
        return

    formatter = ScriptFormatter(console)
    if json_output:
        formatter.print(result, OutputFormat.JSON)
        return

    formatter.print(result, OutputFormat.TABLE)
    formatter.print_diagnostics(result)
    console.print(
        f"\n[green]Compiled {len(result.script)} "
        f"node{'s' if len(result.script) != 1 else ''}[/green]"
        f" with {len(result.diagnostics)} diagnostic"
        f"{'s' if len(result.diagnostics) != 1 else ''}"
    )
