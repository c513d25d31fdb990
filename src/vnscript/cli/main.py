"""Main CLI entry point."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError
from rich.console import Console

from vnscript import __version__
from vnscript.cli.commands import (
    compile_command,
    play_command,
    saves_command,
    validate_command,
)
from vnscript.cli.formatters.json_formatter import JsonFormatter
from vnscript.cli.utils.cli_handler import CLIHandler
from vnscript.config import (
    configure_logging,
    get_logger,
    get_settings_for_cli,
    set_settings,
)
from vnscript.exceptions import VNScriptError

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name="vnscript",
    help="Compile and play visual novel scripts",
    pretty_exceptions_enable=False,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command(name="compile")(compile_command)
app.command(name="validate")(validate_command)
app.command(name="play")(play_command)
app.command(name="saves")(saves_command)


@app.command()
def version(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show vnscript version."""
    version_info = {
        "name": "vnscript",
        "version": __version__,
        "description": "Visual novel script compiler and playback engine",
    }

    if json_output:
        print(JsonFormatter().format(version_info))
    else:
        console.print(f"vnscript v{version_info['version']}")


@app.callback()
def main_callback(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file (YAML, TOML or JSON)",
            envvar="VNSCRIPT_CONFIG",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging (INFO level)"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure global options."""
    overrides: dict[str, Any] = {}
    if debug:
        overrides.update(log_level="DEBUG", debug=True)
    elif verbose:
        overrides["log_level"] = "INFO"

    if not (config or overrides):
        return

    try:
        settings = get_settings_for_cli(config_file=config, cli_overrides=overrides)
    except (FileNotFoundError, ValidationError, VNScriptError) as e:
        CLIHandler(console).handle_error(e)
        return

    set_settings(settings)
    configure_logging(settings)
    if config:
        logger.debug(f"Loaded configuration from {config}")
    if debug:
        logger.debug("Debug mode enabled")
    elif verbose:
        logger.info("Verbose mode enabled")


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
