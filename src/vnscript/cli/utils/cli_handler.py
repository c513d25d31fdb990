"""Unified CLI handler for standardized error output."""

import typer
from rich.console import Console
from rich.markup import escape

from vnscript.cli.formatters.json_formatter import JsonFormatter
from vnscript.config import get_logger
from vnscript.exceptions import VNScriptError

logger = get_logger(__name__)


class CLIHandler:
    """Unified handler for CLI commands."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize CLI handler.

        Args:
            console: Rich console for output
        """
        self.console = console or Console()
        self.json_formatter = JsonFormatter()

    def handle_error(
        self, error: Exception, json_output: bool = False, exit_code: int = 1
    ) -> None:
        """Display an error consistently and exit.

        Args:
            error: Exception to handle
            json_output: Whether to output JSON
            exit_code: Exit code to use

        Raises:
            typer.Exit: Always, with ``exit_code``.
        """
        logger.error(f"Command failed: {error}", error_type=type(error).__name__)

        if json_output:
            print(self.json_formatter.format_error_response(error, exit_code))
        elif isinstance(error, VNScriptError):
            # Already carries its own "Error:" prefix, hint and details
            self.console.print(f"[red]{escape(error.format_error())}[/red]")
        else:
            self.console.print(f"[red]Error: {escape(str(error))}[/red]")

        raise typer.Exit(exit_code)
