"""List save slots."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from vnscript.cli.formatters.json_formatter import JsonFormatter
from vnscript.cli.utils.cli_handler import CLIHandler
from vnscript.cli.utils.loaders import open_saves
from vnscript.config import get_settings
from vnscript.exceptions import VNScriptError

console = Console()


def saves_command(
    save_file: Annotated[
        Path | None,
        typer.Option("--save-file", help="Save file (default: from settings)"),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show the contents of every save slot."""
    handler = CLIHandler(console)
    try:
        repository = open_saves(get_settings(), save_file)
        slots = repository.list_slots()
    except VNScriptError as e:
        handler.handle_error(e, json_output)
        return

    if json_output:
        print(
            JsonFormatter().format(
                [slot.model_dump(mode="json", by_alias=True) for slot in slots]
            )
        )
        return

    by_id = {slot.slot_id: slot for slot in slots}
    table = Table(title="Save Slots")
    table.add_column("Slot", style="cyan", justify="center")
    table.add_column("Node", style="green")
    table.add_column("Preview")
    table.add_column("Saved", style="blue")
    table.add_column("Background", style="yellow")

    for slot_id in repository.slot_ids:
        slot = by_id.get(slot_id)
        if slot is None:
            table.add_row(str(slot_id), "[dim]empty[/dim]", "", "", "")
            continue
        table.add_row(
            str(slot_id),
            escape(slot.node_id),
            escape(slot.text_preview),
            slot.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            escape(slot.background or "-"),
        )

    console.print(table)
