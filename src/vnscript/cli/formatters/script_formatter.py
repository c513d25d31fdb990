"""Formatters for compiled scripts and their diagnostics."""

from __future__ import annotations

import dataclasses
import io
import json
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from vnscript.cli.formatters.base import OutputFormat, OutputFormatter
from vnscript.compiler import CompiledScript, CompileResult, ScriptNode

TEXT_WIDTH = 40


def script_to_dict(script: CompiledScript) -> dict[str, Any]:
    """Plain-data form of a compiled script, suitable for JSON."""
    return {
        "start_id": script.start_id,
        "nodes": {
            node_id: dataclasses.asdict(node) for node_id, node in script.items()
        },
    }


def _successor_label(node: ScriptNode) -> str:
    if node.choices:
        return "\n".join(f"{c.text} → {c.target_id}" for c in node.choices)
    return node.next_id or "-"


def _shorten(text: str) -> str:
    return text if len(text) <= TEXT_WIDTH else text[: TEXT_WIDTH - 1] + "…"


class ScriptFormatter(OutputFormatter[CompileResult]):
    """Render a compile result as a node table or JSON."""

    def format(
        self, data: CompileResult, format_type: OutputFormat = OutputFormat.TABLE
    ) -> str:
        if format_type == OutputFormat.JSON:
            payload = script_to_dict(data.script)
            payload["diagnostics"] = [dataclasses.asdict(d) for d in data.diagnostics]
            return json.dumps(payload, indent=2, ensure_ascii=False, default=str)

        if not data.script:
            return "No nodes compiled"

        string_io = io.StringIO()
        temp_console = Console(file=string_io, force_terminal=True, width=120)
        temp_console.print(self.build_table(data))
        return string_io.getvalue()

    def print(
        self, data: CompileResult, format_type: OutputFormat = OutputFormat.TABLE
    ) -> None:
        if format_type == OutputFormat.TABLE and data.script:
            self.console.print(self.build_table(data))
        else:
            super().print(data, format_type)

    def build_table(self, data: CompileResult) -> Table:
        table = Table(title="Compiled Script", show_lines=True)
        table.add_column("Id", style="cyan", no_wrap=True)
        table.add_column("Speaker", style="green")
        table.add_column("Text")
        table.add_column("Background", style="blue")
        table.add_column("Next", style="yellow")

        for node in data.script.values():
            table.add_row(
                escape(node.id),
                escape(node.speaker or "-"),
                escape(_shorten(node.text)),
                escape(node.background or "-"),
                escape(_successor_label(node)),
            )

        return table

    def print_diagnostics(self, data: CompileResult) -> None:
        """Print compiler diagnostics below the table."""
        for diagnostic in data.diagnostics:
            self.console.print(f"[yellow]{escape(str(diagnostic))}[/yellow]")
