"""vnscript CLI commands."""

from __future__ import annotations

from vnscript.cli.commands.compile import compile_command
from vnscript.cli.commands.play import play_command
from vnscript.cli.commands.saves import saves_command
from vnscript.cli.commands.validate import validate_command

__all__ = [
    "compile_command",
    "play_command",
    "saves_command",
    "validate_command",
]
