"""Output formatters for CLI commands."""

from vnscript.cli.formatters.base import OutputFormat, OutputFormatter
from vnscript.cli.formatters.json_formatter import JsonFormatter
from vnscript.cli.formatters.script_formatter import ScriptFormatter, script_to_dict

__all__ = [
    "JsonFormatter",
    "OutputFormat",
    "OutputFormatter",
    "ScriptFormatter",
    "script_to_dict",
]
