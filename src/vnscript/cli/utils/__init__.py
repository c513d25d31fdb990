"""CLI utilities."""

from vnscript.cli.utils.cli_handler import CLIHandler
from vnscript.cli.utils.loaders import build_resolver, compile_script, open_saves

__all__ = ["CLIHandler", "build_resolver", "compile_script", "open_saves"]
