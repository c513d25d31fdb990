"""Non-fatal findings reported while compiling a script."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Severity(str, Enum):
    """How much attention a diagnostic deserves."""

    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A compile finding tied to a source line."""

    severity: Severity
    code: str
    message: str
    line_number: int | None = None
    line: str | None = None

    def __str__(self) -> str:
        where = f"line {self.line_number}: " if self.line_number is not None else ""
        return f"{self.severity.value}[{self.code}] {where}{self.message}"


def warning(
    code: str, message: str, line_number: int | None = None, line: str | None = None
) -> Diagnostic:
    return Diagnostic(Severity.WARNING, code, message, line_number, line)


def info(
    code: str, message: str, line_number: int | None = None, line: str | None = None
) -> Diagnostic:
    return Diagnostic(Severity.INFO, code, message, line_number, line)
