"""Script markup compiler."""

from __future__ import annotations

from .compiler import CompileResult, ScriptCompiler
from .diagnostics import Diagnostic, Severity
from .models import (
    Choice,
    ChoiceStyle,
    CompiledScript,
    Effect,
    ScriptNode,
    Sprite,
    SpritePosition,
)

__all__ = [
    "Choice",
    "ChoiceStyle",
    "CompileResult",
    "CompiledScript",
    "Diagnostic",
    "Effect",
    "ScriptCompiler",
    "ScriptNode",
    "Severity",
    "Sprite",
    "SpritePosition",
]
