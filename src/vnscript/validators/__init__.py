"""Validation of compiled scripts."""

from __future__ import annotations

from .graph_validator import GraphValidationResult, ScriptGraphValidator, successors

__all__ = ["GraphValidationResult", "ScriptGraphValidator", "successors"]
