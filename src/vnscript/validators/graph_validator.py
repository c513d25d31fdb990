"""Static checks over a compiled script graph."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from vnscript.compiler.models import CompiledScript, ScriptNode
from vnscript.config import get_logger
from vnscript.types import END, NodeID

logger = get_logger(__name__)


@dataclass
class GraphValidationResult:
    """Result of graph validation with detailed feedback."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    reachable: set[NodeID] = field(default_factory=set)


def successors(node: ScriptNode) -> list[NodeID]:
    """Identifiers the player can move to from ``node``.

    Choices take precedence over ``next_id``, matching playback.
    """
    if node.choices:
        return [choice.target_id for choice in node.choices]
    return [node.next_id] if node.next_id is not None else []


class ScriptGraphValidator:
    """Check that every reachable node gives the player a way forward."""

    def validate(self, script: CompiledScript) -> GraphValidationResult:
        """Validate links, reachability and endings.

        Args:
            script: Compiled script to check.

        Returns:
            Validation result; errors make it invalid, warnings do not.
        """
        errors: list[str] = []
        warnings: list[str] = []

        if script.start is None:
            errors.append(f"Script has no start node '{script.start_id}'")
            return GraphValidationResult(is_valid=False, errors=errors)

        for node in script.values():
            for target in successors(node):
                if target != END and target not in script:
                    errors.append(
                        f"Node '{node.id}' links to missing node '{target}'"
                    )

        reachable = self._reachable(script)

        for node_id in script:
            if node_id not in reachable:
                warnings.append(f"Node '{node_id}' is unreachable from start")

        for node_id in sorted(reachable):
            if script[node_id].is_terminal:
                warnings.append(
                    f"Node '{node_id}' has no successor; play returns to the "
                    "title without an explicit ending"
                )

        is_valid = not errors
        logger.debug(
            "Validated script graph",
            nodes=len(script),
            reachable=len(reachable),
            errors=len(errors),
            warnings=len(warnings),
        )
        return GraphValidationResult(
            is_valid=is_valid, errors=errors, warnings=warnings, reachable=reachable
        )

    @staticmethod
    def _reachable(script: CompiledScript) -> set[NodeID]:
        seen = {script.start_id}
        queue = deque([script.start_id])
        while queue:
            node = script[queue.popleft()]
            for target in successors(node):
                if target in script and target not in seen:
                    seen.add(target)
                    queue.append(target)
        return seen
