"""Data models for compiled scripts."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from vnscript.config import get_logger
from vnscript.types import END, AssetIdentifier, NodeID

logger = get_logger(__name__)


class SpritePosition(str, Enum):
    """Horizontal placement of a character sprite."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    CENTER_CLOSE = "center-close"


class ChoiceStyle(str, Enum):
    """Visual emphasis of a choice button."""

    NORMAL = "normal"
    DANGER = "danger"
    SPECIAL = "special"


class Effect(str, Enum):
    """One-shot presentation cue played when a node is entered."""

    SHAKE = "shake"
    FLASH = "flash"
    FADE_TO_BLACK = "fade-to-black"


@dataclass(frozen=True)
class Sprite:
    """A character image shown on top of the background."""

    image: AssetIdentifier
    position: SpritePosition = SpritePosition.CENTER
    opacity: float = 1.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.opacity <= 1.0:
            raise ValueError(
                f"Sprite opacity must be within [0, 1], got {self.opacity}"
            )


@dataclass(frozen=True)
class Choice:
    """A branch offered to the player."""

    text: str
    target_id: NodeID
    style: ChoiceStyle = ChoiceStyle.NORMAL


@dataclass(frozen=True)
class ScriptNode:
    """One materialized beat of the story.

    Each node is a full snapshot of what is on screen, not a delta from
    the previous node.
    """

    id: NodeID
    text: str = ""
    speaker: str | None = None
    background: AssetIdentifier | None = None
    cg: AssetIdentifier | None = None
    video: AssetIdentifier | None = None
    sprites: tuple[Sprite, ...] = ()
    next_id: NodeID | None = None
    choices: tuple[Choice, ...] = ()
    effect: Effect | None = None

    @property
    def is_decision(self) -> bool:
        """Whether advancing requires the player to pick a choice."""
        return bool(self.choices)

    @property
    def is_terminal(self) -> bool:
        """Whether the node has neither a successor nor choices."""
        return not self.choices and self.next_id is None

    @property
    def ends_session(self) -> bool:
        """Whether advancing past this node returns to the title."""
        return not self.choices and self.next_id == END


@dataclass(frozen=True, eq=False)
class CompiledScript(Mapping[NodeID, ScriptNode]):
    """Read-only mapping of node identifier to node."""

    nodes: Mapping[NodeID, ScriptNode] = field(default_factory=dict)
    start_id: NodeID = "start"

    def __post_init__(self) -> None:
        object.__setattr__(self, "nodes", MappingProxyType(dict(self.nodes)))

    def __getitem__(self, node_id: NodeID) -> ScriptNode:
        return self.nodes[node_id]

    def __iter__(self) -> Iterator[NodeID]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompiledScript):
            return NotImplemented
        return self.start_id == other.start_id and dict(self.nodes) == dict(
            other.nodes
        )

    @property
    def start(self) -> ScriptNode | None:
        """The node every new session begins at, if the script has one."""
        return self.nodes.get(self.start_id)

    def resolve(self, node_id: NodeID | None) -> ScriptNode | None:
        """Look up a node, falling back to the start node on a miss.

        ``END`` is a session terminator, never a node, so it always misses.
        Returns None only when the start node itself is missing.
        """
        if node_id is not None and node_id != END:
            node = self.nodes.get(node_id)
            if node is not None:
                return node
        logger.warning(
            "Node not found, falling back to start",
            node_id=node_id,
            start=self.start_id,
        )
        return self.start
