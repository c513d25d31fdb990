"""Playback session state and the frames handed to the rendering layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from vnscript.compiler.models import Choice, Effect, Sprite
from vnscript.types import AssetIdentifier, NodeID


class View(str, Enum):
    """Top-level screen the session is on."""

    TITLE = "title"
    PLAYING = "playing"


class PacingMode(str, Enum):
    """How the engine advances without player input."""

    MANUAL = "manual"
    AUTO = "auto"
    FAST_FORWARD = "fast_forward"


class RevealState(str, Enum):
    """Progress of the typewriter reveal of the current text."""

    REVEALING = "revealing"
    REVEALED = "revealed"


@dataclass
class SessionState:
    """Mutable state of one play session, owned by the playback engine.

    Attributes:
        view: Title screen or in-game.
        current_id: Node on screen while playing, None on the title screen.
        history: Previously visited node ids, oldest first.
        reveal_progress: Number of characters of the current text shown.
        reveal: Whether the reveal is still running.
        pacing: Automatic advance mode; a single value so auto play and
            fast forward can never both be on.
        history_open: Whether the backlog is being browsed.
        ending: A delayed return to the title screen is pending.
        effect: Presentation cue of the current node not yet consumed.
    """

    view: View = View.TITLE
    current_id: NodeID | None = None
    history: list[NodeID] = field(default_factory=list)
    reveal_progress: int = 0
    reveal: RevealState = RevealState.REVEALED
    pacing: PacingMode = PacingMode.MANUAL
    history_open: bool = False
    ending: bool = False
    effect: Effect | None = None

    @property
    def auto_play(self) -> bool:
        return self.pacing is PacingMode.AUTO

    @property
    def fast_forward(self) -> bool:
        return self.pacing is PacingMode.FAST_FORWARD

    @property
    def playing(self) -> bool:
        return self.view is View.PLAYING


@dataclass(frozen=True)
class Frame:
    """Everything the rendering layer needs to draw one frame."""

    view: View
    node_id: NodeID | None = None
    speaker: str | None = None
    text: str = ""
    full_text: str = ""
    background: AssetIdentifier | None = None
    cg: AssetIdentifier | None = None
    video: AssetIdentifier | None = None
    sprites: tuple[Sprite, ...] = ()
    choices: tuple[Choice, ...] = ()
    effect: Effect | None = None
    auto_play: bool = False
    fast_forward: bool = False
    history_open: bool = False
    reveal: RevealState = RevealState.REVEALED
    ending: bool = False

    @property
    def revealed(self) -> bool:
        return self.reveal is RevealState.REVEALED


@dataclass(frozen=True)
class BacklogEntry:
    """One line of the history browser."""

    index: int
    node_id: NodeID
    speaker: str | None
    text: str
