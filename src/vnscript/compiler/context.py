"""Carry-over state threaded through compilation one line at a time."""

from __future__ import annotations

from dataclasses import dataclass, replace

from vnscript.compiler.models import Effect, Sprite
from vnscript.types import AssetIdentifier, NodeID


@dataclass(frozen=True)
class CompilerContext:
    """Visual context and bookkeeping that persists across script lines.

    Commands produce a new context; dialogue lines snapshot it into a node.
    """

    background: AssetIdentifier | None = None
    sprites: tuple[Sprite, ...] = ()
    cg: AssetIdentifier | None = None
    video: AssetIdentifier | None = None
    effect: Effect | None = None
    pending_label: NodeID | None = None
    previous_id: NodeID | None = None
    counter: int = 0

    def with_background(self, background: AssetIdentifier) -> CompilerContext:
        """Set the background; leaving for a new place drops CG and video."""
        return replace(self, background=background, cg=None, video=None)

    def with_sprite(self, sprite: Sprite) -> CompilerContext:
        """Replace every sprite with ``sprite``; a sprite also dismisses the CG."""
        return replace(self, sprites=(sprite,), cg=None)

    def without_sprites(self) -> CompilerContext:
        return replace(self, sprites=())

    def next_sequence(self) -> tuple[int, CompilerContext]:
        """Take the next number for a generated identifier."""
        return self.counter, replace(self, counter=self.counter + 1)

    def visible_sprites(self) -> tuple[Sprite, ...]:
        """Sprites a node materialized now would show; a CG hides them."""
        return () if self.cg else self.sprites

    def after_node(self, node_id: NodeID) -> CompilerContext:
        """Consume the one-shot state after ``node_id`` is materialized."""
        return replace(
            self, video=None, effect=None, pending_label=None, previous_id=node_id
        )
