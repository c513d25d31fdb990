"""Timed playback state machine over a compiled script."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import TYPE_CHECKING

from vnscript.compiler.models import CompiledScript, ScriptNode
from vnscript.config import get_logger, get_settings
from vnscript.engine.scheduler import Scheduler, TimerHandle
from vnscript.engine.state import (
    BacklogEntry,
    Frame,
    PacingMode,
    RevealState,
    SessionState,
    View,
)
from vnscript.exceptions import (
    IncompatibleSaveError,
    InvalidChoiceError,
    MissingStartNodeError,
    SaveError,
    SaveSlotEmptyError,
    SessionError,
)
from vnscript.storage.saves import SaveRepository, SaveSlot
from vnscript.types import END, SlotID

if TYPE_CHECKING:
    from vnscript.config.settings import VNScriptSettings

logger = get_logger(__name__)

FrameListener = Callable[[Frame], None]


def _local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass(frozen=True)
class PlaybackTiming:
    """Delays used by the engine, in seconds."""

    reveal_interval: float = 0.030
    fast_reveal_interval: float = 0.002
    fast_forward_delay: float = 0.100
    auto_seconds_per_char: float = 0.050
    auto_min_delay: float = 1.0
    auto_max_delay: float = 4.0
    end_grace: float = 3.0
    preview_length: int = 20

    @classmethod
    def from_settings(cls, settings: VNScriptSettings) -> PlaybackTiming:
        """Build timing from millisecond-based settings."""
        return cls(
            reveal_interval=settings.reveal_interval_ms / 1000,
            fast_reveal_interval=settings.fast_reveal_interval_ms / 1000,
            fast_forward_delay=settings.fast_forward_delay_ms / 1000,
            auto_seconds_per_char=settings.auto_ms_per_char / 1000,
            auto_min_delay=settings.auto_min_delay_ms / 1000,
            auto_max_delay=settings.auto_max_delay_ms / 1000,
            end_grace=settings.end_grace_ms / 1000,
            preview_length=settings.save_preview_length,
        )

    def reveal_interval_for(self, pacing: PacingMode) -> float:
        if pacing is PacingMode.FAST_FORWARD:
            return self.fast_reveal_interval
        return self.reveal_interval

    def auto_delay(self, text: str) -> float:
        """Reading time for ``text``, clamped to the configured bounds."""
        delay = len(text) * self.auto_seconds_per_char
        return min(max(delay, self.auto_min_delay), self.auto_max_delay)


class PlaybackEngine:
    """Single-session player for a compiled script.

    The engine is the only mutator of the session state. The rendering
    layer reads :meth:`frame` (or subscribes to frames) and sends back
    :meth:`advance` plus the discrete navigation requests.

    Every timer callback captures the generation counter at scheduling time
    and does nothing once the generation has moved on; handles are also
    cancelled eagerly whenever the generation is bumped.
    """

    def __init__(
        self,
        script: CompiledScript,
        scheduler: Scheduler,
        *,
        save_repository: SaveRepository | None = None,
        timing: PlaybackTiming | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the engine on the title screen.

        Args:
            script: Compiled script to play; never mutated.
            scheduler: Source of timers for reveal, pacing and title return.
            save_repository: Where save slots live; save and load raise
                SaveError without one.
            timing: Delays to use, defaults to the current settings.
            clock: Returns the timestamp recorded in saves.
        """
        self.script = script
        self.scheduler = scheduler
        self.saves = save_repository
        self.timing = timing or PlaybackTiming.from_settings(get_settings())
        self._clock = clock or _local_now
        self._state = SessionState()
        self._generation = 0
        self._reveal_timer: TimerHandle | None = None
        self._pacing_timer: TimerHandle | None = None
        self._title_timer: TimerHandle | None = None
        self._listeners: list[FrameListener] = []

    # Read access

    @property
    def state(self) -> SessionState:
        """Copy of the session state."""
        return replace(self._state, history=list(self._state.history))

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def current_node(self) -> ScriptNode | None:
        if not self._state.playing or self._state.current_id is None:
            return None
        return self.script.get(self._state.current_id)

    def frame(self) -> Frame:
        """Snapshot of what should be on screen right now."""
        state = self._state
        node = self.current_node
        if node is None:
            return Frame(view=state.view)
        revealed = state.reveal is RevealState.REVEALED
        return Frame(
            view=state.view,
            node_id=node.id,
            speaker=node.speaker,
            text=node.text[: state.reveal_progress],
            full_text=node.text,
            background=node.background,
            cg=node.cg,
            video=node.video,
            sprites=node.sprites,
            choices=node.choices if revealed else (),
            effect=state.effect,
            auto_play=state.auto_play,
            fast_forward=state.fast_forward,
            history_open=state.history_open,
            reveal=state.reveal,
            ending=state.ending,
        )

    def subscribe(self, listener: FrameListener) -> Callable[[], None]:
        """Call ``listener`` with a fresh frame after every state change.

        Returns:
            Function that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def backlog(self) -> list[BacklogEntry]:
        """History entries with their text, oldest first."""
        entries = []
        for index, node_id in enumerate(self._state.history):
            node = self.script.get(node_id)
            entries.append(
                BacklogEntry(
                    index=index,
                    node_id=node_id,
                    speaker=node.speaker if node else None,
                    text=node.text if node else "",
                )
            )
        return entries

    # Session lifecycle

    def new_game(self) -> None:
        """Start a session at the start node.

        Raises:
            MissingStartNodeError: If the script has no start node. The
                engine stays on the title screen.
        """
        start = self.script.start
        if start is None:
            raise MissingStartNodeError(self.script.start_id)
        self._begin_session(start)
        logger.info("New game started", node_id=start.id)

    def return_to_title(self) -> None:
        """Discard the session and show the title screen."""
        self._cancel_timers()
        self._state = SessionState()
        logger.debug("Returned to title")
        self._notify()

    def _begin_session(self, node: ScriptNode) -> None:
        self._cancel_timers()
        self._state = SessionState(view=View.PLAYING)
        self._enter(node)

    # Player input

    def advance(self) -> None:
        """Handle the single generic "proceed" input.

        Ignored on the title screen and while a return to the title is
        pending.
        """
        state = self._state
        node = self.current_node
        if node is None or state.ending:
            return

        if node.video:
            # Skipping or finishing a video proceeds immediately.
            if node.next_id == END:
                logger.info("End of script reached after video", node_id=node.id)
                self.return_to_title()
                return
            target = self.script.get(node.next_id) if node.next_id else None
            if target is not None:
                self._navigate(target)
            return

        if state.reveal is RevealState.REVEALING:
            self._complete_reveal()
            return

        if node.choices:
            if state.pacing is not PacingMode.MANUAL:
                self._set_pacing(PacingMode.MANUAL)
            return

        target = None
        if node.next_id is not None and node.next_id != END:
            target = self.script.get(node.next_id)
        if target is None:
            self._begin_ending(node)
            return
        self._navigate(target)

    def select_choice(self, index: int) -> None:
        """Take the choice at ``index`` of the current node.

        Raises:
            InvalidChoiceError: If no choice is on offer or the index is out
                of range.
        """
        state = self._state
        node = self.current_node
        if node is None or state.ending or not node.choices:
            raise InvalidChoiceError(
                message="No choice is on offer",
                details={"node_id": state.current_id},
            )
        if state.reveal is not RevealState.REVEALED:
            raise InvalidChoiceError(
                message="Choices are not shown until the text is revealed",
                hint="Advance once to finish the text first",
                details={"node_id": node.id},
            )
        if not 0 <= index < len(node.choices):
            raise InvalidChoiceError(
                message=f"Choice {index} does not exist",
                hint=f"Pick a choice between 0 and {len(node.choices) - 1}",
                details={"node_id": node.id, "choices": len(node.choices)},
            )

        choice = node.choices[index]
        target = self.script.resolve(choice.target_id)
        if target is None:
            logger.error("Choice target and start node both missing", node_id=node.id)
            self.return_to_title()
            return
        state.pacing = PacingMode.MANUAL
        logger.debug("Choice selected", node_id=node.id, target=target.id)
        self._navigate(target)

    def set_auto_play(self, enabled: bool) -> None:
        if enabled:
            self._set_pacing(PacingMode.AUTO)
        elif self._state.auto_play:
            self._set_pacing(PacingMode.MANUAL)

    def set_fast_forward(self, enabled: bool) -> None:
        if enabled:
            self._set_pacing(PacingMode.FAST_FORWARD)
        elif self._state.fast_forward:
            self._set_pacing(PacingMode.MANUAL)

    def toggle_auto_play(self) -> None:
        self.set_auto_play(not self._state.auto_play)

    def toggle_fast_forward(self) -> None:
        self.set_fast_forward(not self._state.fast_forward)

    def acknowledge_effect(self) -> None:
        """Mark the current node's effect as played."""
        if self._state.effect is None:
            return
        self._state.effect = None
        self._notify()

    # History

    def open_history(self) -> None:
        if not self._state.playing or self._state.history_open:
            return
        self._state.history_open = True
        self._notify()

    def close_history(self) -> None:
        if not self._state.history_open:
            return
        self._state.history_open = False
        self._notify()

    def jump_to_history(self, index: int) -> None:
        """Return to the node stored at ``history[index]``.

        Entries at and after ``index`` are discarded and the node jumped to
        is not re-appended. Pacing is cleared and the backlog closed.

        Raises:
            SessionError: If no session is in progress.
            IndexError: If ``index`` is not a valid history position.
        """
        state = self._state
        if not state.playing:
            raise SessionError(message="No session in progress")
        if not 0 <= index < len(state.history):
            raise IndexError(f"history index {index} out of range")

        node_id = state.history[index]
        del state.history[index:]
        node = self.script.resolve(node_id)
        if node is None:
            self.return_to_title()
            return
        state.history_open = False
        state.pacing = PacingMode.MANUAL
        logger.debug("Jumped back in history", index=index, node_id=node.id)
        self._enter(node)

    # Saves

    def save(self, slot_id: SlotID) -> SaveSlot:
        """Record the current position in ``slot_id``, overwriting it.

        Raises:
            SessionError: If no session is in progress.
            SaveError: If no save repository is configured or writing fails.
        """
        repository = self._require_saves()
        repository.check_slot(slot_id)
        node = self.current_node
        if node is None:
            raise SessionError(
                message="Nothing to save on the title screen",
                hint="Start or load a game first",
            )
        slot = SaveSlot(
            slot_id=slot_id,
            node_id=node.id,
            text_preview=node.text[: self.timing.preview_length] + "...",
            timestamp=self._clock(),
            background=node.background,
        )
        repository.put(slot)
        return slot

    def load(self, slot_id: SlotID) -> None:
        """Resume the session stored in ``slot_id`` with empty history.

        Raises:
            SaveSlotEmptyError: If the slot holds no save.
            IncompatibleSaveError: If the saved node is not in the script.
            SaveError: If no save repository is configured.
        """
        repository = self._require_saves()
        slot = repository.get(slot_id)
        if slot is None:
            raise SaveSlotEmptyError(slot_id)
        node = self.script.get(slot.node_id)
        if node is None:
            raise IncompatibleSaveError(slot_id, slot.node_id)
        self._begin_session(node)
        logger.info("Loaded slot", slot=slot_id, node_id=node.id)

    def _require_saves(self) -> SaveRepository:
        if self.saves is None:
            raise SaveError(
                message="No save storage configured",
                hint="Pass a SaveRepository to the engine",
            )
        return self.saves

    # Transitions

    def _navigate(self, node: ScriptNode) -> None:
        if self._state.current_id is not None:
            self._state.history.append(self._state.current_id)
        self._enter(node)

    def _enter(self, node: ScriptNode) -> None:
        self._cancel_timers()
        state = self._state
        state.current_id = node.id
        state.reveal_progress = 0
        state.effect = node.effect
        state.ending = False
        if node.text:
            state.reveal = RevealState.REVEALING
            self._arm_reveal()
        else:
            state.reveal = RevealState.REVEALED
            self._arm_pacing()
        self._notify()

    def _complete_reveal(self) -> None:
        self._cancel_timers()
        node = self.current_node
        self._state.reveal_progress = len(node.text) if node else 0
        self._state.reveal = RevealState.REVEALED
        self._arm_pacing()
        self._notify()

    def _begin_ending(self, node: ScriptNode) -> None:
        self._cancel_timers()
        self._state.pacing = PacingMode.MANUAL
        self._state.ending = True
        self._title_timer = self._schedule(self.timing.end_grace, self.return_to_title)
        logger.info("End of script reached", node_id=node.id, next_id=node.next_id)
        self._notify()

    def _set_pacing(self, pacing: PacingMode) -> None:
        state = self._state
        if not state.playing or state.ending:
            logger.debug("Pacing change ignored", pacing=pacing.value)
            return
        if state.pacing is pacing:
            return
        state.pacing = pacing
        self._cancel_timers()
        if state.reveal is RevealState.REVEALING:
            self._arm_reveal()
        else:
            self._arm_pacing()
        self._notify()

    # Timers

    def _schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        generation = self._generation

        def run() -> None:
            if generation != self._generation:
                logger.debug(
                    "Stale timer dropped",
                    scheduled=generation,
                    current=self._generation,
                )
                return
            callback()

        return self.scheduler.call_later(delay, run)

    def _cancel_timers(self) -> None:
        self._generation += 1
        for handle in (self._reveal_timer, self._pacing_timer, self._title_timer):
            if handle is not None:
                handle.cancel()
        self._reveal_timer = None
        self._pacing_timer = None
        self._title_timer = None

    def _arm_reveal(self) -> None:
        interval = self.timing.reveal_interval_for(self._state.pacing)
        self._reveal_timer = self._schedule(interval, self._reveal_tick)

    def _reveal_tick(self) -> None:
        self._reveal_timer = None
        node = self.current_node
        if node is None:
            return
        state = self._state
        state.reveal_progress = min(state.reveal_progress + 1, len(node.text))
        if state.reveal_progress >= len(node.text):
            state.reveal = RevealState.REVEALED
            self._arm_pacing()
        else:
            self._arm_reveal()
        self._notify()

    def _arm_pacing(self) -> None:
        state = self._state
        node = self.current_node
        if (
            node is None
            or state.ending
            or state.reveal is not RevealState.REVEALED
            or node.choices
            or node.video
        ):
            return
        if state.pacing is PacingMode.FAST_FORWARD:
            delay = self.timing.fast_forward_delay
        elif state.pacing is PacingMode.AUTO:
            delay = self.timing.auto_delay(node.text)
        else:
            return
        if self._pacing_timer is not None:
            self._pacing_timer.cancel()
        self._pacing_timer = self._schedule(delay, self._pacing_fire)

    def _pacing_fire(self) -> None:
        self._pacing_timer = None
        self.advance()

    def _notify(self) -> None:
        if not self._listeners:
            return
        frame = self.frame()
        for listener in list(self._listeners):
            listener(frame)

