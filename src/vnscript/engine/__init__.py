"""Playback state machine and its timers."""

from __future__ import annotations

from .playback import FrameListener, PlaybackEngine, PlaybackTiming
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler, TimerHandle
from .state import BacklogEntry, Frame, PacingMode, RevealState, SessionState, View

__all__ = [
    "AsyncioScheduler",
    "BacklogEntry",
    "Frame",
    "FrameListener",
    "ManualScheduler",
    "PacingMode",
    "PlaybackEngine",
    "PlaybackTiming",
    "RevealState",
    "Scheduler",
    "SessionState",
    "TimerHandle",
    "View",
]
