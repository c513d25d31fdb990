"""Line classification heuristics for the script markup.

Each function here looks at a single trimmed line and has no knowledge of
the surrounding script, so the heuristics can be tested on their own.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from vnscript.compiler.models import ChoiceStyle, Effect, SpritePosition

COLONS = ("：", ":")  # noqa: RUF001
SPEAKER_COLON_LIMIT = 10

COMMAND_OPEN = "【"
COMMAND_CLOSE = "】"

_CHOICE_RE = re.compile(r"^[A-Z]\.")
_CHOICE_ARROW_RE = re.compile(r">>|》")
_COMMAND_SPLIT_RE = re.compile(r"[:：]")  # noqa: RUF001


class CommandKind(str, Enum):
    """Recognized bracket commands."""

    BACKGROUND = "background"
    SPRITE = "sprite"
    CG = "cg"
    VIDEO = "video"
    EFFECT = "effect"
    RETURN_TITLE = "return-title"


# Keys are matched after casefold, so English keys are case-insensitive
COMMAND_KEYWORDS: dict[str, CommandKind] = {
    "背景": CommandKind.BACKGROUND,
    "bg": CommandKind.BACKGROUND,
    "立绘": CommandKind.SPRITE,
    "sprite": CommandKind.SPRITE,
    "cg": CommandKind.CG,
    "视频": CommandKind.VIDEO,
    "video": CommandKind.VIDEO,
    "特效": CommandKind.EFFECT,
    "effect": CommandKind.EFFECT,
    "返回标题": CommandKind.RETURN_TITLE,
    "returntitle": CommandKind.RETURN_TITLE,
}

SPRITE_CLEAR_WORDS = frozenset({"清除", "clear"})


@dataclass(frozen=True)
class Command:
    """A parsed ``【KEY：VALUE】`` line."""

    kind: CommandKind
    value: str = ""


@dataclass(frozen=True)
class SpriteArgument:
    """Argument of a sprite command; ``name`` is None for a clear."""

    name: str | None
    position: SpritePosition = SpritePosition.CENTER
    position_recognized: bool = True

    @property
    def is_clear(self) -> bool:
        return self.name is None


def split_speaker(
    line: str, max_index: int = SPEAKER_COLON_LIMIT
) -> tuple[str | None, str]:
    """Split ``Name：text`` into speaker and text.

    Only a colon within the first ``max_index`` characters counts, so a
    colon inside narration prose is left alone.
    """
    positions = [idx for idx in (line.find(c) for c in COLONS) if idx != -1]
    if not positions:
        return None, line
    split_at = min(positions)
    if split_at >= max_index:
        return None, line
    speaker = line[:split_at].strip()
    return speaker or None, line[split_at + 1 :].strip()


def infer_choice_style(text: str) -> ChoiceStyle:
    """Guess a choice's style from marker words in its text."""
    style = ChoiceStyle.NORMAL
    if "True" in text:
        style = ChoiceStyle.SPECIAL
    if "Bad" in text:
        style = ChoiceStyle.DANGER
    return style


def parse_label(line: str) -> str | None:
    """Return the label name of a ``# name`` line, or None for other lines."""
    if not line.startswith("#"):
        return None
    return line[1:].strip()


def parse_command(line: str) -> Command | None:
    """Parse a bracket command line.

    Bracketed text whose key is not a known command returns None, so it
    is treated as prose (for example a chapter title banner).
    """
    if not (
        len(line) >= 2
        and line.startswith(COMMAND_OPEN)
        and line.endswith(COMMAND_CLOSE)
    ):
        return None
    parts = _COMMAND_SPLIT_RE.split(line[1:-1], maxsplit=1)
    kind = COMMAND_KEYWORDS.get(parts[0].strip().casefold())
    if kind is None:
        return None
    value = parts[1].strip() if len(parts) > 1 else ""
    return Command(kind, value)


def parse_sprite_argument(value: str) -> SpriteArgument:
    """Parse ``<name> [position]`` or a clear keyword."""
    if value.strip().casefold() in SPRITE_CLEAR_WORDS:
        return SpriteArgument(name=None)
    tokens = value.split()
    if not tokens:
        return SpriteArgument(name="")
    if len(tokens) < 2:
        return SpriteArgument(name=tokens[0])
    try:
        position = SpritePosition(tokens[1].casefold())
    except ValueError:
        return SpriteArgument(name=tokens[0], position_recognized=False)
    return SpriteArgument(name=tokens[0], position=position)


def parse_effect(value: str) -> Effect | None:
    """Map an effect command value to an Effect, or None if unknown."""
    try:
        return Effect(value.strip().casefold())
    except ValueError:
        return None


def parse_choice(line: str) -> tuple[str, str | None] | None:
    """Parse ``A.text >> target``; the target is None when omitted.

    The returned text keeps its letter prefix.
    """
    if not _CHOICE_RE.match(line):
        return None
    parts = _CHOICE_ARROW_RE.split(line)
    text = parts[0].strip()
    target = parts[1].strip() if len(parts) > 1 else ""
    return text, target or None
