"""Script compiler: plain-text markup to a graph of ScriptNodes."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

from vnscript.assets import AssetCategory, AssetResolver
from vnscript.compiler import diagnostics as diag
from vnscript.compiler.context import CompilerContext
from vnscript.compiler.diagnostics import Diagnostic
from vnscript.compiler.lines import (
    Command,
    CommandKind,
    infer_choice_style,
    parse_choice,
    parse_command,
    parse_effect,
    parse_label,
    parse_sprite_argument,
    split_speaker,
)
from vnscript.compiler.models import Choice, CompiledScript, ScriptNode, Sprite
from vnscript.config import get_logger
from vnscript.exceptions import ScriptSourceError
from vnscript.types import END, NodeID

logger = get_logger(__name__)

AUTO_NODE_PREFIX = "node_"
AUTO_CHOICE_PREFIX = "auto_choice_"


@dataclass
class _NodeDraft:
    """A node whose successor links may still change."""

    node: ScriptNode
    next_id: NodeID | None = None
    choices: list[Choice] = field(default_factory=list)

    @property
    def open_ended(self) -> bool:
        return self.next_id is None and not self.choices

    def freeze(self) -> ScriptNode:
        return replace(self.node, next_id=self.next_id, choices=tuple(self.choices))


@dataclass
class CompileResult:
    """Compiled script plus whatever the compiler noticed along the way."""

    script: CompiledScript
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is diag.Severity.WARNING]


class ScriptCompiler:
    """Compile script markup in a single forward pass.

    Every line is a label, a bracket command, a choice, or dialogue. Only
    dialogue lines create nodes; the other kinds adjust the carry-over
    context or the most recent node. No input makes compilation fail.
    """

    def __init__(
        self,
        resolver: AssetResolver | None = None,
        *,
        start_id: NodeID = "start",
        default_background: str | None = None,
    ) -> None:
        """Initialize the compiler.

        Args:
            resolver: Asset lookup for command arguments.
            start_id: Identifier given to the first node unless a label
                precedes it.
            default_background: Symbolic background carried before any
                background command.
        """
        self.resolver = resolver or AssetResolver()
        self.start_id = start_id
        self.default_background = default_background

    def compile(self, text: str) -> CompileResult:
        """Compile script text into a node mapping.

        Args:
            text: Raw script source.

        Returns:
            The compiled script and non-fatal diagnostics.
        """
        drafts: dict[NodeID, _NodeDraft] = {}
        found: list[Diagnostic] = []
        ctx = CompilerContext(
            background=self.resolver.resolve(
                AssetCategory.BACKGROUND, self.default_background
            ),
            pending_label=self.start_id,
        )

        for line_number, raw in enumerate(text.split("\n"), start=1):
            line = raw.strip()
            if line:
                ctx = self._compile_line(ctx, drafts, found, line_number, line)

        nodes = {node_id: draft.freeze() for node_id, draft in drafts.items()}
        found.extend(self._dangling_synthetic_targets(nodes))
        script = CompiledScript(nodes, start_id=self.start_id)
        logger.info(
            "Compiled script",
            nodes=len(script),
            diagnostics=len(found),
            has_start=script.start is not None,
        )
        return CompileResult(script=script, diagnostics=found)

    def compile_file(self, path: Path | str) -> CompileResult:
        """Compile a UTF-8 script file.

        Raises:
            ScriptSourceError: If the file cannot be read or decoded.
        """
        path = Path(path)
        logger.debug(f"Compiling script file: {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ScriptSourceError(
                message=f"Failed to read script file: {path}",
                hint="Check the path and that the file is UTF-8 text.",
                details={"file": str(path), "error": str(e)},
            ) from e
        return self.compile(text)

    def _compile_line(
        self,
        ctx: CompilerContext,
        drafts: dict[NodeID, _NodeDraft],
        found: list[Diagnostic],
        line_number: int,
        line: str,
    ) -> CompilerContext:
        previous = drafts.get(ctx.previous_id) if ctx.previous_id else None

        label = parse_label(line)
        if label is not None:
            if not label:
                found.append(
                    diag.warning("empty-label", "Label has no name", line_number, line)
                )
                return ctx
            # A label never overrides an explicit successor
            if previous is not None and previous.open_ended:
                previous.next_id = label
            return replace(ctx, pending_label=label)

        command = parse_command(line)
        if command is not None:
            return self._apply_command(ctx, previous, found, command, line_number, line)

        choice = parse_choice(line)
        if choice is not None:
            if previous is None:
                found.append(
                    diag.warning(
                        "orphan-choice",
                        "Choice before any dialogue line was dropped",
                        line_number,
                        line,
                    )
                )
                return ctx
            choice_text, target = choice
            if target is None:
                sequence, ctx = ctx.next_sequence()
                target = f"{AUTO_CHOICE_PREFIX}{sequence}"
            previous.choices.append(
                Choice(choice_text, target, infer_choice_style(choice_text))
            )
            return ctx

        return self._materialize(ctx, previous, drafts, found, line_number, line)

    def _apply_command(
        self,
        ctx: CompilerContext,
        previous: _NodeDraft | None,
        found: list[Diagnostic],
        command: Command,
        line_number: int,
        line: str,
    ) -> CompilerContext:
        def unresolved(category: AssetCategory, name: str) -> CompilerContext:
            found.append(
                diag.warning(
                    "unresolved-asset",
                    f"Unknown {category.value} asset '{name}' ignored",
                    line_number,
                    line,
                )
            )
            return ctx

        if command.kind is CommandKind.BACKGROUND:
            background = self.resolver.resolve(AssetCategory.BACKGROUND, command.value)
            if background is None:
                return unresolved(AssetCategory.BACKGROUND, command.value)
            return ctx.with_background(background)

        if command.kind is CommandKind.SPRITE:
            argument = parse_sprite_argument(command.value)
            if argument.is_clear:
                return ctx.without_sprites()
            image = self.resolver.resolve(AssetCategory.SPRITE, argument.name)
            if image is None:
                return unresolved(AssetCategory.SPRITE, argument.name or "")
            if not argument.position_recognized:
                found.append(
                    diag.warning(
                        "unknown-sprite-position",
                        "Unknown sprite position, using center",
                        line_number,
                        line,
                    )
                )
            return ctx.with_sprite(Sprite(image=image, position=argument.position))

        if command.kind is CommandKind.CG:
            cg = self.resolver.resolve(AssetCategory.CG, command.value)
            if cg is None:
                return unresolved(AssetCategory.CG, command.value)
            return replace(ctx, cg=cg)

        if command.kind is CommandKind.VIDEO:
            video = self.resolver.resolve(AssetCategory.VIDEO, command.value)
            if video is None:
                return unresolved(AssetCategory.VIDEO, command.value)
            return replace(ctx, video=video)

        if command.kind is CommandKind.EFFECT:
            effect = parse_effect(command.value)
            if effect is None:
                found.append(
                    diag.warning(
                        "unknown-effect",
                        f"Unknown effect '{command.value}' ignored",
                        line_number,
                        line,
                    )
                )
                return ctx
            return replace(ctx, effect=effect)

        # CommandKind.RETURN_TITLE
        if previous is None:
            found.append(
                diag.warning(
                    "orphan-return-title",
                    "Return-to-title before any dialogue line was ignored",
                    line_number,
                    line,
                )
            )
        else:
            previous.next_id = END
        return ctx

    def _materialize(
        self,
        ctx: CompilerContext,
        previous: _NodeDraft | None,
        drafts: dict[NodeID, _NodeDraft],
        found: list[Diagnostic],
        line_number: int,
        line: str,
    ) -> CompilerContext:
        node_id = ctx.pending_label
        if not node_id:
            sequence, ctx = ctx.next_sequence()
            node_id = f"{AUTO_NODE_PREFIX}{sequence}"

        if previous is not None and previous.open_ended:
            previous.next_id = node_id

        if node_id in drafts:
            found.append(
                diag.warning(
                    "duplicate-node-id",
                    f"Node '{node_id}' redefined; the later definition wins",
                    line_number,
                    line,
                )
            )

        speaker, text = split_speaker(line)
        drafts[node_id] = _NodeDraft(
            ScriptNode(
                id=node_id,
                text=text,
                speaker=speaker,
                background=ctx.background,
                cg=ctx.cg,
                video=ctx.video,
                sprites=ctx.visible_sprites(),
                effect=ctx.effect,
            )
        )
        return ctx.after_node(node_id)

    @staticmethod
    def _dangling_synthetic_targets(
        nodes: dict[NodeID, ScriptNode],
    ) -> list[Diagnostic]:
        found = []
        for node in nodes.values():
            for choice in node.choices:
                if (
                    choice.target_id.startswith(AUTO_CHOICE_PREFIX)
                    and choice.target_id not in nodes
                ):
                    found.append(
                        diag.warning(
                            "dangling-choice-target",
                            f"Choice '{choice.text}' in node '{node.id}' has no "
                            f"target label; add '# {choice.target_id}'",
                        )
                    )
        return found
