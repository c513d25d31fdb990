"""Play a script in the terminal."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from vnscript.cli.utils.cli_handler import CLIHandler
from vnscript.cli.utils.loaders import compile_script, open_saves
from vnscript.compiler import ChoiceStyle
from vnscript.config import get_logger, get_settings
from vnscript.engine import (
    Frame,
    ManualScheduler,
    PlaybackEngine,
    PlaybackTiming,
    View,
)
from vnscript.exceptions import VNScriptError

logger = get_logger(__name__)
console = Console()

# Virtual seconds the clock may run after a single command
IDLE_LIMIT = 3600.0

CHOICE_STYLES = {ChoiceStyle.DANGER: "red", ChoiceStyle.SPECIAL: "yellow"}

HELP_TEXT = """\
[bold]Commands[/bold]
  [cyan]Enter[/cyan]  advance          [cyan]1-9[/cyan]    pick a choice
  [cyan]a[/cyan]      toggle auto play [cyan]f[/cyan]      toggle fast forward
  [cyan]s N[/cyan]    save to slot N   [cyan]l N[/cyan]    load slot N
  [cyan]h[/cyan]      show history     [cyan]j N[/cyan]    jump to history entry N
  [cyan]n[/cyan]      new game         [cyan]t[/cyan]      return to title
  [cyan]?[/cyan]      this help        [cyan]q[/cyan]      quit"""


class TerminalPlayer:
    """Drive a playback engine from line-based terminal input.

    Timers run on a virtual clock that is drained after every command, so
    text appears fully revealed and auto play or fast forward run until
    the next choice or the end of the script.
    """

    def __init__(
        self,
        engine: PlaybackEngine,
        scheduler: ManualScheduler,
        console: Console,
    ) -> None:
        self.engine = engine
        self.scheduler = scheduler
        self.console = console
        self._last: Frame | None = None
        engine.subscribe(self.render)

    def render(self, frame: Frame) -> None:
        """Print a frame once its text is fully revealed."""
        last = self._last
        self._last = frame

        if frame.view is View.TITLE:
            if last is not None and last.view is View.PLAYING:
                self.console.print(
                    "[dim]~ Title screen ~[/dim]  (n: new game, q: quit)"
                )
            return
        if frame.ending and not (last and last.ending):
            self.console.print("[dim]~ The End ~[/dim]")
            return
        if not frame.revealed:
            return
        if (
            last is not None
            and last.view is View.PLAYING
            and last.revealed
            and last.node_id == frame.node_id
        ):
            return
        self._show(frame)

    def _show(self, frame: Frame) -> None:
        scene = [
            f"{label}: {escape(value)}"
            for label, value in (("bg", frame.background), ("cg", frame.cg))
            if value
        ]
        if frame.sprites:
            sprites = ", ".join(f"{s.image}@{s.position.value}" for s in frame.sprites)
            scene.append(f"sprites: {escape(sprites)}")
        if scene:
            self.console.print(f"[dim]\\[{' | '.join(scene)}][/dim]")
        if frame.effect:
            self.console.print(f"[magenta]*{frame.effect.value}*[/magenta]")
        if frame.video:
            self.console.print(
                f"[blue]▶ {escape(frame.video)}[/blue] [dim](Enter to continue)[/dim]"
            )

        if frame.speaker:
            self.console.print(
                f"[bold]{escape(frame.speaker)}[/bold]: {escape(frame.text)}"
            )
        elif frame.text:
            self.console.print(f"[italic]{escape(frame.text)}[/italic]")

        for number, choice in enumerate(frame.choices, start=1):
            style = CHOICE_STYLES.get(choice.style, "cyan")
            self.console.print(f"  [{style}]{number}. {escape(choice.text)}[/{style}]")

    def show_history(self) -> None:
        entries = self.engine.backlog()
        if not entries:
            self.console.print("[dim]History is empty[/dim]")
            return
        for entry in entries:
            who = f"{entry.speaker}: " if entry.speaker else ""
            self.console.print(
                f"  [cyan]{entry.index}[/cyan] {escape(who + entry.text)}"
            )

    def _announce(self, mode: str, enabled: bool) -> None:
        self.console.print(f"[dim]{mode} {'on' if enabled else 'off'}[/dim]")

    def pump(self) -> None:
        """Run every timer that falls due."""
        self.scheduler.run_until_idle(IDLE_LIMIT)

    def handle(self, command: str) -> bool:
        """Apply one command; returns False when the player wants to quit."""
        verb, _, argument = command.partition(" ")
        argument = argument.strip()
        engine = self.engine

        try:
            if verb == "":
                if engine.state.view is View.TITLE:
                    self.console.print("[dim]On the title screen (n: new game)[/dim]")
                engine.advance()
            elif verb == "q":
                return False
            elif verb == "?":
                self.console.print(HELP_TEXT)
            elif verb.isdigit():
                engine.select_choice(int(verb) - 1)
            elif verb == "a":
                engine.toggle_auto_play()
                self._announce("auto play", engine.state.auto_play)
            elif verb == "f":
                engine.toggle_fast_forward()
                self._announce("fast forward", engine.state.fast_forward)
            elif verb == "s":
                slot = engine.save(int(argument))
                self.console.print(f"[green]Saved to slot {slot.slot_id}[/green]")
            elif verb == "l":
                engine.load(int(argument))
            elif verb == "h":
                self.show_history()
            elif verb == "j":
                engine.jump_to_history(int(argument))
            elif verb == "n":
                engine.new_game()
            elif verb == "t":
                engine.return_to_title()
            else:
                self.console.print(
                    f"[yellow]Unknown command {escape(verb)!r}, ? for help[/yellow]"
                )
        except VNScriptError as e:
            self.console.print(f"[red]{escape(e.message)}[/red]")
            if e.hint:
                self.console.print(f"[dim]{escape(e.hint)}[/dim]")
        except (ValueError, IndexError) as e:
            self.console.print(f"[red]{escape(str(e))}[/red]")

        self.pump()
        return True

    def run(self) -> None:
        self.pump()
        while True:
            state = self.engine.state
            mode = "auto " if state.auto_play else "ff " if state.fast_forward else ""
            try:
                line = self.console.input(f"[dim]{mode}>[/dim] ")
            except EOFError:
                break
            if not self.handle(line.strip()):
                break
        logger.debug("Terminal player stopped")


def play_command(
    script: Annotated[
        Path,
        typer.Argument(
            help="Script file to play",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    assets: Annotated[
        Path | None,
        typer.Option("--assets", "-a", help="Asset manifest (YAML, TOML or JSON)"),
    ] = None,
    save_file: Annotated[
        Path | None,
        typer.Option("--save-file", help="Save file (default: from settings)"),
    ] = None,
    load_slot: Annotated[
        int | None,
        typer.Option("--load", "-l", help="Start from this save slot"),
    ] = None,
) -> None:
    """Play a script interactively in the terminal.

    Press Enter to advance, type a number to pick a choice and ? for the
    full list of commands.
    """
    handler = CLIHandler(console)
    settings = get_settings()
    try:
        result = compile_script(script, settings, assets)
        scheduler = ManualScheduler()
        engine = PlaybackEngine(
            result.script,
            scheduler,
            save_repository=open_saves(settings, save_file),
            timing=PlaybackTiming.from_settings(settings),
        )
        player = TerminalPlayer(engine, scheduler, console)
        if load_slot is None:
            engine.new_game()
        else:
            engine.load(load_slot)
    except VNScriptError as e:
        handler.handle_error(e)
        return

    console.print("[dim]? for help[/dim]")
    player.run()
