"""Reusable UI helpers for cinnamon-create interactions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, TypeVar

import readchar
import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

T = TypeVar("T")

_STATUS_STYLES = {
    "pending": ("[green dim]○[/green dim]", "bright_black"),
    "running": ("[cyan]○[/cyan]", "white"),
    "done": ("[green]●[/green]", "white"),
    "error": ("[red]●[/red]", "white"),
    "skipped": ("[yellow]○[/yellow]", "white"),
}

_KEY_NAMES = {
    readchar.key.UP: "up",
    readchar.key.CTRL_P: "up",
    readchar.key.DOWN: "down",
    readchar.key.CTRL_N: "down",
    readchar.key.ENTER: "enter",
    readchar.key.CR: "enter",
    readchar.key.LF: "enter",
    readchar.key.ESC: "escape",
}


@dataclass
class _Step:
    key: str
    label: str
    status: str = "pending"
    detail: str = ""


class StepTracker:
    """Track and render the steps of a command as a Rich tree."""

    def __init__(self, title: str):
        self.title = title
        self.steps: list[_Step] = []
        self._refresh_cb: Optional[Callable[[], None]] = None

    def attach_refresh(self, cb: Callable[[], None]) -> None:
        self._refresh_cb = cb

    def add(self, key: str, label: str) -> None:
        if self._find(key) is None:
            self.steps.append(_Step(key, label))
            self._maybe_refresh()

    def start(self, key: str, detail: str = "") -> None:
        self._update(key, "running", detail)

    def complete(self, key: str, detail: str = "") -> None:
        self._update(key, "done", detail)

    def error(self, key: str, detail: str = "") -> None:
        self._update(key, "error", detail)

    def skip(self, key: str, detail: str = "") -> None:
        self._update(key, "skipped", detail)

    def status_of(self, key: str) -> str | None:
        step = self._find(key)
        return step.status if step else None

    def _find(self, key: str) -> _Step | None:
        return next((step for step in self.steps if step.key == key), None)

    def _update(self, key: str, status: str, detail: str) -> None:
        step = self._find(key)
        if step is None:
            step = _Step(key, key)
            self.steps.append(step)
        step.status = status
        if detail:
            step.detail = detail
        self._maybe_refresh()

    def _maybe_refresh(self) -> None:
        if self._refresh_cb:
            self._refresh_cb()

    def render(self) -> Tree:
        tree = Tree(f"[cyan]{self.title}[/cyan]", guide_style="grey50")
        for step in self.steps:
            symbol, style = _STATUS_STYLES.get(step.status, (" ", "white"))
            detail = step.detail.strip()
            if step.status == "pending":
                # pending steps are dimmed as a whole, detail included
                text = f"{step.label} ({detail})" if detail else step.label
                tree.add(f"{symbol} [{style}]{text}[/{style}]")
                continue
            suffix = f" [bright_black]({detail})[/bright_black]" if detail else ""
            tree.add(f"{symbol} [{style}]{step.label}[/{style}]{suffix}")
        return tree


def get_key() -> str:
    """Read one keypress; arrows, Enter and Esc come back as names."""
    key = readchar.readkey()
    if key == readchar.key.CTRL_C:
        raise KeyboardInterrupt
    return _KEY_NAMES.get(key, key)


class _ArrowMenu:
    """A cursor over ``options`` drawn as a Rich panel while keys are read.

    ``ticked`` is ``None`` for single choice menus, otherwise the indices
    of the checked options.
    """

    def __init__(self, options: Dict[str, str], title: str, hint: str, console: Optional[Console]):
        if not options:
            raise ValueError("Nothing to choose from")
        self.options = options
        self.keys = list(options)
        self.title = title
        self.hint = hint
        self.console = console or Console()
        self.cursor = 0
        self.ticked: Optional[set[int]] = None

    def panel(self) -> Panel:
        rows = Table.grid(padding=(0, 2))
        rows.add_column(style="cyan", justify="left", width=3)
        rows.add_column(style="white", justify="left")
        for index, key in enumerate(self.keys):
            label = f"[cyan]{key}[/cyan] [dim]({self.options[key]})[/dim]"
            if self.ticked is not None:
                box = "[cyan]☑[/cyan]" if index in self.ticked else "[bright_black]☐[/bright_black]"
                label = f"{box} {label}"
            rows.add_row("▶" if index == self.cursor else " ", label)
        rows.add_row("", "")
        rows.add_row("", f"[dim]{self.hint}[/dim]")
        return Panel(rows, title=f"[bold]{self.title}[/bold]", border_style="cyan", padding=(1, 2))

    def run(self, handle: Callable[[str], Optional[T]]) -> T:
        """Feed keys other than up/down to ``handle`` until it returns a value.

        Esc and Ctrl+C cancel the command.
        """
        self.console.print()
        with Live(self.panel(), console=self.console, transient=True, auto_refresh=False) as live:
            while True:
                try:
                    key = get_key()
                except KeyboardInterrupt:
                    key = "escape"

                if key == "escape":
                    self.console.print("\n[yellow]Selection cancelled[/yellow]")
                    raise typer.Exit(1)
                if key in ("up", "down"):
                    self.cursor = (self.cursor + (1 if key == "down" else -1)) % len(self.keys)
                else:
                    result = handle(key)
                    if result is not None:
                        return result
                live.update(self.panel(), refresh=True)


def select_with_arrows(
    options: Dict[str, str],
    prompt_text: str = "Select an option",
    default_key: str | None = None,
    console: Console | None = None,
) -> str:
    """Pick one key of ``options``; Enter confirms the highlighted one."""
    menu = _ArrowMenu(options, prompt_text, "Use ↑/↓ to navigate, Enter to select, Esc to cancel", console)
    if default_key in menu.keys:
        menu.cursor = menu.keys.index(default_key)
    return menu.run(lambda key: menu.keys[menu.cursor] if key == "enter" else None)


def multi_select_with_arrows(
    options: Dict[str, str],
    prompt_text: str = "Select options",
    default_keys: Optional[List[str]] = None,
    console: Console | None = None,
    min_selections: int = 0,
) -> List[str]:
    """Select any number of options using arrow keys + space to toggle.

    Enter is ignored until at least ``min_selections`` options are ticked.
    The result keeps the order of ``options``.
    """
    menu = _ArrowMenu(
        options,
        prompt_text,
        "Use ↑/↓ to move, Space to toggle, a to toggle all, Enter to confirm, Esc to cancel",
        console,
    )
    ticked = {menu.keys.index(key) for key in default_keys or [] if key in menu.keys}
    menu.ticked = ticked
    if ticked:
        menu.cursor = min(ticked)

    def handle(key: str) -> Optional[List[str]]:
        if key in (" ", readchar.key.SPACE):
            ticked.symmetric_difference_update({menu.cursor})
        elif key == "a":
            everything = set(range(len(menu.keys)))
            if ticked == everything:
                ticked.clear()
            else:
                ticked.update(everything)
        elif key == "enter" and len(ticked) >= min_selections:
            return [menu.keys[index] for index in sorted(ticked)]
        return None

    return menu.run(handle)


def ask_text(
    prompt_text: str,
    *,
    default: str | None = None,
    normalise: Callable[[str], str] | None = None,
    validate: Callable[[str], str | None] | None = None,
    console: Console | None = None,
) -> str:
    """Ask for a line of text until it validates, then normalise it."""
    console = console or Console()
    while True:
        value = typer.prompt(prompt_text, default=default, show_default=default is not None).strip()
        problem = validate(value) if validate else None
        if problem is None:
            return normalise(value) if normalise else value
        console.print(f"[red]{problem}[/red]")


__all__ = [
    "StepTracker",
    "ask_text",
    "get_key",
    "select_with_arrows",
    "multi_select_with_arrows",
]
