"""Interactive prompts that fall back to defaults when not interactive."""

from __future__ import annotations

from typing import Callable

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt


class Prompts:
    """Thin layer over rich.prompt used by every interactive flow.

    With ``interactive=False`` every question returns its default, which is
    how ``--no-interaction`` and CI runs get deterministic answers.
    """

    def __init__(self, console: Console | None = None, interactive: bool = True, quiet: bool = False) -> None:
        self.console = console or Console()
        self.interactive = interactive
        self.quiet = quiet

    # -- Questions ----------------------------------------------------------

    def text(
        self,
        label: str,
        default: str = "",
        validate: Callable[[str], str | None] | None = None,
    ) -> str:
        """Ask for a string. *validate* returns an error message or None."""
        if not self.interactive:
            return default
        while True:
            answer = Prompt.ask(f"  [bold]{label}[/bold]", default=default or None, console=self.console)
            answer = (answer or "").strip()
            error = validate(answer) if validate else None
            if error is None:
                return answer
            self.console.print(f"  [red]✗[/red] {error}")

    def secret(self, label: str, default: str = "") -> str:
        if not self.interactive:
            return default
        answer = Prompt.ask(
            f"  [bold]{label}[/bold]",
            default=default or None,
            password=True,
            show_default=False,
            console=self.console,
        )
        return answer or ""

    def confirm(self, label: str, default: bool = True) -> bool:
        if not self.interactive:
            return default
        return Confirm.ask(f"  [bold]{label}[/bold]", default=default, console=self.console)

    def select(self, label: str, options: dict[str, str], default: str | None = None) -> str:
        """Pick one key of *options* (key -> description)."""
        keys = list(options)
        fallback = default if default in options else keys[0]
        if not self.interactive:
            return fallback
        self.console.print(f"  [bold]{label}[/bold]")
        for i, (key, description) in enumerate(options.items(), 1):
            self.console.print(f"    [cyan]{i}[/cyan]. {description} [dim]({key})[/dim]")
        choices = keys + [str(i) for i in range(1, len(keys) + 1)]
        answer = Prompt.ask(
            "  [bold]Choice[/bold]",
            choices=choices,
            default=fallback,
            show_choices=False,
            console=self.console,
        )
        if answer.isdigit():
            return keys[int(answer) - 1]
        return answer

    # -- Output -------------------------------------------------------------

    def note(self, message: str, title: str | None = None) -> None:
        if self.quiet:
            return
        self.console.print(Panel(message, title=title, border_style="cyan", padding=(0, 2)))

    def info(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"  [bold]→[/bold] {message}")

    def success(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"  [green]✓[/green] {message}")

    def warning(self, message: str) -> None:
        self.console.print(f"  [yellow]○[/yellow] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"  [red]✗[/red] {message}")
