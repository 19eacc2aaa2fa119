"""Rich console utilities for styled terminal output.

Every operator-facing message of the key procedures goes through this
module so warnings, banners and summaries look the same across commands.
"""

from collections.abc import Generator, Iterable, Sequence
from contextlib import contextmanager

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

_THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "highlight": "cyan bold",
        "muted": "dim",
        "secret": "magenta bold",
    }
)

# Shared console instance
console = Console(theme=_THEME)


def info(message: str) -> None:
    """Print an informational message.

    Args:
        message: The message to display.

    """
    console.print(f"[info]ℹ[/info] {message}")


def success(message: str) -> None:
    """Print a success message.

    Args:
        message: The message to display.

    """
    console.print(f"[success]✓[/success] {message}")


def warning(message: str) -> None:
    """Print a warning message.

    Args:
        message: The message to display.

    """
    console.print(f"[warning]⚠[/warning] {message}")


def error(message: str) -> None:
    """Print an error message.

    Args:
        message: The message to display.

    """
    console.print(f"[error]✗[/error] {message}")


def action(message: str) -> None:
    """Print an action/progress message."""
    console.print(f"[info]→[/info] {message}")


def step(message: str) -> None:
    """Print a sub-step message."""
    console.print(f"[muted]•[/muted] {message}")


def highlight(text: str) -> str:
    """Return text wrapped in highlight markup.

    Args:
        text: The text to highlight.

    Returns:
        Text wrapped in Rich markup for highlighting.

    """
    return f"[highlight]{text}[/highlight]"


@contextmanager
def spinner(message: str) -> Generator[None, None, None]:
    """Display a spinner while performing an operation.

    Args:
        message: The status message to display.

    Yields:
        None

    """
    with console.status(f"[info]{message}[/info]", spinner="dots"):
        yield


def warning_banner(title: str, lines: Iterable[str]) -> None:
    """Print the warning panel shown before a sensitive operation.

    Args:
        title: Panel title, e.g. "EMERGENCY RECOVERY PROCEDURE".
        lines: Body lines, printed in the warning colour.

    """
    body = "\n".join(f"[warning]{line}[/warning]" for line in lines)
    console.print(Panel(body, title=f"[error]{title}[/error]", border_style="red"))


def secret_value(label: str, value: str) -> None:
    """Print a one-time secret (such as a generated passphrase).

    Args:
        label: What the value is.
        value: The value itself.

    """
    console.print(f"[warning]⚠[/warning] {label}: [secret]{value}[/secret]")


def summary_panel(title: str, items: dict[str, str]) -> None:
    """Print a summary panel with key-value pairs.

    Args:
        title: Title for the panel.
        items: Dictionary of label -> value pairs to display.

    """
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column(style="cyan")

    for label, value in items.items():
        table.add_row(f"{label}:", value)

    console.print(Panel(table, title=f"[bold]{title}[/bold]", border_style="green"))


def versions_table(title: str, rows: Sequence[tuple[str, str, str]]) -> None:
    """Print secret versions as a table.

    Args:
        title: Table title.
        rows: (version id, stages, created) tuples.

    """
    table = Table(title=title, title_style="bold", header_style="bold cyan")
    table.add_column("Version ID")
    table.add_column("Stages")
    table.add_column("Created", style="muted")
    for row in rows:
        table.add_row(*row)
    console.print(table)


def next_steps(steps: Sequence[str]) -> None:
    """Print a numbered list of follow-up actions."""
    console.print("[info]Next steps:[/info]")
    for number, text in enumerate(steps, start=1):
        console.print(f"  {number}. {text}")


def newline() -> None:
    """Print an empty line."""
    console.print()
