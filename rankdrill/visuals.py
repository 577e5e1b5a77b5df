"""
Terminal presentation for rankdrill.

Rich panels, progress line, coloured feedback and themed prompts.
Nothing here holds state; prompt helpers turn an aborted prompt into
``InputAborted`` so callers can save and leave.
"""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.style import Style
from rich.table import Table

# =============================================================================
# THEME
# =============================================================================

THEME = {
    "primary": "cyan",
    "accent": "yellow",
    "success": "green",
    "error": "red",
    "dim": "grey50",
}

STYLES = {
    "primary": Style(color=THEME["primary"], bold=True),
    "success": Style(color=THEME["success"], bold=True),
    "error": Style(color=THEME["error"], bold=True),
    "dim": Style(color=THEME["dim"]),
}

PROMPTS = {
    "multiple_choice": "Enter answer number",
    "free_response": "A",
    "confirm": "Is your answer",
    "default": ">",
}


class InputAborted(Exception):
    """Raised when the user aborts a prompt (end of input or Ctrl-C)."""
    pass


class FirstLetterConfirm(Confirm):
    """Confirm prompt that reads only the first letter ("yes", "Nope")."""

    def process_response(self, value: str) -> bool:
        return super().process_response(value.strip()[:1])


def get_prompt(kind: str, suffix: str = "") -> str:
    """
    Get styled prompt text for a kind of question.

    Args:
        kind: Prompt kind (see PROMPTS)
        suffix: Optional suffix like "[0-3]"
    """
    base = PROMPTS.get(kind, PROMPTS["default"])
    if suffix:
        return f"[cyan]{base}[/cyan] {suffix}"
    return f"[cyan]{base}[/cyan]"


# =============================================================================
# PROMPTS
# =============================================================================


def ask_text(console: Console, prompt: str) -> str:
    """Read one line of input; raises InputAborted on EOF or interrupt."""
    try:
        return Prompt.ask(prompt, console=console, default="", show_default=False)
    except (KeyboardInterrupt, EOFError) as e:
        raise InputAborted() from e


def ask_confirm(console: Console, prompt: str, default: bool = False) -> bool:
    """Ask a yes/no question; raises InputAborted on EOF or interrupt."""
    try:
        return FirstLetterConfirm.ask(prompt, console=console, default=default)
    except (KeyboardInterrupt, EOFError) as e:
        raise InputAborted() from e


# =============================================================================
# PANELS
# =============================================================================


def render_session_banner(console: Console, titles: list[str]) -> None:
    """Clear the screen and list the sets being studied."""
    console.clear()
    console.print(f"[bold cyan]Starting study session for:[/bold cyan] {escape(', '.join(titles))}")


def render_progress(console: Console, percent: float) -> None:
    """Progress through the current iteration."""
    console.print(f"[dim]Progress {percent:.1f}%[/dim]")


def render_question_panel(console: Console, text: str, title: str) -> None:
    """Display the question text."""
    panel = Panel(
        escape(text),
        title=f"[bold cyan]{title}[/bold cyan]",
        border_style="cyan",
        box=box.HEAVY,
        padding=(1, 2),
    )
    console.print(panel)


def render_options(console: Console, options: list[str]) -> None:
    """Display multiple-choice options with 0-based indices."""
    table = Table(box=box.MINIMAL, show_header=False)
    table.add_column("Index", style="cyan", justify="right", width=4)
    table.add_column("Option", style="white")

    for i, option in enumerate(options):
        table.add_row(f"[{i}]", escape(option))

    console.print(table)


def render_feedback(console: Console, correct: bool, expected: str | None = None) -> None:
    """Coloured result line, with the expected answer after a miss."""
    console.print()
    if correct:
        console.print("Correct", style=STYLES["success"])
    else:
        console.print("Incorrect", style=STYLES["error"])
        if expected:
            console.print(f"[dim]Expected:[/dim] {escape(expected)}")


def render_rank_table(console: Console, rows: list[tuple[str, int, dict[int, int], int]]) -> None:
    """
    Per-set rank summary.

    Args:
        rows: (title, question count, {rank: count}, due now)
    """
    table = Table(title="Progress by set", box=box.SIMPLE_HEAVY)
    table.add_column("Set", style="cyan")
    table.add_column("Questions", justify="right")
    table.add_column("Ranks", style="white")
    table.add_column("Due", justify="right", style="yellow")

    for title, total, ranks, due in rows:
        spread = "  ".join(f"r{rank}:{count}" for rank, count in sorted(ranks.items()))
        table.add_row(title, str(total), spread, str(due))

    console.print(table)
