"""
rankdrill: Main CLI.

A Rich terminal interface for rank-based spaced repetition over
question sets stored as JSON files.

Commands:
- rankdrill [PATTERN]        - Start a study session (same as `study`)
- rankdrill study [PATTERN]  - Start a study session
- rankdrill stats [PATTERN]  - Show ranks per set
- rankdrill reset            - Delete saved progress
"""
from __future__ import annotations

import re
import sys
from collections import Counter
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from .config import Settings, get_settings
from .deck import DEFAULT_PATTERN, SetDeck, prettify_set_name
from .errors import RankdrillError
from .scheduler import is_due
from .session import StudySession
from .state_store import ProgressStore
from . import visuals as ui

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="rankdrill",
    help="rankdrill: spaced repetition flashcards in the terminal",
    no_args_is_help=False,
)
console = Console()

COMMANDS = {"study", "stats", "reset"}
TOP_LEVEL_OPTIONS = {"--help", "--install-completion", "--show-completion"}


def _resolve_paths(
    settings: Settings,
    sets_dir: Optional[Path],
    progress: Optional[Path],
) -> tuple[Path, Path]:
    return sets_dir or settings.sets_dir, progress or settings.progress_file


def _build_deck(settings: Settings, sets_dir: Path, pattern: str) -> SetDeck:
    try:
        return SetDeck(sets_dir, pattern=pattern, max_workers=settings.load_workers)
    except re.error as e:
        raise typer.BadParameter(f"invalid regular expression {pattern!r}: {e}") from e


# =============================================================================
# Commands
# =============================================================================

@app.command()
def study(
    pattern: str = typer.Argument(
        DEFAULT_PATTERN,
        help="Regular expression selecting set files (matched against their paths)",
    ),
    sets_dir: Optional[Path] = typer.Option(
        None,
        "--sets-dir", "-s",
        help="Directory with question-set JSON files",
    ),
    progress: Optional[Path] = typer.Option(
        None,
        "--progress", "-p",
        help="Progress file",
    ),
) -> None:
    """
    Start an interactive study session.

    Unfamiliar questions are asked as multiple choice, familiar ones as
    free response. Press Ctrl-D or Ctrl-C at any prompt to save and quit.
    """
    settings = get_settings()
    sets_path, progress_path = _resolve_paths(settings, sets_dir, progress)
    deck = _build_deck(settings, sets_path, pattern)

    session = StudySession(deck, ProgressStore(progress_path), settings=settings, console=console)

    try:
        with console.status("Loading sets..."):
            loaded = session.load()
    except RankdrillError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    if loaded == 0:
        console.print("\n[red]No questions found![/red]")
        console.print(f"Looking in: {sets_path.absolute()} (pattern {escape(repr(pattern))})")
        raise typer.Exit(1)

    summary = session.run()

    console.print(
        f"\n[bold]Answered {summary.answered}[/bold] "
        f"([green]{summary.correct} correct[/green], [red]{summary.wrong} wrong[/red]). "
        f"Progress saved."
    )


@app.command()
def stats(
    pattern: str = typer.Argument(
        DEFAULT_PATTERN,
        help="Regular expression selecting set files",
    ),
    sets_dir: Optional[Path] = typer.Option(
        None,
        "--sets-dir", "-s",
        help="Directory with question-set JSON files",
    ),
    progress: Optional[Path] = typer.Option(
        None,
        "--progress", "-p",
        help="Progress file",
    ),
) -> None:
    """Show question ranks per set."""
    settings = get_settings()
    sets_path, progress_path = _resolve_paths(settings, sets_dir, progress)
    deck = _build_deck(settings, sets_path, pattern)

    try:
        state = ProgressStore(progress_path).load()
        deck.load(state.known)
    except RankdrillError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not len(deck):
        console.print("[yellow]No questions found.[/yellow]")
        raise typer.Exit(1)

    rows = []
    for set_name in deck.set_names:
        questions = [q for q in deck if q.set_name == set_name]
        ranks = Counter(q.rank for q in questions)
        due = sum(1 for q in questions if is_due(q.rank, state.iteration))
        rows.append((prettify_set_name(set_name), len(questions), dict(ranks), due))

    console.print(f"\n[bold cyan]Iteration {state.iteration}[/bold cyan]")
    ui.render_rank_table(console, rows)


@app.command()
def reset(
    confirm: bool = typer.Option(
        False,
        "--yes", "-y",
        help="Skip confirmation",
    ),
    progress: Optional[Path] = typer.Option(
        None,
        "--progress", "-p",
        help="Progress file",
    ),
) -> None:
    """Delete all saved progress."""
    settings = get_settings()
    progress_path = progress or settings.progress_file

    if not confirm:
        try:
            if not ui.ask_confirm(console, "Reset ALL progress? This cannot be undone!", default=False):
                raise typer.Exit(0)
        except ui.InputAborted:
            raise typer.Exit(0)

    if ProgressStore(progress_path).reset():
        console.print("[green]All progress has been reset.[/green]")
    else:
        console.print("[dim]No progress file to reset.[/dim]")


# =============================================================================
# Entry Point
# =============================================================================

def configure_logging(settings: Settings) -> None:
    """Send loguru output to stderr (and optionally a file)."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level="DEBUG", rotation="1 MB")


def default_to_study(argv: list[str]) -> list[str]:
    """Anything that is not a sub-command or a top-level option goes to `study`."""
    if not argv or (argv[0] not in COMMANDS and argv[0] not in TOP_LEVEL_OPTIONS):
        return ["study", *argv]
    return argv


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    configure_logging(get_settings())
    args = default_to_study(list(sys.argv[1:] if argv is None else argv))
    app(args=args, prog_name="rankdrill")


if __name__ == "__main__":
    main()
