from __future__ import annotations

import logging
import sys
from pathlib import Path

import typer
from rich.console import Console

from fuzzysort import __version__
from fuzzysort.batch import go
from fuzzysort.config import Settings
from fuzzysort.exceptions import ConfigError
from fuzzysort.models import Prepared, prepare
from fuzzysort.rendering import format_result_row
from fuzzysort.tui import FuzzyPickerTui

__all__ = [
    "FuzzyPickerTui",
    "cli",
    "run",
]

EXIT_NO_MATCH = 1
EXIT_BAD_CONFIG = 2


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(f"fuzzysort {__version__}")
    raise typer.Exit()


def _read_candidates(files: list[Path] | None) -> list[Prepared]:
    if files:
        lines: list[str] = []
        for path in files:
            lines.extend(path.read_text(encoding="utf-8").splitlines())
    else:
        lines = sys.stdin.read().splitlines()
    return [prepare(line) for line in lines if line]


cli = typer.Typer(
    add_completion=False,
    help="Fuzzy search lines of text, Sublime Text style.",
)


@cli.command()
def run(
    query: str = typer.Argument(
        "",
        help="Search string. May be empty with --interactive.",
    ),
    files: list[Path] | None = typer.Argument(
        None,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Files with one candidate per line. Reads stdin when omitted.",
    ),
    limit: int | None = typer.Option(
        None,
        "--limit",
        "-n",
        help="Print at most this many matches.",
    ),
    no_match_limit: int = typer.Option(
        100,
        "--no-match-limit",
        help="Give up on a line after this many characters without a match.",
    ),
    highlight: bool = typer.Option(
        True,
        "--highlight/--no-highlight",
        help="Mark matched characters.",
    ),
    markers: bool = typer.Option(
        False,
        "--markers",
        help="Wrap matches in --open/--close strings instead of terminal styles.",
    ),
    open_tag: str = typer.Option("<b>", "--open", help="Opening marker."),
    close_tag: str = typer.Option("</b>", "--close", help="Closing marker."),
    show_scores: bool = typer.Option(
        False,
        "--scores",
        help="Print each score before the match. Lower is better.",
    ),
    interactive: bool = typer.Option(
        False,
        "--interactive",
        "-i",
        help="Pick a line in a terminal UI and print it.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log debug output to stderr.",
    ),
    _version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        settings = Settings(
            no_match_limit=no_match_limit,
            highlight_matches=highlight and markers,
            highlight_open=open_tag,
            highlight_close=close_tag,
            limit=limit,
        )
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=EXIT_BAD_CONFIG) from exc

    candidates = _read_candidates(files)

    if interactive:
        choice = FuzzyPickerTui(candidates, settings=settings, query=query).run()
        if choice is None:
            raise typer.Exit(code=EXIT_NO_MATCH)
        typer.echo(choice)
        return

    results = go(query, candidates, settings=settings)
    if not results:
        raise typer.Exit(code=EXIT_NO_MATCH)

    console = Console(highlight=False, soft_wrap=True)
    for result in results:
        if markers and highlight:
            line = result.highlighted or result.target
            typer.echo(f"{result.score:>8} {line}" if show_scores else line)
        elif highlight:
            console.print(
                format_result_row(result, show_score=show_scores, style="bold red")
            )
        else:
            typer.echo(
                f"{result.score:>8} {result.target}" if show_scores else result.target
            )


if __name__ == "__main__":
    cli()
