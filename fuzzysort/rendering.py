from __future__ import annotations

from collections.abc import Sequence

from rich.text import Text

from fuzzysort.config import get_settings
from fuzzysort.models import Result


def highlight(
    target: str,
    positions: Sequence[int],
    *,
    open_tag: str | None = None,
    close_tag: str | None = None,
) -> str:
    """Wrap each run of consecutive matched positions in markers.

    ``positions`` index code points of ``target``. Removing the markers from
    the output gives back ``target``. Markers left as ``None`` come from the
    process settings.
    """
    settings = get_settings()
    if open_tag is None:
        open_tag = settings.highlight_open
    if close_tag is None:
        close_tag = settings.highlight_close
    if not positions:
        return target

    parts: list[str] = []
    position_index = 0
    opened = False
    for index, char in enumerate(target):
        if positions[position_index] == index:
            position_index += 1
            if not opened:
                parts.append(open_tag)
                opened = True
            if position_index == len(positions):
                parts.extend((char, close_tag, target[index + 1 :]))
                break
        elif opened:
            parts.append(close_tag)
            opened = False
        parts.append(char)
    return "".join(parts)


def highlight_result(
    result: Result, *, open_tag: str | None = None, close_tag: str | None = None
) -> str:
    return highlight(
        result.target, result.indexes, open_tag=open_tag, close_tag=close_tag
    )


def match_runs(positions: Sequence[int]) -> list[tuple[int, int]]:
    """Group sorted positions into half-open ``(start, end)`` spans."""
    runs: list[tuple[int, int]] = []
    for index in positions:
        if runs and runs[-1][1] == index:
            runs[-1] = (runs[-1][0], index + 1)
        else:
            runs.append((index, index + 1))
    return runs


def highlight_text(
    target: str, positions: Sequence[int], *, style: str = "bold red"
) -> Text:
    text = Text(target)
    for start, end in match_runs(positions):
        text.stylize(style, start, end)
    return text


def format_result_row(result: Result, *, show_score: bool, style: str) -> Text:
    row = highlight_text(result.target, result.indexes, style=style)
    if not show_score:
        return row
    score = Text(f"{result.score:>8} ", style="dim")
    if not result.strict:
        score.stylize("yellow")
    return Text.assemble(score, row)
