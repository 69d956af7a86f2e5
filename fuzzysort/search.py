"""Two-pass fuzzy matching and scoring.

``loose_match`` is a cheap subsequence check that records the first place
each search character occurs. ``strict_match`` walks the target again and only
accepts characters at word beginnings or continuing a run of matches, using
the loose positions to skip ahead and backtracking when it runs off the end.
``score_positions`` turns the winning positions into a number, lower is
better.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import NamedTuple

from fuzzysort.config import DEFAULT_LOOSE_PENALTY, DEFAULT_NO_MATCH_LIMIT


def fold(text: str) -> str:
    """Lowercase ``text`` without changing its length.

    A character whose lowercase form spans several code points (``"İ"``) is
    kept as is so indexes into the folded string still line up with the
    original.
    """
    lowered = text.lower()
    if len(lowered) == len(text):
        return lowered
    return "".join(
        lower_char if len(lower_char) == 1 else char
        for char, lower_char in ((char, char.lower()) for char in text)
    )


def char_class(char: str) -> tuple[bool, bool]:
    """Return ``(is_upper, is_word)`` for a single character."""
    is_upper = "A" <= char <= "Z"
    is_word = is_upper or "a" <= char <= "z" or "0" <= char <= "9"
    return is_upper, is_word


def loose_match(
    search_lower: str,
    target_lower: str,
    no_match_limit: int = DEFAULT_NO_MATCH_LIMIT,
) -> list[int] | None:
    """Find the first in-order occurrence of every search character.

    Returns ``None`` when a character is missing or when ``no_match_limit``
    characters go by without a match. The two cases are not distinguished.
    """
    search_length = len(search_lower)
    if not search_length:
        return None

    positions: list[int] = []
    search_char = search_lower[0]
    no_match_count = 0
    for target_index, target_char in enumerate(target_lower):
        if target_char == search_char:
            positions.append(target_index)
            if len(positions) == search_length:
                return positions
            search_char = search_lower[len(positions)]
            no_match_count = 0
        else:
            no_match_count += 1
            if no_match_count >= no_match_limit:
                return None
    return None


@dataclass
class StrictState:
    target_index: int = 0
    search_index: int = 0
    consecutive: bool = False
    was_upper: bool = False
    was_word: bool = False
    no_match_count: int = 0
    positions: list[int] = field(default_factory=list)
    # (search_index, target_index) pairs whose acceptance led to a dead end.
    failed: set[tuple[int, int]] = field(default_factory=set)

    def seek(self, target: str, target_index: int) -> None:
        """Move the cursor and rebuild the class of the character before it."""
        self.target_index = target_index
        self.consecutive = False
        self.was_upper, self.was_word = char_class(target[target_index - 1])

    def accept(self) -> None:
        self.positions.append(self.target_index)
        self.search_index += 1
        self.target_index += 1
        self.consecutive = True
        self.no_match_count = 0

    def backtrack(self, target: str) -> bool:
        """Drop the last accepted position and resume right after it.

        Returns ``False`` when there is nothing left to drop.
        """
        if self.search_index <= 0:
            return False
        self.search_index -= 1
        position = self.positions.pop()
        self.failed.add((self.search_index, position))
        self.seek(target, position + 1)
        return True


def strict_match(
    search_lower: str,
    target: str,
    target_lower: str,
    loose: Sequence[int],
    no_match_limit: int = DEFAULT_NO_MATCH_LIMIT,
) -> list[int] | None:
    """Find positions that start on word beginnings or extend a run.

    A position is a word beginning when it is upper case after a non upper
    case character, follows a non word character, or is itself a non word
    character. ``loose`` must be the result of ``loose_match`` for the same
    inputs. Returns ``None`` when no such assignment exists or the no match
    limit is hit.

    Accepting a position resets the no match counter, so the rest of the walk
    only depends on which search character was accepted where. Pairs that
    failed are remembered and never retried, which keeps backtracking
    polynomial in the target length.
    """
    search_length = len(search_lower)
    target_length = len(target_lower)
    state = StrictState()
    if loose[0] > 0:
        state.seek(target, loose[0])

    while True:
        if state.target_index >= target_length:
            if not state.backtrack(target):
                return None
            continue

        is_upper, is_word = char_class(target[state.target_index])
        is_beginning = (
            state.consecutive
            or (is_upper and not state.was_upper)
            or not state.was_word
            or not is_word
        )
        state.was_upper, state.was_word = is_upper, is_word
        if not is_beginning:
            state.target_index += 1
            continue

        if search_lower[state.search_index] == target_lower[state.target_index]:
            if (state.search_index, state.target_index) in state.failed:
                # Accepting here already failed once; resume as backtracking would.
                state.consecutive = False
                state.target_index += 1
                continue
            state.accept()
            if state.search_index == search_length:
                return state.positions
            # The next character cannot match before its loose position.
            next_loose = loose[state.search_index]
            if next_loose > state.target_index:
                state.seek(target, next_loose)
        else:
            state.no_match_count += 1
            if state.no_match_count >= no_match_limit:
                return None
            state.consecutive = False
            state.target_index += 1


def score_positions(
    positions: Sequence[int],
    target_length: int,
    search_length: int,
    *,
    strict: bool,
    loose_penalty: int = DEFAULT_LOOSE_PENALTY,
) -> int:
    """Score a match; 0 is an exact match and lower is better.

    Every position that does not continue the previous one adds its own
    index. Loose matches are multiplied by ``loose_penalty``, and the length
    difference breaks ties toward shorter targets.
    """
    score = 0
    last_index = -1
    for index in positions:
        if index != last_index + 1:
            score += index
        last_index = index
    if not strict:
        score *= loose_penalty
    return score + target_length - search_length


class Match(NamedTuple):
    positions: tuple[int, ...]
    strict: bool
    score: int


def match(
    search_lower: str,
    target: str,
    target_lower: str,
    *,
    no_match_limit: int = DEFAULT_NO_MATCH_LIMIT,
    loose_penalty: int = DEFAULT_LOOSE_PENALTY,
) -> Match | None:
    loose = loose_match(search_lower, target_lower, no_match_limit)
    if loose is None:
        return None

    strict = strict_match(search_lower, target, target_lower, loose, no_match_limit)
    positions = loose if strict is None else strict
    return Match(
        positions=tuple(positions),
        strict=strict is not None,
        score=score_positions(
            positions,
            len(target_lower),
            len(search_lower),
            strict=strict is not None,
            loose_penalty=loose_penalty,
        ),
    )
