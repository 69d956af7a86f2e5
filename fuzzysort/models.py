from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Protocol, Union, overload

from fuzzysort.search import fold


class PreparedLike(Protocol):
    """A candidate carrying its original text and a lowercase projection."""

    @property
    def target(self) -> str: ...

    @property
    def lower(self) -> str: ...


Candidate = Union[str, PreparedLike]


@dataclass(frozen=True)
class Prepared:
    target: str
    lower: str

    def __post_init__(self) -> None:
        if len(self.lower) != len(self.target):
            raise ValueError(
                "lowercase projection must have the same length as the target: "
                f"{len(self.lower)} != {len(self.target)}"
            )


def prepare(target: str) -> Prepared:
    """Fold ``target`` once so repeated searches can skip the lowercasing."""
    if not isinstance(target, str):
        raise TypeError(f"target must be a str, got {type(target).__name__}")
    return Prepared(target=target, lower=fold(target))


@dataclass(frozen=True)
class Result:
    target: str
    score: int
    indexes: tuple[int, ...]
    strict: bool
    highlighted: str | None = None
    obj: PreparedLike | None = None


@dataclass(frozen=True)
class SearchResults(Sequence[Result]):
    """Matches sorted best first.

    ``total`` counts every matching candidate, including those dropped by
    the result limit.
    """

    results: tuple[Result, ...] = ()
    total: int = 0

    @overload
    def __getitem__(self, index: int) -> Result: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Result, ...]: ...

    def __getitem__(self, index: int | slice) -> Result | tuple[Result, ...]:
        return self.results[index]

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[Result]:
        return iter(self.results)

    @property
    def targets(self) -> list[str]:
        return [result.target for result in self.results]
