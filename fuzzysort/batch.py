"""Search entry points.

``single`` matches one candidate, ``go`` a whole collection, and
``go_async`` does the same as ``go`` in time-boxed slices so a running event
loop keeps serving other tasks while a large collection is searched.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Generator, Iterable, Sequence
from dataclasses import replace
from typing import Any

from fuzzysort.config import Settings, resolve
from fuzzysort.exceptions import SearchCanceled
from fuzzysort.models import Candidate, Result, SearchResults
from fuzzysort.rendering import highlight
from fuzzysort.search import fold, match

logger = logging.getLogger(__name__)

# Look at the clock once per this many candidates.
ITEMS_PER_CHECK = 1000
# Yield to the event loop after a slice has run this long.
SLICE_SECONDS = 0.012


def _match_candidate(
    search_lower: str, candidate: Candidate, settings: Settings
) -> Result | None:
    if isinstance(candidate, str):
        target = candidate
        target_lower = fold(candidate)
        obj = None
    else:
        target = candidate.target
        target_lower = candidate.lower
        obj = candidate

    found = match(
        search_lower,
        target,
        target_lower,
        no_match_limit=settings.no_match_limit,
        loose_penalty=settings.loose_penalty,
    )
    if found is None:
        return None
    return Result(
        target=target,
        score=found.score,
        indexes=found.positions,
        strict=found.strict,
        obj=obj,
    )


def _with_highlight(result: Result, settings: Settings) -> Result:
    return replace(
        result,
        highlighted=highlight(
            result.target,
            result.indexes,
            open_tag=settings.highlight_open,
            close_tag=settings.highlight_close,
        ),
    )


def _finish(matches: list[Result], settings: Settings) -> SearchResults:
    matches.sort(key=lambda result: result.score)
    total = len(matches)
    if settings.limit is not None and total > settings.limit:
        del matches[settings.limit :]
    if settings.highlight_matches:
        matches = [_with_highlight(result, settings) for result in matches]
    return SearchResults(results=tuple(matches), total=total)


def single(
    search: str, target: Candidate, *, settings: Settings | None = None
) -> Result | None:
    """Match ``search`` against one candidate.

    An empty search matches nothing.
    """
    settings = resolve(settings)
    if not search:
        return None
    result = _match_candidate(fold(search), target, settings)
    if result is None or not settings.highlight_matches:
        return result
    return _with_highlight(result, settings)


def go(
    search: str,
    targets: Iterable[Candidate],
    *,
    settings: Settings | None = None,
) -> SearchResults:
    settings = resolve(settings)
    if not search:
        return SearchResults()

    search_lower = fold(search)
    matches: list[Result] = []
    candidate_count = 0
    for candidate in targets:
        candidate_count += 1
        result = _match_candidate(search_lower, candidate, settings)
        if result is not None:
            matches.append(result)

    logger.debug(
        f"Matched {len(matches)} of {candidate_count} candidates for {search!r}"
    )
    return _finish(matches, settings)


class SearchTask:
    """Handle for a search running on the event loop.

    Await it for the ``SearchResults``. ``cancel()`` is observed before the
    next slice starts, after which awaiting raises ``SearchCanceled``.
    """

    def __init__(
        self,
        search: str,
        targets: Sequence[Candidate],
        settings: Settings,
    ) -> None:
        self.search = search
        self._canceled = False
        loop = asyncio.get_running_loop()
        self._task: asyncio.Task[SearchResults] = loop.create_task(
            self._run(targets, settings)
        )

    @property
    def canceled(self) -> bool:
        return self._canceled

    def cancel(self) -> None:
        if self._canceled:
            return
        self._canceled = True
        # A canceled handle is usually dropped without being awaited.
        self._task.add_done_callback(self._retrieve_outcome)

    def _retrieve_outcome(self, task: asyncio.Task[SearchResults]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None and not isinstance(error, SearchCanceled):
            logger.error(
                f"Search for {self.search!r} failed after cancel",
                exc_info=error,
            )

    def done(self) -> bool:
        return self._task.done()

    def __await__(self) -> Generator[Any, None, SearchResults]:
        return self._task.__await__()

    def _check_canceled(self) -> None:
        if self._canceled:
            logger.debug(f"Search for {self.search!r} canceled")
            raise SearchCanceled(self.search)

    async def _run(
        self, targets: Sequence[Candidate], settings: Settings
    ) -> SearchResults:
        # Give the caller a chance to cancel before any work happens.
        await asyncio.sleep(0)
        self._check_canceled()
        if not self.search:
            return SearchResults()

        search_lower = fold(self.search)
        matches: list[Result] = []
        slices = 1
        slice_start = time.perf_counter()
        for index, candidate in enumerate(targets, start=1):
            result = _match_candidate(search_lower, candidate, settings)
            if result is not None:
                matches.append(result)

            if (
                index % ITEMS_PER_CHECK == 0
                and time.perf_counter() - slice_start >= SLICE_SECONDS
            ):
                await asyncio.sleep(0)
                self._check_canceled()
                slices += 1
                slice_start = time.perf_counter()

        logger.debug(
            f"Matched {len(matches)} of {len(targets)} candidates for "
            f"{self.search!r} in {slices} slice(s)"
        )
        return _finish(matches, settings)


def go_async(
    search: str,
    targets: Iterable[Candidate],
    *,
    settings: Settings | None = None,
) -> SearchTask:
    """Start a time-sliced search on the running event loop.

    Raises:
        RuntimeError: If no event loop is running.
    """
    if not isinstance(targets, Sequence):
        targets = list(targets)
    return SearchTask(search, targets, resolve(settings))
