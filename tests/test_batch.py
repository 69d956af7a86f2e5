import asyncio
import gc
import logging
import time

import pytest

import fuzzysort.batch as batch
from fuzzysort import (
    Prepared,
    SearchCanceled,
    Settings,
    configure,
    go,
    go_async,
    prepare,
    single,
)

CANDIDATES = ["fuzzfs Search", "Fuzzy Search", "nothing", "fs"]


def test_single_highlights_word_starts() -> None:
    result = single("fs", "Fuzzy Search")

    assert result is not None
    assert result.indexes == (0, 6)
    assert result.strict
    assert result.score == 16
    assert result.highlighted == "<b>F</b>uzzy <b>S</b>earch"
    assert result.obj is None


def test_single_exact_match_scores_zero() -> None:
    result = single("test", "test")

    assert result is not None
    assert result.score == 0


def test_single_without_match() -> None:
    assert single("doesnt exist", "target") is None


def test_single_empty_search_matches_nothing() -> None:
    assert single("", "target") is None
    assert single("", "") is None


def test_single_is_case_insensitive() -> None:
    result = single("FS", "fuzzy search")

    assert result is not None
    assert result.indexes == (0, 6)


def test_single_with_prepared_candidate() -> None:
    candidate = prepare("Fuzzy Search")

    result = single("fs", candidate)

    assert result is not None
    assert result.obj is candidate
    assert result.target == "Fuzzy Search"
    assert candidate == Prepared(target="Fuzzy Search", lower="fuzzy search")


def test_single_uses_candidate_lower_projection() -> None:
    class _Record:
        target = "Fuzzy Search"
        lower = "fuzzy search"

    result = single("fs", _Record())

    assert result is not None
    assert result.highlighted == "<b>F</b>uzzy <b>S</b>earch"


def test_single_falls_back_to_loose_when_run_breaks_mid_word() -> None:
    result = single("abd", "abCD")

    assert result is not None
    assert not result.strict
    assert result.indexes == (0, 1, 3)
    assert result.score == 3001


def test_single_repeated_word_starts_finish_quickly() -> None:
    started = time.perf_counter()
    result = single("aaaaaaab", "a " * 40 + "xb")
    elapsed = time.perf_counter() - started

    assert result is not None
    assert not result.strict
    assert result.score == 123074
    assert elapsed < 1.0


def test_single_honours_highlight_settings() -> None:
    plain = single("fs", "Fuzzy Search", settings=Settings(highlight_matches=False))
    marked = single(
        "fs",
        "Fuzzy Search",
        settings=Settings(highlight_open="[", highlight_close="]"),
    )

    assert plain is not None
    assert plain.highlighted is None
    assert marked is not None
    assert marked.highlighted == "[F]uzzy [S]earch"


def test_go_sorts_best_first() -> None:
    results = go("fs", CANDIDATES)

    assert results.targets == ["fs", "Fuzzy Search", "fuzzfs Search"]
    assert [result.score for result in results] == [0, 16, 18]
    assert results.total == 3
    assert results[2].highlighted == "<b>f</b>uzzfs <b>S</b>earch"


def test_go_empty_inputs() -> None:
    for results in (go("fs", []), go("", CANDIDATES), go("", [])):
        assert len(results) == 0
        assert results.total == 0


def test_go_limit_keeps_best_results() -> None:
    limited = go("fs", CANDIDATES, settings=Settings(limit=2))
    everything = go("fs", CANDIDATES)

    assert limited.targets == everything.targets[:2]
    assert limited.total == 3


def test_go_uses_process_settings() -> None:
    configure(limit=1, highlight_matches=False)

    results = go("fs", CANDIDATES)

    assert results.targets == ["fs"]
    assert results.total == 3
    assert results[0].highlighted is None


def test_go_keeps_input_order_for_ties() -> None:
    assert go("a", ["ab", "ac", "ad"]).targets == ["ab", "ac", "ad"]


def test_go_ranks_strict_matches_above_loose_ones() -> None:
    results = go("a", ["cat", "a long name"])

    assert results.targets == ["a long name", "cat"]
    assert results[0].strict
    assert not results[1].strict


def test_go_accepts_generators_and_mixed_candidates() -> None:
    candidates = (item for item in ["Fuzzy Search", prepare("fs")])

    results = go("fs", candidates)

    assert results.targets == ["fs", "Fuzzy Search"]
    assert results[0].obj == Prepared(target="fs", lower="fs")


def test_go_async_matches_go() -> None:
    async def scenario():
        return await go_async("fs", CANDIDATES)

    results = asyncio.run(scenario())

    assert results == go("fs", CANDIDATES)


def test_go_async_empty_search() -> None:
    async def scenario():
        return await go_async("", CANDIDATES)

    results = asyncio.run(scenario())

    assert len(results) == 0
    assert results.total == 0


def test_go_async_yields_between_slices(monkeypatch) -> None:
    monkeypatch.setattr(batch, "ITEMS_PER_CHECK", 1)
    monkeypatch.setattr(batch, "SLICE_SECONDS", 0.0)
    events: list[str] = []
    match_candidate = batch._match_candidate

    def recording_match(*args):
        events.append("match")
        return match_candidate(*args)

    monkeypatch.setattr(batch, "_match_candidate", recording_match)

    async def ticker() -> None:
        for _ in range(3):
            events.append("tick")
            await asyncio.sleep(0)

    async def scenario():
        search = go_async("fs", CANDIDATES * 5)
        _, results = await asyncio.gather(ticker(), search)
        return search, results

    search, results = asyncio.run(scenario())

    first_match = events.index("match")
    last_match = len(events) - 1 - events[::-1].index("match")

    assert search.done()
    assert "tick" in events[first_match:last_match]
    assert results.total == 15


def test_go_async_cancel_before_start() -> None:
    async def scenario() -> None:
        search = go_async("fs", CANDIDATES)
        search.cancel()
        assert search.canceled
        await search

    with pytest.raises(SearchCanceled):
        asyncio.run(scenario())


def test_go_async_cancel_between_slices(monkeypatch) -> None:
    monkeypatch.setattr(batch, "ITEMS_PER_CHECK", 1)
    monkeypatch.setattr(batch, "SLICE_SECONDS", 0.0)

    async def scenario() -> None:
        search = go_async("fs", CANDIDATES * 10)
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert not search.done()
        search.cancel()
        await search

    with pytest.raises(SearchCanceled) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.search == "fs"


def test_go_async_applies_limit_to_all_candidates() -> None:
    candidates = ["x" * index + " fs" for index in range(50, 0, -1)]

    async def scenario():
        return await go_async("fs", candidates, settings=Settings(limit=3))

    results = asyncio.run(scenario())

    assert results.total == 50
    assert results.targets == ["x fs", "xx fs", "xxx fs"]


def test_go_async_dropped_after_cancel_logs_nothing(caplog) -> None:
    async def scenario() -> None:
        search = go_async("fs", CANDIDATES)
        search.cancel()
        search.cancel()
        await asyncio.sleep(0.01)
        assert search.done()

    with caplog.at_level(logging.ERROR):
        asyncio.run(scenario())
        gc.collect()

    assert not [
        record for record in caplog.records if "never retrieved" in record.getMessage()
    ]
