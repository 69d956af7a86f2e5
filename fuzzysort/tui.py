from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Input, OptionList, Static

from fuzzysort.batch import SearchTask, go_async
from fuzzysort.config import Settings, resolve
from fuzzysort.exceptions import SearchCanceled
from fuzzysort.models import Candidate, SearchResults, prepare
from fuzzysort.rendering import highlight_text


class FuzzyPickerTui(App[str | None]):
    CSS_PATH = "picker.tcss"
    ENABLE_COMMAND_PALETTE = False
    HIGHLIGHT_STYLE = "bold red"
    BINDINGS = [
        Binding("escape", "dismiss", "Cancel", priority=True),
        Binding("ctrl+c", "dismiss", show=False, priority=True),
        Binding("down", "cursor_down", show=False),
        Binding("up", "cursor_up", show=False),
    ]

    def __init__(
        self,
        candidates: Iterable[Candidate],
        *,
        settings: Settings | None = None,
        query: str = "",
    ) -> None:
        super().__init__()
        self.theme = "rose-pine"
        self._candidates: list[Candidate] = [
            prepare(candidate) if isinstance(candidate, str) else candidate
            for candidate in candidates
        ]
        self._settings = resolve(settings)
        # Options are styled with rich, so marker strings are not needed.
        self._search_settings = replace(self._settings, highlight_matches=False)
        self._initial_query = query
        self._search_query = query
        self._active_search: SearchTask | None = None
        self._visible_candidates: list[str] = []

    def compose(self) -> ComposeResult:
        with Vertical(id="picker"):
            yield Input(
                value=self._initial_query,
                placeholder="Type to filter",
                id="query",
            )
            yield OptionList(id="results")
            yield Static("", id="status")

    def on_mount(self) -> None:
        self.query_one("#query", Input).focus()
        self._request_search(self._initial_query)

    def _target(self, candidate: Candidate) -> str:
        return candidate if isinstance(candidate, str) else candidate.target

    def _show_all(self) -> None:
        self._visible_candidates = [
            self._target(candidate) for candidate in self._candidates
        ]
        limit = self._settings.limit
        if limit is not None:
            self._visible_candidates = self._visible_candidates[:limit]
        self._render_options(
            [Text(target) for target in self._visible_candidates]
        )
        self._update_status(len(self._candidates))

    def _show_results(self, results: SearchResults) -> None:
        self._visible_candidates = results.targets
        self._render_options(
            [
                highlight_text(
                    result.target, result.indexes, style=self.HIGHLIGHT_STYLE
                )
                for result in results
            ]
        )
        self._update_status(results.total)

    def _render_options(self, labels: list[Text]) -> None:
        option_list = self.query_one("#results", OptionList)
        option_list.clear_options()
        if labels:
            option_list.add_options(labels)
            option_list.highlighted = 0
            return
        option_list.add_option("No matches")

    def _update_status(self, matched: int) -> None:
        status = Text()
        status.append(f"{matched:,}", style="bold white")
        status.append(f"/{len(self._candidates):,}", style="dim")
        if len(self._visible_candidates) < matched:
            status.append(f"  showing {len(self._visible_candidates):,}", style="dim")
        self.query_one("#status", Static).update(status)

    def _request_search(self, query: str) -> None:
        self._search_query = query
        if self._active_search is not None:
            self._active_search.cancel()
            self._active_search = None

        if not query:
            self._show_all()
            return

        self.run_worker(
            self._run_search(query),
            group="search",
            exclusive=True,
            exit_on_error=False,
        )

    async def _run_search(self, query: str) -> None:
        search = go_async(query, self._candidates, settings=self._search_settings)
        self._active_search = search
        try:
            results = await search
        except SearchCanceled:
            return
        if query != self._search_query:
            return
        if self._active_search is search:
            self._active_search = None
        self._show_results(results)

    def on_input_changed(self, event: Input.Changed) -> None:
        self._request_search(event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        option_list = self.query_one("#results", OptionList)
        highlighted = option_list.highlighted
        if highlighted is None or not self._visible_candidates:
            return
        self.exit(self._visible_candidates[highlighted])

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option_index < 0 or event.option_index >= len(
            self._visible_candidates
        ):
            return
        self.exit(self._visible_candidates[event.option_index])

    def action_cursor_down(self) -> None:
        self.query_one("#results", OptionList).action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one("#results", OptionList).action_cursor_up()

    def action_dismiss(self) -> None:
        self.exit(None)

