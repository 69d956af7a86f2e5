"""Exception hierarchy for fuzzysort.

A candidate that does not match is not an error: it is reported as ``None``
or left out of a batch. Exceptions are reserved for bad configuration and
for canceled asynchronous searches.
"""

from __future__ import annotations


class FuzzysortError(Exception):
    """Base exception for all fuzzysort errors."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message} ({self.suggestion})"
        return self.message


class ConfigError(FuzzysortError, ValueError):
    """A setting failed validation."""


class SearchCanceled(FuzzysortError):
    """An asynchronous search was canceled before it produced results."""

    def __init__(self, search: str) -> None:
        super().__init__(f"Search for {search!r} was canceled")
        self.search = search
