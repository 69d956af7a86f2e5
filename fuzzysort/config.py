"""Process-wide search settings.

Settings are an immutable value. ``configure`` swaps in a validated copy, so
a bad value fails here and never halfway through a query. Every search entry
point also accepts an explicit ``settings=`` argument that bypasses the
process-wide value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from fuzzysort.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_NO_MATCH_LIMIT = 100
DEFAULT_LOOSE_PENALTY = 1000


@dataclass(frozen=True)
class Settings:
    # Give up on a candidate after this many characters without a match.
    no_match_limit: int = DEFAULT_NO_MATCH_LIMIT
    highlight_matches: bool = True
    highlight_open: str = "<b>"
    highlight_close: str = "</b>"
    # Keep at most this many results; None keeps all of them.
    limit: int | None = None
    # Score multiplier for matches that only pass the loose check.
    loose_penalty: int = DEFAULT_LOOSE_PENALTY

    def __post_init__(self) -> None:
        if not _is_int(self.no_match_limit) or self.no_match_limit < 1:
            raise ConfigError(
                f"no_match_limit must be a positive integer, got {self.no_match_limit!r}"
            )
        if self.limit is not None and (not _is_int(self.limit) or self.limit < 0):
            raise ConfigError(
                f"limit must be a non-negative integer or None, got {self.limit!r}",
                suggestion="use None for no limit",
            )
        if not _is_int(self.loose_penalty) or self.loose_penalty < 1:
            raise ConfigError(
                f"loose_penalty must be a positive integer, got {self.loose_penalty!r}"
            )
        if not isinstance(self.highlight_open, str) or not isinstance(
            self.highlight_close, str
        ):
            raise ConfigError("highlight markers must be strings")
        if not isinstance(self.highlight_matches, bool):
            raise ConfigError(
                f"highlight_matches must be a bool, got {self.highlight_matches!r}"
            )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


_settings = Settings()


def get_settings() -> Settings:
    return _settings


def configure(**changes: Any) -> Settings:
    """Replace the process-wide settings with ``changes`` applied.

    Raises:
        ConfigError: If a value is invalid. The current settings are kept.
    """
    global _settings
    try:
        updated = replace(_settings, **changes)
    except TypeError as exc:
        raise ConfigError(str(exc)) from exc
    logger.debug(f"Search settings updated: {changes}")
    _settings = updated
    return updated


def reset_settings() -> Settings:
    global _settings
    _settings = Settings()
    return _settings


def resolve(settings: Settings | None) -> Settings:
    return _settings if settings is None else settings
