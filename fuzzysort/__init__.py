"""Sublime Text style fuzzy search.

>>> from fuzzysort import single
>>> single("fs", "Fuzzy Search").highlighted
'<b>F</b>uzzy <b>S</b>earch'
"""

from __future__ import annotations

from fuzzysort.batch import SearchTask, go, go_async, single
from fuzzysort.config import Settings, configure, get_settings, reset_settings
from fuzzysort.exceptions import ConfigError, FuzzysortError, SearchCanceled
from fuzzysort.models import Prepared, Result, SearchResults, prepare
from fuzzysort.rendering import highlight, highlight_result

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "FuzzysortError",
    "Prepared",
    "Result",
    "SearchCanceled",
    "SearchResults",
    "SearchTask",
    "Settings",
    "__version__",
    "configure",
    "get_settings",
    "go",
    "go_async",
    "highlight",
    "highlight_result",
    "prepare",
    "reset_settings",
    "single",
]
