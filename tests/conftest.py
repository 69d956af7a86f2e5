from collections.abc import Iterator

import pytest

from fuzzysort.config import reset_settings


@pytest.fixture(autouse=True)
def _default_settings() -> Iterator[None]:
    reset_settings()
    yield
    reset_settings()
