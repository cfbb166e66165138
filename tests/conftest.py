"""Shared fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog

# "express" sits on line 6, "@types/node" on line 9 (zero-indexed).
MANIFEST = """{
  "name": "demo",
  "scripts": {
    "build": "tsc"
  },
  "dependencies": {
    "express": "^4.17.1"
  },
  "devDependencies": {
    "@types/node": "~20.1.0"
  }
}
"""


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo configure_logging() so no test inherits another test's log sink."""
    yield
    structlog.reset_defaults()


@pytest.fixture()
def manifest() -> str:
    return MANIFEST
