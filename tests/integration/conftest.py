"""Integration test fixtures.

These tests run the real entry point in a subprocess. None of them reach the
network: they either exit before any lookup or point at a path that is not a
manifest.
"""

from __future__ import annotations

import os

import pytest


@pytest.fixture()
def subprocess_env() -> dict[str, str]:
    """Environment for the child process with any PVS__ settings stripped."""
    return {key: value for key, value in os.environ.items() if not key.startswith("PVS__")}
