"""Registry metadata for dependency tokens in package.json manifests."""

from __future__ import annotations

__version__ = "0.1.0"
