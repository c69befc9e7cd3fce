from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("bwrep")
except PackageNotFoundError:  # pragma: no cover
    # Not installed; imported straight from src/.
    __version__ = "0.0.0+dev"

__all__ = [
    "analysis",
    "config",
    "export",
    "pipeline",
    "replay",
]
