"""
Utility functions and helpers.

This module intentionally uses lazy attribute loading to avoid importing heavier
submodules (e.g., rapidfuzz, yaml) unless they are needed.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "CancellationToken",
    "ProjectPaths",
    "RateLimiter",
    "fuzzy_score",
    "load_credentials",
    "load_json_cache",
    "normalize_game_name",
    "parse_name_lines",
    "read_name_lines",
    "resolve_api_key",
    "save_json_cache",
    "Progress",
]


def __getattr__(name: str) -> Any:  # pragma: no cover
    if name == "Progress":
        from .progress import Progress

        return Progress

    if name in __all__:
        from . import utilities as _u

        return getattr(_u, name)

    raise AttributeError(name)
