"""Category-switched diagnostics for the CHIP-8 emulator.

Set ``CHIP8_DEBUG`` to a comma-separated list of categories (``cpu``,
``timer``, ``input``, ``audio``, ``loader``, ``video``, ``trace``, ``perf``)
or to ``all``. Messages go to stdout as ``[CHIP8][category] message``.
"""

from __future__ import annotations

import os
from functools import lru_cache

ENV_VAR = "CHIP8_DEBUG"
_WILDCARDS = frozenset({"all", "*"})


@lru_cache(maxsize=1)
def debug_categories() -> frozenset[str]:
    raw = os.environ.get(ENV_VAR, "")
    return frozenset(name.strip().lower() for name in raw.split(",") if name.strip())


def reload_categories() -> None:
    """Re-read ``CHIP8_DEBUG`` on the next lookup."""

    debug_categories.cache_clear()


def debug_enabled(category: str | None = None) -> bool:
    categories = debug_categories()
    if not categories:
        return False
    if category is None or categories & _WILDCARDS:
        return True
    return category.lower() in categories


def debug_log(category: str, message: str, *args) -> None:
    if not debug_enabled(category):
        return
    if args:
        try:
            message = message % args
        except (TypeError, ValueError):
            message = f"{message} {args!r}"
    print(f"[CHIP8][{category}] {message}")
