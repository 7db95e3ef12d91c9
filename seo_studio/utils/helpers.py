"""General-purpose helper utilities."""

import re
from typing import Iterable


def hyphenate(text: str) -> str:
    """Lowercase and replace whitespace runs with hyphens, keeping other chars."""
    return re.sub(r"\s+", "-", text.strip()).lower()


def dedupe(items: Iterable[str], limit: int | None = None) -> list[str]:
    """Drop duplicates (case-insensitive) keeping first-seen order.

    Args:
        items: Strings to deduplicate. Empty strings are skipped.
        limit: Optional maximum length of the result.
    """
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        key = item.strip().lower()
        if not key or key in seen:
            continue
        seen.add(key)
        result.append(item.strip())
        if limit is not None and len(result) >= limit:
            break
    return result


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
