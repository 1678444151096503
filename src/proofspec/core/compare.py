"""
Value comparison used for sorting options and proof types by label.

Strings compare at "base" strength: case and accents are ignored, so
"apple", "Apple" and "Äpple" sort together. Blank (None) values sort last.
"""

import unicodedata
from datetime import date
from functools import cmp_to_key
from typing import Any, Callable, Iterable, TypeVar

T = TypeVar("T")


def collation_key(value: str) -> str:
    """Case- and accent-insensitive key for a string."""
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def compare_values(a: Any, b: Any) -> int:
    """Three-way comparison of strings, numbers, booleans or dates."""
    if a is None or b is None:
        return _compare_blanks(a, b)
    if isinstance(a, bool) and isinstance(b, bool):
        if a == b:
            return 0
        return -1 if a else 1
    if _is_number(a) and _is_number(b):
        return (a > b) - (a < b)
    if isinstance(a, date) and isinstance(b, date):
        return (a > b) - (a < b)

    ka, kb = collation_key(str(a)), collation_key(str(b))
    return (ka > kb) - (ka < kb)


def sort_by(items: Iterable[T], key: Callable[[T], Any]) -> list[T]:
    """Stable sort using compare_values on the extracted key."""
    return sorted(items, key=cmp_to_key(lambda x, y: compare_values(key(x), key(y))))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _compare_blanks(a: Any, b: Any) -> int:
    if a is None and b is None:
        return 0
    if a is not None and b is None:
        return -1
    return 1
