from __future__ import annotations

import re
from typing import Any

"""Taxpayer identification number (INN) checks.

Legal entities carry 10 digits with one check digit, individuals 12 digits
with two. Every check digit is ``(sum(d_i * w_i) mod 11) mod 10`` over the
digits before it, so the algorithm is driven by a table keyed by length.
"""

__all__ = [
    "CHECK_DIGIT_WEIGHTS",
    "check_digit",
    "is_valid_tax_id",
    "normalize_tax_id",
]

_FORMAT = re.compile(r"[0-9]{10}|[0-9]{12}")

# length -> ((check digit index, weights), ...)
CHECK_DIGIT_WEIGHTS: dict[int, tuple[tuple[int, tuple[int, ...]], ...]] = {
    10: (
        (9, (2, 4, 10, 3, 5, 9, 4, 6, 8)),
    ),
    12: (
        (10, (7, 2, 4, 10, 3, 5, 9, 4, 6, 8)),
        (11, (3, 7, 2, 4, 10, 3, 5, 9, 4, 6, 8)),
    ),
}


def check_digit(digits: list[int], weights: tuple[int, ...]) -> int:
    total = sum(d * w for d, w in zip(digits, weights))
    return total % 11 % 10


def normalize_tax_id(value: Any) -> Any:
    """Trim/upper-case strings; integral numbers (spreadsheet cells) become digit strings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, str):
        return value.strip().upper()
    return value


def is_valid_tax_id(value: str) -> bool:
    if not _FORMAT.fullmatch(value):
        return False
    digits = [int(c) for c in value]
    for index, weights in CHECK_DIGIT_WEIGHTS[len(digits)]:
        if digits[index] != check_digit(digits[:index], weights):
            return False
    return True
