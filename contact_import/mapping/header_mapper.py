from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models.config_models import HeaderRuleSet

"""Header mapper: file column headers -> canonical contact fields.

Each header is tested against the rules in declaration order and assigned to
the first matching field (first match wins, not best match). Unrecognized
headers are dropped without error.
"""

__all__ = [
    "map_row",
    "match_header",
]


def match_header(header: str, rules: HeaderRuleSet) -> str | None:
    """Return the canonical field for ``header`` or None if no rule matches."""
    trimmed = str(header).strip()
    for rule in rules:
        if rule.matches(trimmed):
            return rule.field
    return None


def map_row(raw_row: Mapping[str, Any], rules: HeaderRuleSet) -> dict[str, Any]:
    """Map a raw row onto canonical fields.

    String values are trimmed, other non-null values pass through unchanged,
    None is dropped. When two headers resolve to the same field the later
    column overwrites the earlier one. Never raises; an empty dict means the
    row should be skipped.
    """
    mapped: dict[str, Any] = {}
    for header, value in raw_row.items():
        field = match_header(header, rules)
        if field is None:
            continue
        if isinstance(value, str):
            mapped[field] = value.strip()
        elif value is not None:
            mapped[field] = value
    return mapped
