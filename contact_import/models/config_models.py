from __future__ import annotations

import re
from dataclasses import dataclass

"""Config dataclasses for the contact import pipeline.

The header rule set is built once at startup and never mutated afterwards;
it is passed by reference into the header mapper for every import.
"""

CANONICAL_FIELDS: tuple[str, ...] = (
    "name",
    "tax_id",
    "region",
    "contact_person",
    "phone",
    "email",
)

# Keys accepted in rule files in addition to the canonical names
FIELD_ALIASES: dict[str, str] = {
    "taxId": "tax_id",
    "inn": "tax_id",
    "contactPerson": "contact_person",
    "contact": "contact_person",
}


@dataclass(frozen=True)
class HeaderRule:
    """A single ``canonical field <- header pattern`` rule."""
    field: str
    pattern: re.Pattern[str]

    def matches(self, header: str) -> bool:
        return self.pattern.search(header) is not None


@dataclass(frozen=True)
class HeaderRuleSet:
    """Ordered, immutable sequence of header rules.

    Declaration order is significant: the first rule that matches a header wins.
    """
    rules: tuple[HeaderRule, ...]

    def __iter__(self):
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    @property
    def fields(self) -> list[str]:
        return [r.field for r in self.rules]


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection fallback configuration.

    Environment variables take precedence over these values.
    """
    host: str | None
    port: int | None
    user: str | None
    password: str | None
    database: str | None
    dsn: str | None


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for the import service."""
    header_rules: HeaderRuleSet
    database: DatabaseConfig
    table: str = "contacts"
    unique_per_owner: bool = False  # 一意制約を所有者単位にするか
    page_size: int = 1000
