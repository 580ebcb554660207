from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any

"""Contact domain models.

CandidateContact is the validated, normalized shape produced by the record
validator; Contact is the persisted entity with a generated id and owner.
"""

__all__ = [
    "CandidateContact",
    "Contact",
    "ContactPage",
    "UPDATABLE_FIELDS",
    "IDENTITY_FIELDS",
]

# Composite identity of a contact (dedup + storage conflict key)
IDENTITY_FIELDS: tuple[str, ...] = ("name", "tax_id", "phone")
# Fields rewritten when an upsert hits an existing contact
UPDATABLE_FIELDS: tuple[str, ...] = ("region", "contact_person", "email")


@dataclass(frozen=True)
class CandidateContact:
    """Validated contact waiting to be persisted.

    ``name`` is non-empty, ``tax_id`` is a checksum-valid 10/12 digit string
    and ``phone`` is in ``+7XXXXXXXXXX`` form. ``owner_id`` is stamped by the
    importer, never by the validator.
    """
    name: str
    tax_id: str
    phone: str
    region: str | None = None
    contact_person: str | None = None
    email: str | None = None
    owner_id: str | None = None

    def with_owner(self, owner_id: str) -> CandidateContact:
        return replace(self, owner_id=owner_id)

    def as_row(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Contact:
    """Persisted contact."""
    id: str
    owner_id: str
    name: str
    tax_id: str
    phone: str
    region: str | None = None
    contact_person: str | None = None
    email: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ContactPage:
    """One page of an owner's contacts."""
    items: list[Contact]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        if self.total == 0:
            return 0
        return (self.total + self.limit - 1) // self.limit
