from __future__ import annotations

import copy
import uuid
from collections.abc import Sequence
from typing import Protocol

from ..models.contact import CandidateContact, Contact, ContactPage

"""Persistence boundary for contacts.

ContactRepository is the capability the importer depends on. Two
implementations ship with the package: PostgresContactRepository
(db/postgres.py) and the dict-backed InMemoryContactRepository below, used by
tests and by the CLI when the database is disabled.
"""

__all__ = [
    "ContactRepository",
    "InMemoryContactRepository",
    "matches_search",
]


class ContactRepository(Protocol):
    def create(self, candidate: CandidateContact) -> Contact: ...

    def bulk_upsert(
        self,
        records: Sequence[CandidateContact],
        conflict_fields: Sequence[str],
        update_fields: Sequence[str],
    ) -> None: ...

    def find_by_id(self, contact_id: str, owner_id: str) -> Contact | None: ...

    def paginate(
        self, owner_id: str, page: int, limit: int, search: str | None = None
    ) -> ContactPage: ...

    def count(self, owner_id: str | None = None) -> int: ...


def matches_search(contact: Contact, search: str) -> bool:
    needle = search.casefold()
    haystack = (contact.name, contact.tax_id, contact.phone, contact.contact_person or "")
    return any(needle in value.casefold() for value in haystack)


class InMemoryContactRepository:
    """Dict-backed ContactRepository.

    bulk_upsert works on a copy of the store and swaps it in only when every
    record was applied, so a failure leaves the store untouched.
    """

    def __init__(self) -> None:
        self._contacts: dict[str, Contact] = {}

    def _key(self, contact: Contact | CandidateContact, fields: Sequence[str]) -> tuple:
        return tuple(getattr(contact, f) for f in fields)

    def create(self, candidate: CandidateContact) -> Contact:
        if candidate.owner_id is None:
            raise ValueError("owner_id is required")
        contact = Contact(
            id=str(uuid.uuid4()),
            owner_id=candidate.owner_id,
            name=candidate.name,
            tax_id=candidate.tax_id,
            phone=candidate.phone,
            region=candidate.region,
            contact_person=candidate.contact_person,
            email=candidate.email,
        )
        self._contacts[contact.id] = contact
        return contact

    def bulk_upsert(
        self,
        records: Sequence[CandidateContact],
        conflict_fields: Sequence[str],
        update_fields: Sequence[str],
    ) -> None:
        staged = copy.copy(self._contacts)
        index = {self._key(c, conflict_fields): cid for cid, c in staged.items()}
        for record in records:
            if record.owner_id is None:
                raise ValueError("owner_id is required")
            key = self._key(record, conflict_fields)
            existing_id = index.get(key)
            if existing_id is None:
                contact = Contact(
                    id=str(uuid.uuid4()),
                    owner_id=record.owner_id,
                    name=record.name,
                    tax_id=record.tax_id,
                    phone=record.phone,
                    region=record.region,
                    contact_person=record.contact_person,
                    email=record.email,
                )
                staged[contact.id] = contact
                index[key] = contact.id
                continue
            current = staged[existing_id]
            updates = {f: getattr(record, f) for f in update_fields}
            staged[existing_id] = Contact(**{**current.to_dict(), **updates})
        self._contacts = staged

    def find_by_id(self, contact_id: str, owner_id: str) -> Contact | None:
        contact = self._contacts.get(contact_id)
        if contact is None or contact.owner_id != owner_id:
            return None
        return contact

    def paginate(
        self, owner_id: str, page: int, limit: int, search: str | None = None
    ) -> ContactPage:
        owned = [c for c in self._contacts.values() if c.owner_id == owner_id]
        if search:
            owned = [c for c in owned if matches_search(c, search)]
        owned.sort(key=lambda c: (c.name, c.id))
        start = (page - 1) * limit
        return ContactPage(items=owned[start:start + limit], total=len(owned), page=page, limit=limit)

    def count(self, owner_id: str | None = None) -> int:
        if owner_id is None:
            return len(self._contacts)
        return sum(1 for c in self._contacts.values() if c.owner_id == owner_id)

    def all(self) -> list[Contact]:
        return list(self._contacts.values())
