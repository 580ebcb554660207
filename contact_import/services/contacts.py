from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..db.repository import ContactRepository
from ..models.contact import UPDATABLE_FIELDS, CandidateContact, Contact, ContactPage
from ..validation.record_validator import validate_record
from .dedup import Deduplicator, composite_key
from .importer import conflict_fields_for

"""Single-record and listing operations on an owner's contacts."""

logger = logging.getLogger(__name__)

MAX_PAGE_LIMIT = 100


class ContactValidationError(Exception):
    """Raised when records handed to create_contact(s) fail validation.

    ``errors`` maps the 0-based position of each bad record to its messages.
    """

    def __init__(self, errors: dict[int, list[str]]) -> None:
        self.errors = errors
        details = "; ".join(f"#{i}: {', '.join(m)}" for i, m in errors.items())
        super().__init__(f"invalid contact data: {details}")


def _validated(record: Mapping[str, Any]) -> tuple[CandidateContact | None, list[str]]:
    result = validate_record(record)
    return result.contact, result.messages


def create_contact(
    repository: ContactRepository, record: Mapping[str, Any], owner_id: str
) -> Contact:
    candidate, messages = _validated(record)
    if candidate is None:
        raise ContactValidationError({0: messages})
    return repository.create(candidate.with_owner(owner_id))


def create_contacts(
    repository: ContactRepository,
    records: Sequence[Mapping[str, Any]],
    owner_id: str,
    *,
    unique_per_owner: bool = False,
) -> int:
    """Validate every record, then write them all with one bulk upsert.

    Unlike the file import this is all-or-nothing: one invalid record rejects
    the whole batch before anything is written.
    """
    candidates: list[CandidateContact] = []
    errors: dict[int, list[str]] = {}
    dedup = Deduplicator()
    for index, record in enumerate(records):
        candidate, messages = _validated(record)
        if candidate is None:
            errors[index] = messages
            continue
        if dedup.observe(candidate):
            errors[index] = [f"duplicate record in batch: {composite_key(candidate)}"]
            continue
        candidates.append(candidate.with_owner(owner_id))
    if errors:
        raise ContactValidationError(errors)
    if candidates:
        repository.bulk_upsert(
            candidates,
            conflict_fields=conflict_fields_for(unique_per_owner),
            update_fields=UPDATABLE_FIELDS,
        )
    logger.info(f"batch create owner={owner_id} written={len(candidates)}")
    return len(candidates)


def list_contacts(
    repository: ContactRepository,
    owner_id: str,
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
) -> ContactPage:
    if page < 1:
        raise ValueError("page must be >= 1")
    if not 1 <= limit <= MAX_PAGE_LIMIT:
        raise ValueError(f"limit must be between 1 and {MAX_PAGE_LIMIT}")
    search = search.strip() if search else None
    return repository.paginate(owner_id, page, limit, search or None)


def get_contact(repository: ContactRepository, contact_id: str, owner_id: str) -> Contact | None:
    return repository.find_by_id(contact_id, owner_id)
