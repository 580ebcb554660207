from __future__ import annotations

from ..models.contact import CandidateContact

"""In-file duplicate detection.

One Deduplicator per import call. Contacts already stored by earlier imports
are not rejected here; the bulk upsert updates them in place.
"""

KEY_SEPARATOR = "|"


def composite_key(candidate: CandidateContact) -> str:
    """``NAME|tax_id|phone`` with the name upper-cased."""
    return KEY_SEPARATOR.join((candidate.name.upper(), candidate.tax_id, candidate.phone))


class Deduplicator:
    def __init__(self) -> None:
        self._seen: set[str] = set()

    def observe(self, candidate: CandidateContact) -> bool:
        """Return True if an equal key was already observed, else remember it."""
        key = composite_key(candidate)
        if key in self._seen:
            return True
        self._seen.add(key)
        return False

    def __len__(self) -> int:
        return len(self._seen)
