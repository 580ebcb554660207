from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from email_validator import EmailNotValidError, validate_email

from ..models.contact import CandidateContact
from .phone import normalize_phone
from .tax_id import is_valid_tax_id, normalize_tax_id

"""Record validator: MappedRecord -> CandidateContact | messages.

Each field has its own check returning ``(normalized value, messages)``.
validate_record() runs all of them and collects every failure instead of
stopping at the first one.
"""

__all__ = [
    "ValidationResult",
    "validate_record",
]


FieldCheck = Callable[[Any], tuple[Any, list[str]]]


@dataclass(frozen=True)
class ValidationResult:
    contact: CandidateContact | None = None
    messages: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.contact is not None


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def check_name(value: Any) -> tuple[Any, list[str]]:
    if value is None:
        return None, ["name is required"]
    if not isinstance(value, str):
        return None, ["name must be a string"]
    if value.strip() == "":
        return None, ["name must not be empty"]
    return value.strip(), []


def check_tax_id(value: Any) -> tuple[Any, list[str]]:
    if _is_missing(value):
        return None, ["tax id is required"]
    normalized = normalize_tax_id(value)
    if not isinstance(normalized, str) or not is_valid_tax_id(normalized):
        return None, [f"invalid tax id: {value}"]
    return normalized, []


def check_phone(value: Any) -> tuple[Any, list[str]]:
    if _is_missing(value):
        return None, ["phone is required"]
    normalized = normalize_phone(value)
    if normalized is None:
        return None, [f"invalid Russian phone number: {value}"]
    return normalized, []


def _optional_text(label: str) -> FieldCheck:
    def check(value: Any) -> tuple[Any, list[str]]:
        if _is_missing(value):
            return None, []
        if not isinstance(value, str):
            return None, [f"{label} must be a string"]
        return value.strip(), []
    return check


def check_email(value: Any) -> tuple[Any, list[str]]:
    text, messages = _optional_text("email")(value)
    if text is None:
        return None, messages
    try:
        # syntax only, no DNS lookups during an import
        return validate_email(text, check_deliverability=False).normalized, []
    except EmailNotValidError:
        return None, [f"invalid email address: {text}"]


FIELD_CHECKS: dict[str, FieldCheck] = {
    "name": check_name,
    "tax_id": check_tax_id,
    "phone": check_phone,
    "region": _optional_text("region"),
    "contact_person": _optional_text("contact person"),
    "email": check_email,
}


def validate_record(record: Mapping[str, Any]) -> ValidationResult:
    """Validate a mapped record, collecting every field violation."""
    values: dict[str, Any] = {}
    messages: list[str] = []
    for name, check in FIELD_CHECKS.items():
        value, errors = check(record.get(name))
        values[name] = value
        messages.extend(errors)
    if messages:
        return ValidationResult(messages=messages)
    return ValidationResult(contact=CandidateContact(**values))
