from __future__ import annotations

import re
from typing import Any

import phonenumbers

"""Russian phone number normalization.

Accepted inputs are written with digits, spaces, dashes, dots and brackets,
optionally prefixed by ``+``. After stripping punctuation:
- 11 digits starting with 7 or 8 -> ``+7`` + last 10 digits
- 10 digits -> ``+7`` + the 10 digits
Everything else is rejected. The resulting number must then be a valid
Russian number according to libphonenumber (``phonenumbers``); unassigned
ranges such as 300/400 and Kazakh numbers sharing the +7 code are rejected.
"""

__all__ = [
    "REGION",
    "normalize_phone",
]

REGION = "RU"

_ALLOWED = re.compile(r"\+?[0-9\s\-().]+")


def _national_digits(text: str) -> str | None:
    digits = re.sub(r"[^0-9]", "", text)
    if len(digits) == 11 and digits[0] in "78":
        # +8... is not a valid international prefix
        if text.startswith("+") and digits[0] != "7":
            return None
        return digits[1:]
    if len(digits) == 10 and not text.startswith("+"):
        return digits
    return None


def normalize_phone(value: Any) -> str | None:
    """Return the ``+7XXXXXXXXXX`` form of ``value`` or None if it is not a valid number.

    Normalizing an already-normalized number returns it unchanged.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        value = str(value)
    elif isinstance(value, float) and value.is_integer():
        value = str(int(value))
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not _ALLOWED.fullmatch(text):
        return None
    national = _national_digits(text)
    if national is None:
        return None

    try:
        parsed = phonenumbers.parse(f"+7{national}", REGION)
    except phonenumbers.NumberParseException:
        return None
    if not phonenumbers.is_valid_number_for_region(parsed, REGION):
        return None
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)
