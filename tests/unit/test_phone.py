from __future__ import annotations

import pytest

from contact_import.validation.phone import normalize_phone


@pytest.mark.parametrize(
    "raw",
    [
        "89991234567",
        "79991234567",
        "+79991234567",
        "9991234567",
        "8 (999) 123-45-67",
        "+7 999 123 45 67",
        " 8-999-123-45-67 ",
        89991234567,
    ],
)
def test_accepted_forms_normalize_to_plus_seven(raw):
    assert normalize_phone(raw) == "+79991234567"


def test_landline_is_accepted():
    assert normalize_phone("8 (495) 123-45-67") == "+74951234567"


def test_normalization_is_idempotent():
    once = normalize_phone("8 999 123 45 67")
    assert once is not None
    assert normalize_phone(once) == once


@pytest.mark.parametrize(
    "raw",
    [
        "12345",
        "+89991234567",
        "+9991234567",
        "19991234567",
        "1991234567",
        "phone: 89991234567",
        "899912345678",
        # unassigned ranges
        "83001234567",
        "84001234567",
        # Kazakhstan shares the +7 country code
        "+77011234567",
        "",
        None,
        True,
        3.5,
    ],
)
def test_rejected_forms(raw):
    assert normalize_phone(raw) is None


def test_result_is_e164():
    assert normalize_phone("8.916.123.45.67") == "+79161234567"
