from __future__ import annotations

import random

import pytest

from contact_import.validation.tax_id import (
    CHECK_DIGIT_WEIGHTS,
    check_digit,
    is_valid_tax_id,
    normalize_tax_id,
)


def _with_check_digits(prefix: list[int], length: int) -> str:
    digits = prefix + [0] * (length - len(prefix))
    for index, weights in CHECK_DIGIT_WEIGHTS[length]:
        digits[index] = check_digit(digits[:index], weights)
    return "".join(str(d) for d in digits)


def test_known_legal_entity_ids_are_valid():
    assert is_valid_tax_id("7701020304")
    assert is_valid_tax_id("7707083893")


def test_known_individual_id_is_valid():
    assert is_valid_tax_id("500100732259")


def test_check_digit_formula_for_10_digits():
    # 7*2 + 7*4 + 0*10 + 1*3 + 0*5 + 2*9 + 0*4 + 3*6 + 0*8 = 81; 81 % 11 % 10 = 4
    assert check_digit([7, 7, 0, 1, 0, 2, 0, 3, 0], CHECK_DIGIT_WEIGHTS[10][0][1]) == 4


@pytest.mark.parametrize("seed", range(20))
def test_generated_10_digit_ids_pass_and_any_check_digit_mutation_fails(seed):
    rng = random.Random(seed)
    tax_id = _with_check_digits([rng.randint(0, 9) for _ in range(9)], 10)
    assert is_valid_tax_id(tax_id)
    for d in "0123456789":
        if d == tax_id[9]:
            continue
        assert not is_valid_tax_id(tax_id[:9] + d)


@pytest.mark.parametrize("seed", range(20))
def test_generated_12_digit_ids_need_both_check_digits(seed):
    rng = random.Random(seed)
    tax_id = _with_check_digits([rng.randint(0, 9) for _ in range(10)], 12)
    assert is_valid_tax_id(tax_id)
    for d in "0123456789":
        if d != tax_id[10]:
            assert not is_valid_tax_id(tax_id[:10] + d + tax_id[11])
        if d != tax_id[11]:
            assert not is_valid_tax_id(tax_id[:11] + d)


@pytest.mark.parametrize(
    "value",
    ["", "123", "77010203045", "7701O20304", "77010203041234", "７７０１０２０３０４"],
)
def test_wrong_format_is_rejected(value):
    assert not is_valid_tax_id(value)


def test_normalize_tax_id():
    assert normalize_tax_id("  7701020304 ") == "7701020304"
    assert normalize_tax_id(7701020304) == "7701020304"
    assert normalize_tax_id(7701020304.0) == "7701020304"
    assert normalize_tax_id(True) is True
    assert normalize_tax_id(None) is None
