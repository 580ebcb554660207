#!/usr/bin/env python3
"""Synthetic contact dataset generator.

Writes a CSV or XLSX file (chosen by the output suffix) with a header row and
contact rows using Russian headers. Tax ids carry valid check digits; a
configurable share of rows is broken (bad check digit / missing name) or
duplicated so the importer's report has something to say.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

from contact_import.validation.tax_id import CHECK_DIGIT_WEIGHTS, check_digit

HEADERS = ["Название", "ИНН", "Телефон", "Регион", "Контактное лицо", "E-mail"]
REGIONS = ["Москва", "Санкт-Петербург", "Казань", "Новосибирск", "Екатеринбург"]
PEOPLE = ["Иванов Иван", "Петрова Анна", "Сидоров Павел", "Белкин Дмитрий"]


def make_tax_id(rng: np.random.Generator, length: int = 10) -> str:
    """Random tax id of ``length`` digits with correct check digits."""
    digits = [int(d) for d in rng.integers(0, 10, size=length)]
    for index, weights in CHECK_DIGIT_WEIGHTS[length]:
        digits[index] = check_digit(digits[:index], weights)
    return "".join(str(d) for d in digits)


def generate_contacts(rows: int, broken_ratio: float = 0.05, seed: int = 42) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    records: list[list[object]] = []
    for i in range(rows):
        length = 12 if i % 7 == 0 else 10
        tax_id = make_tax_id(rng, length)
        phone = f"8{rng.integers(900, 1000)}{rng.integers(0, 10_000_000):07d}"
        records.append([
            f"ООО Компания {i + 1}",
            tax_id,
            phone,
            REGIONS[i % len(REGIONS)],
            PEOPLE[i % len(PEOPLE)],
            f"office{i + 1}@romashka-{i + 1}.ru",
        ])

    n_broken = int(rows * broken_ratio)
    for idx in rng.choice(rows, size=n_broken, replace=False) if n_broken else []:
        row = records[int(idx)]
        if idx % 3 == 0:
            row[0] = ""
        elif idx % 3 == 1:
            tax_id = str(row[1])
            row[1] = tax_id[:-1] + str((int(tax_id[-1]) + 1) % 10)
        elif idx > 0:
            records[int(idx)] = list(records[int(idx) - 1])

    return pd.DataFrame(records, columns=HEADERS)


def write_dataset(df: pd.DataFrame, output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    if output.suffix.lower() == ".csv":
        df.to_csv(output, index=False, encoding="utf-8")
    else:
        df.to_excel(output, index=False, engine="openpyxl")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic contact files for the importer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s contacts.csv --rows 1000
  %(prog)s contacts.xlsx --rows 5000 --broken-ratio 0.1 --seed 7
        """,
    )
    parser.add_argument("output", type=Path, help="Output .csv or .xlsx path")
    parser.add_argument("--rows", type=int, default=1000, help="Number of contact rows (default: 1000)")
    parser.add_argument(
        "--broken-ratio", type=float, default=0.05, help="Share of broken/duplicate rows (default: 0.05)"
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if not 0 <= args.broken_ratio <= 1:
        print("Error: --broken-ratio must be within [0, 1]", file=sys.stderr)
        return 1
    if args.output.suffix.lower() not in {".csv", ".xlsx"}:
        print("Error: output must end with .csv or .xlsx", file=sys.stderr)
        return 1

    df = generate_contacts(args.rows, args.broken_ratio, args.seed)
    write_dataset(df, args.output)
    print(f"Created {args.output}: {len(df):,} rows")
    return 0


if __name__ == "__main__":
    sys.exit(main())
