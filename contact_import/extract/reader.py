from __future__ import annotations

import csv
import io
from typing import Any

import numpy as np
import pandas as pd

from ..models.uploaded_file import CSV_MEDIA_TYPE

"""Upload reader: bytes + declared media type -> ordered raw rows.

- text/csv: first non-blank line is the header row; quoted fields may contain
  commas and newlines; an unterminated quote is malformed. Short rows are padded
  with "", fields past the header (trailing commas included) are kept under
  positional keys "_<index>" so they never shift values onto other headers;
  rows whose fields are all blank after trim are dropped.
- spreadsheet (media type containing "spreadsheet" or a .xlsx filename): first
  sheet only, unset cells default to "", rows with only blank/None cells are
  dropped. Numbers and booleans count as content, including 0 and False.
- anything else: no rows (callers get an empty report, not an error).

A malformed upload raises ExtractionError for the whole file.
"""

__all__ = [
    "ExtractionError",
    "extract_rows",
    "read_csv_rows",
    "read_spreadsheet_rows",
    "FIRST_DATA_ROW",
]


class ExtractionError(Exception):
    """Raised when an upload cannot be decoded."""


# Header is row 1, so the first data row is reported as row 2
FIRST_DATA_ROW = 2


def _has_content(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, float):
        # NaN は空セル扱い
        return not pd.isna(value)
    return True


def _clean_cell(value: Any) -> Any:
    """Convert pandas/numpy scalars into plain Python values."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if pd.isna(value):
        return ""
    if isinstance(value, np.generic):
        return value.item()
    return value


def _collect_rows(df: pd.DataFrame) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for record in df.to_dict(orient="records"):
        cleaned = {str(k): _clean_cell(v) for k, v in record.items()}
        if not any(_has_content(v) for v in cleaned.values()):
            continue
        rows.append(cleaned)
    return rows


def _column_key(header: str, index: int) -> str:
    # 空の見出しと見出しのない余剰列は位置で名付ける
    return header if header.strip() else f"_{index}"


def read_csv_rows(content: bytes) -> list[dict[str, Any]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ExtractionError(f"csv is not valid utf-8: {e}") from e

    # strict: an unterminated quote is an error, not a silently merged row
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    rows: list[dict[str, Any]] = []
    try:
        header = next((fields for fields in reader if any(f.strip() for f in fields)), None)
        if header is None:
            return []
        keys = [_column_key(h, i) for i, h in enumerate(header)]

        for fields in reader:
            # short rows are padded, extra trailing fields keep their position key
            row = {key: fields[i] if i < len(fields) else "" for i, key in enumerate(keys)}
            for i in range(len(keys), len(fields)):
                row[f"_{i}"] = fields[i]
            if any(_has_content(v) for v in row.values()):
                rows.append(row)
    except csv.Error as e:
        raise ExtractionError(f"malformed csv at line {reader.line_num}: {e}") from e

    return rows


def read_spreadsheet_rows(content: bytes) -> list[dict[str, Any]]:
    try:
        df = pd.read_excel(io.BytesIO(content), sheet_name=0, dtype=object, engine="openpyxl")
    except Exception as e:  # openpyxl raises a wide range of errors for corrupt input
        raise ExtractionError(f"unreadable spreadsheet: {e}") from e

    return _collect_rows(df)


def extract_rows(content: bytes, media_type: str, filename: str = "") -> list[dict[str, Any]]:
    """Decode an upload into raw rows in file order."""
    if media_type == CSV_MEDIA_TYPE:
        return read_csv_rows(content)
    if "spreadsheet" in media_type or filename.lower().endswith(".xlsx"):
        return read_spreadsheet_rows(content)
    return []
