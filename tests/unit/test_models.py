from __future__ import annotations

from pathlib import Path

import pytest

from contact_import.models import CandidateContact, ContactPage, ImportReport, RowError, UploadedFile
from contact_import.models.uploaded_file import CSV_MEDIA_TYPE, OCTET_STREAM, XLSX_MEDIA_TYPE


@pytest.mark.parametrize("total,limit,pages", [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2)])
def test_contact_page_pages(total, limit, pages):
    assert ContactPage(items=[], total=total, page=1, limit=limit).pages == pages


def test_row_error_omits_missing_name():
    assert RowError(row=2, messages=["x"]).to_dict() == {"row": 2, "messages": ["x"]}
    assert RowError(row=2, name="Acme", messages=["x"]).to_dict() == {
        "row": 2,
        "name": "Acme",
        "messages": ["x"],
    }


def test_import_report_failed_tracks_errors():
    report = ImportReport(total=2)
    report.add_error(RowError(row=2, messages=["a"]))
    report.add_error(RowError(row=3, messages=["b"]))
    assert report.failed == len(report.errors) == 2


def test_candidate_with_owner_returns_copy():
    c = CandidateContact(name="Acme", tax_id="7701020304", phone="+79991234567")
    owned = c.with_owner("user-1")
    assert owned.owner_id == "user-1"
    assert c.owner_id is None
    assert owned.as_row()["name"] == "Acme"


@pytest.mark.parametrize(
    "filename,media_type",
    [("a.csv", CSV_MEDIA_TYPE), ("a.XLSX", XLSX_MEDIA_TYPE), ("a.xls", OCTET_STREAM)],
)
def test_uploaded_file_from_path(tmp_path: Path, filename, media_type):
    path = tmp_path / filename
    path.write_bytes(b"data")
    upload = UploadedFile.from_path(path)
    assert upload.media_type == media_type
    assert upload.filename == filename
    assert upload.content == b"data"
