from __future__ import annotations

import time

import pytest

from contact_import.db.repository import InMemoryContactRepository
from contact_import.models.uploaded_file import CSV_MEDIA_TYPE, UploadedFile
from contact_import.services.importer import import_contacts
from scripts.gen_contacts_dataset import generate_contacts

"""Throughput smoke test: synthetic CSV through extract -> validate -> upsert.

Time limit is lenient for slow CI runners.
"""

ROWS = 5_000
TIME_LIMIT_SEC = 15.0


@pytest.fixture(scope="module")
def dataset_csv() -> bytes:
    return generate_contacts(ROWS, broken_ratio=0.05, seed=7).to_csv(index=False).encode("utf-8")


def test_import_throughput(dataset_csv: bytes, rules) -> None:
    repo = InMemoryContactRepository()
    upload = UploadedFile(content=dataset_csv, filename="perf.csv", media_type=CSV_MEDIA_TYPE)

    start = time.perf_counter()
    report = import_contacts(upload, "perf-user", rules, repo)
    elapsed = time.perf_counter() - start

    assert report.total == ROWS
    assert report.success + report.failed == ROWS
    assert 0 < report.failed <= int(ROWS * 0.05)
    assert repo.count() == report.success
    assert elapsed < TIME_LIMIT_SEC, f"import too slow: {elapsed:.2f}s ({ROWS / elapsed:.0f} rows/s)"
