from __future__ import annotations

import logging
from collections.abc import Sequence

from ..db.repository import ContactRepository
from ..extract.reader import FIRST_DATA_ROW, extract_rows
from ..mapping.header_mapper import map_row
from ..models.config_models import HeaderRuleSet
from ..models.contact import IDENTITY_FIELDS, UPDATABLE_FIELDS, CandidateContact
from ..models.import_report import DUPLICATE_ROW, ImportReport, RowError
from ..models.uploaded_file import UploadedFile
from ..validation.record_validator import validate_record
from .dedup import Deduplicator, composite_key

"""Import orchestration: upload -> report.

Per row, in extraction order: map headers, validate, drop in-file duplicates,
stamp the owner and queue the contact. After the loop the queue is written
with a single bulk upsert.

Row-level failures end up in the report. ExtractionError and BatchUpsertError
are not caught here: they abort the whole import and no report is returned.
"""

logger = logging.getLogger(__name__)


def conflict_fields_for(unique_per_owner: bool) -> tuple[str, ...]:
    if unique_per_owner:
        return ("owner_id",) + IDENTITY_FIELDS
    return IDENTITY_FIELDS


def build_report(
    raw_rows: Sequence[dict],
    rules: HeaderRuleSet,
    owner_id: str,
) -> tuple[ImportReport, list[CandidateContact]]:
    """Run the row pipeline without touching storage.

    Returns the report (``success`` already counts the queued contacts) and
    the contacts to persist.
    """
    report = ImportReport(total=len(raw_rows))
    dedup = Deduplicator()
    batch: list[CandidateContact] = []

    for row_number, raw in enumerate(raw_rows, start=FIRST_DATA_ROW):
        mapped = map_row(raw, rules)
        if not mapped:
            continue

        result = validate_record(mapped)
        candidate = result.contact
        if candidate is None:
            name = mapped.get("name")
            report.add_error(
                RowError(
                    row=row_number,
                    name=str(name) if name not in (None, "") else None,
                    messages=result.messages,
                )
            )
            logger.debug(f"row={row_number} rejected: {'; '.join(result.messages)}")
            continue

        if dedup.observe(candidate):
            key = composite_key(candidate)
            report.add_error(
                RowError(
                    row=row_number,
                    name=candidate.name,
                    messages=[f"duplicate record in file: {key}"],
                    error_type=DUPLICATE_ROW,
                )
            )
            logger.debug(f"row={row_number} duplicate key={key}")
            continue

        batch.append(candidate.with_owner(owner_id))

    report.success = len(batch)
    return report, batch


def import_contacts(
    upload: UploadedFile,
    owner_id: str,
    rules: HeaderRuleSet,
    repository: ContactRepository,
    *,
    unique_per_owner: bool = False,
) -> ImportReport:
    """Import one uploaded file for ``owner_id`` and return its report.

    Raises:
        ExtractionError: the upload could not be decoded
        BatchUpsertError: the bulk write failed (nothing is committed)
    """
    raw_rows = extract_rows(upload.content, upload.media_type, upload.filename)
    report, batch = build_report(raw_rows, rules, owner_id)

    if batch:
        repository.bulk_upsert(
            batch,
            conflict_fields=conflict_fields_for(unique_per_owner),
            update_fields=UPDATABLE_FIELDS,
        )

    logger.info(
        f"import file={upload.filename} owner={owner_id} total={report.total} "
        f"success={report.success} failed={report.failed}"
    )
    return report
