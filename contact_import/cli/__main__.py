from __future__ import annotations

import argparse
import json
import os
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from contact_import.config.loader import ConfigError, load_config
from contact_import.db.batch_upsert import BatchUpsertError
from contact_import.db.postgres import PostgresContactRepository
from contact_import.db.repository import InMemoryContactRepository
from contact_import.extract.reader import ExtractionError, extract_rows
from contact_import.logging.error_log import ErrorLogBuffer
from contact_import.logging.init import log_summary, set_debug, setup_logging
from contact_import.mapping.header_mapper import map_row
from contact_import.models.config_models import ImportConfig
from contact_import.models.error_record import ErrorRecord
from contact_import.models.uploaded_file import UploadedFile
from contact_import.services.importer import import_contacts
from contact_import.services.progress import ProgressTracker
from contact_import.services.summary import RunTotals, render_summary_line

"""CLI entrypoint.

Imports CSV/XLSX contact files for one owner:
- Load .env and config/import.yml
- Connect to PostgreSQL (or keep contacts in memory with DISABLE_DB_CONNECT=1)
- Import each file, print its JSON report, buffer row errors into logs/
- Print a SUMMARY line and exit with 0 (clean), 2 (rows/files failed), 1 (fatal)
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

DEFAULT_CONFIG = Path("config/import.yml")


def _resolve_dsn(cfg: ImportConfig) -> str:
    """Connection string resolution order: DATABASE_URL / PGDSN, PG* vars, config."""
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def _db_connection(cfg: ImportConfig) -> Iterator[Any]:  # pragma: no cover (needs a live database)
    conn = psycopg2.connect(_resolve_dsn(cfg))
    conn.autocommit = False
    try:
        yield conn
    finally:
        conn.close()


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Import contacts from CSV/XLSX files")
    p.add_argument("files", nargs="+", type=Path, help="CSV or XLSX files to import")
    p.add_argument("--owner", required=True, help="Owner (user) id stamped on every contact")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG, help="Path to import.yml")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--inspect-data", action="store_true", help="Print mapped first rows of each file then exit"
    )
    return p.parse_args(argv)


def _inspect_data(cfg: ImportConfig, files: list[Path]) -> int:
    for path in files:
        print(f"FILE: {path.name}")
        try:
            upload = UploadedFile.from_path(path)
            rows = extract_rows(upload.content, upload.media_type, upload.filename)
        except (OSError, ExtractionError) as e:
            print(f"  read_error: {e}")
            continue
        headers = list(rows[0].keys()) if rows else []
        print(f"  rows={len(rows)} headers={headers}")
        for raw in rows[:3]:
            print("    mapped=", json.dumps(map_row(raw, cfg.header_rules), ensure_ascii=False, default=str))
    return EXIT_SUCCESS_ALL


def _run_imports(
    cfg: ImportConfig,
    files: list[Path],
    owner: str,
    repository: Any,
    error_log: ErrorLogBuffer,
    logger: Any,
) -> RunTotals:
    totals = RunTotals()
    with ProgressTracker(len(files)) as progress:
        for path in files:
            progress.start_file(path.name)
            try:
                upload = UploadedFile.from_path(path)
                report = import_contacts(
                    upload,
                    owner,
                    cfg.header_rules,
                    repository,
                    unique_per_owner=cfg.unique_per_owner,
                )
            except (OSError, ExtractionError, BatchUpsertError) as e:
                error_type = "PERSISTENCE_ERROR" if isinstance(e, BatchUpsertError) else "EXTRACTION_ERROR"
                logger.error(f"file={path.name} {error_type.lower()}: {e}")
                error_log.append(ErrorRecord.create(path.name, -1, error_type, [str(e)]))
                totals.add_failed_file()
            else:
                totals.add(report)
                error_log.extend([ErrorRecord.from_row_error(path.name, err) for err in report.errors])
                print(json.dumps({"file": path.name, **report.to_dict()}, ensure_ascii=False))
            progress.set_postfix(success=totals.success, failed=totals.failed)
            progress.finish_file()
    return totals


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # 空リストで呼ばれた場合に sys.argv を読まないよう None のときのみ参照
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    load_dotenv(dotenv_path=Path(".env"), override=True)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.inspect_data:
        return _inspect_data(cfg, args.files)

    start = time.perf_counter()
    error_log = ErrorLogBuffer()

    if os.getenv("DISABLE_DB_CONNECT") == "1":
        logger.info("DB connect disabled via DISABLE_DB_CONNECT=1 -> in-memory repository")
        totals = _run_imports(cfg, args.files, args.owner, InMemoryContactRepository(), error_log, logger)
    else:
        try:
            with _db_connection(cfg) as conn:
                repository = PostgresContactRepository(
                    conn,
                    cfg.table,
                    unique_per_owner=cfg.unique_per_owner,
                    page_size=cfg.page_size,
                )
                repository.ensure_schema()
                totals = _run_imports(cfg, args.files, args.owner, repository, error_log, logger)
        except psycopg2.Error as e:
            logger.error(f"database: {e}")
            return EXIT_FATAL

    log_path = error_log.flush()
    if log_path is not None:
        logger.info(f"row errors written to {log_path}")

    summary_line = render_summary_line(totals, time.perf_counter() - start)
    # log_summary が "SUMMARY " を付与するので取り除く
    log_summary(summary_line[len("SUMMARY "):])

    if totals.failed_files or totals.failed:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
