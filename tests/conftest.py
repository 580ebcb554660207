# Shared pytest fixtures
from __future__ import annotations

import io
import tempfile
from pathlib import Path

import pytest
from openpyxl import Workbook

from contact_import.config.loader import build_header_rules
from contact_import.models.config_models import HeaderRuleSet

@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("MAPPING_CONFIG_PATH", raising=False)
        yield p


@pytest.fixture()
def rules() -> HeaderRuleSet:
    return build_header_rules(
        {
            "contact_person": r"(контакт|contact\s*person)",
            "tax_id": r"^(инн|inn|tax\s*id)",
            "name": r"^(имя|название|name|company)",
            "phone": r"^(телефон|phone)",
            "region": r"^(регион|region)",
            "email": r"(e-?mail|почта)",
        }
    )


@pytest.fixture()
def sample_config_yaml() -> str:
    return """header_mappings:
  contact_person: '(контакт|contact\\s*person)'
  tax_id: '^(инн|inn)'
  name: '^(имя|название|name)'
  phone: '^(телефон|phone)'
  region: '^(регион|region)'
  email: '(e-?mail|почта)'
table: contacts
unique_per_owner: false
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def _make_csv(lines: list[str]) -> bytes:
    return ("\n".join(lines) + "\n").encode("utf-8")


def _make_xlsx(rows: list[list[object]], extra_sheets: dict[str, list[list[object]]] | None = None) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Contacts"
    for row in rows:
        ws.append(row)
    for title, sheet_rows in (extra_sheets or {}).items():
        other = wb.create_sheet(title)
        for row in sheet_rows:
            other.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


@pytest.fixture()
def make_csv():
    return _make_csv


@pytest.fixture()
def make_xlsx():
    return _make_xlsx
