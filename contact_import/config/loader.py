from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    CANONICAL_FIELDS,
    FIELD_ALIASES,
    DatabaseConfig,
    HeaderRule,
    HeaderRuleSet,
    ImportConfig,
)

"""Config loader.

Responsibilities:
- Load YAML config (config/import.yml by default)
- Validate against the bundled JSON schema
- Compile header patterns into an ordered, immutable rule set
- Apply defaults (table=contacts, unique_per_owner=false, page_size=1000)

Any failure here is fatal at startup; nothing is deferred to import time.
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
MAPPING_CONFIG_ENV = "MAPPING_CONFIG_PATH"


class ConfigError(Exception):
    pass


def _load_schema() -> dict[str, Any]:
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e


def _validate(data: Any, schema: dict[str, Any]) -> None:
    try:
        jsonschema.validate(data, schema)
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _read_yaml(path: Path) -> Any:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e


def build_header_rules(raw: dict[str, str]) -> HeaderRuleSet:
    """Compile a ``field -> pattern`` mapping, keeping declaration order.

    Patterns are case-insensitive and searched inside the trimmed header.
    Aliases (``taxId``, ``inn``, ``contactPerson``, ``contact``) resolve to
    canonical field names.
    """
    rules: list[HeaderRule] = []
    for key, pattern in raw.items():
        field = FIELD_ALIASES.get(key, key)
        if field not in CANONICAL_FIELDS:
            raise ConfigError(f"unknown header mapping field: {key}")
        try:
            compiled = re.compile(pattern, re.IGNORECASE)
        except re.error as e:
            raise ConfigError(f"invalid pattern for '{key}': {e}") from e
        rules.append(HeaderRule(field=field, pattern=compiled))
    return HeaderRuleSet(rules=tuple(rules))


def load_header_rules(path: Path) -> HeaderRuleSet:
    """Load a standalone key -> pattern file (JSON or YAML)."""
    data = _read_yaml(path)
    schema = _load_schema()
    fragment = dict(schema["$defs"]["header_mappings"])
    _validate(data, fragment)
    return build_header_rules(data)


def load_config(path: Path) -> ImportConfig:
    data = _read_yaml(path) or {}
    _validate(data, _load_schema())

    override = os.getenv(MAPPING_CONFIG_ENV)
    if override:
        rules = load_header_rules(Path(override))
    else:
        rules = build_header_rules(data["header_mappings"])

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    return ImportConfig(
        header_rules=rules,
        database=db,
        table=data.get("table", "contacts"),
        unique_per_owner=data.get("unique_per_owner", False),
        page_size=data.get("page_size", 1000),
    )
