"""
schema/validator.py: JSON Schema validation for Vent YAML declarations.

Validates schema and block YAML files against the JSON Schemas shipped in
``vent/schema/schemas/``. The loader runs this on every document before it
resolves anything, so a malformed declaration surfaces as a readable issue
instead of a KeyError deep inside block expansion.

Usage:
    from vent.schema.validator import validate_schema_dir

    for issue in validate_schema_dir(Path("metadata")):
        print(issue)
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

logger = logging.getLogger(__name__)

_SCHEMAS_DIR = Path(__file__).parent / "schemas"

# Map subdirectory name → schema filename
SUBDIR_SCHEMA: dict[str, str] = {
    "blocks": "block.schema.json",
    "schemas": "schema.schema.json",
}

_SCHEMA_NAMES = ["_defs.schema.json", "block.schema.json", "schema.schema.json"]


@dataclass
class ValidationIssue:
    """A single validation finding for a declaration file."""

    file: Path
    message: str
    path: str = ""          # location within the document, e.g. "fields[0]/name"
    severity: str = "error"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file.name}{loc}: {self.message}"


def _load_schema(name: str) -> dict[str, Any]:
    with (_SCHEMAS_DIR / name).open() as fh:
        return json.load(fh)


@lru_cache(maxsize=1)
def _load_registry() -> Registry:
    """Build a Registry containing every Vent declaration schema."""
    resources = []
    for name in _SCHEMA_NAMES:
        schema = _load_schema(name)
        resources.append((schema["$id"], Resource(contents=schema, specification=DRAFT202012)))
    return Registry().with_resources(resources)


@lru_cache(maxsize=None)
def _validator(schema_name: str) -> Draft202012Validator:
    return Draft202012Validator(_load_schema(schema_name), registry=_load_registry())


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema error path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def validate_document(doc: Any, schema_name: str, file: Path) -> list[ValidationIssue]:
    """Validate an already parsed YAML document against the named schema.

    Args:
        doc: Parsed YAML content
        schema_name: Schema filename (e.g. ``"schema.schema.json"``)
        file: Source file, used for reporting only

    Returns:
        ValidationIssues, empty when the document is valid
    """
    if doc is None:
        return [ValidationIssue(file=file, message="File is empty or contains only whitespace")]

    validator = _validator(schema_name)
    return [
        ValidationIssue(file=file, message=error.message, path=_json_path(error))
        for error in sorted(validator.iter_errors(doc), key=lambda e: list(map(str, e.path)))
    ]


def validate_yaml_file(yaml_path: Path, schema_name: str) -> list[ValidationIssue]:
    """Parse and validate a single YAML file."""
    try:
        with yaml_path.open() as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return [ValidationIssue(file=yaml_path, message=f"YAML parse error: {exc}")]
    return validate_document(raw, schema_name, yaml_path)


def validate_schema_dir(metadata_dir: Path) -> list[ValidationIssue]:
    """
    Validate every YAML file under ``schemas/`` and ``blocks/``.

    Returns:
        A flat list of issues across all files. Empty means all files are valid.
    """
    metadata_dir = Path(metadata_dir)
    if not metadata_dir.is_dir():
        return [
            ValidationIssue(
                file=metadata_dir,
                message=f"Metadata directory does not exist: {metadata_dir}",
            )
        ]

    issues: list[ValidationIssue] = []
    for subdir, schema_name in SUBDIR_SCHEMA.items():
        target = metadata_dir / subdir
        if not target.is_dir():
            continue
        for yaml_file in sorted(target.glob("*.yaml")):
            file_issues = validate_yaml_file(yaml_file, schema_name)
            for issue in file_issues:
                logger.debug("%s", issue)
            issues.extend(file_issues)
    return issues
