"""Check registry loading and validation using JSON Schema."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

import jsonschema
import yaml

from traffic_light.config import DEFAULT_CHECKS_FILE
from traffic_light.errors import InvalidConfigurationError
from traffic_light.models import Check, ValidationResult

SCHEMAS_DIR = Path(__file__).parent / "schemas"
CHECKS_SCHEMA = "checks.schema.json"

INVALID_CHECK_MESSAGE = (
    "Each check must have a valid fact reference, threshold annotation key "
    "and operator annotation key."
)


@dataclass
class RegistryValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


def _load_schema(schema_name: str) -> dict:
    schema_path = SCHEMAS_DIR / schema_name
    with open(schema_path) as f:
        return json.load(f)


def _load_yaml(path: Path) -> dict:
    with open(path) as f:
        return yaml.safe_load(f) or {}


def validate_check(check: Check) -> ValidationResult:
    """A check is usable when both fact reference parts and both annotation keys are set."""
    valid = (
        len(check.fact_reference) == 2
        and all(part for part in check.fact_reference)
        and bool(check.threshold_annotation_key)
        and bool(check.operator_annotation_key)
    )
    if valid:
        return ValidationResult(valid=True)
    return ValidationResult(valid=False, message=INVALID_CHECK_MESSAGE)


def _schema_errors(data: dict) -> list[str]:
    validator = jsonschema.Draft202012Validator(_load_schema(CHECKS_SCHEMA))
    return [
        f"{error.json_path}: {error.message}"
        for error in sorted(validator.iter_errors(data), key=lambda e: e.json_path)
    ]


def load_checks(path: Path | str | None = None) -> list[Check]:
    """Load the check registry, raising InvalidConfigurationError on schema violations."""
    checks_file = Path(path) if path else DEFAULT_CHECKS_FILE
    data = _load_yaml(checks_file)
    errors = _schema_errors(data)
    if errors:
        raise InvalidConfigurationError(f"{checks_file}: {errors[0]}")
    return [Check(**entry) for entry in data["checks"]]


def validate_checks_file(path: Path | str) -> RegistryValidationResult:
    """Report every problem in a registry file instead of raising."""
    checks_file = Path(path)
    if not checks_file.exists():
        return RegistryValidationResult(valid=False, errors=[f"{checks_file} not found"])

    data = _load_yaml(checks_file)
    errors = _schema_errors(data)
    if errors:
        return RegistryValidationResult(valid=False, errors=errors)

    seen: set[str] = set()
    for entry in data["checks"]:
        check = Check(**entry)
        if check.id in seen:
            errors.append(f"{check.id}: duplicate check id")
        seen.add(check.id)
        result = validate_check(check)
        if not result.valid:
            errors.append(f"{check.id}: {result.message}")

    return RegistryValidationResult(valid=len(errors) == 0, errors=errors)
