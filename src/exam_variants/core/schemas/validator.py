"""
Schema Validation Utilities

Validates exam and generation JSON documents before deserialization.

Two levels:
- Basic checks (always): required fields, types, schema version.
  Fail fast with a precise path.
- Strict (strict=True): full JSON Schema validation with jsonschema against
  the bundled *.schema.json files.

Permutation invariants are NOT checked here; they need the exam and are
enforced by the analyzer (MalformedVariant).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema


# Schema version constants
EXAM_SCHEMA_VERSION = 1
GENERATION_SCHEMA_VERSION = 1

QUESTION_TYPES = ("MULTIPLE_CHOICE", "TRUE_FALSE")


# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def validate_exam(data: dict[str, Any], *, strict: bool = False, versioned: bool = True) -> None:
    """
    Validate an exam document.

    Args:
        data: Exam dictionary to validate
        strict: If True, also validate against exam.schema.json
        versioned: If True, require schema_version (top-level documents);
            exams embedded in a generation document carry none

    Raises:
        ValidationError: If data is invalid
    """
    _require_dict(data, "")
    required = ["id", "questions"] + (["schema_version"] if versioned else [])
    _require_fields(data, required, "")

    if versioned and data.get("schema_version") != EXAM_SCHEMA_VERSION:
        raise ValidationError(
            f"Unsupported exam schema version: {data.get('schema_version')} "
            f"(expected {EXAM_SCHEMA_VERSION})",
            path="schema_version",
        )

    _require_string(data["id"], "id")

    questions = data["questions"]
    if not isinstance(questions, list):
        raise ValidationError("questions must be a list", path="questions")
    for i, question in enumerate(questions):
        _validate_question(question, f"questions[{i}]")

    if strict:
        _validate_against_schema(data, "exam")


def _validate_question(data: Any, path: str) -> None:
    """Validate a question entry."""
    _require_dict(data, path)
    _require_fields(data, ["id", "type", "correct_answer"], path)
    _require_string(data["id"], f"{path}.id")

    qtype = data["type"]
    if qtype not in QUESTION_TYPES:
        raise ValidationError(
            f"Invalid question type: {qtype!r} (expected one of {QUESTION_TYPES})",
            path=f"{path}.type",
        )

    if not isinstance(data["correct_answer"], str):
        raise ValidationError("correct_answer must be a string", path=f"{path}.correct_answer")

    options = data.get("options", [])
    if not isinstance(options, list) or not all(isinstance(o, str) for o in options):
        raise ValidationError("options must be a list of strings", path=f"{path}.options")
    if qtype == "MULTIPLE_CHOICE" and not options:
        raise ValidationError(
            "Multiple choice questions must have options",
            path=f"{path}.options",
        )

    points = data.get("points", 1)
    if isinstance(points, bool) or not isinstance(points, (int, float)) or points < 0:
        raise ValidationError(
            f"Invalid points: {points!r} (must be a non-negative number)",
            path=f"{path}.points",
        )


def validate_generation(data: dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate a generation document.

    Args:
        data: Generation dictionary to validate
        strict: If True, also validate against generation.schema.json

    Raises:
        ValidationError: If data is invalid
    """
    _require_dict(data, "")
    _require_fields(data, ["schema_version", "id", "exam", "variants"], "")

    if data.get("schema_version") != GENERATION_SCHEMA_VERSION:
        raise ValidationError(
            f"Unsupported generation schema version: {data.get('schema_version')} "
            f"(expected {GENERATION_SCHEMA_VERSION})",
            path="schema_version",
        )

    _require_string(data["id"], "id")

    try:
        validate_exam(data["exam"], versioned=False)
    except ValidationError as e:
        raise ValidationError(
            str(e),
            path=f"exam.{e.path}" if e.path else "exam",
            errors=e.errors,
        ) from e

    config = data.get("config")
    if config is not None:
        _require_dict(config, "config")
        _require_fields(config, ["variant_count"], "config")

    variants = data["variants"]
    if not isinstance(variants, list):
        raise ValidationError("variants must be a list", path="variants")
    for i, variant in enumerate(variants):
        _validate_variant(variant, f"variants[{i}]")

    if strict:
        _validate_against_schema(data, "generation")


def _validate_variant(data: Any, path: str) -> None:
    """Validate a variant entry (structure only)."""
    _require_dict(data, path)
    _require_fields(data, ["id", "number", "placements"], path)
    _require_string(data["id"], f"{path}.id")

    placements = data["placements"]
    if not isinstance(placements, list):
        raise ValidationError("placements must be a list", path=f"{path}.placements")

    for i, placement in enumerate(placements):
        item_path = f"{path}.placements[{i}]"
        _require_dict(placement, item_path)
        _require_fields(placement, ["question_id", "position"], item_path)
        _require_string(placement["question_id"], f"{item_path}.question_id")
        if not _is_int(placement["position"]):
            raise ValidationError(
                f"Invalid position: {placement['position']!r} (must be an integer)",
                path=f"{item_path}.position",
            )
        permutation = placement.get("option_permutation")
        if permutation is not None and (
            not isinstance(permutation, list) or not all(_is_int(v) for v in permutation)
        ):
            raise ValidationError(
                "option_permutation must be a list of integers",
                path=f"{item_path}.option_permutation",
            )


def _validate_against_schema(data: dict[str, Any], schema_name: str) -> None:
    schema = _load_schema(schema_name)
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as e:
        raise ValidationError(
            f"Schema validation failed: {e.message}",
            path=".".join(str(p) for p in e.absolute_path),
            errors=[e.message],
        ) from e


def _require_dict(data: Any, path: str) -> None:
    if not isinstance(data, dict):
        raise ValidationError(f"Expected an object, got {type(data).__name__}", path=path)


def _require_fields(data: dict[str, Any], required: list[str], path: str) -> None:
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            path=path,
            errors=[f"Missing field: {f}" for f in missing],
        )


def _require_string(value: Any, path: str) -> None:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"Expected a non-empty string, got {value!r}", path=path)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
