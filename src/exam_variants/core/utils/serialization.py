"""
Serialization Utilities

JSON documents exchanged with the persistence layer:

- Exam document: canonical exam with schema_version
- Generation document: exam + config + variants with schema_version
- Report document: SimilarityReport.to_dict() (write-only)

Clean separation: `serialize_*` and `deserialize_*` functions; every model has
`to_dict()` / `from_dict()`; documents are validated before deserialization.
Calculated values (statistics, answer keys) are never stored.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from exam_variants.generator.config import GenerationConfig

from ..models.questions import CanonicalExam
from ..models.report import SimilarityReport
from ..models.variants import Generation, Variant
from ..schemas.validator import (
    EXAM_SCHEMA_VERSION,
    GENERATION_SCHEMA_VERSION,
    ValidationError,
    validate_exam,
    validate_generation,
)


# ─────────────────────────────────────────────────────────────────────────────
# Exam Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_exam(exam: CanonicalExam) -> dict[str, Any]:
    """
    Serialize a CanonicalExam to an exam document.

    Args:
        exam: Exam to serialize

    Returns:
        Dictionary suitable for JSON serialization
    """
    return {"schema_version": EXAM_SCHEMA_VERSION, **exam.to_dict()}


def deserialize_exam(
    data: dict[str, Any],
    *,
    validate: bool = True,
    strict: bool = False,
) -> CanonicalExam:
    """
    Deserialize a CanonicalExam from an exam document.

    Args:
        data: Dictionary from JSON
        validate: Whether to run structural validation first
        strict: Also validate against exam.schema.json

    Returns:
        CanonicalExam instance

    Raises:
        ValidationError: If the document or its content is invalid
    """
    if validate:
        validate_exam(data, strict=strict)

    try:
        return CanonicalExam.from_dict(data)
    except (KeyError, ValueError) as e:
        raise ValidationError(f"Invalid exam: {e}", errors=[str(e)]) from e


# ─────────────────────────────────────────────────────────────────────────────
# Generation Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_generation(generation: Generation) -> dict[str, Any]:
    """
    Serialize a Generation to a generation document.

    The embedded exam carries no schema_version of its own.
    """
    data: dict[str, Any] = {
        "schema_version": GENERATION_SCHEMA_VERSION,
        "id": generation.id,
    }
    if generation.created_at is not None:
        data["created_at"] = generation.created_at.isoformat()
    data["exam"] = generation.exam.to_dict()
    if generation.config is not None:
        data["config"] = generation.config.to_dict()
    data["variants"] = [v.to_dict() for v in generation.variants]
    return data


def deserialize_generation(
    data: dict[str, Any],
    *,
    validate: bool = True,
    strict: bool = False,
) -> Generation:
    """
    Deserialize a Generation from a generation document.

    Variant permutations are NOT checked here; analyze() rejects malformed
    variants with MalformedVariant.

    Args:
        data: Dictionary from JSON
        validate: Whether to run structural validation first
        strict: Also validate against generation.schema.json

    Returns:
        Generation instance

    Raises:
        ValidationError: If the document or its content is invalid
    """
    if validate:
        validate_generation(data, strict=strict)

    try:
        exam = CanonicalExam.from_dict(data["exam"])
        config = (
            GenerationConfig.from_dict(data["config"]) if data.get("config") else None
        )
        created_at = (
            datetime.fromisoformat(data["created_at"]) if data.get("created_at") else None
        )
        return Generation(
            id=data["id"],
            exam=exam,
            variants=tuple(Variant.from_dict(v) for v in data.get("variants", [])),
            config=config,
            created_at=created_at,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid generation: {e}", errors=[str(e)]) from e


# ─────────────────────────────────────────────────────────────────────────────
# Report Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_report(report: SimilarityReport) -> dict[str, Any]:
    """Serialize a SimilarityReport to its external (camelCase) shape."""
    return report.to_dict()


# ─────────────────────────────────────────────────────────────────────────────
# File Utilities
# ─────────────────────────────────────────────────────────────────────────────

def _read_json(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationError(
                f"Error parsing {path.name}: {e}",
                path=str(path),
                errors=[str(e)],
            ) from e


def _write_json(data: dict[str, Any], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")


def load_exam_json(path: Path, *, strict: bool = False) -> CanonicalExam:
    """
    Load an exam from a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValidationError: If the file is not a valid exam document
    """
    return deserialize_exam(_read_json(path), strict=strict)


def save_exam_json(exam: CanonicalExam, path: Path) -> None:
    _write_json(serialize_exam(exam), path)


def load_generation_json(path: Path, *, strict: bool = False) -> Generation:
    """
    Load a generation from a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValidationError: If the file is not a valid generation document
    """
    return deserialize_generation(_read_json(path), strict=strict)


def save_generation_json(generation: Generation, path: Path) -> None:
    _write_json(serialize_generation(generation), path)


def save_report_json(report: SimilarityReport, path: Path) -> None:
    _write_json(serialize_report(report), path)
