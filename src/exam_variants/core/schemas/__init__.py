"""
Schemas Package

JSON schema definitions and validation utilities.
"""

from .validator import (
    validate_exam,
    validate_generation,
    ValidationError,
    EXAM_SCHEMA_VERSION,
    GENERATION_SCHEMA_VERSION,
)

__all__ = [
    "validate_exam",
    "validate_generation",
    "ValidationError",
    "EXAM_SCHEMA_VERSION",
    "GENERATION_SCHEMA_VERSION",
]
