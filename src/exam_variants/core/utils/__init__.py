"""
Utils Package

Serialization and file utilities.
"""

from .serialization import (
    serialize_exam,
    deserialize_exam,
    serialize_generation,
    deserialize_generation,
    serialize_report,
    load_exam_json,
    save_exam_json,
    load_generation_json,
    save_generation_json,
    save_report_json,
)

__all__ = [
    "serialize_exam",
    "deserialize_exam",
    "serialize_generation",
    "deserialize_generation",
    "serialize_report",
    "load_exam_json",
    "save_exam_json",
    "load_generation_json",
    "save_generation_json",
    "save_report_json",
]
