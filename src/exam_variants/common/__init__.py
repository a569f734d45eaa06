"""Common utilities shared across the toolkit."""

from __future__ import annotations

from .thresholds import SimilarityThresholds, SIMILARITY_THRESHOLDS

__all__ = [
    "SimilarityThresholds",
    "SIMILARITY_THRESHOLDS",
]
