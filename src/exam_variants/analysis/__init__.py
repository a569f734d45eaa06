"""
Module: analysis

Purpose:
    Similarity analyzer. Measures how much question positions and MC option
    orders vary across the variants of a generation, and flags
    randomization that is too weak to be useful.

Key Functions:
    - analyze(): Main entry point
    - evaluate_flags() / build_recommendations(): Rule evaluation

Key Classes:
    - MalformedVariant: Corrupted variant data

Used By:
    - cli: analyze command
"""

from .analyzer import analyze, MalformedVariant, validate_generation_orderings
from .flags import evaluate_flags, build_recommendations
from .stats import (
    max_variance,
    similarity_from_variance,
    position_stats,
    option_stats,
    overall_similarity,
    NO_OPTIONS_SIMILARITY,
)

__all__ = [
    "analyze",
    "MalformedVariant",
    "validate_generation_orderings",
    "evaluate_flags",
    "build_recommendations",
    "max_variance",
    "similarity_from_variance",
    "position_stats",
    "option_stats",
    "overall_similarity",
    "NO_OPTIONS_SIMILARITY",
]
