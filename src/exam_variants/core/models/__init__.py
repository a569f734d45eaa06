"""
Core Models Package

Immutable, validated data models shared by the generator and the analyzer.

All models in this package are frozen dataclasses. Calculated values
(statistics, orderings, answer keys) are properties, never stored.
"""

from .questions import QuestionType, Question, CanonicalExam
from .variants import QuestionPlacement, Variant, RenderedQuestion, Generation
from .report import (
    FlagType,
    Severity,
    Flag,
    PositionStats,
    OptionStats,
    OverallSimilarity,
    SimilarityReport,
)

__all__ = [
    "QuestionType",
    "Question",
    "CanonicalExam",
    "QuestionPlacement",
    "Variant",
    "RenderedQuestion",
    "Generation",
    "FlagType",
    "Severity",
    "Flag",
    "PositionStats",
    "OptionStats",
    "OverallSimilarity",
    "SimilarityReport",
]
