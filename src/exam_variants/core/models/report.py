"""
Module: report

Purpose:
    Read-model returned by the similarity analyzer. Computed on demand from a
    Generation, never edited afterwards. to_dict() produces the external
    (camelCase) document handed to the HTTP boundary.

Key Classes:
    - FlagType / Severity: Flag vocabulary
    - Flag: One rule-triggered diagnostic
    - PositionStats: Per-question position spread
    - OptionStats: Per-MC-question option spread
    - OverallSimilarity: Aggregates
    - SimilarityReport: Everything above plus recommendations

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - analysis.analyzer
    - analysis.flags
    - core.utils.serialization
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class FlagType(Enum):
    IDENTICAL_VARIANTS = "IDENTICAL_VARIANTS"
    HIGH_SIMILARITY = "HIGH_SIMILARITY"
    LOW_RANDOMIZATION = "LOW_RANDOMIZATION"


class Severity(Enum):
    WARNING = "WARNING"
    ERROR = "ERROR"

    @property
    def rank(self) -> int:
        return 1 if self is Severity.WARNING else 2


@dataclass(frozen=True)
class Flag:
    """
    Rule-triggered diagnostic.

    Attributes:
        type: Which rule fired
        severity: WARNING or ERROR
        message: One-line summary
        details: Human-readable specifics (scores, implicated questions)
        question_ids: Questions implicated by the rule (may be empty)
        dimension: "position" or "options" for per-question flags
    """

    type: FlagType
    severity: Severity
    message: str
    details: str
    question_ids: tuple[str, ...] = ()
    dimension: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
            "details": self.details,
            "questionIds": list(self.question_ids),
        }
        if self.dimension is not None:
            data["dimension"] = self.dimension
        return data


@dataclass(frozen=True)
class PositionStats:
    """Position spread of one question across all variants."""

    question_id: str
    positions: tuple[int, ...]
    average_position: float
    position_variance: float
    position_similarity: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "positions": list(self.positions),
            "averagePosition": self.average_position,
            "positionVariance": self.position_variance,
            "positionSimilarity": self.position_similarity,
        }


@dataclass(frozen=True)
class OptionStats:
    """Option-order spread of one MC question across all variants."""

    question_id: str
    permutations: tuple[tuple[int, ...], ...]
    average_permutation: tuple[float, ...]
    permutation_variance: float
    option_similarity: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "permutations": [list(p) for p in self.permutations],
            "averagePermutation": list(self.average_permutation),
            "permutationVariance": self.permutation_variance,
            "optionSimilarity": self.option_similarity,
        }


@dataclass(frozen=True)
class OverallSimilarity:
    """
    Aggregate similarity scores (all in [0, 1], 1 = identical).

    Attributes:
        question_order_similarity: Mean position_similarity over all questions
        option_order_similarity: Mean option_similarity over MC questions
            (1.0 when the exam has no MC question)
        combined_similarity: Equal-weight mean of the two, or
            question_order_similarity alone without MC questions
    """

    question_order_similarity: float
    option_order_similarity: float
    combined_similarity: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionOrderSimilarity": self.question_order_similarity,
            "optionOrderSimilarity": self.option_order_similarity,
            "combinedSimilarity": self.combined_similarity,
        }


@dataclass(frozen=True)
class SimilarityReport:
    """
    Full similarity audit of one generation.

    Example:
        >>> report = analyze(generation)
        >>> report.overall.combined_similarity
        0.31
        >>> report.has_errors
        False
    """

    exam_id: str
    generation_id: str
    total_variants: int
    question_similarity: tuple[PositionStats, ...]
    option_similarity: tuple[OptionStats, ...]
    overall: OverallSimilarity
    flags: tuple[Flag, ...]
    recommendations: tuple[str, ...]

    @property
    def has_errors(self) -> bool:
        return any(f.severity is Severity.ERROR for f in self.flags)

    @property
    def max_severity(self) -> Optional[Severity]:
        """Highest severity among flags, None when nothing fired."""
        if not self.flags:
            return None
        return max((f.severity for f in self.flags), key=lambda s: s.rank)

    def flags_of(self, flag_type: FlagType) -> tuple[Flag, ...]:
        return tuple(f for f in self.flags if f.type is flag_type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "examId": self.exam_id,
            "generationId": self.generation_id,
            "totalVariants": self.total_variants,
            "questionSimilarity": [s.to_dict() for s in self.question_similarity],
            "optionSimilarity": [s.to_dict() for s in self.option_similarity],
            "overallSimilarity": self.overall.to_dict(),
            "flags": [f.to_dict() for f in self.flags],
            "recommendations": list(self.recommendations),
        }

    def __repr__(self) -> str:
        return (
            f"SimilarityReport({self.generation_id}, variants={self.total_variants}, "
            f"combined={self.overall.combined_similarity:.3f}, flags={len(self.flags)})"
        )
