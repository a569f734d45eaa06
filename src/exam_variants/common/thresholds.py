"""Centralized threshold configuration.

All similarity cut-offs used when flagging a generation live here so that
tuning happens in one place.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SimilarityThresholds:
    """Thresholds for similarity flagging (all in [0, 1])."""

    # HIGH_SIMILARITY on combined_similarity
    high_similarity_error: float = 0.8  # combined > this -> ERROR
    high_similarity_warning: float = 0.6  # combined in (warning, error] -> WARNING

    # LOW_RANDOMIZATION per question
    question_position_similarity: float = 0.9  # position_similarity above this is "stuck"
    question_option_similarity: float = 0.9  # option_similarity above this is "stuck"

    # Report formatting
    percent_decimals: int = 1  # Decimals when printing scores as percentages

    def __post_init__(self) -> None:
        for name in (
            "high_similarity_error",
            "high_similarity_warning",
            "question_position_similarity",
            "question_option_similarity",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1]: {value}")
        if self.high_similarity_warning > self.high_similarity_error:
            raise ValueError(
                f"high_similarity_warning ({self.high_similarity_warning}) must be <= "
                f"high_similarity_error ({self.high_similarity_error})"
            )
        if self.percent_decimals < 0:
            raise ValueError(f"percent_decimals must be non-negative: {self.percent_decimals}")

    def format_percent(self, value: float) -> str:
        return f"{value * 100:.{self.percent_decimals}f}%"


# Global instance for easy import
SIMILARITY_THRESHOLDS = SimilarityThresholds()
