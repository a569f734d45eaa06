"""
Module: analysis.stats

Purpose:
    Variance-based similarity statistics. Each function is a pure
    computation over one index-addressed array (one question's positions,
    or one MC question's permutation matrix); aggregates reduce the
    per-question results afterwards.

Normalization:
    similarity = 1 - min(1, variance / max_variance(k))
    max_variance(k) = (k^2 - 1) / 12, the variance of a discrete uniform
    distribution over [0, k - 1]. 1.0 means "never moves"; 0.0 means the
    spread is (at least) that of a uniform draw. When k == 1 nothing can
    move and similarity is 1.0.

Key Functions:
    - max_variance(k)
    - similarity_from_variance(variance, k)
    - position_stats(question_id, positions, question_count)
    - option_stats(question_id, permutations)
    - overall_similarity(question_stats, option_stats)

Dependencies:
    - numpy: Column means and population variances
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from exam_variants.core.models import OptionStats, OverallSimilarity, PositionStats


# option_order_similarity when the exam has no MC question
NO_OPTIONS_SIMILARITY = 1.0


def max_variance(k: int) -> float:
    """Variance of a discrete uniform distribution over [0, k - 1]."""
    return (k * k - 1) / 12.0


def similarity_from_variance(variance: float, k: int) -> float:
    """
    Map a variance to [0, 1] similarity for an axis of size k.

    Args:
        variance: Observed population variance (>= 0)
        k: Number of slots the value can occupy

    Returns:
        1.0 for no spread (or k <= 1), trending to 0.0 at uniform spread
    """
    ceiling = max_variance(k)
    if ceiling <= 0:
        return 1.0
    return 1.0 - min(1.0, variance / ceiling)


def position_stats(
    question_id: str,
    positions: np.ndarray,
    question_count: int,
) -> PositionStats:
    """
    Position statistics for one question.

    Args:
        question_id: Question being measured
        positions: 1-D int array, the question's slot in each variant
        question_count: Number of questions in the exam

    Returns:
        PositionStats with population variance and normalized similarity
    """
    values = np.asarray(positions, dtype=np.int64)
    average = float(values.mean())
    variance = float(values.var())
    return PositionStats(
        question_id=question_id,
        positions=tuple(int(p) for p in values),
        average_position=average,
        position_variance=variance,
        position_similarity=similarity_from_variance(variance, question_count),
    )


def option_stats(question_id: str, permutations: np.ndarray) -> OptionStats:
    """
    Option-order statistics for one MC question.

    Each display slot is a column; the column holds the canonical option
    index shown there in each variant. permutation_variance is the mean of
    the per-column population variances.

    Args:
        question_id: Question being measured
        permutations: 2-D int array, shape (variants, option_count)

    Returns:
        OptionStats with per-slot averages and normalized similarity
    """
    matrix = np.asarray(permutations, dtype=np.int64)
    option_count = matrix.shape[1]
    averages = matrix.mean(axis=0)
    variance = float(matrix.var(axis=0).mean())
    return OptionStats(
        question_id=question_id,
        permutations=tuple(tuple(int(i) for i in row) for row in matrix),
        average_permutation=tuple(float(a) for a in averages),
        permutation_variance=variance,
        option_similarity=similarity_from_variance(variance, option_count),
    )


def overall_similarity(
    question_stats: Sequence[PositionStats],
    option_stats_list: Sequence[OptionStats],
) -> OverallSimilarity:
    """
    Reduce per-question statistics to aggregate scores.

    Question and option order are weighted equally. Without MC questions
    option_order_similarity is NO_OPTIONS_SIMILARITY and combined_similarity
    is the question order similarity alone.
    """
    question_order = float(np.mean([s.position_similarity for s in question_stats]))
    if not option_stats_list:
        return OverallSimilarity(
            question_order_similarity=question_order,
            option_order_similarity=NO_OPTIONS_SIMILARITY,
            combined_similarity=question_order,
        )
    option_order = float(np.mean([s.option_similarity for s in option_stats_list]))
    return OverallSimilarity(
        question_order_similarity=question_order,
        option_order_similarity=option_order,
        combined_similarity=(question_order + option_order) / 2.0,
    )
