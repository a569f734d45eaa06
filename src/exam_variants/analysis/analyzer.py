"""
Module: analysis.analyzer

Purpose:
    Similarity analyzer. Audits a Generation and reports how
    distinguishable its variants are. Depends only on the final orderings
    stored in the variants, never on how they were randomized.

Key Functions:
    - analyze(): Main entry point

Key Classes:
    - MalformedVariant: Variant data that is not a valid permutation

Algorithm:
    1. Validate every variant against the exam (fail on corrupted data)
    2. Pack orderings into index-addressed arrays
       (positions[variant, question]; one permutations[variant, slot]
       matrix per MC question)
    3. Map: per-question position and option statistics
    4. Reduce: aggregates, flags, recommendations

Dependencies:
    - numpy: Ordering arrays
    - analysis.stats: Statistics
    - analysis.flags: Flag rules and recommendations
    - common.thresholds: SimilarityThresholds

Used By:
    - cli: analyze command
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

import numpy as np

from exam_variants.common.thresholds import SIMILARITY_THRESHOLDS, SimilarityThresholds
from exam_variants.core.models import Generation, SimilarityReport, Variant

from .flags import build_recommendations, evaluate_flags
from .stats import option_stats, overall_similarity, position_stats

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class MalformedVariant(ValueError):
    """Variant data violates the permutation invariants."""

    def __init__(
        self,
        message: str,
        variant_id: Optional[str] = None,
        question_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.variant_id = variant_id
        self.question_id = question_id


def analyze(
    generation: Generation,
    thresholds: SimilarityThresholds = SIMILARITY_THRESHOLDS,
    *,
    max_workers: int = 1,
) -> SimilarityReport:
    """
    Compute the similarity report for a generation.

    Args:
        generation: Generation to audit
        thresholds: Flag cut-offs
        max_workers: Threads for the per-question map step (1 = sequential).
            Output is identical for any value.

    Returns:
        SimilarityReport

    Raises:
        MalformedVariant: If the generation has no variants or questions, or
            any variant's positions/permutations are not valid permutations

    Example:
        >>> report = analyze(generate(exam, GenerationConfig(variant_count=10)))
        >>> 0.0 <= report.overall.combined_similarity <= 1.0
        True
    """
    exam = generation.exam
    validate_generation_orderings(generation)

    positions, permutations = _pack_orderings(generation)
    question_count = exam.question_count
    mc_indices = sorted(permutations)

    question_stats = _map(
        lambda qi: position_stats(exam.questions[qi].id, positions[:, qi], question_count),
        list(range(question_count)),
        max_workers,
    )
    option_stats_list = _map(
        lambda qi: option_stats(exam.questions[qi].id, permutations[qi]),
        mc_indices,
        max_workers,
    )

    overall = overall_similarity(question_stats, option_stats_list)
    all_identical = generation.unique_variants == 1
    flags = evaluate_flags(
        total_variants=generation.variant_count,
        all_identical=all_identical,
        question_stats=question_stats,
        option_stats_list=option_stats_list,
        overall=overall,
        thresholds=thresholds,
    )
    recommendations = build_recommendations(
        flags=flags,
        total_variants=generation.variant_count,
        question_count=question_count,
        option_stats_list=option_stats_list,
        overall=overall,
        thresholds=thresholds,
        duplicate_groups=generation.duplicate_variant_groups,
    )

    report = SimilarityReport(
        exam_id=exam.id,
        generation_id=generation.id,
        total_variants=generation.variant_count,
        question_similarity=tuple(question_stats),
        option_similarity=tuple(option_stats_list),
        overall=overall,
        flags=flags,
        recommendations=recommendations,
    )
    logger.info(
        f"Analyzed generation {generation.id}: combined similarity "
        f"{overall.combined_similarity:.3f}, {len(flags)} flag(s)"
    )
    for flag in flags:
        logger.debug(f"{flag.severity.value} {flag.type.value}: {flag.message}")
    return report


def validate_generation_orderings(generation: Generation) -> None:
    """
    Check every variant against the exam.

    Raises:
        MalformedVariant: On the first violation found
    """
    if generation.exam.question_count == 0:
        raise MalformedVariant(f"Generation {generation.id} has an exam with no questions")
    if not generation.variants:
        raise MalformedVariant(f"Generation {generation.id} has no variants")
    for variant in generation.variants:
        _validate_variant(generation, variant)


def _validate_variant(generation: Generation, variant: Variant) -> None:
    exam = generation.exam
    question_count = exam.question_count

    seen: Dict[str, int] = {}
    for placement in variant.placements:
        if not isinstance(placement.question_id, str) or not placement.question_id:
            raise MalformedVariant(
                f"Variant {variant.id} has invalid question id {placement.question_id!r}",
                variant_id=variant.id,
            )
        question = exam.get_question(placement.question_id)
        if question is None:
            raise MalformedVariant(
                f"Variant {variant.id} references unknown question {placement.question_id}",
                variant_id=variant.id,
                question_id=placement.question_id,
            )
        if placement.question_id in seen:
            raise MalformedVariant(
                f"Variant {variant.id} places question {placement.question_id} more than once",
                variant_id=variant.id,
                question_id=placement.question_id,
            )
        if not _is_index(placement.position, question_count):
            raise MalformedVariant(
                f"Variant {variant.id} has invalid position {placement.position!r} "
                f"for question {placement.question_id} (expected 0..{question_count - 1})",
                variant_id=variant.id,
                question_id=placement.question_id,
            )
        seen[placement.question_id] = placement.position

        permutation = placement.option_permutation
        if question.is_multiple_choice:
            if permutation is None or not _is_permutation(permutation, question.option_count):
                raise MalformedVariant(
                    f"Variant {variant.id} has invalid option permutation {permutation!r} "
                    f"for question {question.id} ({question.option_count} options)",
                    variant_id=variant.id,
                    question_id=question.id,
                )
        elif permutation is not None:
            raise MalformedVariant(
                f"Variant {variant.id} carries an option permutation for "
                f"true/false question {question.id}",
                variant_id=variant.id,
                question_id=question.id,
            )

    if len(seen) != question_count:
        missing = [q.id for q in exam.questions if q.id not in seen]
        raise MalformedVariant(
            f"Variant {variant.id} is missing questions {missing}",
            variant_id=variant.id,
        )
    if sorted(seen.values()) != list(range(question_count)):
        raise MalformedVariant(
            f"Variant {variant.id} positions are not a permutation of 0..{question_count - 1}",
            variant_id=variant.id,
        )


def _is_index(value: object, count: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < count


def _is_permutation(values: Sequence[object], count: int) -> bool:
    if not isinstance(values, (tuple, list)) or len(values) != count:
        return False
    if not all(_is_index(v, count) for v in values):
        return False
    return len(set(values)) == count


def _pack_orderings(generation: Generation) -> tuple[np.ndarray, Dict[int, np.ndarray]]:
    """
    Arrange variant orderings as index-addressed arrays.

    Returns:
        (positions, permutations) where positions has shape
        (variants, questions) and permutations maps a canonical MC question
        index to a (variants, option_count) matrix
    """
    exam = generation.exam
    variant_count = generation.variant_count
    positions = np.zeros((variant_count, exam.question_count), dtype=np.int64)
    permutations: Dict[int, np.ndarray] = {
        qi: np.zeros((variant_count, q.option_count), dtype=np.int64)
        for qi, q in enumerate(exam.questions)
        if q.is_multiple_choice
    }

    for vi, variant in enumerate(generation.variants):
        for placement in variant.placements:
            qi = exam.question_index(placement.question_id)
            positions[vi, qi] = placement.position
            if qi in permutations:
                permutations[qi][vi, :] = placement.option_permutation
    return positions, permutations


def _map(fn: Callable[[T], R], items: List[T], max_workers: int) -> List[R]:
    """Order-preserving map, threaded when max_workers > 1."""
    workers = min(max_workers, len(items))
    if workers <= 1:
        return [fn(item) for item in items]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(fn, items))
