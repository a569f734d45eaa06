"""
Module: analysis.flags

Purpose:
    Rule-based flagging and recommendations. Pure functions of the
    computed statistics and the thresholds; the same statistics always
    produce the same flags and the same text.

Rules:
    - IDENTICAL_VARIANTS (ERROR): two or more variants, all identical
    - HIGH_SIMILARITY: ERROR above high_similarity_error,
      WARNING in (high_similarity_warning, high_similarity_error]
    - LOW_RANDOMIZATION (WARNING): per question and dimension, similarity
      above the per-question threshold while combined similarity is not
      above high_similarity_error. Dimensions that cannot move (one
      question, one option) are never implicated.

Key Functions:
    - evaluate_flags(): Ordered tuple of Flags
    - build_recommendations(): Ordered, de-duplicated advice strings
"""

from __future__ import annotations

from typing import List, Sequence

from exam_variants.common.thresholds import SimilarityThresholds
from exam_variants.core.models import (
    Flag,
    FlagType,
    OptionStats,
    OverallSimilarity,
    PositionStats,
    Severity,
)


POSITION = "position"
OPTIONS = "options"


def evaluate_flags(
    total_variants: int,
    all_identical: bool,
    question_stats: Sequence[PositionStats],
    option_stats_list: Sequence[OptionStats],
    overall: OverallSimilarity,
    thresholds: SimilarityThresholds,
) -> tuple[Flag, ...]:
    """
    Apply every flag rule.

    Args:
        total_variants: Number of variants in the generation
        all_identical: True when every variant has the same full ordering
        question_stats: Per-question position statistics (canonical order)
        option_stats_list: Per-MC-question option statistics (canonical order)
        overall: Aggregate similarities
        thresholds: Cut-offs

    Returns:
        Flags ordered IDENTICAL_VARIANTS, HIGH_SIMILARITY, LOW_RANDOMIZATION
    """
    pct = thresholds.format_percent
    flags: List[Flag] = []

    if total_variants >= 2 and all_identical:
        flags.append(Flag(
            type=FlagType.IDENTICAL_VARIANTS,
            severity=Severity.ERROR,
            message="Identical variants detected",
            details=(
                f"All {total_variants} variants have the same question order and "
                f"answer option arrangement."
            ),
        ))

    combined = overall.combined_similarity
    if combined > thresholds.high_similarity_error:
        severity = Severity.ERROR
    elif combined > thresholds.high_similarity_warning:
        severity = Severity.WARNING
    else:
        severity = None

    if severity is not None:
        details = (
            f"Combined similarity score: {pct(combined)} "
            f"(question order {pct(overall.question_order_similarity)}, "
            f"option order {pct(overall.option_order_similarity)})"
        )
        if total_variants == 1:
            details += "; a single variant cannot differ from itself"
        flags.append(Flag(
            type=FlagType.HIGH_SIMILARITY,
            severity=severity,
            message="High similarity detected between exam variants",
            details=details,
        ))

    if combined <= thresholds.high_similarity_error:
        flags.extend(_low_randomization_flags(question_stats, option_stats_list, thresholds))

    return tuple(flags)


def _low_randomization_flags(
    question_stats: Sequence[PositionStats],
    option_stats_list: Sequence[OptionStats],
    thresholds: SimilarityThresholds,
) -> List[Flag]:
    pct = thresholds.format_percent
    options_by_id = {s.question_id: s for s in option_stats_list}
    can_move = len(question_stats) > 1
    flags: List[Flag] = []

    for stats in question_stats:
        if can_move and stats.position_similarity > thresholds.question_position_similarity:
            flags.append(Flag(
                type=FlagType.LOW_RANDOMIZATION,
                severity=Severity.WARNING,
                message=f"Question {stats.question_id} keeps nearly the same position across variants",
                details=(
                    f"Position similarity: {pct(stats.position_similarity)} "
                    f"(average position {stats.average_position:.2f})"
                ),
                question_ids=(stats.question_id,),
                dimension=POSITION,
            ))

        option = options_by_id.get(stats.question_id)
        if (
            option is not None
            and len(option.average_permutation) > 1
            and option.option_similarity > thresholds.question_option_similarity
        ):
            flags.append(Flag(
                type=FlagType.LOW_RANDOMIZATION,
                severity=Severity.WARNING,
                message=f"Answer options of question {stats.question_id} keep nearly the same order across variants",
                details=f"Option similarity: {pct(option.option_similarity)}",
                question_ids=(stats.question_id,),
                dimension=OPTIONS,
            ))
    return flags


def build_recommendations(
    flags: Sequence[Flag],
    total_variants: int,
    question_count: int,
    option_stats_list: Sequence[OptionStats],
    overall: OverallSimilarity,
    thresholds: SimilarityThresholds,
    duplicate_groups: Sequence[Sequence[str]] = (),
) -> tuple[str, ...]:
    """
    Derive advice from the flags that fired.

    Text depends only on flag types/severities, implicated question ids,
    duplicate variant ids and aggregate scores, so a report always
    reproduces the same advice.

    Args:
        duplicate_groups: Ids of variants that print identically, grouped
            (ignored when every variant is identical)
    """
    recommendations: List[str] = []
    types = {f.type for f in flags}

    if FlagType.IDENTICAL_VARIANTS in types:
        recommendations.append(
            "Enable question order and/or answer option randomization; "
            "every variant is currently identical"
        )
        recommendations.append("Regenerate the variants after changing the randomization settings")

    for flag in flags:
        if flag.type is not FlagType.HIGH_SIMILARITY:
            continue
        if total_variants == 1:
            recommendations.append(
                "Generate at least two variants; a single paper gives no protection against copying"
            )
        if (
            question_count > 1
            and overall.question_order_similarity > thresholds.question_position_similarity
        ):
            recommendations.append("Enable or increase question order randomization")
        movable_options = any(len(s.average_permutation) > 1 for s in option_stats_list)
        if (
            movable_options
            and overall.option_order_similarity > thresholds.question_option_similarity
        ):
            recommendations.append("Enable or increase answer option randomization")
        if flag.severity is Severity.ERROR:
            recommendations.append(
                "Regenerate with stronger randomization before distributing these variants"
            )
        else:
            recommendations.append(
                "Consider generating more variants or enabling additional randomization "
                "to reduce similarity"
            )

    stuck_positions = _implicated(flags, POSITION)
    if stuck_positions:
        recommendations.append(
            f"Review the placement of questions {', '.join(stuck_positions)}: "
            f"they hold nearly the same position in every variant"
        )
    stuck_options = _implicated(flags, OPTIONS)
    if stuck_options:
        recommendations.append(
            f"Review the answer options of questions {', '.join(stuck_options)}: "
            f"they appear in nearly the same order in every variant"
        )

    if FlagType.IDENTICAL_VARIANTS not in types:
        for group in duplicate_groups:
            recommendations.append(
                f"Variants {', '.join(group)} are identical: "
                f"regenerate so every candidate receives a distinct paper"
            )

    if not flags and not duplicate_groups:
        recommendations.append("Exam variants show good randomization")
        recommendations.append("Continue with current randomization settings")

    return tuple(dict.fromkeys(recommendations))


def _implicated(flags: Sequence[Flag], dimension: str) -> List[str]:
    """Question ids of LOW_RANDOMIZATION flags for one dimension."""
    ids: List[str] = []
    for flag in flags:
        if flag.type is FlagType.LOW_RANDOMIZATION and flag.dimension == dimension:
            ids.extend(qid for qid in flag.question_ids if qid not in ids)
    return ids
