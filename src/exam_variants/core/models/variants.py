"""
Module: variants

Purpose:
    Provides the QuestionPlacement, Variant and Generation dataclasses.
    A Variant records where each canonical question lands and how its
    options are reordered; a Generation is the immutable batch of variants
    produced by one generator run.

Key Classes:
    - QuestionPlacement: One question's slot and option permutation
    - Variant: One randomized paper
    - RenderedQuestion: A placement materialized against the exam
    - Generation: Exam + ordered variants + generation statistics

Key Functions:
    - Variant.render(exam): Questions in display order with remapped answers
    - Variant.answer_key(exam): Correct answers per display slot
    - latest_generation(generations): Pick the most recent generation

Dependencies:
    - dataclasses (std)
    - datetime (std)
    - math (std)
    - .questions.CanonicalExam

Used By:
    - generator.generator
    - analysis.analyzer
    - core.utils.serialization

Note:
    Variant does NOT validate its permutation invariants on construction.
    Stored variants come from an external store and may be corrupted; the
    analyzer checks them against the exam and raises MalformedVariant.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from functools import cached_property
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from .questions import CanonicalExam, QuestionType

if TYPE_CHECKING:
    from exam_variants.generator.config import GenerationConfig


# Cap for estimated_possible_variations (factorials explode quickly)
MAX_ESTIMATED_VARIATIONS = 1_000_000

OPTION_LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def option_label(index: int) -> str:
    """Letter label for a display slot: 0 -> "A", 25 -> "Z", 26 -> "27"."""
    if 0 <= index < len(OPTION_LETTERS):
        return OPTION_LETTERS[index]
    return str(index + 1)


@dataclass(frozen=True)
class QuestionPlacement:
    """
    Where one canonical question appears in a variant.

    Attributes:
        question_id: Canonical question id
        position: 0-based slot in the variant
        option_permutation: For MC questions, canonical option index shown in
            each display slot (slot k shows option option_permutation[k]);
            None for TF questions

    Example:
        >>> p = QuestionPlacement("q1", 0, (2, 0, 1))
        >>> p.option_permutation[0]  # first option on paper is canonical #2
        2
    """

    question_id: str
    position: int
    option_permutation: Optional[tuple[int, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "question_id": self.question_id,
            "position": self.position,
        }
        if self.option_permutation is not None:
            data["option_permutation"] = list(self.option_permutation)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> QuestionPlacement:
        permutation = data.get("option_permutation")
        return cls(
            question_id=data["question_id"],
            position=data["position"],
            option_permutation=tuple(permutation) if permutation is not None else None,
        )


@dataclass(frozen=True)
class RenderedQuestion:
    """A question as printed on one variant."""

    question_id: str
    number: int  # 1-based display number
    text: str
    options: tuple[str, ...]
    correct_answer: str
    correct_option_index: Optional[int]

    @property
    def correct_label(self) -> str:
        """Answer-key label: option letter when options exist, else the answer text."""
        if self.correct_option_index is None:
            return self.correct_answer
        return option_label(self.correct_option_index)


@dataclass(frozen=True)
class Variant:
    """
    One randomized paper (immutable).

    Attributes:
        id: Variant identifier, stable within the generation
        number: 1-based variant number
        placements: QuestionPlacements ordered by position
        seed: Derived seed the variant was drawn from (None if unseeded)

    Example:
        >>> variant.question_order
        ('q3', 'q1', 'q2')
    """

    id: str
    number: int
    placements: tuple[QuestionPlacement, ...]
    seed: Optional[str] = None

    # ─────────────────────────────────────────────────────────────────────────
    # Calculated Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def question_order(self) -> tuple[str, ...]:
        """Question ids in display order."""
        return tuple(
            p.question_id for p in sorted(self.placements, key=lambda p: p.position)
        )

    @property
    def ordering_key(self) -> tuple:
        """
        Hashable full ordering: question order plus every option permutation.

        Two variants with equal keys print identically.
        """
        permutations = tuple(
            sorted(
                (p.question_id, tuple(p.option_permutation))
                for p in self.placements
                if p.option_permutation is not None
            )
        )
        return (self.question_order, permutations)

    @cached_property
    def _placement_by_id(self) -> Dict[str, QuestionPlacement]:
        return {p.question_id: p for p in self.placements}

    def placement_for(self, question_id: str) -> Optional[QuestionPlacement]:
        return self._placement_by_id.get(question_id)

    # ─────────────────────────────────────────────────────────────────────────
    # Rendering
    # ─────────────────────────────────────────────────────────────────────────

    def render(self, exam: CanonicalExam) -> List[RenderedQuestion]:
        """
        Materialize this variant against its canonical exam.

        Options are reordered by the placement's permutation and the correct
        answer is remapped to its new display slot.

        Args:
            exam: The canonical exam the variant was generated from

        Returns:
            RenderedQuestions in display order

        Raises:
            KeyError: If a placement references a question not in the exam
        """
        rendered = []
        ordered = sorted(self.placements, key=lambda p: p.position)
        for number, placement in enumerate(ordered, start=1):
            question = exam.get_question(placement.question_id)
            if question is None:
                raise KeyError(
                    f"Variant {self.id} references unknown question {placement.question_id}"
                )

            canonical_options = question.display_options
            permutation = placement.option_permutation
            if permutation is None:
                permutation = tuple(range(len(canonical_options)))
            options = tuple(canonical_options[i] for i in permutation)

            correct_index = question.correct_index
            display_index = (
                permutation.index(correct_index)
                if correct_index is not None and correct_index in permutation
                else None
            )
            correct_answer = (
                options[display_index] if display_index is not None else question.correct_answer
            )

            rendered.append(RenderedQuestion(
                question_id=question.id,
                number=number,
                text=question.text,
                options=options,
                correct_answer=correct_answer,
                correct_option_index=display_index,
            ))
        return rendered

    def answer_key(self, exam: CanonicalExam) -> List[str]:
        """
        Correct answer per display slot.

        MC questions give the option letter ("A", "B", ...); TF questions
        give the answer text ("True" / "False").
        """
        key = []
        for item in self.render(exam):
            question = exam.get_question(item.question_id)
            if question is not None and question.type is QuestionType.TRUE_FALSE:
                key.append(item.correct_answer)
            else:
                key.append(item.correct_label)
        return key

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "number": self.number}
        if self.seed is not None:
            data["seed"] = self.seed
        data["placements"] = [p.to_dict() for p in self.placements]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Variant:
        return cls(
            id=data["id"],
            number=data["number"],
            placements=tuple(
                QuestionPlacement.from_dict(p) for p in data.get("placements", [])
            ),
            seed=data.get("seed"),
        )

    def __repr__(self) -> str:
        return f"Variant({self.id}, order={list(self.question_order)})"


@dataclass(frozen=True)
class Generation:
    """
    Immutable batch of variants for one exam.

    Attributes:
        id: Generation identifier
        exam: The canonical exam the variants were drawn from
        variants: Variants ordered by number
        config: Settings used to generate (None when loaded without them)
        created_at: Creation timestamp (None when unknown)

    Invariants:
        - Variant ids are unique
        - Regeneration produces a new Generation, never edits this one
    """

    id: str
    exam: CanonicalExam
    variants: tuple[Variant, ...]
    config: Optional[GenerationConfig] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        ids = [v.id for v in self.variants]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate variant ids in generation {self.id}")

    # ─────────────────────────────────────────────────────────────────────────
    # Statistics (NEVER stored)
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def variant_count(self) -> int:
        return len(self.variants)

    @cached_property
    def unique_question_orders(self) -> int:
        return len({v.question_order for v in self.variants})

    @cached_property
    def unique_option_arrangements(self) -> int:
        return len({v.ordering_key[1] for v in self.variants})

    @cached_property
    def unique_variants(self) -> int:
        return len({v.ordering_key for v in self.variants})

    @cached_property
    def duplicate_variant_groups(self) -> tuple[tuple[str, ...], ...]:
        """
        Variant ids that print identically, grouped.

        Only groups of two or more are returned, in order of first
        appearance; ids inside a group keep generation order.
        """
        groups: Dict[tuple, List[str]] = {}
        for variant in self.variants:
            groups.setdefault(variant.ordering_key, []).append(variant.id)
        return tuple(tuple(ids) for ids in groups.values() if len(ids) > 1)

    @cached_property
    def estimated_possible_variations(self) -> int:
        """
        Theoretical number of distinct papers under the generation's config.

        Counts Q! question orders (if questions are shuffled) times k! option
        orders per MC question (if answers are shuffled), capped at
        MAX_ESTIMATED_VARIATIONS. Without a config both flags are assumed on.
        """
        shuffle_questions = getattr(self.config, "shuffle_questions", True)
        shuffle_answers = getattr(self.config, "shuffle_answers", True)
        return estimate_possible_variations(self.exam, shuffle_questions, shuffle_answers)

    def get_variant(self, variant_id: str) -> Optional[Variant]:
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        return None

    def __repr__(self) -> str:
        return (
            f"Generation({self.id}, exam={self.exam.id}, "
            f"variants={self.variant_count}, unique={self.unique_variants})"
        )


def estimate_possible_variations(
    exam: CanonicalExam,
    shuffle_questions: bool,
    shuffle_answers: bool,
) -> int:
    """
    Count distinct papers a config can produce, capped at MAX_ESTIMATED_VARIATIONS.

    Args:
        exam: Canonical exam
        shuffle_questions: Whether question order is randomized
        shuffle_answers: Whether MC option order is randomized

    Returns:
        Q! * prod(k_i!) restricted to the enabled dimensions, capped
    """
    variations = 1
    factors: List[int] = []
    if shuffle_questions:
        factors.append(exam.question_count)
    if shuffle_answers:
        factors.extend(q.option_count for q in exam.multiple_choice_questions)

    for n in factors:
        variations *= math.factorial(n)
        if variations >= MAX_ESTIMATED_VARIATIONS:
            return MAX_ESTIMATED_VARIATIONS
    return variations


def latest_generation(generations: Iterable[Generation]) -> Optional[Generation]:
    """
    Pick the most recent generation.

    Generations with a created_at timestamp win over those without; among
    equals the later one in iteration order wins.

    Returns:
        The latest Generation, or None for an empty iterable
    """
    latest: Optional[Generation] = None
    for generation in generations:
        if latest is None:
            latest = generation
            continue
        if generation.created_at is None:
            if latest.created_at is None:
                latest = generation
            continue
        if latest.created_at is None or generation.created_at >= latest.created_at:
            latest = generation
    return latest


def identity_permutation(count: int) -> tuple[int, ...]:
    return tuple(range(count))
