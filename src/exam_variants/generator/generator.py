"""
Module: generator.generator

Purpose:
    Variant generation. Turns one canonical exam plus a GenerationConfig
    into an immutable Generation of independently randomized variants.

Key Functions:
    - generate(): Main entry point
    - recreate_variant(): Rebuild one seeded variant on its own

Key Classes:
    - VariantGenerator: Builds variants from a per-variant source factory

Algorithm:
    For each variant index i:
    1. Create an independent RandomSource for i
    2. Question order: Fisher-Yates over question indices, or identity
    3. Option order: Fisher-Yates per MC question, or identity
       (TF questions never carry a permutation)

Dependencies:
    - generator.config: GenerationConfig, InvalidConfiguration
    - generator.random_source: RandomSource, fisher_yates
    - core.models: CanonicalExam, Variant, Generation

Used By:
    - cli: generate command
"""

from __future__ import annotations

import hashlib
import json
import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from exam_variants.core.models import CanonicalExam, Generation, QuestionPlacement, Variant
from exam_variants.core.models.variants import (
    estimate_possible_variations,
    identity_permutation,
)

from .config import GenerationConfig, InvalidConfiguration
from .random_source import RandomSource, SourceFactory, fisher_yates, seeded_source_factory

logger = logging.getLogger(__name__)


def generate(
    exam: CanonicalExam,
    config: GenerationConfig,
    *,
    source_factory: Optional[SourceFactory] = None,
    generation_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Generation:
    """
    Generate a batch of exam variants.

    Args:
        exam: Canonical exam (never mutated)
        config: Generation configuration
        source_factory: Maps a 0-based variant index to its RandomSource.
            Defaults to SeededRandomSource seeded from config.seed.
        generation_id: Explicit id; derived from exam/config when seeded,
            random otherwise
        created_at: Timestamp to record (defaults to now, UTC)

    Returns:
        Generation with config.variant_count variants

    Raises:
        InvalidConfiguration: If the exam has no questions

    Invariants:
        - Positions in each variant form a permutation of range(question_count)
        - Each MC option_permutation is a permutation of range(option_count)

    Example:
        >>> generation = generate(exam, GenerationConfig(variant_count=3, seed=42))
        >>> len(generation.variants)
        3
    """
    generator = VariantGenerator(exam, config, source_factory=source_factory)
    variants = generator.build_all()

    if generation_id is None:
        generation_id = derive_generation_id(exam, config)

    generation = Generation(
        id=generation_id,
        exam=exam,
        variants=tuple(variants),
        config=config,
        created_at=created_at or datetime.now(timezone.utc),
    )
    logger.info(
        f"Generated {generation.variant_count} variants for exam {exam.id} "
        f"({generation.unique_variants} unique, "
        f"shuffle_questions={config.shuffle_questions}, "
        f"shuffle_answers={config.shuffle_answers})"
    )
    return generation


def recreate_variant(
    exam: CanonicalExam,
    config: GenerationConfig,
    index: int,
    *,
    source_factory: Optional[SourceFactory] = None,
) -> Variant:
    """
    Rebuild the variant at 0-based index without generating the whole batch.

    Because each variant draws from its own derived seed, the result equals
    generate(exam, config).variants[index].

    Raises:
        InvalidConfiguration: If config is unseeded (and no factory given),
            or index is out of range
    """
    if source_factory is None and not config.is_seeded:
        raise InvalidConfiguration("Cannot recreate a variant without a seed")
    if not 0 <= index < config.variant_count:
        raise InvalidConfiguration(
            f"Variant index {index} out of range for {config.variant_count} variants"
        )
    generator = VariantGenerator(exam, config, source_factory=source_factory)
    return generator.build_variant(index)


def derive_generation_id(exam: CanonicalExam, config: GenerationConfig) -> str:
    """Deterministic id for seeded configs, random id otherwise."""
    if not config.is_seeded:
        return f"gen_{uuid.uuid4().hex[:16]}"
    payload = json.dumps(
        {"exam": exam.id, "config": config.to_dict()},
        sort_keys=True,
    )
    return f"gen_{hashlib.sha1(payload.encode('utf-8')).hexdigest()[:16]}"


@dataclass
class VariantGenerator:
    """
    Variant construction for one exam/config pair.

    Attributes:
        exam: Canonical exam
        config: Generation configuration
        source_factory: Per-variant RandomSource factory
    """

    exam: CanonicalExam
    config: GenerationConfig
    source_factory: Optional[SourceFactory] = None

    _mc_flags: tuple[bool, ...] = field(init=False)

    def __post_init__(self) -> None:
        """Validate inputs and resolve the source factory."""
        if self.exam.question_count == 0:
            raise InvalidConfiguration(f"Exam {self.exam.id} has no questions")
        if self.source_factory is None:
            self.source_factory = seeded_source_factory(self.config)
        self._mc_flags = tuple(q.is_multiple_choice for q in self.exam.questions)

        if not self.config.is_randomized and self.config.variant_count > 1:
            logger.warning(
                f"Both shuffles disabled for exam {self.exam.id}: "
                f"all {self.config.variant_count} variants will be identical"
            )
        else:
            possible = estimate_possible_variations(
                self.exam, self.config.shuffle_questions, self.config.shuffle_answers
            )
            if possible < self.config.variant_count:
                logger.warning(
                    f"Only {possible} distinct variants exist for exam {self.exam.id}; "
                    f"{self.config.variant_count} requested, duplicates are certain"
                )

    def build_all(self) -> List[Variant]:
        """
        Build every variant.

        Variants are independent, so they are built on a thread pool when
        config.max_workers > 1. Output order is by index either way.
        """
        indices = range(self.config.variant_count)
        workers = min(self.config.max_workers, self.config.variant_count)
        if workers <= 1:
            return [self.build_variant(i) for i in indices]
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(self.build_variant, indices))

    def build_variant(self, index: int) -> Variant:
        """Build the variant at 0-based index from its own random source."""
        source = self.source_factory(index)
        question_order = self._draw_question_order(source)

        placements = []
        for position, canonical_index in enumerate(question_order):
            question = self.exam.questions[canonical_index]
            permutation = None
            if self._mc_flags[canonical_index]:
                permutation = self._draw_option_order(question.option_count, source)
            placements.append(QuestionPlacement(
                question_id=question.id,
                position=position,
                option_permutation=permutation,
            ))

        variant = Variant(
            id=f"variant_{index + 1}",
            number=index + 1,
            placements=tuple(placements),
            seed=self.config.variant_seed(index),
        )
        logger.debug(f"Built {variant!r}")
        return variant

    def _draw_question_order(self, source: RandomSource) -> List[int]:
        if self.config.shuffle_questions:
            return fisher_yates(self.exam.question_count, source)
        return list(range(self.exam.question_count))

    def _draw_option_order(self, option_count: int, source: RandomSource) -> tuple[int, ...]:
        if self.config.shuffle_answers:
            return tuple(fisher_yates(option_count, source))
        return identity_permutation(option_count)
