"""
Unit tests for variant generation.

Scripted random sources make the drawn permutations exact; seeded runs are
checked for reproducibility and permutation invariants.
"""

import logging
from datetime import datetime, timezone

import pytest

from conftest import ScriptedSource, mc, tf
from exam_variants.core.models import CanonicalExam
from exam_variants.generator import (
    GenerationConfig,
    InvalidConfiguration,
    VariantGenerator,
    generate,
    recreate_variant,
)


@pytest.fixture
def three_question_exam():
    """m1 (MC, 4 options), t1 (TF), m2 (MC, 3 options)."""
    return CanonicalExam(
        id="exam-3",
        questions=(
            mc("m1", ["a", "b", "c", "d"], "b"),
            tf("t1", "False"),
            mc("m2", ["x", "y", "z"], "z"),
        ),
    )


def _zero_factory(index):
    return ScriptedSource()


class TestGenerateWithScriptedSource:
    """Exact results with an always-zero source."""

    def test_generate_when_zero_source_then_known_orderings(self, three_question_exam):
        """
        Question order draws first, then MC permutations in display order.

        fisher_yates(3) with zeros -> [1, 2, 0]: t1, m2, m1.
        m2 (3 options) -> (1, 2, 0); m1 (4 options) -> (1, 2, 3, 0).
        """
        # Arrange
        config = GenerationConfig(variant_count=2)

        # Act
        generation = generate(three_question_exam, config, source_factory=_zero_factory)

        # Assert
        variant = generation.variants[0]
        assert variant.question_order == ("t1", "m2", "m1")
        assert variant.placement_for("t1").option_permutation is None
        assert variant.placement_for("m2").option_permutation == (1, 2, 0)
        assert variant.placement_for("m1").option_permutation == (1, 2, 3, 0)
        assert generation.unique_variants == 1

    def test_generate_when_zero_source_then_answer_key_remapped(self, three_question_exam):
        """Correct answers follow their options to the new slots."""
        # Arrange
        config = GenerationConfig(variant_count=1)

        # Act
        variant = generate(three_question_exam, config, source_factory=_zero_factory).variants[0]

        # Assert - m2 display (y, z, x): z is B; m1 display (b, c, d, a): b is A
        assert variant.answer_key(three_question_exam) == ["False", "B", "A"]

    def test_generate_when_both_shuffles_then_draw_sequence(self, three_question_exam):
        """Bounds requested from the source, in order."""
        # Arrange
        sources = []

        def factory(index):
            sources.append(ScriptedSource())
            return sources[-1]

        # Act
        generate(three_question_exam, GenerationConfig(variant_count=1), source_factory=factory)

        # Assert
        assert sources[0].bounds == [3, 2, 3, 2, 4, 3, 2]

    def test_generate_when_questions_fixed_then_only_option_draws(self, three_question_exam):
        # Arrange
        source = ScriptedSource()
        config = GenerationConfig(variant_count=1, shuffle_questions=False)

        # Act
        variant = generate(three_question_exam, config, source_factory=lambda i: source).variants[0]

        # Assert
        assert variant.question_order == ("m1", "t1", "m2")
        assert source.bounds == [4, 3, 2, 3, 2]

    def test_generate_when_answers_fixed_then_identity_permutations(self, three_question_exam):
        """MC questions still carry an (identity) permutation."""
        # Arrange
        config = GenerationConfig(variant_count=1, shuffle_answers=False)

        # Act
        variant = generate(three_question_exam, config, source_factory=_zero_factory).variants[0]

        # Assert
        assert variant.placement_for("m1").option_permutation == (0, 1, 2, 3)
        assert variant.placement_for("m2").option_permutation == (0, 1, 2)

    def test_generate_when_nothing_shuffled_then_no_draws(self, three_question_exam):
        source = ScriptedSource()
        config = GenerationConfig(variant_count=3, shuffle_questions=False, shuffle_answers=False)

        generation = generate(three_question_exam, config, source_factory=lambda i: source)

        assert source.bounds == []
        assert all(v.question_order == ("m1", "t1", "m2") for v in generation.variants)

    def test_generate_when_factory_given_then_called_per_index(self, three_question_exam):
        indices = []

        def factory(index):
            indices.append(index)
            return ScriptedSource()

        generate(three_question_exam, GenerationConfig(variant_count=4), source_factory=factory)

        assert indices == [0, 1, 2, 3]


class TestGenerateSeeded:
    """Seeded generation: reproducibility and invariants."""

    def test_generate_when_same_seed_then_identical_variants(self, sample_exam):
        config = GenerationConfig(variant_count=10, seed=42)

        first = generate(sample_exam, config)
        second = generate(sample_exam, config)

        assert first.variants == second.variants
        assert first.id == second.id

    def test_generate_when_different_seeds_then_variants_differ(self, sample_exam):
        first = generate(sample_exam, GenerationConfig(variant_count=10, seed=1))
        second = generate(sample_exam, GenerationConfig(variant_count=10, seed=2))

        assert first.variants != second.variants
        assert first.id != second.id

    def test_generate_when_seeded_then_ids_numbers_and_seeds(self, sample_exam):
        generation = generate(sample_exam, GenerationConfig(variant_count=3, seed="s"))

        assert [v.id for v in generation.variants] == ["variant_1", "variant_2", "variant_3"]
        assert [v.number for v in generation.variants] == [1, 2, 3]
        assert [v.seed for v in generation.variants] == ["s_v0", "s_v1", "s_v2"]
        assert generation.id.startswith("gen_")

    @pytest.mark.parametrize("seed", [0, 7, 42, "exam"])
    @pytest.mark.parametrize("shuffle_questions,shuffle_answers", [
        (True, True), (True, False), (False, True),
    ])
    def test_generate_when_any_config_then_orderings_are_permutations(
        self, sample_exam, seed, shuffle_questions, shuffle_answers
    ):
        """Positions and MC permutations always cover their full range."""
        # Arrange
        config = GenerationConfig(
            variant_count=8,
            shuffle_questions=shuffle_questions,
            shuffle_answers=shuffle_answers,
            seed=seed,
        )

        # Act
        generation = generate(sample_exam, config)

        # Assert
        for variant in generation.variants:
            positions = sorted(p.position for p in variant.placements)
            assert positions == list(range(sample_exam.question_count))
            for question in sample_exam.questions:
                permutation = variant.placement_for(question.id).option_permutation
                if question.is_multiple_choice:
                    assert sorted(permutation) == list(range(question.option_count))
                else:
                    assert permutation is None

    def test_generate_when_parallel_then_same_as_sequential(self, sample_exam):
        sequential = generate(sample_exam, GenerationConfig(variant_count=12, seed=5))
        parallel = generate(sample_exam, GenerationConfig(variant_count=12, seed=5, max_workers=4))

        assert parallel.variants == sequential.variants

    def test_generate_when_exam_given_then_exam_unchanged(self, sample_exam):
        before = sample_exam.to_dict()

        generation = generate(sample_exam, GenerationConfig(variant_count=5, seed=3))

        assert sample_exam.to_dict() == before
        assert generation.exam is sample_exam

    def test_generate_when_explicit_id_and_timestamp_then_used(self, sample_exam):
        stamp = datetime(2025, 1, 2, tzinfo=timezone.utc)

        generation = generate(
            sample_exam,
            GenerationConfig(variant_count=1),
            generation_id="gen-custom",
            created_at=stamp,
        )

        assert generation.id == "gen-custom"
        assert generation.created_at == stamp

    def test_generate_when_single_variant_then_allowed(self, sample_exam):
        generation = generate(sample_exam, GenerationConfig(variant_count=1, seed=1))

        assert generation.variant_count == 1


class TestGenerateRejects:
    """Invalid requests."""

    def test_generate_when_exam_has_no_questions_then_raises(self):
        exam = CanonicalExam("empty", ())

        with pytest.raises(InvalidConfiguration, match="has no questions"):
            generate(exam, GenerationConfig(variant_count=2))

    def test_generator_when_both_shuffles_off_then_warns(self, sample_exam, caplog):
        config = GenerationConfig(variant_count=3, shuffle_questions=False, shuffle_answers=False)

        with caplog.at_level(logging.WARNING, logger="exam_variants.generator.generator"):
            VariantGenerator(sample_exam, config)

        assert "all 3 variants will be identical" in caplog.text

    def test_generator_when_too_few_possible_orders_then_warns(self, caplog):
        exam = CanonicalExam("tiny", (tf("t1"), tf("t2")))
        config = GenerationConfig(variant_count=5, shuffle_answers=False)

        with caplog.at_level(logging.WARNING, logger="exam_variants.generator.generator"):
            VariantGenerator(exam, config)

        assert "Only 2 distinct variants exist" in caplog.text


class TestRecreateVariant:
    """Tests for recreate_variant."""

    def test_recreate_variant_when_seeded_then_matches_batch(self, sample_exam):
        config = GenerationConfig(variant_count=6, seed=42)
        generation = generate(sample_exam, config)

        for index in range(6):
            assert recreate_variant(sample_exam, config, index) == generation.variants[index]

    def test_recreate_variant_when_unseeded_then_raises(self, sample_exam):
        with pytest.raises(InvalidConfiguration, match="without a seed"):
            recreate_variant(sample_exam, GenerationConfig(variant_count=2), 0)

    def test_recreate_variant_when_index_out_of_range_then_raises(self, sample_exam):
        with pytest.raises(InvalidConfiguration, match="out of range"):
            recreate_variant(sample_exam, GenerationConfig(variant_count=2, seed=1), 2)

    def test_recreate_variant_when_factory_given_then_seed_not_required(self, sample_exam):
        variant = recreate_variant(
            sample_exam,
            GenerationConfig(variant_count=2),
            1,
            source_factory=_zero_factory,
        )

        assert variant.number == 2
