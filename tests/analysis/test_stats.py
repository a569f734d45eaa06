"""
Unit tests for variance-based similarity statistics.
"""

import numpy as np
import pytest

from exam_variants.analysis import (
    NO_OPTIONS_SIMILARITY,
    max_variance,
    option_stats,
    overall_similarity,
    position_stats,
    similarity_from_variance,
)


class TestNormalization:
    """Tests for max_variance and similarity_from_variance."""

    @pytest.mark.parametrize("k,expected", [(1, 0.0), (2, 0.25), (3, 8 / 12), (4, 1.25)])
    def test_max_variance_when_k_then_uniform_variance(self, k, expected):
        assert max_variance(k) == pytest.approx(expected)

    def test_similarity_when_no_spread_then_one(self):
        assert similarity_from_variance(0.0, 5) == 1.0

    def test_similarity_when_single_slot_then_one(self):
        """Nothing can move when k == 1."""
        assert similarity_from_variance(0.0, 1) == 1.0

    def test_similarity_when_spread_exceeds_uniform_then_clamped_to_zero(self):
        assert similarity_from_variance(1.0, 3) == 0.0

    def test_similarity_when_half_uniform_then_half(self):
        assert similarity_from_variance(0.625, 4) == pytest.approx(0.5)


class TestPositionStats:
    """Tests for position_stats."""

    def test_position_stats_when_positions_vary_then_population_variance(self):
        # Arrange - positions 0 and 1 out of 3 slots
        positions = np.array([0, 1])

        # Act
        stats = position_stats("q1", positions, 3)

        # Assert
        assert stats.positions == (0, 1)
        assert stats.average_position == pytest.approx(0.5)
        assert stats.position_variance == pytest.approx(0.25)
        assert stats.position_similarity == pytest.approx(0.625)

    def test_position_stats_when_single_question_then_similarity_one(self):
        stats = position_stats("q1", np.array([0, 0, 0]), 1)

        assert stats.position_variance == 0.0
        assert stats.position_similarity == 1.0

    def test_position_stats_when_built_then_plain_python_types(self):
        """Report values are JSON-ready Python numbers, not numpy scalars."""
        stats = position_stats("q1", np.array([2, 0]), 3)

        assert type(stats.average_position) is float
        assert type(stats.positions[0]) is int


class TestOptionStats:
    """Tests for option_stats."""

    def test_option_stats_when_reversed_then_mean_of_column_variances(self):
        """
        Columns [0,2], [1,1], [2,0] have variances 1, 0, 1; mean 2/3
        equals max_variance(3), so similarity is 0.
        """
        # Arrange
        matrix = np.array([[0, 1, 2], [2, 1, 0]])

        # Act
        stats = option_stats("m1", matrix)

        # Assert
        assert stats.permutations == ((0, 1, 2), (2, 1, 0))
        assert stats.average_permutation == pytest.approx((1.0, 1.0, 1.0))
        assert stats.permutation_variance == pytest.approx(2 / 3)
        assert stats.option_similarity == pytest.approx(0.0)

    def test_option_stats_when_identical_rows_then_similarity_one(self):
        stats = option_stats("m1", np.array([[0, 1, 2, 3]] * 4))

        assert stats.permutation_variance == 0.0
        assert stats.option_similarity == 1.0

    def test_option_stats_when_single_option_then_similarity_one(self):
        stats = option_stats("m1", np.array([[0], [0]]))

        assert stats.option_similarity == 1.0


class TestOverallSimilarity:
    """Tests for overall_similarity."""

    def test_overall_when_mc_present_then_equal_weight(self):
        # Arrange
        questions = [position_stats("q1", np.array([0, 1]), 2), position_stats("q2", np.array([1, 0]), 2)]
        options = [option_stats("q1", np.array([[0, 1], [0, 1]]))]

        # Act
        overall = overall_similarity(questions, options)

        # Assert - positions: variance 0.25 / 0.25 -> 0; options: 1
        assert overall.question_order_similarity == pytest.approx(0.0)
        assert overall.option_order_similarity == pytest.approx(1.0)
        assert overall.combined_similarity == pytest.approx(0.5)

    def test_overall_when_no_mc_then_default_and_question_order_only(self):
        questions = [position_stats("q1", np.array([0, 1]), 2)]

        overall = overall_similarity(questions, [])

        assert overall.option_order_similarity == NO_OPTIONS_SIMILARITY == 1.0
        assert overall.combined_similarity == overall.question_order_similarity
