"""
Vector Math Tests

cosine_similarity and average_vectors are the only numeric primitives the
ranking path uses, so their edge cases are pinned down here.

Run:
----
    pytest recommender/tests/test_similarity.py -v
"""

import math

import pytest

from recommender.errors import DimensionMismatch, EmptyInput
from recommender.utils import average_vectors, cosine_similarity


class TestCosineSimilarity:
    def test_identical_vectors_score_one(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors_score_zero(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_opposite_vectors_score_minus_one(self):
        assert cosine_similarity([1.0, 1.0], [-1.0, -1.0]) == pytest.approx(-1.0)

    def test_scale_invariant(self):
        a = [0.3, -0.2, 0.9]
        b = [0.1, 0.4, 0.2]
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity([x * 10 for x in a], b))

    def test_symmetric(self):
        a = [0.3, -0.2, 0.9]
        b = [0.1, 0.4, 0.2]
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))

    def test_zero_vector_returns_zero(self):
        result = cosine_similarity([0.0, 0.0, 0.0], [1.0, 2.0, 3.0])
        assert result == 0.0
        assert not math.isnan(result)

    def test_both_zero_vectors_return_zero(self):
        assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0

    def test_length_mismatch_raises(self):
        with pytest.raises(DimensionMismatch) as exc_info:
            cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])
        assert exc_info.value.expected == 2
        assert exc_info.value.actual == 3

    def test_returns_python_float(self):
        assert type(cosine_similarity([1.0, 2.0], [2.0, 1.0])) is float


class TestAverageVectors:
    def test_single_vector_is_itself(self):
        assert average_vectors([[0.5, -1.0, 2.0]]) == pytest.approx([0.5, -1.0, 2.0])

    def test_elementwise_mean(self):
        assert average_vectors([[1.0, 2.0], [3.0, 4.0]]) == pytest.approx([2.0, 3.0])

    def test_three_members(self):
        result = average_vectors([[1.0, 0.0], [0.0, 1.0], [2.0, 2.0]])
        assert result == pytest.approx([1.0, 1.0])

    def test_empty_raises(self):
        with pytest.raises(EmptyInput):
            average_vectors([])

    def test_ragged_raises(self):
        with pytest.raises(DimensionMismatch):
            average_vectors([[1.0, 2.0], [1.0]])

    def test_does_not_mutate_input(self):
        vectors = [[1.0, 2.0], [3.0, 4.0]]
        average_vectors(vectors)
        assert vectors == [[1.0, 2.0], [3.0, 4.0]]

    def test_returns_list_of_floats(self):
        result = average_vectors([[1, 2], [3, 4]])
        assert isinstance(result, list)
        assert all(type(x) is float for x in result)
