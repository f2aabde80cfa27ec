"""Tests for cosine similarity and stored-vector parsing."""

import pytest

from recall.features.knowledge.search import cosine_similarity, parse_vector


class TestCosineSimilarity:
    def test_identical_vectors(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, -2.0], [-1.0, 2.0]) == pytest.approx(-1.0)

    def test_symmetric(self):
        a, b = [0.3, -1.2, 4.0, 0.0], [2.5, 0.1, -0.7, 1.0]
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))

    def test_bounded(self):
        pairs = [
            ([1, 2, 3], [4, 5, 6]),
            ([-1, 0, 7], [3, -3, 0.5]),
            ([1e6, 1e-6], [1e-6, 1e6]),
        ]
        for a, b in pairs:
            assert -1.0 - 1e-9 <= cosine_similarity(a, b) <= 1.0 + 1e-9

    def test_scale_invariant(self):
        assert cosine_similarity([1, 2], [10, 20]) == pytest.approx(1.0)

    def test_empty_vectors(self):
        assert cosine_similarity([], []) == 0.0
        assert cosine_similarity([], [1.0]) == 0.0

    def test_zero_norm(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0

    def test_different_lengths(self):
        assert cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0]) == 0.0

    def test_returns_plain_float(self):
        assert type(cosine_similarity([1, 2], [2, 1])) is float


class TestParseVector:
    def test_valid(self):
        assert parse_vector("[0.5, 1, -2]") == [0.5, 1.0, -2.0]

    @pytest.mark.parametrize("raw", ["not json", "{\"a\": 1}", "[\"a\", 1]", "[true, 1.0]", "3.5", ""])
    def test_invalid(self, raw):
        assert parse_vector(raw) is None
