"""Unit tests for cosine similarity."""

import numpy as np
import pytest

from fieldvoice.matching.similarity import cosine_similarity, magnitude


@pytest.mark.unit
class TestCosineSimilarity:
    """Test cases for cosine_similarity."""

    def test_identical_vectors(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 1.0], [-1.0, -1.0]) == pytest.approx(-1.0)

    def test_zero_vector(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0
        assert cosine_similarity([1.0, 1.0], [0.0, 0.0]) == 0.0

    def test_precomputed_magnitude(self):
        b = np.array([3.0, 4.0])
        assert cosine_similarity([3.0, 4.0], b, magnitude(b)) == pytest.approx(1.0)

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])

    def test_magnitude(self):
        assert magnitude([3.0, 4.0]) == 5.0

    def test_symmetric_and_bounded(self):
        rng = np.random.default_rng(7)
        for _ in range(50):
            a = rng.normal(size=16) * rng.uniform(0.01, 100)
            b = rng.normal(size=16) * rng.uniform(0.01, 100)
            score = cosine_similarity(a, b)
            assert score == cosine_similarity(b, a)
            assert -1.0 <= score <= 1.0

    def test_scaled_vector_stays_within_bounds(self):
        a = np.array([1e-3, 3e-3, 7e-3])
        assert cosine_similarity(a, a * 1e6) <= 1.0
        assert cosine_similarity(a, -a * 1e6) >= -1.0
