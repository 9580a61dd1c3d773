"""Vector math for embedding similarity."""

from typing import Optional, Sequence, Union

import numpy as np

Vector = Union[np.ndarray, Sequence[float]]


def as_vector(values: Vector) -> np.ndarray:
    return np.asarray(values, dtype=np.float64)


def magnitude(vector: Vector) -> float:
    """Euclidean norm."""
    return float(np.linalg.norm(as_vector(vector)))


def cosine_similarity(a: Vector, b: Vector, magnitude_b: Optional[float] = None) -> float:
    """Cosine of the angle between ``a`` and ``b``; 0.0 if either is all-zero.

    ``magnitude_b`` may be passed when the norm of ``b`` is precomputed.
    """
    a = as_vector(a)
    b = as_vector(b)
    if a.shape != b.shape:
        raise ValueError(f"Vector shapes differ: {a.shape} vs {b.shape}")

    norm_a = magnitude(a)
    norm_b = magnitude_b if magnitude_b else magnitude(b)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    score = float(np.dot(a, b)) / (norm_a * norm_b)
    return max(-1.0, min(1.0, score))
