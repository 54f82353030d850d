"""Vector similarity used by the semantic ranker."""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np


def _unit_vector(values: Sequence[float]) -> Optional[np.ndarray]:
    """Normalize ``values``, or None for a zero or non-finite vector.

    Components are divided by the largest magnitude first, so vectors with
    very large entries do not overflow while computing the norm.
    """
    vec = np.asarray(values, dtype=np.float64)
    if not np.all(np.isfinite(vec)):
        return None
    scale = float(np.max(np.abs(vec))) if vec.size else 0.0
    if scale == 0.0:
        return None
    vec = vec / scale
    return vec / np.linalg.norm(vec)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between ``a`` and ``b``.

    Returns 0.0 when either vector has zero magnitude or a non-finite
    component. Vectors must have the same length.
    """
    if len(a) != len(b):
        raise ValueError(f"Dimension mismatch: {len(a)} != {len(b)}")

    unit_a = _unit_vector(a)
    unit_b = _unit_vector(b)
    if unit_a is None or unit_b is None:
        return 0.0

    similarity = float(np.dot(unit_a, unit_b))
    if not math.isfinite(similarity):
        return 0.0
    return max(-1.0, min(1.0, similarity))
