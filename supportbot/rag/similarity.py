"""Cosine similarity between two embedding vectors."""

import math
from typing import Sequence


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return the cosine of the angle between ``a`` and ``b``.

    Raises:
        ValueError: If the vectors differ in length or hold NaN/Infinity.
    """
    if len(a) != len(b):
        raise ValueError(f"Vector length mismatch: {len(a)} != {len(b)}")

    dot = sum(x * y for x, y in zip(a, b))
    magnitude = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    if not (math.isfinite(dot) and math.isfinite(magnitude)):
        raise ValueError("Cannot score vectors holding NaN or Infinity")
    if magnitude == 0:
        return 0.0

    # Rounding can push identical vectors slightly past 1
    return max(-1.0, min(1.0, dot / magnitude))
