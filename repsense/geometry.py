"""
2D geometry helpers shared by the exercise signals.
All points are (x, y) in image pixel coordinates (y grows downward).
"""
from __future__ import annotations

import math
from typing import Iterable, Optional

import numpy as np

Point = tuple[float, float]

# Vectors shorter than this (px) are treated as zero-length.
_EPS = 1e-6


def midpoint(a: Optional[Point], b: Optional[Point]) -> Optional[Point]:
    if a is None or b is None:
        return None
    return ((a[0] + b[0]) / 2.0, (a[1] + b[1]) / 2.0)


def distance(a: Optional[Point], b: Optional[Point]) -> Optional[float]:
    if a is None or b is None:
        return None
    return math.hypot(a[0] - b[0], a[1] - b[1])


def angle_deg(
    a: Optional[Point],
    b: Optional[Point],
    c: Optional[Point],
) -> Optional[float]:
    """
    Angle at b for triangle a-b-c, in degrees (0..180).
    Returns None when a point is missing or a, c coincides with the vertex,
    so callers never see NaN.
    """
    if a is None or b is None or c is None:
        return None
    ba = (a[0] - b[0], a[1] - b[1])
    bc = (c[0] - b[0], c[1] - b[1])
    norm_ba = math.hypot(ba[0], ba[1])
    norm_bc = math.hypot(bc[0], bc[1])
    if norm_ba < _EPS or norm_bc < _EPS:
        return None
    cos_val = (ba[0] * bc[0] + ba[1] * bc[1]) / (norm_ba * norm_bc)
    cos_val = max(-1.0, min(1.0, cos_val))
    return math.degrees(math.acos(cos_val))


def mean_or_none(values: Iterable[Optional[float]]) -> Optional[float]:
    """Mean of the non-None values; None if there are none."""
    present = [v for v in values if v is not None]
    if not present:
        return None
    return float(np.mean(present))
