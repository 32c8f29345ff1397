"""
Smoothing and calibration utilities. Pure: tuples in, tuples out, so the
detector state that holds them can stay immutable between frames.
"""
from __future__ import annotations

from typing import Optional

import numpy as np


def push_sample(
    history: tuple[float, ...],
    sample: float,
    window: int,
) -> tuple[tuple[float, ...], float]:
    """
    Append sample to a bounded history (oldest evicted past window) and
    return (new_history, moving_average).
    """
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")
    new_history = (history + (sample,))[-window:]
    return new_history, float(np.mean(new_history))


def collect_baseline(
    samples: tuple[float, ...],
    sample: float,
    capacity: int,
) -> tuple[tuple[float, ...], Optional[float]]:
    """
    Add one calibration sample. Returns (samples, baseline) where baseline is
    the arithmetic mean once capacity samples have been collected, else None.
    """
    if capacity < 1:
        raise ValueError(f"capacity must be >= 1, got {capacity}")
    new_samples = samples + (sample,)
    if len(new_samples) < capacity:
        return new_samples, None
    return new_samples, float(np.mean(new_samples))
