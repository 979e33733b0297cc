"""Half-width-at-height peak localization."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike

from segtools.core.exceptions import BoundaryCrossingError

_LEVEL_RTOL = 1e-12


def _validate(x: ArrayLike, y: ArrayLike, h: float) -> tuple[np.ndarray, np.ndarray]:
    xs = np.asarray(x, dtype=np.float64).ravel()
    ys = np.asarray(y, dtype=np.float64).ravel()
    if xs.size != ys.size:
        raise ValueError(f"x and y must have equal length, got {xs.size} and {ys.size}")
    if xs.size < 3:
        raise ValueError(f"At least 3 samples are required, got {xs.size}")
    if not (np.all(np.isfinite(xs)) and np.all(np.isfinite(ys))):
        raise ValueError("x and y must be finite")
    if not 0.0 < h < 1.0:
        raise ValueError(f"h must be in (0, 1), got {h}")
    # Sort by x, ties by y, so any permutation of the pairs gives the same order
    order = np.lexsort((ys, xs))
    return xs[order], ys[order]


def _interpolate(x0: float, y0: float, x1: float, y1: float, level: float) -> float:
    if y1 == y0:
        return x0
    return x0 + (level - y0) * (x1 - x0) / (y1 - y0)


def half_width(x: ArrayLike, y: ArrayLike, h: float = 0.5) -> tuple[float, float]:
    """Locate where ``y`` crosses ``h * max(y)`` on each side of its peak.

    Starting from the global maximum, scans outward to the first sample at
    or below the level on each side and linearly interpolates between that
    sample and its inner neighbour.

    Args:
        x: Domain samples (any order).
        y: Response samples, same length as ``x``.
        h: Relative height in (0, 1).

    Returns:
        ``(left, right)`` crossing positions.

    Raises:
        ValueError: On mismatched or too-short input, ``h`` outside (0, 1),
            or no positive peak.
        BoundaryCrossingError: If either side never drops to the level.
    """
    xs, ys = _validate(x, y, h)
    i_max = int(np.argmax(ys))
    y_max = ys[i_max]
    if y_max <= 0:
        raise ValueError("y has no positive peak")
    # Compare on the peak-normalised curve so rescaling y cannot move a
    # sample that sits exactly on the level to the other side of it
    r = ys / y_max

    below = r <= h * (1.0 + _LEVEL_RTOL)
    left_hits = np.flatnonzero(below[:i_max])
    if left_hits.size == 0:
        raise BoundaryCrossingError("left")
    j = int(left_hits[-1])
    left = _interpolate(xs[j], r[j], xs[j + 1], r[j + 1], h)

    right_hits = np.flatnonzero(below[i_max + 1:])
    if right_hits.size == 0:
        raise BoundaryCrossingError("right")
    k = i_max + 1 + int(right_hits[0])
    right = _interpolate(xs[k], r[k], xs[k - 1], r[k - 1], h)

    return float(left), float(right)


def locate_center(x: ArrayLike, y: ArrayLike, h: float = 0.5) -> float:
    """Robust peak center: midpoint of the two height crossings.

    For ``h=0.5`` this is the center of the full width at half maximum.
    Unlike the mean, median or argmax it is insensitive to a heavy one-sided
    tail as long as the peak itself is well sampled. Invariant to rescaling
    ``y`` and to reordering the ``(x, y)`` pairs.
    """
    left, right = half_width(x, y, h)
    return (left + right) / 2.0
