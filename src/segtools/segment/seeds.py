"""Seed detection: local maxima of the seed channel."""

from __future__ import annotations

import numpy as np
from scipy.ndimage import gaussian_filter
from skimage.feature import peak_local_max


def find_seeds(
    image: np.ndarray,
    min_distance: int = 1,
    threshold: float = 0.0,
    sigma: float = 0.0,
) -> np.ndarray:
    """Find seed points as local maxima of a 2D image.

    Args:
        image: 2D array (Y, X) of the seed channel.
        min_distance: Minimum separation between seeds in pixels.
        threshold: Seeds must be strictly brighter than this value.
        sigma: Gaussian pre-smoothing sigma; 0 disables smoothing.

    Returns:
        Int array (N, 2) of ``(row, col)`` coordinates in processing order:
        intensity descending, then row, then column ascending.
    """
    if image.ndim != 2:
        raise ValueError(f"Seed image must be 2D, got shape {image.shape}")
    values = np.asarray(image, dtype=np.float64)
    if sigma > 0:
        values = gaussian_filter(values, sigma=sigma)

    coords = peak_local_max(
        values,
        min_distance=min_distance,
        threshold_abs=threshold,
        exclude_border=False,
    )
    if coords.size == 0:
        return np.empty((0, 2), dtype=np.intp)

    intensities = values[coords[:, 0], coords[:, 1]]
    order = np.lexsort((coords[:, 1], coords[:, 0], -intensities))
    return coords[order].astype(np.intp)
