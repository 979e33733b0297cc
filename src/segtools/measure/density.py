"""DensityEstimator — binned Gaussian kernel density of scalar samples."""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
from numpy.typing import ArrayLike
from scipy.ndimage import gaussian_filter1d

from segtools.core.models import DensitySample

logger = logging.getLogger(__name__)


def silverman_bandwidth(samples: np.ndarray) -> float:
    """Silverman's rule of thumb, ``0.9 * min(std, IQR/1.34) * n^(-1/5)``.

    Falls back to the standard deviation when the IQR is zero. Returns 0.0
    for a single sample or identical samples.
    """
    n = samples.size
    if n < 2:
        return 0.0
    std = float(np.std(samples, ddof=1))
    q75, q25 = np.percentile(samples, [75, 25])
    iqr = float(q75 - q25)
    spread = min(std, iqr / 1.34) if iqr > 0 else std
    return 0.9 * spread * n ** (-0.2)


class DensityEstimator:
    """Fit a continuous density to a 1-D sample of pixel intensities.

    Samples are linearly binned onto a regular grid and smoothed with a
    Gaussian kernel (``scipy.ndimage.gaussian_filter1d``), which keeps the
    cost linear in the number of samples. The grid extends ``padding``
    bandwidths beyond the sample range so the density decays towards zero
    at both ends.

    Args:
        bandwidth: Kernel standard deviation in sample units. None selects
            it with Silverman's rule.
        grid_size: Number of grid points.
        padding: Grid extension beyond min/max, in bandwidths.
        min_bandwidth: Lower bound on the bandwidth; keeps degenerate
            samples (all values identical) estimable.
    """

    def __init__(
        self,
        bandwidth: float | None = None,
        grid_size: int = 2048,
        padding: float = 4.0,
        min_bandwidth: float = 1e-6,
    ) -> None:
        if bandwidth is not None and not bandwidth > 0:
            raise ValueError(f"bandwidth must be > 0 or None, got {bandwidth}")
        if grid_size < 3:
            raise ValueError(f"grid_size must be >= 3, got {grid_size}")
        if padding < 0:
            raise ValueError(f"padding must be >= 0, got {padding}")
        if not min_bandwidth > 0:
            raise ValueError(f"min_bandwidth must be > 0, got {min_bandwidth}")
        self.bandwidth = bandwidth
        self.grid_size = int(grid_size)
        self.padding = float(padding)
        self.min_bandwidth = float(min_bandwidth)

    def to_dict(self) -> dict[str, Any]:
        return {
            "bandwidth": self.bandwidth,
            "grid_size": self.grid_size,
            "padding": self.padding,
            "min_bandwidth": self.min_bandwidth,
        }

    def select_bandwidth(self, samples: np.ndarray) -> float:
        if self.bandwidth is not None:
            return max(float(self.bandwidth), self.min_bandwidth)
        return max(silverman_bandwidth(samples), self.min_bandwidth)

    def estimate(self, samples: ArrayLike) -> DensitySample:
        """Estimate the density of ``samples``.

        Args:
            samples: Scalar values of any shape (flattened).

        Returns:
            DensitySample with ``grid_size`` points and unit area.

        Raises:
            ValueError: If ``samples`` is empty or contains non-finite values.
        """
        values = np.asarray(samples, dtype=np.float64).ravel()
        if values.size == 0:
            raise ValueError("Cannot estimate a density from zero samples")
        if not np.all(np.isfinite(values)):
            raise ValueError("samples must be finite")

        bw = self.select_bandwidth(values)
        lo = float(values.min()) - self.padding * bw
        hi = float(values.max()) + self.padding * bw
        if hi <= lo:
            lo, hi = lo - bw, hi + bw
        grid = np.linspace(lo, hi, self.grid_size)
        dx = grid[1] - grid[0]

        # Linear binning: split each sample's unit weight between its two
        # neighbouring grid points.
        pos = (values - lo) / dx
        left = np.clip(np.floor(pos).astype(np.intp), 0, self.grid_size - 2)
        frac = np.clip(pos - left, 0.0, 1.0)
        counts = np.bincount(left, weights=1.0 - frac, minlength=self.grid_size)
        counts += np.bincount(left + 1, weights=frac, minlength=self.grid_size)

        density = gaussian_filter1d(counts, sigma=bw / dx, mode="constant")
        np.clip(density, 0.0, None, out=density)
        area = density.sum() * dx
        if area > 0:
            density /= area

        logger.debug(
            "KDE: n=%d, bandwidth=%.4g, grid=[%.4g, %.4g] x %d",
            values.size, bw, lo, hi, self.grid_size,
        )
        return DensitySample(x=grid, y=density, bandwidth=bw)


def estimate_density(samples: ArrayLike, **kwargs: Any) -> DensitySample:
    """Shorthand for ``DensityEstimator(**kwargs).estimate(samples)``."""
    return DensityEstimator(**kwargs).estimate(samples)
