"""Per-region summaries that fill the ``signal`` column of a detection.

A summary reduces the signal-channel plane under one region's boolean mask
to a single float. Pixels are promoted to float64 first, so sums over large
uint16 regions do not wrap.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Mapping

import numpy as np

# (signal_plane, region_mask) -> float
SignalSummary = Callable[[np.ndarray, np.ndarray], float]


def region_pixels(plane: np.ndarray, region: np.ndarray) -> np.ndarray:
    """Float64 values of ``plane`` where ``region`` is set."""
    return np.asarray(plane)[np.asarray(region, dtype=bool)].astype(np.float64, copy=False)


def mean_intensity(plane: np.ndarray, region: np.ndarray) -> float:
    return float(region_pixels(plane, region).mean())


def median_intensity(plane: np.ndarray, region: np.ndarray) -> float:
    return float(np.median(region_pixels(plane, region)))


def integrated_intensity(plane: np.ndarray, region: np.ndarray) -> float:
    """Sum of the region's pixels."""
    return float(region_pixels(plane, region).sum())


def max_intensity(plane: np.ndarray, region: np.ndarray) -> float:
    return float(region_pixels(plane, region).max())


def min_intensity(plane: np.ndarray, region: np.ndarray) -> float:
    return float(region_pixels(plane, region).min())


def std_intensity(plane: np.ndarray, region: np.ndarray) -> float:
    """Population standard deviation of the region's pixels."""
    return float(region_pixels(plane, region).std())


SIGNAL_SUMMARIES: Mapping[str, SignalSummary] = MappingProxyType({
    func.__name__: func
    for func in (
        mean_intensity,
        median_intensity,
        integrated_intensity,
        max_intensity,
        min_intensity,
        std_intensity,
    )
})


class MetricRegistry:
    """Named signal summaries a LabelProcessor can pick from.

    Every registry starts from :data:`SIGNAL_SUMMARIES`. Registering a name
    that already exists replaces it in this registry only.

    Args:
        extra: Additional summaries by name, layered over the built-ins.
    """

    def __init__(self, extra: Mapping[str, SignalSummary] | None = None) -> None:
        self._summaries: dict[str, SignalSummary] = dict(SIGNAL_SUMMARIES)
        for name, func in (extra or {}).items():
            self.register(name, func)

    def register(self, name: str, func: SignalSummary) -> None:
        """Add or replace a summary.

        Raises:
            ValueError: If ``name`` is empty.
        """
        if not name:
            raise ValueError("Metric name must not be empty")
        self._summaries[name] = func

    def get(self, name: str) -> SignalSummary:
        """The summary registered as ``name``.

        Raises:
            KeyError: If nothing is registered under ``name``.
        """
        try:
            return self._summaries[name]
        except KeyError:
            raise KeyError(
                f"Unknown metric {name!r}. Available: {self.list_metrics()}"
            ) from None

    def compute(self, name: str, plane: np.ndarray, region: np.ndarray) -> float:
        return self.get(name)(plane, region)

    def list_metrics(self) -> list[str]:
        return sorted(self._summaries)

    def __contains__(self, name: object) -> bool:
        return name in self._summaries

    def __len__(self) -> int:
        return len(self._summaries)
