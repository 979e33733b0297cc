"""segtools measure — peak localization, density estimation and signal metrics."""

from segtools.measure.density import DensityEstimator, estimate_density, silverman_bandwidth
from segtools.measure.metrics import MetricRegistry
from segtools.measure.peaks import half_width, locate_center

__all__ = [
    "DensityEstimator",
    "MetricRegistry",
    "estimate_density",
    "half_width",
    "locate_center",
    "silverman_bandwidth",
]
