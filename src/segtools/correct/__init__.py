"""segtools correct — flatfield correction and light-source fluctuation."""

from segtools.correct.flatfield import FlatfieldCorrector, flatfield_correct
from segtools.correct.light_source import (
    MIN_BACKGROUND_PIXELS,
    LightSourceEstimator,
    LightSourceParams,
    background_mask,
    estimate_fluctuation,
    subtract_light_source,
)

__all__ = [
    "FlatfieldCorrector",
    "LightSourceEstimator",
    "LightSourceParams",
    "MIN_BACKGROUND_PIXELS",
    "background_mask",
    "estimate_fluctuation",
    "flatfield_correct",
    "subtract_light_source",
]
