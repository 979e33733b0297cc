"""segtools core — LabeledArray, data models and exceptions."""

from segtools.core.exceptions import (
    BoundaryCrossingError,
    DegenerateFieldError,
    InsufficientBackgroundError,
    InvalidAxisError,
    SegToolsError,
    ShapeMismatchError,
)
from segtools.core.labeled_array import Axis, LabeledArray
from segtools.core.models import (
    CHANNEL_AXIS,
    SPATIAL_DIMS,
    TIME_AXIS,
    X_AXIS,
    Y_AXIS,
    CorrectionFields,
    DensitySample,
    DetectionRecord,
    SegmentationMask,
)

__all__ = [
    "Axis",
    "LabeledArray",
    "SegmentationMask",
    "DetectionRecord",
    "DensitySample",
    "CorrectionFields",
    "CHANNEL_AXIS",
    "SPATIAL_DIMS",
    "TIME_AXIS",
    "X_AXIS",
    "Y_AXIS",
    "SegToolsError",
    "InvalidAxisError",
    "ShapeMismatchError",
    "DegenerateFieldError",
    "BoundaryCrossingError",
    "InsufficientBackgroundError",
]
