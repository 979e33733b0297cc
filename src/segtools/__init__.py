"""segtools — seeded cell segmentation and illumination correction for time-lapse microscopy."""

from segtools.core import (
    BoundaryCrossingError,
    CorrectionFields,
    DegenerateFieldError,
    DensitySample,
    DetectionRecord,
    InsufficientBackgroundError,
    InvalidAxisError,
    LabeledArray,
    SegmentationMask,
    SegToolsError,
    ShapeMismatchError,
)
from segtools.correct import (
    FlatfieldCorrector,
    LightSourceEstimator,
    estimate_fluctuation,
    flatfield_correct,
    subtract_light_source,
)
from segtools.measure import DensityEstimator, locate_center
from segtools.segment import (
    SegmentationParams,
    Segmenter,
    ThresholdPredicate,
    build_detection_table,
    segment_cells,
)

__version__ = "0.1.0"

__all__ = [
    "BoundaryCrossingError",
    "CorrectionFields",
    "DegenerateFieldError",
    "DensityEstimator",
    "DensitySample",
    "DetectionRecord",
    "FlatfieldCorrector",
    "InsufficientBackgroundError",
    "InvalidAxisError",
    "LabeledArray",
    "LightSourceEstimator",
    "SegToolsError",
    "SegmentationMask",
    "SegmentationParams",
    "Segmenter",
    "ShapeMismatchError",
    "ThresholdPredicate",
    "build_detection_table",
    "estimate_fluctuation",
    "flatfield_correct",
    "locate_center",
    "segment_cells",
    "subtract_light_source",
]
