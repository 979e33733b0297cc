"""segtools segment — seeded region-growing segmentation and detection tables."""

from segtools.segment._engine import (
    SegmentationParams,
    Segmenter,
    iter_frames,
    segment_cells,
)
from segtools.segment.label_processor import (
    DETECTION_COLUMNS,
    LabelProcessor,
    build_detection_table,
    extract_detections,
)
from segtools.segment.predicates import (
    AdmissionPredicate,
    CompositePredicate,
    FunctionPredicate,
    MeanThresholdPredicate,
    ThresholdPredicate,
    as_predicate,
)
from segtools.segment.region_growing import grow_regions
from segtools.segment.seeds import find_seeds

__all__ = [
    "AdmissionPredicate",
    "CompositePredicate",
    "DETECTION_COLUMNS",
    "FunctionPredicate",
    "LabelProcessor",
    "MeanThresholdPredicate",
    "SegmentationParams",
    "Segmenter",
    "ThresholdPredicate",
    "as_predicate",
    "build_detection_table",
    "extract_detections",
    "find_seeds",
    "grow_regions",
    "iter_frames",
    "segment_cells",
]
