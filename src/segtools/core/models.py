"""Data models for the segtools core module."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, Union

import numpy as np

from segtools.core.labeled_array import LabeledArray

Y_AXIS = "y"
X_AXIS = "x"
SPATIAL_DIMS = (Y_AXIS, X_AXIS)
CHANNEL_AXIS = "channel"
TIME_AXIS = "time"

FieldLike = Union[LabeledArray, np.ndarray]


def _readonly(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


@dataclass(frozen=True)
class SegmentationMask:
    """Label image for one frame.

    Attributes:
        frame: 0-based frame ordinal in segmentation order.
        coords: ``(axis name, label)`` pairs locating the frame in the
            source image, e.g. ``(("time", 3),)``.
        labels: Read-only int32 array (Y, X); 0 = background, 1..K = cells.
    """

    frame: int
    coords: tuple[tuple[str, Hashable], ...]
    labels: np.ndarray = field(repr=False, compare=False)

    def __post_init__(self) -> None:
        labels = np.asarray(self.labels)
        if labels.ndim != 2:
            raise ValueError(f"labels must be 2D (Y, X), got shape {labels.shape}")
        object.__setattr__(self, "labels", _readonly(labels.astype(np.int32, copy=False)))
        object.__setattr__(self, "coords", tuple(tuple(c) for c in self.coords))

    @property
    def count(self) -> int:
        """Number of labelled cells."""
        return int(self.labels.max()) if self.labels.size else 0

    @property
    def foreground(self) -> np.ndarray:
        return self.labels > 0

    @property
    def shape(self) -> tuple[int, int]:
        return self.labels.shape

    def coord(self, name: str) -> Hashable:
        """Coordinate label of this frame on axis ``name``."""
        for axis, label in self.coords:
            if axis == name:
                return label
        raise KeyError(name)


@dataclass(frozen=True)
class DetectionRecord:
    """One detected cell in one frame (no identity across frames)."""

    frame: int
    label: int
    x: float
    y: float
    signal: float
    area: int


@dataclass(frozen=True, eq=False)
class DensitySample:
    """A density evaluated on a grid.

    Attributes:
        x: Strictly increasing grid positions.
        y: Non-negative density values, same length as ``x``.
        bandwidth: Kernel bandwidth used for the estimate.
    """

    x: np.ndarray = field(repr=False)
    y: np.ndarray = field(repr=False)
    bandwidth: float = 0.0

    def __post_init__(self) -> None:
        x = np.asarray(self.x, dtype=np.float64)
        y = np.asarray(self.y, dtype=np.float64)
        if x.ndim != 1 or y.ndim != 1:
            raise ValueError("x and y must be 1D")
        if x.shape != y.shape:
            raise ValueError(f"x and y must have equal length, got {x.size} and {y.size}")
        if x.size > 1 and not np.all(np.diff(x) > 0):
            raise ValueError("x must be strictly increasing")
        if np.any(y < 0):
            raise ValueError("y must be non-negative")
        object.__setattr__(self, "x", _readonly(x))
        object.__setattr__(self, "y", _readonly(y))

    def __len__(self) -> int:
        return int(self.x.size)


@dataclass(frozen=True, eq=False)
class CorrectionFields:
    """Static darkfield/flatfield pair shared across one correction run."""

    darkfield: FieldLike = field(repr=False)
    flatfield: FieldLike = field(repr=False)
