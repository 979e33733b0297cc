"""LightSourceEstimator — per-timepoint background level from far-field pixels.

Arc lamps and similar sources drift in total brightness over time. The
background signal scales with the delivered light, so the typical value of
pixels far from any cell tracks that drift. Background-pixel distributions
are often contaminated by misclassified cell pixels, so the level is taken
as the half-height center of a kernel density estimate rather than a mean,
median or mode.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Hashable, Sequence, Union

import numpy as np
from numpy.typing import ArrayLike
from scipy.ndimage import distance_transform_edt

from segtools.core.exceptions import (
    BoundaryCrossingError,
    InsufficientBackgroundError,
    ShapeMismatchError,
)
from segtools.core.labeled_array import LabeledArray
from segtools.core.models import SPATIAL_DIMS, TIME_AXIS, SegmentationMask
from segtools.measure.density import DensityEstimator
from segtools.measure.peaks import locate_center

logger = logging.getLogger(__name__)

MIN_BACKGROUND_PIXELS = 30

MaskStack = Union[LabeledArray, np.ndarray, Sequence[Union[SegmentationMask, ArrayLike]]]


@dataclass(frozen=True)
class LightSourceParams:
    """Parameters for light-source fluctuation estimation.

    Attributes:
        distance_threshold: Background pixels must be farther than this
            (pixels, Euclidean) from every foreground pixel.
        h: Relative peak height for the half-width center, in (0, 1).
        min_background: Minimum background pixel count per timepoint.
        time_axis: Name of the time axis.
    """

    distance_threshold: float = 10.0
    h: float = 0.5
    min_background: int = MIN_BACKGROUND_PIXELS
    time_axis: str = TIME_AXIS

    def __post_init__(self) -> None:
        """Validate parameters."""
        if self.distance_threshold < 0:
            raise ValueError(
                f"distance_threshold must be >= 0, got {self.distance_threshold}"
            )
        if not 0.0 < self.h < 1.0:
            raise ValueError(f"h must be in (0, 1), got {self.h}")
        if self.min_background < 1:
            raise ValueError(f"min_background must be >= 1, got {self.min_background}")
        if not self.time_axis:
            raise ValueError("time_axis must not be empty")

    def to_dict(self) -> dict[str, Any]:
        return {
            "distance_threshold": self.distance_threshold,
            "h": self.h,
            "min_background": self.min_background,
            "time_axis": self.time_axis,
        }


def background_mask(foreground: np.ndarray, distance_threshold: float) -> np.ndarray:
    """Pixels farther than ``distance_threshold`` from any foreground pixel.

    A frame without foreground is all background.
    """
    foreground = np.asarray(foreground, dtype=bool)
    if not foreground.any():
        return np.ones(foreground.shape, dtype=bool)
    distance = distance_transform_edt(~foreground)
    return distance > distance_threshold


def _time_stack(image: LabeledArray, time_axis: str) -> np.ndarray:
    """Image values as a (T, Y, X) array."""
    image.axis_index(time_axis)
    for dim in SPATIAL_DIMS:
        image.axis_index(dim)
    extra = [d for d in image.dims if d not in (time_axis, *SPATIAL_DIMS)]
    if extra:
        raise ShapeMismatchError(
            f"Image has unexpected axes {extra}; select a single "
            f"{'/'.join(extra)} before estimating",
            expected=(time_axis, *SPATIAL_DIMS),
            actual=image.dims,
        )
    return np.asarray(image.transpose(time_axis, *SPATIAL_DIMS).values)


def _mask_stack(
    seed_masks: MaskStack, time_axis: str, timepoints: Sequence[Hashable]
) -> list[np.ndarray]:
    """Per-timepoint boolean foreground masks, aligned to ``timepoints``.

    A LabeledArray stack is selected by time label. A SegmentationMask that
    carries a time coordinate must match the timepoint it pairs with.
    """
    if isinstance(seed_masks, LabeledArray):
        selected = seed_masks.sel(**{time_axis: list(timepoints)})
        stack = np.asarray(selected.transpose(time_axis, *SPATIAL_DIMS).values)
        return [plane != 0 for plane in stack]
    if isinstance(seed_masks, np.ndarray):
        if seed_masks.ndim != 3:
            raise ShapeMismatchError(
                "Mask array must be 3D (T, Y, X)", expected=3, actual=seed_masks.ndim
            )
        return [plane != 0 for plane in seed_masks]
    masks: list[np.ndarray] = []
    for i, mask in enumerate(seed_masks):
        if not isinstance(mask, SegmentationMask):
            masks.append(np.asarray(mask) != 0)
            continue
        coords = dict(mask.coords)
        if time_axis in coords and i < len(timepoints) and coords[time_axis] != timepoints[i]:
            raise ShapeMismatchError(
                f"Mask {i} belongs to a different timepoint",
                expected=timepoints[i],
                actual=coords[time_axis],
            )
        masks.append(mask.labels != 0)
    return masks


class LightSourceEstimator:
    """Estimate one background level per timepoint.

    Args:
        params: Estimation parameters. None uses the defaults.
        density: Density estimator for the background sample. None uses
            ``DensityEstimator()``.
    """

    def __init__(
        self,
        params: LightSourceParams | None = None,
        density: DensityEstimator | None = None,
    ) -> None:
        self.params = params or LightSourceParams()
        self.density = density or DensityEstimator()

    def estimate(self, image: LabeledArray, seed_masks: MaskStack) -> np.ndarray:
        """Background level for each timepoint of ``image``.

        Args:
            image: LabeledArray with the time axis and ``y``/``x``.
            seed_masks: One foreground mask per timepoint (nonzero =
                foreground): a LabeledArray with the same time axis, a
                (T, Y, X) array, or a sequence of arrays/SegmentationMasks.

        Returns:
            Float64 array, one value per timepoint in time-axis order.

        Raises:
            InvalidAxisError: If the time or a spatial axis is missing.
            ShapeMismatchError: If masks do not match the image.
            InsufficientBackgroundError: If a timepoint keeps fewer than
                ``min_background`` background pixels.
            BoundaryCrossingError: If a background density is not bracketed
                at the requested height.
        """
        start = time.monotonic()
        p = self.params
        stack = _time_stack(image, p.time_axis)
        timepoints = image.coords(p.time_axis)
        masks = _mask_stack(seed_masks, p.time_axis, timepoints)
        if len(masks) != len(timepoints):
            raise ShapeMismatchError(
                "Number of masks does not match number of timepoints",
                expected=len(timepoints),
                actual=len(masks),
            )

        # Select every background sample first; fail before any estimation
        samples: list[np.ndarray] = []
        for t, plane, mask in zip(timepoints, stack, masks):
            if mask.shape != plane.shape:
                raise ShapeMismatchError(
                    f"Mask at timepoint {t!r} does not match image spatial shape",
                    expected=plane.shape,
                    actual=mask.shape,
                )
            background = plane[background_mask(mask, p.distance_threshold)]
            if background.size < p.min_background:
                raise InsufficientBackgroundError(
                    background.size, p.min_background, timepoint=t
                )
            samples.append(background)

        levels = np.empty(len(samples), dtype=np.float64)
        for i, (t, background) in enumerate(zip(timepoints, samples)):
            density = self.density.estimate(background)
            try:
                levels[i] = locate_center(density.x, density.y, p.h)
            except BoundaryCrossingError as exc:
                raise BoundaryCrossingError(exc.side, timepoint=t) from exc
            logger.debug(
                "Timepoint %r: %d background pixels, level=%.4g",
                t, background.size, levels[i],
            )

        logger.info(
            "Estimated light-source levels for %d timepoints in %.3fs",
            len(levels), time.monotonic() - start,
        )
        return levels


def estimate_fluctuation(
    image: LabeledArray,
    seed_masks: MaskStack,
    distance_threshold: float,
    h: float = 0.5,
    min_background: int = MIN_BACKGROUND_PIXELS,
    density: DensityEstimator | None = None,
) -> np.ndarray:
    """Per-timepoint light-source contribution; see :class:`LightSourceEstimator`."""
    params = LightSourceParams(
        distance_threshold=distance_threshold, h=h, min_background=min_background
    )
    return LightSourceEstimator(params, density).estimate(image, seed_masks)


def subtract_light_source(
    image: LabeledArray,
    fluctuation: ArrayLike,
    axis: str = TIME_AXIS,
) -> LabeledArray:
    """Subtract one scalar per slice along ``axis`` from the whole field.

    Returns:
        New float64 LabeledArray with the input's axes and coordinates.

    Raises:
        InvalidAxisError: If ``axis`` is missing.
        ShapeMismatchError: If ``fluctuation`` length differs from the axis.
    """
    pos = image.axis_index(axis)
    levels = np.asarray(fluctuation, dtype=np.float64).ravel()
    n = image.shape[pos]
    if levels.size != n:
        raise ShapeMismatchError(
            f"Fluctuation length does not match axis {axis!r}",
            expected=n,
            actual=levels.size,
        )
    shape = [1] * image.ndim
    shape[pos] = n
    values = np.asarray(image.values, dtype=np.float64) - levels.reshape(shape)
    return image.with_data(values)
