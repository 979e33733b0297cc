"""Segmenter — seeded, predicate-gated cell segmentation over image frames."""

from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Iterator, Sequence, Union

import numpy as np

from segtools.core.exceptions import InvalidAxisError, ShapeMismatchError
from segtools.core.labeled_array import LabeledArray
from segtools.core.models import CHANNEL_AXIS, SPATIAL_DIMS, SegmentationMask
from segtools.segment.predicates import AdmissionPredicate, as_predicate
from segtools.segment.region_growing import grow_regions
from segtools.segment.seeds import find_seeds

logger = logging.getLogger(__name__)

ImageInput = Union[LabeledArray, Sequence[LabeledArray]]
FrameCoords = tuple[tuple[str, Hashable], ...]


@dataclass(frozen=True)
class SegmentationParams:
    """Parameters for a segmentation run.

    Attributes:
        min_distance: Minimum separation between seeds in pixels.
        seed_threshold: Seeds must be strictly brighter than this value.
        seed_sigma: Gaussian smoothing of the seed channel before peak
            detection; 0 disables it.
        connectivity: Pixel neighborhood for growth, 4 or 8.
        min_area: Regions smaller than this (pixels) are discarded.
        max_radius: Maximum growth steps from a seed. None = unbounded.
    """

    min_distance: int = 1
    seed_threshold: float = 0.0
    seed_sigma: float = 0.0
    connectivity: int = 8
    min_area: int = 0
    max_radius: int | None = None

    def __post_init__(self) -> None:
        """Validate parameters."""
        if self.min_distance < 1:
            raise ValueError(f"min_distance must be >= 1, got {self.min_distance}")
        if self.seed_sigma < 0:
            raise ValueError(f"seed_sigma must be >= 0, got {self.seed_sigma}")
        if self.connectivity not in (4, 8):
            raise ValueError(f"connectivity must be 4 or 8, got {self.connectivity}")
        if self.min_area < 0:
            raise ValueError(f"min_area must be >= 0, got {self.min_area}")
        if self.max_radius is not None and self.max_radius < 0:
            raise ValueError(f"max_radius must be >= 0 or None, got {self.max_radius}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "min_distance": self.min_distance,
            "seed_threshold": self.seed_threshold,
            "seed_sigma": self.seed_sigma,
            "connectivity": self.connectivity,
            "min_area": self.min_area,
            "max_radius": self.max_radius,
        }


def iter_frames(image: ImageInput) -> Iterator[tuple[FrameCoords, LabeledArray]]:
    """Split an image into ``(coords, frame)`` pairs.

    A frame is a LabeledArray holding only the channel and spatial axes.
    Every other axis (time, position, ...) is iterated in C order; its
    labels are returned in ``coords``. A sequence of LabeledArrays is
    expanded element by element.

    Raises:
        InvalidAxisError: If the channel or a spatial axis is missing.
    """
    if not isinstance(image, LabeledArray):
        for item in image:
            if not isinstance(item, LabeledArray):
                raise TypeError(
                    f"Expected LabeledArray frames, got {type(item).__name__}"
                )
            yield from iter_frames(item)
        return

    for name in (CHANNEL_AXIS, *SPATIAL_DIMS):
        image.axis_index(name)
    frame_dims = [d for d in image.dims if d not in (CHANNEL_AXIS, *SPATIAL_DIMS)]
    sizes = image.sizes
    for positions in itertools.product(*(range(sizes[d]) for d in frame_dims)):
        coords = tuple(
            (d, image.coords(d)[i]) for d, i in zip(frame_dims, positions)
        )
        frame = image.isel(**dict(zip(frame_dims, positions)))
        yield coords, frame.transpose(CHANNEL_AXIS, *SPATIAL_DIMS)


def channel_plane(frame: LabeledArray, channel: Hashable) -> np.ndarray:
    """2D (Y, X) plane of ``channel`` from a frame."""
    return np.asarray(frame.sel(**{CHANNEL_AXIS: channel}).values)


class Segmenter:
    """Seeded region-growing segmentation of multi-channel image frames.

    For every frame, seeds are the local maxima of the seed channel. Each
    seed then grows through pixels of the segment channel that the
    admission predicate accepts (see :func:`grow_regions`).

    Args:
        params: Segmentation parameters. None uses the defaults.
    """

    def __init__(self, params: SegmentationParams | None = None) -> None:
        self.params = params or SegmentationParams()

    def segment(
        self,
        image: ImageInput,
        seed_channel: Hashable,
        segment_channel: Hashable,
        mask_predicate: AdmissionPredicate | Callable[[np.ndarray], object],
    ) -> list[SegmentationMask]:
        """Segment every frame of ``image``.

        Args:
            image: LabeledArray with ``channel``, ``y`` and ``x`` axes plus
                optional frame axes (``time``, ``position``), or a sequence
                of single-frame LabeledArrays.
            seed_channel: Channel label supplying seed points.
            segment_channel: Channel label the regions grow into.
            mask_predicate: AdmissionPredicate, or a callable wrapped in a
                :class:`FunctionPredicate`.

        Returns:
            One SegmentationMask per frame, in frame order.

        Raises:
            InvalidAxisError: If an axis or channel label is missing.
            ShapeMismatchError: If frames have inconsistent spatial shape.
        """
        start = time.monotonic()
        predicate = as_predicate(mask_predicate)

        # Validate every frame before doing any work
        planes: list[tuple[FrameCoords, np.ndarray, np.ndarray]] = []
        shape: tuple[int, ...] | None = None
        for i, (coords, frame) in enumerate(iter_frames(image)):
            seed_plane = channel_plane(frame, seed_channel)
            segment_plane = channel_plane(frame, segment_channel)
            if shape is None:
                shape = seed_plane.shape
            elif seed_plane.shape != shape:
                raise ShapeMismatchError(
                    f"Frame {i} spatial shape differs from frame 0",
                    expected=shape,
                    actual=seed_plane.shape,
                )
            planes.append((coords, seed_plane, segment_plane))

        masks: list[SegmentationMask] = []
        for i, (coords, seed_plane, segment_plane) in enumerate(planes):
            labels = self.segment_frame(seed_plane, segment_plane, predicate)
            n_cells = int(labels.max()) if labels.size else 0
            if n_cells == 0:
                logger.warning("Frame %d %s: 0 cells detected", i, dict(coords))
            else:
                logger.debug("Frame %d %s: %d cells", i, dict(coords), n_cells)
            masks.append(SegmentationMask(frame=i, coords=coords, labels=labels))

        logger.info(
            "Segmented %d frames (%d cells) in %.3fs",
            len(masks),
            sum(m.count for m in masks),
            time.monotonic() - start,
        )
        return masks

    def segment_frame(
        self,
        seed_image: np.ndarray,
        segment_image: np.ndarray,
        mask_predicate: AdmissionPredicate | Callable[[np.ndarray], object],
    ) -> np.ndarray:
        """Segment one frame given its seed and segment planes (Y, X).

        Returns:
            Int32 label image (Y, X), 0 = background.
        """
        if seed_image.shape != segment_image.shape:
            raise ShapeMismatchError(
                "Seed and segment planes differ in shape",
                expected=seed_image.shape,
                actual=segment_image.shape,
            )
        p = self.params
        seeds = find_seeds(
            seed_image,
            min_distance=p.min_distance,
            threshold=p.seed_threshold,
            sigma=p.seed_sigma,
        )
        if len(seeds) == 0:
            return np.zeros(seed_image.shape, dtype=np.int32)
        admissible = as_predicate(mask_predicate).admissible(segment_image)
        return grow_regions(
            seeds,
            admissible,
            connectivity=p.connectivity,
            min_area=p.min_area,
            max_radius=p.max_radius,
        )


def segment_cells(
    image: ImageInput,
    seed_channel: Hashable,
    segment_channel: Hashable,
    mask_predicate: AdmissionPredicate | Callable[[np.ndarray], object],
    params: SegmentationParams | None = None,
) -> list[SegmentationMask]:
    """Segment cells in every frame; see :meth:`Segmenter.segment`."""
    return Segmenter(params).segment(image, seed_channel, segment_channel, mask_predicate)
