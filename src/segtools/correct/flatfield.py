"""FlatfieldCorrector — darkfield subtraction and flatfield normalization."""

from __future__ import annotations

import logging
from typing import Hashable, Union

import numpy as np

from segtools.core.exceptions import DegenerateFieldError, InvalidAxisError, ShapeMismatchError
from segtools.core.labeled_array import LabeledArray
from segtools.core.models import SPATIAL_DIMS, CorrectionFields, FieldLike

logger = logging.getLogger(__name__)

AxisSelector = Union[None, str, tuple[str, Hashable]]


def _field_plane(field: FieldLike, name: str) -> np.ndarray:
    """A correction field as a float64 (Y, X) array."""
    if isinstance(field, LabeledArray):
        for dim in SPATIAL_DIMS:
            field.axis_index(dim)
        extra = [d for d in field.dims if d not in SPATIAL_DIMS]
        if extra:
            raise ShapeMismatchError(
                f"{name} must only have spatial axes {SPATIAL_DIMS}",
                expected=SPATIAL_DIMS,
                actual=field.dims,
            )
        values = field.transpose(*SPATIAL_DIMS).values
    else:
        values = np.asarray(field)
    if values.ndim != 2:
        raise ShapeMismatchError(f"{name} must be 2D (Y, X)", expected=2, actual=values.ndim)
    return values.astype(np.float64)


def _rescale(quotient: np.ndarray, lo: float, hi: float) -> np.ndarray:
    """Linearly map ``quotient`` onto ``[lo, hi]``."""
    q_lo = float(quotient.min())
    q_hi = float(quotient.max())
    if q_hi > q_lo:
        return (quotient - q_lo) * ((hi - lo) / (q_hi - q_lo)) + lo
    return np.full_like(quotient, lo)


class FlatfieldCorrector:
    """Apply darkfield/flatfield correction to LabeledArrays.

    For each corrected block: subtract the darkfield, clamp at zero,
    divide by the flatfield, then linearly rescale the quotient back to the
    block's original min/max so absolute thresholds stay meaningful. The
    result has the input's axes and coordinates with float64 values.

    Args:
        darkfield: Sensor offset image (Y, X).
        flatfield: Illumination/sensitivity image (Y, X), strictly positive.

    Raises:
        ShapeMismatchError: If the fields are not 2D or differ in shape.
        DegenerateFieldError: If the flatfield has entries <= 0 or non-finite.
    """

    def __init__(self, darkfield: FieldLike, flatfield: FieldLike) -> None:
        dark = _field_plane(darkfield, "darkfield")
        flat = _field_plane(flatfield, "flatfield")
        if dark.shape != flat.shape:
            raise ShapeMismatchError(
                "darkfield and flatfield differ in shape",
                expected=flat.shape,
                actual=dark.shape,
            )
        bad = int(np.count_nonzero(~(np.isfinite(flat) & (flat > 0))))
        if bad:
            raise DegenerateFieldError(bad)
        if not np.all(np.isfinite(dark)):
            raise ValueError("darkfield must be finite")
        dark.flags.writeable = False
        flat.flags.writeable = False
        self.darkfield = dark
        self.flatfield = flat

    @classmethod
    def from_fields(cls, fields: CorrectionFields) -> FlatfieldCorrector:
        return cls(fields.darkfield, fields.flatfield)

    @property
    def shape(self) -> tuple[int, int]:
        return self.flatfield.shape

    def _check_shape(self, values: np.ndarray) -> None:
        if values.shape[-2:] != self.shape:
            raise ShapeMismatchError(
                "Image spatial shape does not match correction fields",
                expected=self.shape,
                actual=values.shape[-2:],
            )

    def normalize(self, block: np.ndarray) -> np.ndarray:
        """Dark-subtracted, zero-clamped, flat-divided values (not rescaled)."""
        values = np.asarray(block, dtype=np.float64)
        self._check_shape(values)
        return np.clip(values - self.darkfield, 0.0, None) / self.flatfield

    def correct_block(self, block: np.ndarray) -> np.ndarray:
        """Correct an array whose last two axes are (Y, X).

        The min/max used for rescaling are taken over the whole block.
        """
        values = np.asarray(block, dtype=np.float64)
        self._check_shape(values)
        if values.size == 0:
            return values.copy()
        quotient = self.normalize(values)
        return _rescale(quotient, float(values.min()), float(values.max()))

    def correct(self, image: LabeledArray, axis: AxisSelector = None) -> LabeledArray:
        """Correct ``image`` and return a new LabeledArray.

        Args:
            image: LabeledArray with ``y`` and ``x`` axes.
            axis: What to correct.

                - ``None``: the whole image as one block.
                - An axis name (e.g. ``"channel"``): every slice along that
                  axis is corrected and rescaled independently.
                - ``(name, label)`` (e.g. ``("channel", "DAPI")``): only that
                  slice is corrected; other slices are returned unchanged.

        Raises:
            InvalidAxisError: If a spatial axis, ``axis`` or its label is
                missing, or ``axis`` names a spatial axis.
            ShapeMismatchError: If the image's (Y, X) shape does not match
                the fields.
        """
        for dim in SPATIAL_DIMS:
            image.axis_index(dim)
        outer = [d for d in image.dims if d not in SPATIAL_DIMS]
        order = outer + list(SPATIAL_DIMS)
        aligned = image.transpose(*order)
        spatial_shape = aligned.shape[-2:]
        if spatial_shape != self.shape:
            raise ShapeMismatchError(
                "Image spatial shape does not match correction fields",
                expected=self.shape,
                actual=spatial_shape,
            )

        values = np.asarray(aligned.values, dtype=np.float64)
        if axis is None:
            corrected = self.correct_block(values)
        else:
            if isinstance(axis, tuple):
                name, label = axis
            else:
                name, label = axis, None
            if name in SPATIAL_DIMS:
                raise InvalidAxisError(name)
            pos = aligned.axis_index(name)
            corrected = values.copy()
            if label is None:
                for i in range(aligned.shape[pos]):
                    index = (slice(None),) * pos + (i,)
                    corrected[index] = self.correct_block(values[index])
            else:
                i = aligned.index_of(name, label)
                index = (slice(None),) * pos + (i,)
                corrected[index] = self.correct_block(values[index])

        logger.debug("Flatfield corrected %r along %r", image, axis)
        back = [order.index(d) for d in image.dims]
        return image.with_data(corrected.transpose(back))


def flatfield_correct(
    image: LabeledArray,
    axis: AxisSelector,
    darkfield: FieldLike,
    flatfield: FieldLike,
) -> LabeledArray:
    """Flatfield-correct ``image``; see :meth:`FlatfieldCorrector.correct`.

    Example, correcting only the DAPI channel::

        flatfield_correct(img, ("channel", "EPI_DAPI"), darkfield, flatfield_dapi)
    """
    return FlatfieldCorrector(darkfield, flatfield).correct(image, axis)
