"""Exception classes for the segtools core module."""

from __future__ import annotations

from typing import Any, Hashable


class SegToolsError(Exception):
    """Base exception for all segtools errors."""


class InvalidAxisError(SegToolsError):
    """Raised when referencing an absent axis or coordinate label."""

    def __init__(self, axis: str | None = None, label: Hashable | None = None) -> None:
        if axis is not None and label is not None:
            msg = f"Label {label!r} not found on axis {axis!r}"
        elif axis is not None:
            msg = f"Axis not found: {axis}"
        else:
            msg = "Axis not found"
        super().__init__(msg)
        self.axis = axis
        self.label = label


class ShapeMismatchError(SegToolsError):
    """Raised when an array or field shape is incompatible with an operation."""

    def __init__(
        self,
        message: str | None = None,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        msg = message or "Shape mismatch"
        if expected is not None or actual is not None:
            msg = f"{msg} (expected {expected}, got {actual})"
        super().__init__(msg)
        self.expected = expected
        self.actual = actual


class DegenerateFieldError(SegToolsError):
    """Raised when a flatfield has zero, negative or non-finite entries."""

    def __init__(self, count: int | None = None) -> None:
        if count is not None:
            msg = f"Flatfield has {count} non-positive or non-finite entries"
        else:
            msg = "Flatfield has non-positive or non-finite entries"
        super().__init__(msg)
        self.count = count


class BoundaryCrossingError(SegToolsError):
    """Raised when the peak height crossing is not bracketed on both sides."""

    def __init__(self, side: str | None = None, timepoint: Hashable | None = None) -> None:
        msg = "Height crossing not bracketed"
        if side is not None:
            msg = f"{msg} on the {side} side of the peak"
        if timepoint is not None:
            msg = f"{msg} at timepoint {timepoint!r}"
        super().__init__(msg)
        self.side = side
        self.timepoint = timepoint


class InsufficientBackgroundError(SegToolsError):
    """Raised when too few background pixels remain for a density estimate."""

    def __init__(
        self,
        count: int | None = None,
        minimum: int | None = None,
        timepoint: Hashable | None = None,
    ) -> None:
        msg = "Insufficient background pixels"
        if count is not None and minimum is not None:
            msg = f"{msg}: {count} < {minimum}"
        elif count is not None:
            msg = f"{msg}: {count}"
        if timepoint is not None:
            msg = f"{msg} at timepoint {timepoint!r}"
        super().__init__(msg)
        self.count = count
        self.minimum = minimum
        self.timepoint = timepoint
