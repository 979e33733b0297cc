"""Tests for segtools.core.exceptions."""

import pytest

from segtools.core.exceptions import (
    BoundaryCrossingError,
    DegenerateFieldError,
    InsufficientBackgroundError,
    InvalidAxisError,
    SegToolsError,
    ShapeMismatchError,
)


class TestExceptionHierarchy:
    def test_all_inherit_from_segtools_error(self):
        for exc_cls in (InvalidAxisError, ShapeMismatchError, DegenerateFieldError,
                        BoundaryCrossingError, InsufficientBackgroundError):
            assert issubclass(exc_cls, SegToolsError)

    def test_catch_all_with_base(self):
        with pytest.raises(SegToolsError):
            raise InvalidAxisError("channel", "DAPI")

    def test_invalid_axis_message(self):
        exc = InvalidAxisError("time")
        assert "time" in str(exc)
        assert exc.axis == "time"
        assert exc.label is None

    def test_invalid_axis_with_label(self):
        exc = InvalidAxisError("channel", "GFP")
        assert "GFP" in str(exc)
        assert "channel" in str(exc)

    def test_shape_mismatch_message(self):
        exc = ShapeMismatchError("Fields differ", expected=(4, 4), actual=(4, 5))
        assert "Fields differ" in str(exc)
        assert "(4, 5)" in str(exc)
        assert exc.expected == (4, 4)

    def test_shape_mismatch_default_message(self):
        assert "Shape mismatch" in str(ShapeMismatchError())

    def test_degenerate_field_count(self):
        exc = DegenerateFieldError(3)
        assert "3" in str(exc)
        assert exc.count == 3

    def test_boundary_crossing_context(self):
        exc = BoundaryCrossingError("left", timepoint=7)
        assert "left" in str(exc)
        assert "7" in str(exc)
        assert exc.side == "left"
        assert exc.timepoint == 7

    def test_insufficient_background_context(self):
        exc = InsufficientBackgroundError(12, 30, timepoint="t3")
        assert "12 < 30" in str(exc)
        assert "t3" in str(exc)
        assert exc.count == 12
        assert exc.minimum == 30
