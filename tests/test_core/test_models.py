"""Tests for segtools.core.models."""

import numpy as np
import pytest

from segtools.core.models import DensitySample, DetectionRecord, SegmentationMask


class TestSegmentationMask:
    def test_count_and_foreground(self):
        labels = np.zeros((5, 5), dtype=np.int64)
        labels[1, 1] = 1
        labels[3, 3] = 2
        mask = SegmentationMask(frame=0, coords=(("time", 0),), labels=labels)
        assert mask.count == 2
        assert mask.foreground.sum() == 2
        assert mask.labels.dtype == np.int32
        assert mask.shape == (5, 5)

    def test_labels_read_only(self):
        mask = SegmentationMask(frame=0, coords=(), labels=np.zeros((3, 3)))
        with pytest.raises(ValueError):
            mask.labels[0, 0] = 1

    def test_coord_lookup(self):
        mask = SegmentationMask(
            frame=2, coords=(("position", 1), ("time", 4)), labels=np.zeros((2, 2))
        )
        assert mask.coord("time") == 4
        with pytest.raises(KeyError):
            mask.coord("channel")

    def test_requires_2d(self):
        with pytest.raises(ValueError):
            SegmentationMask(frame=0, coords=(), labels=np.zeros((2, 2, 2)))

    def test_frozen(self):
        mask = SegmentationMask(frame=0, coords=(), labels=np.zeros((2, 2)))
        with pytest.raises(AttributeError):
            mask.frame = 1


class TestDetectionRecord:
    def test_fields(self):
        rec = DetectionRecord(frame=1, label=3, x=2.5, y=4.0, signal=10.0, area=9)
        assert rec.label == 3
        assert rec.area == 9


class TestDensitySample:
    def test_valid(self):
        sample = DensitySample(x=[0.0, 1.0, 2.0], y=[0.0, 1.0, 0.0], bandwidth=0.5)
        assert len(sample) == 3
        assert sample.x.dtype == np.float64

    def test_x_must_increase(self):
        with pytest.raises(ValueError, match="increasing"):
            DensitySample(x=[0.0, 0.0, 1.0], y=[1.0, 1.0, 1.0])

    def test_y_non_negative(self):
        with pytest.raises(ValueError, match="non-negative"):
            DensitySample(x=[0.0, 1.0], y=[1.0, -0.1])

    def test_equal_length(self):
        with pytest.raises(ValueError, match="equal length"):
            DensitySample(x=[0.0, 1.0], y=[1.0])
