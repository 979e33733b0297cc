"""Shared fixtures for segmentation module tests."""

from __future__ import annotations

import numpy as np
import pytest

from segtools.core import LabeledArray

SHAPE = (40, 40)


def make_frame(
    centers: list[tuple[int, int]],
    radii: list[int],
    amplitudes: list[float],
    shape: tuple[int, int] = SHAPE,
) -> np.ndarray:
    """(channel, y, x) frame: Gaussian blobs in the seed channel, bright disks in the segment channel.

    Segment channel is 100 inside each disk and 10 elsewhere.
    """
    yy, xx = np.mgrid[: shape[0], : shape[1]]
    seed = np.zeros(shape)
    segment = np.full(shape, 10.0)
    for (cy, cx), r, amp in zip(centers, radii, amplitudes):
        d2 = (yy - cy) ** 2 + (xx - cx) ** 2
        seed += amp * np.exp(-d2 / 18.0)
        segment[d2 <= r * r] = 100.0
    return np.stack([seed, segment])


def disk_area(radius: int) -> int:
    """Pixel count of ``d2 <= r^2`` around an interior integer center."""
    yy, xx = np.mgrid[-radius: radius + 1, -radius: radius + 1]
    return int(np.count_nonzero(yy**2 + xx**2 <= radius**2))


@pytest.fixture
def time_lapse() -> LabeledArray:
    """Two timepoints x two channels of a 40x40 field with two cells.

    Cell A: center (10, 10), radius 5, brighter seed (label 1).
    Cell B: center (28, 30), radius 6 (label 2).
    Both cells move two pixels right between t=0 and t=30.
    """
    t0 = make_frame([(10, 10), (28, 30)], [5, 6], [120.0, 100.0])
    t1 = make_frame([(10, 12), (28, 32)], [5, 6], [120.0, 100.0])
    return LabeledArray(
        np.stack([t0, t1]),
        dims=("time", "channel", "y", "x"),
        coords={"time": [0.0, 30.0], "channel": ["DAPI", "mNG"]},
    )


@pytest.fixture
def cell_areas() -> dict[int, int]:
    """Expected pixel area per label in ``time_lapse``."""
    return {1: disk_area(5), 2: disk_area(6)}
