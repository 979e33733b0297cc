"""Shared fixtures for core module tests."""

from __future__ import annotations

import numpy as np
import pytest

from segtools.core import LabeledArray


@pytest.fixture
def volume() -> LabeledArray:
    """A (time, channel, y, x) array of shape (3, 2, 4, 5) with distinct values."""
    data = np.arange(3 * 2 * 4 * 5, dtype=np.float64).reshape(3, 2, 4, 5)
    return LabeledArray(
        data,
        dims=("time", "channel", "y", "x"),
        coords={"time": [0.0, 5.0, 10.0], "channel": ["DAPI", "GFP"]},
    )
