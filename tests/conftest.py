"""Shared test fixtures for segtools."""

import numpy as np
import pytest

from segtools.core import LabeledArray


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator for reproducible synthetic images."""
    return np.random.default_rng(42)


@pytest.fixture
def two_channel_frame() -> LabeledArray:
    """A (channel, y, x) 10x10 frame: one bright seed at (5, 5), uniform segment channel."""
    seed = np.zeros((10, 10))
    seed[5, 5] = 100.0
    segment = np.full((10, 10), 50.0)
    return LabeledArray(
        np.stack([seed, segment]),
        dims=("channel", "y", "x"),
        coords={"channel": ["DAPI", "mNG"]},
    )
