"""Shared fixtures for measurement module tests."""

from __future__ import annotations

import numpy as np
import pytest


@pytest.fixture
def triangle_peak() -> tuple[np.ndarray, np.ndarray]:
    """Symmetric peak at x=2 with height 4; half-height crossings at 4/3 and 8/3."""
    x = np.array([0.0, 1.0, 2.0, 3.0, 4.0])
    y = np.array([0.0, 1.0, 4.0, 1.0, 0.0])
    return x, y


@pytest.fixture
def contaminated_background(rng: np.random.Generator) -> np.ndarray:
    """Background intensities around 100 with a heavy bright tail.

    One fifth of the pixels are misclassified cell pixels spread
    uniformly over [150, 400], which drags mean and median upward.
    """
    background = rng.normal(100.0, 5.0, size=4000)
    cells = rng.uniform(150.0, 400.0, size=1000)
    return np.concatenate([background, cells])
