"""Shared fixtures for correction module tests."""

from __future__ import annotations

import numpy as np
import pytest

from segtools.core import LabeledArray

LEVELS = [100.0, 130.0, 80.0]


@pytest.fixture
def vignetted_scene() -> dict[str, np.ndarray]:
    """A 32x32 scene imaged through a radial vignette with a constant sensor offset.

    Scene: 100 background, 300 inside a bright square.
    """
    yy, xx = np.mgrid[:32, :32]
    r2 = ((yy - 15.5) ** 2 + (xx - 15.5) ** 2) / (16.0**2)
    flat = 1.0 - 0.4 * r2
    dark = np.full((32, 32), 10.0)
    scene = np.full((32, 32), 100.0)
    scene[8:14, 8:14] = 300.0
    return {"scene": scene, "flat": flat, "dark": dark, "raw": scene * flat + dark}


@pytest.fixture
def drifting_series(rng: np.random.Generator) -> tuple[LabeledArray, np.ndarray]:
    """(time, y, x) 60x60 series whose background level drifts per timepoint.

    One bright cell (disk, radius 8) sits at the centre of every frame.
    Returns the image and its (T, Y, X) boolean foreground masks.
    """
    yy, xx = np.mgrid[:60, :60]
    cell = (yy - 30) ** 2 + (xx - 30) ** 2 <= 64
    frames = []
    for level in LEVELS:
        frame = level + rng.normal(0.0, 2.0, size=(60, 60))
        frame[cell] += 500.0
        frames.append(frame)
    image = LabeledArray(
        np.stack(frames), dims=("time", "y", "x"), coords={"time": [0, 10, 20]}
    )
    masks = np.stack([cell] * len(LEVELS))
    return image, masks


@pytest.fixture
def background_levels() -> np.ndarray:
    """True background level of each ``drifting_series`` timepoint."""
    return np.array(LEVELS)
