"""Admission predicates deciding which pixels a growing region may claim."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Sequence

import numpy as np
from scipy.ndimage import generic_filter, uniform_filter

_MODES = frozenset({"all", "any"})


def _center_window(neighborhood: np.ndarray, size: int, sub_size: int) -> np.ndarray:
    """Crop the central ``sub_size`` window out of a flattened ``size`` window."""
    if sub_size == size:
        return neighborhood
    window = np.asarray(neighborhood).reshape(size, size)
    start = (size - sub_size) // 2
    return window[start:start + sub_size, start:start + sub_size].ravel()


class AdmissionPredicate(ABC):
    """Decide whether a pixel may join a growing region.

    ``admit`` receives the flattened ``size x size`` neighborhood centred on
    the pixel (the pixel itself is at index ``len(neighborhood) // 2``).
    ``admissible`` evaluates the predicate over a whole image at once;
    subclasses override it with a vectorized version where they can.
    Pixels outside the image are filled with the nearest edge value.
    """

    size: int = 1

    @abstractmethod
    def admit(self, neighborhood: np.ndarray) -> bool:
        """Return True if the pixel at the centre of ``neighborhood`` is admissible."""

    def admissible(self, image: np.ndarray) -> np.ndarray:
        """Boolean admissibility map with the shape of ``image``."""
        values = np.asarray(image, dtype=np.float64)
        result = generic_filter(
            values,
            lambda window: 1.0 if self.admit(window) else 0.0,
            size=self.size,
            mode="nearest",
        )
        return result.astype(bool)

    def __call__(self, neighborhood: np.ndarray) -> bool:
        return self.admit(neighborhood)


class ThresholdPredicate(AdmissionPredicate):
    """Admit pixels whose own value reaches ``threshold``.

    Args:
        threshold: Minimum value.
        inclusive: Use ``>=`` when True, ``>`` otherwise.
    """

    def __init__(self, threshold: float, inclusive: bool = True) -> None:
        self.threshold = float(threshold)
        self.inclusive = inclusive

    def admit(self, neighborhood: np.ndarray) -> bool:
        flat = np.ravel(neighborhood)
        value = flat[flat.size // 2]
        return bool(value >= self.threshold if self.inclusive else value > self.threshold)

    def admissible(self, image: np.ndarray) -> np.ndarray:
        values = np.asarray(image)
        if self.inclusive:
            return values >= self.threshold
        return values > self.threshold

    def __repr__(self) -> str:
        op = ">=" if self.inclusive else ">"
        return f"ThresholdPredicate(value {op} {self.threshold})"


class MeanThresholdPredicate(AdmissionPredicate):
    """Admit pixels whose ``size x size`` neighborhood mean reaches ``threshold``."""

    def __init__(self, threshold: float, size: int = 3) -> None:
        if size < 1 or size % 2 == 0:
            raise ValueError(f"size must be a positive odd integer, got {size}")
        self.threshold = float(threshold)
        self.size = int(size)

    def admit(self, neighborhood: np.ndarray) -> bool:
        return bool(np.mean(neighborhood) >= self.threshold)

    def admissible(self, image: np.ndarray) -> np.ndarray:
        values = np.asarray(image, dtype=np.float64)
        return uniform_filter(values, size=self.size, mode="nearest") >= self.threshold


class FunctionPredicate(AdmissionPredicate):
    """Wrap a user callable as a predicate.

    Args:
        func: ``func(neighborhood) -> bool``. With ``vectorized=True`` it is
            instead called once with the whole image and must return a
            boolean array of the same shape (e.g. ``lambda im: im > 0.01``).
        size: Neighborhood side length (odd).
        vectorized: See ``func``.
    """

    def __init__(
        self,
        func: Callable[[np.ndarray], object],
        size: int = 1,
        vectorized: bool = False,
    ) -> None:
        if not callable(func):
            raise TypeError(f"func must be callable, got {type(func).__name__}")
        if size < 1 or size % 2 == 0:
            raise ValueError(f"size must be a positive odd integer, got {size}")
        self.func = func
        self.size = int(size)
        self.vectorized = vectorized

    def admit(self, neighborhood: np.ndarray) -> bool:
        if self.vectorized:
            flat = np.ravel(self.func(np.asarray(neighborhood)))
            return bool(flat[flat.size // 2])
        return bool(self.func(neighborhood))

    def admissible(self, image: np.ndarray) -> np.ndarray:
        if not self.vectorized:
            return super().admissible(image)
        values = np.asarray(image)
        result = np.asarray(self.func(values), dtype=bool)
        if result.shape != values.shape:
            raise ValueError(
                f"Vectorized predicate returned shape {result.shape}, "
                f"expected {values.shape}"
            )
        return result


class CompositePredicate(AdmissionPredicate):
    """Combine predicates with logical AND (``mode="all"``) or OR (``"any"``)."""

    def __init__(self, predicates: Sequence[AdmissionPredicate], mode: str = "all") -> None:
        if not predicates:
            raise ValueError("CompositePredicate needs at least one predicate")
        if mode not in _MODES:
            raise ValueError(f"mode must be one of {sorted(_MODES)}, got {mode!r}")
        self.predicates = [as_predicate(p) for p in predicates]
        self.mode = mode
        self.size = max(p.size for p in self.predicates)

    def admit(self, neighborhood: np.ndarray) -> bool:
        flat = np.ravel(neighborhood)
        results = (
            p.admit(_center_window(flat, self.size, p.size)) for p in self.predicates
        )
        return all(results) if self.mode == "all" else any(results)

    def admissible(self, image: np.ndarray) -> np.ndarray:
        maps = [p.admissible(image) for p in self.predicates]
        if self.mode == "all":
            return np.logical_and.reduce(maps)
        return np.logical_or.reduce(maps)


def as_predicate(obj: AdmissionPredicate | Callable[[np.ndarray], object]) -> AdmissionPredicate:
    """Return ``obj`` as an AdmissionPredicate, wrapping plain callables."""
    if isinstance(obj, AdmissionPredicate):
        return obj
    if callable(obj):
        return FunctionPredicate(obj)
    raise TypeError(
        f"mask_predicate must be an AdmissionPredicate or callable, got {type(obj).__name__}"
    )
