"""Tests for admission predicates."""

from __future__ import annotations

import numpy as np
import pytest

from segtools.segment.predicates import (
    AdmissionPredicate,
    CompositePredicate,
    FunctionPredicate,
    MeanThresholdPredicate,
    ThresholdPredicate,
    as_predicate,
)


@pytest.fixture
def impulse() -> np.ndarray:
    """7x7 zeros with a single 9 in the centre."""
    image = np.zeros((7, 7))
    image[3, 3] = 9.0
    return image


class TestThresholdPredicate:
    def test_inclusive(self):
        image = np.array([[0.0, 1.0], [2.0, 3.0]])
        np.testing.assert_array_equal(
            ThresholdPredicate(2.0).admissible(image), [[False, False], [True, True]]
        )

    def test_exclusive(self):
        image = np.array([[0.0, 1.0], [2.0, 3.0]])
        np.testing.assert_array_equal(
            ThresholdPredicate(2.0, inclusive=False).admissible(image),
            [[False, False], [False, True]],
        )

    def test_admit_single_pixel(self):
        pred = ThresholdPredicate(0.01)
        assert pred(np.array([0.5]))
        assert not pred(np.array([0.0]))

    def test_vectorized_matches_generic(self, rng):
        image = rng.uniform(0, 1, size=(12, 9))
        pred = ThresholdPredicate(0.4)
        np.testing.assert_array_equal(
            pred.admissible(image), AdmissionPredicate.admissible(pred, image)
        )


class TestMeanThresholdPredicate:
    def test_neighborhood_mean(self, impulse):
        result = MeanThresholdPredicate(1.0, size=3).admissible(impulse)
        expected = np.zeros((7, 7), dtype=bool)
        expected[2:5, 2:5] = True
        np.testing.assert_array_equal(result, expected)

    def test_admit(self):
        pred = MeanThresholdPredicate(2.0)
        assert pred.admit(np.full(9, 2.0))
        assert not pred.admit(np.full(9, 1.9))

    def test_vectorized_matches_generic(self, rng):
        image = rng.uniform(0, 1, size=(10, 10))
        pred = MeanThresholdPredicate(0.5, size=3)
        np.testing.assert_array_equal(
            pred.admissible(image), AdmissionPredicate.admissible(pred, image)
        )

    @pytest.mark.parametrize("size", [0, 2, 4])
    def test_invalid_size(self, size):
        with pytest.raises(ValueError, match="odd"):
            MeanThresholdPredicate(1.0, size=size)


class TestFunctionPredicate:
    def test_per_pixel_callable(self, impulse):
        pred = FunctionPredicate(lambda nb: nb[0] > 1)
        np.testing.assert_array_equal(pred.admissible(impulse), impulse > 1)

    def test_neighborhood_callable(self, impulse):
        pred = FunctionPredicate(lambda nb: nb.max() > 5, size=3)
        expected = np.zeros((7, 7), dtype=bool)
        expected[2:5, 2:5] = True
        np.testing.assert_array_equal(pred.admissible(impulse), expected)

    def test_vectorized(self, impulse):
        pred = FunctionPredicate(lambda im: im > 0.01, vectorized=True)
        np.testing.assert_array_equal(pred.admissible(impulse), impulse > 0.01)
        assert pred.admit(np.array([1.0]))

    def test_vectorized_wrong_shape(self, impulse):
        pred = FunctionPredicate(lambda im: im.ravel() > 0, vectorized=True)
        with pytest.raises(ValueError, match="shape"):
            pred.admissible(impulse)

    def test_not_callable(self):
        with pytest.raises(TypeError):
            FunctionPredicate(0.5)

    def test_even_size(self):
        with pytest.raises(ValueError):
            FunctionPredicate(lambda nb: True, size=2)


class TestCompositePredicate:
    def test_all(self, impulse):
        pred = CompositePredicate(
            [ThresholdPredicate(1.0), MeanThresholdPredicate(1.0, size=3)], mode="all"
        )
        expected = np.zeros((7, 7), dtype=bool)
        expected[3, 3] = True
        np.testing.assert_array_equal(pred.admissible(impulse), expected)
        assert pred.size == 3

    def test_any(self, impulse):
        pred = CompositePredicate(
            [ThresholdPredicate(1.0), MeanThresholdPredicate(1.0, size=3)], mode="any"
        )
        assert pred.admissible(impulse).sum() == 9

    def test_admit_crops_window_per_member(self):
        pred = CompositePredicate(
            [ThresholdPredicate(1.0), MeanThresholdPredicate(1.0, size=3)]
        )
        window = np.zeros(9)
        window[4] = 9.0
        assert pred.admit(window)
        window[4] = 0.5
        window[0] = 8.5
        assert not pred.admit(window)

    def test_wraps_callables(self, impulse):
        pred = CompositePredicate([lambda nb: nb[0] >= 0, ThresholdPredicate(5.0)])
        assert isinstance(pred.predicates[0], FunctionPredicate)
        assert pred.admissible(impulse).sum() == 1

    def test_empty(self):
        with pytest.raises(ValueError, match="at least one"):
            CompositePredicate([])

    def test_bad_mode(self):
        with pytest.raises(ValueError, match="mode"):
            CompositePredicate([ThresholdPredicate(0.0)], mode="xor")


class TestAsPredicate:
    def test_passthrough(self):
        pred = ThresholdPredicate(1.0)
        assert as_predicate(pred) is pred

    def test_wraps_callable(self):
        assert isinstance(as_predicate(lambda nb: True), FunctionPredicate)

    def test_rejects_other(self):
        with pytest.raises(TypeError, match="mask_predicate"):
            as_predicate(3)
