"""LabeledArray — an N-D numeric buffer with named axes and coordinate labels."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Hashable, Iterator, Mapping, Sequence

import numpy as np

from segtools.core.exceptions import InvalidAxisError, ShapeMismatchError


@dataclass(frozen=True)
class Axis:
    """A named axis and its ordered coordinate labels."""

    name: str
    coords: tuple[Hashable, ...]

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("axis name must not be empty")
        object.__setattr__(self, "coords", tuple(self.coords))

    def __len__(self) -> int:
        return len(self.coords)

    def index(self, label: Hashable) -> int:
        """Return the position of ``label`` on this axis.

        Raises:
            InvalidAxisError: If the label is not a coordinate of this axis.
        """
        try:
            return self.coords.index(label)
        except ValueError:
            raise InvalidAxisError(self.name, label) from None


def _is_label_sequence(value: object) -> bool:
    return isinstance(value, (list, tuple, range, np.ndarray))


class LabeledArray:
    """An N-dimensional array whose axes carry names and coordinate labels.

    The wrapped buffer is exposed as a read-only view. Every operation
    returns a new instance; nothing is modified in place.

    Args:
        data: Array-like numeric values.
        dims: Axis names, one per array dimension.
        coords: Optional mapping of axis name to coordinate labels. Axes
            without an entry get ``range(n)`` as coordinates.

    Raises:
        ShapeMismatchError: If ``dims`` or a coordinate sequence does not
            match the array shape.
        InvalidAxisError: If ``coords`` names an axis not in ``dims``.
        ValueError: If axis names are duplicated.
    """

    __slots__ = ("_data", "_axes")

    def __init__(
        self,
        data: Any,
        dims: Sequence[str],
        coords: Mapping[str, Sequence[Hashable]] | None = None,
    ) -> None:
        coords = dict(coords or {})
        dims = tuple(dims)
        for name in coords:
            if name not in dims:
                raise InvalidAxisError(name)
        array = np.asarray(data)
        if len(dims) != array.ndim:
            raise ShapeMismatchError(
                "Axis count does not match array rank",
                expected=array.ndim,
                actual=len(dims),
            )
        axes = [
            Axis(name, coords[name] if name in coords else range(size))
            for name, size in zip(dims, array.shape)
        ]
        self._init(array, axes)

    def _init(self, array: np.ndarray, axes: Sequence[Axis]) -> None:
        names = [axis.name for axis in axes]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate axis names: {duplicates}")
        for axis, size in zip(axes, array.shape):
            if len(axis) != size:
                raise ShapeMismatchError(
                    f"Axis {axis.name!r} coordinate count does not match dimension",
                    expected=size,
                    actual=len(axis),
                )
        view = array.view()
        view.flags.writeable = False
        self._data = view
        self._axes = tuple(axes)

    @classmethod
    def from_axes(cls, data: Any, axes: Sequence[Axis]) -> LabeledArray:
        """Build a LabeledArray from pre-built :class:`Axis` objects."""
        array = np.asarray(data)
        if len(axes) != array.ndim:
            raise ShapeMismatchError(
                "Axis count does not match array rank",
                expected=array.ndim,
                actual=len(axes),
            )
        obj = cls.__new__(cls)
        obj._init(array, list(axes))
        return obj

    # --- metadata ---

    @property
    def values(self) -> np.ndarray:
        """The read-only underlying array."""
        return self._data

    @property
    def axes(self) -> tuple[Axis, ...]:
        return self._axes

    @property
    def dims(self) -> tuple[str, ...]:
        return tuple(axis.name for axis in self._axes)

    @property
    def shape(self) -> tuple[int, ...]:
        return self._data.shape

    @property
    def ndim(self) -> int:
        return self._data.ndim

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def sizes(self) -> dict[str, int]:
        """Mapping of axis name to length."""
        return {axis.name: len(axis) for axis in self._axes}

    def has_axis(self, name: str) -> bool:
        return name in self.dims

    def axis_index(self, name: str) -> int:
        """Position of the named axis.

        Raises:
            InvalidAxisError: If the axis does not exist.
        """
        try:
            return self.dims.index(name)
        except ValueError:
            raise InvalidAxisError(name) from None

    def axis(self, name: str) -> Axis:
        return self._axes[self.axis_index(name)]

    def coords(self, name: str) -> tuple[Hashable, ...]:
        """Coordinate labels of the named axis."""
        return self.axis(name).coords

    def index_of(self, name: str, label: Hashable) -> int:
        """Position of coordinate ``label`` on axis ``name``."""
        return self.axis(name).index(label)

    # --- selection ---

    def isel(self, **indexers: Any) -> LabeledArray:
        """Select by position along named axes.

        An integer drops the axis; a slice or a sequence of integers keeps
        it with the matching coordinates.

        Raises:
            InvalidAxisError: If an indexer names an unknown axis.
            IndexError: If a position is out of range.
        """
        for name in indexers:
            self.axis_index(name)

        data = self._data
        axes: list[Axis] = []
        pos = 0
        for axis in self._axes:
            if axis.name not in indexers:
                axes.append(axis)
                pos += 1
                continue
            idx = indexers[axis.name]
            lead = (slice(None),) * pos
            if isinstance(idx, (int, np.integer)):
                n = len(axis)
                if not -n <= idx < n:
                    raise IndexError(
                        f"Index {idx} out of range for axis {axis.name!r} of length {n}"
                    )
                data = data[lead + (int(idx),)]
            elif isinstance(idx, slice):
                data = data[lead + (idx,)]
                axes.append(Axis(axis.name, axis.coords[idx]))
                pos += 1
            else:
                positions = np.asarray(idx, dtype=np.intp).ravel()
                data = np.take(data, positions, axis=pos)
                axes.append(Axis(axis.name, [axis.coords[i] for i in positions]))
                pos += 1
        return LabeledArray.from_axes(data, axes)

    def sel(self, **labels: Any) -> LabeledArray:
        """Select by coordinate label along named axes.

        A single label drops the axis; a list, tuple or array of labels
        keeps it in the requested order.

        Raises:
            InvalidAxisError: If an axis or a label does not exist.
        """
        indexers: dict[str, Any] = {}
        for name, label in labels.items():
            axis = self.axis(name)
            if _is_label_sequence(label):
                indexers[name] = [axis.index(item) for item in label]
            else:
                indexers[name] = axis.index(label)
        return self.isel(**indexers)

    def transpose(self, *dims: str) -> LabeledArray:
        """Reorder axes by name. All axis names must be given."""
        for name in dims:
            self.axis_index(name)
        missing = [name for name in self.dims if name not in dims]
        if missing:
            raise InvalidAxisError(missing[0])
        order = [self.axis_index(name) for name in dims]
        return LabeledArray.from_axes(
            self._data.transpose(order), [self._axes[i] for i in order]
        )

    def iter_axis(self, name: str) -> Iterator[tuple[Hashable, LabeledArray]]:
        """Yield ``(label, sub_array)`` pairs along the named axis."""
        axis = self.axis(name)
        for i, label in enumerate(axis.coords):
            yield label, self.isel(**{name: i})

    # --- construction of derived arrays ---

    def with_data(self, values: Any) -> LabeledArray:
        """Return a new array with the same axes and different values.

        Raises:
            ShapeMismatchError: If ``values`` does not have this array's shape.
        """
        array = np.asarray(values)
        if array.shape != self.shape:
            raise ShapeMismatchError(
                "Replacement values do not match array shape",
                expected=self.shape,
                actual=array.shape,
            )
        return LabeledArray.from_axes(array, self._axes)

    def astype(self, dtype: Any) -> LabeledArray:
        return self.with_data(self._data.astype(dtype))

    def equals(self, other: object) -> bool:
        """True if ``other`` has identical axes and values."""
        if not isinstance(other, LabeledArray):
            return False
        return self._axes == other._axes and np.array_equal(self._data, other._data)

    def __array__(self, dtype: Any = None, copy: bool | None = None) -> np.ndarray:
        if copy:
            return np.array(self._data, dtype=dtype, copy=True)
        return np.asarray(self._data, dtype=dtype)

    def __len__(self) -> int:
        if self.ndim == 0:
            raise TypeError("len() of a 0-d LabeledArray")
        return self.shape[0]

    def __repr__(self) -> str:
        dims = ", ".join(f"{axis.name}: {len(axis)}" for axis in self._axes)
        return f"LabeledArray({dims}; dtype={self.dtype})"
