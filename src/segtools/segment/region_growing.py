"""Seeded region growing over a shared label arena."""

from __future__ import annotations

import logging

import numpy as np
from scipy.ndimage import generate_binary_structure

logger = logging.getLogger(__name__)


def _footprint(connectivity: int) -> np.ndarray:
    if connectivity == 4:
        return generate_binary_structure(2, 1)
    if connectivity == 8:
        return generate_binary_structure(2, 2)
    raise ValueError(f"connectivity must be 4 or 8, got {connectivity}")


def grow_regions(
    seeds: np.ndarray,
    admissible: np.ndarray,
    connectivity: int = 8,
    min_area: int = 0,
    max_radius: int | None = None,
) -> np.ndarray:
    """Grow one region per seed through admissible pixels.

    All seeds expand simultaneously, one pixel ring per step, in a single
    label arena. Seed pixels are claimed up front whether or not they are
    admissible. A pixel reached by several fronts in the same step goes to
    the seed that comes first in ``seeds``; a claimed pixel is never
    reassigned. The image border is a hard limit.

    Args:
        seeds: Int array (N, 2) of ``(row, col)`` in processing order.
        admissible: 2D bool array (Y, X).
        connectivity: 4 or 8.
        min_area: Regions smaller than this are dropped to background.
        max_radius: Maximum number of expansion steps. None = unbounded.

    Returns:
        Int32 label image (Y, X); labels 1..K follow seed order among the
        surviving regions, 0 = background.
    """
    footprint = _footprint(connectivity)
    admissible = np.asarray(admissible, dtype=bool)
    if admissible.ndim != 2:
        raise ValueError(f"admissible must be 2D, got shape {admissible.shape}")
    arena = np.zeros(admissible.shape, dtype=np.int32)

    seeds = np.asarray(seeds, dtype=np.intp).reshape(-1, 2)
    if len(seeds) == 0:
        return arena
    rows, cols = seeds[:, 0], seeds[:, 1]
    if (
        rows.min() < 0 or cols.min() < 0
        or rows.max() >= arena.shape[0] or cols.max() >= arena.shape[1]
    ):
        raise ValueError(f"Seed outside image of shape {arena.shape}")

    # First occurrence wins for duplicated seed positions
    flat = np.ravel_multi_index((rows, cols), arena.shape)
    _, first = np.unique(flat, return_index=True)
    first.sort()
    arena[rows[first], cols[first]] = first.astype(np.int32) + 1

    # Unclaimed admissible pixels can only border the ring claimed last, so
    # each step looks at that ring alone
    height, width = arena.shape
    offsets = [(int(dr), int(dc)) for dr, dc in np.argwhere(footprint) - 1 if dr or dc]
    labels = arena.reshape(-1)
    open_pixels = admissible.reshape(-1)
    front = flat[first]
    steps = 0
    while front.size and (max_radius is None or steps < max_radius):
        front_rows, front_cols = np.divmod(front, width)
        front_ranks = labels[front]
        reached: list[np.ndarray] = []
        reached_ranks: list[np.ndarray] = []
        for dr, dc in offsets:
            nr = front_rows + dr
            nc = front_cols + dc
            inside = (nr >= 0) & (nr < height) & (nc >= 0) & (nc < width)
            idx = nr[inside] * width + nc[inside]
            free = (labels[idx] == 0) & open_pixels[idx]
            reached.append(idx[free])
            reached_ranks.append(front_ranks[inside][free])
        idx = np.concatenate(reached)
        if idx.size == 0:
            break
        rank = np.concatenate(reached_ranks)
        # Lowest seed rank first within each pixel
        order = np.lexsort((rank, idx))
        idx, rank = idx[order], rank[order]
        lowest = np.ones(idx.size, dtype=bool)
        lowest[1:] = idx[1:] != idx[:-1]
        front = idx[lowest]
        labels[front] = rank[lowest]
        steps += 1

    areas = np.bincount(arena.ravel(), minlength=len(seeds) + 1)
    keep = areas >= max(min_area, 1)
    keep[0] = False
    relabel = np.zeros(len(areas), dtype=np.int32)
    relabel[keep] = np.arange(1, int(keep.sum()) + 1, dtype=np.int32)

    dropped = int(np.count_nonzero(areas[1:])) - int(keep.sum())
    if dropped:
        logger.debug("Dropped %d regions below min_area=%d", dropped, min_area)
    logger.debug("Region growing: %d seeds, %d steps", len(first), steps)
    return relabel[arena]
