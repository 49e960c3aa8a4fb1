"""Stable, noise-tolerant sorting of coordinates and scalar blocks.

All sorts return a reordering vector: ``sorted = values[reordering]``.
Entries that compare equal on every key keep their original relative order.
"""

from __future__ import annotations

import logging
from functools import cmp_to_key

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .comparison import as_blocks, as_thresholds
from .datastructures import NODE_DIM
from .exceptions import violation

log = logging.getLogger(__name__)


def _tolerant_argsort(
    keys: NDArray[np.float64],
    thresholds: NDArray[np.float64],
    primary: NDArray[np.int64] | None = None,
) -> NDArray[np.int64]:
    """Stable lexicographic argsort of the rows of ``keys`` (after ``primary``)."""
    n = len(keys)
    if n < 2:
        return np.arange(n, dtype=np.int64)

    # Zero thresholds make tolerant equality exact, lexsort is stable
    if not np.any(thresholds):
        # lexsort uses the last key as the primary one
        sort_keys = [keys[:, k] for k in reversed(range(keys.shape[1]))]
        if primary is not None:
            sort_keys.append(primary)
        return np.lexsort(sort_keys).astype(np.int64)

    rows = keys.tolist()
    prim = primary.tolist() if primary is not None else None
    th = thresholds.tolist()

    def cmp(i: int, j: int) -> int:
        if prim is not None and prim[i] != prim[j]:
            return -1 if prim[i] < prim[j] else 1
        for a, b, t in zip(rows[i], rows[j], th):
            if abs(a - b) > t:
                return -1 if a < b else 1
        return 0

    # Timsort is stable: ties keep ascending original index
    order = sorted(range(n), key=cmp_to_key(cmp))
    return np.asarray(order, dtype=np.int64)


def stable_coordinate_sort(
    noise_threshold: ArrayLike,
    coordinates: ArrayLike,
    elems: ArrayLike | None = None,
) -> NDArray[np.int64]:
    """
    Reordering that sorts nodes by x, then y, then z, ignoring roundoff noise.

    Parameters
    ----------
    noise_threshold : array_like (3,)
        Tolerance on x, y and z.
    coordinates : array_like
        Flat ``[x1 y1 z1 x2 ...]`` sequence or (n, 3) array.
    elems : array_like of int (n,), optional
        Primary integer key; nodes are first sorted by it.

    Returns
    -------
    reordering : ndarray (n,)
        ``coordinates.reshape(-1, 3)[reordering]`` is sorted.
    """
    thresholds = as_thresholds(noise_threshold, NODE_DIM)
    coords = as_blocks(coordinates, NODE_DIM)

    primary = None
    if elems is not None:
        primary = np.asarray(elems, dtype=np.int64).ravel()
        if len(primary) != len(coords):
            raise violation(
                f"Got {len(primary)} integer keys for {len(coords)} coordinates"
            )

    log.debug(f"Sorting {len(coords)} coordinates with thresholds {thresholds}")
    return _tolerant_argsort(coords, thresholds, primary)


def stable_sort(tosort: ArrayLike) -> NDArray[np.int64]:
    """Stable reordering of an integer vector."""
    values = np.asarray(tosort).ravel()
    return np.argsort(values, kind="stable").astype(np.int64)


def stable_sort_blocks(
    noise_threshold: float,
    tosort: ArrayLike,
    blocklen: int = 1,
) -> NDArray[np.int64]:
    """Stable tolerant sort of ``blocklen``-sized blocks of scalars.

    Every entry of a block is compared with the same ``noise_threshold``.
    """
    blocks = as_blocks(tosort, blocklen)
    thresholds = as_thresholds(np.full(blocklen, noise_threshold), blocklen)
    return _tolerant_argsort(blocks, thresholds)


def tuple3_sort(tosort: list[tuple[int, int, float]]) -> None:
    """Sort (row, col, value) triples in place by row then column."""
    tosort.sort(key=lambda t: (t[0], t[1]))
