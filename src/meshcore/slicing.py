"""Assignment of scalar values to uniform slices and to sorted intervals.

Boundary convention: a value that lies on an interior edge (within the
noise threshold above it) belongs to the LOWER bucket. Values outside the
covered range, infinities included, are clamped to the first or last
bucket. NaN is rejected.
"""

from __future__ import annotations

import logging

import numpy as np
from numba import njit
from numpy.typing import ArrayLike, NDArray

from .comparison import as_blocks
from .datastructures import NODE_DIM
from .exceptions import violation

log = logging.getLogger(__name__)


@njit
def _slice_indices(values, minval, delta, numslices, noise_threshold):
    """Bucket of every value, lower bucket wins on edges."""
    out = np.empty(values.shape[0], dtype=np.int64)
    for i in range(values.shape[0]):
        # Clamp before the int conversion, the quotient may be huge or inf
        quotient = (values[i] - minval) / delta
        if quotient >= numslices:
            quotient = float(numslices)
        elif quotient < 0.0:
            quotient = 0.0
        idx = int(np.floor(quotient))
        if idx > 0 and values[i] - (minval + idx * delta) <= noise_threshold:
            idx -= 1
        if idx < 0:
            idx = 0
        elif idx > numslices - 1:
            idx = numslices - 1
        out[i] = idx
    return out


def _check_slicing(noise_threshold: float, delta: float, numslices: int) -> None:
    if not delta > 0:
        raise violation(f"Slice width must be positive, got delta={delta}")
    if numslices < 1:
        raise violation(f"At least one slice is required, got numslices={numslices}")
    if not noise_threshold >= 0:
        raise violation(f"Noise threshold must be nonnegative, got {noise_threshold}")


def slice_indices(
    noise_threshold: float,
    toslice: ArrayLike,
    minval: float,
    delta: float,
    numslices: int,
) -> NDArray[np.int64]:
    """
    Slice number of every value.

    Slice ``i`` covers ``[minval + i*delta, minval + (i+1)*delta]``.

    Parameters
    ----------
    noise_threshold : float
        Values up to this distance above an interior edge go to the slice below it.
    toslice : array_like (n,)
        Values to assign.
    minval, delta : float
        Start and width of the slices.
    numslices : int
        Number of slices.

    Returns
    -------
    ndarray (n,)
        Slice index in ``[0, numslices)``.
    """
    _check_slicing(noise_threshold, delta, numslices)
    values = np.asarray(toslice, dtype=np.float64).ravel()
    if np.any(np.isnan(values)):
        raise violation("Cannot slice NaN values")
    return _slice_indices(values, float(minval), float(delta), int(numslices), float(noise_threshold))


def slice_coordinates(
    noise_threshold: float,
    toslice: ArrayLike,
    minval: float,
    delta: float,
    numslices: int,
) -> list[NDArray[np.int64]]:
    """``slices[i]`` holds the ascending indexes of the values in slice ``i``."""
    buckets = slice_indices(noise_threshold, toslice, minval, delta, numslices)
    order = np.argsort(buckets, kind="stable")
    bounds = np.searchsorted(buckets[order], np.arange(numslices + 1))
    slices = [order[bounds[i] : bounds[i + 1]] for i in range(numslices)]
    log.debug(f"Sliced {len(buckets)} values into {numslices} slices")
    return slices


def find_interval(val: float | ArrayLike, tics: ArrayLike) -> int | NDArray[np.int64]:
    """
    Interval number of ``val`` for ascending ``tics``.

    Interval ``i`` is ``[tics[i], tics[i+1]]``; a value exactly on an interior
    tic belongs to the interval below it. Out-of-range values are clamped to
    the first or last interval.
    """
    tics = np.asarray(tics, dtype=np.float64).ravel()
    if len(tics) < 2:
        raise violation(f"At least two tics are required, got {len(tics)}")
    if np.any(np.diff(tics) < 0):
        raise violation("Interval tics must be sorted ascendingly")
    if np.any(np.isnan(val)):
        raise violation("NaN has no interval")

    numintervals = len(tics) - 1
    # side="left" puts a value equal to tics[i] at position i, hence interval i-1
    intervals = np.clip(np.searchsorted(tics, val, side="left") - 1, 0, numintervals - 1)
    if np.ndim(intervals) == 0:
        return int(intervals)
    return intervals.astype(np.int64)


def get_coord_bounds(coordinates: ArrayLike) -> NDArray[np.float64]:
    """Return ``[xmin, xmax, ymin, ymax, zmin, zmax]`` of the coordinates."""
    coords = as_blocks(coordinates, NODE_DIM)
    if len(coords) == 0:
        raise violation("Cannot bound an empty coordinate set")
    bounds = np.empty(2 * NODE_DIM, dtype=np.float64)
    bounds[0::2] = coords.min(axis=0)
    bounds[1::2] = coords.max(axis=0)
    return bounds
