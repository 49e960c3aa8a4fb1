"""Tolerance-based equality and ordering of floating point keys.

Two values are equal when they differ by at most the noise threshold of
their key. This equality is reflexive and symmetric but NOT transitive:
a chain a ~ b ~ c does not imply a ~ c. Algorithms built on it must only
compare adjacent entries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .datastructures import NODE_DIM
from .exceptions import violation

log = logging.getLogger(__name__)


def compare_values(a: float, b: float, threshold: float) -> int:
    """Return -1, 0 or 1 for a < b, a ~ b, a > b under ``threshold``."""
    if abs(a - b) <= threshold:
        return 0
    return -1 if a < b else 1


def as_thresholds(noise_threshold: ArrayLike, nkeys: int | None = None) -> NDArray[np.float64]:
    """Validate a threshold vector (nonnegative, finite, one entry per key)."""
    thresholds = np.atleast_1d(np.asarray(noise_threshold, dtype=np.float64)).ravel()
    if not np.all(np.isfinite(thresholds)) or np.any(thresholds < 0):
        raise violation(f"Noise thresholds must be finite and nonnegative, got {thresholds}")
    if nkeys is not None and len(thresholds) != nkeys:
        raise violation(
            f"Expected {nkeys} noise thresholds (one per key), got {len(thresholds)}"
        )
    return thresholds


def as_blocks(values: ArrayLike, blocklen: int = NODE_DIM) -> NDArray[np.float64]:
    """View a flat sequence [a1 b1 c1 a2 ...] as an (n, blocklen) array."""
    if blocklen < 1:
        raise violation(f"Block length must be positive, got {blocklen}")
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim == 2:
        if arr.shape[1] != blocklen:
            raise violation(f"Expected blocks of {blocklen} columns, got shape {arr.shape}")
        return arr
    arr = arr.ravel()
    if arr.size % blocklen != 0:
        raise violation(
            f"Sequence of length {arr.size} is not a whole number of blocks of {blocklen}"
        )
    return arr.reshape(-1, blocklen)


@dataclass(frozen=True)
class ToleranceComparator:
    """Lexicographic comparison of key tuples with one threshold per key.

    Parameters
    ----------
    noise_threshold : sequence of float
        Tolerance for each key, in key order. Always explicit.
    """

    noise_threshold: tuple[float, ...]

    def __post_init__(self) -> None:
        thresholds = as_thresholds(self.noise_threshold)
        object.__setattr__(self, "noise_threshold", tuple(float(t) for t in thresholds))

    @property
    def nkeys(self) -> int:
        return len(self.noise_threshold)

    def _check(self, a: Sequence[float], b: Sequence[float]) -> None:
        if len(a) != self.nkeys or len(b) != self.nkeys:
            raise violation(
                f"Comparator expects {self.nkeys} keys, got {len(a)} and {len(b)}"
            )

    def compare(self, a: Sequence[float], b: Sequence[float]) -> int:
        """First key that is not tolerant-equal decides; 0 if all are."""
        self._check(a, b)
        for x, y, threshold in zip(a, b, self.noise_threshold):
            result = compare_values(x, y, threshold)
            if result != 0:
                return result
        return 0

    def equal(self, a: Sequence[float], b: Sequence[float]) -> bool:
        self._check(a, b)
        return all(
            abs(x - y) <= threshold for x, y, threshold in zip(a, b, self.noise_threshold)
        )


def relative_noise_threshold(
    coordinates: ArrayLike, relative_tolerance: float
) -> NDArray[np.float64]:
    """Per-axis threshold proportional to the extent of the coordinate cloud.

    Axes without extent (e.g. z for a planar mesh) use the largest extent. A
    cloud without any extent falls back to ``relative_tolerance`` itself.
    """
    if relative_tolerance < 0:
        raise violation(f"Relative tolerance must be nonnegative, got {relative_tolerance}")
    coords = as_blocks(coordinates)
    if len(coords) == 0:
        return np.full(NODE_DIM, relative_tolerance)

    extent = coords.max(axis=0) - coords.min(axis=0)
    largest = extent.max()
    if largest == 0:
        return np.full(NODE_DIM, relative_tolerance)

    extent = np.where(extent > 0, extent, largest)
    thresholds = relative_tolerance * extent
    log.debug(f"Noise threshold from extent {extent}: {thresholds}")
    return thresholds
