"""Collapse duplicated coordinates onto canonical node numbers."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
from numba import njit
from numpy.typing import ArrayLike, NDArray

from .comparison import as_blocks, as_thresholds
from .datastructures import CORNER_COUNTS, EDGE_DEFINITIONS, NODE_DIM
from .exceptions import violation
from .sorting import stable_coordinate_sort

log = logging.getLogger(__name__)


@njit
def _collapse_sorted(sorted_coords, thresholds):
    """
    Group ids of sorted coordinates.

    A new group starts whenever an entry differs from the previous one by
    more than the threshold on any axis.
    """
    n = sorted_coords.shape[0]
    ndim = sorted_coords.shape[1]
    ids = np.empty(n, dtype=np.int64)

    count = 0
    for i in range(n):
        if i == 0:
            count = 1
        else:
            for d in range(ndim):
                if abs(sorted_coords[i, d] - sorted_coords[i - 1, d]) > thresholds[d]:
                    count += 1
                    break
        ids[i] = count - 1

    return ids, count


def remove_duplicated_coordinates(
    noise_threshold: ArrayLike,
    coordinates: ArrayLike,
) -> tuple[NDArray[np.int64], int]:
    """
    Renumbering that merges nodes at the same location.

    Parameters
    ----------
    noise_threshold : array_like (3,)
        Tolerance on x, y and z.
    coordinates : array_like
        Flat ``[x1 y1 z1 x2 ...]`` sequence or (n, 3) array.

    Returns
    -------
    renumbering : ndarray (n,)
        Canonical number of every node, ``unique[renumbering] == coordinates``.
    count : int
        Number of canonical nodes. Canonical numbers follow the sorted order.

    Notes
    -----
    Only neighbours in sorted order are compared, so a chain of nodes that
    are each within the threshold of the next collapses into one node even
    if its ends are further apart.
    """
    thresholds = as_thresholds(noise_threshold, NODE_DIM)
    coords = as_blocks(coordinates, NODE_DIM)

    reordering = stable_coordinate_sort(thresholds, coords)
    ids, count = _collapse_sorted(np.ascontiguousarray(coords[reordering]), thresholds)

    renumbering = np.empty(len(coords), dtype=np.int64)
    renumbering[reordering] = ids

    log.debug(f"Collapsed {len(coords)} coordinates onto {count} canonical nodes")
    return renumbering, int(count)


def get_unique_coordinates(
    coordinates: ArrayLike,
    renumbering: ArrayLike,
    count: int,
) -> NDArray[np.float64]:
    """Canonical coordinates, taken from the first node mapped to each number."""
    coords = as_blocks(coordinates, NODE_DIM)
    renum = np.asarray(renumbering, dtype=np.int64).ravel()
    if len(renum) != len(coords):
        raise violation(
            f"Renumbering of length {len(renum)} does not match {len(coords)} coordinates"
        )
    if len(renum) and (renum.min() < 0 or renum.max() >= count):
        raise violation(f"Renumbering values must lie in [0, {count})")

    # np.unique reports the first occurrence of every canonical number
    numbers, first = np.unique(renum, return_index=True)
    unique = np.zeros((count, NODE_DIM), dtype=np.float64)
    unique[numbers] = coords[first]
    return unique


def assign_edge_numbers(
    noise_threshold: ArrayLike,
    cornercoords: Sequence[ArrayLike],
) -> tuple[NDArray[np.int64], NDArray[np.bool_]]:
    """
    Number the edges of every element through their barycenters.

    Parameters
    ----------
    noise_threshold : array_like (3,)
        Tolerance on x, y and z.
    cornercoords : sequence of array_like
        ``cornercoords[t]`` holds the corner coordinates of all elements of
        type ``t``, element after element. Empty entries are allowed.

    Returns
    -------
    edgenumbers : ndarray
        Edge number of every edge of every element, from the lowest element
        type to the highest. Edges with the same barycenter share a number.
    isbarycenteronnode : ndarray of bool (numedges,)
        True for an edge number whose barycenter lies on any corner node.
    """
    thresholds = as_thresholds(noise_threshold, NODE_DIM)
    if len(cornercoords) > len(CORNER_COUNTS):
        raise violation(f"Got corner coordinates for {len(cornercoords)} element types")

    nodes = []
    barycenters = []
    for elemtype, coords in enumerate(cornercoords):
        coords = as_blocks(coords, NODE_DIM)
        ncorners = CORNER_COUNTS[elemtype]
        if len(coords) % ncorners != 0:
            raise violation(
                f"{len(coords)} corners do not make whole elements of type {elemtype}"
            )
        nodes.append(coords)
        if len(coords) == 0 or not EDGE_DEFINITIONS[elemtype]:
            continue
        edges = np.asarray(EDGE_DEFINITIONS[elemtype])
        corners = coords.reshape(-1, ncorners, NODE_DIM)
        bary = 0.5 * (corners[:, edges[:, 0]] + corners[:, edges[:, 1]])
        barycenters.append(bary.reshape(-1, NODE_DIM))

    if not barycenters:
        return np.empty(0, dtype=np.int64), np.empty(0, dtype=bool)

    allbary = np.concatenate(barycenters)
    edgenumbers, numedges = remove_duplicated_coordinates(thresholds, allbary)

    # Edge barycenters first, then every corner node
    candidates = np.concatenate(
        [get_unique_coordinates(allbary, edgenumbers, numedges)] + nodes
    )
    merged, _ = remove_duplicated_coordinates(thresholds, candidates)
    isbarycenteronnode = np.isin(merged[:numedges], merged[numedges:])

    log.debug(f"{len(allbary)} element edges numbered into {numedges} edges")
    return edgenumbers, isbarycenteronnode
