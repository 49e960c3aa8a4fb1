"""Renumbering helpers and small vector utilities used around canonicalization.

Conventions: a renumbering maps old index -> new index, a reordering maps
new position -> old index (``new = old[reordering]``).
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import sparse

from .comparison import as_blocks
from .datastructures import NODE_DIM, UNLOCATED
from .exceptions import violation


def invert_renumbering(renum: ArrayLike) -> NDArray[np.int64]:
    """Inverse of a one-to-one renumbering."""
    renum = np.asarray(renum, dtype=np.int64).ravel()
    if not np.array_equal(np.sort(renum), np.arange(len(renum))):
        raise violation("Only a permutation of [0, n) can be inverted")
    inverse = np.empty_like(renum)
    inverse[renum] = np.arange(len(renum))
    return inverse


def get_reordering(renum: ArrayLike) -> NDArray[np.int64]:
    """Reordering that sorts the old indexes by their new number (stable)."""
    return np.argsort(np.asarray(renum, dtype=np.int64).ravel(), kind="stable").astype(np.int64)


def chain_renumbering(original: ArrayLike, new: ArrayLike) -> NDArray[np.int64]:
    """Renumbering equivalent to applying ``original`` then ``new``."""
    original = np.asarray(original, dtype=np.int64).ravel()
    new = np.asarray(new, dtype=np.int64).ravel()
    if len(original) and original.max() >= len(new):
        raise violation(
            f"Renumbering reaches index {original.max()} but the next one has {len(new)} entries"
        )
    return new[original]


def reorder(
    addresses: ArrayLike,
    data: ArrayLike,
    renumbering: ArrayLike,
) -> tuple[NDArray[np.int64], NDArray[np.float64]]:
    """
    Move the data blocks of an address-data pair to their new positions.

    Block ``i`` is ``data[addresses[i]:addresses[i+1]]``; the last address is
    ``len(data)``. Block ``i`` becomes block ``renumbering[i]``.
    """
    ad = np.asarray(addresses, dtype=np.int64).ravel()
    dat = np.asarray(data, dtype=np.float64).ravel()
    if len(ad) == 0 or ad[0] != 0 or ad[-1] != len(dat) or np.any(np.diff(ad) < 0):
        raise violation(f"Addresses must rise from 0 to the data length {len(dat)}")
    renumbering = np.asarray(renumbering, dtype=np.int64).ravel()
    if len(renumbering) != len(ad) - 1:
        raise violation(
            f"Renumbering of length {len(renumbering)} for {len(ad) - 1} address blocks"
        )
    reordering = invert_renumbering(renumbering)

    lengths = np.diff(ad)[reordering]
    outad = np.concatenate([np.zeros(1, dtype=np.int64), np.cumsum(lengths)])
    # Shift every entry of a block from its new start back to its old one
    index = np.arange(len(dat)) + np.repeat(ad[reordering] - outad[:-1], lengths)
    return outad, dat[index]


def to_address_data(
    elems: ArrayLike,
    refcoords: ArrayLike,
    totalnumelems: Sequence[int],
) -> tuple[list[NDArray[np.int64]], list[NDArray[np.float64]], NDArray[np.int64]]:
    """
    Group located points by element type and element.

    Parameters
    ----------
    elems : array_like of int
        ``[type0 elem0 type1 elem1 ...]``, one pair per point. A type of -1
        marks a point that was not located.
    refcoords : array_like
        Reference coordinates of every point, ``[ki1 eta1 phi1 ki2 ...]``.
    totalnumelems : sequence of int
        Number of elements of every type in the mesh.

    Returns
    -------
    ads : list of ndarray
        ``ads[t]`` has one address per element of type ``t`` plus the end:
        the points in element ``e`` are ``ads[t][e]`` to ``ads[t][e+1]``.
    rcs : list of ndarray
        ``rcs[t]`` holds the reference coordinates grouped by element.
    indexinrcsoforigin : ndarray
        Position of every point in ``rcs`` of its type (in blocks of 3), -1 for
        points that were not located.
    """
    pairs = np.asarray(elems, dtype=np.int64).ravel()
    if len(pairs) % 2 != 0:
        raise violation(f"Element pairs expected, got {len(pairs)} entries")
    pairs = pairs.reshape(-1, 2)
    rc = as_blocks(refcoords, NODE_DIM)
    if len(rc) != len(pairs):
        raise violation(f"{len(rc)} reference coordinates for {len(pairs)} points")
    types = pairs[:, 0]
    if np.any((types != UNLOCATED) & ((types < 0) | (types >= len(totalnumelems)))):
        raise violation(f"Element types must lie in [0, {len(totalnumelems)}) or be -1")

    ads = []
    rcs = []
    indexinrcsoforigin = np.full(len(pairs), -1, dtype=np.int64)
    for elemtype, total in enumerate(totalnumelems):
        points = np.flatnonzero(types == elemtype)
        nums = pairs[points, 1]
        if len(nums) and (nums.min() < 0 or nums.max() >= total):
            raise violation(f"Element number out of [0, {total}) for type {elemtype}")

        points = points[np.argsort(nums, kind="stable")]
        counts = np.bincount(nums, minlength=total)
        ads.append(np.concatenate([np.zeros(1, dtype=np.int64), np.cumsum(counts)]))
        rcs.append(rc[points].ravel())
        indexinrcsoforigin[points] = np.arange(len(points))

    return ads, rcs, indexinrcsoforigin


def csr_to_ijk(csrrows: ArrayLike) -> NDArray[np.int64]:
    """Explicit row index of every nonzero from a CSR row pointer."""
    indptr = np.asarray(csrrows, dtype=np.int64).ravel()
    if len(indptr) == 0 or np.any(np.diff(indptr) < 0):
        raise violation("A CSR row pointer must be nonempty and nondecreasing")
    return np.repeat(np.arange(len(indptr) - 1, dtype=np.int64), np.diff(indptr))


def csr_to_triples(
    matrix: sparse.spmatrix | sparse.sparray,
) -> tuple[NDArray[np.int64], NDArray[np.int64], NDArray[np.float64]]:
    """(row, column, value) triples of a sparse matrix, in CSR storage order."""
    csr = sparse.csr_matrix(matrix)
    rows = csr_to_ijk(csr.indptr)
    return rows, csr.indices.astype(np.int64), csr.data.astype(np.float64)


def split_vector(tosplit: ArrayLike, blocklen: int) -> list[NDArray[np.float64]]:
    """Split ``[a1 b1 a2 b2 ...]`` into ``[a1 a2 ...]``, ``[b1 b2 ...]``."""
    blocks = as_blocks(tosplit, blocklen)
    return [blocks[:, i].copy() for i in range(blocklen)]


def split_by_selection(
    vec: ArrayLike, select: ArrayLike
) -> tuple[NDArray[np.int64], NDArray[np.int64]]:
    """Entries of ``vec`` where ``select`` is false, then where it is true."""
    vec = np.asarray(vec, dtype=np.int64).ravel()
    select = np.asarray(select, dtype=bool).ravel()
    if len(vec) != len(select):
        raise violation(f"Selection of length {len(select)} for a vector of {len(vec)}")
    return vec[~select], vec[select]


def norm_blocks(tonorm: ArrayLike, blocklen: int) -> NDArray[np.float64]:
    """Euclidean norm of every block."""
    return np.linalg.norm(as_blocks(tonorm, blocklen), axis=1)


def separate(v: ArrayLike, blocklen: int, sel: Sequence[int]) -> NDArray[np.float64]:
    """For blocks ``b0 b1 ...`` return ``b0[s0] b1[s0] ... b0[s1] b1[s1] ...``."""
    blocks = as_blocks(v, blocklen)
    return blocks[:, list(sel)].T.ravel()


def duplicate(invec: ArrayLike, n: int) -> NDArray[np.float64]:
    return np.tile(np.asarray(invec, dtype=np.float64).ravel(), n)


def concatenate(tocat: Sequence[ArrayLike]) -> NDArray[np.int64]:
    if len(tocat) == 0:
        return np.empty(0, dtype=np.int64)
    return np.concatenate([np.asarray(v, dtype=np.int64).ravel() for v in tocat])


def get_equally_spaced(start: int, space: int, amount: int) -> NDArray[np.int64]:
    return start + space * np.arange(amount, dtype=np.int64)
