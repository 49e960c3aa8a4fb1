"""Bounded Newton iteration inverting element mappings.

``get_root`` never raises on a numerically bad system: every failure is a
return code, and it is up to the caller to retry with another guess or to
report the point as not located.
"""

from __future__ import annotations

import logging
from typing import Callable, MutableSequence, Protocol, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .comparison import as_blocks
from .datastructures import (
    DEFAULT_BOXSIZE,
    DEFAULT_MAXIT,
    DEFAULT_TOL,
    NODE_DIM,
    ROOT_CONVERGED,
    ROOT_FAILED,
    ROOT_OUT_OF_BOX,
    UNLOCATED,
    RootParameters,
)
from .exceptions import violation

log = logging.getLogger(__name__)


class PolynomialSystem(Protocol):
    """1 to 3 equations in the first 1 to 3 of (ki, eta, phi)."""

    def __len__(self) -> int: ...

    def evaluate(self, point: Sequence[float]) -> ArrayLike: ...

    def jacobian(self, point: Sequence[float]) -> ArrayLike: ...


def _is_singular(jac: NDArray[np.float64]) -> bool:
    singular_values = np.linalg.svd(jac, compute_uv=False)
    return singular_values[-1] <= len(jac) * np.finfo(np.float64).eps * singular_values[0]


def get_root(
    polys: PolynomialSystem,
    rhs: ArrayLike,
    initial_guess: MutableSequence[float],
    boxsize: float = DEFAULT_BOXSIZE,
    tol: float = DEFAULT_TOL,
    maxit: int = DEFAULT_MAXIT,
) -> int:
    """
    Solve ``polys(ki, eta, phi) = rhs`` with Newton's method.

    Parameters
    ----------
    polys : PolynomialSystem
        System of n = 1, 2 or 3 equations in the first n unknowns.
    rhs : array_like (n,)
        Right-hand side.
    initial_guess : mutable sequence (>= n,)
        Starting point, assumed inside the box. Overwritten with the solution
        on convergence, untouched otherwise.
    boxsize : float
        Half-width of the box around the origin the iterates must stay in.
    tol : float
        Convergence when the sum of the absolute Newton step entries is below it.
    maxit : int
        Maximum number of Newton steps.

    Returns
    -------
    int
        1 on convergence, 0 as soon as an iterate leaves the box,
        -1 for any other failure (no convergence, singular Jacobian).
    """
    n = len(polys)
    if not 1 <= n <= NODE_DIM:
        raise violation(f"Root finding needs 1 to 3 polynomials, got {n}")
    rhs = np.asarray(rhs, dtype=np.float64).ravel()
    if len(rhs) != n:
        raise violation(f"Right-hand side has {len(rhs)} entries for {n} polynomials")
    if len(initial_guess) < n:
        raise violation(f"Initial guess has {len(initial_guess)} entries for {n} unknowns")

    point = np.zeros(NODE_DIM)
    point[:n] = [float(initial_guess[i]) for i in range(n)]

    for _ in range(maxit):
        residual = np.asarray(polys.evaluate(point), dtype=np.float64).ravel() - rhs
        jac = np.asarray(polys.jacobian(point), dtype=np.float64).reshape(n, n)
        if not (np.all(np.isfinite(residual)) and np.all(np.isfinite(jac))):
            return ROOT_FAILED
        if _is_singular(jac):
            return ROOT_FAILED
        try:
            step = np.linalg.solve(jac, residual)
        except np.linalg.LinAlgError:
            return ROOT_FAILED

        point[:n] -= step

        if np.any(np.abs(point[:n]) > boxsize):
            return ROOT_OUT_OF_BOX
        if np.sum(np.abs(step)) <= tol:
            for i in range(n):
                initial_guess[i] = float(point[i])
            return ROOT_CONVERGED

    return ROOT_FAILED


def get_reference_coordinates(
    mappings: Sequence[PolynomialSystem],
    coordinates: ArrayLike,
    elems: MutableSequence[int],
    kietaphis: MutableSequence[float],
    rootparams: RootParameters | None = None,
    initial_guess: Sequence[float] | None = None,
    is_inside: Callable[[NDArray[np.float64]], bool] | None = None,
) -> int:
    """
    Locate points in a set of elements of the same type.

    ``mappings[e]`` maps reference coordinates to the physical coordinates of
    element ``e``. Points with ``elems[i] != -1`` are skipped, which allows
    chaining calls over several groups of elements. For every located point
    ``elems[i]`` receives the element number and ``kietaphis[3i:3i+3]`` its
    reference coordinates.

    Returns
    -------
    int
        Number of points that are still not located.
    """
    params = rootparams or RootParameters()
    coords = as_blocks(coordinates, NODE_DIM)
    numcoords = len(coords)
    if len(elems) != numcoords or len(kietaphis) != NODE_DIM * numcoords:
        raise violation(
            f"Expected {numcoords} element slots and {NODE_DIM * numcoords} reference "
            f"coordinates, got {len(elems)} and {len(kietaphis)}"
        )
    start = np.zeros(NODE_DIM)
    if initial_guess is not None:
        guess0 = np.asarray(initial_guess, dtype=np.float64).ravel()[:NODE_DIM]
        start[: len(guess0)] = guess0

    for i in range(numcoords):
        if elems[i] != UNLOCATED:
            continue
        for e, mapping in enumerate(mappings):
            guess = start.copy()
            status = get_root(
                mapping, coords[i, : len(mapping)], guess,
                boxsize=params.boxsize, tol=params.tol, maxit=params.maxit,
            )
            if status != ROOT_CONVERGED:
                continue
            if is_inside is not None and not is_inside(guess):
                continue
            elems[i] = e
            for d in range(NODE_DIM):
                kietaphis[NODE_DIM * i + d] = float(guess[d])
            break

    unlocated = sum(1 for e in elems if e == UNLOCATED)
    log.debug(f"{unlocated} of {numcoords} points not located in {len(mappings)} elements")
    return unlocated
