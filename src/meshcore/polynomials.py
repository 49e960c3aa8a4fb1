"""Polynomials in the reference coordinates (ki, eta, phi).

A small collaborator for the Newton solver: a polynomial is a 3-D array of
monomial coefficients ``c[i, j, k]`` multiplying ``ki**i * eta**j * phi**k``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

import numpy as np
from numpy.polynomial import polynomial as P
from numpy.typing import ArrayLike, NDArray


def _pad_to(coefs: NDArray[np.float64], shape: tuple[int, int, int]) -> NDArray[np.float64]:
    out = np.zeros(shape)
    out[: coefs.shape[0], : coefs.shape[1], : coefs.shape[2]] = coefs
    return out


@dataclass(eq=False)
class Polynomial:
    """Polynomial in (ki, eta, phi) stored as a monomial coefficient cube."""

    coefs: NDArray[np.float64]

    def __post_init__(self) -> None:
        coefs = np.asarray(self.coefs, dtype=np.float64)
        if coefs.ndim > 3:
            raise ValueError(f"Coefficient array must have at most 3 axes, got {coefs.ndim}")
        while coefs.ndim < 3:
            coefs = coefs[..., np.newaxis]
        self.coefs = coefs

    @classmethod
    def from_terms(cls, terms: dict[tuple[int, int, int], float]) -> Polynomial:
        """Build from ``{(i, j, k): coefficient}`` monomials."""
        if not terms:
            return cls(np.zeros((1, 1, 1)))
        shape = tuple(max(exps[d] for exps in terms) + 1 for d in range(3))
        coefs = np.zeros(shape)
        for exps, value in terms.items():
            coefs[exps] += value
        return cls(coefs)

    @classmethod
    def constant(cls, value: float) -> Polynomial:
        return cls(np.full((1, 1, 1), float(value)))

    def evaluate(self, ki: float, eta: float = 0.0, phi: float = 0.0) -> float:
        return float(P.polyval3d(ki, eta, phi, self.coefs))

    def derivative(self, var: int) -> Polynomial:
        """Derivative with respect to ki (0), eta (1) or phi (2)."""
        if var not in (0, 1, 2):
            raise ValueError(f"Variable index must be 0, 1 or 2, got {var}")
        if self.coefs.shape[var] == 1:
            return Polynomial(np.zeros((1, 1, 1)))
        return Polynomial(P.polyder(self.coefs, m=1, axis=var))

    def __add__(self, other: Polynomial | float) -> Polynomial:
        if not isinstance(other, Polynomial):
            other = Polynomial.constant(other)
        shape = tuple(max(a, b) for a, b in zip(self.coefs.shape, other.coefs.shape))
        return Polynomial(_pad_to(self.coefs, shape) + _pad_to(other.coefs, shape))

    __radd__ = __add__

    def __neg__(self) -> Polynomial:
        return Polynomial(-self.coefs)

    def __sub__(self, other: Polynomial | float) -> Polynomial:
        return self + (-other)

    def __mul__(self, scalar: float) -> Polynomial:
        return Polynomial(self.coefs * float(scalar))

    __rmul__ = __mul__


@dataclass(eq=False)
class Polynomials:
    """System of 1 to 3 polynomials in the first 1 to 3 reference coordinates."""

    polys: list[Polynomial]
    _derivatives: list[list[Polynomial]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.polys = list(self.polys)
        if not 1 <= len(self.polys) <= 3:
            raise ValueError(f"A system holds 1 to 3 polynomials, got {len(self.polys)}")
        n = len(self.polys)
        self._derivatives = [[p.derivative(v) for v in range(n)] for p in self.polys]

    @classmethod
    def from_coefficients(cls, coefs: Iterable[ArrayLike]) -> Polynomials:
        return cls([Polynomial(c) for c in coefs])

    def __len__(self) -> int:
        return len(self.polys)

    @staticmethod
    def _unpack(point: Sequence[float]) -> tuple[float, float, float]:
        padded = list(point[:3]) + [0.0] * (3 - min(len(point), 3))
        return padded[0], padded[1], padded[2]

    def evaluate(self, point: Sequence[float]) -> NDArray[np.float64]:
        ki, eta, phi = self._unpack(point)
        return np.array([p.evaluate(ki, eta, phi) for p in self.polys])

    def jacobian(self, point: Sequence[float]) -> NDArray[np.float64]:
        """``J[i, j] = d poly_i / d var_j`` for the first ``len(self)`` variables."""
        ki, eta, phi = self._unpack(point)
        return np.array(
            [[d.evaluate(ki, eta, phi) for d in row] for row in self._derivatives]
        )
