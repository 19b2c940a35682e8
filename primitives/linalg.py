"""Dense matrices over precision rings.

Matrices are 2D numpy object arrays of ring representatives. Products use
numpy's object ``@`` followed by one reduction.
"""

from math import lcm
from typing import List, Tuple

import numpy as np
import sympy as sp

from primitives.rings import NonUnitError, PadicRing, PrecisionRing


def matmul(A: np.ndarray, B: np.ndarray, ring: PrecisionRing) -> np.ndarray:
    return ring.reduce(A @ B)


def apply(f, A: np.ndarray) -> np.ndarray:
    """Apply a scalar map entrywise, keeping the object dtype."""
    out = np.empty(A.shape, dtype=object)
    for idx, x in np.ndenumerate(A):
        out[idx] = f(x)
    return out


def inverse(A: np.ndarray, ring: PrecisionRing) -> np.ndarray:
    """Inverse of a square matrix over ``ring``.

    Gauss-Jordan elimination choosing a unit pivot in each column. Over a
    local ring this succeeds iff the reduction mod p is invertible. When no
    unit pivot exists the exact rational pseudo-inverse of the integer lift
    is tried instead (Z/p^N only).

    Raises:
        NonUnitError: if neither route produces a unit-scaled inverse
    """
    try:
        return _gauss_jordan_inverse(A, ring)
    except NonUnitError:
        if not isinstance(ring, PadicRing):
            raise
    adjugate, d = pseudo_inverse(A, ring)
    if not ring.is_unit(d):
        raise NonUnitError(f"matrix is not invertible modulo {ring.p}^{ring.precision}")
    return ring.reduce(adjugate * ring.inv(d))


def _gauss_jordan_inverse(A: np.ndarray, ring: PrecisionRing) -> np.ndarray:
    n = A.shape[0]
    assert A.shape == (n, n), f"expected a square matrix, got {A.shape}"
    work = ring.reduce(A.copy())
    result = ring.identity(n)
    for col in range(n):
        pivot = next((r for r in range(col, n) if ring.is_unit(work[r, col])), None)
        if pivot is None:
            raise NonUnitError(f"no unit pivot in column {col}")
        if pivot != col:
            work[[col, pivot]] = work[[pivot, col]]
            result[[col, pivot]] = result[[pivot, col]]
        scale = ring.inv(work[col, col])
        work[col] = ring.reduce(work[col] * scale)
        result[col] = ring.reduce(result[col] * scale)
        for r in range(n):
            if r != col and work[r, col] != 0:
                factor = work[r, col]
                work[r] = ring.reduce(work[r] - factor * work[col])
                result[r] = ring.reduce(result[r] - factor * result[col])
    return result


def pseudo_inverse(A: np.ndarray, ring: PrecisionRing) -> Tuple[np.ndarray, int]:
    """Integer matrix Ai and integer d with A Ai = d I, for the integer lift of A.

    Raises:
        NonUnitError: if the lift is singular over Q
    """
    n = A.shape[0]
    lift = sp.Matrix(n, n, lambda i, j: ring.to_int(A[i, j]))
    if lift.det() == 0:
        raise NonUnitError("integer lift is singular")
    inv = lift.inv()
    d = lcm(*(int(sp.fraction(x)[1]) for x in inv))
    adjugate = ring.zeros((n, n))
    for i in range(n):
        for j in range(n):
            adjugate[i, j] = ring(int(inv[i, j] * d))
    return adjugate, d


def solve(A: np.ndarray, b: np.ndarray, ring: PrecisionRing) -> np.ndarray:
    """x with A x = b."""
    return matmul(inverse(A, ring), b, ring)


def trace(A: np.ndarray, ring: PrecisionRing):
    acc = ring.zero
    for i in range(A.shape[0]):
        acc = acc + A[i, i]
    return ring.reduce(acc)


def charpoly(A: np.ndarray, ring: PrecisionRing) -> List:
    """Ascending coefficients of det(t I - A) by Faddeev-LeVerrier.

    Divides only by 1..dim, which are units when p > dim.
    """
    n = A.shape[0]
    coeffs = [ring.zero] * (n + 1)
    coeffs[n] = ring.one
    M = ring.zeros((n, n))
    identity = ring.identity(n)
    for k in range(1, n + 1):
        M = ring.reduce(A @ M + identity * coeffs[n - k + 1])
        coeffs[n - k] = ring.reduce(-trace(matmul(A, M, ring), ring) * ring.inv(k))
    return coeffs
