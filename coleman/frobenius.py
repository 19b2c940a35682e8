"""Action of Frobenius on the first cohomology of y^a = h(x).

The basis is x^i y^{-j} dx for 0 <= i <= b-2, 1 <= j <= a-1, ordered by j
then i. Row (j-1)(b-1) + i of the matrix holds the reduction of
σ(x^i y^{-j} dx); its nonzero entries all lie in the block of index
block(-pj, a).

Working precision is N + 1: the exact divisions in both reductions lose
one digit, and the result is returned at precision N.
"""

import logging
from dataclasses import dataclass
from math import gcd
from typing import Optional, Sequence

import galois
import numpy as np

from coleman.expansion import basis_monomials, block, row, rs_combination, scalar_coefficients
from coleman.reduction import (
    hred_matrix,
    hred_sequences,
    hreduce,
    hreduce_inverses,
    vred_matrix,
    vred_sequences,
    vreduce,
)
from primitives.field import irreducible_coeffs, is_squarefree, lift_poly
from primitives.polynomial import cast, frobenius, mul
from primitives.progression import inverse_vandermonde
from primitives.rings import PrecisionRing, SeriesRing, precision_ring

logger = logging.getLogger(__name__)


@dataclass
class FrobeniusAction:
    """Frobenius matrix modulo p^N, with evaluation columns for marked points."""

    matrix: np.ndarray
    columns: Optional[np.ndarray]
    ring: PrecisionRing

    @property
    def dim(self) -> int:
        return self.matrix.shape[0]


def check_parameters(a: int, b: int, N: int, p: int) -> None:
    """Raise ValueError unless the reductions are valid for these parameters."""
    if gcd(a, b) != 1:
        raise ValueError(f"a = {a} and deg h = {b} must be coprime")
    if a < 2:
        raise ValueError(f"a must be at least 2, got {a}")
    if b < 2:
        raise ValueError(f"h must have degree at least 2, got {b}")
    if N < 1:
        raise ValueError(f"precision N must be positive, got {N}")
    if p <= (a * N - 1) * b:
        raise ValueError(f"characteristic {p} too small, need p > {(a * N - 1) * b}")


def frobenius_matrix_on_lift(
    a: int,
    h: Sequence,
    N: int,
    p: int,
    n: int = 1,
    points: Sequence = (),
    modulus_poly: Optional[Sequence[int]] = None,
) -> FrobeniusAction:
    """Frobenius action for a lift h of the curve to Z_q.

    Args:
        a: exponent of y
        h: ascending coefficients of h, as ints (n = 1) or lists of n ints
            in the basis 1, θ, ..., θ^{n-1}
        N: p-adic precision of the result
        p: characteristic
        n: degree of the residue field over GF(p)
        points: marked points (x, y) on the curve, as ring representatives
        modulus_poly: defining polynomial of the unramified extension
            (galois default for GF(p^n) when None)

    Returns:
        FrobeniusAction whose ``columns`` has one column per marked point
        (None when no point is marked)

    Raises:
        ValueError: if the parameters violate the conditions of the reduction
        NotImplementedError: if p is symbolic
        NonUnitError: if a marked point has y divisible by p
    """
    b = len(h) - 1
    ring0 = precision_ring(p, n, N, modulus_poly)
    if isinstance(ring0, SeriesRing):
        raise NotImplementedError(f"reduction intervals ((l-1)p, lp-b-1] need an integer p, got {p}")
    check_parameters(a, b, N, p)
    ring1 = ring0.with_precision(N + 1)
    h = cast(h, ring1)
    points = [(ring1(x), ring1(y)) for x, y in points]
    logger.debug("frobenius action: a=%d b=%d p=%d n=%d N=%d, %d marked points", a, b, p, n, N, len(points))

    # --- Horizontal reduction ---
    # wH[k][j-1][i] is the k-th term of σ(x^i y^{-j} dx), reduced horizontally
    wH = [[None] * (a - 1) for _ in range(N)]
    vinv = inverse_vandermonde(N, ring0) if N > 1 else None
    hk = [ring1.one]
    h_frob = frobenius(h, ring1)
    for k in range(N):
        B = b - 1 + b * k
        for j in range(1, a):
            t = row(-p * (a * k + j), a)
            iota = block(-p * j, a)
            red = hred_matrix(t, iota, a, h, points, ring1)
            Ms, Ds = hred_sequences(red, b, p, N, B, vinv, ring0)
            mu = scalar_coefficients(j, k, a, hk, p, N, ring1)
            inverses = hreduce_inverses(red, Ds, b, p, b - 2 + len(mu))
            wH[k][j - 1] = [hreduce(i, b, mu, red, Ms, Ds, p, inverses) for i in range(b - 1)]
        hk = mul(hk, h_frob, ring1)
        logger.debug("horizontal reduction done for k=%d (B=%d)", k, B)

    # --- Vertical reduction ---
    rs, ss = rs_combination(h, ring1)
    wV = []
    for j in range(1, a):
        red = vred_matrix(block(-p * j, a), a, rs, ss, points, ring1)
        Ms, Ds = vred_sequences(red, j, a, p, N)
        wV.append([vreduce([wH[k][j - 1][i] for k in range(N)], Ms, Ds, ring1) for i in range(b - 1)])
    logger.debug("vertical reduction done")

    # --- Assembly ---
    dim = (a - 1) * (b - 1)
    matrix = ring0.zeros((dim, dim))
    columns = ring0.zeros((dim, len(points))) if points else None
    for i, j in basis_monomials(a, b):
        r = (j - 1) * (b - 1) + i
        offset = (block(-p * j, a) - 1) * (b - 1)
        vec = wV[j - 1][i]
        for m in range(b - 1):
            matrix[r, offset + m] = ring0.cast(vec[m])
        for m in range(len(points)):
            columns[r, m] = ring0.cast(vec[b - 1 + m])
    return FrobeniusAction(matrix, columns, ring0)


def frobenius_matrix(a: int, hbar: galois.Poly, N: int, points: Sequence = ()) -> FrobeniusAction:
    """Frobenius action for y^a = hbar(x) over GF(q).

    The coefficients of hbar are lifted to their integer representatives in
    the basis of the defining polynomial of GF(q).

    Raises:
        ValueError: if hbar is not squarefree or the parameters are invalid
    """
    if not is_squarefree(hbar):
        raise ValueError("h must be squarefree")
    field = hbar.field
    modulus_poly = irreducible_coeffs(field) if field.degree > 1 else None
    return frobenius_matrix_on_lift(a, lift_poly(hbar), N, field.characteristic, field.degree, points, modulus_poly)
