"""Coleman integrals of the basis differentials x^i y^{-j} dx.

Tiny integrals between points of one residue disk are computed by
integrating local expansions. Integrals between arbitrary points use the
Frobenius equivariance of Coleman integration: for the vector v of integrals
from P to the base point,

    (M - I) v = C - ∫_P^{φ(P)}

where M is the Frobenius matrix and C the evaluation column of P.
"""

import logging
from typing import List, Optional

import numpy as np

from coleman.expansion import basis_monomials
from coleman.frobenius import frobenius_matrix_on_lift
from coleman.local import local_coordinates
from coleman.points import Point, frobenius_lift, in_same_disk, is_in_weierstrass_disk, verify_pts
from primitives.linalg import solve
from primitives.polynomial import Poly
from primitives.rings import PadicRing, PrecisionRing

logger = logging.getLogger(__name__)


def tiny_integral_monomial(a: int, h: Poly, N: int, P: Point, Q: Point, i: int, j: int, ring: PrecisionRing):
    """∫_P^Q x^i y^{-j} dx for P and Q in one residue disk.

    Raises:
        ValueError: if P and Q lie in different residue disks
        NotImplementedError: if the disk is a Weierstrass disk
    """
    if not in_same_disk(P, Q, ring):
        raise ValueError("tiny integrals need both endpoints in one residue disk")
    if is_in_weierstrass_disk(P, ring):
        raise NotImplementedError("tiny integrals of y^{-j} dx in a Weierstrass disk")
    x, y, (tQ,) = local_coordinates(a, h, N, P, ring, [Q])
    integrand = (x ** i) * x.derivative() * (y ** -j)
    return integrand.integral().evaluate(tQ)


def tiny_integrals_on_basis(a: int, h: Poly, N: int, P: Point, Q: Point, ring: PrecisionRing) -> List:
    b = len(h) - 1
    return [tiny_integral_monomial(a, h, N, P, Q, i, j, ring) for i, j in basis_monomials(a, b)]


def coleman_integrals(a: int, h: Poly, N: int, p: int, n: int, P: Point, Q: Optional[Point] = None) -> np.ndarray:
    """Coleman integrals of every basis differential, from Q to P.

    Without Q the integrals run from the base point fixed by Frobenius
    equivariance.

    Args:
        a: exponent of y
        h: ascending integer coefficients of a lift of h to Z_p
        N: p-adic precision
        p: characteristic
        n: degree of the residue field, must be 1
        P, Q: points with integer coordinates

    Returns:
        Vector over Z/p^N, ordered as :func:`coleman.expansion.basis_monomials`

    Raises:
        NotImplementedError: if n != 1
        ValueError: if a point is not on the curve
        NonUnitError: if M - I is singular modulo p
    """
    if n != 1:
        raise NotImplementedError("Coleman integration is only implemented over GF(p)")
    ring = PadicRing(p, N)
    if Q is not None:
        return ring.reduce(coleman_integrals(a, h, N, p, n, P) - coleman_integrals(a, h, N, p, n, Q))

    P = (ring(P[0]), ring(P[1]))
    if not verify_pts(a, h, [P], ring):
        raise ValueError(f"point {P} is not on the curve")
    action = frobenius_matrix_on_lift(a, h, N, p, n, [P])
    dim = action.dim
    tiny = tiny_integrals_on_basis(a, h, N, P, frobenius_lift(a, h, P, ring), ring)
    logger.debug("tiny integrals to the Frobenius lift of %s: %s", P, tiny)

    rhs = ring.zeros((dim,))
    for r in range(dim):
        rhs[r] = ring.reduce(action.columns[r, 0] - tiny[r])
    return solve(ring.reduce(action.matrix - ring.identity(dim)), rhs, ring)
