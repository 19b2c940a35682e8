"""Index bookkeeping and the scalar inputs of the reductions.

A differential x^i y^j dx lies in the block ``block(j, a)`` of row
``row(j, a)``:

    row   = j // a + 1,   block = a - j mod a    for j >= 0
    row   = (-j) // a,    block = (-j) mod a     for j < 0
"""

from fractions import Fraction
from math import factorial
from typing import List, Tuple

from primitives.linalg import inverse
from primitives.polynomial import Poly, derivative
from primitives.rings import PrecisionRing


# --- Row/block maps ---

def row(j: int, a: int) -> int:
    if j >= 0:
        return j // a + 1
    return (-j) // a


def block(j: int, a: int) -> int:
    if j >= 0:
        return a - j % a
    return (-j) % a


def basis_monomials(a: int, b: int) -> List[Tuple[int, int]]:
    """Indices (i, j) of the basis x^i y^{-j} dx, ordered by j then i."""
    return [(i, j) for j in range(1, a) for i in range(b - 1)]


# --- Binomial coefficients of the Frobenius expansion ---

def binomial_sum(j: int, k: int, a: int, N: int) -> Fraction:
    """Σ_{l=k}^{N-1} (-1)^{l+k} C(-j/a, l) C(l, k), summed from the top term down.

    The top summand is built once; each step down rescales it by
    (l+1-k) / (-j/a - l).
    """
    e = Fraction(-j, a)
    num = Fraction(1)
    for i in range(N - 1):
        num *= e - i
    summand = num / (factorial(k) * factorial(N - 1 - k))
    total = (-1) ** (N - 1 + k) * summand
    for l in range(N - 2, k - 1, -1):
        summand = summand * (l + 1 - k) / (e - l)
        total += (-1) ** (l + k) * summand
    return total


def scalar_coefficients(j: int, k: int, a: int, hk: Poly, p: int, N: int, ring: PrecisionRing) -> List:
    """Coefficients p λ_r S of the k-th term of the expansion of σ(y^{-j}).

    Args:
        j: exponent of y^{-1}, in 1..a-1
        k: expansion index, in 0..N-1
        a: exponent of y in the curve equation
        hk: σ(h)^k over ``ring`` (ascending)
        p: characteristic
        N: target precision

    Returns:
        One ring element per coefficient λ_r of ``hk``
    """
    total = ring(binomial_sum(j, k, a, N))
    return [ring.reduce(p * lam * total) for lam in hk]


# --- Partial fractions ---

def rs_combination(h: Poly, ring: PrecisionRing) -> Tuple[List[Poly], List[Poly]]:
    """Polynomials r_i (deg <= b-2) and s_i (deg <= b-1) with r_i h + s_i h' = x^i.

    Inverts the (2b-1) x (2b-1) matrix whose first b-1 rows are x^r h and
    whose last b rows are x^r h'; row i of the inverse holds the coefficients
    of r_i followed by those of s_i.

    Raises:
        NonUnitError: if the matrix is not invertible over ``ring``
    """
    b = len(h) - 1
    rk = 2 * b - 1
    dh = derivative(h, ring)
    M = ring.zeros((rk, rk))
    for r in range(b - 1):
        for c, x in enumerate(h):
            M[r, r + c] = x
    for r in range(b):
        for c, x in enumerate(dh):
            M[b - 1 + r, r + c] = x
    Mi = inverse(M, ring)
    rs = [list(Mi[i, :b - 1]) for i in range(b - 1)]
    ss = [list(Mi[i, b - 1:]) for i in range(b - 1)]
    return rs, ss
