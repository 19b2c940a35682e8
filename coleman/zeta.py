"""Zeta functions of superelliptic curves from the Frobenius matrix.

For a curve of genus g over GF(q), q = p^n,

    Z(t) = L(t) / ((1 - t)(1 - q t))

where L is the reversed characteristic polynomial of the q-power Frobenius.
The matrix of the absolute (p-power) Frobenius is computed to precision N,
twisted into the q-power Frobenius, and the coefficients L[0..g] are
recovered from their residues modulo p^N; the rest follow from the
functional equation L[2g-i] = q^{g-i} L[i].
"""

import logging
from dataclasses import dataclass
from math import floor, log
from typing import List, Sequence, Tuple

import galois
import sympy as sp
from mpmath.libmp import NoConvergence

from coleman.curve import Curve
from coleman.frobenius import frobenius_matrix
from primitives.linalg import apply, charpoly, matmul

logger = logging.getLogger(__name__)

# Working precision (decimal digits) of the first root isolation attempt
WEIL_START_DPS = 30
# Number of precision doublings before giving up
MAX_ROOT_RETRIES = 8
# Roots within this many tolerances of the circle, but outside one, are retried
AMBIGUITY_FACTOR = 4


class RootIsolationError(ArithmeticError):
    """Raised when complex roots cannot be isolated within the retry ceiling."""


@dataclass(frozen=True)
class ZetaFunction:
    """Z(t) = L(t) / ((1 - t)(1 - q t)) with integer L."""

    l_polynomial: Tuple[int, ...]
    q: int

    @property
    def genus(self) -> int:
        return (len(self.l_polynomial) - 1) // 2

    @property
    def numerator(self) -> List[int]:
        return list(self.l_polynomial)

    @property
    def denominator(self) -> List[int]:
        return [1, -(self.q + 1), self.q]

    def series(self, terms: int) -> List[int]:
        """First ``terms`` coefficients of the power series of Z(t)."""
        num = self.numerator
        den = self.denominator
        out = []
        for m in range(terms):
            c = num[m] if m < len(num) else 0
            for i in range(1, min(m, 2) + 1):
                c -= den[i] * out[m - i]
            out.append(c)
        return out

    def derivative_at_zero(self) -> int:
        """Z'(0), the number of points over GF(q) of the smooth projective model."""
        return self.series(2)[1]

    def point_count(self, r: int) -> int:
        """#C(GF(q^r)) = q^r + 1 - Σ α_i^r over the reciprocal roots α_i of L."""
        c = self.l_polynomial
        sums = []
        for m in range(1, r + 1):
            # Newton's identities for 1 + c_1 t + ... = Π (1 - α_i t)
            s = -m * (c[m] if m < len(c) else 0)
            for i in range(1, m):
                s -= (c[i] if i < len(c) else 0) * sums[m - i - 1]
            sums.append(s)
        return self.q ** r + 1 - sums[r - 1]


def precision_bound(g: int, n: int, p: int) -> int:
    """First integer strictly above n g / 2 + 2 g log_p 2."""
    return floor(n * g / 2 + 2 * g * log(2, p) + 1)


def l_polynomial_from_charpoly(cp: Sequence[int], g: int, q: int, modulus: int) -> List[int]:
    """Reverse det(t - F) mod p^N, centre L[0..g] and apply the functional equation."""
    coeffs = [cp[2 * g - i] for i in range(2 * g + 1)]
    mid = modulus >> 1
    for i in range(g + 1):
        if coeffs[i] > mid:
            coeffs[i] -= modulus
    for i in range(g):
        coeffs[2 * g - i] = q ** (g - i) * coeffs[i]
    return coeffs


def zeta_function(a: int, hbar: galois.Poly) -> ZetaFunction:
    """Zeta function of the smooth projective model of y^a = hbar(x).

    Raises:
        ValueError: if the curve is invalid or p is too small for the
            precision the genus requires
    """
    curve = Curve(a, hbar)
    p, n, q, g = curve.p, curve.n, curve.q, curve.genus
    N = precision_bound(g, n, p)
    logger.info("zeta function of %r: genus %d, precision %d", curve, g, N)

    action = frobenius_matrix(a, hbar, N)
    ring = action.ring
    M = action.matrix
    twisted = M
    for _ in range(n - 1):
        twisted = apply(ring.frobenius, twisted)
        M = matmul(M, twisted, ring)

    cp = [ring.to_int(c) for c in charpoly(M, ring)]
    return ZetaFunction(tuple(l_polynomial_from_charpoly(cp, g, q, ring.modulus)), q)


# --- Weil bound ---

def is_squarefree(coeffs: Sequence[int]) -> bool:
    """True if the integer polynomial with ascending ``coeffs`` has no repeated factor over Q."""
    t = sp.Symbol("t")
    return sp.Poly(list(reversed(coeffs)), t, domain="QQ").is_sqf


def is_weil(l_polynomial: Sequence[int], q: int) -> bool:
    """True if every complex root of L has absolute value q^{-1/2}.

    Roots are isolated with sympy's ``Poly.nroots`` (mpmath underneath)
    starting at WEIL_START_DPS digits. The precision is doubled when the
    iteration does not converge, and when a root lies too close to the
    tolerance to decide.

    Raises:
        ValueError: if L is not squarefree
        RootIsolationError: after MAX_ROOT_RETRIES failed doublings
    """
    if not is_squarefree(l_polynomial):
        raise ValueError("L-polynomial is not squarefree")
    coeffs = list(l_polynomial)
    while coeffs and coeffs[-1] == 0:
        coeffs.pop()
    if len(coeffs) <= 1:
        return True
    poly = sp.Poly(list(reversed(coeffs)), sp.Symbol("t"))

    dps = WEIL_START_DPS
    for _ in range(MAX_ROOT_RETRIES + 1):
        try:
            roots = poly.nroots(n=dps, maxsteps=10 * dps)
        except NoConvergence:
            logger.debug("root isolation did not converge at %d digits", dps)
            dps *= 2
            continue
        target = (1 / sp.sqrt(q)).evalf(dps)
        tol = sp.Rational(1, 10 ** (dps // 2))
        margins = [abs(abs(r) - target) / target for r in roots]
        if all(m <= tol for m in margins):
            return True
        if any(m > AMBIGUITY_FACTOR * tol for m in margins):
            return False
        logger.debug("root modulus within %d tolerances of q^{-1/2} at %d digits", AMBIGUITY_FACTOR, dps)
        dps *= 2
    raise RootIsolationError(f"roots not isolated after {MAX_ROOT_RETRIES} precision doublings")
