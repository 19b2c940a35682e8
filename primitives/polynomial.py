"""Dense univariate polynomials over precision rings.

Scalar polynomials are plain lists of ring elements in ascending order
(``f[i]`` is the coefficient of x^i). Matrices whose entries are polynomials in
an index variable are stored as a list of coefficient matrices in
:class:`MatrixPolynomial`.
"""

from typing import List, Sequence

import numpy as np

from primitives.rings import PrecisionRing

Poly = List  # ascending coefficients


def trim(f: Poly, ring: PrecisionRing) -> Poly:
    """Drop zero leading coefficients (keeps at least the constant term)."""
    f = [ring.reduce(c) for c in f]
    while len(f) > 1 and f[-1] == 0:
        f.pop()
    return f or [ring.zero]


def cast(f: Sequence, ring: PrecisionRing) -> Poly:
    """Coerce every coefficient into ``ring``."""
    return [ring(c) for c in f]


def add(f: Poly, g: Poly, ring: PrecisionRing) -> Poly:
    n = max(len(f), len(g))
    return [ring.reduce((f[i] if i < len(f) else 0) + (g[i] if i < len(g) else 0)) for i in range(n)]


def mul(f: Poly, g: Poly, ring: PrecisionRing) -> Poly:
    """Schoolbook product."""
    prod = [ring.zero] * (len(f) + len(g) - 1)
    for i, x in enumerate(f):
        if x == 0:
            continue
        for j, y in enumerate(g):
            prod[i + j] = prod[i + j] + x * y
    return [ring.reduce(c) for c in prod]


def derivative(f: Poly, ring: PrecisionRing) -> Poly:
    if len(f) == 1:
        return [ring.zero]
    return [ring.reduce(i * f[i]) for i in range(1, len(f))]


def evaluate(f: Poly, x, ring: PrecisionRing):
    """Horner evaluation at a ring element."""
    acc = ring.zero
    for c in reversed(f):
        acc = ring.reduce(acc * x + c)
    return acc


def frobenius(f: Poly, ring: PrecisionRing) -> Poly:
    """Apply the ring Frobenius to every coefficient."""
    return [ring.frobenius(c) for c in f]


def coeff(f: Poly, i: int, ring: PrecisionRing):
    return f[i] if 0 <= i < len(f) else ring.zero


# --- Polynomial matrices ---

class MatrixPolynomial:
    """Matrix whose entries are polynomials in an index variable s.

    ``coeffs[e]`` is the matrix of coefficients of s^e.
    """

    def __init__(self, coeffs: List[np.ndarray], ring: PrecisionRing) -> None:
        assert coeffs, "need at least the constant coefficient"
        self.coeffs = coeffs
        self.ring = ring

    @classmethod
    def zero(cls, shape, degree: int, ring: PrecisionRing) -> "MatrixPolynomial":
        return cls([ring.zeros(shape) for _ in range(degree + 1)], ring)

    @property
    def shape(self):
        return self.coeffs[0].shape

    @property
    def degree(self) -> int:
        return len(self.coeffs) - 1

    def set_entry(self, i: int, j: int, f: Poly) -> None:
        """Set entry (i, j) to the scalar polynomial f (degree <= self.degree)."""
        assert len(f) <= len(self.coeffs), "entry degree exceeds matrix degree"
        for e, c in enumerate(self.coeffs):
            c[i, j] = self.ring.reduce(f[e]) if e < len(f) else self.ring.zero

    def __call__(self, s) -> np.ndarray:
        """Evaluate at s (an integer or ring element)."""
        acc = self.coeffs[-1]
        for c in reversed(self.coeffs[:-1]):
            acc = acc * s + c
        return self.ring.reduce(acc)

    def cast(self, ring: PrecisionRing) -> "MatrixPolynomial":
        """The same matrix with coefficients cast into ``ring``."""
        return MatrixPolynomial([ring.cast(c) for c in self.coeffs], ring)
