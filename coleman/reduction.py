"""Horizontal and vertical reduction of differentials.

Horizontal reduction rewrites x^s y^{-(at+ι)} dx, for fixed row t and block
ι, as a combination of x^{-1} .. x^{b-2} in the same block. Vertical
reduction then lowers the row through the blocks using the partial fractions
r_i h + s_i h' = x^i. Both stages push a row vector through a long product of
matrices that are affine in an index variable; those products are sampled
with :func:`primitives.progression.interval_products`.

Reduced vectors carry one extra trailing entry per marked point, holding
the evaluation data needed for Coleman integration.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np

from coleman.expansion import row
from primitives.batch_inverse import batch_inverse
from primitives.polynomial import MatrixPolynomial, Poly, coeff, evaluate
from primitives.progression import Interval, extrapolate, interval_products
from primitives.rings import PrecisionRing

logger = logging.getLogger(__name__)

Point = Tuple  # (x, y) ring elements


@dataclass
class ReductionMatrix:
    """A matrix M(s) affine in s together with its scalar denominator d(s)."""

    matrix: MatrixPolynomial
    denominator: Poly
    ring: PrecisionRing

    @property
    def dim(self) -> int:
        return self.matrix.shape[0]

    def at(self, s) -> np.ndarray:
        return self.matrix(s)

    def denominator_at(self, s):
        return evaluate(self.denominator, s, self.ring)

    def cast(self, ring: PrecisionRing) -> "ReductionMatrix":
        return ReductionMatrix(self.matrix.cast(ring), [ring.cast(c) for c in self.denominator], ring)

    def sample(self, intervals: Sequence[Interval]) -> Tuple[List[np.ndarray], List]:
        """Products of M and of d over each interval (L, R]."""
        ring = self.ring
        denominator = MatrixPolynomial([ring.matrix([[c]]) for c in self.denominator], ring)
        Ms = interval_products(self.matrix, self.matrix.degree, intervals, ring)
        Ds = interval_products(denominator, denominator.degree, intervals, ring)
        return Ms, [D[0, 0] for D in Ds]


def push(res: np.ndarray, M: np.ndarray, ring: PrecisionRing) -> np.ndarray:
    """Row vector times matrix."""
    return ring.reduce(res @ M)


def divide(res: np.ndarray, d, ring: PrecisionRing) -> np.ndarray:
    """Exact division of every entry by d, lifted back to ``ring``."""
    out = np.empty(res.shape, dtype=object)
    for m, x in enumerate(res):
        out[m] = ring.divexact(x, d)
    return out


# --- Horizontal reduction ---

def hred_matrix(t: int, iota: int, a: int, h: Poly, points: Sequence[Point], ring: PrecisionRing) -> ReductionMatrix:
    """Generic horizontal reduction matrix of row t and block ι.

    Size b + len(points). The denominator is λ (b (at+ι-a) - a s) with λ the
    leading coefficient of h.
    """
    b = len(h) - 1
    lam = h[b]
    c = a * t + iota - a
    D = [ring.reduce(lam * b * c), ring.reduce(-lam * a)]
    M = MatrixPolynomial.zero((b + len(points), b + len(points)), 1, ring)
    for i in range(b - 1):
        M.set_entry(i, i + 1, D)
    M.set_entry(b - 1, 0, [ring.zero, a * h[0]])
    for i in range(1, b):
        M.set_entry(b - 1, i, [-c * i * h[i], a * h[i]])
    for m, (x, y) in enumerate(points):
        M.set_entry(b - 1, b + m, [-a * ring.power(y, a - iota)])
        M.set_entry(b + m, b + m, [D[0] * x, D[1] * x])
    return ReductionMatrix(M, D, ring)


def horizontal_intervals(p: int, b: int, count: int) -> List[Interval]:
    """((l-1) p, l p - b - 1] for l = 1 .. count."""
    return [((l - 1) * p, l * p - b - 1) for l in range(1, count + 1)]


def hred_sequences(
    red: ReductionMatrix,
    b: int,
    p: int,
    N: int,
    B: int,
    vinv: np.ndarray,
    ring0: PrecisionRing,
) -> Tuple[List[np.ndarray], List]:
    """Products of the horizontal matrix over ((l-1) p, l p - b - 1], l = 1 .. B.

    Only min(N, B) intervals are sampled, at precision N; modulo p^N the
    products are polynomials of degree < N in l, so the rest are
    extrapolated. Representatives are shared between precisions, so the
    results are used as they are at precision N + 1.
    """
    count = min(N, B)
    Ms, Ds = red.cast(ring0).sample(horizontal_intervals(p, b, count))
    if count < B:
        Ms = extrapolate(Ms, B, vinv, ring0)
        Ds = [D[0, 0] for D in extrapolate([ring0.matrix([[d]]) for d in Ds], B, vinv, ring0)]
    return Ms, Ds


def hreduce_inverses(red: ReductionMatrix, Ds: Sequence, b: int, p: int, top: int) -> Tuple[Dict[int, object], List]:
    """Inverses of every unit denominator met while reducing from l = top down.

    Returns the inverses of d(s) keyed by s, for s = lp - m (0 < m < b) and
    s = (l-1) p, and the inverses of the sampled products Ds[:top].
    """
    ring = red.ring
    points = [p * l - m for l in range(1, top + 1) for m in range(1, b)]
    points += [(l - 1) * p for l in range(1, top + 1)]
    values = [red.denominator_at(s) for s in points] + list(Ds[:top])
    inverses = batch_inverse(values, ring)
    return dict(zip(points, inverses[:len(points)])), inverses[len(points):]


def hreduce(
    i: int,
    b: int,
    mu: Sequence,
    red: ReductionMatrix,
    Ms: Sequence[np.ndarray],
    Ds: Sequence,
    p: int,
    inverses: Tuple[Dict[int, object], List],
) -> np.ndarray:
    """Horizontally reduce the k-th term of σ(x^i y^{-j} dx).

    ``mu`` holds the scalar coefficients of the term; they are injected into
    the first entry as the reduction walks down past each multiple of p.
    """
    ring = red.ring
    unit_inv, D_inv = inverses
    res = ring.zeros((red.dim,))
    res[0] = mu[-1]
    for l in range(i + len(mu), 0, -1):
        for m in range(1, b):
            s = p * l - m
            res = ring.reduce(push(res, red.at(s), ring) * unit_inv[s])
        s = p * l - b
        res = divide(push(res, red.at(s), ring), red.denominator_at(s), ring)
        res = ring.reduce(push(res, Ms[l - 1], ring) * D_inv[l - 1])
        s = (l - 1) * p
        res = ring.reduce(push(res, red.at(s), ring) * unit_inv[s])
        if l - i - 2 >= 0:
            res[0] = ring.reduce(res[0] + mu[l - i - 2])
    return res


# --- Vertical reduction ---

def vred_matrix(iota: int, a: int, rs: Sequence[Poly], ss: Sequence[Poly], points: Sequence[Point], ring: PrecisionRing) -> ReductionMatrix:
    """Generic vertical reduction matrix of block ι, affine in the row t.

    Entry (i, m) is (at+ι-a) r_i[m] + a s_i'[m]; the denominator is at+ι-a.
    """
    b = len(rs) + 1
    dim = b - 1 + len(points)
    M = MatrixPolynomial.zero((dim, dim), 1, ring)
    for i in range(b - 1):
        for m in range(b - 1):
            r = coeff(rs[i], m, ring)
            ds = (m + 1) * coeff(ss[i], m + 1, ring)
            M.set_entry(i, m, [(iota - a) * r + a * ds, a * r])
    for m, (x, y) in enumerate(points):
        y_inv_a = ring.power(y, -a)
        for i in range(b - 1):
            M.set_entry(i, b - 1 + m, [-a * evaluate(ss[i], x, ring) * ring.power(y, iota - a)])
        M.set_entry(b - 1 + m, b - 1 + m, [(iota - a) * y_inv_a, a * y_inv_a])
    return ReductionMatrix(M, [ring(iota - a), ring(a)], ring)


def vertical_intervals(j: int, a: int, p: int, N: int) -> List[Interval]:
    """Intervals between consecutive rows row(-p(ak+j)), starting from 0."""
    rows = [0] + [row(-p * (a * k + j), a) for k in range(N)]
    return list(zip(rows[:-1], rows[1:]))


def vred_sequences(red: ReductionMatrix, j: int, a: int, p: int, N: int) -> Tuple[List[np.ndarray], List]:
    return red.sample(vertical_intervals(j, a, p, N))


def vreduce(wH: Sequence[np.ndarray], Ms: Sequence[np.ndarray], Ds: Sequence, ring: PrecisionRing) -> np.ndarray:
    """Fold the horizontally reduced terms k = N-1 .. 0 of one basis differential.

    ``wH[k]`` is the k-th horizontal result; its first entry (the x^{-1}
    coefficient) is dropped. Every denominator but the last has valuation 1
    and is divided out exactly.
    """
    N = len(wH)
    res = wH[N - 1][1:]
    for k in range(N - 1, 0, -1):
        res = divide(push(res, Ms[k], ring), Ds[k], ring)
        res = ring.reduce(wH[k - 1][1:] + res)
    return ring.reduce(push(res, Ms[0], ring) * ring.inv(Ds[0]))
