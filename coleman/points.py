"""Points on y^a = h(x): membership, residue disks, lifts and counts."""

from math import gcd
from typing import Sequence, Tuple

import galois
import numpy as np

from primitives.polynomial import Poly, cast, evaluate
from primitives.rings import PadicRing, PrecisionRing

Point = Tuple


def on_curve(a: int, h: Poly, P: Point, ring: PrecisionRing) -> bool:
    x, y = P
    return ring.power(y, a) == evaluate(cast(h, ring), x, ring)


def verify_pts(a: int, h: Poly, pts: Sequence[Point], ring: PrecisionRing) -> bool:
    """True if y^a = h(x) modulo p^N for every point."""
    return all(on_curve(a, h, P, ring) for P in pts)


def is_in_weierstrass_disk(P: Point, ring: PrecisionRing) -> bool:
    """A point reduces to a Weierstrass point iff p divides y."""
    return not ring.is_unit(P[1])


def in_same_disk(P: Point, Q: Point, ring: PrecisionRing) -> bool:
    return not ring.is_unit(P[0] - Q[0]) and not ring.is_unit(P[1] - Q[1])


def lift_x(a: int, h: Poly, x, ring: PrecisionRing, y=None) -> Point:
    """Point (x, Y) on the curve with Y a Hensel lift of y (or of any root of h(x)).

    Raises:
        ValueError: if h(x) has no a-th root modulo p
        NotImplementedError: if (x, y) lies in a Weierstrass disk
    """
    x = ring(x)
    hx = evaluate(cast(h, ring), x, ring)
    if (y is not None and not ring.is_unit(y)) or not ring.is_unit(hx):
        raise NotImplementedError("lifting points in a Weierstrass disk")
    return x, ring.root(hx, a, initial=y)


def frobenius_lift(a: int, h: Poly, P: Point, ring: PrecisionRing) -> Point:
    """φ(P) = (x^p, y^p (1 + (h(x^p) - h(x)^p) / y^{ap})^{1/a}).

    Only implemented over Z/p^N, where σ is the identity on coefficients.
    """
    if not isinstance(ring, PadicRing):
        raise NotImplementedError("Frobenius lifts of points are only implemented over Z/p^N")
    p = ring.p
    h = cast(h, ring)
    x, y = P
    xp = ring.power(x, p)
    correction = ring.reduce((evaluate(h, xp, ring) - ring.power(evaluate(h, x, ring), p)) * ring.power(y, -a * p))
    return xp, ring.reduce(ring.power(y, p) * ring.root(1 + correction, a, initial=1))


def count_points(a: int, hbar: galois.Poly) -> int:
    """Affine points of y^a = hbar(x) over GF(q), by brute force over x.

    A nonzero c has gcd(q-1, a) a-th roots when c^{(q-1)/d} = 1 and none
    otherwise.
    """
    field = hbar.field
    q = field.order
    d = gcd(q - 1, a)
    values = hbar(field.elements)
    nonzero = values[values != 0]
    residues = np.count_nonzero(nonzero ** ((q - 1) // d) == 1)
    return int(np.count_nonzero(values == 0)) + d * int(residues)
