"""Local coordinates on y^a = h(x) around a point.

Away from the Weierstrass disks x - P_x is a uniformizer and y is solved
from y^a = h(x); inside a Weierstrass disk y - P_y is the uniformizer and x
is solved instead. Both solutions use Newton iteration on power series,
doubling the number of correct terms per step.
"""

import logging
from typing import List, Sequence, Tuple

from coleman.points import Point, is_in_weierstrass_disk
from primitives.polynomial import Poly, cast, derivative
from primitives.rings import PrecisionRing
from primitives.series import PowerSeries

logger = logging.getLogger(__name__)


def compose(f: Poly, s: PowerSeries) -> PowerSeries:
    """f(s) for a polynomial f over the ring of s."""
    acc = PowerSeries.constant(s.ring.zero, s.ring, s.prec)
    for c in reversed(f):
        acc = acc * s + c
    return acc


def local_coordinates_non_weierstrass(a: int, h: Poly, N: int, P: Point, ring: PrecisionRing) -> Tuple[PowerSeries, PowerSeries]:
    x = PowerSeries.constant(P[0], ring, N) + PowerSeries.gen(ring, N)
    y = compose(h, x).root(a, P[1])
    return x, y


def local_coordinates_weierstrass(a: int, h: Poly, N: int, P: Point, ring: PrecisionRing) -> Tuple[PowerSeries, PowerSeries]:
    y = PowerSeries.constant(P[1], ring, N) + PowerSeries.gen(ring, N)
    x = PowerSeries.constant(P[0], ring, N)
    ya = y ** a
    dh = derivative(h, ring)
    correct = 1
    while correct <= N:
        x = x + (ya - compose(h, x)) * compose(dh, x).inverse()
        correct *= 2
    return x, y


def local_coordinates(
    a: int,
    h: Poly,
    N: int,
    P: Point,
    ring: PrecisionRing,
    others: Sequence[Point] = (),
) -> Tuple[PowerSeries, PowerSeries, List]:
    """Series x(t), y(t) with y^a = h(x) + O(t^N) and x(0), y(0) = P.

    Args:
        a: exponent of y
        h: ascending coefficients of h
        N: number of terms
        P: centre of the expansion
        ring: ring of the coefficients
        others: points in the disk of P whose parameters are wanted

    Returns:
        (x(t), y(t), parameters), where parameters[m] is the value of t at
        others[m]
    """
    h = cast(h, ring)
    P = (ring(P[0]), ring(P[1]))
    if is_in_weierstrass_disk(P, ring):
        logger.debug("local coordinates in a Weierstrass disk to %d terms", N)
        x, y = local_coordinates_weierstrass(a, h, N, P, ring)
        params = [ring.reduce(Q[1] - P[1]) for Q in others]
    else:
        x, y = local_coordinates_non_weierstrass(a, h, N, P, ring)
        params = [ring.reduce(Q[0] - P[0]) for Q in others]
    return x, y, params
