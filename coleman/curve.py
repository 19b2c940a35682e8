"""The superelliptic curve y^a = h(x) over a finite field."""

from dataclasses import dataclass
from math import gcd

import galois

from primitives.field import is_squarefree, lift_poly


@dataclass(frozen=True)
class Curve:
    """Smooth affine model y^a = h(x) with h squarefree over GF(q).

    Raises:
        ValueError: if a < 2, deg h < 2, gcd(a, deg h) != 1, or h has a
            repeated factor
    """

    a: int
    h: galois.Poly

    def __post_init__(self) -> None:
        if self.a < 2:
            raise ValueError(f"a must be at least 2, got {self.a}")
        if self.b < 2:
            raise ValueError(f"h must have degree at least 2, got {self.b}")
        if gcd(self.a, self.b) != 1:
            raise ValueError(f"a = {self.a} and deg h = {self.b} must be coprime")
        if not is_squarefree(self.h):
            raise ValueError("h must be squarefree")

    @property
    def b(self) -> int:
        return self.h.degree

    @property
    def genus(self) -> int:
        return (self.a - 1) * (self.b - 1) // 2

    @property
    def p(self) -> int:
        return self.h.field.characteristic

    @property
    def n(self) -> int:
        return self.h.field.degree

    @property
    def q(self) -> int:
        return self.h.field.order

    def lift(self) -> list:
        """Integer representatives of the coefficients of h, ascending."""
        return lift_poly(self.h)

    def __repr__(self) -> str:
        return f"Curve(y^{self.a} = {self.h} over GF({self.q}))"
