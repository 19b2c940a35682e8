"""Truncated power series over precision rings.

A :class:`PowerSeries` holds the coefficients of t^0 .. t^{prec-1}; everything
from t^prec on is unknown. Binary operations keep the smaller precision.
"""

from typing import List, Sequence

from primitives.rings import PrecisionRing


class PowerSeries:
    """Power series in t with absolute precision ``prec``."""

    __slots__ = ("coeffs", "ring", "prec")

    def __init__(self, coeffs: Sequence, ring: PrecisionRing, prec: int) -> None:
        coeffs = [ring.reduce(c) for c in list(coeffs)[:prec]]
        coeffs += [ring.zero] * (prec - len(coeffs))
        self.coeffs: List = coeffs
        self.ring = ring
        self.prec = prec

    @classmethod
    def gen(cls, ring: PrecisionRing, prec: int) -> "PowerSeries":
        """The series t."""
        return cls([ring.zero, ring.one], ring, prec)

    @classmethod
    def constant(cls, c, ring: PrecisionRing, prec: int) -> "PowerSeries":
        return cls([c], ring, prec)

    def _coerce(self, other) -> "PowerSeries":
        if isinstance(other, PowerSeries):
            return other
        return PowerSeries.constant(other, self.ring, self.prec)

    def __add__(self, other) -> "PowerSeries":
        other = self._coerce(other)
        prec = min(self.prec, other.prec)
        return PowerSeries([x + y for x, y in zip(self.coeffs[:prec], other.coeffs[:prec])], self.ring, prec)

    __radd__ = __add__

    def __neg__(self) -> "PowerSeries":
        return PowerSeries([-x for x in self.coeffs], self.ring, self.prec)

    def __sub__(self, other) -> "PowerSeries":
        return self + (-self._coerce(other))

    def __rsub__(self, other) -> "PowerSeries":
        return (-self) + other

    def __mul__(self, other) -> "PowerSeries":
        if not isinstance(other, PowerSeries):
            return PowerSeries([x * other for x in self.coeffs], self.ring, self.prec)
        prec = min(self.prec, other.prec)
        out = [self.ring.zero] * prec
        for i in range(prec):
            x = self.coeffs[i]
            if x == 0:
                continue
            for j in range(prec - i):
                out[i + j] = out[i + j] + x * other.coeffs[j]
        return PowerSeries(out, self.ring, prec)

    __rmul__ = __mul__

    def inverse(self) -> "PowerSeries":
        """Multiplicative inverse; the constant term must be a unit."""
        ring = self.ring
        c0_inv = ring.inv(self.coeffs[0])
        out = [c0_inv]
        for m in range(1, self.prec):
            acc = ring.zero
            for i in range(1, m + 1):
                acc = acc + self.coeffs[i] * out[m - i]
            out.append(ring.reduce(-c0_inv * acc))
        return PowerSeries(out, ring, self.prec)

    def __pow__(self, e: int) -> "PowerSeries":
        base = self if e >= 0 else self.inverse()
        e = abs(e)
        result = PowerSeries.constant(self.ring.one, self.ring, self.prec)
        while e:
            if e & 1:
                result = result * base
            base = base * base
            e >>= 1
        return result

    def derivative(self) -> "PowerSeries":
        """Formal derivative; loses one term of precision."""
        prec = max(self.prec - 1, 0)
        return PowerSeries([i * self.coeffs[i] for i in range(1, self.prec)], self.ring, prec)

    def integral(self) -> "PowerSeries":
        """Formal antiderivative with zero constant term; gains one term.

        Divides the coefficient of t^m by m + 1, a unit while prec < p.
        """
        ring = self.ring
        coeffs = [ring.zero] + [c * ring.inv(m + 1) for m, c in enumerate(self.coeffs)]
        return PowerSeries(coeffs, ring, self.prec + 1)

    def root(self, a: int, initial) -> "PowerSeries":
        """An a-th root whose constant term lifts ``initial``, by Newton iteration.

        y <- ((a - 1) y + x y^{1-a}) / a; each step doubles the correct terms.
        """
        ring = self.ring
        inv_a = ring.inv(a)
        y = PowerSeries.constant(initial, ring, self.prec)
        correct = 1
        while correct <= self.prec:
            y = (y * (a - 1) + self * (y ** (1 - a))) * inv_a
            correct *= 2
        return y

    def evaluate(self, x):
        """Sum of the known terms at x (a ring element of positive valuation)."""
        acc = self.ring.zero
        for c in reversed(self.coeffs):
            acc = self.ring.reduce(acc * x + c)
        return acc

    def __getitem__(self, i: int):
        return self.coeffs[i]

    def __repr__(self) -> str:
        terms = " + ".join(f"{c}*t^{i}" for i, c in enumerate(self.coeffs) if c != 0) or "0"
        return f"{terms} + O(t^{self.prec})"
