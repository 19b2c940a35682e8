"""Precision rings Z/p^N, (Z/p^N)[θ]/(f) and Q[[p]]/(p^N).

Elements are integer representatives: ``int`` for :class:`PadicRing` and
:class:`UnramifiedElement` for :class:`QadicRing`. :class:`SeriesRing` keeps p
symbolic and uses :class:`SeriesElement` (rational coefficients) instead.
Arithmetic on representatives never reduces; the ring reduces with
:meth:`PrecisionRing.reduce`, which also works elementwise on numpy object
arrays. Because representatives are shared between precisions, casting to a
ring of another precision is a reduction and lifting is the identity.
"""

from abc import ABC, abstractmethod
from fractions import Fraction
from functools import lru_cache
from typing import List, Optional, Sequence

import galois
import numpy as np
import sympy as sp

from primitives.field import from_coeffs, field_coeffs, irreducible_coeffs, nth_roots


class NonUnitError(ZeroDivisionError):
    """Raised when a non-unit ring element is inverted or divided by."""


# --- Unramified extension elements ---

class UnramifiedElement:
    """Polynomial in θ of degree < n with integer coefficients, modulo a monic f(θ)."""

    __slots__ = ("coeffs", "modulus_poly")

    def __init__(self, coeffs: Sequence[int], modulus_poly: tuple) -> None:
        n = len(modulus_poly) - 1
        coeffs = list(coeffs)
        if len(coeffs) < n:
            coeffs += [0] * (n - len(coeffs))
        elif len(coeffs) > n:
            coeffs = _reduce_by_monic(coeffs, modulus_poly)
        self.coeffs = tuple(coeffs)
        self.modulus_poly = modulus_poly

    def _wrap(self, coeffs) -> "UnramifiedElement":
        return UnramifiedElement(coeffs, self.modulus_poly)

    def __add__(self, other):
        if isinstance(other, np.ndarray):
            return NotImplemented
        if isinstance(other, UnramifiedElement):
            return self._wrap([x + y for x, y in zip(self.coeffs, other.coeffs)])
        return self._wrap((self.coeffs[0] + other,) + self.coeffs[1:])

    __radd__ = __add__

    def __neg__(self):
        return self._wrap([-x for x in self.coeffs])

    def __sub__(self, other):
        return self + (-other)

    def __rsub__(self, other):
        return (-self) + other

    def __mul__(self, other):
        if isinstance(other, np.ndarray):
            return NotImplemented
        if not isinstance(other, UnramifiedElement):
            return self._wrap([x * other for x in self.coeffs])
        n = len(self.coeffs)
        prod = [0] * (2 * n - 1)
        for i, x in enumerate(self.coeffs):
            if x:
                for j, y in enumerate(other.coeffs):
                    prod[i + j] += x * y
        return self._wrap(prod)

    __rmul__ = __mul__

    def __mod__(self, m: int):
        return self._wrap([x % m for x in self.coeffs])

    def __eq__(self, other) -> bool:
        if isinstance(other, UnramifiedElement):
            return self.coeffs == other.coeffs
        if isinstance(other, int):
            return self.coeffs[0] == other and not any(self.coeffs[1:])
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.coeffs)

    def __repr__(self) -> str:
        return f"UnramifiedElement({list(self.coeffs)})"


def _reduce_by_monic(coeffs: List[int], f: tuple) -> List[int]:
    """Remainder of an ascending coefficient list by a monic polynomial f."""
    n = len(f) - 1
    coeffs = list(coeffs)
    for d in range(len(coeffs) - 1, n - 1, -1):
        c = coeffs[d]
        if c:
            for i in range(n):
                coeffs[d - n + i] -= c * f[i]
        coeffs[d] = 0
    return coeffs[:n]


# --- Series in p ---

def _rational(c) -> sp.Rational:
    if isinstance(c, Fraction):
        return sp.Rational(c.numerator, c.denominator)
    return sp.Rational(c)


class SeriesElement:
    """Power series in p with rational coefficients, ascending, without trailing zeros."""

    __slots__ = ("coeffs",)

    def __init__(self, coeffs: Sequence) -> None:
        coeffs = [_rational(c) for c in coeffs]
        while coeffs and coeffs[-1] == 0:
            coeffs.pop()
        self.coeffs = tuple(coeffs)

    @staticmethod
    def _coerce(other) -> "SeriesElement":
        if isinstance(other, SeriesElement):
            return other
        return SeriesElement([other])

    def truncate(self, n: int) -> "SeriesElement":
        return SeriesElement(self.coeffs[:n])

    def __add__(self, other):
        if isinstance(other, np.ndarray):
            return NotImplemented
        xs, ys = self.coeffs, self._coerce(other).coeffs
        n = max(len(xs), len(ys))
        return SeriesElement([(xs[i] if i < len(xs) else 0) + (ys[i] if i < len(ys) else 0) for i in range(n)])

    __radd__ = __add__

    def __neg__(self):
        return SeriesElement([-x for x in self.coeffs])

    def __sub__(self, other):
        return self + (-other)

    def __rsub__(self, other):
        return (-self) + other

    def __mul__(self, other):
        if isinstance(other, np.ndarray):
            return NotImplemented
        ys = self._coerce(other).coeffs
        if not self.coeffs or not ys:
            return SeriesElement(())
        prod = [0] * (len(self.coeffs) + len(ys) - 1)
        for i, x in enumerate(self.coeffs):
            if x:
                for j, y in enumerate(ys):
                    prod[i + j] += x * y
        return SeriesElement(prod)

    __rmul__ = __mul__

    def __eq__(self, other) -> bool:
        if isinstance(other, (int, Fraction, sp.Rational)):
            other = SeriesElement([other])
        if isinstance(other, SeriesElement):
            return self.coeffs == other.coeffs
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.coeffs)

    def __repr__(self) -> str:
        return f"SeriesElement({list(self.coeffs)})"


# --- Rings ---

class PrecisionRing(ABC):
    """A ring of p-adic (or q-adic) integers truncated at precision N.

    Every concrete ring supplies the same capability set: unit test and
    inverse, exact division by an element of known valuation, the Frobenius
    endomorphism, a-th roots of units, and the cast to a sibling ring of
    another precision.
    """

    def __init__(self, p: int, degree: int, precision: int) -> None:
        if precision < 1:
            raise ValueError(f"precision must be positive, got {precision}")
        self.p = p
        self.degree = degree
        self.precision = precision
        self.modulus = p ** precision

    @property
    def q(self) -> int:
        return self.p ** self.degree

    # --- construction ---

    @abstractmethod
    def __call__(self, value):
        """Coerce an int, Fraction or representative into this ring."""

    @abstractmethod
    def with_precision(self, precision: int) -> "PrecisionRing":
        """The same ring at another precision."""

    @property
    @abstractmethod
    def zero(self):
        ...

    @property
    @abstractmethod
    def one(self):
        ...

    def zeros(self, shape) -> np.ndarray:
        arr = np.empty(shape, dtype=object)
        arr.fill(self.zero)
        return arr

    def identity(self, dim: int) -> np.ndarray:
        arr = self.zeros((dim, dim))
        for i in range(dim):
            arr[i, i] = self.one
        return arr

    def matrix(self, rows) -> np.ndarray:
        """Build a 2D object array of ring elements from nested sequences."""
        rows = [[self(x) for x in row] for row in rows]
        arr = self.zeros((len(rows), len(rows[0]) if rows else 0))
        for i, row in enumerate(rows):
            for j, x in enumerate(row):
                arr[i, j] = x
        return arr

    # --- reduction and casts ---

    def reduce(self, x):
        """Reduce a representative (or object array of them) modulo p^N."""
        return x % self.modulus

    def cast(self, x):
        """Image in this ring of an element from a ring of any precision."""
        return self.reduce(x)

    # --- arithmetic ---

    @abstractmethod
    def valuation(self, x) -> int:
        """p-adic valuation, capped at the precision (zero has valuation N)."""

    def is_unit(self, x) -> bool:
        return self.valuation(x) == 0

    @abstractmethod
    def inv(self, x):
        """Multiplicative inverse; raises NonUnitError on a non-unit."""

    def power(self, x, e: int):
        """x^e with reduction at every step (negative e inverts first)."""
        if e < 0:
            x, e = self.inv(x), -e
        result = self.one
        base = self.reduce(x)
        while e:
            if e & 1:
                result = self.reduce(result * base)
            base = self.reduce(base * base)
            e >>= 1
        return result

    def divexact(self, x, d):
        """Exact quotient x / d where x is divisible by the p-power part of d.

        The quotient is only known modulo p^{N - v(d)}; the returned
        representative is its canonical lift.
        """
        v = self.valuation(d)
        if v == 0:
            return self.reduce(x * self.inv(d))
        if v >= self.precision:
            raise NonUnitError(f"division by an element of valuation {v} at precision {self.precision}")
        x = self.reduce(x)
        if self.valuation(x) < v:
            raise NonUnitError(f"{x!r} is not divisible by p^{v}")
        pv = self.p ** v
        lower = self.with_precision(self.precision - v)
        return lower.reduce(self._shift_down(x, pv) * lower.inv(self._shift_down(self.reduce(d), pv)))

    @abstractmethod
    def _shift_down(self, x, pv: int):
        """x / p^v for a representative divisible by p^v."""

    @abstractmethod
    def frobenius(self, x):
        """Image under the lift of the p-power Frobenius."""

    @abstractmethod
    def root(self, x, a: int, initial=None):
        """An a-th root of the unit x, Hensel-lifted from a root mod p.

        Args:
            x: unit of the ring
            a: exponent, prime to p
            initial: optional approximation of the root mod p

        Raises:
            ValueError: if x has no a-th root mod p
        """

    def _newton_root(self, x, a: int, z):
        # z <- z - (z^a - x) / (a z^{a-1}); each step doubles the correct digits
        correct = 1
        inv_a = self.inv(a)
        while correct < self.precision:
            correct *= 2
            za1 = self.power(z, a - 1)
            z = self.reduce(z - (za1 * z - x) * inv_a * self.inv(za1))
        return z

    @abstractmethod
    def to_int(self, x) -> int:
        """Integer in [0, p^N) for an element of Z/p^N ⊂ this ring."""

    def coordinates(self, x) -> List[int]:
        """Integers in [0, p^N) giving x in the basis 1, θ, ..., θ^{n-1}."""
        raise NotImplementedError(f"{self!r} has no integer coordinates")

    def from_coordinates(self, coords: Sequence[int]):
        raise NotImplementedError(f"{self!r} has no integer coordinates")

    def __eq__(self, other) -> bool:
        return (type(self) is type(other) and self.p == other.p
                and self.degree == other.degree and self.precision == other.precision)

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.p, self.degree, self.precision))


class PadicRing(PrecisionRing):
    """Z/p^N with ``int`` representatives."""

    def __init__(self, p: int, precision: int) -> None:
        super().__init__(p, 1, precision)

    def __call__(self, value):
        if isinstance(value, Fraction):
            return self.reduce(value.numerator * self.inv(value.denominator))
        return int(value) % self.modulus

    def with_precision(self, precision: int) -> "PadicRing":
        return PadicRing(self.p, precision)

    @property
    def zero(self):
        return 0

    @property
    def one(self):
        return 1

    def valuation(self, x) -> int:
        x %= self.modulus
        if x == 0:
            return self.precision
        v = 0
        while x % self.p == 0:
            x //= self.p
            v += 1
        return v

    def is_unit(self, x) -> bool:
        return x % self.p != 0

    def inv(self, x):
        if x % self.p == 0:
            raise NonUnitError(f"{x} is not a unit modulo {self.p}^{self.precision}")
        return pow(x, -1, self.modulus)

    def power(self, x, e: int):
        if e < 0:
            return pow(self.inv(x), -e, self.modulus)
        return pow(x, e, self.modulus)

    def _shift_down(self, x, pv: int):
        return x // pv

    def frobenius(self, x):
        return self.reduce(x)

    def root(self, x, a: int, initial=None):
        if initial is None:
            roots = nth_roots(galois.GF(self.p), x % self.p, a)
            if len(roots) == 0:
                raise ValueError(f"{x} has no {a}-th root modulo {self.p}")
            initial = int(roots[0])
        return self._newton_root(self.reduce(x), a, initial)

    def to_int(self, x) -> int:
        return int(x) % self.modulus

    def coordinates(self, x) -> List[int]:
        return [x % self.modulus]

    def from_coordinates(self, coords: Sequence[int]):
        return coords[0] % self.modulus

    def __repr__(self) -> str:
        return f"PadicRing(p={self.p}, precision={self.precision})"


class QadicRing(PrecisionRing):
    """(Z/p^N)[θ]/(f) for a monic f irreducible modulo p.

    With the default ``f`` (the defining polynomial galois uses for GF(p^n))
    the residue field of the ring is exactly ``galois.GF(p**n)``.
    """

    def __init__(self, p: int, degree: int, precision: int, modulus_poly: Optional[Sequence[int]] = None) -> None:
        super().__init__(p, degree, precision)
        if modulus_poly is None:
            modulus_poly = irreducible_coeffs(galois.GF(p ** degree))
        if len(modulus_poly) != degree + 1 or modulus_poly[-1] != 1:
            raise ValueError("modulus_poly must be monic of the ring degree")
        self.modulus_poly = tuple(int(c) for c in modulus_poly)
        self.residue_field = _residue_field(p, degree, self.modulus_poly)
        self._frobenius_generator = None

    def __call__(self, value):
        if isinstance(value, UnramifiedElement):
            return self.reduce(value)
        if isinstance(value, Fraction):
            return self.reduce(self(value.numerator) * self.inv(self(value.denominator)))
        if isinstance(value, (list, tuple)):
            return self.reduce(UnramifiedElement([int(c) for c in value], self.modulus_poly))
        return UnramifiedElement([int(value) % self.modulus], self.modulus_poly)

    def with_precision(self, precision: int) -> "QadicRing":
        return QadicRing(self.p, self.degree, precision, self.modulus_poly)

    @property
    def zero(self):
        return UnramifiedElement([0], self.modulus_poly)

    @property
    def one(self):
        return UnramifiedElement([1], self.modulus_poly)

    def reduce(self, x):
        if isinstance(x, int):
            return self(x)
        return x % self.modulus

    def generator(self) -> UnramifiedElement:
        """θ, the class of the variable."""
        return UnramifiedElement([0, 1], self.modulus_poly)

    def valuation(self, x) -> int:
        x = self.reduce(x)
        return min(PadicRing(self.p, self.precision).valuation(c) for c in x.coeffs)

    def is_unit(self, x) -> bool:
        return any(c % self.p for c in self.reduce(x).coeffs)

    def to_residue(self, x):
        """Image of x in the residue field GF(p^n)."""
        return from_coeffs(self.residue_field, list(self.reduce(x).coeffs))

    def inv(self, x):
        x = self.reduce(x)
        if not self.is_unit(x):
            raise NonUnitError(f"{x!r} is not a unit modulo {self.p}^{self.precision}")
        y = self(field_coeffs(self.to_residue(x) ** -1))
        # Newton: y <- y (2 - x y)
        correct = 1
        while correct < self.precision:
            correct *= 2
            y = self.reduce(y * (2 - x * y))
        return y

    def _shift_down(self, x, pv: int):
        return UnramifiedElement([c // pv for c in x.coeffs], self.modulus_poly)

    def _evaluate_modulus_poly(self, z, coeffs):
        acc = self.zero
        for c in reversed(coeffs):
            acc = self.reduce(acc * z + c)
        return acc

    def frobenius_generator(self) -> UnramifiedElement:
        """σ(θ): the root of f congruent to θ^p, by Newton iteration."""
        if self._frobenius_generator is None:
            f = self.modulus_poly
            df = [i * f[i] for i in range(1, len(f))]
            z = self.power(self.generator(), self.p)
            correct = 1
            while correct < self.precision:
                correct *= 2
                z = self.reduce(z - self._evaluate_modulus_poly(z, f) * self.inv(self._evaluate_modulus_poly(z, df)))
            self._frobenius_generator = z
        return self._frobenius_generator

    def frobenius(self, x):
        return self._evaluate_modulus_poly(self.frobenius_generator(), self.reduce(x).coeffs)

    def root(self, x, a: int, initial=None):
        x = self.reduce(x)
        if initial is None:
            roots = nth_roots(self.residue_field, self.to_residue(x), a)
            if len(roots) == 0:
                raise ValueError(f"{x!r} has no {a}-th root in GF({self.q})")
            initial = self(field_coeffs(roots[0]))
        return self._newton_root(x, a, initial)

    def to_int(self, x) -> int:
        x = self.reduce(x)
        if any(x.coeffs[1:]):
            raise ValueError(f"{x!r} does not lie in Z/{self.p}^{self.precision}")
        return x.coeffs[0]

    def coordinates(self, x) -> List[int]:
        return list(self.reduce(x).coeffs)

    def from_coordinates(self, coords: Sequence[int]):
        return self.reduce(UnramifiedElement(coords, self.modulus_poly))

    def __repr__(self) -> str:
        return f"QadicRing(p={self.p}, degree={self.degree}, precision={self.precision})"


class SeriesRing(PrecisionRing):
    """Q[[p]]/(p^N) with p a formal variable.

    Valuations, units and exact divisions behave as in Z/p^N, so the
    linear algebra and series code runs unchanged with p kept symbolic.
    Frobenius is the identity.
    """

    def __init__(self, precision: int, variable: Optional[sp.Symbol] = None) -> None:
        super().__init__(variable if variable is not None else sp.Symbol("p"), 1, precision)

    def __call__(self, value):
        if isinstance(value, SeriesElement):
            return value.truncate(self.precision)
        if isinstance(value, (list, tuple)):
            return SeriesElement(value).truncate(self.precision)
        if isinstance(value, Fraction):
            return SeriesElement([value])
        expr = sp.sympify(value)
        if expr.free_symbols:
            return SeriesElement(sp.Poly(expr, self.p).all_coeffs()[::-1]).truncate(self.precision)
        return SeriesElement([expr])

    def with_precision(self, precision: int) -> "SeriesRing":
        return SeriesRing(precision, self.p)

    @property
    def zero(self):
        return SeriesElement(())

    @property
    def one(self):
        return SeriesElement((1,))

    def reduce(self, x):
        if isinstance(x, np.ndarray):
            out = np.empty(x.shape, dtype=object)
            for idx, e in np.ndenumerate(x):
                out[idx] = self.reduce(e)
            return out
        return self(x)

    def valuation(self, x) -> int:
        coeffs = self.reduce(x).coeffs
        return next((i for i, c in enumerate(coeffs) if c != 0), self.precision)

    def inv(self, x):
        c = self.reduce(x).coeffs
        if not c or c[0] == 0:
            raise NonUnitError(f"{x!r} is not a unit modulo {self.p}^{self.precision}")
        c0_inv = 1 / c[0]
        out = [c0_inv]
        for k in range(1, self.precision):
            acc = sum((c[i] * out[k - i] for i in range(1, min(k, len(c) - 1) + 1)), sp.Integer(0))
            out.append(-c0_inv * acc)
        return SeriesElement(out)

    def _shift_down(self, x, pv):
        return SeriesElement(x.coeffs[int(sp.degree(pv, self.p)):])

    def frobenius(self, x):
        return self.reduce(x)

    def root(self, x, a: int, initial=None):
        x = self.reduce(x)
        if initial is None:
            c0 = x.coeffs[0] if x.coeffs else sp.Integer(0)
            num, den = int(c0.p), int(c0.q)
            if num == 0 or (num < 0 and a % 2 == 0):
                raise ValueError(f"{c0} has no rational {a}-th root")
            top, exact_top = sp.integer_nthroot(abs(num), a)
            bottom, exact_bottom = sp.integer_nthroot(den, a)
            if not (exact_top and exact_bottom):
                raise ValueError(f"{c0} has no rational {a}-th root")
            initial = sp.Rational(top if num > 0 else -top, bottom)
        return self._newton_root(x, a, self(initial))

    def to_int(self, x) -> int:
        coeffs = self.reduce(x).coeffs
        if len(coeffs) > 1 or (coeffs and not coeffs[0].is_integer):
            raise ValueError(f"{x!r} is not an integer constant")
        return int(coeffs[0]) if coeffs else 0

    def __repr__(self) -> str:
        return f"SeriesRing({self.p}, precision={self.precision})"


@lru_cache(maxsize=None)
def _residue_field(p: int, degree: int, modulus_poly: tuple) -> type:
    irreducible = galois.Poly([c % p for c in modulus_poly[::-1]], field=galois.GF(p))
    return galois.GF(p ** degree, irreducible_poly=irreducible)


def precision_ring(p, degree: int, precision: int, modulus_poly: Optional[Sequence[int]] = None) -> PrecisionRing:
    """Z/p^N for degree 1, the unramified extension of degree n otherwise.

    A symbolic p gives the truncated series ring Q[[p]]/(p^N).
    """
    if isinstance(p, sp.Symbol):
        if degree != 1:
            raise NotImplementedError("series in a formal p are only implemented over Q")
        return SeriesRing(precision, p)
    if degree == 1:
        return PadicRing(p, precision)
    return QadicRing(p, degree, precision, modulus_poly)
