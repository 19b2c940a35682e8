"""Unit tests for polynomials and matrices over precision rings."""

import numpy as np
import pytest

from primitives.linalg import charpoly, inverse, matmul, pseudo_inverse, solve, trace
from primitives.polynomial import MatrixPolynomial, add, derivative, evaluate, mul, trim
from primitives.rings import NonUnitError, PadicRing, QadicRing


class TestPolynomial:
    """Tests for ascending coefficient lists."""

    def setup_method(self) -> None:
        self.ring = PadicRing(13, 2)

    def test_mul(self) -> None:
        """(1 + x)(1 - x) = 1 - x^2."""
        assert trim(mul([1, 1], [1, -1], self.ring), self.ring) == [1, 0, 168]

    def test_add_different_lengths(self) -> None:
        assert add([1, 2, 3], [4], self.ring) == [5, 2, 3]

    def test_derivative(self) -> None:
        """d/dx (1 + 2x + 3x^2) = 2 + 6x."""
        assert derivative([1, 2, 3], self.ring) == [2, 6]
        assert derivative([5], self.ring) == [0]

    def test_evaluate(self) -> None:
        """Horner evaluation reduces modulo p^N."""
        assert evaluate([1, 2, 3], 10, self.ring) == (1 + 20 + 300) % 169

    def test_trim(self) -> None:
        assert trim([1, 169, 0], self.ring) == [1]
        assert trim([0, 0], self.ring) == [0]


class TestMatrixPolynomial:
    """Tests for matrices affine in an index variable."""

    def test_evaluate(self) -> None:
        """Entry (0, 1) = 3 + 2s evaluates entrywise."""
        ring = PadicRing(13, 2)
        M = MatrixPolynomial.zero((2, 2), 1, ring)
        M.set_entry(0, 1, [3, 2])
        M.set_entry(1, 0, [1])
        value = M(5)
        assert value[0, 1] == 13
        assert value[1, 0] == 1
        assert value[0, 0] == 0

    def test_cast(self) -> None:
        """Casting reduces every coefficient."""
        ring = PadicRing(13, 2)
        M = MatrixPolynomial.zero((1, 1), 1, ring)
        M.set_entry(0, 0, [14, 27])
        low = M.cast(ring.with_precision(1))
        assert low(1)[0, 0] == (14 + 27) % 13


class TestInverse:
    """Tests for matrix inversion."""

    def setup_method(self) -> None:
        self.ring = PadicRing(7, 3)

    def test_inverse(self) -> None:
        """A A^{-1} = I."""
        A = self.ring.matrix([[2, 1, 0], [1, 3, 1], [0, 1, 4]])
        Ai = inverse(A, self.ring)
        assert np.array_equal(matmul(A, Ai, self.ring), self.ring.identity(3))

    def test_inverse_needs_row_swap(self) -> None:
        """A zero (non-unit) leading entry forces a pivot search."""
        A = self.ring.matrix([[7, 1], [1, 0]])
        Ai = inverse(A, self.ring)
        assert np.array_equal(matmul(Ai, A, self.ring), self.ring.identity(2))

    def test_singular_mod_p_raises(self) -> None:
        """A matrix singular modulo p has no inverse over Z/p^N."""
        A = self.ring.matrix([[1, 2], [3, 6 + 7]])
        with pytest.raises(NonUnitError):
            inverse(A, self.ring)

    def test_pseudo_inverse(self) -> None:
        """A adj = d I for the integer lift."""
        A = self.ring.matrix([[1, 2], [3, 13]])
        adjugate, d = pseudo_inverse(A, self.ring)
        assert d % 7 == 0
        product = matmul(A, adjugate, self.ring)
        assert np.array_equal(product, self.ring.reduce(self.ring.identity(2) * d))

    def test_pseudo_inverse_denominator_is_minimal(self) -> None:
        """d is the least common denominator of the rational inverse, not the determinant."""
        A = self.ring.matrix([[7, 0], [0, 7]])
        adjugate, d = pseudo_inverse(A, self.ring)
        assert d == 7
        assert np.array_equal(adjugate, self.ring.identity(2))

    def test_pseudo_inverse_of_singular_lift_raises(self) -> None:
        A = self.ring.matrix([[1, 2], [2, 4]])
        with pytest.raises(NonUnitError):
            pseudo_inverse(A, self.ring)

    def test_solve(self) -> None:
        """A x = b."""
        A = self.ring.matrix([[2, 1], [1, 3]])
        b = np.array([1, 2], dtype=object)
        x = solve(A, b, self.ring)
        assert np.array_equal(matmul(A, x, self.ring), b)

    def test_qadic_inverse(self) -> None:
        """Inversion over an unramified extension."""
        ring = QadicRing(11, 2, 2)
        theta = ring.generator()
        A = ring.zeros((2, 2))
        A[0, 0], A[0, 1], A[1, 0], A[1, 1] = theta, ring(1), ring(2), ring([1, 1])
        Ai = inverse(A, ring)
        assert np.array_equal(matmul(A, Ai, ring), ring.identity(2))


class TestCharpoly:
    """Tests for Faddeev-LeVerrier."""

    def test_two_by_two(self) -> None:
        """det(tI - A) = t^2 - tr(A) t + det(A)."""
        ring = PadicRing(101, 2)
        A = ring.matrix([[2, 3], [5, 7]])
        assert charpoly(A, ring) == [ring(2 * 7 - 3 * 5), ring(-9), 1]
        assert trace(A, ring) == 9

    def test_triangular(self) -> None:
        """Triangular matrix: product of (t - a_ii)."""
        ring = PadicRing(101, 3)
        A = ring.matrix([[1, 4, 5], [0, 2, 6], [0, 0, 3]])
        # (t-1)(t-2)(t-3) = t^3 - 6t^2 + 11t - 6
        assert charpoly(A, ring) == [ring(-6), 11, ring(-6), 1]
