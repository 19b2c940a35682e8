"""Tests for the Frobenius action on cohomology."""

import numpy as np
import pytest

from coleman.expansion import block
from coleman.frobenius import check_parameters, frobenius_matrix, frobenius_matrix_on_lift
from coleman.points import count_points
from coleman.reduction import hred_matrix, horizontal_intervals, vertical_intervals
from primitives.polynomial import evaluate
from primitives.rings import PadicRing
from tests.curves import SMALL_CURVES, poly_over


class TestParameterChecks:
    """Validation of a, deg h, N and p."""

    @pytest.mark.parametrize("a,b,N,p", [
        (2, 4, 1, 101),   # gcd(a, b) != 1
        (1, 3, 1, 101),   # a < 2
        (3, 1, 1, 101),   # deg h < 2
        (2, 3, 0, 101),   # N < 1
        (2, 3, 3, 13),    # p <= (aN - 1) b = 15
        (2, 3, 3, 15),
    ])
    def test_invalid(self, a: int, b: int, N: int, p: int) -> None:
        with pytest.raises(ValueError):
            check_parameters(a, b, N, p)

    def test_valid(self) -> None:
        check_parameters(2, 3, 3, 17)

    def test_characteristic_too_small(self) -> None:
        """y^2 = x^3 + x + 1 at N = 3 needs p > 15."""
        with pytest.raises(ValueError, match="too small"):
            frobenius_matrix_on_lift(2, [1, 1, 0, 1], 3, 13)

    def test_not_squarefree(self) -> None:
        """(x - 1)^2 (x + 1) is rejected."""
        hbar = poly_over(101, [1, -1, -1, 1])
        with pytest.raises(ValueError, match="squarefree"):
            frobenius_matrix(2, hbar, 1)


class TestReductionMatrices:
    """Structure of the generic reduction matrices."""

    def test_horizontal_intervals(self) -> None:
        assert horizontal_intervals(101, 3, 2) == [(0, 97), (101, 198)]

    def test_vertical_intervals(self) -> None:
        """Consecutive rows of -p(ak + j), starting at 0."""
        assert vertical_intervals(1, 2, 101, 3) == [(0, 50), (50, 151), (151, 252)]

    def test_horizontal_denominator_vanishes_mod_p_once(self) -> None:
        """d(s) is a unit on ((l-1)p, lp-b-1] and divisible by p at s = lp - b."""
        ring = PadicRing(101, 3)
        h = [1, 1, 0, 1]
        a, p, b = 2, 101, 3
        t, iota = 50, block(-p, a)
        red = hred_matrix(t, iota, a, h, [], ring)
        for l in (1, 2):
            assert ring.valuation(red.denominator_at(l * p - b)) == 1
            for s in range((l - 1) * p, l * p - b):
                assert ring.is_unit(red.denominator_at(s))

    def test_marked_point_enlarges_matrix(self) -> None:
        ring = PadicRing(101, 3)
        red = hred_matrix(50, 1, 2, [1, 1, 0, 1], [(0, 1)], ring)
        assert red.dim == 4
        assert evaluate(red.denominator, 0, ring) == red.denominator_at(0)


class TestFrobeniusMatrix:
    """Shape, block structure and precision stability."""

    @pytest.mark.parametrize("a,p,h", SMALL_CURVES[:3])
    def test_shape_and_blocks(self, a: int, p: int, h) -> None:
        """Row (j-1)(b-1)+i is supported on block(-pj, a)."""
        hbar = poly_over(p, h)
        b = hbar.degree
        action = frobenius_matrix(a, hbar, 1)
        dim = (a - 1) * (b - 1)
        assert action.matrix.shape == (dim, dim)
        assert action.columns is None
        for j in range(1, a):
            lo = (block(-p * j, a) - 1) * (b - 1)
            for i in range(b - 1):
                r = (j - 1) * (b - 1) + i
                for c in range(dim):
                    if not lo <= c < lo + b - 1:
                        assert action.matrix[r, c] == 0

    @pytest.mark.parametrize("a,p,h", [SMALL_CURVES[0], SMALL_CURVES[3]])
    def test_precision_stability(self, a: int, p: int, h) -> None:
        """Frobenius at N and N + 1 agree modulo p^N."""
        hbar = poly_over(p, h)
        low = frobenius_matrix(a, hbar, 1)
        high = frobenius_matrix(a, hbar, 2)
        assert np.array_equal(low.ring.reduce(high.matrix), low.matrix)

    def test_trace_matches_point_count(self) -> None:
        """Elliptic curve: #E(GF(p)) = p + 1 - tr(F) modulo p."""
        hbar = poly_over(101, [1, 0, 1, 1])
        action = frobenius_matrix(2, hbar, 1)
        trace = (action.matrix[0, 0] + action.matrix[1, 1]) % 101
        assert (101 + 1 - trace - count_points(2, hbar) - 1) % 101 == 0

    def test_marked_points_add_columns(self) -> None:
        """One evaluation column per marked point."""
        action = frobenius_matrix_on_lift(2, [1, 1, 0, 1], 2, 101, 1, [(0, 1)])
        assert action.columns.shape == (2, 1)
        assert isinstance(action.ring, PadicRing)

    def test_unramified_extension(self) -> None:
        """Over GF(121) the entries live in the degree-2 unramified ring."""
        hbar = poly_over(11, [1, 0, 1, 1], n=2)
        action = frobenius_matrix(2, hbar, 1)
        assert action.ring.degree == 2
        assert action.matrix.shape == (2, 2)
