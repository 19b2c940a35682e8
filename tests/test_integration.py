"""Tests for local coordinates, tiny integrals and Coleman integrals."""

import pytest

from coleman.integration import coleman_integrals, tiny_integral_monomial, tiny_integrals_on_basis
from coleman.local import compose, local_coordinates
from coleman.points import count_points, lift_x
from primitives.polynomial import cast
from primitives.rings import PadicRing
from tests.curves import poly_over

# y^2 = x^3 + x + 1, ascending
H = [1, 1, 0, 1]
# y^2 = x^3 - x, with Weierstrass point (0, 0)
H_SPLIT = [0, -1, 0, 1]


class TestLocalCoordinates:
    """x(t), y(t) satisfy the curve equation to the requested number of terms."""

    def setup_method(self) -> None:
        self.ring = PadicRing(101, 4)

    def test_non_weierstrass(self) -> None:
        x, y, params = local_coordinates(2, H, 6, (0, 1), self.ring, [(101, 0)])
        assert x.coeffs[:2] == [0, 1]
        assert y[0] == 1
        assert (y * y).coeffs == compose(cast(H, self.ring), x).coeffs
        assert params == [101]

    def test_cube_root(self) -> None:
        """y^3 = x^2 + 1 around (0, 1)."""
        h = [1, 0, 1]
        x, y, _ = local_coordinates(3, h, 5, (0, 1), self.ring)
        assert (y ** 3).coeffs == compose(cast(h, self.ring), x).coeffs

    def test_weierstrass(self) -> None:
        """At (0, 0) the parameter is y and x is solved for."""
        x, y, params = local_coordinates(2, H_SPLIT, 6, (0, 0), self.ring, [(0, 202)])
        assert y.coeffs[:2] == [0, 1]
        assert x[0] == 0
        assert (y * y).coeffs == compose(cast(H_SPLIT, self.ring), x).coeffs
        assert params == [202]


class TestTinyIntegrals:
    """Tiny integrals within the residue disk of (0, 1)."""

    def setup_method(self) -> None:
        self.ring = PadicRing(101, 4)
        self.P = (0, 1)
        self.Q = lift_x(2, H, 101, self.ring, y=1)
        self.R = lift_x(2, H, 202, self.ring, y=1)

    def test_additive(self) -> None:
        """∫_P^R = ∫_P^Q + ∫_Q^R."""
        ring = self.ring
        PQ = tiny_integrals_on_basis(2, H, 4, self.P, self.Q, ring)
        QR = tiny_integrals_on_basis(2, H, 4, self.Q, self.R, ring)
        PR = tiny_integrals_on_basis(2, H, 4, self.P, self.R, ring)
        for u, v, w in zip(PQ, QR, PR):
            assert ring.reduce(u + v) == w

    def test_antisymmetric(self) -> None:
        ring = self.ring
        forward = tiny_integral_monomial(2, H, 4, self.P, self.Q, 1, 1, ring)
        backward = tiny_integral_monomial(2, H, 4, self.Q, self.P, 1, 1, ring)
        assert ring.reduce(forward + backward) == 0

    def test_leading_term(self) -> None:
        """∫ dx / y from (0, 1) to a point with x = 101 is 101 modulo 101^2."""
        value = tiny_integral_monomial(2, H, 4, self.P, self.Q, 0, 1, self.ring)
        assert value % 101 ** 2 == 101

    def test_same_point(self) -> None:
        assert tiny_integrals_on_basis(2, H, 4, self.P, self.P, self.ring) == [0, 0]

    def test_different_disks(self) -> None:
        minus = (0, self.ring(-1))
        with pytest.raises(ValueError):
            tiny_integral_monomial(2, H, 4, self.P, minus, 0, 1, self.ring)

    def test_weierstrass_disk(self) -> None:
        with pytest.raises(NotImplementedError):
            tiny_integral_monomial(2, H_SPLIT, 4, (0, 0), (0, 0), 0, 1, self.ring)


class TestColemanIntegrals:
    """Coleman integrals on y^2 = x^3 + x + 1 over Z/101^3."""

    def setup_method(self) -> None:
        self.ring = PadicRing(101, 3)

    def test_frobenius_minus_identity_is_invertible(self) -> None:
        """1 - a_p + p is a unit, so the equivariance system has a unique solution."""
        points = count_points(2, poly_over(101, [1, 0, 1, 1])) + 1
        assert points % 101 != 0

    def test_matches_tiny_integrals(self) -> None:
        """Within one residue disk the Coleman integral is the tiny integral."""
        P = (0, 1)
        Q = lift_x(2, H, 101, self.ring, y=1)
        result = coleman_integrals(2, H, 3, 101, 1, P, Q)
        assert list(result) == tiny_integrals_on_basis(2, H, 3, P, Q, self.ring)
        assert list(result) == [255126, 520251]

    def test_matches_tiny_integrals_on_cubic_cover(self) -> None:
        """y^3 = x^2 + 1 is supersingular at 101, so M - I is invertible."""
        h = [1, 0, 1]
        P = (0, 1)
        Q = lift_x(3, h, 101, self.ring, y=1)
        result = coleman_integrals(3, h, 3, 101, 1, P, Q)
        assert list(result) == tiny_integrals_on_basis(3, h, 3, P, Q, self.ring)

    def test_reversed_endpoints(self) -> None:
        P = (0, 1)
        Q = lift_x(2, H, 101, self.ring, y=1)
        forward = coleman_integrals(2, H, 3, 101, 1, P, Q)
        backward = coleman_integrals(2, H, 3, 101, 1, Q, P)
        assert list(self.ring.reduce(forward + backward)) == [0, 0]

    def test_shape(self) -> None:
        result = coleman_integrals(2, H, 3, 101, 1, (0, 1))
        assert result.shape == (2,)

    def test_same_endpoints(self) -> None:
        result = coleman_integrals(2, H, 3, 101, 1, (0, 1), (0, 1))
        assert list(result) == [0, 0]

    def test_point_not_on_curve(self) -> None:
        with pytest.raises(ValueError):
            coleman_integrals(2, H, 3, 101, 1, (0, 2))

    def test_extension_field_not_implemented(self) -> None:
        with pytest.raises(NotImplementedError):
            coleman_integrals(2, H, 3, 101, 2, (0, 1))
