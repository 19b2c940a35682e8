"""Unit tests for truncated power series."""

from primitives.rings import PadicRing
from primitives.series import PowerSeries


class TestPowerSeries:
    """Tests for PowerSeries over Z/101^3."""

    def setup_method(self) -> None:
        self.ring = PadicRing(101, 3)
        self.t = PowerSeries.gen(self.ring, 6)

    def test_product_keeps_smaller_precision(self) -> None:
        a = PowerSeries([1, 2, 3], self.ring, 3)
        b = PowerSeries([1, 1, 1, 1, 1], self.ring, 5)
        assert (a * b).prec == 3
        assert (a * b).coeffs == [1, 3, 6]

    def test_inverse(self) -> None:
        """(1 - t)^{-1} = 1 + t + t^2 + ..."""
        s = 1 - self.t
        assert s.inverse().coeffs == [1] * 6

    def test_inverse_times_self(self) -> None:
        s = PowerSeries([3, 5, 7, 11, 13, 17], self.ring, 6)
        assert (s * s.inverse()).coeffs == [1, 0, 0, 0, 0, 0]

    def test_negative_power(self) -> None:
        """(1 + t)^{-2} = Σ (-1)^m (m+1) t^m."""
        s = (1 + self.t) ** -2
        assert s.coeffs == [self.ring((-1) ** m * (m + 1)) for m in range(6)]

    def test_derivative_and_integral(self) -> None:
        """The integral of the derivative recovers the series minus its constant term."""
        s = PowerSeries([4, 1, 2, 3, 4, 5], self.ring, 6)
        d = s.derivative()
        assert d.prec == 5
        assert d.coeffs == [1, 4, 9, 16, 25]
        back = d.integral()
        assert back.prec == 6
        assert back.coeffs == [0, 1, 2, 3, 4, 5]

    def test_root(self) -> None:
        """Cube root of 8 + t has constant term 2 and cubes back."""
        s = 8 + self.t
        r = s.root(3, 2)
        assert r[0] == 2
        assert (r ** 3).coeffs == s.coeffs

    def test_square_root_of_unit_series(self) -> None:
        s = PowerSeries([4, 3, 0, 7, 1, 2], self.ring, 6)
        r = s.root(2, 2)
        assert (r * r).coeffs == s.coeffs

    def test_evaluate(self) -> None:
        """Evaluation at an element of positive valuation."""
        s = PowerSeries([1, 2, 3], self.ring, 3)
        assert s.evaluate(101) == (1 + 2 * 101 + 3 * 101 ** 2) % 101 ** 3
