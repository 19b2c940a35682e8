"""Coleman - Frobenius actions, zeta functions and Coleman integrals of superelliptic curves."""

from coleman.curve import Curve
from coleman.expansion import basis_monomials, block, row, rs_combination, scalar_coefficients
from coleman.frobenius import FrobeniusAction, frobenius_matrix, frobenius_matrix_on_lift
from coleman.integration import coleman_integrals, tiny_integral_monomial, tiny_integrals_on_basis
from coleman.local import local_coordinates
from coleman.points import count_points, frobenius_lift, in_same_disk, is_in_weierstrass_disk, lift_x, verify_pts
from coleman.zeta import RootIsolationError, ZetaFunction, is_weil, zeta_function

__all__ = [
    # Curve
    "Curve",
    # Expansion
    "basis_monomials",
    "row",
    "block",
    "rs_combination",
    "scalar_coefficients",
    # Frobenius
    "FrobeniusAction",
    "frobenius_matrix",
    "frobenius_matrix_on_lift",
    # Points
    "verify_pts",
    "lift_x",
    "frobenius_lift",
    "in_same_disk",
    "is_in_weierstrass_disk",
    "count_points",
    # Integration
    "local_coordinates",
    "tiny_integral_monomial",
    "tiny_integrals_on_basis",
    "coleman_integrals",
    # Zeta
    "ZetaFunction",
    "RootIsolationError",
    "zeta_function",
    "is_weil",
]
