"""Finite base fields GF(q) and their lifts.

Uses galois for all finite field arithmetic. A curve is given over a galois
FieldArray class ``GF(p^n)``; this module converts between galois elements and
the integer representatives used by the precision rings.

Coefficient order: galois uses descending order, we use ascending.
"""

from typing import List, Union

import galois
import numpy as np


def field_coeffs(elem) -> List[int]:
    """Extract ascending-order coefficients [c0, ..., c_{n-1}] of a GF(p^n) element."""
    return [int(c) for c in np.atleast_1d(elem.vector())[::-1]]


def from_coeffs(field: type, coeffs: List[int]):
    """Construct a GF(p^n) element from ascending-order integer coefficients."""
    p = field.characteristic
    padded = [c % p for c in coeffs] + [0] * (field.degree - len(coeffs))
    return field.Vector(padded[::-1])


def irreducible_coeffs(field: type) -> List[int]:
    """Ascending integer coefficients of the polynomial defining GF(p^n) over GF(p)."""
    return [int(c) for c in field.irreducible_poly.coeffs[::-1]]


def poly_coeffs(poly: galois.Poly) -> list:
    """Ascending list of coefficients of a galois polynomial."""
    return list(poly.coeffs[::-1])


def lift_poly(poly: galois.Poly) -> List[Union[int, List[int]]]:
    """Lift a polynomial over GF(p^n) to integer representatives.

    For n = 1 every coefficient becomes an ``int``, otherwise a list of ``n``
    ascending integer coefficients in the basis 1, θ, ..., θ^{n-1} of the
    field's defining polynomial.
    """
    field = poly.field
    if field.degree == 1:
        return [int(c) for c in poly_coeffs(poly)]
    return [field_coeffs(c) for c in poly_coeffs(poly)]


def is_squarefree(poly: galois.Poly) -> bool:
    """True if ``poly`` has no repeated factor over its field."""
    return poly.is_square_free()


def nth_roots(field: type, value, a: int):
    """All ``y`` in ``field`` with ``y^a == value`` (brute force over the field)."""
    elements = field.elements
    return elements[elements ** a == field(value)]
