"""Primitives - Low-level arithmetic building blocks over p-adic precision rings."""

from primitives.batch_inverse import batch_inverse
from primitives.field import (
    field_coeffs,
    from_coeffs,
    is_squarefree,
    lift_poly,
    nth_roots,
)
from primitives.linalg import charpoly, inverse, matmul, pseudo_inverse, solve
from primitives.polynomial import MatrixPolynomial
from primitives.progression import extrapolate, interval_products, inverse_vandermonde
from primitives.rings import (
    NonUnitError,
    PadicRing,
    PrecisionRing,
    QadicRing,
    SeriesElement,
    SeriesRing,
    UnramifiedElement,
    precision_ring,
)
from primitives.series import PowerSeries

__all__ = [
    # Field
    "field_coeffs",
    "from_coeffs",
    "is_squarefree",
    "lift_poly",
    "nth_roots",
    # Rings
    "NonUnitError",
    "PrecisionRing",
    "PadicRing",
    "QadicRing",
    "SeriesRing",
    "SeriesElement",
    "UnramifiedElement",
    "precision_ring",
    # Batch inversion
    "batch_inverse",
    # Linear algebra
    "matmul",
    "inverse",
    "pseudo_inverse",
    "solve",
    "charpoly",
    # Polynomials and series
    "MatrixPolynomial",
    "PowerSeries",
    # Progression sampling
    "interval_products",
    "extrapolate",
    "inverse_vandermonde",
]
