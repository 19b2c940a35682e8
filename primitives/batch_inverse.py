"""Montgomery batch inversion over precision rings.

The Montgomery trick converts N ring inversions into 3N-3 multiplications + 1 inversion.
"""

from typing import List

from primitives.rings import PrecisionRing


def batch_inverse(values: List, ring: PrecisionRing) -> List:
    """Montgomery batch inversion for elements of a precision ring.

    Algorithm:
    1. Forward pass: Compute prefix products cumprods[i] = a[0] * a[1] * ... * a[i]
    2. Single inversion: inv_total = cumprods[N-1]^(-1)
    3. Backward pass: Extract individual inverses using cumprods

    A product is a unit iff every factor is, so a single non-unit makes the
    one inversion fail.

    Args:
        values: ring elements to invert (must all be units)
        ring: ring the elements live in

    Returns:
        List where result[i] = values[i]^(-1)

    Raises:
        NonUnitError: If any element is not a unit
    """
    n = len(values)
    if n == 0:
        return []
    if n == 1:
        return [ring.inv(values[0])]

    # Forward pass: compute prefix products
    cumprods = [ring.reduce(values[0])]
    for i in range(1, n):
        cumprods.append(ring.reduce(cumprods[i - 1] * values[i]))

    # Single inversion of the total product
    z = ring.inv(cumprods[n - 1])

    # Backward pass: extract individual inverses
    results = [None] * n
    for i in range(n - 1, 0, -1):
        results[i] = ring.reduce(z * cumprods[i - 1])
        z = ring.reduce(z * values[i])
    results[0] = z

    return results
