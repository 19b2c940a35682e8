"""Products of polynomial matrices along arithmetic progressions.

For a matrix G(s) whose entries are polynomials of degree ``degree`` in s and
a list of disjoint increasing intervals (L, R], :func:`interval_products`
returns

    G(R) @ G(R-1) @ ... @ G(L+1)

for every interval (the order in which a row vector is pushed through the
matrices as s decreases).

Block size K = 2^m with m = floor(log_4(max R)). The block product
U_K(x) = G(x+K) ... G(x+1) is sampled at x = 0, K, 2K, ... by doubling
(Bostan, Gaudry and Schost). With f(i) = U_k(k i), a polynomial of degree
D = degree*k in i,

    U_2k(2k i) = f(2i + 1) @ f(2i),

and the values f(D+1), ..., f(4D+3) come from f(0), ..., f(D) by Lagrange
shifting. A shift is one convolution per matrix entry, done as a single
integer product (Kronecker substitution), so sampling costs O(K) matrix
products plus O(log K) convolutions of length O(K). Partial blocks at the
ends of each interval are multiplied directly.
"""

import logging
from typing import Callable, List, Sequence, Tuple

import numpy as np

from primitives.batch_inverse import batch_inverse
from primitives.linalg import inverse, matmul
from primitives.rings import NonUnitError, PadicRing, PrecisionRing

logger = logging.getLogger(__name__)

MatrixAt = Callable[[int], np.ndarray]
Interval = Tuple[int, int]


# --- Convolution ---

def _pack(values: Sequence[int], width: int) -> int:
    return int.from_bytes(b"".join(v.to_bytes(width, "little") for v in values), "little")


def _unpack(value: int, width: int, count: int) -> List[int]:
    data = value.to_bytes(width * count, "little")
    return [int.from_bytes(data[i * width:(i + 1) * width], "little") for i in range(count)]


def convolve(xs: Sequence, kernel: Sequence[int], ring: PrecisionRing) -> List:
    """Full convolution of ring elements ``xs`` with integers ``kernel`` in [0, p^N).

    Each coordinate of ``xs`` is packed into one integer, multiplied by the
    packed kernel, and unpacked.
    """
    n, m = len(xs), len(kernel)
    modulus = ring.modulus
    # bytes per slot: room for min(n, m) products of two residues
    width = (2 * modulus.bit_length() + min(n, m).bit_length()) // 8 + 1
    packed_kernel = _pack(kernel, width)
    coords = [ring.coordinates(x) for x in xs]
    columns = []
    for c in range(len(coords[0])):
        prod = _pack([cs[c] for cs in coords], width) * packed_kernel
        columns.append([v % modulus for v in _unpack(prod, width, n + m - 1)])
    return [ring.from_coordinates([col[i] for col in columns]) for i in range(n + m - 1)]


# --- Lagrange shifting ---

def shift_values(values: Sequence[np.ndarray], shift: int, ring: PrecisionRing) -> List[np.ndarray]:
    """f(shift), ..., f(shift + D) from f(0), ..., f(D) for f of degree <= D.

    Args:
        values: D + 1 matrices of the same shape
        shift: integer >= D + 1
        ring: ring of the entries

    Raises:
        ValueError: if the shifted points overlap the known ones
        NonUnitError: if a Lagrange denominator (an integer up to shift + D)
            is divisible by p
    """
    D = len(values) - 1
    if shift <= D:
        raise ValueError(f"shift {shift} overlaps the {D + 1} known samples")
    p, modulus = ring.p, ring.modulus
    lo, hi = shift - D, shift + D
    if D >= p or hi // p > (lo - 1) // p:
        raise NonUnitError(f"shifting {D + 1} samples by {shift} divides by a multiple of {p}")

    base = PadicRing(p, ring.precision)
    factorials = [1]
    for i in range(1, D + 1):
        factorials.append(factorials[-1] * i % modulus)
    inverses = batch_inverse(factorials + list(range(lo, hi + 1)), base)
    inv_fact, kernel = inverses[:D + 1], inverses[D + 1:]
    weights = [base.reduce((-1) ** (D - i) * inv_fact[i] * inv_fact[D - i]) for i in range(D + 1)]

    # prefactor[k] = (shift + k) (shift + k - 1) ... (shift + k - D)
    prefactor = [1]
    for j in range(D + 1):
        prefactor[0] = prefactor[0] * (shift - j) % modulus
    for k in range(1, D + 1):
        prefactor.append(prefactor[-1] * (shift + k) * kernel[k - 1] % modulus)

    shape = values[0].shape
    out = [ring.zeros(shape) for _ in range(D + 1)]
    for idx in np.ndindex(*shape):
        xs = [ring.reduce(values[i][idx] * weights[i]) for i in range(D + 1)]
        conv = convolve(xs, kernel, ring)
        for k in range(D + 1):
            out[k][idx] = ring.reduce(conv[D + k] * prefactor[k])
    return out


# --- Block products ---

def block_size(top: int) -> int:
    """2^m with m = floor(log_4(top))."""
    if top < 1:
        return 1
    return 1 << ((top.bit_length() - 1) // 2)


def sampling_step(top: int, degree: int, p: int) -> int:
    """Largest power of two <= block_size(top) whose shifts divide only by units.

    Every Lagrange denominator is a positive integer below
    top // K + 2 degree K + 3, so it suffices that this bound stays below p.
    """
    step = block_size(top)
    while step > 1 and top // step + 2 * degree * step + 3 >= p:
        step //= 2
    return step


def block_values(matrix_at: MatrixAt, degree: int, step: int, ring: PrecisionRing) -> List[np.ndarray]:
    """U_step(step * i) for i = 0 .. degree*step, step a power of two."""
    values = [matrix_at(i + 1) for i in range(degree + 1)]
    k = 1
    while k < step:
        D = len(values) - 1
        extended = list(values)
        for s in (1, 2, 3):
            extended += shift_values(values, s * (D + 1), ring)
        values = [matmul(extended[2 * i + 1], extended[2 * i], ring) for i in range(2 * D + 1)]
        k *= 2
    return values


def naive_product(matrix_at: MatrixAt, lo: int, hi: int, dim: int, ring: PrecisionRing) -> np.ndarray:
    """G(hi) @ ... @ G(lo+1) by one multiplication per point."""
    prod = ring.identity(dim)
    for s in range(lo + 1, hi + 1):
        prod = matmul(matrix_at(s), prod, ring)
    return prod


def interval_products(
    matrix_at: MatrixAt,
    degree: int,
    intervals: Sequence[Interval],
    ring: PrecisionRing,
) -> List[np.ndarray]:
    """Products G(R) @ ... @ G(L+1) for each interval (L, R].

    Args:
        matrix_at: callback returning G(s) over ``ring`` for an integer s
        degree: degree of the entries of G in s
        intervals: disjoint, increasing (L, R] pairs with L <= R
        ring: ring of the entries

    Returns:
        One square matrix per interval
    """
    if not intervals:
        return []
    prev_hi = None
    for lo, hi in intervals:
        if lo > hi or (prev_hi is not None and lo < prev_hi):
            raise ValueError(f"intervals must be disjoint and increasing, got {list(intervals)}")
        prev_hi = hi

    dim = matrix_at(0).shape[0]
    degree = max(degree, 1)
    top = intervals[-1][1]
    step = sampling_step(top, degree, ring.p)
    logger.debug("sampling %d intervals up to %d with block size %d", len(intervals), top, step)
    if step == 1:
        return [naive_product(matrix_at, lo, hi, dim, ring) for lo, hi in intervals]

    samples = block_values(matrix_at, degree, step, ring)
    blocks = list(samples)
    needed = top // step
    while len(blocks) < needed:
        blocks += shift_values(samples, len(blocks), ring)

    results = []
    for lo, hi in intervals:
        first = -(-lo // step)
        last = hi // step
        if first >= last:
            results.append(naive_product(matrix_at, lo, hi, dim, ring))
            continue
        prod = naive_product(matrix_at, lo, first * step, dim, ring)
        for i in range(first, last):
            prod = matmul(blocks[i], prod, ring)
        prod = matmul(naive_product(matrix_at, last * step, hi, dim, ring), prod, ring)
        results.append(prod)
    return results


# --- Vandermonde extrapolation ---

def inverse_vandermonde(n: int, ring: PrecisionRing) -> np.ndarray:
    """Inverse of V with V[e, c] = (c+1)^e for e, c in 0..n-1."""
    V = ring.matrix([[(c + 1) ** e for c in range(n)] for e in range(n)])
    return inverse(V, ring)


def extrapolate(samples: Sequence[np.ndarray], total: int, vinv: np.ndarray, ring: PrecisionRing) -> List[np.ndarray]:
    """Extend f(1), ..., f(n) to f(1), ..., f(total) for f of degree < n.

    ``vinv`` is :func:`inverse_vandermonde` of size n = len(samples). For
    n = 1 the sequence is constant.
    """
    n = len(samples)
    out = list(samples)
    if total <= n:
        return out[:total]
    if n == 1:
        return out + [samples[0]] * (total - 1)
    # taylor[e] = coefficient of l^e
    taylor = []
    for e in range(n):
        acc = ring.zeros(samples[0].shape)
        for m in range(n):
            acc = acc + samples[m] * vinv[m, e]
        taylor.append(ring.reduce(acc))
    for l in range(n + 1, total + 1):
        acc = ring.zeros(samples[0].shape)
        c = 1
        for e in range(n):
            acc = acc + taylor[e] * c
            c *= l
        out.append(ring.reduce(acc))
    return out
