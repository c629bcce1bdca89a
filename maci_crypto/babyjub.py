"""
BabyJubJub Curve Arithmetic
===========================

Twisted Edwards curve a*x^2 + y^2 = 1 + d*x^2*y^2 over the BN254 scalar
field, with a = 168700 and d = 168696. Points are plain ``(x, y)`` tuples of
Python ints reduced into [0, p).

Key Operations:
---------------
- Group law: add_point, negate_point, sub_point, mul_point_escalar
- Membership: in_curve
- Encoding: pack_point / unpack_point (32 bytes, little-endian y plus the
  sign of x in the top bit of the last byte)
- Randomness: gen_random_babyjub_value (rejection sampled, no modulo bias)

Modular inverses and square roots come from ``ecdsa.numbertheory``.
"""

import logging
import secrets
from typing import Tuple, Union

from ecdsa.numbertheory import SquareRootError, inverse_mod, square_root_mod_prime

from .constants import (
    BASE8, CURVE_A, CURVE_D, IDENTITY, P_HALF, RANDOM_VALUE_MIN, SNARK_FIELD_SIZE,
)
from .errors import (
    DenominatorZero, InvalidPoint, NoInverse, PackedLengthMismatch, SquareRootUnavailable,
)
from .utils import int_to_le_bytes, le_bytes_to_int

logger = logging.getLogger(__name__)

Point = Tuple[int, int]

p = SNARK_FIELD_SIZE

PACKED_POINT_SIZE = 32


# ============================================================================
# Field helpers
# ============================================================================

def mod_inverse(value: int, modulus: int = p) -> int:
    """
    Multiplicative inverse of ``value`` modulo ``modulus``.

    Raises
    ------
    NoInverse
        If ``value`` is congruent to zero
    """
    value %= modulus
    if value == 0:
        raise NoInverse(f"0 has no inverse modulo {modulus}")
    return inverse_mod(value, modulus)


def mod_sqrt(value: int, modulus: int = p) -> int:
    """
    A square root of ``value`` modulo the prime ``modulus``.

    Which of the two roots is returned is unspecified; callers pick the sign.

    Raises
    ------
    SquareRootUnavailable
        If ``value`` is not a quadratic residue
    """
    value %= modulus
    if value == 0:
        return 0
    try:
        return square_root_mod_prime(value, modulus)
    except SquareRootError as exc:
        raise SquareRootUnavailable(f"{value} is not a quadratic residue") from exc


def is_negative(x: int) -> bool:
    """A field element is "negative" when it lies in the upper half of [0, p)."""
    return x > P_HALF


# ============================================================================
# Group law
# ============================================================================

def in_curve(point: Point) -> bool:
    """Check that ``point`` has canonical coordinates and satisfies the curve equation."""
    try:
        x, y = point
    except (TypeError, ValueError):
        return False
    if not (isinstance(x, int) and isinstance(y, int)):
        return False
    if not (0 <= x < p and 0 <= y < p):
        return False
    x2 = x * x % p
    y2 = y * y % p
    return (CURVE_A * x2 + y2) % p == (1 + CURVE_D * x2 % p * y2) % p


def add_point(p1: Point, p2: Point) -> Point:
    """
    Twisted Edwards addition.

    Formula:
    --------
    x3 = (x1*y2 + y1*x2) / (1 + d*x1*x2*y1*y2)
    y3 = (y1*y2 - a*x1*x2) / (1 - d*x1*x2*y1*y2)

    The formula is complete on BabyJubJub (d is a non-square), so the
    denominators never vanish for points on the curve.
    """
    x1, y1 = p1
    x2, y2 = p2
    beta = x1 * y2 % p
    gamma = y1 * x2 % p
    delta = (y1 - CURVE_A * x1) * (x2 + y2) % p
    tau = beta * gamma % p
    dtau = CURVE_D * tau % p
    x3 = (beta + gamma) * mod_inverse(1 + dtau) % p
    y3 = (delta + CURVE_A * beta - gamma) * mod_inverse(1 - dtau) % p
    return (x3, y3)


def negate_point(point: Point) -> Point:
    x, y = point
    return ((-x) % p, y)


def sub_point(p1: Point, p2: Point) -> Point:
    return add_point(p1, negate_point(p2))


def mul_point_escalar(base: Point, e: int) -> Point:
    """
    Scalar multiplication ``e * base`` by double-and-add.

    Parameters
    ----------
    base : Point
        Any curve point
    e : int
        Non-negative scalar of arbitrary width (challenge * 8 can exceed the
        field size, so the scalar is not reduced here)

    Returns
    -------
    Point
        ``e * base``; the identity (0, 1) when ``e`` is zero
    """
    if e < 0:
        raise ValueError(f"Scalar must be non-negative, got {e}")
    result = IDENTITY
    addend = base
    while e:
        if e & 1:
            result = add_point(result, addend)
        addend = add_point(addend, addend)
        e >>= 1
    return result


# ============================================================================
# Packing
# ============================================================================

def pack_point(point: Point) -> bytes:
    """
    Compress a point to 32 bytes.

    ``y`` is written little-endian; bit 7 of byte 31 is set iff ``x`` is
    negative. Since y < p < 2^254 that bit is otherwise always clear.
    """
    x, y = point
    buf = bytearray(int_to_le_bytes(y, PACKED_POINT_SIZE))
    if is_negative(x):
        buf[31] |= 0x80
    return bytes(buf)


def unpack_point(data: bytes) -> Point:
    """
    Decompress a point produced by :func:`pack_point`.

    Parameters
    ----------
    data : bytes
        At most 32 bytes; shorter inputs are zero-extended

    Returns
    -------
    Point
        The unique curve point whose packing is ``data``

    Raises
    ------
    PackedLengthMismatch
        If more than 32 bytes are given
    InvalidPoint
        If y >= p or the reconstructed point is not on the curve
    DenominatorZero
        If a - d*y^2 vanishes
    SquareRootUnavailable
        If the recovered x^2 is not a quadratic residue
    """
    if len(data) > PACKED_POINT_SIZE:
        raise PackedLengthMismatch(
            f"Packed point must be at most {PACKED_POINT_SIZE} bytes, got {len(data)}"
        )
    buf = bytearray(data.ljust(PACKED_POINT_SIZE, b'\x00'))
    sign = bool(buf[31] & 0x80)
    buf[31] &= 0x7F

    y = le_bytes_to_int(bytes(buf))
    if y >= p:
        raise InvalidPoint(f"y coordinate {y} is not below the field size")

    y2 = y * y % p
    denominator = (CURVE_A - CURVE_D * y2) % p
    if denominator == 0:
        raise DenominatorZero(f"a - d*y^2 vanishes for y = {y}")
    x2 = (1 - y2) * mod_inverse(denominator) % p

    x = mod_sqrt(x2)
    if is_negative(x) != sign:
        x = (-x) % p

    point = (x, y)
    if not in_curve(point):
        raise InvalidPoint(f"Unpacked point {point} is not on the curve")
    return point


def pack_public_key(public_key: Point) -> int:
    """Packed point as a little-endian integer, the form stored on-chain."""
    if not in_curve(public_key):
        raise InvalidPoint(f"Public key {public_key} is not on the curve")
    return le_bytes_to_int(pack_point(public_key))


def unpack_public_key(packed: Union[int, str, bytes]) -> Point:
    """
    Inverse of :func:`pack_public_key`.

    Accepts the packed integer, its decimal or ``0x``-prefixed hex string, or
    the 32 raw bytes.
    """
    if isinstance(packed, (bytes, bytearray)):
        return unpack_point(bytes(packed))
    if isinstance(packed, str):
        packed = int(packed, 0)
    if packed < 0 or packed >= 1 << (8 * PACKED_POINT_SIZE):
        raise PackedLengthMismatch(f"Packed public key {packed} does not fit in 32 bytes")
    return unpack_point(int_to_le_bytes(packed, PACKED_POINT_SIZE))


# ============================================================================
# Randomness
# ============================================================================

def gen_random_babyjub_value() -> int:
    """
    Uniform random value suitable as a private key or salt.

    Draws 256-bit values until one is at least ``2^256 mod p`` so that no
    residue is over-represented, then reduces it into the 253-bit private-key
    domain.
    """
    attempts = 0
    while True:
        attempts += 1
        rand = int.from_bytes(secrets.token_bytes(32), 'big')
        if rand >= RANDOM_VALUE_MIN:
            break
    if attempts > 1:
        logger.debug("Random value accepted after %d draws", attempts)
    return rand % (1 << 253)


def gen_random_salt() -> int:
    return gen_random_babyjub_value()


def base8_mul(scalar: int) -> Point:
    return mul_point_escalar(BASE8, scalar)
