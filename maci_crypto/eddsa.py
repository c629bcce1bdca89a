"""
EdDSA over BabyJubJub with Poseidon
===================================

circomlib-compatible signatures. The seed is hashed to 64 bytes; the low half
is pruned into the secret scalar and the high half seeds the deterministic
nonce. Challenges are Poseidon hashes, so signatures are cheap to verify in a
circuit.

Signing Equations:
------------------
- s  = prune(H(seed)[0:32])               (unshifted, a multiple of 8)
- A  = Base8 * (s >> 3)
- r  = H(H(seed)[32:64] || msg_le32) mod l
- R8 = Base8 * r
- hm = Poseidon(R8.x, R8.y, A.x, A.y, msg)
- S  = (r + hm * s) mod l

Verification accepts iff Base8 * S == R8 + A * (8 * hm).
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from .babyjub import (
    PACKED_POINT_SIZE, Point, add_point, in_curve, mul_point_escalar, pack_point, unpack_point,
)
from .babyjub import pack_public_key as _pack_point_int
from .babyjub import unpack_public_key as _unpack_point_int
from .config import config
from .constants import BASE8, SUBGROUP_ORDER
from .errors import InvalidPoint, MaciCryptoError, PackedLengthMismatch
from .poseidon import poseidon
from .seed_hash import HashingAlgorithm
from .utils import check_field_element, int_to_le_bytes, le_bytes_to_int

logger = logging.getLogger(__name__)

SIGNATURE_SIZE = 2 * PACKED_POINT_SIZE

Seed = Union[bytes, bytearray, str]


@dataclass(frozen=True)
class Signature:
    """An EdDSA signature: the nonce commitment R8 and the response S."""
    R8: Point
    S: int


def _seed_bytes(seed: Seed) -> bytes:
    if isinstance(seed, str):
        return seed.encode('utf-8')
    return bytes(seed)


def _resolve(algorithm: Optional[HashingAlgorithm]) -> HashingAlgorithm:
    return config.hash_algorithm if algorithm is None else algorithm


def prune_buffer(buf: bytes) -> bytes:
    """
    Clear the low 3 bits of byte 0 and the top bit of byte 31, set bit 6 of
    byte 31. The result, read little-endian, is a multiple of 8 in
    [2^254, 2^255).
    """
    if len(buf) < 32:
        raise PackedLengthMismatch(f"Pruning needs 32 bytes, got {len(buf)}")
    out = bytearray(buf[:32])
    out[0] &= 0xF8
    out[31] &= 0x7F
    out[31] |= 0x40
    return bytes(out)


def derive_secret_scalar(seed: Seed, algorithm: Optional[HashingAlgorithm] = None) -> int:
    """
    Secret scalar of a private seed.

    Parameters
    ----------
    seed : bytes or str
        Private key material; strings are UTF-8 encoded
    algorithm : HashingAlgorithm, optional
        Seed hash; defaults to ``config.hash_algorithm``

    Returns
    -------
    int
        ``(prune(H(seed)[0:32]) >> 3) mod l``
    """
    digest = _resolve(algorithm).digest(_seed_bytes(seed))
    s = le_bytes_to_int(prune_buffer(digest[:32]))
    return (s >> 3) % SUBGROUP_ORDER


def derive_public_key(seed: Seed, algorithm: Optional[HashingAlgorithm] = None) -> Point:
    return mul_point_escalar(BASE8, derive_secret_scalar(seed, algorithm))


def sign_message(seed: Seed, message: int,
                 algorithm: Optional[HashingAlgorithm] = None) -> Signature:
    """
    Deterministically sign a field element.

    Parameters
    ----------
    seed : bytes or str
        Private key material
    message : int
        Field element in [0, p)
    algorithm : HashingAlgorithm, optional
        Seed hash; defaults to ``config.hash_algorithm``

    Returns
    -------
    Signature
        ``(R8, S)`` with S < l

    Notes
    -----
    The response uses the unshifted pruned scalar while the public key uses
    the shifted one; verification multiplies the challenge by 8 to match.
    """
    check_field_element(message, "message")
    algo = _resolve(algorithm)
    digest = algo.digest(_seed_bytes(seed))

    s = le_bytes_to_int(prune_buffer(digest[:32]))
    A = mul_point_escalar(BASE8, s >> 3)

    nonce_digest = algo.digest(digest[32:64] + int_to_le_bytes(message, 32))
    r = le_bytes_to_int(nonce_digest) % SUBGROUP_ORDER
    R8 = mul_point_escalar(BASE8, r)

    hm = poseidon([R8[0], R8[1], A[0], A[1], message])
    S = (r + hm * s) % SUBGROUP_ORDER
    return Signature(R8=R8, S=S)


def verify_signature(message: int, signature: Signature, public_key: Point) -> bool:
    """
    Check a signature; never raises.

    Returns ``False`` for off-curve points, S >= l, a message outside the
    field, or any structurally malformed argument.
    """
    try:
        R8, S = signature.R8, signature.S
        if not in_curve(R8) or not in_curve(public_key):
            return False
        if not isinstance(S, int) or not 0 <= S < SUBGROUP_ORDER:
            return False
        check_field_element(message, "message")

        hm = poseidon([R8[0], R8[1], public_key[0], public_key[1], message])
        left = mul_point_escalar(BASE8, S)
        right = add_point(R8, mul_point_escalar(public_key, 8 * hm))
    except (MaciCryptoError, AttributeError, TypeError, ValueError) as exc:
        logger.debug("Signature rejected: %s", exc)
        return False
    return left == right


def pack_signature(signature: Signature) -> bytes:
    """64 bytes: packed R8 followed by S as 32 little-endian bytes."""
    if not in_curve(signature.R8):
        raise InvalidPoint(f"R8 {signature.R8} is not on the curve")
    return pack_point(signature.R8) + int_to_le_bytes(signature.S, 32)


def unpack_signature(packed: bytes) -> Signature:
    if len(packed) != SIGNATURE_SIZE:
        raise PackedLengthMismatch(
            f"Packed signature must be {SIGNATURE_SIZE} bytes, got {len(packed)}"
        )
    R8 = unpack_point(bytes(packed[:PACKED_POINT_SIZE]))
    S = le_bytes_to_int(bytes(packed[PACKED_POINT_SIZE:]))
    return Signature(R8=R8, S=S)


def pack_public_key(public_key: Point) -> int:
    return _pack_point_int(public_key)


def unpack_public_key(packed: Union[int, str, bytes]) -> Point:
    return _unpack_point_int(packed)


def check_public_key(public_key: Point) -> bool:
    """A usable public key is an on-curve point in the prime-order subgroup."""
    if not in_curve(public_key):
        return False
    return mul_point_escalar(public_key, SUBGROUP_ORDER) == (0, 1)
