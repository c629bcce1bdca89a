"""
MACI Keys
=========

Protocol keys are integers. The integer is turned into an EdDSA seed by its
minimal big-endian byte encoding, so a private key such as ``111111`` signs
with seed ``b"\\x01\\xb2\\x07"``.

- priv_key: the raw private key (random 256-bit value, or a caller value
  reduced modulo p)
- formated_priv_key: the BabyJubJub secret scalar derived from priv_key; this
  is what circuits and ECDH consume
- pub_key: Base8 * formated_priv_key
"""

import secrets
from dataclasses import dataclass, field
from typing import Optional, Union

from .babyjub import Point, base8_mul, in_curve, mul_point_escalar
from .constants import SNARK_FIELD_SIZE
from .eddsa import (
    Signature, derive_public_key, derive_secret_scalar, pack_public_key, sign_message,
    unpack_public_key,
)
from .errors import InvalidPoint
from .poseidon import poseidon
from .seed_hash import HashingAlgorithm
from .utils import bigint_to_bytes


@dataclass(frozen=True)
class Keypair:
    priv_key: int = field(repr=False)
    pub_key: Point
    formated_priv_key: int = field(repr=False)

    @property
    def commitment(self) -> int:
        """Identity commitment: Poseidon(pub_key.x, pub_key.y)."""
        return poseidon(list(self.pub_key))


def gen_priv_key() -> int:
    """32 random bytes read as a big-endian integer."""
    return int.from_bytes(secrets.token_bytes(32), 'big')


def format_priv_key_for_babyjub(priv_key: int,
                                algorithm: Optional[HashingAlgorithm] = None) -> int:
    return derive_secret_scalar(bigint_to_bytes(priv_key), algorithm)


def gen_pub_key(priv_key: int, algorithm: Optional[HashingAlgorithm] = None) -> Point:
    return derive_public_key(bigint_to_bytes(priv_key), algorithm)


def gen_keypair(priv_key: Optional[int] = None,
                algorithm: Optional[HashingAlgorithm] = None) -> Keypair:
    """
    Build a keypair from ``priv_key`` (reduced modulo p) or a fresh random key.

    Parameters
    ----------
    priv_key : int, optional
        Private key; a random one is generated when omitted
    algorithm : HashingAlgorithm, optional
        Seed hash; defaults to ``config.hash_algorithm``

    Returns
    -------
    Keypair
    """
    priv = gen_priv_key() if priv_key is None else priv_key % SNARK_FIELD_SIZE
    formated = format_priv_key_for_babyjub(priv, algorithm)
    pub = base8_mul(formated)
    return Keypair(priv_key=priv, pub_key=pub, formated_priv_key=formated)


def derive_shared_point(secret_scalar: int, public_key: Point) -> Point:
    """ECDH on a secret scalar: ``public_key * secret_scalar``."""
    if not in_curve(public_key):
        raise InvalidPoint(f"Peer public key {public_key} is not on the curve")
    return mul_point_escalar(public_key, secret_scalar)


def gen_ecdh_shared_key(priv_key: int, public_key: Point,
                        algorithm: Optional[HashingAlgorithm] = None) -> Point:
    """
    Shared point between ``priv_key`` and a peer's public key.

    Both sides obtain Base8 * a * b, where a and b are the formatted private
    keys, so the result is symmetric.
    """
    return derive_shared_point(format_priv_key_for_babyjub(priv_key, algorithm), public_key)


def sign_with_priv_key(priv_key: int, message: int,
                       algorithm: Optional[HashingAlgorithm] = None) -> Signature:
    return sign_message(bigint_to_bytes(priv_key), message, algorithm)


def pack_pub_key(pub_key: Point) -> int:
    return pack_public_key(pub_key)


def unpack_pub_key(packed: Union[int, str, bytes]) -> Point:
    return unpack_public_key(packed)
