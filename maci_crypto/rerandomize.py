"""
Odevity Encryption and Rerandomization
======================================

ElGamal over BabyJubJub carrying one bit: whether a voter key is deactivated
(odd) or active (even). The plaintext point is the public key of a throwaway
keypair chosen so that its x coordinate has the requested parity; decrypting
recovers that point and its parity is the bit.

Ciphertext:
-----------
- c1 = Base8 * r
- c2 = M + pub * r
- x_increment = (M.x - 123) mod p, so decoding (M.x - x_increment) yields the
  encoded value 123

Decryption with the formatted private key k (pub = Base8 * k) computes
c2 - c1 * k = M. Rerandomizing with fresh r' adds (Base8 * r', pub * r') to
(c1, c2), which is an encryption of the same M under randomness r + r'.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .babyjub import (
    Point, add_point, base8_mul, gen_random_babyjub_value, in_curve, mul_point_escalar, sub_point,
)
from .constants import ODEVITY_PLAINTEXT, SNARK_FIELD_SIZE
from .errors import InvalidPoint
from .keys import Keypair, gen_keypair

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Message:
    point: Point
    x_increment: int


@dataclass(frozen=True)
class Ciphertext:
    c1: Point
    c2: Point
    x_increment: int = 0

    def to_list(self) -> list:
        """``[c1.x, c1.y, c2.x, c2.y]``, the layout used in deactivate leaves."""
        return [self.c1[0], self.c1[1], self.c2[0], self.c2[1]]


def _check_recipient(pub_key: Point) -> None:
    if not in_curve(pub_key):
        raise InvalidPoint(f"Recipient public key {pub_key} is not on the curve")


def encode_to_message(original: int, random_key: Optional[Keypair] = None) -> Message:
    """
    Map ``original`` to a curve point plus the correction needed to read it back.

    Parameters
    ----------
    original : int
        Value below p
    random_key : Keypair, optional
        Keypair whose public key becomes the message point; random if omitted

    Returns
    -------
    Message
    """
    if random_key is None:
        random_key = gen_keypair()
    point = random_key.pub_key
    x_increment = (point[0] - original) % SNARK_FIELD_SIZE
    return Message(point=point, x_increment=x_increment)


def decode_message(message: Message) -> int:
    return (message.point[0] - message.x_increment) % SNARK_FIELD_SIZE


def _encrypt_message(message: Message, pub_key: Point, random_val: int) -> Ciphertext:
    c1 = base8_mul(random_val)
    c2 = add_point(message.point, mul_point_escalar(pub_key, random_val))
    return Ciphertext(c1=c1, c2=c2, x_increment=message.x_increment)


def encrypt(plaintext: int, pub_key: Point, random_val: Optional[int] = None) -> Ciphertext:
    """Encrypt an arbitrary value below p under ``pub_key``."""
    _check_recipient(pub_key)
    if random_val is None:
        random_val = gen_random_babyjub_value()
    return _encrypt_message(encode_to_message(plaintext), pub_key, random_val)


def encrypt_odevity(is_odd: bool, pub_key: Point, random_val: Optional[int] = None) -> Ciphertext:
    """
    Encrypt one parity bit under ``pub_key``.

    Parameters
    ----------
    is_odd : bool
        True marks the key deactivated, False marks it active
    pub_key : Point
        Recipient (coordinator) public key
    random_val : int, optional
        Encryption randomness; drawn securely when omitted. The message point
        is searched deterministically from it, so equal inputs give equal
        ciphertexts.

    Returns
    -------
    Ciphertext
    """
    _check_recipient(pub_key)
    if random_val is None:
        random_val = gen_random_babyjub_value()

    i = 0
    message = encode_to_message(ODEVITY_PLAINTEXT, gen_keypair(random_val + i))
    while (message.point[0] % 2 == 1) != is_odd:
        i += 1
        message = encode_to_message(ODEVITY_PLAINTEXT, gen_keypair(random_val + i))
    logger.debug("Odevity message found after %d candidate keys (is_odd=%s)", i + 1, is_odd)

    return _encrypt_message(message, pub_key, random_val)


def decrypt(formated_priv_key: int, ciphertext: Ciphertext) -> Message:
    """
    Recover the message point: ``c2 - c1 * formated_priv_key``.

    Raises
    ------
    InvalidPoint
        If either ciphertext component is off the curve
    """
    if not in_curve(ciphertext.c1) or not in_curve(ciphertext.c2):
        raise InvalidPoint("Ciphertext components must be curve points")
    shared = mul_point_escalar(ciphertext.c1, formated_priv_key)
    point = sub_point(ciphertext.c2, shared)
    return Message(point=point, x_increment=ciphertext.x_increment)


def decrypt_odevity(formated_priv_key: int, ciphertext: Ciphertext) -> bool:
    """True iff the ciphertext encodes an odd (deactivated) flag."""
    return decrypt(formated_priv_key, ciphertext).point[0] % 2 == 1


def rerandomize_ciphertext(pub_key: Point, ciphertext: Ciphertext,
                           random_val: Optional[int] = None) -> Ciphertext:
    """
    Re-draw the randomness of ``ciphertext`` without the private key.

    Returns
    -------
    Ciphertext
        ``(c1 + Base8 * r', c2 + pub * r')`` with the same ``x_increment``
    """
    _check_recipient(pub_key)
    if random_val is None:
        random_val = gen_random_babyjub_value()
    d1 = add_point(base8_mul(random_val), ciphertext.c1)
    d2 = add_point(mul_point_escalar(pub_key, random_val), ciphertext.c2)
    return Ciphertext(c1=d1, c2=d2, x_increment=ciphertext.x_increment)
