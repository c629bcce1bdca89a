"""
Hash Functions
==============

Fixed-arity wrappers around the Poseidon permutation, used for every
commitment and tree node, plus an EVM-compatible SHA-256 over packed uint256
values for inputs that must be recomputed on a ledger.

Arity Conventions:
------------------
- poseidon_t3 .. poseidon_t6: exactly 2 .. 5 inputs, otherwise an error
- hash_n / hash2 .. hash5: up to n inputs, zero-padded to n
- hash10: hash2(hash5(e[0:5]), hash5(e[5:10]))
- hash12: hash4(hash5(e[0:5]), hash5(e[5:10]), e[10], e[11])
- hash_one: poseidon([x, 0])
"""

import hashlib
from typing import Sequence

from .constants import SNARK_FIELD_SIZE
from .errors import InputArityMismatch
from .poseidon import poseidon


def _poseidon_exact(inputs: Sequence[int], width: int) -> int:
    arity = width - 1
    if len(inputs) != arity:
        raise InputArityMismatch(f"poseidon_t{width} expects {arity} inputs, got {len(inputs)}")
    return poseidon(inputs)


def poseidon_t3(inputs: Sequence[int]) -> int:
    return _poseidon_exact(inputs, 3)


def poseidon_t4(inputs: Sequence[int]) -> int:
    return _poseidon_exact(inputs, 4)


def poseidon_t5(inputs: Sequence[int]) -> int:
    return _poseidon_exact(inputs, 5)


def poseidon_t6(inputs: Sequence[int]) -> int:
    return _poseidon_exact(inputs, 6)


def _pad_to(elements: Sequence[int], size: int) -> list:
    if len(elements) > size:
        raise InputArityMismatch(f"Expected at most {size} elements, got {len(elements)}")
    return list(elements) + [0] * (size - len(elements))


def hash_n(num_elements: int, elements: Sequence[int]) -> int:
    """
    Poseidon over ``elements`` zero-padded to exactly ``num_elements`` inputs.

    Raises
    ------
    InputArityMismatch
        If more than ``num_elements`` elements are given
    """
    return poseidon(_pad_to(elements, num_elements))


def hash2(elements: Sequence[int]) -> int:
    return hash_n(2, elements)


def hash3(elements: Sequence[int]) -> int:
    return hash_n(3, elements)


def hash4(elements: Sequence[int]) -> int:
    return hash_n(4, elements)


def hash5(elements: Sequence[int]) -> int:
    return hash_n(5, elements)


def hash10(elements: Sequence[int]) -> int:
    padded = _pad_to(elements, 10)
    return poseidon([poseidon(padded[0:5]), poseidon(padded[5:10])])


def hash12(elements: Sequence[int]) -> int:
    padded = _pad_to(elements, 12)
    return poseidon([poseidon(padded[0:5]), poseidon(padded[5:10]), padded[10], padded[11]])


def hash_left_right(left: int, right: int) -> int:
    return poseidon([left, right])


def hash_lean_imt(left: int, right: int) -> int:
    """Node hash of the binary lean tree."""
    return poseidon([left, right])


def hash_one(pre_image: int) -> int:
    """Single-input hash, domain separated from hash1 by the explicit zero."""
    return poseidon([pre_image, 0])


def sha256_hash(values: Sequence[int]) -> int:
    """
    SHA-256 of ``abi.encodePacked(uint256...)`` reduced into the field.

    Each value is written as 32 big-endian bytes and the concatenation is
    digested once. This matches ``solidityPackedSha256`` over a uint256 array,
    so ledgers can recompute circuit input hashes without field arithmetic.

    Parameters
    ----------
    values : Sequence[int]
        Unsigned integers below 2^256

    Returns
    -------
    int
        The digest interpreted big-endian, modulo p
    """
    packed = b"".join(int(v).to_bytes(32, 'big') for v in values)
    return int.from_bytes(hashlib.sha256(packed).digest(), 'big') % SNARK_FIELD_SIZE


def compute_input_hash(values: Sequence[int]) -> int:
    return sha256_hash(values)
