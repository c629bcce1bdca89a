"""
MACI Crypto Core
================

Cryptographic engine of an anonymous, anti-collusion voting protocol. All
layers share the BabyJubJub curve, the BN254 scalar field and the Poseidon
hash.

Modules:
--------
- babyjub: curve arithmetic, point packing, bias-free random values
- poseidon / hashing: Poseidon permutation, fixed-arity hashes, EVM SHA-256
- blake512 / seed_hash: seed hashing for key derivation
- eddsa: EdDSA-Poseidon signing and verification
- keys: integer private keys, keypairs and ECDH
- rerandomize: odevity (parity) ElGamal encryption and rerandomization
- tree / lean_tree: fixed-arity and unbounded binary Merkle trees
- pack: vote command packing
- utils: integer, byte and string conversions
- config / errors / constants: ambient configuration, error types, constants

Usage:
------
    from maci_crypto import gen_keypair, sign_with_priv_key, verify_signature

    keypair = gen_keypair(111111)
    sig = sign_with_priv_key(keypair.priv_key, 42)
    assert verify_signature(42, sig, keypair.pub_key)
"""

import logging
from typing import Optional

from .babyjub import (
    add_point, gen_random_babyjub_value, gen_random_salt, in_curve, mul_point_escalar,
    pack_point, unpack_point,
)
from .config import config
from .constants import BASE8, NOTHING_UP_MY_SLEEVE, SNARK_FIELD_SIZE, SUBGROUP_ORDER
from .eddsa import (
    Signature, derive_public_key, derive_secret_scalar, pack_signature, sign_message,
    unpack_signature, verify_signature,
)
from .errors import MaciCryptoError
from .hashing import hash2, hash5, hash10, hash12, hash_one, sha256_hash
from .keys import Keypair, gen_ecdh_shared_key, gen_keypair, sign_with_priv_key
from .lean_tree import LeanTree
from .poseidon import poseidon
from .rerandomize import Ciphertext, decrypt_odevity, encrypt_odevity, rerandomize_ciphertext
from .seed_hash import HashingAlgorithm
from .tree import Tree

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())


def configure_logging(level: Optional[int] = None) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Parameters
    ----------
    level : int, optional
        Logging level; defaults to ``config.log_level`` (MACI_LOG_LEVEL)

    Returns
    -------
    logging.Logger
        The ``maci_crypto`` logger
    """
    logger = logging.getLogger(__name__)
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(config.log_level if level is None else level)
    return logger


__all__ = [
    'BASE8', 'NOTHING_UP_MY_SLEEVE', 'SNARK_FIELD_SIZE', 'SUBGROUP_ORDER',
    'Ciphertext', 'HashingAlgorithm', 'Keypair', 'LeanTree', 'MaciCryptoError', 'Signature', 'Tree',
    'add_point', 'config', 'configure_logging', 'decrypt_odevity', 'derive_public_key',
    'derive_secret_scalar', 'encrypt_odevity', 'gen_ecdh_shared_key', 'gen_keypair',
    'gen_random_babyjub_value', 'gen_random_salt', 'hash2', 'hash5', 'hash10', 'hash12',
    'hash_one', 'in_curve', 'mul_point_escalar', 'pack_point', 'pack_signature', 'poseidon',
    'rerandomize_ciphertext', 'sha256_hash', 'sign_message', 'sign_with_priv_key',
    'unpack_point', 'unpack_signature', 'verify_signature',
]
