"""
Test Suite for EdDSA-Poseidon Signatures, Keys and ECDH
=======================================================

Each property is checked under both seed-hash algorithms where it applies.
The circomlib vector pins BLAKE-512 key derivation and Poseidon challenges.
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from maci_crypto.babyjub import in_curve, mul_point_escalar
from maci_crypto.constants import BASE8, SNARK_FIELD_SIZE, SUBGROUP_ORDER
from maci_crypto.eddsa import (
    Signature, check_public_key, derive_public_key, derive_secret_scalar, pack_signature,
    prune_buffer, sign_message, unpack_signature, verify_signature,
)
from maci_crypto.errors import InvalidFieldElement, PackedLengthMismatch
from maci_crypto.keys import (
    Keypair, derive_shared_point, format_priv_key_for_babyjub, gen_ecdh_shared_key, gen_keypair,
    gen_priv_key, gen_pub_key, pack_pub_key, sign_with_priv_key, unpack_pub_key,
)
from maci_crypto.poseidon import poseidon
from maci_crypto.seed_hash import HashingAlgorithm
from maci_crypto.utils import le_bytes_to_int

ALGORITHMS = [HashingAlgorithm.BLAKE512, HashingAlgorithm.BLAKE2B]

CIRCOMLIB_SEED = bytes.fromhex("0001020304050607080900010203040506070809000102030405060708090001")


@pytest.fixture(scope="module")
def seed():
    return b"secret seed for tests"


@pytest.fixture(scope="module")
def keypairs():
    """Three keypairs from fixed private keys."""
    return [gen_keypair(k) for k in (111111, 222222, 333333)]


# ============================================================================
# Key derivation
# ============================================================================

def test_prune_buffer_bits():
    pruned = prune_buffer(b"\xff" * 32)
    assert pruned[0] & 0x07 == 0
    assert pruned[31] & 0x80 == 0
    assert pruned[31] & 0x40 == 0x40
    value = le_bytes_to_int(pruned)
    assert value % 8 == 0
    assert 2 ** 254 <= value < 2 ** 255


def test_prune_buffer_rejects_short_input():
    with pytest.raises(PackedLengthMismatch):
        prune_buffer(b"\x00" * 31)


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_secret_scalar_matches_definition(seed, algorithm):
    digest = algorithm.digest(seed)
    expected = (le_bytes_to_int(prune_buffer(digest[:32])) >> 3) % SUBGROUP_ORDER
    assert derive_secret_scalar(seed, algorithm) == expected
    assert derive_public_key(seed, algorithm) == mul_point_escalar(BASE8, expected)


def test_algorithms_give_different_keys(seed):
    assert derive_public_key(seed, HashingAlgorithm.BLAKE512) != \
        derive_public_key(seed, HashingAlgorithm.BLAKE2B)


def test_string_seed_is_utf8(seed):
    assert derive_public_key("abc", HashingAlgorithm.BLAKE512) == \
        derive_public_key(b"abc", HashingAlgorithm.BLAKE512)


class TestCircomlibVector:
    """Reference key and signature produced by circomlib's eddsa."""

    def test_public_key(self):
        pub = derive_public_key(CIRCOMLIB_SEED, HashingAlgorithm.BLAKE512)
        assert pub == (
            13277427435165878497778222415993513565335242147425444199013288855685581939618,
            13622229784656158136036771217484571176836296686641868549125388198837476602820,
        )

    def test_signature(self):
        msg = int("09080706050403020100", 16)
        sig = sign_message(CIRCOMLIB_SEED, msg, HashingAlgorithm.BLAKE512)
        assert sig.R8 == (
            11384336176656855268977457483345535180380036354188103142384839473266348197733,
            15383486972088797283337779941324724402501462225528836549661220478783371668959,
        )
        assert sig.S == 1672775540645840396591609181675628451599263765380031905495115170613215233181


# ============================================================================
# Signing and verification
# ============================================================================

class TestSignatures:

    @pytest.mark.parametrize("algorithm", ALGORITHMS)
    def test_sign_then_verify(self, seed, algorithm):
        pub = derive_public_key(seed, algorithm)
        for message in (0, 1, 42, SNARK_FIELD_SIZE - 1):
            sig = sign_message(seed, message, algorithm)
            assert sig.S < SUBGROUP_ORDER
            assert in_curve(sig.R8)
            assert verify_signature(message, sig, pub)

    def test_signing_is_deterministic(self, seed):
        assert sign_message(seed, 7) == sign_message(seed, 7)
        assert sign_message(seed, 7) != sign_message(seed, 8)

    def test_flipped_message_bits_rejected(self, seed):
        pub = derive_public_key(seed)
        message = 0x1234567890ABCDEF
        sig = sign_message(seed, message)
        for bit in (0, 1, 17, 63):
            assert not verify_signature(message ^ (1 << bit), sig, pub)

    def test_wrong_public_key_rejected(self, seed):
        sig = sign_message(seed, 99)
        other = derive_public_key(b"another seed")
        assert not verify_signature(99, sig, other)

    def test_fail_closed_on_malformed_inputs(self, seed):
        pub = derive_public_key(seed)
        sig = sign_message(seed, 5)
        assert not verify_signature(5, Signature(R8=sig.R8, S=SUBGROUP_ORDER), pub)
        assert not verify_signature(5, Signature(R8=sig.R8, S=sig.S + SUBGROUP_ORDER), pub)
        assert not verify_signature(5, Signature(R8=(1, 2), S=sig.S), pub)
        assert not verify_signature(5, sig, (1, 2))
        assert not verify_signature(SNARK_FIELD_SIZE, sig, pub)
        assert not verify_signature(5, "garbage", pub)

    def test_message_outside_field_rejected_when_signing(self, seed):
        with pytest.raises(InvalidFieldElement):
            sign_message(seed, SNARK_FIELD_SIZE)

    def test_pack_roundtrip(self, seed):
        sig = sign_message(seed, 1234)
        packed = pack_signature(sig)
        assert len(packed) == 64
        assert packed[32:] == sig.S.to_bytes(32, 'little')
        assert unpack_signature(packed) == sig

    @pytest.mark.parametrize("length", [0, 63, 65])
    def test_unpack_rejects_wrong_length(self, length):
        with pytest.raises(PackedLengthMismatch):
            unpack_signature(b"\x00" * length)

    def test_check_public_key(self, seed):
        assert check_public_key(derive_public_key(seed))
        assert not check_public_key((1, 2))


# ============================================================================
# MACI keys and ECDH
# ============================================================================

class TestKeys:

    def test_keypair_fields(self, keypairs):
        kp = keypairs[0]
        assert isinstance(kp, Keypair)
        assert kp.priv_key == 111111
        assert kp.formated_priv_key == format_priv_key_for_babyjub(111111)
        assert kp.pub_key == gen_pub_key(111111)
        assert kp.pub_key == mul_point_escalar(BASE8, kp.formated_priv_key)

    def test_private_key_seed_is_minimal_big_endian(self):
        assert format_priv_key_for_babyjub(111111) == derive_secret_scalar(b"\x01\xb2\x07")

    def test_keypair_reduces_private_key(self):
        assert gen_keypair(SNARK_FIELD_SIZE + 5).priv_key == 5

    def test_random_keypairs_differ(self):
        assert gen_keypair().pub_key != gen_keypair().pub_key
        assert 0 <= gen_priv_key() < 2 ** 256

    def test_repr_hides_private_values(self, keypairs):
        text = repr(keypairs[0])
        assert "priv_key" not in text
        assert str(keypairs[0].formated_priv_key) not in text
        assert str(keypairs[0].pub_key[0]) in text

    def test_identity_commitment(self, keypairs):
        a, b, _ = keypairs
        assert a.commitment == poseidon([a.pub_key[0], a.pub_key[1]])
        assert a.commitment != b.commitment

    def test_pack_pub_key_roundtrip(self, keypairs):
        for kp in keypairs:
            assert unpack_pub_key(pack_pub_key(kp.pub_key)) == kp.pub_key

    def test_sign_with_priv_key(self, keypairs):
        kp = keypairs[1]
        sig = sign_with_priv_key(kp.priv_key, 2024)
        assert verify_signature(2024, sig, kp.pub_key)

    def test_ecdh_symmetry(self, keypairs):
        a, b, _ = keypairs
        assert gen_ecdh_shared_key(a.priv_key, b.pub_key) == gen_ecdh_shared_key(b.priv_key, a.pub_key)
        assert derive_shared_point(a.formated_priv_key, b.pub_key) == \
            derive_shared_point(b.formated_priv_key, a.pub_key)

    def test_ecdh_pairwise_distinct(self, keypairs):
        a, b, c = keypairs
        ab = gen_ecdh_shared_key(a.priv_key, b.pub_key)
        bc = gen_ecdh_shared_key(b.priv_key, c.pub_key)
        ac = gen_ecdh_shared_key(a.priv_key, c.pub_key)
        assert len({ab, bc, ac}) == 3
