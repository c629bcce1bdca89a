"""
Test Suite for Odevity Encryption and Rerandomization
=====================================================

Tests that:
1. Decryption with the matching key recovers the encrypted parity
2. Rerandomization preserves the parity but changes both points
3. Explicit randomness makes every operation reproducible
4. Generic value encryption decodes back to the plaintext
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from maci_crypto.babyjub import in_curve, mul_point_escalar
from maci_crypto.constants import BASE8, ODEVITY_PLAINTEXT
from maci_crypto.errors import InvalidPoint
from maci_crypto.keys import gen_keypair
from maci_crypto.rerandomize import (
    Ciphertext, decode_message, decrypt, decrypt_odevity, encode_to_message, encrypt,
    encrypt_odevity, rerandomize_ciphertext,
)


@pytest.fixture(scope="module")
def coordinator():
    return gen_keypair(111111)


class TestOdevity:

    @pytest.mark.parametrize("is_odd", [True, False])
    def test_roundtrip(self, coordinator, is_odd):
        ct = encrypt_odevity(is_odd, coordinator.pub_key, 987654321)
        assert in_curve(ct.c1) and in_curve(ct.c2)
        assert decrypt_odevity(coordinator.formated_priv_key, ct) is is_odd

    @pytest.mark.parametrize("is_odd", [True, False])
    def test_roundtrip_with_random_values(self, coordinator, is_odd):
        for _ in range(3):
            ct = encrypt_odevity(is_odd, coordinator.pub_key)
            assert decrypt_odevity(coordinator.formated_priv_key, ct) is is_odd

    def test_deterministic_for_fixed_randomness(self, coordinator):
        a = encrypt_odevity(True, coordinator.pub_key, 55555)
        b = encrypt_odevity(True, coordinator.pub_key, 55555)
        assert a == b

    def test_c1_commits_to_randomness(self, coordinator):
        ct = encrypt_odevity(False, coordinator.pub_key, 777)
        assert ct.c1 == mul_point_escalar(BASE8, 777)

    def test_decrypted_message_decodes_to_fixed_plaintext(self, coordinator):
        ct = encrypt_odevity(True, coordinator.pub_key, 31337)
        message = decrypt(coordinator.formated_priv_key, ct)
        assert decode_message(message) == ODEVITY_PLAINTEXT

    def test_wrong_key_does_not_recover_message_point(self, coordinator):
        ct = encrypt_odevity(True, coordinator.pub_key, 4242)
        right = decrypt(coordinator.formated_priv_key, ct).point
        wrong = decrypt(gen_keypair(999).formated_priv_key, ct).point
        assert right != wrong

    def test_rejects_off_curve_recipient(self):
        with pytest.raises(InvalidPoint):
            encrypt_odevity(True, (1, 2), 5)

    def test_decrypt_rejects_off_curve_ciphertext(self, coordinator):
        with pytest.raises(InvalidPoint):
            decrypt(coordinator.formated_priv_key, Ciphertext(c1=(1, 2), c2=BASE8))


class TestRerandomize:

    @pytest.mark.parametrize("is_odd", [True, False])
    def test_preserves_bit(self, coordinator, is_odd):
        ct = encrypt_odevity(is_odd, coordinator.pub_key, 1111)
        rr = rerandomize_ciphertext(coordinator.pub_key, ct, 2222)
        assert decrypt_odevity(coordinator.formated_priv_key, rr) is is_odd
        assert rr.x_increment == ct.x_increment

    def test_changes_both_points(self, coordinator):
        ct = encrypt_odevity(False, coordinator.pub_key, 1111)
        rr = rerandomize_ciphertext(coordinator.pub_key, ct, 2222)
        assert rr.c1 != ct.c1
        assert rr.c2 != ct.c2

    def test_zero_randomness_is_identity(self, coordinator):
        ct = encrypt_odevity(True, coordinator.pub_key, 1111)
        assert rerandomize_ciphertext(coordinator.pub_key, ct, 0) == ct

    def test_equals_encryption_under_summed_randomness(self, coordinator):
        """Rerandomizing with r' gives exactly the ciphertext for r + r'."""
        r, r2 = 1000, 2345
        ct = encrypt_odevity(True, coordinator.pub_key, r)
        rr = rerandomize_ciphertext(coordinator.pub_key, ct, r2)
        assert rr.c1 == mul_point_escalar(BASE8, r + r2)

    def test_chained_rerandomization(self, coordinator):
        ct = encrypt_odevity(True, coordinator.pub_key)
        for _ in range(3):
            ct = rerandomize_ciphertext(coordinator.pub_key, ct)
        assert decrypt_odevity(coordinator.formated_priv_key, ct) is True


class TestValueEncryption:

    def test_encode_decode(self):
        message = encode_to_message(42, gen_keypair(7))
        assert decode_message(message) == 42

    def test_encrypt_decrypt_value(self, coordinator):
        ct = encrypt(123456789, coordinator.pub_key, 999)
        assert decode_message(decrypt(coordinator.formated_priv_key, ct)) == 123456789

    def test_to_list_layout(self, coordinator):
        ct = encrypt_odevity(False, coordinator.pub_key, 5)
        assert ct.to_list() == [ct.c1[0], ct.c1[1], ct.c2[0], ct.c2[1]]
