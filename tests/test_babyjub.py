"""
Test Suite for BabyJubJub Arithmetic and Point Packing
======================================================

Covers the group law, membership checks, the 32-byte packing and its
failure modes, and the bias-free random value generator.
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from maci_crypto.babyjub import (
    add_point, gen_random_babyjub_value, in_curve, is_negative, mod_inverse, mod_sqrt,
    mul_point_escalar, negate_point, pack_point, pack_public_key, sub_point, unpack_point,
    unpack_public_key,
)
from maci_crypto.constants import (
    BASE8, COFACTOR, GENERATOR, IDENTITY, P_HALF, SNARK_FIELD_SIZE, SUBGROUP_ORDER,
)
from maci_crypto.errors import (
    InvalidPoint, NoInverse, PackedLengthMismatch, SquareRootUnavailable,
)

p = SNARK_FIELD_SIZE


@pytest.fixture(scope="module")
def point_111111():
    """The base point multiplied by the scalar 111111."""
    return mul_point_escalar(BASE8, 111111)


# ============================================================================
# Group law
# ============================================================================

def test_generators_on_curve():
    assert in_curve(GENERATOR)
    assert in_curve(BASE8)
    assert in_curve(IDENTITY)


def test_base8_is_cofactor_multiple_of_generator():
    assert mul_point_escalar(GENERATOR, COFACTOR) == BASE8


def test_base8_has_subgroup_order():
    assert mul_point_escalar(BASE8, SUBGROUP_ORDER) == IDENTITY
    assert mul_point_escalar(BASE8, SUBGROUP_ORDER - 1) == negate_point(BASE8)


def test_identity_is_neutral():
    assert add_point(BASE8, IDENTITY) == BASE8
    assert add_point(IDENTITY, BASE8) == BASE8
    assert mul_point_escalar(BASE8, 0) == IDENTITY


def test_addition_matches_scalar_multiplication():
    two = add_point(BASE8, BASE8)
    three = add_point(two, BASE8)
    assert mul_point_escalar(BASE8, 2) == two
    assert mul_point_escalar(BASE8, 3) == three
    assert sub_point(three, BASE8) == two


def test_scalar_multiplication_is_distributive():
    a, b = 123456789, 987654321
    left = mul_point_escalar(BASE8, a + b)
    right = add_point(mul_point_escalar(BASE8, a), mul_point_escalar(BASE8, b))
    assert left == right


def test_scalar_multiplication_beyond_field_width():
    """Scalars wider than p (e.g. challenge * 8) reduce by the subgroup order."""
    k = 8 * (p - 1)
    assert mul_point_escalar(BASE8, k) == mul_point_escalar(BASE8, k % SUBGROUP_ORDER)


def test_negative_scalar_rejected():
    with pytest.raises(ValueError):
        mul_point_escalar(BASE8, -1)


def test_in_curve_rejects_bad_points():
    x, y = BASE8
    assert not in_curve((x, (y + 1) % p))
    assert not in_curve((x + p, y))
    assert not in_curve((-1, y))
    assert not in_curve("not a point")
    assert not in_curve((1, 2, 3))


# ============================================================================
# Field helpers
# ============================================================================

def test_mod_inverse():
    assert 12345 * mod_inverse(12345) % p == 1
    with pytest.raises(NoInverse):
        mod_inverse(0)
    with pytest.raises(NoInverse):
        mod_inverse(p)


def test_mod_sqrt_roundtrip():
    root = mod_sqrt(49)
    assert root * root % p == 49
    assert mod_sqrt(0) == 0


def test_mod_sqrt_non_residue():
    # 5 is a quadratic non-residue modulo the BN254 scalar field prime
    assert pow(5, (p - 1) // 2, p) == p - 1
    with pytest.raises(SquareRootUnavailable):
        mod_sqrt(5)


def test_is_negative_threshold():
    assert not is_negative(0)
    assert not is_negative(P_HALF)
    assert is_negative(P_HALF + 1)
    assert is_negative(p - 1)


# ============================================================================
# Packing
# ============================================================================

class TestPacking:
    """Round-trips and rejection paths of the 32-byte point encoding."""

    def test_roundtrip_for_many_points(self):
        for k in (1, 2, 3, 111111, 2 ** 200 + 7, SUBGROUP_ORDER - 1):
            point = mul_point_escalar(BASE8, k)
            packed = pack_point(point)
            assert len(packed) == 32
            assert unpack_point(packed) == point

    def test_roundtrip_both_signs(self):
        point = mul_point_escalar(BASE8, 42)
        negated = negate_point(point)
        assert pack_point(point) != pack_point(negated)
        assert unpack_point(pack_point(negated)) == negated

    def test_identity_roundtrip(self):
        assert unpack_point(pack_point(IDENTITY)) == IDENTITY

    def test_packing_layout(self, point_111111):
        x, y = point_111111
        packed = pack_point(point_111111)
        expected = bytearray(y.to_bytes(32, 'little'))
        if x > P_HALF:
            expected[31] |= 0x80
        assert packed == bytes(expected)
        assert unpack_point(packed) == point_111111

    def test_known_point_for_scalar_111111(self, point_111111):
        assert point_111111 == (
            9221645876368174110961758157755419489792970878899130950662684756868821534630,
            21677522106472114192907581749333412416696788200272735806441075884691267290092,
        )
        x, y = point_111111
        assert not is_negative(x)
        packed = pack_point(point_111111)
        assert packed == y.to_bytes(32, 'little')
        assert packed[31] & 0x80 == 0
        assert unpack_point(packed) == point_111111

    def test_rejects_long_input(self):
        with pytest.raises(PackedLengthMismatch):
            unpack_point(b'\x00' * 33)

    def test_rejects_y_out_of_field(self):
        with pytest.raises(InvalidPoint):
            unpack_point(p.to_bytes(32, 'little'))

    def test_rejects_non_residue(self):
        # find a small y whose x^2 has no square root
        for y in range(2, 200):
            x2 = (1 - y * y) * pow((168700 - 168696 * y * y) % p, -1, p) % p
            if pow(x2, (p - 1) // 2, p) == p - 1:
                break
        else:
            pytest.fail("no non-residue candidate found")
        with pytest.raises(SquareRootUnavailable):
            unpack_point(y.to_bytes(32, 'little'))

    def test_public_key_integer_form(self, point_111111):
        packed = pack_public_key(point_111111)
        assert isinstance(packed, int)
        assert unpack_public_key(packed) == point_111111
        assert unpack_public_key(str(packed)) == point_111111
        assert unpack_public_key(hex(packed)) == point_111111

    def test_public_key_rejects_off_curve(self):
        with pytest.raises(InvalidPoint):
            pack_public_key((1, 2))


# ============================================================================
# Randomness
# ============================================================================

def test_random_values_in_range_and_distinct():
    values = {gen_random_babyjub_value() for _ in range(20)}
    assert len(values) == 20
    assert all(0 <= v < 2 ** 253 for v in values)
