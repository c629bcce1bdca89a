"""
Protocol Constants
==================

Field sizes, curve parameters and the fixed protocol values shared by every
layer. These are plain integers; nothing here is mutated at runtime.
"""

from Crypto.Hash import keccak


# BN254 scalar field, which is the base field of BabyJubJub
SNARK_FIELD_SIZE = 21888242871839275222246405745257275088548364400416034343698204186575808495617

# Prime-order subgroup of BabyJubJub (l)
SUBGROUP_ORDER = 2736030358979909402780800718157159386076813972158567259200215660948447373041

COFACTOR = 8

# Twisted Edwards coefficients: a*x^2 + y^2 = 1 + d*x^2*y^2
CURVE_A = 168700
CURVE_D = 168696

GENERATOR = (
    995203441582195749578291179787384436505546430278305826713579947235728471134,
    5472060717959818805561601436314318772137091100104008585924551046643952123905,
)

BASE8 = (
    5299619240641551281634865583518297030282874472190772894086521144482721001553,
    16950150798460657717958625567821834550301663161624707787222815936182638968203,
)

IDENTITY = (0, 1)

# x is "negative" when x > (p - 1) / 2
P_HALF = SNARK_FIELD_SIZE >> 1

# Smallest 256-bit value v for which v mod p is unbiased
RANDOM_VALUE_MIN = 6350874878119819312338956282401532410528162663560392320966563075034087161851

PAD_KEY_HASH = 1309255631273308531193241901289907343161346846555918942743921933037802809814

UINT32 = 1 << 32
UINT96 = 1 << 96

# Domain tag hashed with the formatted private key to form an add-key nullifier
NULLIFIER_DOMAIN = 1444992409218394441042

# Plaintext encoded by the odevity scheme before its parity is adjusted
ODEVITY_PLAINTEXT = 123

# Salt used by the coordinator when deriving deterministic deactivate randomness
DEACTIVATE_SALT = 20040


def keccak256(data: bytes) -> int:
    """Keccak-256 (Ethereum flavour, not SHA3-256) of ``data`` as a big-endian int."""
    h = keccak.new(digest_bits=256)
    h.update(data)
    return int.from_bytes(h.digest(), 'big')


NOTHING_UP_MY_SLEEVE = keccak256(b"Maci") % SNARK_FIELD_SIZE
