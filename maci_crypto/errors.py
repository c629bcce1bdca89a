"""
Error Types
===========

All failures raised by the core derive from ``MaciCryptoError``, which is a
``ValueError`` so callers validating inputs can catch either.

Error Kinds:
------------
- InvalidPoint: malformed packed point, off-curve point, coordinate >= p
- DenominatorZero / NoInverse: degenerate arithmetic while unpacking
- SquareRootUnavailable: recovered x^2 is not a quadratic residue
- InputArityMismatch: fixed-width hash called with the wrong input count
- LeafIndexOutOfRange / TreeNotInitialized / TreeOverflow: tree misuse
- InvalidTreeDepth / ZeroHashTableTooShort: root extension misuse
- PackedLengthMismatch: byte buffers of the wrong size
- InvalidFieldElement: value outside [0, p) where a field element is required
"""


class MaciCryptoError(ValueError):
    """Base class for every error raised by maci_crypto."""


class InvalidPoint(MaciCryptoError):
    pass


class DenominatorZero(MaciCryptoError):
    pass


class NoInverse(MaciCryptoError):
    pass


class SquareRootUnavailable(MaciCryptoError):
    pass


class InputArityMismatch(MaciCryptoError):
    pass


class LeafIndexOutOfRange(MaciCryptoError):
    pass


class TreeNotInitialized(MaciCryptoError):
    pass


class TreeOverflow(MaciCryptoError):
    pass


class InvalidTreeDepth(MaciCryptoError):
    pass


class ZeroHashTableTooShort(MaciCryptoError):
    pass


class PackedLengthMismatch(MaciCryptoError):
    pass


class InvalidFieldElement(MaciCryptoError):
    pass
