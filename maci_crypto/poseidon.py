"""
Poseidon Permutation
====================

The circomlib instantiation of Poseidon over the BN254 scalar field: state
width t = inputs + 1, 8 full rounds, a width-dependent number of partial
rounds and the S-box x^5. The digest of ``inputs`` is the first state word
after permuting ``[0, *inputs]``.

Parameter Generation:
---------------------
Round constants and the MDS matrix are not tabulated. They are derived from
the Grain LFSR exactly as the reference parameter script does it:

- LFSR seeded with (field=1, sbox=0, n=254, t, R_F, R_P) followed by 30 ones,
  the first 160 output bits discarded
- bits are produced in pairs; a pair starting with 1 outputs its second bit
- round constants: (R_F + R_P) * t values of 254 bits, rejected if >= p
- MDS: 2t values of 254 bits reduced mod p (redrawn while any repeat), then
  the Cauchy matrix M[i][j] = 1 / (x_i + y_j)

Parameters for a width are generated on first use and cached for the life of
the process. The linear layer is a numpy object-array product so the field
arithmetic stays in Python ints.
"""

import logging
from functools import lru_cache
from typing import List, Sequence, Tuple

import numpy as np

from .constants import SNARK_FIELD_SIZE
from .errors import InputArityMismatch, InvalidFieldElement

logger = logging.getLogger(__name__)

p = SNARK_FIELD_SIZE

FIELD_BITS = 254
N_ROUNDS_F = 8
N_ROUNDS_P = [56, 57, 56, 60, 60, 63, 64, 63, 60, 66, 60, 65, 70, 60, 64, 68]
MAX_INPUTS = len(N_ROUNDS_P)


class GrainLFSR:
    """
    80-bit Grain self-shrinking generator used to derive Poseidon parameters.

    The register is held in one int; bit i is the i-th oldest state bit.
    """

    STATE_BITS = 80

    def __init__(self, t: int, r_f: int, r_p: int, field: int = 1, sbox: int = 0,
                 n: int = FIELD_BITS):
        seed = (
            format(field, '02b')
            + format(sbox, '04b')
            + format(n, '012b')
            + format(t, '012b')
            + format(r_f, '010b')
            + format(r_p, '010b')
            + '1' * 30
        )
        self.state = 0
        for i, bit in enumerate(seed):
            self.state |= int(bit) << i
        for _ in range(160):
            self._clock()

    def _clock(self) -> int:
        s = self.state
        new_bit = ((s >> 62) ^ (s >> 51) ^ (s >> 38) ^ (s >> 23) ^ (s >> 13) ^ s) & 1
        self.state = (s >> 1) | (new_bit << (self.STATE_BITS - 1))
        return new_bit

    def next_bit(self) -> int:
        while True:
            first = self._clock()
            second = self._clock()
            if first:
                return second

    def random_bits(self, count: int) -> int:
        """``count`` output bits read most-significant first."""
        value = 0
        for _ in range(count):
            value = (value << 1) | self.next_bit()
        return value


def _round_constants(grain: GrainLFSR, count: int) -> List[int]:
    constants = []
    for _ in range(count):
        value = grain.random_bits(FIELD_BITS)
        while value >= p:
            value = grain.random_bits(FIELD_BITS)
        constants.append(value)
    return constants


def _cauchy_mds(grain: GrainLFSR, t: int) -> np.ndarray:
    while True:
        values = [grain.random_bits(FIELD_BITS) % p for _ in range(2 * t)]
        if len(set(values)) != 2 * t:
            continue
        xs, ys = values[:t], values[t:]
        if any((x + y) % p == 0 for x in xs for y in ys):
            continue
        matrix = np.empty((t, t), dtype=object)
        for i in range(t):
            for j in range(t):
                matrix[i, j] = pow((xs[i] + ys[j]) % p, -1, p)
        return matrix


@lru_cache(maxsize=None)
def poseidon_parameters(t: int) -> Tuple[Tuple[int, ...], np.ndarray, int]:
    """
    Round constants, MDS matrix and partial round count for state width ``t``.

    Parameters
    ----------
    t : int
        State width, 2 <= t <= 17

    Returns
    -------
    constants : tuple of int
        (R_F + R_P) * t round constants, consumed t per round
    mds : np.ndarray
        t x t object array of field elements
    n_rounds_p : int
        Number of partial rounds
    """
    if not 2 <= t <= MAX_INPUTS + 1:
        raise InputArityMismatch(f"Poseidon width must be between 2 and {MAX_INPUTS + 1}, got {t}")
    r_p = N_ROUNDS_P[t - 2]
    logger.debug("Generating Poseidon parameters for t=%d (R_F=%d, R_P=%d)", t, N_ROUNDS_F, r_p)
    grain = GrainLFSR(t, N_ROUNDS_F, r_p)
    constants = tuple(_round_constants(grain, (N_ROUNDS_F + r_p) * t))
    mds = _cauchy_mds(grain, t)
    mds.setflags(write=False)
    return constants, mds, r_p


def poseidon(inputs: Sequence[int]) -> int:
    """
    Poseidon digest of up to 16 field elements.

    Parameters
    ----------
    inputs : Sequence[int]
        Field elements in [0, p)

    Returns
    -------
    int
        The digest; ``0`` for the empty sequence by convention

    Raises
    ------
    InputArityMismatch
        If more than 16 inputs are given
    InvalidFieldElement
        If an input is outside [0, p)
    """
    if len(inputs) == 0:
        return 0
    if len(inputs) > MAX_INPUTS:
        raise InputArityMismatch(f"Poseidon accepts at most {MAX_INPUTS} inputs, got {len(inputs)}")
    for value in inputs:
        if not isinstance(value, int) or not 0 <= value < p:
            raise InvalidFieldElement(f"Poseidon input is not a field element: {value!r}")

    t = len(inputs) + 1
    constants, mds, r_p = poseidon_parameters(t)
    half_f = N_ROUNDS_F // 2

    state = np.array([0] + [int(v) for v in inputs], dtype=object)
    for r in range(N_ROUNDS_F + r_p):
        for i in range(t):
            state[i] = (state[i] + constants[r * t + i]) % p
        if r < half_f or r >= half_f + r_p:
            for i in range(t):
                state[i] = pow(state[i], 5, p)
        else:
            state[0] = pow(state[0], 5, p)
        state = mds.dot(state) % p

    return int(state[0])
