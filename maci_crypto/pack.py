"""
Vote Command Packing
====================

A vote command's small integer fields share one field element:

    packed = nonce + (state_idx << 32) + (vo_idx << 64) + (new_votes << 96) + (salt << 192)

nonce, state_idx and vo_idx occupy 32 bits each, new_votes 96 bits and the
salt the remaining 56 bits.
"""

import secrets
from typing import Dict, Optional

from .constants import UINT32, UINT96

SALT_BITS = 56


def pack_element(nonce: int, state_idx: int, vo_idx: int, new_votes: int,
                 salt: Optional[int] = None) -> int:
    """
    Pack a vote command into a single integer.

    Parameters
    ----------
    nonce, state_idx, vo_idx : int
        32-bit fields
    new_votes : int
        96-bit vote weight
    salt : int, optional
        56-bit salt; random when omitted. An explicit 0 is kept.

    Returns
    -------
    int
        The packed value, below 2^248
    """
    for name, value, limit in (
        ("nonce", nonce, UINT32), ("state_idx", state_idx, UINT32),
        ("vo_idx", vo_idx, UINT32), ("new_votes", new_votes, UINT96),
    ):
        if not 0 <= value < limit:
            raise ValueError(f"{name} out of range: {value}")
    if salt is None:
        salt = secrets.randbits(SALT_BITS)
    if not 0 <= salt < 1 << SALT_BITS:
        raise ValueError(f"salt out of range: {salt}")

    return nonce + (state_idx << 32) + (vo_idx << 64) + (new_votes << 96) + (salt << 192)


def unpack_element(packed: int) -> Dict[str, int]:
    return {
        'nonce': packed % UINT32,
        'state_idx': (packed >> 32) % UINT32,
        'vo_idx': (packed >> 64) % UINT32,
        'new_votes': (packed >> 96) % UINT96,
        'salt': packed >> 192,
    }
