"""
Voter Role
==========

A voter signs vote commands and, after deactivating a key, proves ownership
of the old key to register a new one without revealing which deactivate leaf
is theirs.

Key Responsibilities:
---------------------
- Commands: pack the command fields, hash them with the new public key and
  sign the hash
- Add-new-key: locate the own deactivate leaf through the shared-key hash,
  rerandomize its ciphertext, and assemble the circuit input together with a
  nullifier that prevents reusing the old key
"""

import logging
from typing import Dict, Optional, Sequence

from maci_crypto.babyjub import Point, gen_random_babyjub_value
from maci_crypto.config import config
from maci_crypto.constants import NULLIFIER_DOMAIN
from maci_crypto.hashing import compute_input_hash
from maci_crypto.keys import Keypair, gen_ecdh_shared_key, gen_keypair, sign_with_priv_key
from maci_crypto.pack import pack_element
from maci_crypto.poseidon import poseidon
from maci_crypto.rerandomize import Ciphertext, rerandomize_ciphertext
from maci_crypto.tree import Tree

logger = logging.getLogger(__name__)


class Voter:
    """Voter - holds a signing keypair and builds signed commands."""

    def __init__(self, priv_key: Optional[int] = None):
        self.keypair: Keypair = gen_keypair(priv_key)

    @property
    def pub_key(self) -> Point:
        return self.keypair.pub_key

    def shared_key_hash(self, coord_pub_key: Point) -> int:
        shared = gen_ecdh_shared_key(self.keypair.priv_key, coord_pub_key)
        return poseidon(list(shared))

    def gen_nullifier(self) -> int:
        return poseidon([self.keypair.formated_priv_key, NULLIFIER_DOMAIN])

    def sign_command(self, state_idx: int, nonce: int, vo_idx: int, new_votes: int,
                     new_pub_key: Optional[Point] = None, is_last_cmd: bool = False,
                     salt: Optional[int] = None) -> Dict:
        """
        Pack and sign a vote command.

        Parameters
        ----------
        state_idx, nonce, vo_idx, new_votes : int
            Command fields (see maci_crypto.pack)
        new_pub_key : Point, optional
            Key to switch to; defaults to the current key
        is_last_cmd : bool
            The last command of a batch carries the null key (0, 0)
        salt : int, optional
            56-bit salt; random when omitted

        Returns
        -------
        dict
            - packed: the packed command fields
            - new_pub_key: key committed by the command
            - msg_hash: Poseidon(packed, new_pub_key.x, new_pub_key.y)
            - signature: Signature over msg_hash
            - command: [packed, new_pub.x, new_pub.y, R8.x, R8.y, S]
        """
        packed = pack_element(nonce, state_idx, vo_idx, new_votes, salt)
        if is_last_cmd:
            new_pub = (0, 0)
        else:
            new_pub = self.pub_key if new_pub_key is None else tuple(new_pub_key)

        msg_hash = poseidon([packed, new_pub[0], new_pub[1]])
        signature = sign_with_priv_key(self.keypair.priv_key, msg_hash)
        return {
            'packed': packed,
            'new_pub_key': new_pub,
            'msg_hash': msg_hash,
            'signature': signature,
            'command': [packed, new_pub[0], new_pub[1], signature.R8[0], signature.R8[1], signature.S],
        }

    def gen_add_key_input(self, depth: int, coord_pub_key: Point,
                          deactivates: Sequence[Sequence[int]],
                          random_val: Optional[int] = None,
                          degree: Optional[int] = None) -> Optional[Dict]:
        """
        Build the add-new-key circuit input for this voter's old key.

        Parameters
        ----------
        depth : int
            Depth of the deactivate tree
        coord_pub_key : Point
            Coordinator public key
        deactivates : Sequence[Sequence[int]]
            Published deactivate leaves ``[c1.x, c1.y, c2.x, c2.y, shared_hash]``
        random_val : int, optional
            Rerandomization value; random when omitted
        degree : int, optional
            Tree degree; defaults to ``config.tree_degree``

        Returns
        -------
        dict or None
            The circuit input, or None when no leaf carries this voter's
            shared-key hash

        Notes
        -----
        input_hash is the EVM SHA-256 of (deactivate_root,
        Poseidon(coord_pub_key), nullifier, d1.x, d1.y, d2.x, d2.y) so the
        ledger can check it without field arithmetic.
        """
        shared_key_hash = self.shared_key_hash(coord_pub_key)
        deactivate_idx = next(
            (i for i, d in enumerate(deactivates) if d[4] == shared_key_hash), -1
        )
        if deactivate_idx < 0:
            logger.debug("No deactivate leaf matches this voter's shared key")
            return None

        if random_val is None:
            random_val = gen_random_babyjub_value()
        if degree is None:
            degree = config.tree_degree

        deactivate_leaf = list(deactivates[deactivate_idx])
        c1 = (deactivate_leaf[0], deactivate_leaf[1])
        c2 = (deactivate_leaf[2], deactivate_leaf[3])
        rerandomized = rerandomize_ciphertext(coord_pub_key, Ciphertext(c1=c1, c2=c2), random_val)
        d1, d2 = rerandomized.c1, rerandomized.c2

        nullifier = self.gen_nullifier()

        tree = Tree(degree, depth, 0)
        tree.init_leaves([poseidon(list(d)) for d in deactivates])
        deactivate_root = tree.root

        input_hash = compute_input_hash([
            deactivate_root,
            poseidon(list(coord_pub_key)),
            nullifier,
            d1[0], d1[1], d2[0], d2[1],
        ])
        logger.debug("Add-key input built for deactivate leaf %d", deactivate_idx)

        return {
            'input_hash': input_hash,
            'coord_pub_key': tuple(coord_pub_key),
            'deactivate_root': deactivate_root,
            'deactivate_index': deactivate_idx,
            'deactivate_leaf': poseidon(deactivate_leaf),
            'c1': c1,
            'c2': c2,
            'random_val': random_val,
            'd1': d1,
            'd2': d2,
            'deactivate_leaf_path_elements': tree.path_element_of(deactivate_idx),
            'nullifier': nullifier,
            'old_private_key': self.keypair.formated_priv_key,
        }
