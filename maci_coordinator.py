"""
Coordinator Role
================

The coordinator tallies votes and is the only party able to read deactivate
flags. It:
1. Holds the keypair that voters encrypt to and derive shared keys with
2. Publishes deactivate leaves, each an odevity ciphertext of a voter's
   active/deactivated flag plus the hash of their shared key
3. Maintains the deactivate tree whose root is committed on the ledger
4. Reads flags back by decrypting rerandomized ciphertexts

Deactivate Leaf Layout:
-----------------------
[c1.x, c1.y, c2.x, c2.y, Poseidon(shared_key.x, shared_key.y)]
The tree stores Poseidon of the five elements.
"""

import logging
from typing import Dict, List, Optional, Sequence

from maci_crypto.babyjub import Point
from maci_crypto.config import config
from maci_crypto.constants import DEACTIVATE_SALT, SNARK_FIELD_SIZE
from maci_crypto.keys import Keypair, gen_ecdh_shared_key, gen_keypair
from maci_crypto.poseidon import poseidon
from maci_crypto.rerandomize import Ciphertext, decrypt_odevity, encrypt_odevity
from maci_crypto.tree import Tree

logger = logging.getLogger(__name__)


class Coordinator:
    """
    Coordinator - owns the decryption key for deactivate flags.

    Parameters
    ----------
    priv_key : int, optional
        Private key; random when omitted
    tree_depth : int, optional
        Depth of the deactivate tree; defaults to ``config.state_tree_depth``
    tree_degree : int, optional
        Degree of the deactivate tree; defaults to ``config.tree_degree``
    """

    def __init__(self, priv_key: Optional[int] = None, tree_depth: Optional[int] = None,
                 tree_degree: Optional[int] = None):
        self.keypair: Keypair = gen_keypair(priv_key)
        self.tree_depth = config.state_tree_depth if tree_depth is None else tree_depth
        self.tree_degree = config.tree_degree if tree_degree is None else tree_degree
        self.deactivate_tree = Tree(self.tree_degree, self.tree_depth, 0)
        self.deactivates: List[List[int]] = []

    @property
    def pub_key(self) -> Point:
        return self.keypair.pub_key

    @property
    def deactivate_root(self) -> int:
        return self.deactivate_tree.root

    def static_random_key(self, salt: int, index: int) -> int:
        """Reproducible encryption randomness: Poseidon(priv_key, salt, index)."""
        return poseidon([self.keypair.priv_key % SNARK_FIELD_SIZE, salt, index])

    def shared_key_hash(self, voter_pub_key: Point) -> int:
        shared = gen_ecdh_shared_key(self.keypair.priv_key, voter_pub_key)
        return poseidon(list(shared))

    def gen_deactivate_leaf(self, voter_pub_key: Point, is_deactivated: bool = False,
                            random_val: Optional[int] = None) -> List[int]:
        """
        Build one deactivate leaf for ``voter_pub_key``.

        Parameters
        ----------
        voter_pub_key : Point
            The voter's current public key
        is_deactivated : bool
            Flag to encrypt; odd parity means deactivated
        random_val : int, optional
            Encryption randomness; random when omitted

        Returns
        -------
        List[int]
            ``[c1.x, c1.y, c2.x, c2.y, shared_key_hash]``
        """
        ciphertext = encrypt_odevity(is_deactivated, self.pub_key, random_val)
        return ciphertext.to_list() + [self.shared_key_hash(voter_pub_key)]

    def process_deactivate(self, voter_pub_key: Point, is_deactivated: bool = True,
                           index: Optional[int] = None) -> List[int]:
        """
        Record a deactivate leaf for a voter and insert it into the tree.

        Randomness is derived with :meth:`static_random_key` from the leaf
        position so that replaying the same batch reproduces the same root.
        """
        position = len(self.deactivates)
        if index is None:
            index = position
        leaf = self.gen_deactivate_leaf(
            voter_pub_key, is_deactivated, self.static_random_key(DEACTIVATE_SALT, index)
        )
        self.deactivate_tree.update_leaf(position, poseidon(leaf))
        self.deactivates.append(leaf)
        logger.debug("Deactivate leaf %d recorded (deactivated=%s)", position, is_deactivated)
        return leaf

    def gen_account_deactivate_root(self, accounts: Sequence[Point]) -> Dict:
        """
        Pre-register ``accounts`` as active in a fresh deactivate tree.

        Returns
        -------
        dict
            - deactivates: the published leaf arrays
            - leaves: Poseidon of each leaf array
            - root: root of the tree holding those leaves
            - tree: the tree itself, for path elements
        """
        deactivates = [self.gen_deactivate_leaf(pub, False) for pub in accounts]
        leaves = [poseidon(d) for d in deactivates]
        tree = Tree(self.tree_degree, self.tree_depth, 0)
        tree.init_leaves(leaves)
        return {
            'deactivates': deactivates,
            'leaves': leaves,
            'root': tree.root,
            'tree': tree,
        }

    def is_deactivated(self, d1: Point, d2: Point) -> bool:
        """Decrypt a (possibly rerandomized) flag ciphertext."""
        return decrypt_odevity(self.keypair.formated_priv_key, Ciphertext(c1=tuple(d1), c2=tuple(d2)))
