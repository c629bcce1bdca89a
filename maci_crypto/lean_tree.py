"""
Lean Incremental Merkle Tree
============================

Unbounded binary Poseidon tree with no zero hashes. A node whose right
sibling does not exist yet is carried up unchanged instead of being hashed
with a placeholder, so the depth is always ceil(log2(size)) and a single-leaf
tree's root is the leaf itself.

Proof Format:
-------------
Siblings are listed leaf to root and only for the levels where a sibling
exists. ``index`` packs the left/right position at those levels: bit i is 1
when the node is the right child at the i-th listed level. For a full tree
this is the leaf index itself.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence

from .errors import LeafIndexOutOfRange
from .hashing import hash_lean_imt
from .utils import check_field_element

logger = logging.getLogger(__name__)


@dataclass
class LeanTreeProof:
    leaf: int
    siblings: List[int]
    root: int
    index: int

    def verify(self) -> bool:
        return LeanTree.verify_proof(self.leaf, self.siblings, self.index, self.root)


class LeanTree:
    """Binary incremental Merkle tree whose depth grows with its leaf count."""

    def __init__(self):
        # nodes[0] holds the leaves, nodes[depth] the root
        self._nodes: List[List[int]] = [[]]

    def __repr__(self) -> str:
        return f"LeanTree(size={self.size}, depth={self.depth})"

    @property
    def size(self) -> int:
        return len(self._nodes[0])

    @property
    def depth(self) -> int:
        return len(self._nodes) - 1

    @property
    def root(self) -> int:
        """Current root; ``0`` for an empty tree."""
        top = self._nodes[self.depth]
        return top[0] if top else 0

    @property
    def leaves(self) -> List[int]:
        return list(self._nodes[0])

    def has(self, leaf: int) -> bool:
        return leaf in self._nodes[0]

    def index_of(self, leaf: int) -> int:
        """Index of ``leaf``, or -1 if absent."""
        try:
            return self._nodes[0].index(leaf)
        except ValueError:
            return -1

    def _set(self, level: int, index: int, value: int) -> None:
        row = self._nodes[level]
        if index == len(row):
            row.append(value)
        else:
            row[index] = value

    def insert(self, leaf: int) -> None:
        """
        Append one leaf, growing the depth when the size passes a power of two.

        Only the new leaf's path is hashed; levels where it has no left
        sibling pass the node through unchanged.
        """
        check_field_element(leaf, "leaf")
        # ceil(log2(n)) == (n - 1).bit_length() with n = size + 1
        if self.depth < self.size.bit_length():
            self._nodes.append([])

        node = leaf
        index = self.size
        for level in range(self.depth):
            self._set(level, index, node)
            if index & 1:
                node = hash_lean_imt(self._nodes[level][index - 1], node)
            index >>= 1
        self._nodes[self.depth] = [node]

    def insert_many(self, leaves: Sequence[int]) -> None:
        """
        Append several leaves, rehashing each affected parent once.

        Parameters
        ----------
        leaves : Sequence[int]
            Field elements to append in order
        """
        if not leaves:
            return
        for leaf in leaves:
            check_field_element(leaf, "leaf")

        start = self.size
        self._nodes[0].extend(int(v) for v in leaves)
        while self.depth < (self.size - 1).bit_length():
            self._nodes.append([])

        for level in range(self.depth):
            row = self._nodes[level]
            parents = (len(row) + 1) // 2
            for i in range(start >> 1, parents):
                left = row[2 * i]
                if 2 * i + 1 < len(row):
                    parent = hash_lean_imt(left, row[2 * i + 1])
                else:
                    parent = left
                self._set(level + 1, i, parent)
            start >>= 1
        logger.debug("Inserted %d leaves into %r", len(leaves), self)

    def update(self, index: int, new_leaf: int) -> None:
        """Replace the leaf at ``index`` and rehash its path."""
        self._check_index(index)
        check_field_element(new_leaf, "leaf")

        node = new_leaf
        for level in range(self.depth):
            row = self._nodes[level]
            row[index] = node
            if index & 1:
                node = hash_lean_imt(row[index - 1], node)
            elif index + 1 < len(row):
                node = hash_lean_imt(node, row[index + 1])
            index >>= 1
        self._nodes[self.depth] = [node]

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.size:
            raise LeafIndexOutOfRange(f"Leaf index {index} outside [0, {self.size}) for {self!r}")

    def generate_proof(self, index: int) -> LeanTreeProof:
        """
        Inclusion proof for the leaf at ``index``.

        Raises
        ------
        LeafIndexOutOfRange
            If ``index`` is not a current leaf position
        """
        self._check_index(index)
        leaf = self._nodes[0][index]
        siblings = []
        path_bits = 0
        for level in range(self.depth):
            is_right = index & 1
            sibling_index = index - 1 if is_right else index + 1
            row = self._nodes[level]
            if sibling_index < len(row):
                path_bits |= is_right << len(siblings)
                siblings.append(row[sibling_index])
            index >>= 1
        return LeanTreeProof(leaf=leaf, siblings=siblings, root=self.root, index=path_bits)

    @staticmethod
    def verify_proof(leaf: int, siblings: Sequence[int], index: int, root: int) -> bool:
        """
        Recompute the root from ``leaf`` and ``siblings`` (leaf to root).

        Bit i of ``index`` places the running node on the right of the i-th
        sibling when set, on the left otherwise.
        """
        node = leaf
        for i, sibling in enumerate(siblings):
            if (index >> i) & 1:
                node = hash_lean_imt(sibling, node)
            else:
                node = hash_lean_imt(node, sibling)
        return node == root

    def export(self) -> Dict[str, List[int]]:
        return {'leaves': self.leaves}

    @classmethod
    def import_tree(cls, data: Dict[str, Sequence[int]]) -> "LeanTree":
        """Rebuild a tree from the output of :meth:`export`."""
        tree = cls()
        tree.insert_many(list(data.get('leaves', [])))
        return tree
