"""
Fixed-Arity Merkle Tree
=======================

Incremental Poseidon tree of configurable degree and depth. Nodes live in one
flat list in breadth-first order: the root is node 0 and the children of node
k are nodes k*degree + 1 .. k*degree + degree. Leaves start at
``LEAVES_IDX_0 = (degree^depth - 1) / (degree - 1)``.

Unfilled subtrees hold precomputed zero hashes:

    zeros[0] = zero
    zeros[i] = Poseidon(zeros[i-1] repeated degree times)

Leaf writes only mark the leaf dirty. The first read that needs internal
nodes (root, path elements) rehashes the dirty paths level by level, hashing
each touched parent once, and the result stays cached until the next write.
A single tree is not safe for concurrent mutation; share its root instead.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set

from .config import config
from .errors import (
    InvalidTreeDepth, LeafIndexOutOfRange, TreeNotInitialized, TreeOverflow, ZeroHashTableTooShort,
)
from .poseidon import poseidon

logger = logging.getLogger(__name__)


@dataclass
class TreeProof:
    """Inclusion proof for one leaf of a fixed-arity tree."""
    leaf: int
    path_elements: List[List[int]]
    path_idx: List[int]
    root: int

    def verify(self) -> bool:
        return Tree.verify_proof(self.leaf, self.path_elements, self.path_idx, self.root)


class Tree:
    """
    Poseidon Merkle tree with ``degree`` children per node and ``depth`` levels.

    Parameters
    ----------
    degree : int
        Children per internal node, at least 2
    depth : int
        Number of levels below the root, at least 1
    zero : int, optional
        Value of an empty leaf. When omitted the tree stays uninitialized
        until :meth:`init_zero` is called.
    """

    def __init__(self, degree: int, depth: int, zero: Optional[int] = None):
        if degree < 2:
            raise ValueError(f"Tree degree must be at least 2, got {degree}")
        if depth < 1:
            raise InvalidTreeDepth(f"Tree depth must be at least 1, got {depth}")

        self.DEPTH = depth
        self.HEIGHT = depth + 1
        self.DEGREE = degree

        self.LEAVES_COUNT = degree ** depth
        self.LEAVES_IDX_0 = (degree ** depth - 1) // (degree - 1)
        self.NODES_COUNT = (degree ** (depth + 1) - 1) // (degree - 1)

        self.zeros: List[int] = []
        self.nodes: List[int] = []
        self._dirty: Set[int] = set()

        if zero is not None:
            self.init_zero(zero)

    def __repr__(self) -> str:
        return f"Tree(degree={self.DEGREE}, depth={self.DEPTH})"

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def init_zero(self, zero: int) -> None:
        """Compute the zero hashes and fill every node with its level's zero."""
        self.zeros = Tree.compute_zero_hashes(self.DEGREE, self.DEPTH, zero)
        self._init_nodes()

    def _init_nodes(self) -> None:
        nodes = [0] * self.NODES_COUNT
        for d in range(self.DEPTH, -1, -1):
            size = self.DEGREE ** d
            idx0 = (self.DEGREE ** d - 1) // (self.DEGREE - 1)
            zero = self.zeros[self.DEPTH - d]
            nodes[idx0:idx0 + size] = [zero] * size
        self.nodes = nodes
        self._dirty = set()
        logger.debug("Initialized %r with %d nodes", self, self.NODES_COUNT)

    def _require_nodes(self) -> None:
        if not self.nodes:
            raise TreeNotInitialized(f"{self!r} has no zero value; call init_zero() first")

    def _check_leaf_idx(self, leaf_idx: int) -> None:
        if not 0 <= leaf_idx < self.LEAVES_COUNT:
            raise LeafIndexOutOfRange(
                f"Leaf index {leaf_idx} outside [0, {self.LEAVES_COUNT}) for {self!r}"
            )

    def init_leaves(self, leaves: Sequence[int]) -> None:
        """
        Write ``leaves`` starting at index 0.

        Raises
        ------
        TreeOverflow
            If there are more leaves than the tree can hold
        """
        self._require_nodes()
        if len(leaves) > self.LEAVES_COUNT:
            raise TreeOverflow(
                f"{len(leaves)} leaves exceed the capacity {self.LEAVES_COUNT} of {self!r}"
            )
        for i, leaf in enumerate(leaves):
            node_idx = self.LEAVES_IDX_0 + i
            self.nodes[node_idx] = int(leaf)
            self._dirty.add(node_idx)

    # ------------------------------------------------------------------
    # Lazy root maintenance
    # ------------------------------------------------------------------

    def _children(self, parent_idx: int) -> List[int]:
        start = parent_idx * self.DEGREE + 1
        return self.nodes[start:start + self.DEGREE]

    def _sync(self) -> None:
        self._require_nodes()
        if not self._dirty:
            return
        touched = self._dirty
        hashes = 0
        while touched:
            parents = {(idx - 1) // self.DEGREE for idx in touched if idx > 0}
            for parent_idx in parents:
                self.nodes[parent_idx] = poseidon(self._children(parent_idx))
            hashes += len(parents)
            touched = parents
        self._dirty = set()
        logger.debug("Recomputed %d internal nodes of %r", hashes, self)

    @property
    def root(self) -> int:
        self._sync()
        return self.nodes[0]

    # ------------------------------------------------------------------
    # Leaves
    # ------------------------------------------------------------------

    def leaf(self, leaf_idx: int) -> int:
        self._require_nodes()
        self._check_leaf_idx(leaf_idx)
        return self.nodes[self.LEAVES_IDX_0 + leaf_idx]

    def leaves(self) -> List[int]:
        self._require_nodes()
        return self.nodes[self.LEAVES_IDX_0:]

    def update_leaf(self, leaf_idx: int, leaf: int) -> None:
        """Set one leaf; its path to the root is rehashed on the next read."""
        self._require_nodes()
        self._check_leaf_idx(leaf_idx)
        node_idx = self.LEAVES_IDX_0 + leaf_idx
        self.nodes[node_idx] = int(leaf)
        self._dirty.add(node_idx)

    # ------------------------------------------------------------------
    # Proofs
    # ------------------------------------------------------------------

    def path_idx_of(self, leaf_idx: int) -> List[int]:
        """Child position taken at each level, leaf first (base-degree digits of the index)."""
        self._require_nodes()
        self._check_leaf_idx(leaf_idx)
        idx = self.LEAVES_IDX_0 + leaf_idx
        path_idx = []
        for _ in range(self.DEPTH):
            parent_idx = (idx - 1) // self.DEGREE
            path_idx.append(idx - (parent_idx * self.DEGREE + 1))
            idx = parent_idx
        return path_idx

    def path_element_of(self, leaf_idx: int) -> List[List[int]]:
        """The ``degree - 1`` siblings at each level, leaf first."""
        self._check_leaf_idx(leaf_idx)
        self._sync()
        idx = self.LEAVES_IDX_0 + leaf_idx
        path_element = []
        for _ in range(self.DEPTH):
            parent_idx = (idx - 1) // self.DEGREE
            children_idx0 = parent_idx * self.DEGREE + 1
            path_element.append([
                self.nodes[i] for i in range(children_idx0, children_idx0 + self.DEGREE) if i != idx
            ])
            idx = parent_idx
        return path_element

    def gen_proof(self, leaf_idx: int) -> TreeProof:
        return TreeProof(
            leaf=self.leaf(leaf_idx),
            path_elements=self.path_element_of(leaf_idx),
            path_idx=self.path_idx_of(leaf_idx),
            root=self.root,
        )

    @staticmethod
    def verify_proof(leaf: int, path_elements: Sequence[Sequence[int]],
                     path_idx: Sequence[int], root: int) -> bool:
        """Hash ``leaf`` up through ``path_elements`` and compare with ``root``."""
        if len(path_elements) != len(path_idx):
            return False
        node = leaf
        for siblings, position in zip(path_elements, path_idx):
            siblings = list(siblings)
            if not 0 <= position <= len(siblings):
                return False
            node = poseidon(siblings[:position] + [node] + siblings[position:])
        return node == root

    # ------------------------------------------------------------------
    # Derived trees and roots
    # ------------------------------------------------------------------

    def sub_tree(self, length: int) -> "Tree":
        """Copy of this tree keeping only the first ``length`` leaves."""
        self._require_nodes()
        if not 0 <= length <= self.LEAVES_COUNT:
            raise LeafIndexOutOfRange(f"Sub-tree length {length} outside [0, {self.LEAVES_COUNT}]")
        sub = Tree(self.DEGREE, self.DEPTH, self.zeros[0])
        sub.init_leaves(self.leaves()[:length])
        return sub

    def root_of(self, leaves: Sequence[int]) -> int:
        """
        Root of a tree holding ``leaves`` as a prefix, computed without a node table.

        Zero entries count as empty slots and are replaced by the level's
        zero hash. Only parents with at least one non-empty child are hashed;
        every other subtree reuses ``zeros``. This is the computation a
        ledger performs when it only stores the leaf list.
        """
        self._require_nodes()
        return Tree.compute_root_of(self.DEGREE, self.DEPTH, leaves, self.zeros)

    @staticmethod
    def compute_root_of(degree: int, depth: int, leaves: Sequence[int],
                        zero_hashes: Sequence[int]) -> int:
        if len(zero_hashes) <= depth:
            raise ZeroHashTableTooShort(
                f"Need {depth + 1} zero hashes for depth {depth}, got {len(zero_hashes)}"
            )
        capacity = degree ** depth
        if len(leaves) > capacity:
            raise TreeOverflow(f"{len(leaves)} leaves exceed the capacity {capacity}")

        nodes = [int(v) for v in leaves]
        for level in range(depth):
            zero = zero_hashes[level]
            parents = []
            for start in range(0, len(nodes), degree):
                children = nodes[start:start + degree]
                if any(children):
                    children += [0] * (degree - len(children))
                    parents.append(poseidon([c if c else zero for c in children]))
                else:
                    parents.append(0)
            nodes = parents

        root = nodes[0] if nodes else 0
        return root if root else zero_hashes[depth]

    @staticmethod
    def compute_zero_hashes(degree: int, max_depth: int, zero: int) -> List[int]:
        """``[zeros[0], ..., zeros[max_depth]]`` for empty subtrees of each height."""
        zero_hashes = [zero]
        for _ in range(max_depth):
            zero_hashes.append(poseidon([zero_hashes[-1]] * degree))
        return zero_hashes

    @staticmethod
    def extend_tree_root(small_root: int, from_depth: int, to_depth: int,
                         zero_hashes: Sequence[int], degree: Optional[int] = None) -> int:
        """
        Root a ``from_depth`` tree would have if it were ``to_depth`` deep.

        The shallow tree becomes the left-most child at every added level; its
        siblings are empty subtrees of the same height.

        Parameters
        ----------
        small_root : int
            Root of the shallow tree
        from_depth, to_depth : int
            Current and target depths, ``to_depth > from_depth``
        zero_hashes : Sequence[int]
            At least ``to_depth + 1`` zero hashes (see compute_zero_hashes)
        degree : int, optional
            Tree degree; defaults to ``config.tree_degree``

        Raises
        ------
        InvalidTreeDepth
            If ``to_depth <= from_depth``
        ZeroHashTableTooShort
            If ``zero_hashes`` has no entry for ``to_depth``
        """
        if to_depth <= from_depth:
            raise InvalidTreeDepth(f"to_depth ({to_depth}) must exceed from_depth ({from_depth})")
        if len(zero_hashes) <= to_depth:
            raise ZeroHashTableTooShort(
                f"Need {to_depth + 1} zero hashes to reach depth {to_depth}, got {len(zero_hashes)}"
            )
        if degree is None:
            degree = config.tree_degree

        current_root = small_root
        for level in range(from_depth, to_depth):
            current_root = poseidon([current_root] + [zero_hashes[level]] * (degree - 1))
        logger.debug("Extended root from depth %d to %d", from_depth, to_depth)
        return current_root
