"""
VaultMerkle Merkle Tree Package.

Row hashing, tree construction and leaf diffing.
Requires Python 3.11+.
"""

from merkle.models import RowDigest, MerkleNode, MerkleTree
from merkle.hash_calculator import HashCalculator, sha256_digest
from merkle.tree_builder import MerkleTreeBuilder
from merkle.differ import diff_leaves, diff_trees

__all__ = [
    "RowDigest",
    "MerkleNode",
    "MerkleTree",
    "HashCalculator",
    "sha256_digest",
    "MerkleTreeBuilder",
    "diff_leaves",
    "diff_trees",
]
