"""
VaultMerkle Leaf Differ.

Flags candidate-side rows missing from a reference export.
Requires Python 3.11+.
"""

from collections.abc import Iterable

from merkle.models import MerkleNode, MerkleTree, RowDigest

LeafLike = str | MerkleNode | RowDigest


def _leaf_hash(leaf: LeafLike) -> str:
    if isinstance(leaf, RowDigest):
        return leaf.identity_hash
    if isinstance(leaf, MerkleNode):
        return leaf.hash
    return leaf


def diff_leaves(
    reference: Iterable[LeafLike], candidate: Iterable[LeafLike]
) -> set[str]:
    """
    Candidate leaf hashes that do not occur in the reference.

    One-directional: reference-only hashes are not reported. An empty
    side means there is nothing to compare, so the result is empty.

    Args:
        reference: Leaves of the reference export
        candidate: Leaves of the export being checked

    Returns:
        Set of candidate identity hashes absent from the reference
    """
    reference_hashes = {h for h in map(_leaf_hash, reference) if h}
    candidate_hashes = [h for h in map(_leaf_hash, candidate) if h]

    if not reference_hashes or not candidate_hashes:
        return set()

    return {h for h in candidate_hashes if h not in reference_hashes}


def diff_trees(
    reference: MerkleTree | None, candidate: MerkleTree | None
) -> set[str]:
    """Diff the real leaves of two trees; a missing tree counts as empty."""
    if reference is None or candidate is None:
        return set()
    return diff_leaves(reference.leaves, candidate.leaves)
