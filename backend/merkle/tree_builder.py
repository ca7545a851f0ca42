"""
VaultMerkle Tree Builder.

Builds a binary Merkle tree over row digests.
Requires Python 3.11+.
"""

from collections.abc import Sequence

from merkle.hash_calculator import HashCalculator, RunGuard
from merkle.models import MerkleNode, MerkleTree, RowDigest
from utils.logger import LoggerMixin


class MerkleTreeBuilder(LoggerMixin):
    """
    Builds a binary Merkle tree bottom-up.

    Leaves are ordered by sort hash so the same rows always produce the
    same tree, whatever order they were read in. An odd-length level is
    padded with a duplicate of its last node.
    """

    def __init__(self, hasher: HashCalculator | None = None) -> None:
        self._hasher = hasher or HashCalculator()

    @staticmethod
    def order_leaves(leaves: Sequence[RowDigest]) -> list[RowDigest]:
        """Sort by sort hash; ties keep input order."""
        return sorted(leaves, key=lambda leaf: leaf.sort_hash)

    async def build(
        self,
        leaves: Sequence[RowDigest],
        guard: RunGuard | None = None,
    ) -> MerkleTree | None:
        """
        Build the tree for a set of row digests.

        A single leaf is its own root; no combination step runs.

        Args:
            leaves: Row digests in any order
            guard: Staleness check run after each digest

        Returns:
            MerkleTree, or None when there are no leaves
        """
        if not leaves:
            return None

        level = [
            MerkleNode(hash=leaf.identity_hash, title=leaf.title)
            for leaf in self.order_leaves(leaves)
        ]
        levels: list[tuple[MerkleNode, ...]] = []

        while True:
            if len(level) > 1 and len(level) % 2 == 1:
                level.append(MerkleNode(hash=level[-1].hash, is_duplicate=True))
            levels.append(tuple(level))

            if len(level) == 1:
                break

            parents: list[MerkleNode] = []
            for i in range(0, len(level), 2):
                parent_hash = await self._hasher.combine(
                    level[i].hash, level[i + 1].hash, guard
                )
                parents.append(MerkleNode(hash=parent_hash))
            level = parents

        tree = MerkleTree(levels=tuple(levels), root=levels[-1][0].hash)
        self.log.debug(
            "tree_built",
            leaves=len(leaves),
            depth=tree.depth,
            root_prefix=tree.root_prefix(),
        )
        return tree
