"""
VaultMerkle Merkle Data Models.

Row digests, tree nodes and the built tree.
Requires Python 3.11+.
"""

import re
from dataclasses import dataclass
from typing import Any

_HEX64_RE = re.compile(r"[0-9a-f]{64}")


def _require_hex64(value: str, name: str) -> None:
    if not isinstance(value, str) or not _HEX64_RE.fullmatch(value):
        raise ValueError(f"{name} must be 64-char lowercase hex, got {value!r}")


@dataclass(frozen=True, slots=True)
class RowDigest:
    """
    Hashes derived from one normalized row.

    ``identity_hash`` is the Merkle leaf. ``sort_hash`` only orders
    leaves before the tree is built and is not kept in the tree.
    """

    identity_hash: str
    sort_hash: str
    title: str | None = None

    def __post_init__(self) -> None:
        _require_hex64(self.identity_hash, "identity_hash")
        _require_hex64(self.sort_hash, "sort_hash")


@dataclass(frozen=True, slots=True)
class MerkleNode:
    """A node in one level of the tree."""

    hash: str
    title: str | None = None
    # Copy of the left sibling, added to even out an odd-length level
    is_duplicate: bool = False

    def __post_init__(self) -> None:
        _require_hex64(self.hash, "hash")
        if self.is_duplicate and self.title is not None:
            raise ValueError("duplicate nodes never carry a title")

    @property
    def as_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "hash": self.hash,
            "title": self.title,
            "is_duplicate": self.is_duplicate,
        }


MerkleLevel = tuple[MerkleNode, ...]


@dataclass(frozen=True, slots=True)
class MerkleTree:
    """Levels from leaves (index 0) up to the single root node."""

    levels: tuple[MerkleLevel, ...]
    root: str

    def __post_init__(self) -> None:
        if not self.levels or len(self.levels[-1]) != 1:
            raise ValueError("top level must hold exactly one node")
        if self.levels[-1][0].hash != self.root:
            raise ValueError("root does not match the top level node")
        for index, level in enumerate(self.levels):
            if len(level) > 1 and len(level) % 2:
                raise ValueError(f"level {index} has odd length {len(level)}")

    @property
    def depth(self) -> int:
        return len(self.levels)

    @property
    def leaves(self) -> tuple[MerkleNode, ...]:
        """Real leaves in tree order, padding excluded."""
        return tuple(node for node in self.levels[0] if not node.is_duplicate)

    @property
    def leaf_hashes(self) -> list[str]:
        return [node.hash for node in self.leaves]

    @property
    def leaf_count(self) -> int:
        return len(self.leaves)

    def root_prefix(self, length: int = 7) -> str:
        """Short form of the root for display."""
        return self.root[:length]

    def as_dict(self, prefix_length: int = 7) -> dict[str, Any]:
        """Convert to dictionary for serialization, levels leaf-first."""
        return {
            "root": self.root,
            "root_prefix": self.root_prefix(prefix_length),
            "leaf_count": self.leaf_count,
            "levels": [[node.as_dict for node in level] for level in self.levels],
        }
