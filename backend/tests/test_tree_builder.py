"""
Tests for the Merkle Tree Builder and Differ.

Requires Python 3.11+.
"""

import random

import pytest

from helpers import combine_hex, sha256_hex
from merkle.differ import diff_leaves, diff_trees
from merkle.models import MerkleNode, MerkleTree, RowDigest
from merkle.tree_builder import MerkleTreeBuilder


def make_leaf(name: str, sort_digit: str, title: str | None = None) -> RowDigest:
    """Leaf with a readable identity and a chosen sort position."""
    return RowDigest(
        identity_hash=sha256_hex(name),
        sort_hash=sort_digit * 64,
        title=title,
    )


class TestMerkleTreeBuilder:
    """Test cases for MerkleTreeBuilder."""

    @pytest.fixture
    def builder(self) -> MerkleTreeBuilder:
        """Create a builder with the default hasher."""
        return MerkleTreeBuilder()

    async def test_empty(self, builder: MerkleTreeBuilder):
        """Test no leaves means no tree."""
        assert await builder.build([]) is None

    async def test_single_leaf(self, builder: MerkleTreeBuilder):
        """Test one leaf is its own root."""
        leaf = make_leaf("only", "a", title="Only")
        tree = await builder.build([leaf])

        assert tree.depth == 1
        assert tree.levels[0] == (MerkleNode(hash=leaf.identity_hash, title="Only"),)
        assert tree.root == leaf.identity_hash

    async def test_two_leaves(self, builder: MerkleTreeBuilder):
        """Test two leaves combine once without padding."""
        a, b = make_leaf("a", "1"), make_leaf("b", "2")
        tree = await builder.build([b, a])

        assert [n.hash for n in tree.levels[0]] == [a.identity_hash, b.identity_hash]
        assert tree.root == combine_hex(a.identity_hash, b.identity_hash)

    async def test_odd_padding(self, builder: MerkleTreeBuilder):
        """Test three leaves are padded with a duplicate of the last."""
        h1, h2, h3 = make_leaf("h1", "1", "one"), make_leaf("h2", "2", "two"), make_leaf("h3", "3", "three")
        tree = await builder.build([h3, h1, h2])

        level0 = tree.levels[0]
        assert [n.hash for n in level0] == [
            h1.identity_hash,
            h2.identity_hash,
            h3.identity_hash,
            h3.identity_hash,
        ]
        assert [n.is_duplicate for n in level0] == [False, False, False, True]
        assert level0[3].title is None

        left = combine_hex(h1.identity_hash, h2.identity_hash)
        right = combine_hex(h3.identity_hash, h3.identity_hash)
        assert [n.hash for n in tree.levels[1]] == [left, right]
        assert tree.root == combine_hex(left, right)
        assert tree.depth == 3

    async def test_level_sizes(self, builder: MerkleTreeBuilder):
        """Test every odd level above the leaves is padded as well."""
        leaves = [make_leaf(str(i), str(i)) for i in range(5)]
        tree = await builder.build(leaves)

        assert [len(level) for level in tree.levels] == [6, 4, 2, 1]
        assert tree.levels[1][3].is_duplicate
        assert tree.leaf_count == 5

    async def test_input_order_irrelevant(self, builder: MerkleTreeBuilder):
        """Test any permutation of leaves yields the same root."""
        leaves = [make_leaf(f"row{i}", "0123456789abcdef"[i]) for i in range(7)]
        expected = (await builder.build(leaves)).root

        shuffled = leaves[:]
        random.Random(7).shuffle(shuffled)

        assert (await builder.build(shuffled)).root == expected

    async def test_sort_ties_keep_input_order(self, builder: MerkleTreeBuilder):
        """Test equal sort hashes keep their input order."""
        first, second = make_leaf("first", "5"), make_leaf("second", "5")
        tree = await builder.build([first, second])

        assert tree.leaf_hashes == [first.identity_hash, second.identity_hash]

    async def test_as_dict(self, builder: MerkleTreeBuilder):
        """Test serialization for renderers."""
        tree = await builder.build([make_leaf("a", "1", "A"), make_leaf("b", "2")])
        data = tree.as_dict(prefix_length=10)

        assert data["root"] == tree.root
        assert data["root_prefix"] == tree.root[:10]
        assert data["levels"][0][0] == {
            "hash": sha256_hex("a"),
            "title": "A",
            "is_duplicate": False,
        }


class TestMerkleModels:
    """Test cases for model invariants."""

    def test_invalid_hash_rejected(self):
        """Test node hashes must be 64-char lowercase hex."""
        with pytest.raises(ValueError):
            MerkleNode(hash="ABC")
        with pytest.raises(ValueError):
            MerkleNode(hash=sha256_hex("x").upper())

    def test_duplicate_without_title(self):
        """Test duplicates cannot carry a title."""
        with pytest.raises(ValueError):
            MerkleNode(hash=sha256_hex("x"), title="x", is_duplicate=True)

    def test_root_must_match(self):
        """Test tree construction checks the root."""
        node = MerkleNode(hash=sha256_hex("x"))
        with pytest.raises(ValueError):
            MerkleTree(levels=((node,),), root=sha256_hex("y"))


class TestDiffer:
    """Test cases for the leaf differ."""

    def test_same_sets(self):
        """Test identical sides have no differences."""
        hashes = [sha256_hex("a"), sha256_hex("b")]
        assert diff_leaves(hashes, hashes) == set()

    def test_asymmetric(self):
        """Test only candidate-side extras are reported."""
        a, b, c = sha256_hex("a"), sha256_hex("b"), sha256_hex("c")

        assert diff_leaves({a, b}, [a, c]) == {c}
        assert diff_leaves({a, c}, [a, b]) == {b}

    def test_empty_sides(self):
        """Test an empty side yields no differences."""
        a = sha256_hex("a")

        assert diff_leaves(set(), [a]) == set()
        assert diff_leaves({a}, []) == set()

    async def test_diff_trees_skips_duplicates(self):
        """Test tree diffs use real leaves only."""
        builder = MerkleTreeBuilder()
        reference = await builder.build([make_leaf("a", "1"), make_leaf("b", "2")])
        candidate = await builder.build(
            [make_leaf("a", "1"), make_leaf("b", "2"), make_leaf("c", "3")]
        )

        assert diff_trees(reference, candidate) == {sha256_hex("c")}
        assert diff_trees(candidate, reference) == set()
        assert diff_trees(None, candidate) == set()
