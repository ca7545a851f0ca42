"""
VaultMerkle Pipeline Entry Points.

Raw rows in, Merkle tree out.
Requires Python 3.11+.
"""

from collections.abc import Iterable, Sequence
from datetime import tzinfo

from merkle.differ import diff_trees
from merkle.hash_calculator import HashCalculator, RunGuard
from merkle.models import MerkleTree, RowDigest
from merkle.tree_builder import MerkleTreeBuilder
from normalizer.fields import CanonicalField, HeaderBinding, bind_headers, bound_fields
from normalizer.normalize import normalize_row, normalize_text
from parser.models import RawRow
from utils.logger import get_logger

logger = get_logger("pipeline.compute")

__all__ = ["hash_rows", "compute_tree", "diff_trees"]


async def hash_rows(
    rows: Sequence[RawRow],
    selection: Sequence[HeaderBinding],
    bindings: Sequence[HeaderBinding],
    hasher: HashCalculator,
    guard: RunGuard | None = None,
    local_tz: tzinfo | None = None,
) -> list[RowDigest]:
    """
    Hash rows one at a time, in input order.

    Args:
        rows: Raw rows of the export
        selection: Bound bindings chosen for hashing
        bindings: All bindings of the export (for the leaf title)
        hasher: Hash calculator
        guard: Staleness check run after each digest
        local_tz: Zone for unzoned timestamps

    Returns:
        One RowDigest per row
    """
    selected = [binding.canonical for binding in selection]
    title_header = next(
        (
            b.header_name
            for b in bindings
            if b.canonical is CanonicalField.TITLE and b.is_bound
        ),
        None,
    )

    digests: list[RowDigest] = []
    for row in rows:
        if guard is not None:
            guard.ensure_current()
        normalized = normalize_row(row, selection, local_tz)
        title = normalize_text(row.get(title_header)) if title_header else None
        digests.append(await hasher.hash_row(normalized, selected, title, guard))
    return digests


async def compute_tree(
    rows: Sequence[RawRow],
    selected_fields: Iterable[CanonicalField | str],
    *,
    bindings: Sequence[HeaderBinding] | None = None,
    guard: RunGuard | None = None,
    hasher: HashCalculator | None = None,
    local_tz: tzinfo | None = None,
) -> MerkleTree | None:
    """
    Compute the Merkle tree for an export.

    Selected fields that the export lacks are ignored. When no rows or
    no usable fields remain, nothing is hashed and None is returned.

    Args:
        rows: Raw rows of the export
        selected_fields: Fields to hash, in any order
        bindings: Header bindings; derived from the rows when omitted
        guard: Staleness check run after each digest
        hasher: Hash calculator, SHA-256 via hashlib by default
        local_tz: Zone for unzoned timestamps

    Returns:
        MerkleTree, or None for an empty result

    Raises:
        DigestError: If the digest primitive fails
        RunSuperseded: If the guard's run went stale
    """
    if not rows:
        return None
    if bindings is None:
        bindings = bind_headers(rows[0].keys())

    selection = bound_fields(bindings, selected_fields)
    if not selection:
        return None

    hasher = hasher or HashCalculator()
    digests = await hash_rows(rows, selection, bindings, hasher, guard, local_tz)
    tree = await MerkleTreeBuilder(hasher).build(digests, guard)

    if tree is not None:
        logger.info(
            "tree_computed",
            rows=len(rows),
            fields=[binding.canonical.value for binding in selection],
            depth=tree.depth,
            root_prefix=tree.root_prefix(),
        )
    return tree
