#!/usr/bin/env python3
"""
VaultMerkle Export Fingerprint Script.

Hashes one credential export into a Merkle tree, or compares two.
Requires Python 3.11+.

Usage:
    python scripts/merkle_csv.py export.csv
    python scripts/merkle_csv.py old.csv new.csv --fields title,password
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from merkle.models import MerkleTree
from pipeline.comparison import PanelComparison
from pipeline.panel import CsvPanel, LoadResult
from utils.config import get_settings
from utils.errors import PipelineError
from utils.logger import configure_logging, get_logger


configure_logging(log_format="console")
logger = get_logger("merkle_csv")


def render_tree(
    tree: MerkleTree | None,
    prefix_length: int,
    differences: frozenset[str] = frozenset(),
) -> str:
    """
    Render a tree root-first as plain text.

    Duplicate padding nodes are marked with ``(dup)`` and leaves flagged
    by a comparison with ``*``.
    """
    if tree is None:
        return "  (no tree)"

    lines = [f"  Root hash: {tree.root}", f"  Prefix:    {tree.root_prefix(prefix_length)}"]
    top = tree.depth - 1
    for index in range(top, -1, -1):
        if index == top:
            label = "Root"
        elif index == 0:
            label = "Entries"
        else:
            label = f"Level {index}"
        lines.append(f"  {label}:")
        for node in tree.levels[index]:
            marker = "*" if index == 0 and not node.is_duplicate and node.hash in differences else " "
            suffix = " (dup)" if node.is_duplicate else ""
            title = f"  Title: {node.title}" if node.title else ""
            lines.append(f"   {marker} {node.hash[:prefix_length]}{suffix}{title}")
    return "\n".join(lines)


async def load_panel(panel: CsvPanel, path: Path) -> LoadResult:
    result = await panel.load_file(path)
    if not result.ok:
        logger.warning("load_failed", path=str(path), status=result.status.value)
    return result


async def run(
    paths: list[Path],
    fields: list[str] | None,
    prefix_length: int,
    as_json: bool,
) -> int:
    """
    Load the exports, hash them and print the trees.

    Returns:
        Process exit code
    """
    left = CsvPanel(name="left", default_fields=fields)
    right = CsvPanel(name="right", default_fields=fields)
    comparison = PanelComparison(left, right, dual_mode=len(paths) == 2)

    panels = [left, right][: len(paths)]
    results = []
    for panel, path in zip(panels, paths):
        results.append(await load_panel(panel, path))

    differences = comparison.compare()

    if as_json:
        payload = {
            panel.name: {
                "path": str(path),
                "status": result.status.value,
                "message": result.message,
                "tree": panel.tree.as_dict(prefix_length) if panel.tree else None,
            }
            for panel, path, result in zip(panels, paths, results)
        }
        if len(paths) == 2:
            payload["differences"] = sorted(differences)
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        for panel, result in zip(panels, results):
            print(f"[{panel.name}] {result.message}")
            print(render_tree(panel.tree, prefix_length, panel.differences))
        if len(paths) == 2:
            print(f"\n{len(differences)} entr{'y' if len(differences) == 1 else 'ies'} "
                  "on the right not found on the left")
            for leaf_hash in sorted(differences):
                print(f"  {leaf_hash}")

    return 0 if all(result.ok for result in results) else 1


def main() -> None:
    """Main entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Fingerprint credential CSV exports with a Merkle tree"
    )
    parser.add_argument(
        "paths",
        type=Path,
        nargs="+",
        help="One export, or a reference and a candidate export",
    )
    parser.add_argument(
        "--fields",
        type=str,
        default=None,
        help="Comma-separated fields to hash (default: all present)",
    )
    parser.add_argument(
        "--prefix",
        type=int,
        default=settings.display.prefix_length,
        help="Hash prefix length to display",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the trees as JSON",
    )

    args = parser.parse_args()

    if len(args.paths) > 2:
        parser.error("at most two exports can be compared")

    for path in args.paths:
        if not path.is_file():
            logger.error("path_not_found", path=str(path))
            sys.exit(1)

    fields = [f.strip() for f in args.fields.split(",") if f.strip()] if args.fields else None

    try:
        exit_code = asyncio.run(run(args.paths, fields, args.prefix, args.json))
    except (PipelineError, ValueError) as e:
        logger.error("fingerprint_failed", error=str(e))
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
