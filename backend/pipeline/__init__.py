"""
VaultMerkle Pipeline Package.

Entry points and per-panel state for hashing CSV exports.
Requires Python 3.11+.
"""

from pipeline.generation import Generation, GenerationToken
from pipeline.compute import compute_tree, diff_trees, hash_rows
from pipeline.panel import CsvPanel, LoadResult, LoadStatus
from pipeline.comparison import PanelComparison

__all__ = [
    "Generation",
    "GenerationToken",
    "compute_tree",
    "diff_trees",
    "hash_rows",
    "CsvPanel",
    "LoadResult",
    "LoadStatus",
    "PanelComparison",
]
