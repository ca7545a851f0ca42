"""
VaultMerkle Panel Comparison.

Keeps the candidate panel's flagged rows in sync with the reference.
Requires Python 3.11+.
"""

from merkle.differ import diff_leaves
from pipeline.panel import CsvPanel
from utils.logger import LoggerMixin


class PanelComparison(LoggerMixin):
    """
    Links a reference (left) and candidate (right) panel.

    Whenever either panel publishes, the right panel's differences are
    recomputed as the right leaves missing on the left.
    """

    def __init__(
        self, left: CsvPanel, right: CsvPanel, dual_mode: bool = True
    ) -> None:
        self.left = left
        self.right = right
        self._dual_mode = dual_mode
        left.set_change_handler(self._on_change)
        right.set_change_handler(self._on_change)

    @property
    def dual_mode(self) -> bool:
        return self._dual_mode

    def set_dual_mode(self, enabled: bool) -> None:
        """Turn comparison on or off; turning it off clears the right panel."""
        self._dual_mode = enabled
        if not enabled:
            self.right.clear()
        self.compare()

    def compare(self) -> set[str]:
        """
        Recompute and store the right panel's differences.

        Returns:
            Right-side leaf hashes absent from the left
        """
        if not self._dual_mode:
            self.right.set_differences(set())
            return set()

        differences = diff_leaves(self.left.leaf_hashes, self.right.leaves)
        self.right.set_differences(differences)
        self.log.debug(
            "panels_compared",
            left_leaves=len(self.left.leaves),
            right_leaves=len(self.right.leaves),
            differences=len(differences),
        )
        return differences

    def _on_change(self, panel: CsvPanel) -> None:
        self.compare()
