"""
VaultMerkle CSV Panel.

Holds one loaded export, its field selection and the latest published
tree. Only the most recently started run may publish.
Requires Python 3.11+.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import tzinfo
from enum import Enum
from pathlib import Path
from typing import Any

from merkle.hash_calculator import HashCalculator
from merkle.models import MerkleNode, MerkleTree
from normalizer.fields import CanonicalField, HeaderBinding, bind_headers, bound_fields
from parser.csv_tokenizer import parse_csv, read_csv_file
from parser.models import ParsedCsv, RawRow
from pipeline.compute import compute_tree
from pipeline.generation import Generation
from utils.config import get_settings
from utils.errors import RunSuperseded
from utils.logger import LoggerMixin


class LoadStatus(str, Enum):
    """Outcome of loading an export into a panel."""

    LOADED = "loaded"
    NO_HEADERS = "no_headers"
    NO_ROWS = "no_rows"


@dataclass(frozen=True, slots=True)
class LoadResult:
    """Status of a load plus a message suitable for the user."""

    status: LoadStatus
    message: str
    source: str = ""

    @property
    def ok(self) -> bool:
        return self.status is LoadStatus.LOADED


ChangeHandler = Callable[["CsvPanel"], Any]


class CsvPanel(LoggerMixin):
    """
    One side of a comparison: a loaded export and its Merkle tree.

    Every load, selection change or clear starts a new generation. A run
    whose generation is no longer current stops at its next digest and
    publishes nothing.
    """

    def __init__(
        self,
        name: str = "panel",
        hasher: HashCalculator | None = None,
        default_fields: Iterable[CanonicalField | str] | None = None,
        local_tz: tzinfo | None = None,
    ) -> None:
        """
        Initialize the panel.

        Args:
            name: Panel name used in log entries
            hasher: Hash calculator shared by this panel's runs
            default_fields: Fields selected after a load (settings by default)
            local_tz: Zone for unzoned timestamps
        """
        if default_fields is None:
            default_fields = get_settings().pipeline.default_fields
        self.name = name
        self._hasher = hasher or HashCalculator()
        self._default_fields = {CanonicalField.parse(f) for f in default_fields}
        self._local_tz = local_tz
        self._generation = Generation()
        self._parsed = ParsedCsv()
        self._bindings: list[HeaderBinding] = []
        self._selected: set[CanonicalField] = set()
        self._tree: MerkleTree | None = None
        self._differences: frozenset[str] = frozenset()
        self._on_change: ChangeHandler | None = None

    def _log_context(self) -> dict[str, Any]:
        return {"panel": self.name}

    # State accessors

    @property
    def generation(self) -> int:
        return self._generation.current

    @property
    def headers(self) -> list[str]:
        return list(self._parsed.headers)

    @property
    def rows(self) -> list[RawRow]:
        return list(self._parsed.rows)

    @property
    def has_data(self) -> bool:
        return bool(self._parsed.rows)

    @property
    def bindings(self) -> list[HeaderBinding]:
        return list(self._bindings)

    @property
    def selected_fields(self) -> list[CanonicalField]:
        """Selected fields present in the export, in configuration order."""
        return [b.canonical for b in bound_fields(self._bindings, self._selected)]

    @property
    def tree(self) -> MerkleTree | None:
        return self._tree

    @property
    def leaves(self) -> tuple[MerkleNode, ...]:
        return self._tree.leaves if self._tree is not None else ()

    @property
    def leaf_hashes(self) -> list[str]:
        return [leaf.hash for leaf in self.leaves]

    @property
    def differences(self) -> frozenset[str]:
        """Leaf hashes flagged by the latest comparison."""
        return self._differences

    def set_change_handler(self, handler: ChangeHandler | None) -> None:
        """Set the callback run after every publish."""
        self._on_change = handler

    def set_differences(self, hashes: Iterable[str]) -> None:
        self._differences = frozenset(hashes)

    # Loading

    async def load_text(self, text: str, source: str = "export") -> LoadResult:
        """Tokenize CSV text and hash it with the default selection."""
        return await self.load_parsed(parse_csv(text), source)

    async def load_file(self, path: Path) -> LoadResult:
        """
        Read an export from disk and hash it.

        Raises:
            CsvTooLargeError: If the file exceeds the configured limit
        """
        return await self.load_parsed(read_csv_file(path), path.name)

    async def load_parsed(self, parsed: ParsedCsv, source: str = "export") -> LoadResult:
        """
        Replace the panel's data with a parsed export.

        Args:
            parsed: Tokenized export
            source: Name shown in messages

        Returns:
            LoadResult; structural problems are statuses, not exceptions
        """
        if not parsed.has_headers:
            self.clear()
            self.log.warning("csv_without_headers", source=source)
            return LoadResult(
                LoadStatus.NO_HEADERS,
                "Could not find any headers in that file. Please check the CSV.",
                source,
            )

        if not parsed.rows:
            self.clear()
            self.log.warning("csv_without_rows", source=source)
            return LoadResult(
                LoadStatus.NO_ROWS,
                f"Loaded {source}, but no data rows were found.",
                source,
            )

        self._parsed = parsed
        self._bindings = bind_headers(parsed.headers)
        self._selected = {
            b.canonical
            for b in self._bindings
            if b.is_bound and b.canonical in self._default_fields
        }
        available = [b.label for b in self._bindings if b.is_bound]
        self.log.info(
            "csv_loaded",
            source=source,
            rows=parsed.row_count,
            bound_fields=available,
        )

        await self.refresh()
        return LoadResult(
            LoadStatus.LOADED,
            f"Loaded {source}. {', '.join(available) or 'No known fields'} "
            "available for hashing.",
            source,
        )

    # Runs

    async def select_fields(self, fields: Iterable[CanonicalField | str]) -> bool:
        """Change the selection and recompute; fields not in the export are ignored."""
        self._selected = {b.canonical for b in bound_fields(self._bindings, fields)}
        return await self.refresh()

    async def refresh(self) -> bool:
        """
        Recompute the tree for the current data and selection.

        Returns:
            True if this run published its result, False if superseded

        Raises:
            DigestError: If the digest primitive fails; published state is kept
        """
        token = self._generation.advance()
        selection = bound_fields(self._bindings, self._selected)

        if not self._parsed.rows or not selection:
            self._publish(None)
            return True

        try:
            tree = await compute_tree(
                self._parsed.rows,
                [b.canonical for b in selection],
                bindings=self._bindings,
                guard=token,
                hasher=self._hasher,
                local_tz=self._local_tz,
            )
        except RunSuperseded as e:
            self.log.debug("run_superseded", run=e.run_id, current=e.current)
            return False

        if not token.is_current:
            self.log.debug("run_superseded", run=token.run_id)
            return False

        self._publish(tree)
        return True

    def clear(self) -> None:
        """Drop all data and supersede any run in flight."""
        self._generation.advance()
        self._parsed = ParsedCsv()
        self._bindings = []
        self._selected = set()
        self._publish(None)

    def _publish(self, tree: MerkleTree | None) -> None:
        self._tree = tree
        if tree is None:
            self._differences = frozenset()
        self.log.debug(
            "tree_published",
            generation=self._generation.current,
            root_prefix=tree.root_prefix() if tree else None,
        )
        if self._on_change is not None:
            self._on_change(self)
