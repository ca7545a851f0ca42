"""
VaultMerkle Parser Data Models.

Defines the structures produced by the CSV tokenizer.
Requires Python 3.11+.
"""

from dataclasses import dataclass, field

# Header name -> raw cell value, one per data row
RawRow = dict[str, str]


@dataclass(slots=True)
class ParsedCsv:
    """Header row plus data rows of a tokenized export."""

    headers: list[str] = field(default_factory=list)
    rows: list[RawRow] = field(default_factory=list)

    @property
    def has_headers(self) -> bool:
        """Check if a header row was found."""
        return bool(self.headers)

    @property
    def row_count(self) -> int:
        """Get number of data rows."""
        return len(self.rows)
