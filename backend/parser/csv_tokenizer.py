"""
VaultMerkle CSV Tokenizer.

Quote-aware tokenizer for credential manager exports.
Requires Python 3.11+.
"""

from pathlib import Path

from parser.models import ParsedCsv, RawRow
from utils.config import get_settings
from utils.errors import CsvTooLargeError
from utils.logger import get_logger

logger = get_logger("parser.csv")

_BOM = "\ufeff"
_QUOTE = '"'


def _is_blank_row(row: list[str]) -> bool:
    """A row holding one empty cell is what a blank line tokenizes to."""
    return len(row) == 1 and row[0] == ""


def tokenize(text: str) -> list[list[str]]:
    """
    Split CSV text into rows of cells.

    Never raises: unbalanced quotes simply run to the end of the input.
    Blank lines are dropped.

    Args:
        text: Raw CSV text, optionally BOM-prefixed

    Returns:
        List of rows, each a list of cell strings
    """
    if text.startswith(_BOM):
        text = text[1:]

    rows: list[list[str]] = []
    row: list[str] = []
    cell: list[str] = []
    in_quotes = False

    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        next_char = text[i + 1] if i + 1 < length else ""

        if char == _QUOTE and next_char == _QUOTE:
            cell.append(_QUOTE)
            i += 2
            continue

        if char == _QUOTE:
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            row.append("".join(cell))
            cell = []
        elif char in "\r\n" and not in_quotes:
            row.append("".join(cell))
            cell = []
            if char == "\r" and next_char == "\n":
                i += 1
            if not _is_blank_row(row):
                rows.append(row)
            row = []
        else:
            cell.append(char)
        i += 1

    row.append("".join(cell))
    if not _is_blank_row(row):
        rows.append(row)

    return rows


def parse_csv(text: str) -> ParsedCsv:
    """
    Parse CSV text into a header row and header-keyed data rows.

    The first retained row is the header. Short rows are padded with
    empty strings; cells past the last header are ignored.

    Args:
        text: Raw CSV text

    Returns:
        ParsedCsv, empty when no header row exists
    """
    rows = tokenize(text or "")
    if not rows:
        return ParsedCsv()

    headers = rows[0]
    entries: list[RawRow] = []
    for values in rows[1:]:
        entry: RawRow = {}
        for index, header in enumerate(headers):
            entry[header] = values[index] if index < len(values) else ""
        entries.append(entry)

    logger.debug("csv_parsed", columns=len(headers), rows=len(entries))
    return ParsedCsv(headers=list(headers), rows=entries)


def decode_csv_bytes(data: bytes, encoding: str | None = None) -> str:
    """Decode an export, replacing undecodable bytes instead of failing."""
    encoding = encoding or get_settings().csv.encoding
    return data.decode(encoding, errors="replace")


def read_csv_file(path: Path) -> ParsedCsv:
    """
    Read and parse a CSV export from disk.

    Args:
        path: Path to the export

    Returns:
        ParsedCsv for the file contents

    Raises:
        CsvTooLargeError: If the file exceeds the configured size limit
    """
    settings = get_settings()
    limit = int(settings.csv.max_file_size_mb * 1024 * 1024)
    size = path.stat().st_size
    if size > limit:
        raise CsvTooLargeError(size, limit)

    parsed = parse_csv(decode_csv_bytes(path.read_bytes(), settings.csv.encoding))
    logger.info(
        "csv_file_read",
        path=str(path),
        size_bytes=size,
        columns=len(parsed.headers),
        rows=parsed.row_count,
    )
    return parsed
