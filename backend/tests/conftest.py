"""
VaultMerkle Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

from pathlib import Path

import pytest

from merkle.hash_calculator import HashCalculator
from parser.csv_tokenizer import parse_csv
from parser.models import ParsedCsv

# Every timestamp carries an offset, so results do not depend on the host zone
SAMPLE_CSV = (
    "Title,Username,Password,Last Modified,Notes\n"
    "GitHub,alice,hunter2,2024-01-15T10:30:00Z,dev\n"
    '"Bank, Inc.",alice@example.com,"p""w""d",2023-12-01 08:00:00+01:00,\n'
    "Email,alice,s3cret,2024-03-02T00:00:00.250Z,personal\n"
)


@pytest.fixture
def sample_csv() -> str:
    """Three-row export with every known column plus an extra one."""
    return SAMPLE_CSV


@pytest.fixture
def sample_parsed(sample_csv: str) -> ParsedCsv:
    """The sample export, tokenized."""
    return parse_csv(sample_csv)


@pytest.fixture
def hasher() -> HashCalculator:
    """Create a hash calculator with the default digest."""
    return HashCalculator()


@pytest.fixture
def temp_csv_file(tmp_path: Path, sample_csv: str) -> Path:
    """Write the sample export to disk."""
    file_path = tmp_path / "export.csv"
    file_path.write_text(sample_csv, encoding="utf-8")
    return file_path
