"""
VaultMerkle Parser Package.

Quote-aware CSV tokenizer for credential exports.
Requires Python 3.11+.
"""

from parser.models import ParsedCsv, RawRow
from parser.csv_tokenizer import tokenize, parse_csv, decode_csv_bytes, read_csv_file

__all__ = [
    "ParsedCsv",
    "RawRow",
    "tokenize",
    "parse_csv",
    "decode_csv_bytes",
    "read_csv_file",
]
