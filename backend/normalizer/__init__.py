"""
VaultMerkle Normalizer Package.

Header binding and canonical value forms for hashed fields.
Requires Python 3.11+.
"""

from normalizer.fields import (
    CanonicalField,
    FieldSpec,
    HeaderBinding,
    FIELD_CONFIG,
    HASH_FIELD_ORDER,
    bind_headers,
    bound_fields,
)
from normalizer.normalize import (
    NormalizedRow,
    normalize_text,
    normalize_date,
    normalize_field,
    normalize_row,
    parse_flexible_date,
    format_utc_iso,
)

__all__ = [
    "CanonicalField",
    "FieldSpec",
    "HeaderBinding",
    "FIELD_CONFIG",
    "HASH_FIELD_ORDER",
    "bind_headers",
    "bound_fields",
    "NormalizedRow",
    "normalize_text",
    "normalize_date",
    "normalize_field",
    "normalize_row",
    "parse_flexible_date",
    "format_utc_iso",
]
