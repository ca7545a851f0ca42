"""
VaultMerkle Field Configuration.

The fixed set of hashable fields and their binding to CSV headers.
Requires Python 3.11+.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

# ECMAScript whitespace, so trimming matches browser-side exports byte for byte
WHITESPACE_CHARS = (
    "\t\n\v\f\r \u00a0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)


class CanonicalField(str, Enum):
    """Logical fields that may participate in row hashing."""

    TITLE = "title"
    USERNAME = "username"
    PASSWORD = "password"
    LAST_MODIFIED = "last modified"

    @classmethod
    def parse(cls, value: "str | CanonicalField") -> "CanonicalField":
        """Resolve a field from its value or member name, case-insensitively."""
        if isinstance(value, cls):
            return value
        key = str(value).strip(WHITESPACE_CHARS).lower()
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        raise ValueError(f"Unknown field: {value!r}")


# Fixed global order used for identity hashes
HASH_FIELD_ORDER: tuple[CanonicalField, ...] = (
    CanonicalField.TITLE,
    CanonicalField.USERNAME,
    CanonicalField.PASSWORD,
    CanonicalField.LAST_MODIFIED,
)


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """A configured field: display label plus canonical name."""

    label: str
    canonical: CanonicalField


FIELD_CONFIG: tuple[FieldSpec, ...] = (
    FieldSpec("Title", CanonicalField.TITLE),
    FieldSpec("Username", CanonicalField.USERNAME),
    FieldSpec("Password", CanonicalField.PASSWORD),
    FieldSpec("Last Modified", CanonicalField.LAST_MODIFIED),
)


@dataclass(frozen=True, slots=True)
class HeaderBinding:
    """A configured field and the CSV header it matched, if any."""

    field: FieldSpec
    header_name: str | None = None

    @property
    def canonical(self) -> CanonicalField:
        return self.field.canonical

    @property
    def label(self) -> str:
        return self.field.label

    @property
    def is_bound(self) -> bool:
        """Check if the field was found in the file."""
        return self.header_name is not None

    @property
    def display_label(self) -> str:
        """Label for selection lists; unbound fields are marked missing."""
        return self.label if self.is_bound else f"{self.label} (missing)"


def to_canonical(header: str | None) -> str:
    """Reduce a header to its comparison form."""
    return (header or "").strip(WHITESPACE_CHARS).lower()


def bind_headers(headers: Iterable[str]) -> list[HeaderBinding]:
    """
    Match each configured field to the first equivalent header.

    Matching ignores case and surrounding whitespace. Fields without a
    matching header get an unbound binding.

    Args:
        headers: Header row of the loaded file

    Returns:
        One binding per configured field, in configuration order
    """
    headers = list(headers)
    bindings: list[HeaderBinding] = []
    for spec in FIELD_CONFIG:
        match = next(
            (h for h in headers if to_canonical(h) == spec.canonical.value),
            None,
        )
        bindings.append(HeaderBinding(field=spec, header_name=match))
    return bindings


def bound_fields(
    bindings: Sequence[HeaderBinding],
    selected: Iterable["str | CanonicalField"],
) -> list[HeaderBinding]:
    """
    Restrict a selection to fields present in the file.

    Args:
        bindings: Bindings for the loaded file
        selected: Caller's selection, in any order

    Returns:
        Bound bindings for the selected fields, in configuration order
    """
    wanted = {CanonicalField.parse(f) for f in selected}
    return [b for b in bindings if b.is_bound and b.canonical in wanted]
