"""
VaultMerkle Hash Calculator.

SHA-256 based hashing of normalized rows and Merkle node pairs.
Requires Python 3.11+.
"""

import asyncio
import hashlib
import json
from collections.abc import Awaitable, Callable, Iterable
from typing import Protocol

from merkle.models import RowDigest
from normalizer.fields import HASH_FIELD_ORDER, CanonicalField
from normalizer.normalize import NormalizedRow
from utils.errors import DigestError
from utils.logger import LoggerMixin

# Async digest primitive: message bytes -> raw digest bytes
Digest = Callable[[bytes], Awaitable[bytes]]

IDENTITY_SEPARATOR = "|"


class RunGuard(Protocol):
    """Anything that can abort a run once it has gone stale."""

    def ensure_current(self) -> None: ...


async def sha256_digest(data: bytes) -> bytes:
    """Default digest: hashlib SHA-256, yielding to the event loop once."""
    digest = hashlib.sha256(data).digest()
    await asyncio.sleep(0)
    return digest


def encode_utf8(text: str) -> bytes:
    """UTF-8 encode, turning lone surrogates into U+FFFD."""
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError:
        repaired = text.encode("utf-16", "surrogatepass").decode("utf-16", "replace")
        return repaired.encode("utf-8")


def build_identity_input(
    normalized: NormalizedRow, selected: Iterable[CanonicalField]
) -> str:
    """
    Join selected values with ``|`` in the fixed global field order.

    The caller's selection order has no effect on the result.
    """
    selected_set = set(selected)
    return IDENTITY_SEPARATOR.join(
        normalized.get(field, "") for field in HASH_FIELD_ORDER if field in selected_set
    )


def build_sort_input(
    normalized: NormalizedRow, selected: Iterable[CanonicalField]
) -> str:
    """Compact, key-sorted JSON of the selected normalized values."""
    selected_set = set(selected)
    payload = {
        field.value: value
        for field, value in normalized.items()
        if field in selected_set
    }
    return json.dumps(
        payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )


class HashCalculator(LoggerMixin):
    """
    Computes row and node hashes through an async digest primitive.

    Every digest call is a suspension point; when a guard is given it is
    checked after each one so superseded runs stop immediately.
    """

    def __init__(self, digest: Digest | None = None) -> None:
        """
        Initialize the hash calculator.

        Args:
            digest: Async digest primitive, SHA-256 via hashlib by default
        """
        self._digest = digest or sha256_digest

    async def digest(self, data: bytes, guard: RunGuard | None = None) -> bytes:
        """
        Run the digest primitive once.

        Raises:
            DigestError: If the primitive fails
            RunSuperseded: If the guard's run went stale while waiting
        """
        try:
            result = await self._digest(data)
        except Exception as e:
            self.log.error("digest_failed", error=str(e))
            raise DigestError(f"digest primitive failed: {e}") from e
        if guard is not None:
            guard.ensure_current()
        return result

    async def sha256_hex(self, text: str, guard: RunGuard | None = None) -> str:
        """Hex SHA-256 of the UTF-8 bytes of text."""
        return (await self.digest(encode_utf8(text), guard)).hex()

    async def combine(
        self, left_hex: str, right_hex: str, guard: RunGuard | None = None
    ) -> str:
        """
        Parent hash of two nodes: SHA-256(SHA-256(left || right)).

        Operates on the decoded hash bytes, not their hex text.
        """
        first = await self.digest(bytes.fromhex(left_hex) + bytes.fromhex(right_hex), guard)
        return (await self.digest(first, guard)).hex()

    async def hash_row(
        self,
        normalized: NormalizedRow,
        selected: Iterable[CanonicalField],
        title: str | None = None,
        guard: RunGuard | None = None,
    ) -> RowDigest:
        """
        Calculate the identity and sort hashes for a row.

        Args:
            normalized: Normalized values of the selected fields
            selected: Fields selected for this run
            title: Display title carried on the leaf
            guard: Staleness check run after each digest

        Returns:
            RowDigest for the row
        """
        selected = list(selected)
        identity_hash = await self.sha256_hex(
            build_identity_input(normalized, selected), guard
        )
        sort_hash = await self.sha256_hex(build_sort_input(normalized, selected), guard)
        return RowDigest(identity_hash=identity_hash, sort_hash=sort_hash, title=title)
