"""
VaultMerkle Test Helpers.

Digest doubles and reference hash functions shared by the tests.
Requires Python 3.11+.
"""

import asyncio
import hashlib


class GatedDigest:
    """SHA-256 digest whose first armed call waits until the gate opens."""

    def __init__(self, armed: bool = True) -> None:
        self.gate = asyncio.Event()
        self.blocked = asyncio.Event()
        self.armed = armed
        self.calls = 0

    async def __call__(self, data: bytes) -> bytes:
        self.calls += 1
        if self.armed:
            self.armed = False
            self.blocked.set()
            await self.gate.wait()
        return hashlib.sha256(data).digest()


class FlakyDigest:
    """SHA-256 digest that raises while ``failing`` is set."""

    def __init__(self) -> None:
        self.failing = False

    async def __call__(self, data: bytes) -> bytes:
        if self.failing:
            raise RuntimeError("crypto backend unavailable")
        return hashlib.sha256(data).digest()


def sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def combine_hex(left: str, right: str) -> str:
    """Reference parent hash: double SHA-256 over the raw child bytes."""
    first = hashlib.sha256(bytes.fromhex(left) + bytes.fromhex(right)).digest()
    return hashlib.sha256(first).hexdigest()
