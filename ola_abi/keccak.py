"""
Keccak-256 (pre-standard SHA-3) for function and error selectors.

Provided by PyCryptodome (``Crypto.Hash.keccak``). This is the byte-oriented
hash domain; event topics use the field-oriented Poseidon sponge in
``ola_abi.poseidon`` instead.
"""

from __future__ import annotations

from Crypto.Hash import keccak as _keccak

__all__ = ["keccak256", "keccak256_hex", "selector"]


def keccak256(data: bytes | bytearray | memoryview) -> bytes:
    """Keccak-256 digest (32 bytes) of ``data``."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("keccak256 expects bytes-like input")
    h = _keccak.new(digest_bits=256)
    h.update(bytes(data))
    return h.digest()


def keccak256_hex(data: bytes | bytearray | memoryview) -> str:
    return "0x" + keccak256(data).hex()


def selector(signature: str) -> int:
    """
    Selector of a canonical signature: the first 4 digest bytes read as a
    little-endian u32, widened to a word.
    """
    digest = keccak256(signature.encode("utf-8"))
    return int.from_bytes(digest[:4], "little")
