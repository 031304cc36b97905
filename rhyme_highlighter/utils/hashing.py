"""Stable FNV-1a hashes used for color assignment and text fingerprints.

Python's built-in ``hash`` is salted per process, so anything that must stay
stable across runs (colors in particular) goes through these helpers instead.
Bump ``HASH_VERSION`` whenever the output of either function changes.
"""

from __future__ import annotations

__all__ = ["HASH_VERSION", "fnv1a_32", "fnv1a_64", "text_fingerprint"]

HASH_VERSION = 1

_FNV32_OFFSET = 0x811C9DC5
_FNV32_PRIME = 0x01000193
_FNV64_OFFSET = 0xCBF29CE484222325
_FNV64_PRIME = 0x100000001B3
_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF


def fnv1a_32(value: str) -> int:
    """Return the 32-bit FNV-1a hash of ``value`` encoded as UTF-8."""

    result = _FNV32_OFFSET
    for byte in value.encode("utf-8"):
        result ^= byte
        result = (result * _FNV32_PRIME) & _MASK32
    return result


def fnv1a_64(data: bytes) -> int:
    result = _FNV64_OFFSET
    for byte in data:
        result ^= byte
        result = (result * _FNV64_PRIME) & _MASK64
    return result


def text_fingerprint(text: str) -> int:
    """Cheap content fingerprint of a document, used for no-op detection."""

    return fnv1a_64((text or "").encode("utf-8"))
