"""Voter address canonicalisation."""

import re

from votecore.errors import InvalidArgument

# Ethereum-style account address, lower-cased
DEFAULT_ADDRESS_PATTERN = r"^0x[0-9a-f]{40}$"

# Used to find addresses embedded in free text (voter rolls)
ADDRESS_SEARCH = re.compile(r"\b0x[0-9a-fA-F]{40}\b")

_compiled: dict[str, re.Pattern] = {}


def _pattern(pattern: str | None) -> re.Pattern:
    pattern = pattern or DEFAULT_ADDRESS_PATTERN
    if pattern not in _compiled:
        _compiled[pattern] = re.compile(pattern)
    return _compiled[pattern]


def try_canonicalize(address, pattern: str | None = None) -> str | None:
    """Return the canonical form of an address, or None if it is malformed.

    Canonical form is the stripped, lower-cased string. It must match the
    address pattern after folding, so ``0xABC...`` and ``0xabc...`` are the
    same voter.
    """
    if not isinstance(address, str):
        return None
    folded = address.strip().lower()
    if not _pattern(pattern).match(folded):
        return None
    return folded


def canonicalize_address(address, pattern: str | None = None) -> str:
    """Return the canonical form of an address.

    Raises:
        InvalidArgument: If the address is not a string or does not match
            the address pattern.
    """
    canonical = try_canonicalize(address, pattern)
    if canonical is None:
        raise InvalidArgument(f"malformed address: {address!r}")
    return canonical


def find_addresses(text: str) -> list[str]:
    """Find all addresses in free text, canonicalised, first occurrence order."""
    return list(dict.fromkeys(m.group(0).lower() for m in ADDRESS_SEARCH.finditer(text)))
