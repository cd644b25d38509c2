"""
Text utilities for contractgen.

This module provides:
- Stable hashing for fingerprints and content digests
- Semantic version validation
- Small helpers for rendering generated source text
"""

import hashlib
import json
import re
from typing import Iterable, List, Mapping


# Official semver 2.0.0 grammar (semver.org)
SEMVER_RX = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


def stable_hash(parts: List[str], length: int = 16) -> str:
    """
    Generate a stable hash from a list of string parts.

    The same inputs always produce the same hash, so it is safe to embed in
    generated output.

    Args:
        parts: List of strings to hash together.
        length: Number of hex characters to return (max 64 for SHA256).

    Returns:
        Hex string of specified length.

    Example:
        >>> len(stable_hash(["Meal", "name"], length=8))
        8
    """
    combined = "|".join(parts)
    full_hash = hashlib.sha256(combined.encode("utf-8")).hexdigest()
    return full_hash[:length]


def canonical_json(payload: object) -> str:
    """Render JSON with sorted keys and fixed separators."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def digest_files(files: Mapping[str, str]) -> str:
    """sha256 over (path, content) pairs in path order."""
    h = hashlib.sha256()
    for path in sorted(files):
        h.update(path.encode("utf-8"))
        h.update(b"\0")
        h.update(files[path].encode("utf-8"))
        h.update(b"\0")
    return h.hexdigest()


def is_semver(version: str) -> bool:
    """
    Check a version string against the semver 2.0.0 grammar.

    Example:
        >>> is_semver("1.1.0")
        True
        >>> is_semver("1.1")
        False
        >>> is_semver("2.0.0-rc.1+build.5")
        True
    """
    if not isinstance(version, str):
        return False
    return SEMVER_RX.match(version) is not None


def indent(lines: Iterable[str], level: int = 1, width: int = 4) -> List[str]:
    """Indent non-empty lines by ``level`` * ``width`` spaces."""
    pad = " " * (level * width)
    return [f"{pad}{line}" if line else "" for line in lines]


def join_lines(lines: Iterable[str]) -> str:
    """Join lines with a trailing newline, the form every emitter writes."""
    return "\n".join(lines).rstrip("\n") + "\n"


def first_line(text: str) -> str:
    """First non-empty line of free text, for one-line doc comments."""
    if not text:
        return ""
    for line in text.strip().splitlines():
        if line.strip():
            return line.strip()
    return ""
