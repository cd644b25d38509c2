"""
Utility modules for contractgen.

Submodules:
    text: Hashing, semver validation, line rendering helpers
    naming: Identifier splitting, re-casing and collision disambiguation
"""

from contractgen.utils.text import (
    stable_hash,
    canonical_json,
    digest_files,
    is_semver,
)
from contractgen.utils.naming import (
    split_words,
    canonical_identifier,
    apply_convention,
    disambiguate,
)

__all__ = [
    # Text utilities
    "stable_hash",
    "canonical_json",
    "digest_files",
    "is_semver",
    # Naming utilities
    "split_words",
    "canonical_identifier",
    "apply_convention",
    "disambiguate",
]
