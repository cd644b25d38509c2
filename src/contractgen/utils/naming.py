"""
Identifier casing for contractgen.

Contract names arrive in whatever style the contract author used
(``mealPlan``, ``meal_plan``, ``Meal-Plan``). Emitters re-case them with the
target's naming convention; two names that are distinct in the contract can
collide after re-casing (``userId`` and ``UserID`` both become ``userId``),
which is handled by :func:`disambiguate`.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Tuple

from contractgen.constants import (
    NAMING_CAMEL,
    NAMING_PASCAL,
    NAMING_PRESERVE,
    NAMING_SNAKE,
    NAMING_UPPER_SNAKE,
)

# Acronym runs ("HTTP" in "HTTPServer"), capitalized/lower words, digit runs
WORD_RX = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")
INVALID_IDENT_RX = re.compile(r"[^0-9A-Za-z_]+")


def split_words(name: str) -> List[str]:
    """
    Split an identifier into words regardless of its casing style.

    Example:
        >>> split_words("HTTPServerURL")
        ['HTTP', 'Server', 'URL']
        >>> split_words("meal_plan-v2")
        ['meal', 'plan', 'v', '2']
    """
    return WORD_RX.findall(name or "")


def canonical_identifier(name: str) -> str:
    """
    Raw canonical identifier, before any target casing.

    Characters that are not valid in identifiers collapse to ``_``; case is
    preserved.

    Example:
        >>> canonical_identifier("meal-plan")
        'meal_plan'
        >>> canonical_identifier("Meal Plan!")
        'Meal_Plan'
    """
    cleaned = INVALID_IDENT_RX.sub("_", (name or "").strip()).strip("_")
    return cleaned or "_"


def _guard_leading_digit(ident: str) -> str:
    if not ident:
        return "_"
    if ident[0].isdigit():
        return f"_{ident}"
    return ident


def to_pascal(name: str) -> str:
    return _guard_leading_digit("".join(w[:1].upper() + w[1:].lower() for w in split_words(name)))


def to_camel(name: str) -> str:
    words = split_words(name)
    if not words:
        return "_"
    head = words[0].lower()
    tail = "".join(w[:1].upper() + w[1:].lower() for w in words[1:])
    return _guard_leading_digit(head + tail)


def to_snake(name: str) -> str:
    return _guard_leading_digit("_".join(w.lower() for w in split_words(name)))


def to_upper_snake(name: str) -> str:
    return _guard_leading_digit("_".join(w.upper() for w in split_words(name)))


def to_kebab(name: str) -> str:
    return "-".join(w.lower() for w in split_words(name)) or "_"


def apply_convention(name: str, convention: str) -> str:
    """
    Re-case ``name`` with a TargetConfig naming convention.

    Example:
        >>> apply_convention("meal_type", "camelCase")
        'mealType'
        >>> apply_convention("mealType", "snake_case")
        'meal_type'
    """
    if convention == NAMING_CAMEL:
        return to_camel(name)
    if convention == NAMING_SNAKE:
        return to_snake(name)
    if convention == NAMING_PASCAL:
        return to_pascal(name)
    if convention == NAMING_UPPER_SNAKE:
        return to_upper_snake(name)
    if convention == NAMING_PRESERVE:
        return _guard_leading_digit(canonical_identifier(name))
    raise ValueError(f"Unknown naming convention: {convention}")


def disambiguate(
    candidates: Iterable[Tuple[str, str]],
    reserved: Iterable[str] = (),
) -> Tuple[Dict[str, str], List[Tuple[str, str, str]]]:
    """
    Make re-cased identifiers unique.

    Candidates are ``(source_name, recased)`` pairs. Sources are visited in
    sorted order; the first source to claim an identifier keeps it, later
    ones get numeric suffixes ``2``, ``3``, ... The result does not depend on
    declaration order. Identifiers in ``reserved`` are never handed out.
    Claiming one counts as a collision.

    Returns:
        Tuple of (source_name -> unique identifier, collisions) where each
        collision is ``(source_name, recased, assigned)``.

    Example:
        >>> names, clashes = disambiguate([("userId", "userId"), ("UserID", "userId")])
        >>> names["UserID"], names["userId"]
        ('userId', 'userId2')
    """
    assigned: Dict[str, str] = {}
    taken = set(reserved)
    collisions: List[Tuple[str, str, str]] = []
    for source, recased in sorted(candidates):
        unique = recased
        suffix = 2
        while unique in taken:
            unique = f"{recased}{suffix}"
            suffix += 1
        if unique != recased:
            collisions.append((source, recased, unique))
        taken.add(unique)
        assigned[source] = unique
    return assigned, collisions


__all__ = [
    "split_words",
    "canonical_identifier",
    "to_pascal",
    "to_camel",
    "to_snake",
    "to_upper_snake",
    "to_kebab",
    "apply_convention",
    "disambiguate",
]
