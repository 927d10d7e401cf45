"""Naming checks — inconsistent spellings and non UPPER_SNAKE_CASE keys."""

from __future__ import annotations

import re
from collections.abc import Iterable
from itertools import combinations

from envguard.scanner.models import NamingWarning, UppercaseWarning

_UPPER_SNAKE = re.compile(r"^[A-Z0-9_]+$")


def to_upper_snake_case(name: str) -> str:
    """Convert camelCase, kebab-case or spaced names to UPPER_SNAKE_CASE."""
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    name = re.sub(r"[-\s]+", "_", name)
    return name.upper()


def canonical_key(key: str) -> str:
    return key.replace("_", "").upper()


def _suggest(key1: str, key2: str) -> str:
    underscored = [k for k in (key1, key2) if "_" in k]
    for key in underscored:
        if key == key.upper():
            return key
    if underscored:
        return underscored[0].upper()
    return key1.upper()


def detect_inconsistent_naming(keys: Iterable[str]) -> list[NamingWarning]:
    """Report keys that collide once underscores and case are ignored.

    Keys are grouped by canonical form; every pair of distinct raw spellings
    in a group yields one warning, in first-seen order.
    """
    groups: dict[str, list[str]] = {}
    for key in keys:
        if not key:
            continue
        spellings = groups.setdefault(canonical_key(key), [])
        if key not in spellings:
            spellings.append(key)

    warnings: list[NamingWarning] = []
    for spellings in groups.values():
        for key1, key2 in combinations(spellings, 2):
            warnings.append(NamingWarning(key1=key1, key2=key2, suggestion=_suggest(key1, key2)))
    return warnings


def detect_uppercase_keys(keys: Iterable[str]) -> list[UppercaseWarning]:
    """Flag names that are not UPPER_SNAKE_CASE, once per name."""
    warnings: list[UppercaseWarning] = []
    for key in dict.fromkeys(keys):
        if not _UPPER_SNAKE.match(key):
            warnings.append(UppercaseWarning(key=key, suggestion=to_upper_snake_case(key)))
    return warnings
