"""Duplicate key detection in raw declaration text."""

from __future__ import annotations

from collections import Counter
from pathlib import Path

from envguard.envfile.parser import iter_assignments
from envguard.scanner.models import Duplicate


def find_duplicate_keys(text: str) -> list[Duplicate]:
    """Keys assigned more than once, with their total occurrence count.

    Every repeated key is reported, whether or not the repeated values are
    identical.
    """
    counts = Counter(key for key, _ in iter_assignments(text))
    return [Duplicate(key=key, count=count) for key, count in counts.items() if count > 1]


def find_duplicate_keys_in_file(path: str | Path) -> list[Duplicate]:
    path = Path(path)
    if not path.is_file():
        return []
    return find_duplicate_keys(path.read_text(encoding="utf-8"))


def duplicate_contribution(duplicates: list[Duplicate]) -> int:
    """Number of redundant assignments (each key's count minus one)."""
    return sum(d.count - 1 for d in duplicates)
