"""Parse KEY=VALUE declaration files."""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path


def iter_assignments(text: str) -> Iterable[tuple[str, str]]:
    """Yield (key, value) for every assignment line, in file order.

    Blank lines, ``#`` comments and lines without a key before the first
    ``=`` are skipped. The value is the rest of the line with surrounding
    whitespace removed; quotes and inline comments are kept verbatim.
    """
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        yield key, value.strip()


def parse_env_text(text: str) -> dict[str, str]:
    """Parse declaration text into a mapping. The last assignment of a key wins."""
    result: dict[str, str] = {}
    for key, value in iter_assignments(text):
        result[key] = value
    return result


def parse_env_file(path: str | Path) -> dict[str, str]:
    return parse_env_text(Path(path).read_text(encoding="utf-8"))


def is_ignored_key(key: str, ignore: Iterable[str], ignore_regex: Iterable[re.Pattern[str]]) -> bool:
    return key in set(ignore) or any(rx.search(key) for rx in ignore_regex)


def filter_ignored_keys(
    keys: Iterable[str],
    ignore: Iterable[str] = (),
    ignore_regex: Iterable[re.Pattern[str]] = (),
) -> list[str]:
    """Drop keys listed in ``ignore`` or matching any of ``ignore_regex``."""
    ignore = set(ignore)
    ignore_regex = tuple(ignore_regex)
    return [k for k in keys if not is_ignored_key(k, ignore, ignore_regex)]
