"""Check whether a declaration file is ignored by git."""

from __future__ import annotations

import enum
from pathlib import Path


class GitignoreIssue(enum.Enum):
    NO_GITIGNORE = "no-gitignore"
    NOT_IGNORED = "not-ignored"


def _candidate_patterns(env_file: str) -> set[str]:
    patterns: set[str] = set()
    for base in (env_file, f"{env_file}*", f"{env_file}.*"):
        patterns.update({base, f"/{base}", f"**/{base}"})
    return patterns


def is_env_ignored(root: str | Path, env_file: str = ".env") -> bool | None:
    """True if .gitignore covers the env file, False if not, None without a .gitignore.

    Only the common spellings (``.env``, ``/.env*``, ``**/.env.*`` ...) are
    recognized; a matching negation counts as not ignored.
    """
    gitignore = Path(root) / ".gitignore"
    if not gitignore.is_file():
        return None

    lines = [
        line.strip()
        for line in gitignore.read_text(encoding="utf-8").splitlines()
        if line.strip() and not line.strip().startswith("#")
    ]
    candidates = _candidate_patterns(env_file)
    if any(line.startswith("!") and line[1:] in candidates for line in lines):
        return False
    return any(line in candidates for line in lines)


def check_gitignore(root: str | Path, env_file: str = ".env") -> GitignoreIssue | None:
    """Report a gitignore problem for an existing env file inside a git repository."""
    root = Path(root)
    if not (root / env_file).exists() or not (root / ".git").exists():
        return None
    ignored = is_env_ignored(root, env_file)
    if ignored is None:
        return GitignoreIssue.NO_GITIGNORE
    if not ignored:
        return GitignoreIssue.NOT_IGNORED
    return None
