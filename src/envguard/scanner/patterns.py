"""Regex tables for environment variable access patterns and ignore markers."""

from __future__ import annotations

import enum
import re
from collections.abc import Callable
from dataclasses import dataclass

from envguard.scanner.models import AccessPattern

VARIABLE_NAME = re.compile(r"^[A-Z_][A-Z0-9_]*$")


@dataclass(frozen=True)
class UsagePattern:
    """A usage pattern with compiled regex and an optional variable projector.

    Without a projector the first non-empty capture group is the variable.
    """

    pattern: AccessPattern
    regex: re.Pattern[str]
    extract: Callable[[re.Match[str]], list[str]] | None = None

    def variables(self, match: re.Match[str]) -> list[str]:
        if self.extract is not None:
            return self.extract(match)
        for group in match.groups():
            if group:
                return [group]
        return []


def _split_names(content: str, separator: str) -> list[str]:
    """Left-most identifier of each comma separated part, if it is a variable name."""
    names: list[str] = []
    for part in content.split(","):
        part = part.strip()
        if not part:
            continue
        key = re.split(separator, part, maxsplit=1)[0].strip()
        if VARIABLE_NAME.match(key):
            names.append(key)
    return names


def _destructured(match: re.Match[str]) -> list[str]:
    # { A, B: alias, C = "fallback" } = process.env
    return _split_names(match.group(1) or "", r"[:=]")


def _named_imports(match: re.Match[str]) -> list[str]:
    # import { A, B as b } from '$env/static/private'
    return _split_names(match.group(1) or "", r"\s+as\s+")


USAGE_PATTERNS: tuple[UsagePattern, ...] = (
    UsagePattern(
        pattern=AccessPattern.PROCESS_ENV,
        regex=re.compile(
            r"process\.env\.([A-Z_][A-Z0-9_]*)"
            r"|process\.env\[['\"]([A-Z_][A-Z0-9_]*)['\"]\]"
        ),
    ),
    UsagePattern(
        pattern=AccessPattern.PROCESS_ENV,
        regex=re.compile(r"\{([^}]*)\}\s*=\s*process\.env\b"),
        extract=_destructured,
    ),
    UsagePattern(
        pattern=AccessPattern.IMPORT_META_ENV,
        regex=re.compile(
            r"import\.meta\.env\.([A-Z_][A-Z0-9_]*)"
            r"|import\.meta\.env\[['\"]([A-Z_][A-Z0-9_]*)['\"]\]"
        ),
    ),
    UsagePattern(
        pattern=AccessPattern.SVELTEKIT,
        regex=re.compile(
            r"import\s*\{([^}]*)\}\s*from\s*['\"]\$env/static/(?:private|public)['\"]"
        ),
        extract=_named_imports,
    ),
    UsagePattern(
        pattern=AccessPattern.SVELTEKIT,
        regex=re.compile(r"(?<![.\w])env\.([A-Z_][A-Z0-9_]*)"),
    ),
    # Named imports from dynamic modules are invalid, but still a read.
    UsagePattern(
        pattern=AccessPattern.SVELTEKIT,
        regex=re.compile(
            r"import\s*\{([^}]*)\}\s*from\s*['\"]\$env/dynamic/(?:private|public)['\"]"
        ),
        extract=_named_imports,
    ),
    UsagePattern(
        pattern=AccessPattern.SVELTEKIT,
        regex=re.compile(
            r"import\s+([A-Z_][A-Z0-9_]*)\s+from\s+"
            r"['\"]\$env/(?:static|dynamic)/(?:private|public)['\"]"
        ),
    ),
)

ENV_MODULE_IMPORT = re.compile(
    r"import\s+(?:\{[^}]*\}|\w+)\s+from\s+"
    r"['\"](\$env/(?:static|dynamic)/(?:private|public))['\"]"
)

LOGGED_CALL = re.compile(r"\bconsole\.(?:log|error|warn|info|debug)\s*\(")

ENV_ACCESSOR = re.compile(
    r"\b(?:process\.env|import\.meta\.env)\b|\$env/(?:static|dynamic)/(?:public|private)\b"
)

# Line markers: "// envguard-ignore", "/* envguard ignore */", "<!-- envguard-ignore -->"
_IGNORE_MARKER = re.compile(
    r"envguard[\s-]*ignore\b(?![\s-]*(?:start|end)\b)", re.IGNORECASE
)
_IGNORE_START = re.compile(
    r"(?://|/\*|<!--)\s*envguard[\s-]*ignore[\s-]*start\b", re.IGNORECASE
)
_IGNORE_END = re.compile(
    r"(?://|/\*|<!--)\s*envguard[\s-]*ignore[\s-]*end\b", re.IGNORECASE
)


class BlockState(enum.Enum):
    """Ignore-block state while folding over the lines of one file."""

    NORMAL = "normal"
    INSIDE_IGNORE_BLOCK = "inside_ignore_block"


def has_ignore_comment(line: str) -> bool:
    """Check if a line carries an ignore marker."""
    return _IGNORE_MARKER.search(line) is not None


def ignore_block_mask(lines: list[str]) -> list[bool]:
    """Flag every line that sits inside an ignore block, markers included.

    An unterminated block runs to the end of the file.
    """
    mask: list[bool] = []
    state = BlockState.NORMAL
    for line in lines:
        if state is BlockState.NORMAL and _IGNORE_START.search(line):
            state = BlockState.INSIDE_IGNORE_BLOCK
            mask.append(True)
            continue
        if state is BlockState.INSIDE_IGNORE_BLOCK:
            if _IGNORE_END.search(line):
                state = BlockState.NORMAL
            mask.append(True)
            continue
        mask.append(False)
    return mask


def is_logged(line: str) -> bool:
    return LOGGED_CALL.search(line) is not None


def is_env_accessor(line: str) -> bool:
    return ENV_ACCESSOR.search(line) is not None
