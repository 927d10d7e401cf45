"""Pattern scanner — extracts environment variable usages from source text."""

from __future__ import annotations

import bisect

from envguard.scanner.models import EnvUsage
from envguard.scanner.patterns import (
    ENV_MODULE_IMPORT,
    USAGE_PATTERNS,
    UsagePattern,
    has_ignore_comment,
    ignore_block_mask,
    is_logged,
)


def normalize_path(path: str) -> str:
    """Forward-slash normalize a path for reporting."""
    return path.replace("\\", "/")


def scan_usages(
    content: str,
    file_path: str,
    patterns: tuple[UsagePattern, ...] = USAGE_PATTERNS,
) -> list[EnvUsage]:
    """Scan file content for environment variable reads.

    Patterns are evaluated in table order over the whole content, so
    multi-line destructuring is matched too. Usages on a line carrying an
    ignore marker, right below one, or inside an ignore block are dropped.
    """
    file_path = normalize_path(file_path)
    lines = content.split("\n")
    line_starts = [0]
    for line in lines[:-1]:
        line_starts.append(line_starts[-1] + len(line) + 1)
    in_block = ignore_block_mask(lines)

    imports = tuple(m.group(1) for m in ENV_MODULE_IMPORT.finditer(content))

    usages: list[EnvUsage] = []
    for pattern in patterns:
        for match in pattern.regex.finditer(content):
            index = bisect.bisect_right(line_starts, match.start()) - 1
            context = lines[index].rstrip("\r")
            previous = lines[index - 1] if index > 0 else ""

            if in_block[index] or has_ignore_comment(context) or has_ignore_comment(previous):
                continue

            for variable in pattern.variables(match):
                usages.append(
                    EnvUsage(
                        variable=variable,
                        file=file_path,
                        line=index + 1,
                        column=match.start() - line_starts[index] + 1,
                        pattern=pattern.pattern,
                        context=context,
                        imports=imports,
                        is_logged=is_logged(context),
                    )
                )

    return usages
