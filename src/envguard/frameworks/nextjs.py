"""Next.js rules — public/server boundaries for process.env variables."""

from __future__ import annotations

import re

from envguard.frameworks.rules import FrameworkRule, UsageContext, is_sensitive
from envguard.scanner.models import AccessPattern

PUBLIC_PREFIX = "NEXT_PUBLIC_"

# Client directive lookup is limited to the top of the file
_DIRECTIVE_LINES = 10

_QUOTED_DIRECTIVE = re.compile(r"['\"]use client['\"]")
_BARE_DIRECTIVE = re.compile(r"^use client;?$", re.MULTILINE)

_SERVER_SUFFIXES = (
    ".server.ts",
    ".server.tsx",
    ".server.js",
    ".server.jsx",
    "middleware.ts",
    "middleware.js",
)


def is_server_only_file(ctx: UsageContext) -> bool:
    path = ctx.rooted
    return (
        "/app/api/" in path
        or "/pages/api/" in path
        or path.endswith(_SERVER_SUFFIXES)
        or "/route.ts" in path
        or "/route.js" in path
    )


def is_client_file(ctx: UsageContext) -> bool:
    """Client boundary from the file's directive or, failing that, the usage line."""
    if ctx.file_text:
        head = "\n".join(ctx.file_text.split("\n")[:_DIRECTIVE_LINES])
        if _QUOTED_DIRECTIVE.search(head) or _BARE_DIRECTIVE.search(head):
            return True
    return "use client" in ctx.usage.context


RULES: tuple[FrameworkRule, ...] = (
    FrameworkRule(
        name="public-in-server-file",
        applies=lambda ctx: is_server_only_file(ctx) and ctx.variable.startswith(PUBLIC_PREFIX),
        reason="NEXT_PUBLIC_ variable used in server-only file",
    ),
    FrameworkRule(
        name="private-in-client-file",
        applies=lambda ctx: is_client_file(ctx) and not ctx.variable.startswith(PUBLIC_PREFIX),
        reason="Server-only variable accessed from client code",
    ),
    FrameworkRule(
        name="vite-syntax",
        applies=lambda ctx: ctx.usage.pattern is AccessPattern.IMPORT_META_ENV,
        reason="Next.js uses process.env, not import.meta.env (Vite syntax)",
    ),
    FrameworkRule(
        name="sensitive-public",
        applies=lambda ctx: ctx.variable.startswith(PUBLIC_PREFIX) and is_sensitive(ctx.variable),
        reason="Sensitive data marked as public",
    ),
)
