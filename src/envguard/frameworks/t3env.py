"""t3-env rules — usages checked against a createEnv() server/client schema."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from envguard.frameworks.rules import FrameworkRule, UsageContext, evaluate_rules
from envguard.scanner.models import AccessPattern, EnvUsage, Framework, FrameworkWarning

logger = logging.getLogger(__name__)

SCHEMA_FILES = (
    "src/env.ts",
    "src/env.mjs",
    "src/env.js",
    "env.ts",
    "env.mjs",
    "env.js",
    "lib/env.ts",
    "lib/env.mjs",
    "lib/env.js",
)

_DEFINITION_SUFFIXES = ("/env.ts", "/env.mjs", "/env.js")

# One level of nested braces is enough for z.enum([...]) / .default({...}) style schemas
_SERVER_BLOCK = re.compile(r"server\s*:\s*\{([^}]*(?:\{[^}]*\}[^}]*)*)\}")
_CLIENT_BLOCK = re.compile(r"client\s*:\s*\{([^}]*(?:\{[^}]*\}[^}]*)*)\}")
_SCHEMA_KEY = re.compile(r"([A-Z_][A-Z0-9_]*)\s*:")


@dataclass(frozen=True)
class T3EnvSchema:
    server: tuple[str, ...] = ()
    client: tuple[str, ...] = ()
    path: str = ""


def parse_t3env_schema(content: str, path: str = "") -> T3EnvSchema | None:
    """Extract the server and client keys of a createEnv() call, or None."""
    server = _SERVER_BLOCK.search(content)
    client = _CLIENT_BLOCK.search(content)
    if server is None and client is None:
        return None
    return T3EnvSchema(
        server=tuple(_SCHEMA_KEY.findall(server.group(1))) if server else (),
        client=tuple(_SCHEMA_KEY.findall(client.group(1))) if client else (),
        path=path,
    )


def detect_t3env(root: str | Path) -> T3EnvSchema | None:
    """Find the first schema file that calls createEnv() and parse it."""
    root = Path(root)
    for name in SCHEMA_FILES:
        path = root / name
        if not path.is_file():
            continue
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Could not read %s: %s", path, e)
            continue
        if "createEnv" in content:
            schema = parse_t3env_schema(content, name)
            if schema is not None:
                return schema
    return None


def _is_definition_file(ctx: UsageContext) -> bool:
    return ctx.rooted.endswith(_DEFINITION_SUFFIXES)


def _is_client_context(ctx: UsageContext) -> bool:
    return "use client" in ctx.usage.context or ctx.usage.pattern is AccessPattern.IMPORT_META_ENV


def t3env_rules(schema: T3EnvSchema) -> tuple[FrameworkRule, ...]:
    """Rule table for one schema; the schema definition file itself is exempt."""
    server, client = set(schema.server), set(schema.client)
    return (
        FrameworkRule(
            name="public-prefix",
            applies=lambda ctx: not _is_definition_file(ctx)
            and ctx.variable.startswith("NEXT_PUBLIC_"),
            reason="Use the t3-env client schema instead of the NEXT_PUBLIC_ prefix",
        ),
        FrameworkRule(
            name="server-only-in-client",
            applies=lambda ctx: not _is_definition_file(ctx)
            and _is_client_context(ctx)
            and ctx.variable in server
            and ctx.variable not in client,
            reason="Server schema variable used in client code",
        ),
        FrameworkRule(
            name="not-in-schema",
            applies=lambda ctx: not _is_definition_file(ctx)
            and ctx.variable not in server
            and ctx.variable not in client,
            reason="Variable not defined in the t3-env schema",
        ),
    )


def validate_t3env(usages: Iterable[EnvUsage], schema: T3EnvSchema) -> list[FrameworkWarning]:
    """One warning per (variable, file, reason); line numbers do not split them."""
    rules = t3env_rules(schema)
    seen: set[tuple[str, str, str]] = set()
    warnings: list[FrameworkWarning] = []
    for usage in usages:
        for w in evaluate_rules(rules, Framework.T3ENV, usage):
            key = (w.variable, w.file, w.reason)
            if key not in seen:
                seen.add(key)
                warnings.append(w)
    return warnings
