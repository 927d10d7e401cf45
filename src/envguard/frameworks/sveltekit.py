"""SvelteKit rules — $env module boundaries and accessor prefixes."""

from __future__ import annotations

import re

from envguard.frameworks.rules import FrameworkRule, UsageContext, is_sensitive
from envguard.scanner.models import AccessPattern

DYNAMIC_PRIVATE = "$env/dynamic/private"
DYNAMIC_PUBLIC = "$env/dynamic/public"
STATIC_PRIVATE = "$env/static/private"
STATIC_PUBLIC = "$env/static/public"

_ENV_MODULES = (DYNAMIC_PRIVATE, DYNAMIC_PUBLIC, STATIC_PRIVATE, STATIC_PUBLIC)

_SERVER_FILE = re.compile(r"/(?:hooks|handle)\.server\.(?:ts|js)$|/server\.(?:ts|js)$")


def is_server_file(ctx: UsageContext) -> bool:
    path = ctx.rooted
    return "/+server." in path or ".server." in path or _SERVER_FILE.search(path) is not None


def is_client_file(ctx: UsageContext) -> bool:
    path = ctx.rooted
    if ".server." in path:
        return False
    return "/hooks.client." in path or "/+page." in path or "/+layout." in path


def is_component(ctx: UsageContext) -> bool:
    return ctx.file.endswith(".svelte")


def env_modules(ctx: UsageContext) -> tuple[str, ...]:
    """Env modules a module-style usage reads from.

    The module named on the usage line wins; otherwise every env module
    imported by the file is considered.
    """
    on_line = tuple(m for m in _ENV_MODULES if m in ctx.usage.context)
    return on_line or ctx.usage.imports


def _module_usage(ctx: UsageContext, module: str) -> bool:
    return ctx.usage.pattern is AccessPattern.SVELTEKIT and module in env_modules(ctx)


def _is_process_env(ctx: UsageContext) -> bool:
    return ctx.usage.pattern is AccessPattern.PROCESS_ENV


def _public(ctx: UsageContext) -> bool:
    return ctx.variable.startswith("PUBLIC_")


RULES: tuple[FrameworkRule, ...] = (
    FrameworkRule(
        name="import-meta-without-vite-prefix",
        applies=lambda ctx: ctx.usage.pattern is AccessPattern.IMPORT_META_ENV
        and not ctx.variable.startswith("VITE_"),
        reason='Variables accessed through import.meta.env must start with "VITE_"',
    ),
    FrameworkRule(
        name="process-env-with-vite-prefix",
        applies=lambda ctx: _is_process_env(ctx) and ctx.variable.startswith("VITE_"),
        reason='Variables accessed through process.env cannot start with "VITE_"',
    ),
    FrameworkRule(
        name="process-env-in-component",
        applies=lambda ctx: _is_process_env(ctx) and is_component(ctx),
        reason="Avoid using process.env inside Svelte files, use $env/static/private or $env/static/public",
    ),
    FrameworkRule(
        name="process-env-outside-server",
        applies=lambda ctx: _is_process_env(ctx) and not is_server_file(ctx),
        reason="process.env should only be used in server files",
    ),
    FrameworkRule(
        name="dynamic-private-in-client",
        applies=lambda ctx: _module_usage(ctx, DYNAMIC_PRIVATE)
        and (is_component(ctx) or is_client_file(ctx)),
        reason="$env/dynamic/private cannot be used in client-side code",
    ),
    FrameworkRule(
        name="dynamic-private-public-prefix",
        applies=lambda ctx: _module_usage(ctx, DYNAMIC_PRIVATE) and _public(ctx),
        reason='$env/dynamic/private variables must not start with "PUBLIC_"',
    ),
    FrameworkRule(
        name="dynamic-public-without-prefix",
        applies=lambda ctx: _module_usage(ctx, DYNAMIC_PUBLIC) and not _public(ctx),
        reason='$env/dynamic/public variables must start with "PUBLIC_"',
    ),
    FrameworkRule(
        name="static-private-public-prefix",
        applies=lambda ctx: _module_usage(ctx, STATIC_PRIVATE) and _public(ctx),
        reason='$env/static/private variables must not start with "PUBLIC_"',
    ),
    FrameworkRule(
        name="static-private-in-client",
        applies=lambda ctx: _module_usage(ctx, STATIC_PRIVATE)
        and (is_component(ctx) or is_client_file(ctx)),
        reason="$env/static/private variables cannot be used in client-side code",
    ),
    FrameworkRule(
        name="static-public-without-prefix",
        applies=lambda ctx: _module_usage(ctx, STATIC_PUBLIC) and not _public(ctx),
        reason='$env/static/public variables must start with "PUBLIC_"',
    ),
    FrameworkRule(
        name="sensitive-public",
        applies=lambda ctx: (_public(ctx) or ctx.variable.startswith("VITE_"))
        and is_sensitive(ctx.variable),
        reason="Potential sensitive environment variable exposed to the browser",
    ),
)
