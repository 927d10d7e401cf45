"""Angular rules — process.env in components and client-side prefixes."""

from __future__ import annotations

from envguard.frameworks.rules import FrameworkRule
from envguard.scanner.models import AccessPattern

RULES: tuple[FrameworkRule, ...] = (
    FrameworkRule(
        name="process-env-in-component",
        applies=lambda ctx: ctx.usage.pattern is AccessPattern.PROCESS_ENV
        and "app" in ctx.file
        and ctx.file.endswith(".component.ts"),
        reason="Avoid using process.env directly in Angular components",
    ),
    FrameworkRule(
        name="client-prefix",
        applies=lambda ctx: ctx.usage.pattern is AccessPattern.PROCESS_ENV
        and ctx.variable.startswith(("CLIENT_", "BROWSER_")),
        reason="Use NG_APP_ prefix for Angular client-side variables",
    ),
)
