"""Framework rule tables — first-match-wins evaluation of usage rules."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from envguard.scanner.models import EnvUsage, Framework, FrameworkWarning

SENSITIVE_KEYWORDS = ("SECRET", "PRIVATE", "KEY", "TOKEN", "PASSWORD")


@dataclass(frozen=True)
class UsageContext:
    """A usage plus what rules need to know about the file it lives in."""

    usage: EnvUsage
    file: str
    file_text: str | None = None

    @property
    def variable(self) -> str:
        return self.usage.variable

    @property
    def rooted(self) -> str:
        """File path with a leading slash, so segment checks match at the root."""
        return self.file if self.file.startswith("/") else f"/{self.file}"


@dataclass(frozen=True)
class FrameworkRule:
    """A single rule: when ``applies`` holds, the usage gets ``reason``."""

    name: str
    applies: Callable[[UsageContext], bool]
    reason: str


def is_sensitive(variable: str) -> bool:
    return any(word in variable for word in SENSITIVE_KEYWORDS)


def evaluate_rules(
    rules: tuple[FrameworkRule, ...],
    framework: Framework,
    usage: EnvUsage,
    file_texts: Mapping[str, str] | None = None,
) -> list[FrameworkWarning]:
    """Return the warning of the first matching rule, or nothing."""
    file = usage.file.replace("\\", "/")
    if "node_modules/" in file:
        return []

    ctx = UsageContext(
        usage=usage,
        file=file,
        file_text=file_texts.get(usage.file) if file_texts is not None else None,
    )
    for rule in rules:
        if rule.applies(ctx):
            return [
                FrameworkWarning(
                    variable=usage.variable,
                    reason=rule.reason,
                    file=file,
                    line=usage.line,
                    framework=framework,
                )
            ]
    return []
