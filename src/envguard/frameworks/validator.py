"""Framework validator — applies the rule table of the detected framework."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from envguard.frameworks import angular, nextjs, sveltekit
from envguard.frameworks.rules import FrameworkRule, evaluate_rules
from envguard.scanner.models import EnvUsage, Framework, FrameworkWarning

RULE_TABLES: dict[Framework, tuple[FrameworkRule, ...]] = {
    Framework.NEXTJS: nextjs.RULES,
    Framework.SVELTEKIT: sveltekit.RULES,
    Framework.ANGULAR: angular.RULES,
}


class FrameworkValidator:
    """Validates usages against one framework's rules. First-match-wins per usage."""

    def __init__(self, framework: Framework) -> None:
        self.framework = framework
        self._rules = RULE_TABLES.get(framework, ())

    @property
    def enabled(self) -> bool:
        return bool(self._rules)

    def validate(
        self,
        usage: EnvUsage,
        file_texts: Mapping[str, str] | None = None,
    ) -> list[FrameworkWarning]:
        """Return at most one warning for a usage."""
        if not self._rules:
            return []
        return evaluate_rules(self._rules, self.framework, usage, file_texts)

    def validate_all(
        self,
        usages: Iterable[EnvUsage],
        file_texts: Mapping[str, str] | None = None,
    ) -> list[FrameworkWarning]:
        warnings: list[FrameworkWarning] = []
        for usage in usages:
            warnings.extend(self.validate(usage, file_texts))
        return warnings
