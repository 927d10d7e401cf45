"""Reconciliation of declared keys against examples and observed usages."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ValueMismatch:
    key: str
    expected: str
    actual: str


@dataclass(frozen=True)
class EnvDiff:
    """Differences between a declaration file and its example."""

    missing: list[str] = field(default_factory=list)
    extra: list[str] = field(default_factory=list)
    value_mismatches: list[ValueMismatch] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.missing or self.extra or self.value_mismatches)


def diff_env(
    current: Mapping[str, str],
    example: Mapping[str, str],
    check_values: bool = False,
) -> EnvDiff:
    """Compare a declaration map against an example map.

    Keys are compared case-sensitively. Values are only compared when
    ``check_values`` is set, and never for keys whose example value is
    empty: an empty example value accepts anything.
    """
    missing = [k for k in example if k not in current]
    extra = [k for k in current if k not in example]

    mismatches: list[ValueMismatch] = []
    if check_values:
        for key, expected in example.items():
            if key not in current or not expected.strip():
                continue
            if current[key] != expected:
                mismatches.append(ValueMismatch(key=key, expected=expected, actual=current[key]))

    return EnvDiff(missing=missing, extra=extra, value_mismatches=mismatches)


def empty_keys(current: Mapping[str, str]) -> list[str]:
    """Keys declared without a value."""
    return [k for k, v in current.items() if not (v or "").strip()]


def compare_usage(used: Iterable[str], declared: Iterable[str]) -> tuple[list[str], list[str]]:
    """Split used and declared names into (missing, unused).

    ``missing`` keeps first-use order, ``unused`` keeps declaration order.
    """
    used_order = list(dict.fromkeys(used))
    declared_order = list(dict.fromkeys(declared))
    used_set = set(used_order)
    declared_set = set(declared_order)

    missing = [v for v in used_order if v not in declared_set]
    unused = [k for k in declared_order if k not in used_set]
    return missing, unused
