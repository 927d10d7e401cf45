"""JSON shaped output for scan reports and comparisons."""

from __future__ import annotations

from typing import Any

from envguard.compare import ComparisonResult
from envguard.report.score import compute_health_score
from envguard.scanner.models import EnvUsage, Framework, ScanReport


def _usage_entry(u: EnvUsage) -> dict[str, Any]:
    return {
        "file": u.file,
        "line": u.line,
        "pattern": u.pattern.value,
        "context": u.context,
    }


def scan_report_to_dict(report: ScanReport) -> dict[str, Any]:
    """Build the JSON document for a scan. Empty sections are left out."""
    output: dict[str, Any] = {}

    if report.compared_against:
        output["comparedAgainst"] = report.compared_against
        output["totalEnvVariables"] = report.total_env_variables

    stats = report.stats
    output["stats"] = {
        "filesScanned": stats.files_scanned,
        "filesSkipped": stats.files_skipped,
        "totalUsages": stats.total_usages,
        "uniqueVariables": stats.unique_variables,
        "warningsCount": stats.warnings_count,
        "duration": round(stats.duration, 3),
    }

    if report.framework is not Framework.UNKNOWN:
        output["framework"] = report.framework.value

    if stats.files_scanned:
        output["hasCsp"] = report.has_csp

    if report.secrets:
        output["secrets"] = [
            {
                "file": s.file,
                "line": s.line,
                "kind": s.kind.value,
                "message": s.message,
                "snippet": s.snippet,
                "severity": s.severity.value,
            }
            for s in report.secrets
        ]

    if report.missing:
        by_variable: dict[str, list[EnvUsage]] = {}
        for u in report.used:
            by_variable.setdefault(u.variable, []).append(u)
        output["missing"] = [
            {
                "variable": variable,
                "usages": [_usage_entry(u) for u in by_variable.get(variable, [])],
            }
            for variable in report.missing
        ]

    if report.unused:
        output["unused"] = list(report.unused)

    if report.uppercase_warnings:
        output["uppercaseWarnings"] = [
            {"key": w.key, "suggestion": w.suggestion} for w in report.uppercase_warnings
        ]

    if report.naming_warnings:
        output["inconsistentNamingWarnings"] = [
            {"key1": w.key1, "key2": w.key2, "suggestion": w.suggestion}
            for w in report.naming_warnings
        ]

    for key, warnings in (
        ("frameworkWarnings", report.framework_warnings),
        ("t3EnvWarnings", report.t3env_warnings),
    ):
        if warnings:
            output[key] = [
                {
                    "variable": w.variable,
                    "reason": w.reason,
                    "file": w.file,
                    "line": w.line,
                    "framework": w.framework.value,
                }
                for w in warnings
            ]

    if report.duplicates_env or report.duplicates_example:
        output["duplicates"] = {
            name: [{"key": d.key, "count": d.count} for d in dups]
            for name, dups in (
                ("env", report.duplicates_env),
                ("example", report.duplicates_example),
            )
            if dups
        }

    logged = report.logged
    if logged:
        output["logged"] = [
            {"variable": u.variable, "file": u.file, "line": u.line, "context": u.context}
            for u in logged
        ]

    if report.expire_warnings:
        output["expireWarnings"] = [
            {"key": w.key, "date": w.date, "daysLeft": w.days_left}
            for w in report.expire_warnings
        ]

    if report.example_warnings:
        output["exampleWarnings"] = [
            {"key": w.key, "value": w.value, "reason": w.reason, "severity": w.severity.value}
            for w in report.example_warnings
        ]

    output["healthScore"] = compute_health_score(report)
    return output


def comparison_to_dict(result: ComparisonResult) -> dict[str, Any]:
    """Build the JSON document for ``envguard compare``."""
    output: dict[str, Any] = {
        "env": result.env_name,
        "example": result.example_name,
        "ok": result.ok,
    }
    if result.error is not None:
        output["error"] = {"message": result.error.message, "shouldExit": result.error.should_exit}
        return output
    if result.missing:
        output["missing"] = list(result.missing)
    if result.extra:
        output["extra"] = list(result.extra)
    if result.empty:
        output["empty"] = list(result.empty)
    if result.value_mismatches:
        output["valueMismatches"] = [
            {"key": m.key, "expected": m.expected, "actual": m.actual}
            for m in result.value_mismatches
        ]
    if result.duplicates_env or result.duplicates_example:
        output["duplicates"] = {
            name: [{"key": d.key, "count": d.count} for d in dups]
            for name, dups in (
                ("env", result.duplicates_env),
                ("example", result.duplicates_example),
            )
            if dups
        }
    if result.gitignore_issue is not None:
        output["gitignoreIssue"] = {"reason": result.gitignore_issue.value}
    if result.naming_warnings:
        output["inconsistentNamingWarnings"] = [
            {"key1": w.key1, "key2": w.key2, "suggestion": w.suggestion}
            for w in result.naming_warnings
        ]
    if result.expire_warnings:
        output["expireWarnings"] = [
            {"key": w.key, "date": w.date, "daysLeft": w.days_left}
            for w in result.expire_warnings
        ]
    return output
