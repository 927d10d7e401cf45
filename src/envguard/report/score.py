"""Health score — a 0-100 summary of every finding in a scan report."""

from __future__ import annotations

from envguard.envfile.duplicates import duplicate_contribution
from envguard.scanner.models import ScanReport, Severity

MAX_SCORE = 100

# Penalty per finding
SECRET_PENALTIES = {
    Severity.HIGH: 20,
    Severity.MEDIUM: 10,
    Severity.LOW: 0,
}
MISSING_PENALTY = 20
LOGGED_PENALTY = 10
EXAMPLE_SECRET_PENALTY = 10
FRAMEWORK_PENALTY = 5
EXPIRATION_PENALTY = 5
NAMING_PENALTY = 3
UPPERCASE_PENALTY = 2
UNUSED_PENALTY = 1
DUPLICATE_PENALTY = 1


def score_penalties(report: ScanReport) -> dict[str, int]:
    """Penalty per category; every value is non-negative."""
    return {
        "secrets": sum(SECRET_PENALTIES[s.severity] for s in report.secrets),
        "missing": len(report.missing) * MISSING_PENALTY,
        "logged": len(report.logged) * LOGGED_PENALTY,
        "example_secrets": len(report.example_warnings) * EXAMPLE_SECRET_PENALTY,
        "framework": (len(report.framework_warnings) + len(report.t3env_warnings)) * FRAMEWORK_PENALTY,
        "expiration": len(report.expire_warnings) * EXPIRATION_PENALTY,
        "naming": len(report.naming_warnings) * NAMING_PENALTY,
        "uppercase": len(report.uppercase_warnings) * UPPERCASE_PENALTY,
        "unused": len(report.unused) * UNUSED_PENALTY,
        "duplicates": (
            duplicate_contribution(report.duplicates_env)
            + duplicate_contribution(report.duplicates_example)
        )
        * DUPLICATE_PENALTY,
    }


def compute_health_score(report: ScanReport) -> int:
    """Score a report from 100 down, floored at 0."""
    return max(0, MAX_SCORE - sum(score_penalties(report).values()))
