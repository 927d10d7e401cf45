"""Static analysis of environment variable usage and hardcoded secrets."""

from envguard.scanner.engine import ScanEngine
from envguard.scanner.models import EnvUsage, ScanReport, SecretFinding

__all__ = ["EnvUsage", "ScanEngine", "ScanReport", "SecretFinding"]
