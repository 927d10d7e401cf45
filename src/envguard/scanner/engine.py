"""Scan engine — walks a project and runs every analysis over its files."""

from __future__ import annotations

import fnmatch
import logging
import os
import time
from datetime import date
from pathlib import Path

from envguard.compare import compare_scan, determine_comparison_file
from envguard.config import EnvGuardConfig
from envguard.envfile.parser import is_ignored_key
from envguard.frameworks.detector import detect_framework
from envguard.frameworks.t3env import detect_t3env, validate_t3env
from envguard.frameworks.validator import FrameworkValidator
from envguard.scanner.csp import has_csp_in_source
from envguard.scanner.models import Framework, ScanReport, ScanStats, SecretFinding, Severity
from envguard.scanner.secrets import detect_secrets
from envguard.scanner.usage import normalize_path, scan_usages

logger = logging.getLogger(__name__)

# Source files scanned unless the config adds include globs
_SCAN_EXTENSIONS = {".js", ".ts", ".jsx", ".tsx", ".vue", ".svelte", ".mjs", ".cjs"}

# Directories to always skip
_SKIP_DIRS = {
    "node_modules",
    "dist",
    "build",
    ".next",
    ".nuxt",
    ".svelte-kit",
    "coverage",
    ".git",
    "__tests__",
    "__mocks__",
}

_TEST_FILE_MARKERS = (".test.", ".spec.")

# Max file size to scan (1 MB)
_MAX_FILE_SIZE = 1_048_576


class ScanEngine:
    """Scans a directory for environment usage and reconciles it with .env files."""

    def __init__(
        self,
        config: EnvGuardConfig | None = None,
        framework: Framework | None = None,
        today: date | None = None,
    ) -> None:
        self._config = config or EnvGuardConfig()
        self._framework = framework
        self._today = today
        self._ignore_regex = self._config.compiled_ignore_regex()

    def scan(self, directory: str | Path) -> ScanReport:
        """Scan a directory and return the aggregated report."""
        directory = Path(directory).resolve()
        start = time.time()
        config = self._config
        stats = ScanStats()
        report = ScanReport(directory=str(directory), stats=stats)
        file_texts: dict[str, str] = {}

        for file_path in self._walk(directory):
            relative = normalize_path(str(file_path.relative_to(directory)))
            try:
                content = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.debug("Skipping %s: %s", file_path, e)
                stats.files_skipped += 1
                continue

            stats.files_scanned += 1
            file_texts[relative] = content
            report.used.extend(
                u
                for u in scan_usages(content, relative)
                if not is_ignored_key(u.variable, config.ignore, self._ignore_regex)
            )
            if config.secrets:
                report.secrets.extend(self._detect_secrets(content, relative))

        report.has_csp = any(has_csp_in_source(text) for text in file_texts.values())

        framework = self._framework
        if framework is None:
            framework = detect_framework(directory).framework
        report.framework = framework
        validator = FrameworkValidator(framework)
        if validator.enabled:
            report.framework_warnings = validator.validate_all(report.used, file_texts)
        if config.t3env:
            schema = detect_t3env(directory)
            if schema is not None:
                logger.debug("t3-env schema found in %s", schema.path)
                report.t3env_warnings = validate_t3env(report.used, schema)

        comparison = determine_comparison_file(directory, config.env, config.example)
        if comparison is not None:
            report = compare_scan(report, comparison, config, directory, self._today)
        else:
            logger.debug("No declaration file found in %s", directory)

        stats.total_usages = len(report.used)
        stats.unique_variables = len(report.unique_variables)
        stats.warnings_count = _count_warnings(report)
        stats.duration = time.time() - start
        return report

    def _detect_secrets(self, content: str, relative: str) -> list[SecretFinding]:
        try:
            return detect_secrets(content, relative, self._config.ignore_urls)
        except Exception as e:
            logger.debug("Secret detection failed for %s: %s", relative, e)
            return []

    def _walk(self, directory: Path):
        """Walk directory yielding scannable files in sorted order."""
        for root, dirs, files in os.walk(directory):
            # Prune skipped directories in-place
            dirs[:] = sorted(
                d
                for d in dirs
                if d not in _SKIP_DIRS and not self._excluded(Path(root, d), directory)
            )

            for name in sorted(files):
                path = Path(root) / name
                if any(marker in name for marker in _TEST_FILE_MARKERS):
                    continue
                if not self._included(path, directory) or self._excluded(path, directory):
                    continue
                try:
                    if path.stat().st_size > _MAX_FILE_SIZE:
                        continue
                except OSError:
                    continue
                yield path

    def _included(self, path: Path, directory: Path) -> bool:
        if path.suffix.lower() in _SCAN_EXTENSIONS:
            return True
        return _matches(path, directory, self._config.include)

    def _excluded(self, path: Path, directory: Path) -> bool:
        return _matches(path, directory, self._config.exclude)


def _matches(path: Path, directory: Path, globs: list[str]) -> bool:
    if not globs:
        return False
    relative = normalize_path(str(path.relative_to(directory)))
    return any(
        fnmatch.fnmatch(relative, pattern) or fnmatch.fnmatch(path.name, pattern)
        for pattern in globs
    )


def _count_warnings(report: ScanReport) -> int:
    # Low-severity secrets are informational only
    return (
        sum(1 for s in report.secrets if s.severity is not Severity.LOW)
        + len(report.missing)
        + len(report.framework_warnings)
        + len(report.t3env_warnings)
        + len(report.duplicates_env)
        + len(report.duplicates_example)
        + len(report.naming_warnings)
        + len(report.uppercase_warnings)
        + len(report.expire_warnings)
        + len(report.example_warnings)
        + len(report.logged)
    )
