"""Comparison of declaration files against scans and against their examples."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from pathlib import Path

from envguard.config import DEFAULT_ENV_FILE, DEFAULT_EXAMPLE_FILE, EnvGuardConfig
from envguard.envfile.diff import ValueMismatch, compare_usage, diff_env, empty_keys
from envguard.envfile.duplicates import find_duplicate_keys
from envguard.envfile.expiration import detect_expirations
from envguard.envfile.gitignore import GitignoreIssue, check_gitignore
from envguard.envfile.naming import detect_inconsistent_naming, detect_uppercase_keys
from envguard.envfile.parser import filter_ignored_keys, is_ignored_key, parse_env_text
from envguard.scanner.models import (
    Category,
    ComparisonError,
    Duplicate,
    ExpireWarning,
    NamingWarning,
    ScanReport,
    UppercaseWarning,
)
from envguard.scanner.secrets import detect_example_secrets

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComparisonFile:
    path: Path
    name: str


def determine_comparison_file(
    root: str | Path,
    env: str | None = None,
    example: str | None = None,
) -> ComparisonFile | None:
    """Pick the declaration file a scan is compared against.

    Explicit ``env`` / ``example`` paths win (in that order); otherwise
    ``.env`` and then ``.env.example`` in the project root.
    """
    root = Path(root)
    for candidate in (env, example):
        if candidate:
            path = (root / candidate).resolve()
            if path.is_file():
                return ComparisonFile(path=path, name=Path(candidate).name)
    for name in (DEFAULT_ENV_FILE, DEFAULT_EXAMPLE_FILE):
        path = root / name
        if path.is_file():
            return ComparisonFile(path=path.resolve(), name=name)
    return None


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _keep(duplicates: list[Duplicate], config: EnvGuardConfig) -> list[Duplicate]:
    regex = config.compiled_ignore_regex()
    return [d for d in duplicates if not is_ignored_key(d.key, config.ignore, regex)]


def compare_scan(
    report: ScanReport,
    comparison: ComparisonFile,
    config: EnvGuardConfig,
    root: str | Path,
    today: date | None = None,
) -> ScanReport:
    """Reconcile a scan with a declaration file and return the completed report.

    Read failures are returned on the report as a ``ComparisonError``;
    ``should_exit`` is only set in CI mode.
    """
    categories = config.categories()
    regex = config.compiled_ignore_regex()
    example_map: dict[str, str] | None = None
    example_path = (Path(root) / (config.example or DEFAULT_EXAMPLE_FILE)).resolve()

    try:
        env_text = _read(comparison.path)
        if example_path.is_file():
            example_text = _read(example_path)
            example_map = parse_env_text(example_text)
        else:
            example_text = None
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Comparison against %s failed: %s", comparison.path, e)
        return replace(
            report,
            error=ComparisonError(
                message=f"Could not read {comparison.name}: {comparison.path} - {e}",
                should_exit=config.ci,
            ),
        )

    env_map = parse_env_text(env_text)
    env_keys = filter_ignored_keys(env_map, config.ignore, regex)
    missing, unused = compare_usage((u.variable for u in report.used), env_keys)

    uppercase: list[UppercaseWarning] = []
    if config.uppercase_keys:
        uppercase = detect_uppercase_keys(env_keys)

    dups_env: list[Duplicate] = []
    dups_example: list[Duplicate] = []
    if not config.allow_duplicates and Category.DUPLICATE in categories:
        dups_env = _keep(find_duplicate_keys(env_text), config)
        if example_text is not None and example_path != comparison.path:
            dups_example = _keep(find_duplicate_keys(example_text), config)

    expire: list[ExpireWarning] = []
    if Category.EXPIRATION in categories:
        expire = detect_expirations(env_text, today)

    naming: list[NamingWarning] = []
    if Category.NAMING in categories:
        example_keys = filter_ignored_keys(example_map or {}, config.ignore, regex)
        naming = detect_inconsistent_naming([*env_keys, *example_keys])

    example_warnings = detect_example_secrets(example_map) if example_map else []

    return replace(
        report,
        missing=missing,
        unused=unused if config.show_unused else [],
        compared_against=comparison.name,
        total_env_variables=len(env_keys),
        uppercase_warnings=uppercase,
        duplicates_env=dups_env,
        duplicates_example=dups_example,
        expire_warnings=expire,
        naming_warnings=naming,
        example_warnings=example_warnings,
    )


@dataclass
class ComparisonResult:
    """Outcome of comparing one declaration file with its example."""

    env_name: str
    example_name: str
    missing: list[str] = field(default_factory=list)
    extra: list[str] = field(default_factory=list)
    empty: list[str] = field(default_factory=list)
    value_mismatches: list[ValueMismatch] = field(default_factory=list)
    duplicates_env: list[Duplicate] = field(default_factory=list)
    duplicates_example: list[Duplicate] = field(default_factory=list)
    gitignore_issue: GitignoreIssue | None = None
    naming_warnings: list[NamingWarning] = field(default_factory=list)
    expire_warnings: list[ExpireWarning] = field(default_factory=list)
    error: ComparisonError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not (
            self.missing
            or self.extra
            or self.empty
            or self.value_mismatches
            or self.duplicates_env
            or self.duplicates_example
            or self.gitignore_issue
            or self.naming_warnings
            or self.expire_warnings
        )

    def has_errors(self, strict: bool = False) -> bool:
        """Missing keys always fail; with ``strict`` every other issue does too."""
        if self.error is not None:
            return self.error.should_exit
        if self.missing:
            return True
        return strict and not self.ok


def compare_files(
    env_path: str | Path,
    example_path: str | Path,
    config: EnvGuardConfig,
    root: str | Path | None = None,
    today: date | None = None,
) -> ComparisonResult:
    """Compare a declaration file with its example, limited to the selected categories."""
    env_path = Path(env_path)
    example_path = Path(example_path)
    root = Path(root) if root is not None else env_path.parent
    categories = config.categories()
    regex = config.compiled_ignore_regex()
    result = ComparisonResult(env_name=env_path.name, example_name=example_path.name)

    try:
        env_text = _read(env_path)
        example_text = _read(example_path)
    except (OSError, UnicodeDecodeError) as e:
        result.error = ComparisonError(
            message=f"Could not compare {env_path.name} with {example_path.name}: {e}",
            should_exit=config.ci,
        )
        return result

    current = parse_env_text(env_text)
    example = parse_env_text(example_text)
    current = {k: current[k] for k in filter_ignored_keys(current, config.ignore, regex)}
    example = {k: example[k] for k in filter_ignored_keys(example, config.ignore, regex)}

    diff = diff_env(current, example, check_values=config.check_values)
    if Category.MISSING in categories:
        result.missing = diff.missing
    if Category.EXTRA in categories:
        result.extra = diff.extra
    if Category.EMPTY in categories:
        result.empty = empty_keys(current)
    if Category.MISMATCH in categories:
        result.value_mismatches = diff.value_mismatches
    if Category.DUPLICATE in categories and not config.allow_duplicates:
        result.duplicates_env = _keep(find_duplicate_keys(env_text), config)
        result.duplicates_example = _keep(find_duplicate_keys(example_text), config)
    if Category.GITIGNORE in categories:
        result.gitignore_issue = check_gitignore(root, env_path.name)
    if Category.NAMING in categories:
        result.naming_warnings = detect_inconsistent_naming([*current, *example])
    if Category.EXPIRATION in categories:
        result.expire_warnings = detect_expirations(env_text, today)

    return result
