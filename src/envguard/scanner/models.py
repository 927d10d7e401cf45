"""Scanner data models — usages, secret findings, framework warnings and reports."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class AccessPattern(enum.Enum):
    """Syntactic convention used to read an environment variable."""

    PROCESS_ENV = "process.env"
    IMPORT_META_ENV = "import.meta.env"
    SVELTEKIT = "sveltekit"


class Severity(enum.Enum):
    """Secret finding severity level."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SecretKind(enum.Enum):
    """How a secret was detected."""

    PATTERN = "pattern"
    ENTROPY = "entropy"


class Framework(enum.Enum):
    """Frameworks with dedicated environment rules."""

    NEXTJS = "nextjs"
    SVELTEKIT = "sveltekit"
    ANGULAR = "angular"
    T3ENV = "t3-env"
    UNKNOWN = "unknown"


class Category(enum.Enum):
    """Check categories that can be selected with ``--only``."""

    MISSING = "missing"
    EXTRA = "extra"
    EMPTY = "empty"
    MISMATCH = "mismatch"
    DUPLICATE = "duplicate"
    GITIGNORE = "gitignore"
    NAMING = "naming"
    EXPIRATION = "expiration"


ALL_CATEGORIES: frozenset[Category] = frozenset(Category)


@dataclass(frozen=True)
class EnvUsage:
    """One observed read of an environment variable."""

    variable: str
    file: str
    line: int
    column: int
    pattern: AccessPattern
    context: str
    imports: tuple[str, ...] = ()
    is_logged: bool = False


@dataclass(frozen=True)
class SecretFinding:
    """A potential hardcoded secret in source code."""

    file: str
    line: int
    kind: SecretKind
    message: str
    snippet: str
    severity: Severity


@dataclass(frozen=True)
class FrameworkWarning:
    """A framework-specific misuse of an environment variable."""

    variable: str
    reason: str
    file: str
    line: int
    framework: Framework


@dataclass(frozen=True)
class Duplicate:
    """A key assigned more than once in a declaration file."""

    key: str
    count: int


@dataclass(frozen=True)
class NamingWarning:
    """Two keys that only differ by underscores or case."""

    key1: str
    key2: str
    suggestion: str


@dataclass(frozen=True)
class UppercaseWarning:
    """A variable name that is not UPPER_SNAKE_CASE."""

    key: str
    suggestion: str


@dataclass(frozen=True)
class ExpireWarning:
    """A declared key annotated with an expiration date."""

    key: str
    date: str
    days_left: int


@dataclass(frozen=True)
class ExampleSecretWarning:
    """A value in an example file that looks like a real secret."""

    key: str
    value: str
    reason: str
    severity: Severity


@dataclass(frozen=True)
class ComparisonError:
    """A declaration file that could not be read during a comparison.

    ``should_exit`` signals that the caller should stop with a failure (CI
    mode); the analysis itself never exits.
    """

    message: str
    should_exit: bool = False


@dataclass
class ScanStats:
    """Summary statistics for a scan."""

    files_scanned: int = 0
    files_skipped: int = 0
    total_usages: int = 0
    unique_variables: int = 0
    warnings_count: int = 0
    duration: float = 0.0


@dataclass
class ScanReport:
    """Aggregate result of a codebase scan."""

    directory: str
    used: list[EnvUsage] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    unused: list[str] = field(default_factory=list)
    secrets: list[SecretFinding] = field(default_factory=list)
    framework: Framework = Framework.UNKNOWN
    framework_warnings: list[FrameworkWarning] = field(default_factory=list)
    t3env_warnings: list[FrameworkWarning] = field(default_factory=list)
    duplicates_env: list[Duplicate] = field(default_factory=list)
    duplicates_example: list[Duplicate] = field(default_factory=list)
    naming_warnings: list[NamingWarning] = field(default_factory=list)
    uppercase_warnings: list[UppercaseWarning] = field(default_factory=list)
    expire_warnings: list[ExpireWarning] = field(default_factory=list)
    example_warnings: list[ExampleSecretWarning] = field(default_factory=list)
    compared_against: str = ""
    total_env_variables: int = 0
    has_csp: bool = False
    error: ComparisonError | None = None
    stats: ScanStats = field(default_factory=ScanStats)

    @property
    def logged(self) -> list[EnvUsage]:
        """Usages that sit inside a console/log call."""
        return [u for u in self.used if u.is_logged]

    @property
    def unique_variables(self) -> list[str]:
        return sorted({u.variable for u in self.used})
