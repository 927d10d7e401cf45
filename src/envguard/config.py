"""Project configuration — envguard.yaml merged with command line options."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from envguard.scanner.models import ALL_CATEGORIES, Category

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("envguard.yaml", ".envguard.yaml")
CONFIG_ENV_VAR = "ENVGUARD_CONFIG"

DEFAULT_ENV_FILE = ".env"
DEFAULT_EXAMPLE_FILE = ".env.example"

_LIST_FIELDS = {"ignore", "ignore_regex", "ignore_urls", "include", "exclude", "only"}


@dataclass
class EnvGuardConfig:
    """Options shared by the scan and compare commands."""

    env: str | None = None
    example: str | None = None
    ignore: list[str] = field(default_factory=list)
    ignore_regex: list[str] = field(default_factory=list)
    ignore_urls: list[str] = field(default_factory=list)
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    only: list[str] = field(default_factory=list)
    check_values: bool = False
    strict: bool = False
    ci: bool = False
    allow_duplicates: bool = False
    secrets: bool = True
    show_unused: bool = True
    uppercase_keys: bool = True
    t3env: bool = True

    def __post_init__(self) -> None:
        # Fail early on bad patterns and categories
        self.compiled_ignore_regex()
        self.categories()

    def compiled_ignore_regex(self) -> tuple[re.Pattern[str], ...]:
        compiled = []
        for pattern in self.ignore_regex:
            try:
                compiled.append(re.compile(pattern))
            except re.error as e:
                raise ValueError(f"Invalid ignore regex {pattern!r}: {e}") from e
        return tuple(compiled)

    def categories(self) -> frozenset[Category]:
        """Selected check categories; all of them when ``only`` is empty."""
        if not self.only:
            return ALL_CATEGORIES
        try:
            return frozenset(Category(c.strip().lower()) for c in self.only)
        except ValueError as e:
            allowed = ", ".join(c.value for c in Category)
            raise ValueError(f"Unknown category in --only (allowed: {allowed})") from e


def find_config_file(root: str | Path) -> Path | None:
    """Locate the config file: $ENVGUARD_CONFIG first, then the project root."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    for name in CONFIG_FILENAMES:
        candidate = Path(root) / name
        if candidate.is_file():
            return candidate
    return None


def load_config_from_string(text: str) -> dict[str, Any]:
    """Parse a YAML config document into option values."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid config YAML: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("Config YAML must be a mapping")

    known = {f.name for f in fields(EnvGuardConfig)}
    values: dict[str, Any] = {}
    for raw_key, value in data.items():
        key = str(raw_key).replace("-", "_")
        if key not in known:
            logger.warning("Unknown config option %r ignored", raw_key)
            continue
        if key in _LIST_FIELDS and isinstance(value, str):
            value = [value]
        values[key] = value
    return values


def load_config(
    root: str | Path,
    overrides: dict[str, Any] | None = None,
    path: str | Path | None = None,
) -> EnvGuardConfig:
    """Build the effective config. Command line values override file values.

    ``None`` overrides and empty list overrides do not replace file values.
    """
    config_path = Path(path) if path else find_config_file(root)
    values: dict[str, Any] = {}
    if config_path is not None:
        values = load_config_from_string(config_path.read_text(encoding="utf-8"))
        logger.debug("Loaded config from %s", config_path)

    for key, value in (overrides or {}).items():
        if value is None or (isinstance(value, (list, tuple)) and not value):
            continue
        values[key] = list(value) if isinstance(value, tuple) else value

    return EnvGuardConfig(**values)
