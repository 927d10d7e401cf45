"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from envguard.scanner.models import AccessPattern, EnvUsage


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_project(fixtures_dir: Path) -> Path:
    return fixtures_dir / "sample_project"


@pytest.fixture
def make_usage():
    """Factory for usages with sensible defaults."""

    def _make(
        variable: str,
        file: str = "src/index.ts",
        pattern: AccessPattern = AccessPattern.PROCESS_ENV,
        context: str = "",
        imports: tuple[str, ...] = (),
        line: int = 1,
    ) -> EnvUsage:
        return EnvUsage(
            variable=variable,
            file=file,
            line=line,
            column=1,
            pattern=pattern,
            context=context,
            imports=imports,
        )

    return _make


@pytest.fixture
def write_project(tmp_path: Path):
    """Write a mapping of relative paths to contents under tmp_path."""

    def _write(files: dict[str, str]) -> Path:
        for name, content in files.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _write
