"""Shared option handling for the CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click

from envguard.config import EnvGuardConfig, load_config


def split_values(values: tuple[str, ...]) -> list[str]:
    """Flatten repeated and comma separated option values."""
    out: list[str] = []
    for value in values:
        out.extend(part.strip() for part in value.split(",") if part.strip())
    return out


def build_config(ctx: click.Context, root: str | Path, overrides: dict[str, Any]) -> EnvGuardConfig:
    """Load the project config with command line overrides applied."""
    config_path = (ctx.obj or {}).get("config_path")
    try:
        return load_config(root, overrides, path=config_path)
    except (OSError, ValueError) as e:
        raise click.ClickException(str(e)) from e
