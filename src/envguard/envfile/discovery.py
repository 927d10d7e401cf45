"""Env file discovery — find .env* files and pair each with its example."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from envguard.config import DEFAULT_ENV_FILE, DEFAULT_EXAMPLE_FILE

logger = logging.getLogger(__name__)


@dataclass
class EnvDiscovery:
    """The env files found in a project root and the primary pair."""

    root: Path
    env_files: list[str] = field(default_factory=list)
    primary_env: str = DEFAULT_ENV_FILE
    primary_example: str = DEFAULT_EXAMPLE_FILE
    env_flag: str | None = None
    example_flag: str | None = None

    @property
    def example_only(self) -> bool:
        return bool(self.example_flag) and not self.env_flag


@dataclass(frozen=True)
class EnvPair:
    env_name: str
    env_path: Path
    example_path: Path


def env_suffix(name: str) -> str:
    """``.env.local`` -> ``.local``; ``.env`` -> ``""``."""
    if name == DEFAULT_ENV_FILE:
        return ""
    return name.replace(DEFAULT_ENV_FILE, "", 1)


def _is_env_file(name: str) -> bool:
    if name.startswith(DEFAULT_EXAMPLE_FILE):
        return False
    return name == DEFAULT_ENV_FILE or name.startswith(DEFAULT_ENV_FILE + ".")


def discover_env_files(
    root: str | Path,
    env_flag: str | None = None,
    example_flag: str | None = None,
) -> EnvDiscovery:
    """List the .env* files in ``root`` (``.env`` first) and pick the primary pair.

    Both flags together name the only pair to compare. An explicit
    ``env_flag`` goes to the front of the list and looks for the example with
    the same suffix. An explicit ``example_flag`` alone narrows the list to
    the env file with its suffix, if there is one.
    """
    root = Path(root)
    env_files = sorted(
        (p.name for p in root.iterdir() if p.is_file() and _is_env_file(p.name)),
        key=lambda name: (name != DEFAULT_ENV_FILE, name),
    )
    discovery = EnvDiscovery(
        root=root,
        env_files=env_files,
        primary_env=env_files[0] if env_files else DEFAULT_ENV_FILE,
        env_flag=env_flag,
        example_flag=example_flag,
    )

    if env_flag and example_flag:
        discovery.env_files = [env_flag]
        discovery.primary_env = env_flag
        discovery.primary_example = example_flag
        return discovery

    if env_flag and not example_flag:
        discovery.primary_env = env_flag
        if (root / env_flag).is_file():
            discovery.env_files = [env_flag, *(n for n in env_files if n != env_flag)]
        suffix = env_suffix(Path(env_flag).name)
        candidate = f"{DEFAULT_EXAMPLE_FILE}{suffix}"
        if (root / candidate).is_file():
            discovery.primary_example = candidate

    if example_flag and not env_flag:
        discovery.primary_example = example_flag
        example_name = Path(example_flag).name
        if example_name.startswith(DEFAULT_EXAMPLE_FILE):
            suffix = example_name[len(DEFAULT_EXAMPLE_FILE):]
            matched = f"{DEFAULT_ENV_FILE}{suffix}"
            if (root / matched).is_file():
                discovery.primary_env = matched
                discovery.env_files = [matched]
            else:
                logger.debug("No env file matches example %s", example_flag)
        elif not discovery.env_files:
            discovery.env_files = [discovery.primary_env]

    return discovery


def pair_with_example(discovery: EnvDiscovery) -> list[EnvPair]:
    """Pair every discovered env file with the example of the same suffix.

    Files without a suffixed example fall back to the primary example. With
    an explicit example, every env file is compared against it.
    """
    root = discovery.root
    primary_example = (root / discovery.primary_example).resolve()
    pairs: list[EnvPair] = []

    for name in discovery.env_files or [discovery.primary_env]:
        env_path = (root / name).resolve()
        if discovery.example_flag:
            if discovery.example_only and env_path == primary_example:
                continue
            example_path = primary_example
        else:
            suffix = env_suffix(Path(name).name)
            candidate = env_path.parent / f"{DEFAULT_EXAMPLE_FILE}{suffix}"
            example_path = candidate if suffix and candidate.is_file() else primary_example
        pairs.append(EnvPair(env_name=Path(name).name, env_path=env_path, example_path=example_path))

    return pairs
