"""Framework detection from a project's package.json."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from envguard.scanner.models import Framework

logger = logging.getLogger(__name__)

# Checked in order; the first dependency present decides
_FRAMEWORK_PACKAGES: tuple[tuple[str, Framework], ...] = (
    ("@sveltejs/kit", Framework.SVELTEKIT),
    ("next", Framework.NEXTJS),
    ("@angular/core", Framework.ANGULAR),
)


@dataclass(frozen=True)
class DetectedFramework:
    framework: Framework
    version: str = ""


def detect_framework(root: str | Path) -> DetectedFramework:
    """Detect the framework of a project. Unknown on any read or parse problem."""
    package_json = Path(root) / "package.json"
    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug("No usable package.json in %s: %s", root, e)
        return DetectedFramework(Framework.UNKNOWN)

    if not isinstance(data, dict):
        return DetectedFramework(Framework.UNKNOWN)

    deps: dict = {}
    for section in ("dependencies", "devDependencies"):
        value = data.get(section)
        if isinstance(value, dict):
            deps.update(value)

    for package, framework in _FRAMEWORK_PACKAGES:
        if package in deps:
            return DetectedFramework(framework, str(deps[package]))

    return DetectedFramework(Framework.UNKNOWN)
