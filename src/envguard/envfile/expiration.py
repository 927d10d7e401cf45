"""Expiration annotations in declaration files.

A comment such as ``# @expire 2025-06-30`` applies to the next assignment::

    # @expire 2025-06-30
    STRIPE_KEY=...
"""

from __future__ import annotations

import logging
import re
from datetime import date

from envguard.scanner.models import ExpireWarning

logger = logging.getLogger(__name__)

_EXPIRE = re.compile(r"(?://|#)?\s*@?expire\s+(\d{4}-\d{2}-\d{2})", re.IGNORECASE)
_ASSIGNMENT = re.compile(r"^([A-Za-z0-9_.-]+)=")


def detect_expirations(text: str, today: date | None = None) -> list[ExpireWarning]:
    today = today or date.today()
    warnings: list[ExpireWarning] = []
    pending: date | None = None

    for raw in text.splitlines():
        line = raw.strip()

        m = _EXPIRE.search(line)
        if m:
            try:
                pending = date.fromisoformat(m.group(1))
            except ValueError:
                logger.debug("Ignoring invalid expire date %r", m.group(1))
                pending = None
            continue

        assignment = _ASSIGNMENT.match(line)
        if assignment and pending is not None:
            warnings.append(
                ExpireWarning(
                    key=assignment.group(1),
                    date=pending.isoformat(),
                    days_left=(pending - today).days,
                )
            )
            pending = None

    return warnings
