"""Content-Security-Policy detector — does the project configure a CSP anywhere?"""

from __future__ import annotations

import re

# Any one match is enough; the detector only answers "is some CSP present"
_CSP_PATTERNS: tuple[re.Pattern[str], ...] = (
    # meta tags, header setters and plain header names
    re.compile(r"Content-Security-Policy", re.IGNORECASE),
    # helmet and similar middleware options
    re.compile(r"\bcontentSecurityPolicy\b"),
    # SvelteKit kit.csp
    re.compile(r"kit\s*:\s*\{[^}]*csp\s*:", re.DOTALL),
    re.compile(r"\b(?:shared|global|site|app)[A-Z]?Csp\b"),
    re.compile(r"\bcspConfig\b", re.IGNORECASE),
    re.compile(r"\bcsp\s*:\s*\{[^}]*['\"]default-src['\"]\s*:", re.IGNORECASE),
    re.compile(r"directives\s*:\s*\{[^}]*['\"]default-src['\"]\s*:", re.IGNORECASE | re.DOTALL),
)


def has_csp_in_source(source: str) -> bool:
    """True if the source text looks like it sets up a Content-Security-Policy."""
    return any(p.search(source) for p in _CSP_PATTERNS)
