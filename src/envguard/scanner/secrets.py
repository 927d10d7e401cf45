"""Secret detector — provider key patterns, suspicious literals and entropy."""

from __future__ import annotations

import math
import re
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from envguard.scanner.models import (
    ExampleSecretWarning,
    SecretFinding,
    SecretKind,
    Severity,
)
from envguard.scanner.patterns import has_ignore_comment, ignore_block_mask, is_env_accessor

SNIPPET_LENGTH = 180

DEFAULT_SECRET_THRESHOLD = 0.85
TEST_PATH_SECRET_THRESHOLD = 0.95

# Approximate alphabet of secret-ish literals (A-Za-z0-9+/_- and friends)
_ENTROPY_ALPHABET = 72

_MIN_SUSPICIOUS_LENGTH = 12
_MIN_ENTROPY_LENGTH = 32
_HIGH_ENTROPY_LENGTH = 48


@dataclass(frozen=True)
class ProviderPattern:
    """A known vendor token shape."""

    name: str
    regex: re.Pattern[str]


PROVIDER_PATTERNS: tuple[ProviderPattern, ...] = (
    ProviderPattern("aws_access_key", re.compile(r"\bAKIA[0-9A-Z]{16}\b")),
    ProviderPattern("aws_temp_key", re.compile(r"\bASIA[0-9A-Z]{16}\b")),
    ProviderPattern("github_token", re.compile(r"\bghp_[0-9A-Za-z]{30,}\b")),
    ProviderPattern("stripe_live_key", re.compile(r"\bsk_live_[0-9a-zA-Z]{24,}\b")),
    ProviderPattern("stripe_test_key", re.compile(r"\bsk_test_[0-9a-zA-Z]{24,}\b")),
    ProviderPattern("google_api_key", re.compile(r"\bAIza[0-9A-Za-z\-_]{20,}\b")),
    ProviderPattern("google_oauth_token", re.compile(r"\bya29\.[0-9A-Za-z\-_]+\b")),
    ProviderPattern(
        "firebase_token", re.compile(r"\b[A-Za-z0-9_-]{21}:[A-Za-z0-9_-]{140}\b")
    ),
    ProviderPattern("ethereum_address", re.compile(r"\b0x[a-fA-F0-9]{40}\b")),
    ProviderPattern(
        "jwt", re.compile(r"\beyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\b")
    ),
    ProviderPattern("twilio_account_sid", re.compile(r"\bAC[0-9a-fA-F]{32}\b")),
)

_SUSPICIOUS_KEYS = re.compile(
    r"\b(?:pass(?:word)?|secret|token|apikey|api_key|key|auth|bearer|private"
    r"|client_secret|access[_-]?token)\b",
    re.IGNORECASE,
)
_ASSIGNED_LITERAL = re.compile(r"=\s*[\"'`](.+?)[\"'`]")
_LONG_LITERAL = re.compile(r"[\"'`]([A-Za-z0-9+/_\-]{24,})[\"'`]")
_URL_LITERAL = re.compile(r"[\"'`](https?://(?!localhost)[^\"'`]*)[\"'`]")
_COMMENT_LINE = re.compile(r"^\s*(?://|/\*|<!--)")

_HARMLESS_URLS: tuple[re.Pattern[str], ...] = (
    re.compile(r"https?://(?:www\.)?placeholder\.com", re.IGNORECASE),
    re.compile(r"https?://(?:www\.)?example\.com", re.IGNORECASE),
    re.compile(r"https?://127\.0\.0\.1(?::\d+)?", re.IGNORECASE),
    re.compile(r"http://www\.w3\.org/2000/svg", re.IGNORECASE),
)

_HARMLESS_LITERALS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\S+@\S+"),  # email
    re.compile(r"^data:[a-z]+/[a-z0-9.+-]+;base64,", re.IGNORECASE),
    re.compile(r"^\.{0,2}/"),  # relative path
    re.compile(
        r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
    ),
    re.compile(r"^[0-9a-f]{32,128}$", re.IGNORECASE),  # md5/sha digests
    re.compile(r"^[A-Za-z0-9+/_\-]{16,20}={0,2}$"),  # short base64
    re.compile(
        r"^[A-Za-z0-9+/_\-]*(?:_PUBLIC|_PRIVATE|VITE_|NEXT_PUBLIC|VUE_)[A-Za-z0-9+/_\-]*={0,2}$"
    ),
    re.compile(r"^[MmZzLlHhVvCcSsQqTtAa][0-9eE+.\- ,MmZzLlHhVvCcSsQqTtAa]*$"),  # SVG path
    re.compile(r"<svg[\s\S]*?>[\s\S]*?</svg>", re.IGNORECASE),
)

_URL_CONSTRUCTION: tuple[re.Pattern[str], ...] = (
    re.compile(r"=\s*`[^`]*\$\{[^}]+\}[^`]*/[^`]*`"),
    re.compile(r"=\s*[\"'][^\"']*/[^\"']*[\"']\s*\+"),
    re.compile(
        r"=\s*[\"'`][^\"'`]*/[^\"'`]*(?:auth|api|login|redirect|callback|protocol)"
        r"[^\"'`]*/[^\"'`]*[\"'`]"
    ),
    re.compile(r"realms/.*/protocol/openid-connect"),
)

_TEST_PATH = (
    re.compile(r"\b(?:__tests__|__mocks__|fixtures|sandbox|samples)\b", re.IGNORECASE),
    re.compile(r"\.(?:spec|test)\.[jt]sx?$"),
)

_PLACEHOLDER_VALUES = {"example", "placeholder"}


def shannon_entropy_normalized(value: str) -> float:
    """Shannon entropy of a string, normalized to [0, 1]."""
    if not value:
        return 0.0
    length = len(value)
    entropy = 0.0
    for count in Counter(value).values():
        p = count / length
        entropy -= p * math.log2(p)
    return min(1.0, entropy / math.log2(_ENTROPY_ALPHABET))


def is_harmless_literal(value: str, ignore_urls: Iterable[str] = ()) -> bool:
    """Check if a literal is unlikely to be a secret."""
    if any(p.search(value) for p in _HARMLESS_LITERALS):
        return True
    if any(p.search(value) for p in _HARMLESS_URLS):
        return True
    return any(u and u in value for u in ignore_urls)


def looks_like_url_construction(line: str) -> bool:
    return any(p.search(line) for p in _URL_CONSTRUCTION)


def is_test_path(path: str) -> bool:
    return any(p.search(path) for p in _TEST_PATH)


def _snippet(line: str) -> str:
    return line.strip()[:SNIPPET_LENGTH]


def detect_secrets(
    content: str,
    file_path: str,
    ignore_urls: Iterable[str] = (),
) -> list[SecretFinding]:
    """Scan source text line by line for hardcoded secrets.

    Checks run in order (URL, suspicious assignment, provider pattern,
    entropy) and may all fire; findings sharing (file, line, snippet) are
    collapsed to the most severe one.
    """
    ignore_urls = tuple(ignore_urls)
    threshold = TEST_PATH_SECRET_THRESHOLD if is_test_path(file_path) else DEFAULT_SECRET_THRESHOLD

    lines = re.split(r"\r?\n", content)
    in_block = ignore_block_mask(lines)
    findings: list[SecretFinding] = []

    for index, line in enumerate(lines):
        if in_block[index] or has_ignore_comment(line) or _COMMENT_LINE.match(line):
            continue
        line_no = index + 1
        snippet = _snippet(line)

        for match in _URL_LITERAL.finditer(line):
            url = match.group(1)
            if not url or is_harmless_literal(url, ignore_urls):
                continue
            secure = url.startswith("https")
            protocol = "HTTPS" if secure else "HTTP"
            findings.append(
                SecretFinding(
                    file=file_path,
                    line=line_no,
                    kind=SecretKind.PATTERN,
                    message=f"{protocol} URL detected - consider moving to an environment variable",
                    snippet=snippet,
                    severity=Severity.LOW if secure else Severity.MEDIUM,
                )
            )

        if _SUSPICIOUS_KEYS.search(line):
            m = _ASSIGNED_LITERAL.search(line)
            if (
                m
                and len(m.group(1)) >= _MIN_SUSPICIOUS_LENGTH
                and not is_harmless_literal(m.group(1), ignore_urls)
                and not looks_like_url_construction(line)
                and not is_env_accessor(line)
            ):
                findings.append(
                    SecretFinding(
                        file=file_path,
                        line=line_no,
                        kind=SecretKind.PATTERN,
                        message="matches password/secret/token-like literal assignment",
                        snippet=snippet,
                        severity=Severity.MEDIUM,
                    )
                )

        for provider in PROVIDER_PATTERNS:
            if provider.regex.search(line):
                findings.append(
                    SecretFinding(
                        file=file_path,
                        line=line_no,
                        kind=SecretKind.PATTERN,
                        message=f"matches known provider key pattern ({provider.name})",
                        snippet=snippet,
                        severity=Severity.HIGH,
                    )
                )

        for match in _LONG_LITERAL.finditer(line):
            literal = match.group(1)
            if len(literal) < _MIN_ENTROPY_LENGTH or is_harmless_literal(literal, ignore_urls):
                continue
            entropy = shannon_entropy_normalized(literal)
            if entropy >= threshold:
                findings.append(
                    SecretFinding(
                        file=file_path,
                        line=line_no,
                        kind=SecretKind.ENTROPY,
                        message=f"found high-entropy string (len {len(literal)}, H≈{entropy:.2f})",
                        snippet=snippet,
                        severity=entropy_severity(len(literal)),
                    )
                )

    return dedupe_findings(findings)


def entropy_severity(length: int) -> Severity:
    return Severity.HIGH if length >= _HIGH_ENTROPY_LENGTH else Severity.MEDIUM


_SEVERITY_RANK = {Severity.LOW: 0, Severity.MEDIUM: 1, Severity.HIGH: 2}


def dedupe_findings(findings: list[SecretFinding]) -> list[SecretFinding]:
    """Keep one finding per (file, line, snippet), the most severe one.

    Among findings of equal severity the earliest wins; the surviving
    finding takes the position of the first one in its group.
    """
    positions: dict[tuple[str, int, str], int] = {}
    unique: list[SecretFinding] = []
    for f in findings:
        key = (f.file, f.line, f.snippet)
        index = positions.get(key)
        if index is None:
            positions[key] = len(unique)
            unique.append(f)
        elif _SEVERITY_RANK[f.severity] > _SEVERITY_RANK[unique[index].severity]:
            unique[index] = f
    return unique


def detect_example_secrets(example: dict[str, str]) -> list[ExampleSecretWarning]:
    """Flag values in an example declaration file that look like real secrets."""
    warnings: list[ExampleSecretWarning] = []

    for key, raw_value in example.items():
        value = (raw_value or "").strip()
        if not value or _is_placeholder(value):
            continue

        provider = next((p for p in PROVIDER_PATTERNS if p.regex.search(value)), None)
        if provider is not None:
            warnings.append(
                ExampleSecretWarning(
                    key=key,
                    value=value,
                    reason=f"Value matches a known provider key pattern ({provider.name})",
                    severity=Severity.HIGH,
                )
            )
            continue

        if len(value) >= 24:
            entropy = shannon_entropy_normalized(value)
            if entropy > 0.8:
                warnings.append(
                    ExampleSecretWarning(
                        key=key,
                        value=value,
                        reason=f"High entropy value in example file (≈{entropy:.2f})",
                        severity=Severity.HIGH if entropy > 0.92 else Severity.MEDIUM,
                    )
                )

    return warnings


def _is_placeholder(value: str) -> bool:
    return (
        value.lower() in _PLACEHOLDER_VALUES
        or "your_" in value
        or "<" in value
        or "CHANGE_ME" in value
    )
