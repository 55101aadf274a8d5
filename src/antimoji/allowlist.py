"""Allowlist: emoji patterns that are permitted to stay in content.

Patterns are normalized before indexing and before every lookup:
whitespace and variation selectors (U+FE00-U+FE0F) are stripped so
"✅" and "✅️" are the same key.  Skin tones and ZWJ joins are kept,
so "👍🏽" and "👍" stay distinct.

Usage:
    allow = Allowlist(["✅", "⭐"])
    "✅️" in allow                  # True
    kept = apply_allowlist(result, allow)  # drops allowed matches
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable

from .diagnostics import Diagnostics, NullDiagnostics
from .emoji_ranges import VARIATION_SELECTOR_RANGE
from .types import DetectionResult

_VS_LOW, _VS_HIGH = VARIATION_SELECTOR_RANGE

# Status markers commonly left in docs and CI output
DEFAULT_ALLOWLIST: tuple[str, ...] = (
    "✅", "❌", "⚠️", "ℹ️", "⭐", "🚀", "🐛", "✨", "📝", "🔧",
    ":white_check_mark:", ":x:", ":warning:", ":information_source:",
    ":bug:", ":sparkles:",
)


def normalize(pattern: str) -> str:
    """Canonical lookup key for a pattern.  Idempotent."""
    kept = "".join(ch for ch in pattern if not (_VS_LOW <= ord(ch) <= _VS_HIGH))
    return kept.strip()


class Allowlist:
    """Read-only set of normalized patterns.  Safe to share across threads."""

    __slots__ = ("_keys", "_patterns")

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        self._patterns: tuple[str, ...] = tuple(patterns)
        self._keys: frozenset[str] = frozenset(
            key for key in map(normalize, self._patterns) if key
        )

    def contains(self, raw: str) -> bool:
        if not raw:
            return False
        return normalize(raw) in self._keys

    __contains__ = contains

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        return f"Allowlist({sorted(self._keys)!r})"

    @property
    def is_empty(self) -> bool:
        return not self._keys

    @property
    def patterns(self) -> tuple[str, ...]:
        """Patterns as given (before normalization)."""
        return self._patterns

    @property
    def keys(self) -> frozenset[str]:
        return self._keys


def default_allowlist() -> Allowlist:
    return Allowlist(DEFAULT_ALLOWLIST)


def merge(*sources: Allowlist | Iterable[str] | None) -> Allowlist:
    """Union of allowlists and/or raw pattern lists.  ``None`` entries are skipped."""
    patterns: list[str] = []
    for src in sources:
        if src is None:
            continue
        patterns.extend(src.patterns if isinstance(src, Allowlist) else src)
    return Allowlist(patterns)


def apply_allowlist(result: DetectionResult, allowlist: Allowlist | None) -> DetectionResult:
    """New result keeping only matches NOT in the allowlist.

    ``None`` is the identity.  Skipped (unsuccessful) results pass through
    unchanged since they carry no matches.
    """
    if allowlist is None or not result.success:
        return result

    kept = [m for m in result.matches if not allowlist.contains(m.raw)]
    return DetectionResult(
        matches=kept,
        total_count=len(kept),
        unique_count=len({m.raw for m in kept}),
        processed_bytes=result.processed_bytes,
        success=result.success,
        skipped_reason=result.skipped_reason,
    )


# ----------------------------------------------------------------------
# Scan / clean allowlist resolution
# ----------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class AllowlistOptions:
    respect: bool = True     # use the configured allowlist
    ignore: bool = False     # never use it (wins over respect)
    operation: str = ""      # "scan" | "clean", for diagnostics


def should_use_allowlist(options: AllowlistOptions, patterns: Iterable[str]) -> bool:
    if options.ignore:
        return False
    return options.respect and any(normalize(p) for p in patterns)


def resolve_allowlist(
    patterns: Iterable[str],
    options: AllowlistOptions,
    diagnostics: Diagnostics | None = None,
) -> Allowlist | None:
    """Allowlist to use for an operation, or ``None`` when it should not apply.

    Scan and clean must both go through here so they agree on what is allowed.
    """
    diag = diagnostics or NullDiagnostics()
    patterns = list(patterns)

    if not should_use_allowlist(options, patterns):
        diag.info(
            "allowlist not applied",
            operation=options.operation,
            ignore_allowlist=options.ignore,
            respect_allowlist=options.respect,
            allowlist_size=len(patterns),
        )
        return None

    allowlist = Allowlist(patterns)
    diag.info("allowlist configured", operation=options.operation, patterns_count=len(allowlist))
    return allowlist


def consistency_warnings(
    clean_options: AllowlistOptions,
    scan_options: AllowlistOptions,
    clean_patterns: Iterable[str],
    scan_patterns: Iterable[str],
    diagnostics: Diagnostics | None = None,
) -> list[str]:
    """Warn about scan/clean setups that disagree on the allowlist.

    The classic failure: clean keeps allowed emojis while scan (ignoring the
    allowlist) still reports them, so a pre-commit hook never passes.
    """
    diag = diagnostics or NullDiagnostics()
    clean_patterns = list(clean_patterns)
    scan_patterns = list(scan_patterns)
    clean_uses = should_use_allowlist(clean_options, clean_patterns)
    scan_uses = should_use_allowlist(scan_options, scan_patterns)

    warnings: list[str] = []
    if clean_uses and not scan_uses:
        warnings.append(
            "clean respects the allowlist while scan ignores it; clean may report "
            "0 modified while scan still finds emojis"
        )
    if scan_uses and not clean_uses:
        warnings.append(
            "clean ignores the allowlist while scan respects it; use the same "
            "profile and flags for both"
        )
    if clean_uses and scan_uses and Allowlist(clean_patterns).keys != Allowlist(scan_patterns).keys:
        warnings.append("scan and clean use different allowlists")

    for w in warnings:
        diag.warning("allowlist configuration mismatch", warning=w)
    return warnings
