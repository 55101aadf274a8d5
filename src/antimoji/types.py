"""Core types."""

from __future__ import annotations
from dataclasses import dataclass, field

# Match categories
UNICODE = "unicode"
EMOTICON = "emoticon"
CUSTOM = "custom"


@dataclass(frozen=True, slots=True)
class CodePointRange:
    """Inclusive range of Unicode scalar values that count as emoji."""
    low: int
    high: int
    category: str          # block name, e.g. "Emoticons"

    def __contains__(self, cp: int) -> bool:
        return self.low <= cp <= self.high


@dataclass(frozen=True, slots=True)
class Match:
    """A single detected emoji-like occurrence."""
    raw: str               # decoded text of content[byte_start:byte_end]
    category: str          # UNICODE | EMOTICON | CUSTOM
    byte_start: int
    byte_end: int
    line: int              # 1-based
    column: int            # 1-based, counted in runes
    rune_length: int


@dataclass(slots=True)
class DetectionResult:
    """Matches found in one piece of content."""
    matches: list[Match] = field(default_factory=list)
    total_count: int = 0
    unique_count: int = 0
    processed_bytes: int = 0
    success: bool = False
    skipped_reason: str = ""

    @classmethod
    def from_matches(
        cls,
        matches: list[Match],
        *,
        processed_bytes: int = 0,
    ) -> "DetectionResult":
        """Build a finished result, sorting matches and computing counts."""
        ordered = sorted(matches, key=lambda m: m.byte_start)
        return cls(
            matches=ordered,
            total_count=len(ordered),
            unique_count=len({m.raw for m in ordered}),
            processed_bytes=processed_bytes,
            success=True,
        )


@dataclass(frozen=True, slots=True)
class FilterDecision:
    """Why a path was included or excluded."""
    include: bool
    reason: str
    rule: str
    stage: str             # "command_line" | "profile"

    def __str__(self) -> str:
        action = "INCLUDE" if self.include else "EXCLUDE"
        return f"{action}: {self.reason} (rule: {self.rule}, stage: {self.stage})"
