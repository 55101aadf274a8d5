"""Pattern catalog: what the detector looks for.

Unicode ranges come from the bundled table in ``emoji_ranges``; the
structural code points (ZWJ, skin tones, variation selectors, regional
indicators) drive the multi-rune sequence rules in ``detector``.
Emoticons and custom markers are plain literals.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from functools import cached_property
from typing import TYPE_CHECKING, Iterable

from . import emoji_ranges
from .errors import ConfigurationError
from .types import CodePointRange

if TYPE_CHECKING:
    from .processor import ProcessingConfig

_MAX_CODE_POINT = 0x10FFFF

DEFAULT_EMOTICONS: tuple[str, ...] = (
    ":)", ":(", ":D", ":P", ":o", ":O", ";)", ";(",
    "=)", "=(", "=D", "=P", "=o", "=O", ">:)", ">:(",
    ":-)", ":-(", ":-D", ":-P", ":-o", ":-O", ";-)", ";-(",
)

# Shortcode markers some projects want flagged; not enabled by default.
COMMON_SHORTCODES: tuple[str, ...] = (
    ":smile:", ":frown:", ":thumbs_up:", ":thumbs_down:", ":heart:",
    ":star:", ":check:", ":cross:", ":warning:",
    ":fire:", ":rocket:", ":tada:", ":sparkles:", ":zap:",
)


@dataclass(frozen=True)
class PatternSet:
    """Immutable description of everything that counts as a match."""

    unicode_ranges: tuple[CodePointRange, ...] = ()
    zwj: int = emoji_ranges.ZWJ
    skin_tone_range: tuple[int, int] = emoji_ranges.SKIN_TONE_RANGE
    variation_selector_range: tuple[int, int] = emoji_ranges.VARIATION_SELECTOR_RANGE
    regional_indicator_range: tuple[int, int] = emoji_ranges.REGIONAL_INDICATOR_RANGE
    emoticon_patterns: tuple[str, ...] = ()
    custom_patterns: tuple[str, ...] = ()
    # A single regional indicator with no partner still counts as a match.
    lone_regional_indicator: bool = True

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples
        object.__setattr__(self, "unicode_ranges", tuple(self.unicode_ranges))
        object.__setattr__(self, "emoticon_patterns", _literals(self.emoticon_patterns))
        object.__setattr__(self, "custom_patterns", _literals(self.custom_patterns))

        for r in self.unicode_ranges:
            _check_span(r.low, r.high, r.category)
        _check_span(*self.skin_tone_range, "skin tones")
        _check_span(*self.variation_selector_range, "variation selectors")
        _check_span(*self.regional_indicator_range, "regional indicators")
        _check_span(self.zwj, self.zwj, "zwj")

    # ------------------------------------------------------------------
    # Lookups used by the detector's hot loop
    # ------------------------------------------------------------------

    def is_base(self, cp: int) -> bool:
        return any(r.low <= cp <= r.high for r in self.unicode_ranges)

    def is_skin_tone(self, cp: int) -> bool:
        low, high = self.skin_tone_range
        return low <= cp <= high

    def is_variation_selector(self, cp: int) -> bool:
        low, high = self.variation_selector_range
        return low <= cp <= high

    def is_regional_indicator(self, cp: int) -> bool:
        low, high = self.regional_indicator_range
        return low <= cp <= high

    def block_of(self, cp: int) -> str | None:
        for r in self.unicode_ranges:
            if cp in r:
                return r.category
        return None

    @cached_property
    def floor(self) -> int:
        """Lowest code point that can take part in a Unicode sequence."""
        lows = [r.low for r in self.unicode_ranges]
        lows += [self.zwj, self.skin_tone_range[0],
                 self.variation_selector_range[0], self.regional_indicator_range[0]]
        return min(lows)

    @property
    def has_unicode(self) -> bool:
        return bool(self.unicode_ranges)

    @property
    def has_literals(self) -> bool:
        return bool(self.emoticon_patterns or self.custom_patterns)

    # ------------------------------------------------------------------
    # Derived sets
    # ------------------------------------------------------------------

    def narrowed(self, config: ProcessingConfig) -> "PatternSet":
        """Copy with the categories disabled in ``config`` emptied."""
        return replace(
            self,
            unicode_ranges=self.unicode_ranges if config.enable_unicode else (),
            emoticon_patterns=self.emoticon_patterns if config.enable_emoticons else (),
            custom_patterns=self.custom_patterns if config.enable_custom else (),
        )

    def with_custom(self, patterns: Iterable[str]) -> "PatternSet":
        return replace(self, custom_patterns=self.custom_patterns + tuple(patterns))


def default_patterns(*, lone_regional_indicator: bool = True) -> PatternSet:
    """The bundled catalog: Unicode table, default emoticons, no custom markers."""
    return PatternSet(
        unicode_ranges=tuple(
            CodePointRange(low, high, name) for low, high, name in emoji_ranges.DEFAULT_RANGES
        ),
        emoticon_patterns=DEFAULT_EMOTICONS,
        custom_patterns=(),
        lone_regional_indicator=lone_regional_indicator,
    )


def _literals(patterns: Iterable[str]) -> tuple[str, ...]:
    """Drop empty literals (they would match everywhere) and duplicates, keep order."""
    return tuple(dict.fromkeys(p for p in patterns if p))


def _check_span(low: int, high: int, name: str) -> None:
    if not (0 <= low <= high <= _MAX_CODE_POINT):
        raise ConfigurationError(f"invalid code point range for {name}: {low:#x}-{high:#x}")
