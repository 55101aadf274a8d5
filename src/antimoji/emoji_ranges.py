"""Bundled emoji code point table.

This is policy data, not matching logic: which code points count as
"emoji" changes with each Unicode release.  Bump TABLE_VERSION whenever
the table changes so results can be traced back to the table in use.
"""

from __future__ import annotations

TABLE_VERSION = "2025.1"

# (low, high, block name), inclusive
DEFAULT_RANGES: list[tuple[int, int, str]] = [
    (0x1F600, 0x1F64F, "Emoticons"),
    (0x1F300, 0x1F5FF, "Miscellaneous Symbols and Pictographs"),
    (0x1F680, 0x1F6FF, "Transport and Map Symbols"),
    (0x1F900, 0x1F9FF, "Supplemental Symbols and Pictographs"),
    (0x1FA70, 0x1FAFF, "Symbols and Pictographs Extended-A"),
    (0x1F1E6, 0x1F1FF, "Regional Indicators"),
    (0x1F000, 0x1F02F, "Mahjong Tiles"),
    (0x1F0A0, 0x1F0FF, "Playing Cards"),
    (0x1F200, 0x1F2FF, "Enclosed Ideographic Supplement"),
    (0x2600, 0x26FF, "Miscellaneous Symbols"),
    (0x2700, 0x27BF, "Dingbats"),
    (0x231A, 0x231B, "Miscellaneous Technical"),      # watch, hourglass
    (0x23E9, 0x23F3, "Miscellaneous Technical"),      # media controls, timers
    (0x23F8, 0x23FA, "Miscellaneous Technical"),
    (0x2B1B, 0x2B1C, "Miscellaneous Symbols and Arrows"),  # large squares
    (0x2B50, 0x2B50, "Miscellaneous Symbols and Arrows"),  # star
    (0x2B55, 0x2B55, "Miscellaneous Symbols and Arrows"),  # heavy circle
]

ZWJ = 0x200D
SKIN_TONE_RANGE = (0x1F3FB, 0x1F3FF)
VARIATION_SELECTOR_RANGE = (0xFE00, 0xFE0F)
REGIONAL_INDICATOR_RANGE = (0x1F1E6, 0x1F1FF)
