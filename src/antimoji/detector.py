"""Detector: finds emoji sequences, emoticons and custom markers.

Two passes over the same content:

1. Unicode sequences.  Each rune is classified (``RuneKind``) and fed to
   an explicit state machine (``transition``) that glues base emoji,
   skin tones, variation selectors and ZWJ joins into one match, and pairs
   regional indicators into flags.  Greedy, leftmost, non-overlapping.
2. Literals.  Emoticons and custom markers are searched only in the byte
   ranges the first pass did not consume, so nothing is counted twice.

Content is handled as UTF-8 bytes; offsets in ``Match`` are byte offsets,
columns are counted in runes.  Malformed bytes decode (surrogateescape) to
one skipped rune each and never raise.
"""

from __future__ import annotations
import re
from bisect import bisect_right
from enum import Enum
from functools import lru_cache

from .patterns import PatternSet
from .types import CUSTOM, EMOTICON, UNICODE, DetectionResult, Match


class SequenceState(Enum):
    IDLE = "idle"
    IN_EMOJI = "in_emoji"
    AFTER_ZWJ = "after_zwj"
    HALF_FLAG = "half_flag"      # one regional indicator seen


class RuneKind(Enum):
    BASE = "base"
    SKIN_TONE = "skin_tone"
    VARIATION = "variation"
    ZWJ = "zwj"
    REGIONAL = "regional"
    OTHER = "other"


class Action(Enum):
    SKIP = "skip"                # rune is not part of any match
    START = "start"              # rune opens a new match
    EXTEND = "extend"            # rune joins the open match
    CLOSE = "close"              # emit open match, re-feed rune from IDLE
    EXTEND_CLOSE = "extend_close"  # rune joins the open match, then emit


_S, _K, _A = SequenceState, RuneKind, Action

_TRANSITIONS: dict[tuple[SequenceState, RuneKind], tuple[SequenceState, Action]] = {
    (_S.IDLE, _K.BASE): (_S.IN_EMOJI, _A.START),
    (_S.IDLE, _K.SKIN_TONE): (_S.IN_EMOJI, _A.START),
    (_S.IDLE, _K.REGIONAL): (_S.HALF_FLAG, _A.START),
    (_S.IN_EMOJI, _K.SKIN_TONE): (_S.IN_EMOJI, _A.EXTEND),
    (_S.IN_EMOJI, _K.VARIATION): (_S.IN_EMOJI, _A.EXTEND),
    (_S.IN_EMOJI, _K.ZWJ): (_S.AFTER_ZWJ, _A.EXTEND),
    (_S.AFTER_ZWJ, _K.BASE): (_S.IN_EMOJI, _A.EXTEND),
    (_S.AFTER_ZWJ, _K.SKIN_TONE): (_S.IN_EMOJI, _A.EXTEND),
    (_S.HALF_FLAG, _K.REGIONAL): (_S.IDLE, _A.EXTEND_CLOSE),
}


def transition(state: SequenceState, kind: RuneKind) -> tuple[SequenceState, Action]:
    """One step of the sequence machine.  Pure; never returns CLOSE from IDLE."""
    step = _TRANSITIONS.get((state, kind))
    if step is not None:
        return step
    if state is SequenceState.IDLE:
        return SequenceState.IDLE, Action.SKIP
    return SequenceState.IDLE, Action.CLOSE


def classify_rune(cp: int, patterns: PatternSet) -> RuneKind:
    # Structural code points first: skin tones sit inside a base block.
    if cp == patterns.zwj:
        return RuneKind.ZWJ
    if patterns.is_variation_selector(cp):
        return RuneKind.VARIATION
    if patterns.is_regional_indicator(cp):
        return RuneKind.REGIONAL
    if patterns.is_skin_tone(cp):
        return RuneKind.SKIN_TONE
    if patterns.is_base(cp):
        return RuneKind.BASE
    return RuneKind.OTHER


def detect(content: bytes | str, patterns: PatternSet) -> DetectionResult:
    """Detect all matches in ``content``.  Deterministic and side-effect free."""
    data = _as_bytes(content)
    text = data.decode("utf-8", "surrogateescape")

    matches: list[Match] = []
    if patterns.has_unicode:
        matches.extend(_scan_sequences(text, patterns))
    if patterns.has_literals:
        matches.extend(_scan_literals(data, matches, patterns))

    return DetectionResult.from_matches(matches, processed_bytes=len(data))


def remove_matches(content: bytes | str, matches: list[Match], replacement: str = "") -> bytes:
    """Replace each match span with ``replacement``; all other bytes are kept as-is."""
    data = _as_bytes(content)
    repl = replacement.encode("utf-8")
    out: list[bytes] = []
    pos = 0
    for m in sorted(matches, key=lambda m: m.byte_start):
        # Skip spans that are out of bounds or overlap an earlier one
        if m.byte_start < pos or m.byte_end > len(data) or m.byte_end <= m.byte_start:
            continue
        out.append(data[pos:m.byte_start])
        out.append(repl)
        pos = m.byte_end
    out.append(data[pos:])
    return b"".join(out)


def describe_match(match: Match, patterns: PatternSet) -> dict:
    """Code point level breakdown of a match (for verbose output)."""
    runes = [ord(ch) for ch in match.raw]
    info: dict = {
        "codepoints": [f"U+{cp:04X}" for cp in runes],
        "blocks": [b for b in (patterns.block_of(cp) for cp in runes) if b],
        "rune_count": len(runes),
    }
    if len(runes) > 1:
        info["modifiers"] = [classify_rune(cp, patterns).value for cp in runes[1:]]
    return info


# ----------------------------------------------------------------------
# Pass 1: Unicode sequences
# ----------------------------------------------------------------------

def _scan_sequences(text: str, patterns: PatternSet) -> list[Match]:
    found: list[Match] = []
    state = SequenceState.IDLE

    byte_pos, line, column = 0, 1, 1
    # Open match: char index, byte offset, line, column
    open_idx = open_byte = open_line = open_col = 0

    def emit(end_idx: int, end_byte: int, lone_flag: bool) -> None:
        if lone_flag and not patterns.lone_regional_indicator:
            return
        found.append(Match(
            raw=text[open_idx:end_idx],
            category=UNICODE,
            byte_start=open_byte,
            byte_end=end_byte,
            line=open_line,
            column=open_col,
            rune_length=end_idx - open_idx,
        ))

    floor = patterns.floor
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        cp = ord(ch)
        kind = RuneKind.OTHER if cp < floor else classify_rune(cp, patterns)
        next_state, action = transition(state, kind)

        if action is Action.CLOSE:
            emit(i, byte_pos, state is SequenceState.HALF_FLAG)
            state = SequenceState.IDLE
            continue    # re-feed the same rune

        if action is Action.START:
            open_idx, open_byte, open_line, open_col = i, byte_pos, line, column

        byte_pos += _utf8_width(cp)
        if ch == "\n":
            line += 1
            column = 1
        else:
            column += 1
        i += 1
        state = next_state

        if action is Action.EXTEND_CLOSE:
            emit(i, byte_pos, False)

    if state is not SequenceState.IDLE:
        emit(n, byte_pos, state is SequenceState.HALF_FLAG)

    return found


def _utf8_width(cp: int) -> int:
    if 0xDC80 <= cp <= 0xDCFF:
        return 1    # one undecodable byte (surrogateescape)
    if cp < 0x80:
        return 1
    if cp < 0x800:
        return 2
    if cp < 0x10000:
        return 3
    return 4


# ----------------------------------------------------------------------
# Pass 2: literal emoticons and custom markers
# ----------------------------------------------------------------------

def _scan_literals(data: bytes, consumed: list[Match], patterns: PatternSet) -> list[Match]:
    regex, categories = _compile_literals(patterns.emoticon_patterns, patterns.custom_patterns)
    line_starts = [0] + [m.end() for m in re.finditer(b"\n", data)]

    found: list[Match] = []
    for start, end in _gaps(consumed, len(data)):
        for m in regex.finditer(data, start, end):
            lit = m.group()
            line = bisect_right(line_starts, m.start())
            prefix = data[line_starts[line - 1]:m.start()]
            raw = lit.decode("utf-8", "surrogateescape")
            found.append(Match(
                raw=raw,
                category=categories[lit],
                byte_start=m.start(),
                byte_end=m.end(),
                line=line,
                column=len(prefix.decode("utf-8", "surrogateescape")) + 1,
                rune_length=len(raw),
            ))
    return found


def _gaps(consumed: list[Match], size: int) -> list[tuple[int, int]]:
    """Byte ranges not covered by ``consumed`` (which is sorted by start)."""
    gaps: list[tuple[int, int]] = []
    pos = 0
    for m in consumed:
        if m.byte_start > pos:
            gaps.append((pos, m.byte_start))
        pos = max(pos, m.byte_end)
    if pos < size:
        gaps.append((pos, size))
    return gaps


@lru_cache(maxsize=32)
def _compile_literals(
    emoticons: tuple[str, ...],
    customs: tuple[str, ...],
) -> tuple[re.Pattern[bytes], dict[bytes, str]]:
    categories: dict[bytes, str] = {}
    for p in emoticons:
        categories[p.encode("utf-8")] = EMOTICON
    for p in customs:
        categories[p.encode("utf-8")] = CUSTOM    # custom wins on duplicates

    # Longest first so ":-)" beats ":)" style prefixes at the same offset
    alternatives: list[bytes] = []
    for lit in sorted(categories, key=len, reverse=True):
        alt = re.escape(lit)
        if categories[lit] == EMOTICON:
            # Emoticons must not be glued to a word, e.g. "http://" or "a:b"
            alt = rb"(?<![A-Za-z0-9])" + alt + rb"(?![A-Za-z0-9])"
        alternatives.append(alt)
    return re.compile(b"|".join(alternatives)), categories


def _as_bytes(content: bytes | str) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8", "surrogateescape")
    return bytes(content)
