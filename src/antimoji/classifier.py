"""Binary / text gate.

Scan and clean both call ``classify`` on the same bytes through
``processor.analyze_file``; a file skipped by one is skipped by the other.
"""

from __future__ import annotations
import re
from dataclasses import dataclass

from .types import DetectionResult

BINARY_SKIP_REASON = "binary file"

DEFAULT_CONTROL_THRESHOLD = 0.30    # share of runes
DEFAULT_INVALID_TOLERANCE = 0.0     # share of bytes

# C0 controls other than tab, LF, CR.  All single-byte in UTF-8, so a byte
# search counts runes exactly.  NUL is checked separately.
_CONTROL = re.compile(rb"[\x01-\x08\x0b\x0c\x0e-\x1f]")
_ESCAPED = re.compile("[\udc80-\udcff]")


@dataclass(frozen=True, slots=True)
class Classification:
    is_text: bool
    reason: str

    @property
    def is_binary(self) -> bool:
        return not self.is_text


def classify(
    data: bytes,
    *,
    control_threshold: float = DEFAULT_CONTROL_THRESHOLD,
    invalid_tolerance: float = DEFAULT_INVALID_TOLERANCE,
) -> Classification:
    """Decide whether ``data`` is text worth scanning."""
    if not data:
        return Classification(True, "empty")

    if b"\x00" in data:
        return Classification(False, "contains_null_bytes")

    text = data.decode("utf-8", "surrogateescape")
    invalid = len(_ESCAPED.findall(text))
    if invalid and invalid / len(data) > invalid_tolerance:
        return Classification(False, "invalid_utf8")

    controls = len(_CONTROL.findall(data))
    ratio = controls / len(text)
    if ratio > control_threshold:
        return Classification(False, f"high_control_chars_{ratio * 100:.1f}%")

    return Classification(True, "text")


def skipped_result(processed_bytes: int = 0) -> DetectionResult:
    """Result recorded for a file that was classified as binary."""
    return DetectionResult(
        processed_bytes=processed_bytes,
        success=False,
        skipped_reason=BINARY_SKIP_REASON,
    )
