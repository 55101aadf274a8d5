"""Tests for the binary/text classifier."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from antimoji import classify
from antimoji.classifier import BINARY_SKIP_REASON, skipped_result


def test_empty_is_text():
    verdict = classify(b"")
    assert verdict.is_text
    assert verdict.reason == "empty"


def test_nul_bytes_are_binary():
    verdict = classify(b"\x00\x00\x00\x00")
    assert verdict.is_binary
    assert verdict.reason == "contains_null_bytes"


def test_nul_anywhere_is_binary():
    assert classify("hello 😀".encode("utf-8") + b"\x00").is_binary


def test_invalid_utf8_is_binary_by_default():
    verdict = classify(b"ok \xff")
    assert verdict.is_binary
    assert verdict.reason == "invalid_utf8"


def test_invalid_utf8_within_tolerance():
    assert classify(b"abc\xff", invalid_tolerance=0.5).is_text


def test_high_control_ratio_is_binary():
    verdict = classify(b"\x01\x02\x03a")
    assert verdict.is_binary
    assert verdict.reason == "high_control_chars_75.0%"


def test_control_ratio_at_threshold_is_text():
    # 3 of 10 runes, not above 30%
    assert classify(b"\x01\x02\x03" + b"a" * 7).is_text


def test_control_threshold_is_configurable():
    assert classify(b"\x01" + b"a" * 9, control_threshold=0.05).is_binary


def test_whitespace_controls_are_text():
    verdict = classify(b"a\tb\nc\r\n")
    assert verdict.is_text
    assert verdict.reason == "text"


def test_utf8_text_with_emoji():
    assert classify("Hello 😀 world".encode("utf-8")).is_text


def test_control_ratio_counts_runes():
    # 2 controls among 4 runes (50%), though only 2 of 10 bytes
    verdict = classify("\x01\x01😀😀".encode("utf-8"))
    assert verdict.is_binary
    assert verdict.reason == "high_control_chars_50.0%"


def test_skipped_result():
    result = skipped_result(4)
    assert not result.success
    assert result.skipped_reason == BINARY_SKIP_REASON == "binary file"
    assert result.processed_bytes == 4
    assert result.matches == []
