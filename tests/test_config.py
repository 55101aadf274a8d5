"""Tests for YAML/dict config loading and the builders."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest

from antimoji import ConfigurationError, load_config, load_from_yaml
from antimoji.allowlist import AllowlistOptions
from antimoji.config import (
    DEFAULT_PROFILE,
    build_allowlist,
    build_filter_engine,
    build_modify_config,
    build_patterns,
    build_processing_config,
)


# ── Loading ──────────────────────────────────────────────────────────

def test_defaults():
    cfg = load_config(None)
    assert cfg == DEFAULT_PROFILE


def test_flat_dict():
    cfg = load_config({"text_emoticons": False, "max_workers": 2})
    assert cfg["text_emoticons"] is False
    assert cfg["max_workers"] == 2
    assert cfg["unicode_emojis"] is True


def test_nested_profiles():
    data = {"antimoji": {"profiles": {
        "strict": {"custom_patterns": ":rocket:", "emoji_allowlist": ["✅"]},
    }}}
    cfg = load_config(data, "strict")
    assert cfg["custom_patterns"] == [":rocket:"]
    assert cfg["emoji_allowlist"] == ["✅"]


def test_missing_default_profile_uses_defaults():
    cfg = load_config({"profiles": {"ci": {"max_workers": 1}}})
    assert cfg["max_workers"] == DEFAULT_PROFILE["max_workers"]


def test_missing_named_profile():
    with pytest.raises(ConfigurationError, match="profile not found"):
        load_config({"profiles": {"ci": {}}}, "release")


def test_unknown_keys_rejected():
    with pytest.raises(ConfigurationError, match="unknown config keys"):
        load_config({"emoji_allowlst": ["✅"]})


@pytest.mark.parametrize("key", ["max_emoji_threshold", "max_workers", "max_file_size"])
def test_negative_values_rejected(key):
    with pytest.raises(ConfigurationError):
        load_config({key: -1})


def test_zero_buffer_rejected():
    with pytest.raises(ConfigurationError):
        load_config({"buffer_size": 0})


def test_load_from_yaml(tmp_path):
    path = tmp_path / "antimoji.yaml"
    path.write_text(
        "antimoji:\n"
        "  profiles:\n"
        "    default:\n"
        "      emoji_allowlist: ['✅']\n"
        "      include_patterns: ['*.py']\n"
        "      backup_files: true\n",
        encoding="utf-8",
    )
    cfg = load_from_yaml(path)
    assert cfg["emoji_allowlist"] == ["✅"]
    assert cfg["include_patterns"] == ["*.py"]
    assert cfg["backup_files"] is True


def test_load_from_yaml_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_from_yaml(path) == DEFAULT_PROFILE


def test_load_from_yaml_errors(tmp_path):
    with pytest.raises(ConfigurationError):
        load_from_yaml(tmp_path / "missing.yaml")

    bad = tmp_path / "bad.yaml"
    bad.write_text("antimoji: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="invalid YAML"):
        load_from_yaml(bad)

    listy = tmp_path / "list.yaml"
    listy.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="must be a mapping"):
        load_from_yaml(listy)


# ── Builders ─────────────────────────────────────────────────────────

def test_build_patterns_adds_custom():
    cfg = load_config({"custom_patterns": [":rocket:"], "lone_regional_indicator": False})
    patterns = build_patterns(cfg)
    assert patterns.custom_patterns == (":rocket:",)
    assert patterns.lone_regional_indicator is False


def test_build_processing_config():
    cfg = load_config({"text_emoticons": False, "max_file_size": 10})
    config = build_processing_config(cfg)
    assert config.enable_emoticons is False
    assert config.enable_custom is False
    assert config.max_file_size == 10


def test_build_modify_config_overrides():
    cfg = load_config({"replacement": "?", "backup_files": True})
    config = build_modify_config(cfg, replacement=None, dry_run=True)
    assert config.replacement == "?"
    assert config.create_backup is True
    assert config.dry_run is True


def test_build_filter_engine():
    cfg = load_config({"include_patterns": ["*.py"]})
    engine = build_filter_engine(cfg, exclude="test_*")
    assert engine.should_include("a.py").include
    assert not engine.should_include("test_a.py").include
    assert not engine.should_include("node_modules/a.py").include


def test_build_allowlist():
    assert build_allowlist(load_config({})) is None
    cfg = load_config({"emoji_allowlist": ["✅"]})
    assert "✅" in build_allowlist(cfg)
    assert build_allowlist(cfg, AllowlistOptions(ignore=True)) is None
