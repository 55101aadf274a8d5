"""Tests for file filter precedence and discovery."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest

from antimoji import ConfigurationError, FileFilterEngine, FilterProfile, discover_files
from antimoji.filtering import in_ignored_directory, match_glob


def _touch(path, text="x"):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


# ── Glob and directory matching ──────────────────────────────────────

def test_match_glob_basename_or_full_path():
    assert match_glob("*.py", "a/b/c.py")
    assert match_glob("src/*.py", "src/a.py")
    assert not match_glob("*.md", "a/b/c.py")


def test_ignored_directory_bare_name():
    assert in_ignored_directory("node_modules", "a/node_modules/x.js")
    assert not in_ignored_directory("node_modules", "a/node_modules.txt")
    assert in_ignored_directory("build*", "build-out/a.py")


def test_ignored_directory_with_slash():
    assert in_ignored_directory("docs/generated", "docs/generated/api.md")
    assert in_ignored_directory("docs/generated/", "docs/generated/v1/api.md")
    assert not in_ignored_directory("docs/generated", "docs/api.md")


def test_ignored_directory_with_slash_is_anchored():
    assert not in_ignored_directory("docs/generated", "src/docs/generated/x.md")
    assert not in_ignored_directory("docs/generated", "x/docs/generated", is_dir=True)
    assert in_ignored_directory("docs/generated", "docs/generated", is_dir=True)


def test_discovery_anchors_slash_ignores_to_root(tmp_path):
    _touch(tmp_path / "docs" / "generated" / "a.md")
    _touch(tmp_path / "src" / "docs" / "generated" / "b.md")
    engine = FileFilterEngine(FilterProfile(directory_ignore_list=("docs/generated",)))
    found = discover_files([str(tmp_path)], engine, recursive=True)
    assert found == [os.path.join(str(tmp_path), "src", "docs", "generated", "b.md")]


def test_ignored_directory_for_directory_path():
    assert in_ignored_directory(".git", ".git", is_dir=True)
    assert not in_ignored_directory(".git", ".git")


# ── Precedence ───────────────────────────────────────────────────────

def test_command_line_exclude_is_absolute():
    engine = FileFilterEngine(include="*.py", exclude="test_*")
    decision = engine.should_include("src/test_a.py")
    assert not decision.include
    assert decision.rule == "command_line.exclude"
    assert decision.stage == "command_line"


def test_command_line_include_overrides_profile_excludes():
    profile = FilterProfile(exclude_patterns=("*.py",), directory_ignore_list=("vendor",))
    engine = FileFilterEngine(profile, include="*.py")
    decision = engine.should_include("vendor/a.py")
    assert decision.include
    assert decision.rule == "command_line.include"


def test_command_line_include_mismatch():
    engine = FileFilterEngine(include="*.py")
    decision = engine.should_include("README.md")
    assert not decision.include
    assert decision.rule == "command_line.include_mismatch"


def test_profile_exclude_patterns():
    engine = FileFilterEngine(FilterProfile(exclude_patterns=("*.min.js",)))
    decision = engine.should_include("static/app.min.js")
    assert not decision.include
    assert decision.rule == "profile.exclude_patterns"
    assert decision.stage == "profile"


def test_profile_file_ignore_list():
    engine = FileFilterEngine(FilterProfile(file_ignore_list=("CHANGELOG.md",)))
    assert engine.should_include("CHANGELOG.md").rule == "profile.file_ignore_list"


def test_profile_directory_ignore_list():
    engine = FileFilterEngine(FilterProfile(directory_ignore_list=("node_modules",)))
    decision = engine.should_include("web/node_modules/lib/x.js")
    assert not decision.include
    assert decision.rule == "profile.directory_ignore_list"


def test_profile_exclude_beats_profile_include():
    profile = FilterProfile(include_patterns=("*.py",), exclude_patterns=("gen_*",))
    engine = FileFilterEngine(profile)
    assert engine.should_include("gen_api.py").rule == "profile.exclude_patterns"


def test_profile_include_default_allows():
    decision = FileFilterEngine().should_include("anything.txt")
    assert decision.include
    assert decision.rule == "profile.include_default"


def test_profile_include_patterns():
    engine = FileFilterEngine(FilterProfile(include_patterns=("*.py", "*.md")))
    assert engine.should_include("a.md").rule == "profile.include_patterns"
    decision = engine.should_include("a.txt")
    assert not decision.include
    assert decision.rule == "profile.include_mismatch"


def test_empty_patterns_dropped_from_profile():
    profile = FilterProfile(include_patterns=("", "*.py"), exclude_patterns=("",))
    assert profile.include_patterns == ("*.py",)
    assert profile.exclude_patterns == ()


def test_decision_str():
    decision = FileFilterEngine(exclude="*.log").should_include("x.log")
    assert str(decision) == (
        "EXCLUDE: matches command-line exclude pattern: *.log "
        "(rule: command_line.exclude, stage: command_line)"
    )


# ── Discovery ────────────────────────────────────────────────────────

def test_discovery_prunes_ignored_directories(tmp_path):
    _touch(tmp_path / "src" / "b.md")
    _touch(tmp_path / "src" / "a.py")
    _touch(tmp_path / "node_modules" / "x.js")
    _touch(tmp_path / ".git" / "config")
    engine = FileFilterEngine(FilterProfile(directory_ignore_list=(".git", "node_modules")))

    found = discover_files([str(tmp_path)], engine, recursive=True)
    assert found == [
        os.path.join(str(tmp_path), "src", "a.py"),
        os.path.join(str(tmp_path), "src", "b.md"),
    ]


def test_discovery_filters_relative_to_root(tmp_path):
    root = tmp_path / "build" / "project"
    _touch(root / "a.py")
    engine = FileFilterEngine(FilterProfile(directory_ignore_list=("build",)))
    assert discover_files([str(root)], engine, recursive=True) == [str(root / "a.py")]


def test_discovery_include_walks_ignored_directories(tmp_path):
    _touch(tmp_path / "node_modules" / "x.js")
    _touch(tmp_path / "a.py")
    engine = FileFilterEngine(FilterProfile(directory_ignore_list=("node_modules",)), include="*.js")
    found = discover_files([str(tmp_path)], engine, recursive=True)
    assert found == [os.path.join(str(tmp_path), "node_modules", "x.js")]


def test_discovery_applies_file_rules(tmp_path):
    _touch(tmp_path / "a.py")
    _touch(tmp_path / "a.min.js")
    engine = FileFilterEngine(FilterProfile(file_ignore_list=("*.min.js",)))
    assert discover_files([str(tmp_path)], engine, recursive=True) == [str(tmp_path / "a.py")]


def test_discovery_keeps_missing_paths(tmp_path):
    missing = str(tmp_path / "nope.txt")
    assert discover_files([missing], FileFilterEngine()) == [missing]


def test_discovery_filters_explicit_files(tmp_path):
    _touch(tmp_path / "a.log")
    engine = FileFilterEngine(exclude="*.log")
    assert discover_files([str(tmp_path / "a.log")], engine) == []


def test_directory_requires_recursive(tmp_path):
    with pytest.raises(ConfigurationError):
        discover_files([str(tmp_path)], FileFilterEngine())
