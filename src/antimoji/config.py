"""YAML/dict config loader for antimoji.

Supports a YAML file or a plain dict (for embedding in a larger config).

Example YAML:

    antimoji:
      profiles:
        default:
          unicode_emojis: true
          text_emoticons: true
          custom_patterns: [":rocket:"]
          emoji_allowlist: ["✅", "⚠️"]
          include_patterns: ["*.py", "*.md"]
          exclude_patterns: ["*.min.js"]
          file_ignore_list: ["CHANGELOG.md"]
          directory_ignore_list: [".git", "node_modules"]
          replacement: ""
          backup_files: false
          max_workers: 0
          max_file_size: 104857600
          max_emoji_threshold: 0

Profiles are merged over the built-in defaults; keys not given keep their
default value.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any

import yaml

from .allowlist import Allowlist, AllowlistOptions, resolve_allowlist
from .diagnostics import Diagnostics
from .errors import ConfigurationError
from .filtering import FileFilterEngine, FilterProfile
from .modifier import ModifyConfig
from .patterns import PatternSet, default_patterns
from .processor import ProcessingConfig

DEFAULT_PROFILE: dict[str, Any] = {
    "recursive": True,
    "backup_files": False,
    "unicode_emojis": True,
    "text_emoticons": True,
    "custom_patterns": [],
    "lone_regional_indicator": True,
    "emoji_allowlist": [],
    "file_ignore_list": ["*.min.js", "*.min.css"],
    "directory_ignore_list": [".git", "node_modules", "vendor", "dist", "build"],
    "include_patterns": [],
    "exclude_patterns": [],
    "replacement": "",
    "preserve_permissions": True,
    "max_emoji_threshold": 0,
    "max_workers": 0,
    "buffer_size": 64 * 1024,
    "max_file_size": 100 * 1024 * 1024,
}

_LIST_KEYS = (
    "custom_patterns", "emoji_allowlist", "file_ignore_list",
    "directory_ignore_list", "include_patterns", "exclude_patterns",
)
_NON_NEGATIVE = ("max_emoji_threshold", "max_workers", "max_file_size")


def load_config(data: dict[str, Any] | None, profile: str = "default") -> dict[str, Any]:
    """Normalize a config dict into one validated profile dict."""
    data = data or {}
    # Support nested under "antimoji" key or flat
    if "antimoji" in data:
        data = data["antimoji"] or {}

    if "profiles" in data:
        profiles = data["profiles"] or {}
        if profile not in profiles:
            if profile != "default":
                raise ConfigurationError(f"profile not found: {profile}")
            raw: dict[str, Any] = {}
        else:
            raw = profiles[profile] or {}
    else:
        raw = data

    unknown = set(raw) - set(DEFAULT_PROFILE)
    if unknown:
        raise ConfigurationError(f"unknown config keys: {', '.join(sorted(unknown))}")

    cfg = {**DEFAULT_PROFILE, **raw}
    for key in _LIST_KEYS:
        value = cfg[key] or []
        if isinstance(value, str):
            value = [value]
        cfg[key] = [str(v) for v in value]
    validate_profile(cfg)
    return cfg


def load_from_yaml(path: str | Path, profile: str = "default") -> dict[str, Any]:
    """Load a profile from a YAML file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML in {path}: {e}") from e
    if data is not None and not isinstance(data, dict):
        raise ConfigurationError(f"config {path} must be a mapping")
    return load_config(data, profile)


def validate_profile(cfg: dict[str, Any]) -> None:
    for key in _NON_NEGATIVE:
        if int(cfg[key]) < 0:
            raise ConfigurationError(f"{key} cannot be negative")
    if int(cfg["buffer_size"]) <= 0:
        raise ConfigurationError("buffer_size must be positive")


# ----------------------------------------------------------------------
# Builders
# ----------------------------------------------------------------------

def build_patterns(cfg: dict[str, Any]) -> PatternSet:
    patterns = default_patterns(lone_regional_indicator=cfg["lone_regional_indicator"])
    return patterns.with_custom(cfg["custom_patterns"])


def build_processing_config(cfg: dict[str, Any]) -> ProcessingConfig:
    return ProcessingConfig(
        enable_unicode=cfg["unicode_emojis"],
        enable_emoticons=cfg["text_emoticons"],
        enable_custom=bool(cfg["custom_patterns"]),
        max_file_size=int(cfg["max_file_size"]),
        buffer_size=int(cfg["buffer_size"]),
    )


def build_modify_config(cfg: dict[str, Any], **overrides: Any) -> ModifyConfig:
    config = ModifyConfig(
        replacement=cfg["replacement"],
        create_backup=cfg["backup_files"],
        preserve_permissions=cfg["preserve_permissions"],
        processing=build_processing_config(cfg),
    )
    for key, value in overrides.items():
        if value is not None:
            setattr(config, key, value)
    return config


def build_filter_engine(
    cfg: dict[str, Any],
    *,
    include: str | None = None,
    exclude: str | None = None,
) -> FileFilterEngine:
    profile = FilterProfile(
        include_patterns=tuple(cfg["include_patterns"]),
        exclude_patterns=tuple(cfg["exclude_patterns"]),
        file_ignore_list=tuple(cfg["file_ignore_list"]),
        directory_ignore_list=tuple(cfg["directory_ignore_list"]),
    )
    return FileFilterEngine(profile, include=include, exclude=exclude)


def build_allowlist(
    cfg: dict[str, Any],
    options: AllowlistOptions | None = None,
    diagnostics: Diagnostics | None = None,
) -> Allowlist | None:
    return resolve_allowlist(cfg["emoji_allowlist"], options or AllowlistOptions(), diagnostics)
