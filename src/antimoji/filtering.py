"""File filtering with explicit precedence, plus bounded file discovery.

Precedence (first decisive rule wins):
  1. command-line exclude: absolute veto
  2. command-line include: when given, must match; overrides profile excludes
  3. profile excludes: exclude patterns, file ignore list, directory ignore list
  4. profile includes: non-empty list must match; empty list allows

Every decision carries its reason, rule and stage.
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import PurePosixPath
from typing import Iterable

from .errors import ConfigurationError
from .types import FilterDecision

CMD_STAGE = "command_line"
PROFILE_STAGE = "profile"


@dataclass(frozen=True)
class FilterProfile:
    """File selection rules from a configuration profile."""
    include_patterns: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = ()
    file_ignore_list: tuple[str, ...] = ()
    directory_ignore_list: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for name in ("include_patterns", "exclude_patterns",
                     "file_ignore_list", "directory_ignore_list"):
            object.__setattr__(self, name, tuple(p for p in getattr(self, name) if p))


def _posix(path: str) -> str:
    return path.replace(os.sep, "/") if os.sep != "/" else path


def match_glob(pattern: str, path: str) -> bool:
    """Shell-glob match against the basename or the full path."""
    path = _posix(path)
    return fnmatchcase(PurePosixPath(path).name, pattern) or fnmatchcase(path, pattern)


def in_ignored_directory(name: str, path: str, *, is_dir: bool = False) -> bool:
    """True when a directory component of ``path`` is the ignored ``name``.

    A bare name ("node_modules", "build*") is compared with every directory
    component; a name with a slash ("docs/generated") is anchored and must
    prefix the path, so "src/docs/generated/x.md" is not ignored by it.
    """
    name = name.strip("/")
    if not name:
        return False
    parts = PurePosixPath(_posix(path)).parts
    dirs = parts if is_dir else parts[:-1]
    if "/" in name:
        prefix = PurePosixPath(name).parts
        return dirs[:len(prefix)] == prefix
    return any(part == name or fnmatchcase(part, name) for part in dirs)


@dataclass
class FileFilterEngine:
    profile: FilterProfile = field(default_factory=FilterProfile)
    include: str | None = None       # command-line include
    exclude: str | None = None       # command-line exclude

    def should_include(self, path: str) -> FilterDecision:
        # 1. Command-line exclude
        if self.exclude and match_glob(self.exclude, path):
            return FilterDecision(
                False, f"matches command-line exclude pattern: {self.exclude}",
                "command_line.exclude", CMD_STAGE,
            )

        # 2. Command-line include
        if self.include:
            if match_glob(self.include, path):
                return FilterDecision(
                    True, f"matches command-line include pattern: {self.include}",
                    "command_line.include", CMD_STAGE,
                )
            return FilterDecision(
                False, f"does not match command-line include pattern: {self.include}",
                "command_line.include_mismatch", CMD_STAGE,
            )

        # 3. Profile excludes
        excluded = self._profile_exclude(path)
        if excluded is not None:
            return excluded

        # 4. Profile includes
        if not self.profile.include_patterns:
            return FilterDecision(
                True, "no include patterns specified, default allow",
                "profile.include_default", PROFILE_STAGE,
            )
        for pattern in self.profile.include_patterns:
            if match_glob(pattern, path):
                return FilterDecision(
                    True, f"matches profile include pattern: {pattern}",
                    "profile.include_patterns", PROFILE_STAGE,
                )
        return FilterDecision(
            False, "does not match any profile include patterns",
            "profile.include_mismatch", PROFILE_STAGE,
        )

    def should_descend(self, directory: str) -> FilterDecision:
        """Whether discovery should walk into ``directory``.

        Only vetoes that apply to every file below it prune the walk:
        the directory ignore list, and the command-line exclude when it
        matches the directory itself.
        """
        if self.exclude and match_glob(self.exclude, directory):
            return FilterDecision(
                False, f"matches command-line exclude pattern: {self.exclude}",
                "command_line.exclude", CMD_STAGE,
            )
        if not self.include:
            for name in self.profile.directory_ignore_list:
                if in_ignored_directory(name, directory, is_dir=True):
                    return FilterDecision(
                        False, f"in ignored directory: {name}",
                        "profile.directory_ignore_list", PROFILE_STAGE,
                    )
        return FilterDecision(True, "directory not ignored", "directory.default", PROFILE_STAGE)

    def _profile_exclude(self, path: str) -> FilterDecision | None:
        for pattern in self.profile.exclude_patterns:
            if match_glob(pattern, path):
                return FilterDecision(
                    False, f"matches profile exclude pattern: {pattern}",
                    "profile.exclude_patterns", PROFILE_STAGE,
                )
        for pattern in self.profile.file_ignore_list:
            if match_glob(pattern, path):
                return FilterDecision(
                    False, f"matches profile file ignore: {pattern}",
                    "profile.file_ignore_list", PROFILE_STAGE,
                )
        for name in self.profile.directory_ignore_list:
            if in_ignored_directory(name, path):
                return FilterDecision(
                    False, f"in ignored directory: {name}",
                    "profile.directory_ignore_list", PROFILE_STAGE,
                )
        return None


def discover_files(
    args: Iterable[str],
    engine: FileFilterEngine,
    *,
    recursive: bool = False,
) -> list[str]:
    """Expand command-line paths into the list of files to process.

    Missing paths are kept so they show up as per-file errors.  Directories
    are walked in sorted order, pruning ignored directories; paths found in
    a walk are filtered relative to the directory given.
    """
    paths: list[str] = []
    for arg in args:
        if not os.path.exists(arg):
            paths.append(arg)
            continue

        if not os.path.isdir(arg):
            if engine.should_include(arg).include:
                paths.append(arg)
            continue

        if not recursive:
            raise ConfigurationError(f"directory {arg} requires --recursive")

        for root, dirs, files in os.walk(arg):
            rel_root = os.path.relpath(root, arg)
            if rel_root == os.curdir:
                rel_root = ""
            dirs[:] = sorted(
                d for d in dirs
                if engine.should_descend(os.path.join(rel_root, d)).include
            )
            for name in sorted(files):
                if engine.should_include(os.path.join(rel_root, name)).include:
                    paths.append(os.path.join(root, name))
    return paths
