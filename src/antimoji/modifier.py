"""Modifier: remove (or replace) matches from files, atomically.

Usage:
    modifier = Modifier(default_patterns(), ModifyConfig(create_backup=True),
                        allowlist=Allowlist(["✅"]))
    for r in modifier.modify_files(paths):
        print(r.file_path, r.modified, r.emojis_removed, r.backup_path)

Each file goes through the same read/classify/detect path as the scanner
(``processor.analyze_file``), so scan and clean never disagree about what
is in a file.  Writes go to a temp file in the same directory, are fsynced
and renamed over the original: readers see either the old or the new file,
never a partial one.
"""

from __future__ import annotations
import os
import shutil
import stat
import tempfile
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from .allowlist import Allowlist, apply_allowlist
from .detector import remove_matches
from .diagnostics import Diagnostics, StructlogDiagnostics
from .errors import (
    AntimojiError,
    BackupError,
    ConfigurationError,
    NotProcessedError,
    PermissionPreservationError,
    WriteError,
)
from .patterns import PatternSet
from .pool import run_pool
from .processor import ProcessingConfig, analyze_content, analyze_file
from .types import DetectionResult

BACKUP_TIMESTAMP_FMT = "%Y%m%d-%H%M%S"
TEMP_PREFIX = ".antimoji-tmp-"
_DEFAULT_MODE = 0o644


@dataclass
class ModifyConfig:
    """How matches are removed."""
    replacement: str = ""
    create_backup: bool = False
    respect_allowlist: bool = True
    preserve_permissions: bool = True
    dry_run: bool = False
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)


@dataclass(slots=True)
class ModifyResult:
    file_path: str
    modified: bool = False
    emojis_removed: int = 0
    backup_path: str | None = None
    error: Exception | None = None
    skipped_reason: str = ""

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class ModifyPlan:
    """What a modification would do to one file."""
    content: bytes
    detection: DetectionResult       # first pass, before allowlist
    removals: DetectionResult        # first-pass matches that will be replaced
    classifier_reason: str = ""
    cleaned: bytes = b""             # content after every pass
    removed: int = 0                 # matches replaced, all passes
    passes: int = 0

    @property
    def skipped(self) -> bool:
        return not self.detection.success

    @property
    def changes(self) -> bool:
        return self.removed > 0


class Modifier:
    """Rewrite files without their non-allowlisted matches."""

    def __init__(
        self,
        patterns: PatternSet,
        config: ModifyConfig | None = None,
        allowlist: Allowlist | None = None,
        *,
        diagnostics: Diagnostics | None = None,
    ) -> None:
        if not isinstance(patterns, PatternSet):
            raise ConfigurationError("Modifier requires a PatternSet")
        self.patterns = patterns
        self.config = config or ModifyConfig()
        self.active_patterns = patterns.narrowed(self.config.processing)
        self.allowlist = allowlist
        self.diagnostics = diagnostics or StructlogDiagnostics()

    def plan(self, path: str) -> ModifyPlan:
        """Read and analyze ``path`` without touching it.  Raises ``AntimojiError``.

        With an empty replacement, removal is repeated on its own output
        until no match is left: deleting ``😀`` from ``:😀)`` joins a new
        ``:)``.  Each pass shrinks the content, so this terminates.
        """
        processing = self.config.processing
        content, detection, reason = analyze_file(path, self.active_patterns, processing)
        allow = self.allowlist if self.config.respect_allowlist else None
        plan = ModifyPlan(
            content=content,
            detection=detection,
            removals=apply_allowlist(detection, allow),
            classifier_reason=reason,
            cleaned=content,
        )
        if plan.skipped:
            return plan

        removals = plan.removals
        while removals.total_count:
            plan.cleaned = remove_matches(plan.cleaned, removals.matches, self.config.replacement)
            plan.removed += removals.total_count
            plan.passes += 1
            if self.config.replacement:
                break
            again, _ = analyze_content(plan.cleaned, self.active_patterns, processing)
            removals = apply_allowlist(again, allow)
        return plan

    def modify_file(self, path: str) -> ModifyResult:
        result = ModifyResult(file_path=path)
        try:
            plan = self.plan(path)
            if plan.skipped:
                result.skipped_reason = plan.detection.skipped_reason
                self.diagnostics.info("binary file skipped", path=path,
                                      reason=plan.classifier_reason)
                return result
            if not plan.changes:
                return result

            new_content = plan.cleaned
            result.emojis_removed = plan.removed
            result.modified = True
            if plan.passes > 1:
                self.diagnostics.debug("matches formed by removal", path=path,
                                       passes=plan.passes)
            if self.config.dry_run:
                self.diagnostics.info("dry run", path=path, would_remove=result.emojis_removed)
                return result

            if self.config.create_backup:
                result.backup_path = create_backup(path)

            mode = _current_mode(path) if self.config.preserve_permissions else _DEFAULT_MODE
            atomic_write(path, new_content, mode)
            self.diagnostics.info("file modified", path=path, removed=result.emojis_removed,
                                  backup=result.backup_path)
        except AntimojiError as e:
            result.modified = False
            result.emojis_removed = 0
            result.error = e
            self.diagnostics.error("modification failed", path=path, error=str(e),
                                   error_type=type(e).__name__)
        return result

    def modify_files(
        self,
        paths: Iterable[str],
        workers: int = 1,
        cancel: threading.Event | None = None,
    ) -> list[ModifyResult]:
        """Modify a batch.  One result per path; undispatched paths get NotProcessedError."""
        outcome = run_pool(list(paths), self.modify_file, workers, cancel)
        results = outcome.completed
        if outcome.undispatched:
            self.diagnostics.warning("run cancelled", undispatched=len(outcome.undispatched))
            results.extend(
                ModifyResult(file_path=p, error=NotProcessedError(p))
                for p in outcome.undispatched
            )
        return results


def modify_files(
    paths: Iterable[str],
    patterns: PatternSet,
    config: ModifyConfig | None = None,
    allowlist: Allowlist | None = None,
) -> list[ModifyResult]:
    return Modifier(patterns, config, allowlist).modify_files(paths)


# ----------------------------------------------------------------------
# Filesystem helpers
# ----------------------------------------------------------------------

def backup_path_for(path: str, now: datetime | None = None) -> str:
    """``<path>.backup.<YYYYmmdd-HHMMSS>``, with ``-N`` appended if taken."""
    stamp = (now or datetime.now()).strftime(BACKUP_TIMESTAMP_FMT)
    candidate = f"{path}.backup.{stamp}"
    n = 1
    while os.path.lexists(candidate):
        candidate = f"{path}.backup.{stamp}-{n}"
        n += 1
    return candidate


def create_backup(path: str, now: datetime | None = None) -> str:
    """Byte-identical copy of ``path`` (mode bits included).  Raises BackupError."""
    target = backup_path_for(path, now)
    try:
        shutil.copy2(path, target)
    except OSError as e:
        raise BackupError(f"failed to create backup of {path}: {e}") from e
    return target


def atomic_write(path: str, data: bytes, mode: int = _DEFAULT_MODE) -> None:
    """Replace ``path`` with ``data`` via temp file + fsync + rename.

    On any failure the temp file is removed and the original is untouched.
    """
    directory = os.path.dirname(os.path.abspath(path))
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=directory)
    except OSError as e:
        raise WriteError(f"failed to create temp file for {path}: {e}") from e

    try:
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise WriteError(f"failed to write {path}: {e}") from e

        try:
            os.chmod(tmp_path, mode)
        except OSError as e:
            raise PermissionPreservationError(
                f"failed to set mode {mode:o} on {path}: {e}"
            ) from e

        try:
            os.replace(tmp_path, path)
        except OSError as e:
            raise WriteError(f"failed to replace {path}: {e}") from e
    except WriteError:
        _discard(tmp_path)
        raise


def _current_mode(path: str) -> int:
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except OSError as e:
        raise PermissionPreservationError(f"failed to read mode of {path}: {e}") from e


def _discard(tmp_path: str) -> None:
    try:
        os.unlink(tmp_path)
    except FileNotFoundError:
        pass
