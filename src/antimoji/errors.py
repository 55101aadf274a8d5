"""Error taxonomy.

Per-file failures are stored on that file's result and never abort a batch.
Only ``ConfigurationError`` is raised to the caller, at construction time.
"""

from __future__ import annotations


class AntimojiError(Exception):
    """Base class for all antimoji errors."""


class ConfigurationError(AntimojiError, ValueError):
    """Invalid configuration or construction-time misuse."""


class FileAccessError(AntimojiError):
    """A file could not be stat'ed, opened or read."""

    def __init__(self, path: str, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"{path}: {cause.strerror or cause}")


class OversizedFileError(AntimojiError):
    """File exceeds ``ProcessingConfig.max_file_size``."""

    def __init__(self, path: str, size: int, limit: int) -> None:
        self.path = path
        self.size = size
        self.limit = limit
        super().__init__(f"{path}: file too large ({size} bytes, limit {limit})")


class BackupError(AntimojiError):
    """Backup creation failed; the original was left untouched."""


class WriteError(AntimojiError):
    """Temp file creation, write or rename failed; the original was left untouched."""


class PermissionPreservationError(WriteError):
    """The rewritten file could not be given the original mode bits."""


class NotProcessedError(AntimojiError):
    """Path was never dispatched because the run was cancelled."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"{path}: not processed (cancelled)")
