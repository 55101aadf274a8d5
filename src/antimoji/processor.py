"""Processor: read, classify, detect and allowlist-filter a batch of files.

Usage:
    from antimoji import Processor, default_patterns

    processor = Processor(default_patterns())       # reusable, thread-safe
    results = processor.process_files_concurrently(paths, workers=0)
    for r in results:
        if r.error:
            ...
        else:
            print(r.file_path, r.detection.total_count)

One file's failure never stops the batch: it is recorded in that file's
``ProcessResult.error``.
"""

from __future__ import annotations
import os
import threading
import time
from dataclasses import dataclass, field
from typing import Iterable

from .allowlist import Allowlist, apply_allowlist
from .classifier import (
    DEFAULT_CONTROL_THRESHOLD,
    DEFAULT_INVALID_TOLERANCE,
    classify,
    skipped_result,
)
from .detector import detect
from .diagnostics import Diagnostics, StructlogDiagnostics
from .errors import (
    AntimojiError,
    ConfigurationError,
    FileAccessError,
    NotProcessedError,
    OversizedFileError,
)
from .patterns import PatternSet
from .pool import run_pool
from .types import DetectionResult


@dataclass
class ProcessingConfig:
    """What to detect and how much to read."""
    enable_unicode: bool = True
    enable_emoticons: bool = True
    enable_custom: bool = True
    max_file_size: int = 100 * 1024 * 1024    # 100 MiB
    buffer_size: int = 64 * 1024              # read chunk
    control_threshold: float = DEFAULT_CONTROL_THRESHOLD
    invalid_tolerance: float = DEFAULT_INVALID_TOLERANCE

    def __post_init__(self) -> None:
        if self.max_file_size < 0:
            raise ConfigurationError("max_file_size cannot be negative")
        if self.buffer_size <= 0:
            raise ConfigurationError("buffer_size must be positive")


@dataclass(slots=True)
class ProcessResult:
    file_path: str
    detection: DetectionResult = field(default_factory=DetectionResult)
    error: Exception | None = None
    duration: float = 0.0     # seconds

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def processed(self) -> bool:
        return not isinstance(self.error, NotProcessedError)


# ----------------------------------------------------------------------
# Shared per-file path (used by both scan and clean)
# ----------------------------------------------------------------------

def read_limited(path: str, max_size: int, buffer_size: int = 64 * 1024) -> bytes:
    """Read a whole file, refusing anything larger than ``max_size`` bytes.

    Never buffers more than ``max_size + 1`` bytes, even if the file grows
    between the size check and the read.
    """
    try:
        size = os.stat(path).st_size
        if size > max_size:
            raise OversizedFileError(path, size, max_size)

        chunks: list[bytes] = []
        total = 0
        with open(path, "rb") as f:
            while total <= max_size:
                chunk = f.read(min(buffer_size, max_size + 1 - total))
                if not chunk:
                    break
                chunks.append(chunk)
                total += len(chunk)
    except OSError as e:
        raise FileAccessError(path, e) from e

    if total > max_size:
        raise OversizedFileError(path, total, max_size)
    return b"".join(chunks)


def analyze_content(
    data: bytes,
    patterns: PatternSet,
    config: ProcessingConfig,
) -> tuple[DetectionResult, str]:
    """Classify then detect.  Returns the pre-allowlist result and the classifier reason.

    ``patterns`` is used as given; narrow it with ``PatternSet.narrowed(config)``
    first (``Processor`` and ``Modifier`` do this once at construction).
    """
    verdict = classify(
        data,
        control_threshold=config.control_threshold,
        invalid_tolerance=config.invalid_tolerance,
    )
    if verdict.is_binary:
        return skipped_result(len(data)), verdict.reason
    return detect(data, patterns), verdict.reason


def analyze_file(
    path: str,
    patterns: PatternSet,
    config: ProcessingConfig,
) -> tuple[bytes, DetectionResult, str]:
    """Read, classify and detect one file.  Raises ``AntimojiError`` subclasses."""
    data = read_limited(path, config.max_file_size, config.buffer_size)
    detection, reason = analyze_content(data, patterns, config)
    return data, detection, reason


# ----------------------------------------------------------------------
# Processor
# ----------------------------------------------------------------------

class Processor:
    """Scan files for matches.  Never modifies anything."""

    def __init__(
        self,
        patterns: PatternSet,
        config: ProcessingConfig | None = None,
        *,
        allowlist: Allowlist | None = None,
        diagnostics: Diagnostics | None = None,
    ) -> None:
        if not isinstance(patterns, PatternSet):
            raise ConfigurationError("Processor requires a PatternSet")
        self.patterns = patterns
        self.config = config or ProcessingConfig()
        self.active_patterns = patterns.narrowed(self.config)
        self.allowlist = allowlist
        self.diagnostics = diagnostics or StructlogDiagnostics()

    def process_file(self, path: str) -> ProcessResult:
        started = time.perf_counter()
        result = ProcessResult(file_path=path)
        try:
            _, detection, reason = analyze_file(path, self.active_patterns, self.config)
        except AntimojiError as e:
            result.error = e
            self.diagnostics.warning("file failed", path=path, error=str(e),
                                     error_type=type(e).__name__)
        else:
            if not detection.success:
                self.diagnostics.info("binary file skipped", path=path, reason=reason)
            result.detection = apply_allowlist(detection, self.allowlist)
            self.diagnostics.debug("file scanned", path=path,
                                   matches=result.detection.total_count)
        result.duration = time.perf_counter() - started
        return result

    def process_files(
        self,
        paths: Iterable[str],
        cancel: threading.Event | None = None,
    ) -> list[ProcessResult]:
        """Sequential scan; results in input order."""
        return self.process_files_concurrently(paths, workers=1, cancel=cancel)

    def process_files_concurrently(
        self,
        paths: Iterable[str],
        workers: int = 0,
        cancel: threading.Event | None = None,
    ) -> list[ProcessResult]:
        """Scan with a fixed worker pool (``0`` = one per CPU, ``1`` = sequential).

        Exactly one result per input path.  Order across workers is not
        guaranteed; use ``sort_by_input`` when input order matters.
        """
        paths = list(paths)
        outcome = run_pool(paths, self.process_file, workers, cancel)
        results = outcome.completed
        if outcome.undispatched:
            self.diagnostics.warning("run cancelled", undispatched=len(outcome.undispatched))
            results.extend(
                ProcessResult(file_path=p, error=NotProcessedError(p))
                for p in outcome.undispatched
            )
        return results


def process_files(
    paths: Iterable[str],
    patterns: PatternSet,
    config: ProcessingConfig | None = None,
) -> list[ProcessResult]:
    return Processor(patterns, config).process_files(paths)


def process_files_concurrently(
    paths: Iterable[str],
    patterns: PatternSet,
    config: ProcessingConfig | None = None,
    worker_count: int = 0,
    cancel: threading.Event | None = None,
) -> list[ProcessResult]:
    return Processor(patterns, config).process_files_concurrently(paths, worker_count, cancel)


def sort_by_input(results: list, paths: Iterable[str]) -> list:
    """Reorder results (anything with ``file_path``) to match ``paths``."""
    rank: dict[str, int] = {}
    for i, p in enumerate(paths):
        rank.setdefault(p, i)
    return sorted(results, key=lambda r: rank.get(r.file_path, len(rank)))


@dataclass(frozen=True, slots=True)
class ScanSummary:
    files: int
    errors: int
    skipped: int
    not_processed: int
    total_matches: int
    files_with_matches: int


def summarize(results: Iterable[ProcessResult]) -> ScanSummary:
    files = errors = skipped = not_processed = total = with_matches = 0
    for r in results:
        files += 1
        if not r.processed:
            not_processed += 1
        elif r.error is not None:
            errors += 1
        elif not r.detection.success:
            skipped += 1
        elif r.detection.total_count:
            total += r.detection.total_count
            with_matches += 1
    return ScanSummary(files, errors, skipped, not_processed, total, with_matches)
