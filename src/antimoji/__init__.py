"""antimoji: find and remove emojis, emoticons and custom markers in text files."""

from .allowlist import Allowlist, AllowlistOptions, apply_allowlist, merge, resolve_allowlist
from .classifier import classify
from .config import load_config, load_from_yaml
from .detector import detect, remove_matches
from .diagnostics import NullDiagnostics, StructlogDiagnostics, configure_logging
from .errors import AntimojiError, ConfigurationError
from .filtering import FileFilterEngine, FilterProfile, discover_files
from .modifier import Modifier, ModifyConfig, ModifyResult
from .patterns import PatternSet, default_patterns
from .processor import ProcessingConfig, ProcessResult, Processor
from .types import DetectionResult, FilterDecision, Match

__all__ = [
    "Allowlist", "AllowlistOptions", "apply_allowlist", "merge", "resolve_allowlist",
    "classify",
    "load_config", "load_from_yaml",
    "detect", "remove_matches",
    "NullDiagnostics", "StructlogDiagnostics", "configure_logging",
    "AntimojiError", "ConfigurationError",
    "FileFilterEngine", "FilterProfile", "discover_files",
    "Modifier", "ModifyConfig", "ModifyResult",
    "PatternSet", "default_patterns",
    "ProcessingConfig", "ProcessResult", "Processor",
    "DetectionResult", "FilterDecision", "Match",
]
__version__ = "0.1.0"
