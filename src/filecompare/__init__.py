"""Line-level comparison of documents in heterogeneous formats."""

__version__ = "0.1.0"

from .config import AppConfig, load_config
from .core import ComparisonService
from .detection import FormatKind, detect_format
from .diffing import changed_line_indices, compute_diff_lines
from .dispatcher import CompareDispatcher, compare, get_dispatcher
from .models import (
    CompareOutcome,
    ComparisonConfig,
    ComparisonResult,
    ComparisonStats,
    DiffLine,
    DiffLineType,
    ParsedInput,
)
from .normalizer import parse_file, parse_path
from .serialization import stable_stringify

__all__ = [
    "AppConfig",
    "CompareDispatcher",
    "CompareOutcome",
    "ComparisonConfig",
    "ComparisonResult",
    "ComparisonService",
    "ComparisonStats",
    "DiffLine",
    "DiffLineType",
    "FormatKind",
    "ParsedInput",
    "__version__",
    "changed_line_indices",
    "compare",
    "compute_diff_lines",
    "detect_format",
    "get_dispatcher",
    "load_config",
    "parse_file",
    "parse_path",
    "stable_stringify",
]
