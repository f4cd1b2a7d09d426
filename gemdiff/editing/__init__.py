"""Diff parsing and drift-tolerant patch application."""

from .diff_parser import (
    DiffParser, FileDiff, Hunk, HunkLine, LineKind,
    extract_file_diffs, target_path,
)
from .patch_applier import PatchEngine, PatchReport, apply_diff
from .metrics import log_patch_metric, read_patch_stats

__all__ = [
    "DiffParser", "FileDiff", "Hunk", "HunkLine", "LineKind",
    "extract_file_diffs", "target_path",
    "PatchEngine", "PatchReport", "apply_diff",
    "log_patch_metric", "read_patch_stats",
]
