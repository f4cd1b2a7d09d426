"""
gemdiff — apply AI-generated unified diffs to files that have drifted since
the diff was written.

Public API for library usage::

    from gemdiff import apply_diff

    report = apply_diff(current_text, diff_text)
    if not report.complete:
        print(f"Could only apply {report.applied} of {report.total} changes")
    new_text = report.patched_text
"""

from .editing import (
    DiffParser, FileDiff, Hunk, HunkLine, LineKind, PatchEngine, PatchReport,
    apply_diff, extract_file_diffs, target_path,
)
from .errors import GemdiffError, LLMError, NoHunksFound, ReviewError
from .session import ReviewSession

__all__ = [
    "DiffParser", "FileDiff", "Hunk", "HunkLine", "LineKind",
    "PatchEngine", "PatchReport", "apply_diff", "extract_file_diffs",
    "target_path", "GemdiffError", "LLMError", "NoHunksFound",
    "ReviewError", "ReviewSession",
]
