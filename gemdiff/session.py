"""
Review session — holds the one pending patch the user is reviewing and
commits it back to the workspace on acceptance.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass

from .editing.metrics import log_patch_metric
from .editing.patch_applier import PatchReport, apply_diff
from .errors import ReviewError

logger = logging.getLogger(__name__)


@dataclass
class PendingReview:
    """A patched file awaiting the user's decision."""
    path: str              # workspace-relative path, as given
    abs_path: str
    original_text: str
    report: PatchReport

    @property
    def patched_text(self) -> str:
        return self.report.patched_text


def warning_message(report: PatchReport, path: str) -> str:
    """User-facing message for a partially applied diff."""
    return (
        f"Could only apply {report.applied} of {report.total} changes "
        f"for {path}. Please review carefully."
    )


class ReviewSession:
    """Tracks which file a pending patch belongs to.

    At most one review is pending at a time; opening a new review replaces
    the previous one.
    """

    def __init__(self, workspace_root: str = ".",
                 metrics_enabled: bool = True) -> None:
        self.workspace_root = os.path.abspath(workspace_root)
        self._metrics_enabled = metrics_enabled
        self._pending: PendingReview | None = None

    @property
    def pending(self) -> PendingReview | None:
        return self._pending

    @property
    def active(self) -> bool:
        return self._pending is not None

    def open_review(self, file_path: str, diff_text: str) -> PatchReport:
        """Patch *file_path* in memory and make it the pending review.

        Raises
        ------
        ReviewError
            If the file is outside the workspace, doesn't exist, or is not
            valid UTF-8.
        NoHunksFound
            If *diff_text* has no hunks; no review is left pending.
        """
        self._pending = None
        abs_path = self._resolve(file_path)

        try:
            with open(abs_path, "r", encoding="utf-8", newline="") as f:
                original = f.read()
        except UnicodeDecodeError as exc:
            raise ReviewError(f"{file_path} is not valid UTF-8") from exc
        except OSError as exc:
            raise ReviewError(
                f"File not found in workspace: {file_path}") from exc

        report = apply_diff(original, diff_text)

        if report.complete:
            logger.info("[Review] All %d changes located for %s",
                        report.total, file_path)
        else:
            logger.warning("[Review] %s", warning_message(report, file_path))

        if self._metrics_enabled:
            log_patch_metric({
                "file": file_path,
                "hunks_applied": report.applied,
                "hunks_total": report.total,
            }, project_root=self.workspace_root)

        self._pending = PendingReview(
            path=file_path,
            abs_path=abs_path,
            original_text=original,
            report=report,
        )
        return report

    def accept(self, final_text: str | None = None) -> str:
        """Write the pending patched text (or *final_text*) to disk.

        The pending review is cleared whether or not the write succeeds.
        Returns the workspace-relative path that was written.
        """
        if self._pending is None:
            raise ReviewError("No active diff to apply.")

        pending = self._pending
        self._pending = None
        content = pending.patched_text if final_text is None else final_text
        try:
            self._safe_write(pending.abs_path, content)
        except OSError as exc:
            logger.error("[Review] Failed to apply changes to %s: %s",
                         pending.path, exc)
            raise ReviewError(f"Failed to apply changes: {exc}") from exc

        logger.info("[Review] Changes applied to %s", pending.path)
        return pending.path

    def reject(self) -> None:
        if self._pending is not None:
            logger.info("[Review] Changes for %s discarded", self._pending.path)
        self._pending = None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve(self, file_path: str) -> str:
        abs_path = os.path.abspath(os.path.join(self.workspace_root, file_path))
        if os.path.commonpath([abs_path, self.workspace_root]) != self.workspace_root:
            raise ReviewError(f"Path escapes the workspace: {file_path}")
        if not os.path.isfile(abs_path):
            raise ReviewError(f"File not found in workspace: {file_path}")
        return abs_path

    @staticmethod
    def _safe_write(file_path: str, content: str) -> None:
        """Write content to file atomically via temp file + rename."""
        tmp_path = file_path + ".gemdiff_tmp"

        try:
            with open(tmp_path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            shutil.move(tmp_path, file_path)
        except OSError:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
