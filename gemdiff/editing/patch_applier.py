"""
Patch engine — locates each parsed hunk in the current file by content
and splices the located hunks into a fresh copy of the file's lines.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .diff_parser import DiffParser, Hunk, LineKind

logger = logging.getLogger(__name__)


@dataclass
class PatchReport:
    """Result of applying a list of hunks to a file."""
    patched_lines: list[str] = field(default_factory=list)
    applied: int = 0
    total: int = 0
    failed_hunks: list[Hunk] = field(default_factory=list)

    @property
    def patched_text(self) -> str:
        return "\n".join(self.patched_lines)

    @property
    def failed(self) -> int:
        return self.total - self.applied

    @property
    def complete(self) -> bool:
        return self.applied == self.total


class PatchEngine:
    """Apply unified-diff hunks whose line numbers can't be trusted.

    Each hunk is located independently against the *original* lines:

    * hunks with context lines are anchored on their first context line,
      then the remaining context lines must follow in order, with unrelated
      source lines allowed in between;
    * pure deletions (no context) must match their removed lines as one
      contiguous block;
    * hunks with neither context nor removed lines can't be placed.

    Comparison strips leading/trailing whitespace on both sides. Hunks that
    can't be located are reported and leave the file untouched.
    """

    def apply(self, original_lines: list[str], hunks: list[Hunk]) -> PatchReport:
        """Locate every hunk and assemble the patched lines.

        Never raises for hunks that fail to locate; compare
        ``report.applied`` with ``report.total`` instead.
        """
        report = PatchReport(total=len(hunks))
        starts: dict[int, Hunk] = {}

        for idx, hunk in enumerate(hunks):
            start = self.locate(original_lines, hunk)
            if start is None:
                report.failed_hunks.append(hunk)
                logger.warning(
                    "[DiffEdit] Hunk %d/%d could not be located (%d lines)",
                    idx + 1, len(hunks), len(hunk.lines),
                )
                continue

            report.applied += 1
            if start in starts:
                logger.warning(
                    "[DiffEdit] Hunk %d/%d resolves to line %d already claimed "
                    "by an earlier hunk; keeping the earlier one",
                    idx + 1, len(hunks), start + 1,
                )
                continue
            starts[start] = hunk
            logger.debug(
                "[DiffEdit] Hunk %d/%d located at line %d",
                idx + 1, len(hunks), start + 1,
            )

        report.patched_lines = self._assemble(original_lines, starts)
        return report

    def locate(self, original_lines: list[str], hunk: Hunk) -> int | None:
        """Return the zero-based line where *hunk* applies, or None."""
        context = [l.content.strip() for l in hunk.lines
                   if l.kind is LineKind.CONTEXT]
        removed = [l.content.strip() for l in hunk.lines
                   if l.kind is LineKind.REMOVE]
        source = [line.strip() for line in original_lines]

        if not context and removed:
            start = self._find_block(source, removed)
            if start is not None:
                return start

        if not context:
            return None

        return self._find_anchored(source, context)

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    @staticmethod
    def _find_block(source: list[str], block: list[str]) -> int | None:
        """First index where *block* occurs contiguously in *source*."""
        width = len(block)
        for i in range(len(source) - width + 1):
            if source[i:i + width] == block:
                return i
        return None

    @staticmethod
    def _find_anchored(source: list[str], context: list[str]) -> int | None:
        """First index of ``context[0]`` followed by the rest of *context*
        in order, skipping any source lines that don't match."""
        anchor = context[0]
        for i, line in enumerate(source):
            if line != anchor:
                continue
            expected = 1
            pos = i + 1
            while expected < len(context) and pos < len(source):
                if source[pos] == context[expected]:
                    expected += 1
                pos += 1
            if expected == len(context):
                return i
        return None

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    @staticmethod
    def _assemble(original_lines: list[str], starts: dict[int, Hunk]) -> list[str]:
        patched: list[str] = []
        i = 0
        while i < len(original_lines):
            hunk = starts.get(i)
            if hunk is None:
                patched.append(original_lines[i])
                i += 1
                continue
            patched.extend(hunk.output_lines)
            consumed = hunk.consumed_count
            swallowed = [s for s in starts if i < s < i + consumed]
            if swallowed:
                logger.warning(
                    "[DiffEdit] Hunk at line %d overlaps hunks at lines %s; "
                    "overlapped hunks were not spliced",
                    i + 1, ", ".join(str(s + 1) for s in sorted(swallowed)),
                )
            i += consumed
        return patched


def apply_diff(original_text: str, diff_text: str) -> PatchReport:
    """Parse *diff_text* and apply it to *original_text*.

    Raises
    ------
    NoHunksFound
        If *diff_text* has no hunk header.
    """
    hunks = DiffParser().parse(diff_text)
    return PatchEngine().apply(original_text.split("\n"), hunks)
