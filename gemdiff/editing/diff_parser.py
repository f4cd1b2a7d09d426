"""
Diff parser — turns unified-diff text returned by the LLM into ordered
hunks of tagged lines.

Hunk header line ranges are never trusted: the model produced the diff
against a snapshot of the file that may be stale, so positions are
re-derived from content by the patch engine.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field

from ..errors import NoHunksFound

logger = logging.getLogger(__name__)

# Markers
_HUNK_HEADER = "@@"
_ADD = "+"
_REMOVE = "-"
_CONTEXT = " "

# Patterns
_FENCED_DIFF_PATTERN = re.compile(
    r"^```[ \t]*diff[ \t]*\n(.*?)^```[ \t]*$", re.MULTILINE | re.DOTALL
)
_OLD_PATH_PATTERN = re.compile(r"^---[ \t]+(?:a/)?(\S[^\n]*?)[ \t]*$", re.MULTILINE)
_NEW_PATH_PATTERN = re.compile(r"^\+\+\+[ \t]+(?:b/)?(\S[^\n]*?)[ \t]*$", re.MULTILINE)
_NULL_PATH = "/dev/null"


class LineKind(str, enum.Enum):
    CONTEXT = "context"
    ADD = "add"
    REMOVE = "remove"


@dataclass(frozen=True)
class HunkLine:
    """One line of a hunk, with its marker character stripped."""
    kind: LineKind
    content: str


@dataclass
class Hunk:
    """A contiguous block of change: context, removed and added lines."""
    lines: list[HunkLine] = field(default_factory=list)

    @property
    def context_lines(self) -> list[HunkLine]:
        return [l for l in self.lines if l.kind is LineKind.CONTEXT]

    @property
    def removed_lines(self) -> list[HunkLine]:
        return [l for l in self.lines if l.kind is LineKind.REMOVE]

    @property
    def added_lines(self) -> list[HunkLine]:
        return [l for l in self.lines if l.kind is LineKind.ADD]

    @property
    def output_lines(self) -> list[str]:
        """Lines this hunk emits into the patched text (context + added)."""
        return [l.content for l in self.lines if l.kind is not LineKind.REMOVE]

    @property
    def consumed_count(self) -> int:
        """Number of original lines this hunk replaces (context + removed)."""
        return sum(1 for l in self.lines if l.kind is not LineKind.ADD)


@dataclass
class FileDiff:
    """A diff block extracted from an LLM response, with its target path."""
    path: str | None
    diff_text: str


class DiffParser:
    """Parse unified-diff hunks out of LLM output."""

    def parse(self, diff_text: str) -> list[Hunk]:
        """Parse *diff_text* into an ordered list of hunks.

        Anything before the first ``@@`` (file headers, model chatter) is
        discarded. Body lines without a ``+``, ``-`` or space marker are
        skipped without closing the current hunk.

        Raises
        ------
        NoHunksFound
            If the text contains no ``@@`` marker.
        """
        start_idx = diff_text.find(_HUNK_HEADER)
        if start_idx == -1:
            logger.warning("[DiffEdit] No hunk header found in diff text")
            raise NoHunksFound()

        hunks: list[Hunk] = []
        current: Hunk | None = None
        skipped = 0

        for line in diff_text[start_idx:].split("\n"):
            if line.startswith(_HUNK_HEADER):
                if current is not None:
                    hunks.append(current)
                current = Hunk()
                continue
            if current is None:
                continue

            kind = self._line_kind(line)
            if kind is None:
                skipped += 1
                continue
            current.lines.append(HunkLine(kind=kind, content=line[1:]))

        if current is not None:
            hunks.append(current)

        if skipped:
            logger.debug("[DiffEdit] Skipped %d unmarked lines", skipped)
        logger.debug("[DiffEdit] Parsed %d hunks", len(hunks))
        return hunks

    @staticmethod
    def _line_kind(line: str) -> LineKind | None:
        if line.startswith(_ADD):
            return LineKind.ADD
        if line.startswith(_REMOVE):
            return LineKind.REMOVE
        if line.startswith(_CONTEXT):
            return LineKind.CONTEXT
        return None


def target_path(diff_text: str) -> str | None:
    """Return the file path named by the diff's ``--- a/`` or ``+++ b/`` header."""
    for pattern in (_OLD_PATH_PATTERN, _NEW_PATH_PATTERN):
        match = pattern.search(diff_text)
        if match:
            path = match.group(1).strip()
            if path and path != _NULL_PATH:
                return path
    return None


def extract_file_diffs(response_text: str) -> list[FileDiff]:
    """Find every fenced ``diff`` block in an LLM response.

    Falls back to treating the whole response as one diff when it has no
    fenced block but still contains a hunk header.
    """
    diffs: list[FileDiff] = []
    for match in _FENCED_DIFF_PATTERN.finditer(response_text):
        block = match.group(1)
        if not block.strip():
            continue
        diffs.append(FileDiff(path=target_path(block), diff_text=block))

    if not diffs and _HUNK_HEADER in response_text:
        diffs.append(FileDiff(
            path=target_path(response_text), diff_text=response_text,
        ))

    logger.debug("[DiffEdit] Extracted %d diff blocks", len(diffs))
    return diffs
