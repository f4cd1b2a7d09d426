"""
Patch metrics — tracks how many hunks located per applied diff in a JSONL
log file.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_METRICS_DIR = ".gemdiff"
_METRICS_FILE = "patch_metrics.jsonl"


def _metrics_path(project_root: str | None = None) -> str:
    """Return the absolute path to the metrics file."""
    base = project_root or os.getcwd()
    return os.path.join(base, _METRICS_DIR, _METRICS_FILE)


def log_patch_metric(data: dict, project_root: str | None = None) -> None:
    """Append a single patch metric entry to the JSONL log.

    Parameters
    ----------
    data:
        Metric fields to log (file, hunks_applied, hunks_total, etc.).
    project_root:
        Optional project root directory. Defaults to CWD.
    """
    path = _metrics_path(project_root)

    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[DiffEdit] Failed to write metrics: %s", exc)


def read_patch_stats(
    last_n: int = 50,
    project_root: str | None = None,
) -> dict:
    """Compute rolling statistics from the metrics log.

    Returns
    -------
    dict
        ``total_patches``, ``hunks_applied``, ``hunks_total``,
        ``complete_rate`` (percent of patches with every hunk located) and
        ``hunk_success_rate`` (percent of hunks located).
    """
    path = _metrics_path(project_root)

    entries: list[dict] = []
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            entries.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
        except OSError as exc:
            logger.warning("[DiffEdit] Failed to read metrics: %s", exc)

    entries = entries[-last_n:]

    if not entries:
        return {
            "total_patches": 0,
            "hunks_applied": 0,
            "hunks_total": 0,
            "complete_rate": 0.0,
            "hunk_success_rate": 0.0,
        }

    total = len(entries)
    applied = sum(int(e.get("hunks_applied", 0)) for e in entries)
    hunks_total = sum(int(e.get("hunks_total", 0)) for e in entries)
    complete = sum(
        1 for e in entries
        if e.get("hunks_applied", 0) == e.get("hunks_total", 0)
    )

    return {
        "total_patches": total,
        "hunks_applied": applied,
        "hunks_total": hunks_total,
        "complete_rate": complete / total * 100,
        "hunk_success_rate": (
            applied / hunks_total * 100 if hunks_total else 0.0
        ),
    }
