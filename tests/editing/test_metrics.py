"""Tests for patch metrics logging and stats."""

import json
import os

import pytest

from gemdiff.editing.metrics import log_patch_metric, read_patch_stats


@pytest.fixture
def tmp_project(tmp_path):
    return str(tmp_path)


def _metrics_file(root):
    return os.path.join(root, ".gemdiff", "patch_metrics.jsonl")


class TestLogPatchMetric:
    def test_creates_file_and_writes_entry(self, tmp_project):
        log_patch_metric(
            {"file": "src/auth.py", "hunks_applied": 2, "hunks_total": 3},
            project_root=tmp_project,
        )

        with open(_metrics_file(tmp_project)) as f:
            lines = f.readlines()
        assert len(lines) == 1

        entry = json.loads(lines[0])
        assert entry["file"] == "src/auth.py"
        assert entry["hunks_applied"] == 2
        assert "timestamp" in entry

    def test_appends_multiple_entries(self, tmp_project):
        for name in ("a.py", "b.py", "c.py"):
            log_patch_metric({"file": name}, project_root=tmp_project)

        with open(_metrics_file(tmp_project)) as f:
            assert len(f.readlines()) == 3

    def test_write_failure_is_not_raised(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        log_patch_metric({"file": "a.py"}, project_root=str(blocker))


class TestReadPatchStats:
    def test_empty_stats(self, tmp_project):
        stats = read_patch_stats(project_root=tmp_project)

        assert stats["total_patches"] == 0
        assert stats["complete_rate"] == 0.0
        assert stats["hunk_success_rate"] == 0.0

    def test_stats_from_entries(self, tmp_project):
        log_patch_metric({"hunks_applied": 2, "hunks_total": 2},
                         project_root=tmp_project)
        log_patch_metric({"hunks_applied": 1, "hunks_total": 2},
                         project_root=tmp_project)

        stats = read_patch_stats(project_root=tmp_project)

        assert stats["total_patches"] == 2
        assert stats["hunks_applied"] == 3
        assert stats["hunks_total"] == 4
        assert stats["complete_rate"] == pytest.approx(50.0)
        assert stats["hunk_success_rate"] == pytest.approx(75.0)

    def test_last_n_and_corrupt_lines(self, tmp_project):
        log_patch_metric({"hunks_applied": 0, "hunks_total": 1},
                         project_root=tmp_project)
        with open(_metrics_file(tmp_project), "a") as f:
            f.write("{not json\n")
        log_patch_metric({"hunks_applied": 1, "hunks_total": 1},
                         project_root=tmp_project)

        stats = read_patch_stats(last_n=1, project_root=tmp_project)

        assert stats["total_patches"] == 1
        assert stats["complete_rate"] == pytest.approx(100.0)
