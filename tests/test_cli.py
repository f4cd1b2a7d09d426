"""Tests for the gemdiff command line."""

import logging
from unittest.mock import patch

import pytest

from gemdiff import cli


SOURCE = "def add(a, b):\n    return a + b\n"

DIFF = """\
--- a/calc.py
+++ b/calc.py
@@ -1,2 +1,3 @@
 def add(a, b):
+    \"\"\"Add two numbers.\"\"\"
     return a + b
"""


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for key in ("GEMINI_API_KEY", "GEMDIFF_LOG_DIR", "GEMDIFF_METRICS"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("GEMDIFF_LOG_DIR", str(tmp_path / "logs"))
    (tmp_path / "calc.py").write_text(SOURCE)
    (tmp_path / "change.diff").write_text(DIFF)
    return tmp_path


class TestApplyCommand:
    def test_apply_with_yes_writes_file(self, workspace):
        code = cli.main(["apply", "change.diff", "--yes"])

        assert code == 0
        assert '"""Add two numbers."""' in (workspace / "calc.py").read_text()

    def test_dry_run_leaves_file(self, workspace, capsys):
        code = cli.main(["apply", "change.diff", "--dry-run"])

        assert code == 0
        assert (workspace / "calc.py").read_text() == SOURCE
        assert "Add two numbers" in capsys.readouterr().out

    def test_rejected_review_leaves_file(self, workspace):
        with patch.object(cli, "prompt_review_approval", return_value=False):
            code = cli.main(["apply", "change.diff"])

        assert code == 0
        assert (workspace / "calc.py").read_text() == SOURCE

    def test_no_hunks(self, workspace, capsys):
        (workspace / "prose.diff").write_text("I could not produce a diff.")

        code = cli.main(["apply", "prose.diff", "--file", "calc.py", "--yes"])

        assert code == 1
        assert "no valid hunks" in capsys.readouterr().out

    def test_missing_target(self, workspace):
        (workspace / "anon.diff").write_text("@@ @@\n-a\n+b\n")

        assert cli.main(["apply", "anon.diff", "--yes"]) == 1

    def test_partial_warning(self, workspace, capsys):
        (workspace / "partial.diff").write_text(
            DIFF + "@@ -9 +9 @@\n gone()\n+x\n")

        code = cli.main(["apply", "partial.diff", "--yes"])

        assert code == 0
        assert "Could only apply 1 of 2 changes for calc.py" in capsys.readouterr().out


class TestAskCommand:
    def test_missing_api_key(self, workspace, capsys):
        code = cli.main(["ask", "add docs", "--file", "calc.py"])

        assert code == 1
        assert "API key" in capsys.readouterr().out

    def test_reviews_suggested_diff(self, workspace, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "secret")
        answer = "Sure.\n\n```diff\n" + DIFF + "```\n"

        with patch.object(cli.GeminiClient, "generate_response",
                          return_value=answer) as mock_generate:
            code = cli.main(["ask", "add docs", "--file", "calc.py", "--yes"])

        assert code == 0
        prompt = mock_generate.call_args[0][0]
        assert "--- File: calc.py ---" in prompt
        assert '"""Add two numbers."""' in (workspace / "calc.py").read_text()

    def test_no_suggested_changes(self, workspace, monkeypatch, capsys):
        monkeypatch.setenv("GEMINI_API_KEY", "secret")

        with patch.object(cli.GeminiClient, "generate_response",
                          return_value="Looks fine as is."):
            code = cli.main(["ask", "review", "--file", "calc.py"])

        assert code == 0
        assert "No file changes suggested" in capsys.readouterr().out


class TestFilesAndStats:
    def test_files(self, workspace, capsys):
        cli.main(["files", "calc"])

        assert capsys.readouterr().out.splitlines() == ["calc.py"]

    def test_stats_after_apply(self, workspace, capsys):
        cli.main(["apply", "change.diff", "--yes"])
        capsys.readouterr()

        cli.main(["stats"])

        assert "Total patches:        1" in capsys.readouterr().out


def test_repeated_main_keeps_one_log_file_handler(workspace):
    cli.main(["files"])
    cli.main(["files"])

    logger = logging.getLogger("gemdiff")
    file_handlers = [h for h in logger.handlers
                     if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
