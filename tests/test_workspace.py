"""Tests for workspace file listing and prompt context building."""

from gemdiff.prompts import build_diff_prompt
from gemdiff.workspace import build_context, list_workspace_files


def _make_tree(root):
    (root / "src").mkdir()
    (root / "src" / "app.py").write_text("print('app')\n")
    (root / "src" / "App.test.js").write_text("test()\n")
    (root / "README.md").write_text("# readme\n")
    (root / "logo.png").write_bytes(b"\x89PNG")
    (root / "node_modules").mkdir()
    (root / "node_modules" / "dep.js").write_text("x")
    (root / ".git").mkdir()
    (root / ".git" / "HEAD").write_text("ref")


class TestListWorkspaceFiles:
    def test_skips_vendor_dirs_and_binaries(self, tmp_path):
        _make_tree(tmp_path)

        assert list_workspace_files(str(tmp_path)) == [
            "README.md", "src/App.test.js", "src/app.py",
        ]

    def test_query_is_case_insensitive(self, tmp_path):
        _make_tree(tmp_path)

        assert list_workspace_files(str(tmp_path), query="APP") == [
            "src/App.test.js", "src/app.py",
        ]

    def test_limit(self, tmp_path):
        _make_tree(tmp_path)

        assert len(list_workspace_files(str(tmp_path), limit=1)) == 1
        assert len(list_workspace_files(str(tmp_path), limit=0)) == 3


class TestBuildContext:
    def test_blocks_in_first_seen_order(self, tmp_path):
        _make_tree(tmp_path)

        context = build_context(str(tmp_path), ["src/app.py", "README.md", "src/app.py"])

        assert context == (
            "--- File: src/app.py ---\nprint('app')\n\n--- End File: src/app.py ---\n\n"
            "--- File: README.md ---\n# readme\n\n--- End File: README.md ---\n\n"
        )

    def test_unreadable_file_gets_placeholder(self, tmp_path):
        context = build_context(str(tmp_path), ["missing.py"])

        assert "--- File: missing.py ---\n[Could not read file content]\n" in context


def test_prompt_includes_query_and_context():
    prompt = build_diff_prompt("Add logging", "--- File: a.py ---\nx\n--- End File: a.py ---\n\n")

    assert 'The user\'s request is: "Add logging"' in prompt
    assert "--- File: a.py ---" in prompt
    assert "'diff'" in prompt
    assert "function MyComponent() {" in prompt
