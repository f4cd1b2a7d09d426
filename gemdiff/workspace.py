"""
Workspace helpers — file discovery for ``@file`` autocomplete and the
file-context block sent to the model alongside the user's request.
"""

import logging
import os

logger = logging.getLogger(__name__)

SKIP_DIRS = {
    ".git", "node_modules", "__pycache__", "venv", ".venv", "env",
    "dist", "build", ".tox", ".mypy_cache", ".pytest_cache",
    "target", "bin", "obj", ".idea", ".vscode", ".eggs",
    "site-packages", ".next", ".nuxt", "coverage", "htmlcov",
    ".gemdiff",
}

SKIP_EXTENSIONS = {
    ".pyc", ".pyo", ".exe", ".dll", ".so", ".dylib", ".o", ".obj",
    ".class", ".jar", ".war", ".zip", ".tar", ".gz", ".bz2",
    ".png", ".jpg", ".jpeg", ".gif", ".ico", ".bmp",
    ".mp3", ".mp4", ".wav", ".avi", ".mov",
    ".pdf", ".doc", ".docx", ".xls", ".xlsx",
    ".woff", ".woff2", ".ttf", ".eot",
    ".db", ".sqlite", ".sqlite3",
}

_UNREADABLE = "[Could not read file content]"


def list_workspace_files(directory: str = ".", query: str = "",
                         limit: int = 50) -> list[str]:
    """Return sorted workspace-relative POSIX paths of text files.

    When *query* is given only paths containing it (case-insensitive) are
    kept. At most *limit* paths are returned; ``limit <= 0`` means no limit.
    """
    abs_dir = os.path.abspath(directory)
    needle = query.lower()
    found: list[str] = []

    for root, dirs, files in os.walk(abs_dir):
        # Filter out skipped directories (in-place so os.walk respects it)
        dirs[:] = sorted(d for d in dirs if d not in SKIP_DIRS)
        for name in files:
            if os.path.splitext(name)[1].lower() in SKIP_EXTENSIONS:
                continue
            rel = os.path.relpath(os.path.join(root, name), abs_dir)
            rel = rel.replace(os.sep, "/")
            if needle and needle not in rel.lower():
                continue
            found.append(rel)

    found.sort()
    if limit > 0:
        found = found[:limit]
    return found


def build_context(directory: str, paths: list[str]) -> str:
    """Concatenate the contents of *paths* into a prompt context block.

    Duplicate paths are included once, in first-seen order. Files that can't
    be read are still listed, with a placeholder body.
    """
    abs_dir = os.path.abspath(directory)
    seen: set[str] = set()
    parts: list[str] = []

    for rel in paths:
        if not rel or rel in seen:
            continue
        seen.add(rel)
        try:
            with open(os.path.join(abs_dir, rel), "r", encoding="utf-8") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("[Context] Could not read file for context: %s (%s)",
                           rel, exc)
            content = _UNREADABLE
        parts.append(f"--- File: {rel} ---\n{content}\n--- End File: {rel} ---\n\n")

    return "".join(parts)
