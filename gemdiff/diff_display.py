"""
Diff display — the comparison view for a pending patch.

Includes a Textual-based interactive diff viewer that pauses execution so the
user can review the patched file and approve/reject before it is written.
"""

from __future__ import annotations

import difflib
import logging

logger = logging.getLogger(__name__)


def compute_diff(filepath: str, old_content: str, new_content: str) -> str | None:
    """Return a unified diff of *old_content* → *new_content*.

    Returns None if the content is unchanged.
    """
    if old_content == new_content:
        return None

    old_lines = old_content.splitlines(keepends=True)
    new_lines = new_content.splitlines(keepends=True)

    diff = difflib.unified_diff(
        old_lines, new_lines,
        fromfile=f"a/{filepath}",
        tofile=f"b/{filepath}",
        lineterm="",
    )
    diff_text = "\n".join(line.rstrip("\n") for line in diff)
    return diff_text if diff_text.strip() else None


# Style per unified-diff line kind; checked in order, so file headers win
# over the single-character +/- markers.
_LINE_STYLES = (
    (("+++", "---"), "header"),
    (("@@",), "hunk"),
    (("+",), "added"),
    (("-",), "removed"),
)

_ANSI_CODES = {
    "header": "\033[1m",
    "hunk": "\033[36m",
    "added": "\033[32m",
    "removed": "\033[31m",
}

_RICH_STYLES = {
    "header": "bold white",
    "hunk": "cyan",
    "added": "green",
    "removed": "red",
}


def _line_style(line: str) -> str | None:
    for prefixes, style in _LINE_STYLES:
        if line.startswith(prefixes):
            return style
    return None


def format_colored_diff(diff_text: str) -> str:
    """Add ANSI colors to a unified diff string.

    Green for additions (+), red for deletions (-), cyan for @@ hunks.
    """
    colored: list[str] = []
    for line in diff_text.splitlines():
        style = _line_style(line)
        colored.append(f"{_ANSI_CODES[style]}{line}\033[0m" if style else line)
    return "\n".join(colored)


# ══════════════════════════════════════════════════════════════════
#  Interactive Diff Approval: Textual TUI
# ══════════════════════════════════════════════════════════════════

def prompt_review_approval(filepath: str, diff_text: str,
                           warning: str | None = None,
                           auto: bool = False) -> bool:
    """Show the diff in an interactive Textual viewer and wait for approval.

    Returns ``True`` if the user approves (or if running in auto mode).
    Returns ``False`` if the user rejects.
    """
    if auto:
        logger.info("[Review] [auto] Diff for %s:\n%s", filepath, diff_text)
        return True

    try:
        return _textual_diff_approval(filepath, diff_text, warning)
    except ImportError:
        logger.warning("[Review] Textual not installed — falling back to console approval.")
    except Exception as e:
        logger.warning("[Review] Textual diff viewer failed: %s", e)

    return _console_diff_approval(filepath, diff_text, warning)


def _format_rich_diff(diff_text: str) -> str:
    """Convert unified diff text to Rich markup for Textual display."""
    markup_lines: list[str] = []
    for line in diff_text.splitlines():
        escaped = line.replace("[", "\\[")
        style = _line_style(line)
        if style:
            tag = _RICH_STYLES[style]
            markup_lines.append(f"[{tag}]{escaped}[/{tag}]")
        else:
            markup_lines.append(escaped)
    return "\n".join(markup_lines)


def _textual_diff_approval(filepath: str, diff_text: str,
                           warning: str | None) -> bool:
    """Launch a Textual app to display the diff and get approval."""
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.containers import Horizontal, VerticalScroll
    from textual.widgets import Button, Footer, Static

    class ReviewApp(App):
        """Interactive diff viewer with accept/reject."""

        CSS = """
        #title-bar {
            dock: top;
            height: 3;
            background: #1a1a2e;
            color: #e94560;
            text-align: center;
            padding: 1;
            text-style: bold;
        }
        #warning {
            color: #e9c46a;
            margin: 1 2 0 2;
        }
        #diff-scroll {
            height: 1fr;
            margin: 1 2;
            border: round #444;
            padding: 1;
        }
        #action-buttons {
            dock: bottom;
            height: 3;
            align: center middle;
            padding: 0 2;
        }
        #action-buttons Button {
            margin: 0 2;
            min-width: 20;
        }
        """

        BINDINGS = [
            Binding("a", "approve", "Accept"),
            Binding("ctrl+s", "approve", "Accept"),
            Binding("escape", "reject", "Reject"),
            Binding("r", "reject", "Reject"),
        ]

        def __init__(self) -> None:
            super().__init__()
            self._approved: bool = False

        def compose(self) -> ComposeResult:
            yield Static(f" ━━  Review Changes for {filepath}  ━━ ",
                         id="title-bar")
            if warning:
                yield Static(warning.replace("[", "\\["), id="warning")
            with VerticalScroll(id="diff-scroll"):
                yield Static(_format_rich_diff(diff_text))
            with Horizontal(id="action-buttons"):
                yield Button("✔ Accept", id="approve-btn", variant="success")
                yield Button("✕ Reject", id="reject-btn", variant="error")
            yield Footer()

        def on_button_pressed(self, event: Button.Pressed) -> None:
            self._approved = event.button.id == "approve-btn"
            self.exit()

        def action_approve(self) -> None:
            self._approved = True
            self.exit()

        def action_reject(self) -> None:
            self._approved = False
            self.exit()

    app = ReviewApp()
    app.run()
    return app._approved


def _console_diff_approval(filepath: str, diff_text: str,
                           warning: str | None) -> bool:
    """Fallback console-based approval when Textual is unavailable."""
    print("\n" + "=" * 60)
    print(f"  REVIEW CHANGES FOR {filepath}")
    print("=" * 60)
    print(format_colored_diff(diff_text))
    if warning:
        print(f"\n  [WARN] {warning}")

    print("\n" + "=" * 60)
    print("  [A]ccept  |  [R]eject")
    print()

    while True:
        try:
            choice = input("  Your choice: ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            return False
        if choice in ("a", "accept"):
            return True
        elif choice in ("r", "reject"):
            return False
        else:
            print("  Invalid choice. Use A or R.")
