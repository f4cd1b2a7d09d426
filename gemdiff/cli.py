"""
CLI entry point — argument parsing and main execution flow.
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from typing import Optional

from .cli_display import (
    print_error, print_stream_text, print_success, print_warning, setup_logger,
)
from .config import Config
from .diff_display import compute_diff, format_colored_diff, prompt_review_approval
from .editing.diff_parser import extract_file_diffs, target_path
from .editing.metrics import read_patch_stats
from .errors import LLMError, NoHunksFound, ReviewError
from .llm.base import CancelToken, StreamChunk
from .llm.gemini_client import GeminiClient
from .prompts import build_diff_prompt
from .session import ReviewSession, warning_message
from .workspace import build_context, list_workspace_files

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Review flow
# ---------------------------------------------------------------------------

def _review_diff(session: ReviewSession, path: str, diff_text: str,
                 auto: bool = False, dry_run: bool = False) -> int:
    """Patch *path* with *diff_text*, show the result and commit on approval."""
    try:
        report = session.open_review(path, diff_text)
    except (NoHunksFound, ReviewError) as exc:
        print_error(f"Failed to apply the patch to {path}: {exc}")
        return 1

    pending = session.pending
    warning = None if report.complete else warning_message(report, path)
    if warning:
        print_warning(warning)

    diff = compute_diff(path, pending.original_text, pending.patched_text)
    if diff is None:
        print(f"\n  No changes for {path}.")
        session.reject()
        return 0

    if dry_run:
        print(format_colored_diff(diff))
        session.reject()
        return 0

    if not prompt_review_approval(path, diff, warning=warning, auto=auto):
        session.reject()
        print(f"\n  Changes for {path} discarded.")
        return 0

    try:
        session.accept()
    except ReviewError as exc:
        print_error(str(exc))
        return 1
    print_success(f"Changes applied to {path}.")
    return 0


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _cmd_apply(args: argparse.Namespace, cfg: Config) -> int:
    """Apply a diff file to a workspace file."""
    try:
        if args.diff == "-":
            diff_text = sys.stdin.read()
        else:
            with open(args.diff, "r", encoding="utf-8") as f:
                diff_text = f.read()
    except OSError as exc:
        print_error(f"Could not read diff: {exc}")
        return 1

    path = args.file or target_path(diff_text)
    if not path:
        print_error("No target file: pass --file or include a '--- a/<path>' header.")
        return 1

    session = ReviewSession(args.root, metrics_enabled=cfg.METRICS_ENABLED)
    return _review_diff(session, path, diff_text,
                        auto=args.yes, dry_run=args.dry_run)


def _cmd_ask(args: argparse.Namespace, cfg: Config) -> int:
    """Ask Gemini for edits, then review every diff it proposes."""
    try:
        client = GeminiClient(
            base_url=cfg.GEMINI_BASE_URL,
            model=args.model or cfg.MODEL,
            api_key=cfg.GEMINI_API_KEY,
            include_thoughts=cfg.INCLUDE_THOUGHTS,
            max_retries=cfg.LLM_MAX_RETRIES,
            retry_delay=cfg.LLM_RETRY_DELAY,
            stream=cfg.STREAM_RESPONSES,
        )
    except LLMError as exc:
        print_error(str(exc))
        return 1

    context = build_context(args.root, args.file or [])
    prompt = build_diff_prompt(args.query, context)

    def _on_chunk(chunk: StreamChunk) -> None:
        if chunk.thought and not args.show_thoughts:
            return
        print_stream_text(chunk.text, thought=chunk.thought)

    token = CancelToken()
    previous = signal.signal(signal.SIGINT, lambda *_: token.cancel())
    try:
        response = client.generate_response(
            prompt, on_chunk=_on_chunk, cancel_token=token)
    except LLMError as exc:
        print_error(f"Error communicating with Gemini API: {exc}")
        return 1
    finally:
        signal.signal(signal.SIGINT, previous)
    print()

    if token.cancelled:
        print_warning("Generation cancelled.")
        return 130

    diffs = extract_file_diffs(response)
    if not diffs:
        print("\n  No file changes suggested.")
        return 0

    session = ReviewSession(args.root, metrics_enabled=cfg.METRICS_ENABLED)
    default_path = args.file[0] if args.file and len(args.file) == 1 else None
    exit_code = 0
    for file_diff in diffs:
        path = file_diff.path or default_path
        if not path:
            print_error("Skipping a diff with no '--- a/<path>' header.")
            exit_code = 1
            continue
        exit_code = max(exit_code, _review_diff(
            session, path, file_diff.diff_text, auto=args.yes))
    return exit_code


def _cmd_files(args: argparse.Namespace, cfg: Config) -> int:
    """List workspace files, optionally filtered (``@file`` autocomplete)."""
    for path in list_workspace_files(args.root, query=args.query or "",
                                     limit=args.limit):
        print(path)
    return 0


def _cmd_stats(args: argparse.Namespace, cfg: Config) -> int:
    """Show rolling patch statistics."""
    stats = read_patch_stats(last_n=args.last_n, project_root=args.root)

    if stats["total_patches"] == 0:
        print("No patch metrics found yet.")
        return 0

    print(f"\n┌─────────────────────────────────────┐")
    print(f"│ Patch Stats (last {args.last_n} patches){' ' * max(0, 9 - len(str(args.last_n)))}│")
    print(f"├─────────────────────────────────────┤")
    print(f"│ Total patches:        {stats['total_patches']:<14}│")
    print(f"│ Hunks located:        {stats['hunks_applied']:<5}/ {stats['hunks_total']:<7}│")
    print(f"│ Fully applied:        {stats['complete_rate']:<6.0f}%{' ' * 7}│")
    print(f"│ Hunk success rate:    {stats['hunk_success_rate']:<6.0f}%{' ' * 7}│")
    print(f"└─────────────────────────────────────┘")
    print()
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gemdiff",
        description="gemdiff — apply AI-generated diffs to drifted files",
    )
    parser.add_argument("--config", default=None,
                        help="Path to .gemdiff.yaml config file")
    parser.add_argument("--root", default=".",
                        help="Workspace root directory (default: CWD)")
    subparsers = parser.add_subparsers(dest="cmd", metavar="COMMAND")
    subparsers.required = True

    # --- apply ---
    apply_p = subparsers.add_parser("apply", help="Apply a diff file to a workspace file")
    apply_p.add_argument("diff", help="Path to the diff file, or '-' for stdin")
    apply_p.add_argument("--file", default=None,
                         help="Target file (default: from the diff's '--- a/' header)")
    apply_p.add_argument("--yes", action="store_true",
                         help="Accept without interactive review")
    apply_p.add_argument("--dry-run", action="store_true",
                         help="Show the resulting diff without writing")
    apply_p.set_defaults(func=_cmd_apply)

    # --- ask ---
    ask_p = subparsers.add_parser("ask", help="Ask Gemini for edits and review them")
    ask_p.add_argument("query", help="What to change")
    ask_p.add_argument("--file", action="append", default=[],
                       help="Context file (repeatable); the first is the active file")
    ask_p.add_argument("--model", default=None,
                       help="Model name (default: from config)")
    ask_p.add_argument("--yes", action="store_true",
                       help="Accept every change without interactive review")
    ask_p.add_argument("--show-thoughts", action="store_true",
                       help="Echo the model's thinking while it streams")
    ask_p.set_defaults(func=_cmd_ask)

    # --- files ---
    files_p = subparsers.add_parser("files", help="List workspace files")
    files_p.add_argument("query", nargs="?", default="",
                         help="Only list paths containing QUERY")
    files_p.add_argument("--limit", type=int, default=50,
                         help="Maximum number of paths (0 for no limit)")
    files_p.set_defaults(func=_cmd_files)

    # --- stats ---
    stats_p = subparsers.add_parser("stats", help="Show patch statistics")
    stats_p.add_argument("--last-n", type=int, default=50,
                         help="Number of recent patches to include")
    stats_p.set_defaults(func=_cmd_stats)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    cfg = Config.load(args.config)
    setup_logger(cfg.LOG_DIR)
    logger.debug("Running '%s' in %s", args.cmd, args.root)

    return args.func(args, cfg)


if __name__ == "__main__":
    sys.exit(main())
