from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QtMsgType, qInstallMessageHandler

from mdbrowse.app import config
from mdbrowse.core.render_sink import MarkdownRenderer, RecordingSink


# ============================================================================
# DEBUG CONFIGURATION - Environment Variables
# ============================================================================
# Set these environment variables to "1" or "true" to enable detailed logging
#
# MDBROWSE_DEBUG                    - Debug logging for every mdbrowse module
# MDBROWSE_DEBUG_NAV                - Topic store navigation and history only
# MDBROWSE_DETAILED_RENDER_LOGGING  - Per-topic render timing ([RenderTiming])
#
# Examples:
#   export MDBROWSE_DEBUG_NAV=1
#   MDBROWSE_DETAILED_RENDER_LOGGING=1 mdbrowse ./docs
# ============================================================================

def _debug_enabled(var_name: str) -> bool:
    """Check if a debug flag is enabled."""
    return os.getenv(var_name, "0") not in ("0", "false", "False", "", None)


def _configure_logging() -> None:
    level = logging.DEBUG if _debug_enabled("MDBROWSE_DEBUG") else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("mdbrowse").setLevel(level)
    if _debug_enabled("MDBROWSE_DEBUG_NAV"):
        logging.getLogger("mdbrowse.core.topic_store").setLevel(logging.DEBUG)


def _diag(msg: str) -> None:
    """Lightweight diagnostic logger for startup/teardown events."""
    timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
    print(f"[MdbrowseDiag {timestamp}] {msg}", file=sys.stderr)


# Printed by the offscreen and wayland platform plugins when size hints change
_IGNORED_QT_MESSAGES = ("This plugin does not support propagateSizeHints()",)


def _qt_message_handler(mode: QtMsgType, context, message: str) -> None:
    """Custom Qt message handler to suppress known harmless warnings."""
    if any(ignored in message for ignored in _IGNORED_QT_MESSAGES):
        return
    if mode == QtMsgType.QtDebugMsg:
        print(f"Qt Debug: {message}", file=sys.stderr)
    elif mode == QtMsgType.QtWarningMsg:
        print(f"Qt Warning: {message}", file=sys.stderr)
    elif mode == QtMsgType.QtCriticalMsg:
        print(f"Qt Critical: {message}", file=sys.stderr)
    elif mode == QtMsgType.QtFatalMsg:
        print(f"Qt Fatal: {message}", file=sys.stderr)
        sys.exit(1)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Markdown documentation browser.")
    parser.add_argument("docs", nargs="?", help="Directory holding the markdown topics.")
    parser.add_argument("--home", help="Topic shown by the home button ('' hides it).")
    parser.add_argument("--history-max", type=int, help="Number of visits kept in history.")
    parser.add_argument("--images", help="Directory images are loaded from (default: docs directory).")
    parser.add_argument("--file-pattern", help="Regex a file name must match; group 1 names the topic.")
    parser.add_argument("--title-pattern", help="Regex whose group 1 is the topic title.")
    parser.add_argument(
        "--dump",
        metavar="FILE",
        help="Print the styled runs of a markdown file and exit without opening a window.",
    )
    return parser.parse_args(argv)


def _persist_overrides(args: argparse.Namespace) -> None:
    """Remember command line choices so later runs start the same way."""
    if args.home is not None:
        config.save_home_topic(args.home)
    if args.history_max is not None:
        config.save_history_max(args.history_max)
    if args.images:
        config.save_images_path(str(Path(args.images).expanduser()))
    config.save_patterns(args.file_pattern, args.title_pattern)


def _format_event(event: tuple) -> str:
    kind = event[0]
    if kind == "text":
        return f"text  {event[1]!r} {sorted(event[2])}"
    if kind == "image":
        return f"image #{event[1]} {event[2]}"
    return f"link  #{event[1]} {event[2]!r} {sorted(event[3])}"


def dump_markdown(path: Path, images_path: Optional[str] = None, out=None) -> int:
    """Render ``path`` into a recording sink and print one line per run."""
    out = out or sys.stdout
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Error: cannot read {path}: {exc}", file=sys.stderr)
        return 1
    sink = RecordingSink()
    renderer = MarkdownRenderer(
        sink,
        images_path=images_path or path.parent,
        bullet_chars=config.load_bullet_chars(),
    )
    renderer.render(content)
    for event in sink.events:
        print(_format_event(event), file=out)
        if event[0] == "link":
            print(f"      -> {renderer.alt_links.link_url(event[1])}", file=out)
        elif event[0] == "image":
            alt = renderer.alt_links.alt_text(event[1])
            if alt:
                print(f"      alt {alt!r}", file=out)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    _configure_logging()
    config.init_settings()

    if args.dump:
        return dump_markdown(Path(args.dump), args.images)

    from PySide6.QtWidgets import QApplication
    from mdbrowse.app.ui.main_window import MainWindow

    qInstallMessageHandler(_qt_message_handler)
    app = QApplication.instance() or QApplication(sys.argv[:1])
    app.setApplicationName("Markdown Browser")

    docs = args.docs or config.load_last_docs_path() or "."
    docs_path = Path(docs).expanduser()
    if not docs_path.is_dir():
        print(f"Error: documentation directory not found: {docs_path}", file=sys.stderr)
        return 1

    history_max = args.history_max
    if history_max is not None and history_max < 1:
        print("Error: --history-max must be at least 1", file=sys.stderr)
        return 2

    _persist_overrides(args)
    _diag(f"Opening {docs_path}")
    window = MainWindow(home_topic=args.home, history_max=history_max, images_path=args.images)
    if not window.open_docs(docs_path):
        return 1
    window.show()
    code = app.exec()
    _diag(f"Event loop exited with code {code}")
    return code


if __name__ == "__main__":
    sys.exit(main())
