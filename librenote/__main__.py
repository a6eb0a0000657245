"""LibreNote CLI entry point.

Allows running via `python -m librenote` and provides the console script
defined in `pyproject.toml`.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from .constants import EditorConstants
from .version import get_version_string


def configure_logging(log_file: Optional[str]) -> None:
    """Send log records to a file; a full-screen app can't log to stderr."""
    log_file = log_file or os.environ.get(EditorConstants.LOG_ENV_VAR)
    if not log_file:
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(EditorConstants.LOG_FORMAT))
    package_logger = logging.getLogger("librenote")
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="librenote", description="A minimal plain-text editor.")
    parser.add_argument("filename", nargs="?", help="file to open (created on first save)")
    parser.add_argument("-V", "--version", action="store_true", help="print build info and exit")
    parser.add_argument("--textual", action="store_true", help="use the Textual interface")
    parser.add_argument("--log-file", metavar="PATH",
                        help=f"write a debug log to PATH (or set {EditorConstants.LOG_ENV_VAR})")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.version:
        print(get_version_string())
        return 0

    configure_logging(args.log_file)

    # Lazy imports keep --version free of UI dependencies
    from .errors import DocumentIOError
    from .settings_persistence import SettingsPersistence

    settings = SettingsPersistence()
    if args.textual:
        from .textual_app import main as textual_main
        textual_main(filename=args.filename, settings=settings)
        return 0

    from .editor import Editor
    editor = Editor(settings=settings)
    if args.filename:
        try:
            editor.load_file(args.filename)
        except DocumentIOError as e:
            editor.close()
            print(f"Error loading file: {e}", file=sys.stderr)
            return 1
    editor.run()
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
