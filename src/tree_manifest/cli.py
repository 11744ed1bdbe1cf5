from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from tree_manifest.config import load_settings, setup_logging
from tree_manifest.errors import ManifestError
from tree_manifest.evidence.stable_json import render_document, write_document, write_json
from tree_manifest.model import Options
from tree_manifest.progress import NullProgress, ProgressReporter, StatusLineProgress
from tree_manifest.walker import walk

logger = logging.getLogger(__name__)

EPILOG = """\
For a dir tree in ROOT, output a JSON manifest with all the dirs, all the
symlinks and all the files with their hash chain, size and mtime.

Use zero or more EXCLUDE glob patterns to skip files or dirs; for example
'.DS_Store' '._*' skips macOS folder settings and AppleDouble files.
Supported syntax: * ? ** [abc] [!abc] {a,b} and backslash escapes.
An empty pattern can never match a path and is rejected as an error.
"""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tree-manifest",
        description="Write a deterministic JSON manifest of a directory tree.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("root", nargs="?", default=None, help="Directory tree to scan")
    parser.add_argument("exclude", nargs="*", default=[], help="Exclude glob patterns")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Write the manifest to this file instead of stdout",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Do not print the progress line to stderr",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.root is None:
        parser.print_help(sys.stderr)
        print("ERROR: command line arguments are missing", file=sys.stderr)
        return 2

    settings = load_settings()
    setup_logging(settings.log_level)

    started_ns = time.time_ns()
    reporter: ProgressReporter
    if settings.progress and not args.quiet:
        reporter = StatusLineProgress(sys.stderr)
    else:
        reporter = NullProgress()

    try:
        options = Options.build(args.root, [*args.exclude, *settings.extra_excludes])
        try:
            model, summary = walk(options, reporter)
        finally:
            reporter.finish()

        document = render_document(options, summary, model, started_ns)
        if args.output is not None:
            write_json(args.output, document, make_parents=True)
        else:
            write_document(sys.stdout, document)
    except ManifestError as exc:
        logger.error("%s", exc)
        return 1
    except OSError as exc:
        logger.error("cannot write manifest: %s", exc)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
