"""Command-line entry point: ``docsgen`` or ``python -m docsgen``."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from ._logging import scoped_logger, setup_logging
from .exceptions import DocsgenError
from .pipeline import generate_docs
from .settings import Settings

log = scoped_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsgen",
        description="Generate the Mintlify docs tree and docs.json from the docs template",
    )
    parser.add_argument("-c", "--clean", action="store_true", help="Clean the output directory before generating")
    parser.add_argument("--root", type=Path, default=None, help="Workspace root (default: current directory)")
    parser.add_argument("--template-dir", help="Template directory, relative to the root")
    parser.add_argument("--output-dir", help="Output directory, relative to the root")
    parser.add_argument("--edit-base-url", help="Owner URL for 'Edit this page' links, e.g. https://github.com/org")
    parser.add_argument("--log-level", default=None, help="trace|debug|info|warn|error|off")
    parser.add_argument("--log-format", choices=("json", "human"), default=None, help="Log output format")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.log_level or args.log_format:
        setup_logging(args.log_level or "info", format=args.log_format)

    settings = Settings.from_env(args.root)
    overrides = {
        key: value
        for key, value in (
            ("template_dir", args.template_dir),
            ("output_dir", args.output_dir),
            ("edit_base_url", args.edit_base_url),
        )
        if value
    }
    if overrides:
        settings = replace(settings, **overrides)

    try:
        generate_docs(settings, clean=args.clean)
    except DocsgenError as e:
        log.error(f"Error generating docs: {e}", extra={"code": e.code, "details": e.details})
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
