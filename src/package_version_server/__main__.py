"""Command line entry point.

    package-version-server --version
    package-version-server hover package.json 2 11
    package-version-server complete package.json 2 18

Positions are zero-indexed, as editors send them.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

import structlog

from package_version_server import __version__
from package_version_server.config import Settings
from package_version_server.logging_config import configure_logging
from package_version_server.models.document import Position
from package_version_server.presentation import render_hover_markdown
from package_version_server.state import build_state

log = structlog.get_logger()

MANIFEST_FILENAME = "package.json"


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be zero or greater: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="package-version-server",
        description="Registry metadata for dependencies in package.json",
    )
    parser.add_argument("--version", action="store_true", help="print the version and exit")
    commands = parser.add_subparsers(dest="command")
    for name, help_text in (
        ("hover", "print hover Markdown for the dependency at a position"),
        ("complete", "print version completions for the dependency at a position"),
    ):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("path", type=Path)
        command.add_argument("line", type=_non_negative_int)
        command.add_argument("column", type=_non_negative_int)
    return parser


async def _run(args: argparse.Namespace, text: str, settings: Settings) -> int:
    position = Position(line=args.line, column=args.column)

    async with build_state(settings) as state:
        if args.command == "hover":
            info = await state.service.hover(text, position)
            if info is not None:
                print(render_hover_markdown(info))
        else:
            for candidate in await state.service.complete(text, position):
                print(f"{candidate.version_label}\t{candidate.published_at.isoformat()}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"package-version-server {__version__}")
        return 0
    if args.command is None:
        parser.print_help(sys.stderr)
        return 2

    settings = Settings()
    configure_logging(settings.logging)
    if args.path.name != MANIFEST_FILENAME:
        log.info("not_a_manifest", path=str(args.path))
        return 0

    try:
        text = args.path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        parser.error(f"cannot read {args.path}: {exc}")

    return asyncio.run(_run(args, text, settings))


if __name__ == "__main__":
    sys.exit(main())
