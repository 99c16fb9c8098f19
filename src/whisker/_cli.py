"""Whisker CLI — whisker build / whisker serve.

Entry point for the ``whisker`` command-line interface.  Running
``whisker`` with no command performs a one-shot build of the current
directory.
"""

from __future__ import annotations

import argparse
import sys


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("root", nargs="?", default=".", help="Site root directory")
    parser.add_argument("--output", default=None, help="Output directory (default: public)")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the whisker CLI."""
    parser = argparse.ArgumentParser(
        prog="whisker",
        description="Static blog builder with a live-reloading dev server.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # whisker build
    build_parser = subparsers.add_parser(
        "build",
        help="Build the site once and exit (default)",
    )
    _add_common_arguments(build_parser)

    # whisker serve
    serve_parser = subparsers.add_parser(
        "serve",
        help="Build, then serve with live reload on file changes",
    )
    _add_common_arguments(serve_parser)
    serve_parser.add_argument("--host", default=None, help="Bind address (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port (default: 8080)")

    return parser


def _get_version() -> str:
    """Get the package version."""
    from whisker import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    from whisker._errors import WhiskerError
    from whisker.app import build, serve

    try:
        if args.command == "serve":
            serve(root=args.root, host=args.host, port=args.port, output=args.output)
        elif args.command == "build":
            build(root=args.root, output=args.output)
        else:
            build(root=".")
    except WhiskerError as exc:
        print(f"Build failed: {exc}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
