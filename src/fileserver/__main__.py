"""
Command-line entry point.

    python -m fileserver                  # serve the current directory
    python -m fileserver ./site           # serve ./site on 127.0.0.1:5500
    pyfileserver ./site --port 8000       # installed console script

Exit status is 0 after a clean shutdown (Ctrl+C / SIGTERM) and 1 when the
root is not a directory, the configuration is invalid, or the address
cannot be bound.
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .config import ServerConfig
from .server import FileServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyfileserver",
        description="Serve a directory over HTTP/1.1 with directory listings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m fileserver                     # Serve the current directory
  python -m fileserver ./public            # Serve ./public
  python -m fileserver ./public -p 8000    # Custom port
  python -m fileserver . -l DEBUG          # Log every response
        """,
    )

    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Directory to serve (default: current directory)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=5500,
        help="Port to listen on (default: 5500)",
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=4,
        help="Number of worker threads (default: 4, max will be 4x this)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # DIAGNOSTICS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--verbose-errors",
        action="store_true",
        help="Include OS error details in 403/500 response bodies",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"pyfileserver {__version__}",
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = ServerConfig(
        root=args.root,
        host=args.host,
        port=args.port,
        min_workers=args.workers,
        max_workers=args.workers * 4,
        log_level=args.log_level,
        verbose_errors=args.verbose_errors,
    )

    try:
        server = FileServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
