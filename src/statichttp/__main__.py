"""
=============================================================================
COMMAND LINE
=============================================================================

    python -m statichttp                         # serve "." on 127.0.0.1:12345
    python -m statichttp --root ./public -p 8000
    python -m statichttp --host 0.0.0.0          # all interfaces
    python -m statichttp --workers 8             # bounded pool instead of
                                                 # a thread per connection
    python -m statichttp --no-listing            # 403 for bare directories

Unset flags fall back to the STATICHTTP_* environment variables, then to
the ServerConfig defaults. An invalid configuration prints "Error: ..." and
exits with status 1.

=============================================================================
"""

from typing import List, Optional
import argparse
import sys

from . import __version__
from .config import ServerConfig
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="statichttp",
        description="Minimal HTTP/1.x static file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  statichttp                          # Serve the current directory
  statichttp --root ./public -p 8000  # Custom root and port
  statichttp --host 0.0.0.0           # Listen on all interfaces
  statichttp --workers 8              # Fixed pool of 8 worker threads
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1, use 0.0.0.0 for all interfaces)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 12345)"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-connection socket timeout in seconds (default: none)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Document root (default: current directory)"
    )

    parser.add_argument(
        "--templates", "-t",
        default=None,
        help="Directory with error.html and dirlist.html (default: <root>/templates)"
    )

    parser.add_argument(
        "--no-listing",
        action="store_true",
        help="Answer 403 instead of listing directories without index.html"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY AND LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Worker pool size (default: one thread per connection)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"statichttp {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """
    Layer CLI flags over the environment.

    Raises:
        ValueError: An environment variable does not parse.
    """
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.root is not None:
        config.root_dir = args.root
    if args.templates is not None:
        config.template_dir = args.templates
    if args.no_listing:
        config.directory_listing = False
    if args.workers is not None:
        config.max_workers = args.workers
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        server = HTTPServer(config_from_args(args))
        server.run()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
