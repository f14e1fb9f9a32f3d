"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    # Serve the current directory on 127.0.0.1:5500
    python -m simplehttp

    # Another directory, another port
    python -m simplehttp --root ./public --port 8000

    # One connection at a time
    python -m simplehttp --concurrency serial

    # Verbose logging (includes every response object)
    python -m simplehttp --log-level DEBUG

Unset options fall back to SIMPLEHTTP_* environment variables, then to
the ServerConfig defaults.

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .config import ServerConfig, CONCURRENCY_MODES
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="simplehttp",
        description="Serve files and directory listings over HTTP",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m simplehttp                          # Serve cwd on 127.0.0.1:5500
  python -m simplehttp --root ./public -p 8000  # Other root and port
  python -m simplehttp --concurrency serial     # One client at a time
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 5500)"
    )

    parser.add_argument(
        "--buffer-size",
        type=int,
        default=None,
        help="Maximum request size read per connection, in bytes (default: 1024)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # SERVING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Directory to serve (default: current directory)"
    )

    parser.add_argument(
        "--concurrency",
        choices=CONCURRENCY_MODES,
        default=None,
        help="Connection dispatch: bounded worker pool or serial threads (default: pool)"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Maximum worker threads in pool mode (default: 8)"
    )

    parser.add_argument(
        "--legacy-line-endings",
        action="store_true",
        help="Join response header lines with LF instead of CRLF"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"simplehttp {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Overlay command-line options on the environment-derived config."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.buffer_size is not None:
        config.buffer_size = args.buffer_size
    if args.root is not None:
        config.root = args.root
    if args.concurrency is not None:
        config.concurrency = args.concurrency
    if args.workers is not None:
        config.max_workers = args.workers
        config.min_workers = min(config.min_workers, args.workers)
    if args.legacy_line_endings:
        config.legacy_line_endings = True
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = config_from_args(args)

    try:
        server = HTTPServer(config)
        server.run()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
