"""
=============================================================================
WEBSERVER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on port 8080
    python -m webserver

    # Custom port (positional, as in "webserver 3000")
    python -m webserver 3000

    # Serve another directory, JSON access log
    webserver 8000 --root ./public --log-format json

An invalid port (not a number, or outside 1-65534) is not fatal: a warning
is logged and the default port 8080 is used instead.

Settings are read from WEBSERVER_* environment variables first (see
ServerConfig.from_env); command-line options override them.

=============================================================================
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import DEFAULT_PORT, ServerConfig, parse_port
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webserver",
        description="Multithreaded HTTP/1.1 file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  webserver                       Serve . on port 8080
  webserver 3000                  Custom port
  webserver --root ./public       Serve another directory
  webserver --log-level DEBUG     Trace request and response headers
        """,
    )

    parser.add_argument(
        "port",
        nargs="?",
        default=None,
        help=f"Port to listen on (default: {DEFAULT_PORT})",
    )

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 0.0.0.0)",
    )

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Server root directory (default: current directory)",
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Number of worker threads (default: 10)",
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=None,
        help="Access log format (default: text)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"webserver {__version__}",
    )

    return parser


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Environment first, then command-line overrides."""
    config = ServerConfig.from_env()

    config.port = parse_port(args.port, default=config.port)
    if args.host is not None:
        config.host = args.host
    if args.root is not None:
        config.root_dir = args.root
    if args.workers is not None:
        config.workers = args.workers
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format

    return config


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    # Port warnings are emitted before the server configures logging
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        config = build_config(args)
        server = HTTPServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
