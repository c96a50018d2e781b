"""
=============================================================================
FILE SERVER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on port 6789
    python -m fileserver

    # Another port and document root
    python -m fileserver --port 8000 --root ./public

    # Listen on all interfaces (for containers)
    python -m fileserver --host 0.0.0.0

    # Extra redirects on top of the /index.html aliases
    python -m fileserver --redirect /home=/index.html --redirect /old.html=/new.html

    # Answer garbage with 400 instead of hanging up
    python -m fileserver --reject-malformed

Environment variables (FILESERVER_HOST, FILESERVER_PORT, FILESERVER_ROOT,
FILESERVER_TIMEOUT, FILESERVER_LOG_LEVEL) provide the defaults; flags
override them.

=============================================================================
"""

import argparse
import sys
from typing import Dict, List, Optional

from . import __version__
from .server import FileServer
from .config import ServerConfig, LOG_LEVELS, LOG_FORMATS


def parse_redirect(value: str) -> tuple[str, str]:
    """argparse type for --redirect FROM=TO."""
    path, sep, destination = value.partition("=")
    if not sep or not path or not destination:
        raise argparse.ArgumentTypeError(f"expected FROM=TO, got {value!r}")
    return path, destination


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    """Build the argument parser, seeded with environment defaults."""
    parser = argparse.ArgumentParser(
        prog="fileserver",
        description="Minimal HTTP/1.1 static file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m fileserver                        # Serve . on port 6789
  python -m fileserver --port 8000 -r public  # Custom port and root
  python -m fileserver --host 0.0.0.0         # Listen on all interfaces
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=defaults.timeout,
        help="Per-connection socket timeout in seconds, 0 to wait forever "
             f"(default: {defaults.timeout})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=defaults.document_root,
        help=f"Document root to serve files from (default: {defaults.document_root})"
    )

    parser.add_argument(
        "--redirect",
        type=parse_redirect,
        action="append",
        default=[],
        metavar="FROM=TO",
        help="Add a permanent redirect (repeatable)"
    )

    parser.add_argument(
        "--reject-malformed",
        action="store_true",
        help="Answer malformed requests with 400 Bad Request"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=defaults.log_format,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"fileserver {__version__}"
    )

    return parser


def config_from_args(argv: Optional[List[str]] = None) -> ServerConfig:
    """Translate command-line arguments (over env defaults) to ServerConfig."""
    defaults = ServerConfig.from_env()
    args = build_parser(defaults).parse_args(argv)

    redirects: Dict[str, str] = dict(args.redirect)

    return ServerConfig(
        host=args.host,
        port=args.port,
        timeout=args.timeout or None,
        document_root=args.root,
        redirects=redirects,
        reject_malformed=args.reject_malformed,
        log_level=args.log_level,
        log_format=args.log_format,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status.
    """
    try:
        config = config_from_args(argv)
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


# =============================================================================
# ENTRY POINT
# =============================================================================
# This allows running: python -m fileserver

if __name__ == "__main__":
    sys.exit(main())
