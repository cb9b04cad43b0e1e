"""Command-line interface for the Katalon uploader.

Provides argument parsing and main entry point for uploading a test
project archive from the command line.
"""

import argparse
import asyncio
import sys
from typing import Optional

from kit_uploader.config import load_from_env, update_config, ConfigError
from kit_uploader.http_client import HttpAdapter
from kit_uploader.log import setup_logging
from kit_uploader.models import UploaderConfig, UploadResult
from kit_uploader.reporters import ConsoleReporter, Reporter
from kit_uploader.uploader import Uploader


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with the ``upload`` subcommand."""
    parser = argparse.ArgumentParser(
        prog="kit-uploader",
        description="Upload Katalon test projects to Katalon Analytics",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    upload = subparsers.add_parser(
        "upload",
        help="Upload a test project archive",
        description="Upload a test project archive and register it with a project",
    )
    upload.add_argument("path", help="Path to the test project archive")
    upload.add_argument(
        "-s", "--server-url",
        metavar="VALUE",
        help="Katalon Analytics URL (default: $KATALON_SERVER_URL)",
    )
    upload.add_argument(
        "-u", "--username",
        metavar="VALUE",
        help="Email (default: $KATALON_EMAIL)",
    )
    upload.add_argument(
        "-p", "--password",
        metavar="VALUE",
        help="Password or API key (default: $KATALON_API_KEY)",
    )
    upload.add_argument(
        "-P", "--project",
        metavar="VALUE",
        help="Katalon project id (default: $KATALON_PROJECT_ID)",
    )
    upload.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log full requests and responses",
    )
    upload.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress per-stage output, show only summary",
    )

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    return build_parser().parse_args(argv)


def config_overrides(args: argparse.Namespace) -> dict[str, Optional[str]]:
    """Map command-line flags to configuration fields."""
    return {
        "server_url": args.server_url,
        "email": args.username,
        "apikey": args.password,
        "project_id": args.project,
    }


def build_adapter() -> HttpAdapter:
    """Create the HTTP adapter used for a run."""
    return HttpAdapter()


async def run_upload(
    config: UploaderConfig,
    file_path: str,
    reporter: Optional[Reporter] = None,
) -> UploadResult:
    """Run one upload with a fresh HTTP adapter.

    Args:
        config: Merged configuration
        file_path: Archive to upload
        reporter: Optional progress reporter

    Returns:
        The UploadResult of the run.
    """
    async with build_adapter() as adapter:
        uploader = Uploader(config, adapter, reporter=reporter)
        return await uploader.upload_test_project(file_path, config.project_id)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 for success, 1 for a failed upload, 2 for usage errors
    """
    args = parse_args(argv)

    if args.command is None:
        build_parser().print_help(sys.stderr)
        return 2

    setup_logging(verbose=args.verbose)

    # Environment first, then command-line overrides
    config = load_from_env()
    try:
        update_config(config, config_overrides(args))
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    reporter = ConsoleReporter(quiet=args.quiet)
    result = asyncio.run(run_upload(config, args.path, reporter))

    return 0 if result.succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
