"""Command line tool for converting Aspire app host manifests to Kustomize."""

import argparse
import asyncio
import logging
import sys
import traceback

from aspire_kustomize.exceptions import AspireException
from . import build, endtoend, generate

_LOGGER = logging.getLogger(__name__)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Command line utility for deploying Aspire apps with Kustomize.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    endtoend.EndToEndAction.register(subparsers)
    build.BuildAction.register(subparsers)
    generate.GenerateAction.register(subparsers)
    return parser


def main() -> None:
    """Aspire-kustomize command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args()

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except AspireException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("aspire-kustomize error: ", err, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
