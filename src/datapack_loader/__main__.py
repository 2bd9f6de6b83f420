"""
Command-line entry point for datapack-loader.
Usage: python -m datapack_loader PACK_DIR [--seed N] [--config FILE]
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .errors import DatapackError
from .pack import DatapackLoader
from .settings import LoaderSettings
from .utils.logging_config import document_extra, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="datapack_loader",
        description="Load a data pack and report what it contains.",
    )
    parser.add_argument("pack", help="Pack directory (containing pack.mcmeta)")
    parser.add_argument("--seed", type=int, default=None, help="Seed of the loading random stream")
    parser.add_argument("--config", default=None, help="INI settings file instead of the native store")
    parser.add_argument("--profile", default="default", help="Settings profile")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Load the pack named on the command line; returns the exit code."""
    args = build_parser().parse_args(argv)
    logger = logging.getLogger(f"{__name__}.main")
    try:
        settings = LoaderSettings(profile=args.profile, file_path=args.config)
        setup_logging(settings.logging)

        validation = settings.validate()
        for warning in validation.warnings:
            logger.warning(f"Configuration warning: {warning}")
        if not validation.is_valid:
            logger.error("Configuration validation failed:")
            for error in validation.errors:
                logger.error(f"  {error}")
            return 1

        pack = DatapackLoader(settings, seed=args.seed).load(args.pack)

        for namespace, data in sorted(pack.namespaces.items()):
            for category, collection in data.collections():
                count = sum(1 for _ in collection.walk())
                if count:
                    logger.info(f"{namespace}:{category}: {count} documents")

        failures = pack.failures()
        for source, failure in sorted(failures.items()):
            logger.error(failure.describe(), extra=document_extra(source))
        logger.info(f"{len(pack.namespaces)} namespaces, {len(failures)} malformed documents")
        return 0

    except DatapackError as e:
        logger.error(f"Could not load pack: {e}")
        return 1
    except Exception:
        logger.exception("Unhandled exception in main")
        return 1


if __name__ == "__main__":
    sys.exit(main())
