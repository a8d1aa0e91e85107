#!/usr/bin/env python3
"""
Main entry point for the Bakalari Timetable application.
"""
import asyncio
import logging
import sys
from typing import Optional, Sequence

from bakalari_timetable import logger, setup_logging
from bakalari_timetable.app.cli import parse_args
from bakalari_timetable.app.orchestrator import run_extraction
from bakalari_timetable.app.server import run_server
from bakalari_timetable.utils.error_utils import BakalariError


async def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run the command line: extract timetables or serve the REST API.

    Returns:
        int: Process exit code.
    """
    args = parse_args(argv)
    setup_logging(getattr(logging, args.log_level))

    if args.serve:
        await run_server(args.host, args.port)
        return 0

    try:
        return await run_extraction(args)
    except BakalariError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1
    except OSError as e:
        logger.error(f"Failed to write output: {e}")
        return 1


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    run()
