#!/usr/bin/env python3
# Package initialization
"""
Bakalari Timetable - A tool for extracting timetable data from Bakalari school portals.

The package logs in to a portal (or uses it anonymously), resolves the lists of
classes, teachers and rooms, and decodes the public timetable pages into
typed models.
"""

__all__ = [
    "logger",
    "setup_logging",
    "BakalariSession",
    "Selector",
    "SubjectKind",
    "Which",
    "Timetable",
]

__version__ = "1.0.0"

import logging
import sys

# Configure logging
def setup_logging(level=logging.INFO):
    """Configure logging for the application"""
    logger = logging.getLogger("bakalari_timetable")
    logger.setLevel(level)

    # Only add handler if none exist to avoid duplicate logs
    if not logger.handlers:
        # Log through tqdm.write on stderr so bars and stdout data stay intact
        class TqdmLoggingHandler(logging.Handler):
            def emit(self, record):
                try:
                    msg = self.format(record)
                    from tqdm import tqdm
                    tqdm.write(msg, file=sys.stderr)
                except Exception:
                    self.handleError(record)

        console_handler = TqdmLoggingHandler()

        formatter = logging.Formatter('[%(asctime)s] %(levelname)s - %(message)s',
                                     datefmt='%Y-%m-%d %H:%M:%S')
        console_handler.setFormatter(formatter)

        logger.addHandler(console_handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger

# Set up the logger when the module is imported
logger = setup_logging()

from bakalari_timetable.models import Selector, SubjectKind, Which, Timetable  # noqa: E402
from bakalari_timetable.session import BakalariSession  # noqa: E402
