"""
CLI parsing and interactive prompts for Bakalari Timetable.

- Defines parse_args() to handle command-line arguments.
- Defines prompt_choice() for numbered interactive selection.
"""

import argparse
from typing import List, Optional, Sequence, TypeVar

from bakalari_timetable.constants import DEFAULT_OUTPUT_FILE
from bakalari_timetable.models import SubjectKind, Which

T = TypeVar("T")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Extract timetable data from a Bakalari portal')
    parser.add_argument('--config', type=str, help='JSON file with url, username and password')
    parser.add_argument('--url', type=str, help='Portal base URL (overrides config file and environment)')
    parser.add_argument('--kind', type=str, choices=[k.value for k in SubjectKind],
                        help='Timetable type (prompted if omitted)')
    parser.add_argument('--which', type=str, choices=[w.value for w in Which],
                        help='Timetable window (prompted if omitted)')
    parser.add_argument('--name', type=str, help='Class, teacher or room name (prompted if omitted)')
    parser.add_argument('--list', action='store_true', help='Only list the available names of --kind')
    parser.add_argument('--all', action='store_true', help='Extract the timetables of every name of --kind')
    parser.add_argument('--output', type=str, default=DEFAULT_OUTPUT_FILE, help='Output file for a single timetable')
    parser.add_argument('--output-dir', type=str, default='timetables', help='Directory to save output files with --all')
    parser.add_argument('--retries', type=int, default=0, help='Retry network failures this many times')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO', help='Set the logging level')
    parser.add_argument('--serve', action='store_true', help='Run the REST server instead of extracting')
    parser.add_argument('--host', type=str, default='0.0.0.0', help='Host for --serve')
    parser.add_argument('--port', type=int, default=3000, help='Port for --serve')
    args = parser.parse_args(argv)
    if args.retries < 0:
        parser.error('--retries must not be negative')
    return args


def prompt_choice(title: str, options: List[T]) -> T:
    """
    Ask the user to pick one of ``options``.

    The answer may be the option's number or its exact text. Re-prompts until
    the answer is valid.
    """
    print(f"\n{title}:")
    for i, option in enumerate(options, 1):
        print(f"  {i}. {option}")

    while True:
        answer = input(f"Choose 1-{len(options)}: ").strip()
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return options[int(answer) - 1]
        for option in options:
            if str(option) == answer:
                return option
        print("Invalid choice, please try again.")
