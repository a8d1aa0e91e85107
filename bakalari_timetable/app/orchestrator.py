"""
Orchestration logic for Bakalari Timetable.

- Coordinates config loading, session creation, the connection test and extraction.
- Provides run_extraction(args), the flow behind the command line.
- Applies the caller-side retry policy (--retries) around network operations.
"""

import logging
import os
from typing import Any, Awaitable, Callable, TypeVar

import backoff
from tqdm import tqdm

from bakalari_timetable.app.cli import prompt_choice
from bakalari_timetable.config import load_config
from bakalari_timetable.models import SubjectKind, Which
from bakalari_timetable.session import BakalariSession
from bakalari_timetable.utils.error_utils import LoginTransportError, RequestTransportError
from bakalari_timetable.utils.file_utils import safe_filename, save_json_data

logger = logging.getLogger(__name__)

R = TypeVar("R")

# Only network failures are worth retrying; a wrong password or a changed page is not
TRANSIENT_ERRORS = (LoginTransportError, RequestTransportError)


def _on_backoff_handler(details):
    wait_time = details.get('wait', 0)
    tries = details.get('tries', 0)
    logger.warning(f"Retrying in {wait_time:.1f}s after {tries} tries. Error: {details.get('exception')}")


def with_retries(func: Callable[..., Awaitable[R]], retries: int) -> Callable[..., Awaitable[R]]:
    """Wrap an async function so transient network errors are retried ``retries`` times."""
    if retries <= 0:
        return func
    return backoff.on_exception(
        backoff.expo,
        TRANSIENT_ERRORS,
        max_tries=retries + 1,
        on_backoff=_on_backoff_handler,
        logger=None,
    )(func)


async def run_extraction(args: Any, **session_options: Any) -> int:
    """
    Run the extraction described by the command-line arguments.

    Returns:
        int: Process exit code.

    Raises:
        BakalariError: Propagated to the caller, which reports it.
    """
    config = load_config(args.config, args.url)
    session = await with_retries(config.open_session, args.retries)(**session_options)

    async with session:
        await with_retries(session.test_connection, args.retries)()

        kind = SubjectKind(args.kind) if args.kind else prompt_choice("Timetable type", list(SubjectKind))
        names = session.list_names(kind)
        if not names:
            logger.error(f"The portal lists no {kind} timetables")
            return 1

        if args.list:
            for name in names:
                print(name)
            return 0

        which = Which(args.which) if args.which else prompt_choice("Timetable window", list(Which))

        if args.all:
            return await _extract_all(session, kind, which, names, args)

        name = args.name if args.name else prompt_choice(f"Select {kind}", names)
        selector = session.selector_for(kind, name)
        if selector is None:
            logger.error(f"Unknown {kind} {name!r}")
            return 1

        timetable = await with_retries(session.fetch_timetable, args.retries)(which, selector)
        save_json_data(timetable, args.output)
        logger.info(f"Saved {which} timetable of {kind} {name} to {args.output}")
    return 0


async def _extract_all(session: BakalariSession, kind: SubjectKind, which: Which, names, args: Any) -> int:
    fetch = with_retries(session.fetch_timetable, args.retries)

    with tqdm(total=len(names), desc=f"Extracting {kind} timetables", unit=str(kind)) as pbar:
        for name in names:
            selector = session.selector_for(kind, name)
            timetable = await fetch(which, selector)
            path = os.path.join(args.output_dir, f"{kind}_{safe_filename(name)}_{which}.json")
            save_json_data(timetable, path)
            pbar.update(1)

    logger.info(f"Saved {len(names)} timetables to {args.output_dir}")
    return 0
