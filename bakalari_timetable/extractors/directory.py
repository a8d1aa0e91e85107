#!/usr/bin/env python3
"""
Module for resolving the portal's directory of classes, teachers and rooms.

The public timetable landing page carries one <select> per subject kind; each
option's text is a display name and its value the identifier used in
timetable URLs.
"""

import logging
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from bs4 import BeautifulSoup

from ..api_client import ApiClient
from ..constants import (
    CLASSES_SELECTOR,
    PUBLIC_TIMETABLE_PATH,
    ROOMS_SELECTOR,
    TEACHERS_SELECTOR,
)
from ..models import Selector, SubjectKind
from ..utils.error_utils import UnknownResponseError

logger = logging.getLogger(__name__)

KIND_SELECTORS = {
    SubjectKind.CLASS: CLASSES_SELECTOR,
    SubjectKind.TEACHER: TEACHERS_SELECTOR,
    SubjectKind.ROOM: ROOMS_SELECTOR,
}


class Directory:
    """Read-only name to identifier maps, one per subject kind."""

    def __init__(self, classes: Mapping[str, str], teachers: Mapping[str, str], rooms: Mapping[str, str]):
        self._maps = {
            SubjectKind.CLASS: MappingProxyType(dict(classes)),
            SubjectKind.TEACHER: MappingProxyType(dict(teachers)),
            SubjectKind.ROOM: MappingProxyType(dict(rooms)),
        }

    @property
    def classes(self) -> Mapping[str, str]:
        return self._maps[SubjectKind.CLASS]

    @property
    def teachers(self) -> Mapping[str, str]:
        return self._maps[SubjectKind.TEACHER]

    @property
    def rooms(self) -> Mapping[str, str]:
        return self._maps[SubjectKind.ROOM]

    def mapping(self, kind: SubjectKind) -> Mapping[str, str]:
        return self._maps[SubjectKind(kind)]

    def names(self, kind: SubjectKind) -> List[str]:
        """Display names of the given kind, sorted."""
        return sorted(self.mapping(kind))

    def lookup(self, kind: SubjectKind, name: str) -> Optional[Selector]:
        """
        Resolve a display name to a selector.

        Returns:
            The selector, or None when the name is unknown.
        """
        kind = SubjectKind(kind)
        identifier = self._maps[kind].get(name)
        if identifier is None:
            return None
        return Selector(kind, identifier, name)

    def contains(self, selector: Selector) -> bool:
        """Whether the selector's identifier is one this directory knows."""
        return self.resolve(selector) is not None

    def resolve(self, selector: Selector) -> Optional[Selector]:
        """
        Return the selector with its display name filled in.

        Returns:
            The resolved selector, or None when the identifier is not listed.
        """
        mapping = self._maps[selector.kind]
        if selector.name is not None and mapping.get(selector.name) == selector.id:
            return selector
        for name, identifier in mapping.items():
            if identifier == selector.id:
                return Selector(selector.kind, identifier, name)
        return None

    def __repr__(self) -> str:
        return (
            f"<Directory(classes={len(self.classes)}, teachers={len(self.teachers)}, "
            f"rooms={len(self.rooms)})>"
        )


def parse_options(soup: BeautifulSoup, css_selector: str) -> Dict[str, str]:
    """
    Parse the options of one <select> into a name to identifier map.

    Later options with the same display name overwrite earlier ones.

    Raises:
        UnknownResponseError: If an option has no value or no text.
    """
    result: Dict[str, str] = {}
    for option in soup.select(css_selector):
        value = option.get("value")
        if value is None:
            raise UnknownResponseError(f"option without value in {css_selector!r}")
        name = option.get_text(strip=True)
        if not name:
            raise UnknownResponseError(f"option without text in {css_selector!r}")
        if name in result:
            logger.debug(f"Duplicate name {name!r} in {css_selector!r}, keeping {value!r}")
        result[name] = value.strip()
    return result


def parse_directory(html: str) -> Directory:
    """
    Parse the public timetable landing page into a Directory.

    Args:
        html: The page content.

    Returns:
        Directory: The resolved maps.

    Raises:
        UnknownResponseError: If an option is malformed.
    """
    soup = BeautifulSoup(html, "lxml")
    maps = {kind: parse_options(soup, css) for kind, css in KIND_SELECTORS.items()}
    return Directory(
        classes=maps[SubjectKind.CLASS],
        teachers=maps[SubjectKind.TEACHER],
        rooms=maps[SubjectKind.ROOM],
    )


async def fetch_directory(client: ApiClient, token: Optional[str] = None) -> Directory:
    """
    Fetch and parse the directory page.

    Raises:
        RequestError: If the page cannot be retrieved or is malformed.
    """
    html = await client.get_page(PUBLIC_TIMETABLE_PATH, token)
    directory = parse_directory(html)
    logger.info(
        f"Resolved directory: {len(directory.classes)} classes, "
        f"{len(directory.teachers)} teachers, {len(directory.rooms)} rooms"
    )
    return directory
