#!/usr/bin/env python3
"""
Session for one Bakalari portal.

A session holds the HTTP client, the authentication mode and the directory of
classes, teachers and rooms resolved when it was created.
"""
import logging
from datetime import date
from types import TracebackType
from typing import Awaitable, Callable, List, Optional, Type

import httpx

from .api_client import ApiClient
from .auth import Auth, NoAuth, TokenAuth, TokenStore, login
from .constants import CONNECTION_MARKER, DEFAULT_TIMEOUT, PUBLIC_TIMETABLE_PATH
from .extractors.directory import Directory, fetch_directory
from .extractors.timetable import parse_timetable, timetable_path
from .models import Selector, SubjectKind, Timetable, Which
from .utils.error_utils import UnknownResponseError, UnknownSelectorError

logger = logging.getLogger(__name__)


class BakalariSession:
    """
    A ready-to-use connection to a portal.

    Use one of the async constructors; they log in (when credentialed) and
    resolve the directory before returning. A failure at any step closes the
    client and propagates, so a session is never half-initialized.

    Example:
        async with await BakalariSession.from_credentials(url, user, pwd) as session:
            selector = session.selector_for(SubjectKind.CLASS, "2.A")
            timetable = await session.fetch_timetable(Which.ACTUAL, selector)
    """

    def __init__(self, client: ApiClient, auth: Auth, directory: Directory):
        self._client = client
        self._auth = auth
        self._directory = directory

    # --- Construction ---

    @classmethod
    async def _open(
        cls,
        url: str,
        make_auth: Callable[[ApiClient], Awaitable[Auth]],
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "BakalariSession":
        client = ApiClient(url, timeout=timeout, transport=transport)
        try:
            auth = await make_auth(client)
            directory = await fetch_directory(client, await auth.get_token(client))
        except BaseException:
            await client.aclose()
            raise
        return cls(client, auth, directory)

    @classmethod
    async def from_credentials(
        cls,
        url: str,
        username: str,
        password: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "BakalariSession":
        """
        Open a session that keeps the credentials and renews its token.

        Raises:
            LoginError: If the first login fails.
            RequestError: If the directory cannot be resolved.
        """
        async def make_auth(client: ApiClient) -> Auth:
            return await TokenStore.create(client, username, password)

        return await cls._open(url, make_auth, timeout, transport)

    @classmethod
    async def from_credentials_no_store(
        cls,
        url: str,
        username: str,
        password: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "BakalariSession":
        """
        Log in once and keep only the issued token.

        The token is never renewed, so the session is meant to be short-lived
        (one request of the REST server, for instance).
        """
        async def make_auth(client: ApiClient) -> Auth:
            return TokenAuth(await login(client, username, password))

        return await cls._open(url, make_auth, timeout, transport)

    @classmethod
    async def from_token(
        cls,
        url: str,
        token: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "BakalariSession":
        """Open a session with an existing token that is never renewed."""
        async def make_auth(client: ApiClient) -> Auth:
            return TokenAuth(token)

        return await cls._open(url, make_auth, timeout, transport)

    @classmethod
    async def anonymous(
        cls,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "BakalariSession":
        """Open a session without authentication (public timetables only)."""
        async def make_auth(client: ApiClient) -> Auth:
            return NoAuth()

        return await cls._open(url, make_auth, timeout, transport)

    # --- Operations ---

    @property
    def directory(self) -> Directory:
        return self._directory

    @property
    def base_url(self) -> str:
        return self._client.base_url

    def list_names(self, kind: SubjectKind) -> List[str]:
        """Sorted display names of the given kind."""
        return self._directory.names(kind)

    def selector_for(self, kind: SubjectKind, name: str) -> Optional[Selector]:
        """Resolve a display name, or None when the portal does not list it."""
        return self._directory.lookup(kind, name)

    async def _token(self) -> Optional[str]:
        return await self._auth.get_token(self._client)

    async def fetch_timetable(self, which: Which, selector: Selector, today: Optional[date] = None) -> Timetable:
        """
        Fetch and decode a timetable.

        Args:
            which: The timetable window.
            selector: What to fetch, normally from selector_for().
            today: Reference date for year inference of printed dates.

        Raises:
            UnknownSelectorError: If the selector is not in the directory.
            LoginError: If the token cannot be renewed.
            RequestError: If the page cannot be retrieved.
            TimetableParseError: If the page cannot be decoded.

        These errors are siblings under BakalariError, not all RequestError;
        catch BakalariError to handle every failure of a fetch.
        """
        resolved = self._directory.resolve(selector)
        if resolved is None:
            raise UnknownSelectorError(selector)
        selector = resolved

        path = timetable_path(which, selector)
        logger.info(f"Fetching timetable {path}")
        html = await self._client.get_page(path, await self._token())
        return parse_timetable(html, selector, today)

    async def test_connection(self) -> None:
        """
        Check that the base URL points at a portal.

        Raises:
            UnknownResponseError: If the public page lacks the expected marker.
            RequestError: If the page cannot be retrieved.
        """
        html = await self._client.get_page(PUBLIC_TIMETABLE_PATH, await self._token())
        if CONNECTION_MARKER not in html:
            raise UnknownResponseError(f"{CONNECTION_MARKER} not present")
        logger.debug(f"Connection to {self.base_url} OK")

    # --- Lifecycle ---

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "BakalariSession":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"<BakalariSession(url={self.base_url!r}, auth={self._auth!r}, directory={self._directory!r})>"
