#!/usr/bin/env python3
"""
Authentication module for the Bakalari Timetable application.

This module provides:
1. The login exchange that turns a username and password into a session token
2. A token store that keeps the token fresh, renewing it at most once at a time
3. The bare-token and anonymous authentication modes
"""
import abc
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from .api_client import ApiClient
from .constants import AUTH_COOKIE_NAME, LOGIN_PATH, TOKEN_LIFETIME
from .utils.error_utils import CookieParseError, LoginFailedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TempToken:
    """A token together with the instant (monotonic clock) it stops being valid."""
    token: str
    expiration: float

    def expired(self, now: float) -> bool:
        """Whether the token is no longer valid at ``now``."""
        return now >= self.expiration


class Credentials:
    """Username and password. The password never shows up in repr()."""

    __slots__ = ("username", "password")

    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password

    def __repr__(self) -> str:
        return f"<Credentials(username={self.username!r})>"


def extract_auth_cookie(response: httpx.Response) -> str:
    """
    Find the auth cookie among the response's Set-Cookie headers.

    Args:
        response: The login response.

    Returns:
        The cookie value (the session token).

    Raises:
        CookieParseError: If no Set-Cookie header carries the auth cookie.
    """
    for header in response.headers.get_list("set-cookie"):
        pair = header.split(";", 1)[0]
        name, sep, value = pair.partition("=")
        if sep and name.strip() == AUTH_COOKIE_NAME:
            return value.strip()
    raise CookieParseError()


async def login(client: ApiClient, username: str, password: str) -> str:
    """
    Issue a new token from the portal.

    Args:
        client: The portal client.
        username: Portal username.
        password: Portal password.

    Returns:
        The session token.

    Raises:
        LoginTransportError: The login request could not be completed.
        LoginFailedError: The portal did not answer with a redirect (wrong credentials).
        CookieParseError: The redirect did not carry the auth cookie.
    """
    logger.info(f"Logging in to {client.base_url} as {username}")
    response = await client.post_form(LOGIN_PATH, {"username": username, "password": password})

    if response.status_code != 302:
        logger.error(f"Login failed with status {response.status_code}")
        raise LoginFailedError(response)

    token = extract_auth_cookie(response)
    logger.info("Login successful")
    return token


class Auth(abc.ABC):
    """How requests of a session are authenticated."""

    @abc.abstractmethod
    async def get_token(self, client: ApiClient) -> Optional[str]:
        """
        Get a token to send with the next request.

        Returns:
            The token, or None when requests are anonymous.
        """
        pass


class NoAuth(Auth):
    """Anonymous access: no cookie is sent."""

    async def get_token(self, client: ApiClient) -> Optional[str]:
        return None


class TokenAuth(Auth):
    """A fixed token that is never renewed (it may expire portal-side)."""

    def __init__(self, token: str):
        self._token = token

    async def get_token(self, client: ApiClient) -> Optional[str]:
        return self._token

    def __repr__(self) -> str:
        return "<TokenAuth>"


class TokenStore(Auth):
    """
    Owns a credential pair and hands out a currently valid token.

    A cached token is returned without a network call until it expires. When a
    renewal is needed, exactly one login runs; every caller arriving while it
    is in flight awaits the same renewal and sees the same token or the same
    error.
    """

    def __init__(
        self,
        credentials: Credentials,
        clock: Callable[[], float] = time.monotonic,
        lifetime: float = TOKEN_LIFETIME,
    ):
        self._credentials = credentials
        self._clock = clock
        self._lifetime = lifetime
        self._token: Optional[TempToken] = None
        self._renewal: Optional["asyncio.Future[str]"] = None

    @classmethod
    async def create(
        cls,
        client: ApiClient,
        username: str,
        password: str,
        clock: Callable[[], float] = time.monotonic,
        lifetime: float = TOKEN_LIFETIME,
    ) -> "TokenStore":
        """Create a store and log in immediately so bad credentials fail early."""
        store = cls(Credentials(username, password), clock=clock, lifetime=lifetime)
        await store.ensure_valid_token(client)
        return store

    @property
    def token(self) -> Optional[TempToken]:
        """The last issued token (possibly expired)."""
        return self._token

    async def ensure_valid_token(self, client: ApiClient) -> str:
        """
        Return the cached token, or renew it if it is absent or expired.

        Raises:
            LoginError: If the renewal fails.
        """
        cached = self._token
        if cached is not None and not cached.expired(self._clock()):
            return cached.token

        # No await between the check and starting the renewal
        if self._renewal is None:
            logger.debug("Token missing or expired, starting renewal")
            self._renewal = asyncio.ensure_future(self._renew(client))
        return await asyncio.shield(self._renewal)

    async def get_token(self, client: ApiClient) -> Optional[str]:
        return await self.ensure_valid_token(client)

    async def _renew(self, client: ApiClient) -> str:
        try:
            value = await login(client, self._credentials.username, self._credentials.password)
            self._token = TempToken(value, self._clock() + self._lifetime)
            return value
        finally:
            self._renewal = None

    def __repr__(self) -> str:
        return f"<TokenStore(credentials={self._credentials!r})>"
