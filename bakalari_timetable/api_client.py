#!/usr/bin/env python3
"""
API client for Bakalari portals.

This module provides the HTTP transport shared by login, directory resolution
and timetable retrieval. Redirects are never followed so that the portal's
login redirects stay observable.
"""

import logging
from types import TracebackType
from typing import Dict, Mapping, Optional, Type

import httpx

from .constants import AUTH_COOKIE_NAME, DEFAULT_HEADERS, DEFAULT_TIMEOUT
from .utils.error_utils import (
    AuthRequiredError,
    LoginTransportError,
    RequestTransportError,
    UnknownResponseError,
    handle_errors,
)

logger = logging.getLogger(__name__)


def auth_headers(token: Optional[str]) -> Dict[str, str]:
    """
    Build the headers that authenticate a request.

    Args:
        token: The session token, or None for anonymous requests.

    Returns:
        A Cookie header carrying the token, or no headers at all.
    """
    if token is None:
        return {}
    return {"Cookie": f"{AUTH_COOKIE_NAME}={token}"}


def check_response(response: httpx.Response) -> httpx.Response:
    """
    Reject redirects and error statuses for a page request.

    A redirect whose target mentions "login" means the token was not accepted.

    Raises:
        AuthRequiredError: The portal redirected to its login page.
        UnknownResponseError: Any other redirect or an error status.
    """
    if response.is_redirect:
        location = response.headers.get("location", "")
        if "login" in location.lower():
            logger.warning(f"Redirected to login page: {location}")
            raise AuthRequiredError(location)
        raise UnknownResponseError(f"unexpected redirect to {location or '<no location>'}")
    if response.is_error:
        raise UnknownResponseError(f"unexpected status {response.status_code}")
    return response


class ApiClient:
    """HTTP client bound to one portal base URL."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self._client = httpx.AsyncClient(
            base_url=base_url,
            http2=True,
            timeout=timeout,
            follow_redirects=False,
            headers=DEFAULT_HEADERS,
            transport=transport,
        )

    @handle_errors(RequestTransportError, error_message="Request failed in {function}: {error}")
    async def get(self, path: str, token: Optional[str] = None) -> httpx.Response:
        """
        Perform a GET request without following redirects.

        Args:
            path: Path relative to the portal base URL.
            token: Session token to send as cookie, None for anonymous.

        Returns:
            The raw response.
        """
        logger.debug(f"GET {path}")
        return await self._client.get(path, headers=auth_headers(token))

    @handle_errors(LoginTransportError, error_message="Login request failed in {function}: {error}")
    async def post_form(self, path: str, data: Mapping[str, str]) -> httpx.Response:
        """
        Submit a form-encoded POST request without following redirects.

        Args:
            path: Path relative to the portal base URL.
            data: Form fields.

        Returns:
            The raw response.
        """
        logger.debug(f"POST {path}")
        return await self._client.post(path, data=dict(data))

    async def get_page(self, path: str, token: Optional[str] = None) -> str:
        """
        Fetch a page and return its HTML.

        Raises:
            RequestTransportError: The request could not be completed.
            AuthRequiredError: The portal redirected to its login page.
            UnknownResponseError: Unexpected redirect or status.
        """
        response = check_response(await self.get(path, token))
        return response.text

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()
