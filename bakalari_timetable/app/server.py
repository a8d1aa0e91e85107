"""
REST server for Bakalari Timetable.

Every request names the portal with ``?url=`` and carries the portal
credentials as HTTP Basic auth. A short-lived session (single login, no
stored credentials) is opened per request.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import httpx
from aiohttp import BasicAuth, hdrs, web

from bakalari_timetable.models import SubjectKind, Which
from bakalari_timetable.session import BakalariSession
from bakalari_timetable.utils.error_utils import (
    AuthRequiredError,
    BakalariError,
    LoginFailedError,
)

logger = logging.getLogger(__name__)

UNAUTHORIZED_HEADERS = {hdrs.WWW_AUTHENTICATE: 'Basic realm="bakalari"'}


def _error(status: int, message: str, headers: Optional[Dict[str, str]] = None) -> web.Response:
    return web.json_response({"error": message}, status=status, headers=headers)


def _unauthorized(message: str) -> web.Response:
    return _error(401, message, headers=UNAUTHORIZED_HEADERS)


def _is_portal_url(url: str) -> bool:
    """Whether ``url`` is an absolute http(s) URL httpx can use as a base."""
    if not url.startswith(("http://", "https://")):
        return False
    try:
        return bool(httpx.URL(url).host)
    except (httpx.InvalidURL, ValueError):
        return False


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Map portal errors onto HTTP statuses."""
    try:
        return await handler(request)
    except (LoginFailedError, AuthRequiredError) as e:
        logger.warning(f"{request.path}: {e}")
        return _unauthorized(str(e))
    except BakalariError as e:
        logger.error(f"{request.path}: {e}")
        return _error(502, str(e))


class TimetableServer:
    """HTTP server exposing directory listings and timetables as JSON."""

    def __init__(self, host: str = "0.0.0.0", port: int = 3000, **session_options: Any):
        self.host = host
        self.port = port
        self.session_options = session_options
        self.app = web.Application(middlewares=[error_middleware])
        self._setup_routes()

    def _setup_routes(self):
        """Setup HTTP routes."""
        self.app.router.add_get("/", self._handle_index)
        self.app.router.add_get("/classes", self._handle_classes)
        self.app.router.add_get("/teachers", self._handle_teachers)
        self.app.router.add_get("/rooms", self._handle_rooms)
        self.app.router.add_get("/timetable", self._handle_timetable)

    async def _open_session(self, request: web.Request) -> BakalariSession:
        header = request.headers.get(hdrs.AUTHORIZATION)
        if not header:
            raise web.HTTPUnauthorized(
                text=json.dumps({"error": "Basic authentication required"}),
                content_type="application/json",
                headers=UNAUTHORIZED_HEADERS,
            )
        try:
            auth = BasicAuth.decode(header)
        except ValueError as e:
            raise web.HTTPUnauthorized(
                text=json.dumps({"error": f"Invalid basic authentication header: {e}"}),
                content_type="application/json",
                headers=UNAUTHORIZED_HEADERS,
            ) from e

        url = request.query.get("url", "").strip()
        if not _is_portal_url(url):
            raise web.HTTPBadRequest(
                text=json.dumps({"error": "Missing or invalid url parameter"}),
                content_type="application/json",
            )

        return await BakalariSession.from_credentials_no_store(url, auth.login, auth.password, **self.session_options)

    async def _handle_index(self, request: web.Request) -> web.Response:
        return web.Response(text="Hello, World!")

    async def _list(self, request: web.Request, kind: SubjectKind) -> web.Response:
        async with await self._open_session(request) as session:
            return web.json_response(session.list_names(kind))

    async def _handle_classes(self, request: web.Request) -> web.Response:
        return await self._list(request, SubjectKind.CLASS)

    async def _handle_teachers(self, request: web.Request) -> web.Response:
        return await self._list(request, SubjectKind.TEACHER)

    async def _handle_rooms(self, request: web.Request) -> web.Response:
        return await self._list(request, SubjectKind.ROOM)

    async def _handle_timetable(self, request: web.Request) -> web.Response:
        """Return one timetable: ?kind=class&name=2.A&which=actual."""
        try:
            kind = SubjectKind(request.query.get("kind", ""))
            which = Which(request.query.get("which", Which.ACTUAL.value))
        except ValueError as e:
            return _error(400, str(e))
        name = request.query.get("name")
        if not name:
            return _error(400, "Missing name parameter")

        async with await self._open_session(request) as session:
            selector = session.selector_for(kind, name)
            if selector is None:
                return _error(404, f"Unknown {kind} {name!r}")
            timetable = await session.fetch_timetable(which, selector)
            return web.json_response(timetable.to_dict())

    async def start(self):
        """Start the server and serve until cancelled."""
        logger.info(f"Starting timetable server on http://{self.host}:{self.port}")

        runner = web.AppRunner(self.app)
        await runner.setup()
        site = web.TCPSite(runner, self.host, self.port)
        await site.start()

        try:
            await asyncio.Future()
        finally:
            await runner.cleanup()


async def run_server(host: str = "0.0.0.0", port: int = 3000):
    """Run the REST server."""
    server = TimetableServer(host=host, port=port)
    await server.start()
