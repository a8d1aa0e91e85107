import asyncio

import httpx
from aiohttp import BasicAuth
from aiohttp.test_utils import TestClient, TestServer

from bakalari_timetable.app.server import TimetableServer

from conftest import BASE_URL

GOOD_AUTH = BasicAuth("user", "secret")


def request(transport, path, params=None, auth=GOOD_AUTH, headers=None):
    """Serve one request and return (status, headers, body)."""
    async def scenario():
        server = TimetableServer(transport=transport)
        async with TestClient(TestServer(server.app)) as client:
            response = await client.get(path, params=params, auth=auth, headers=headers)
            if response.content_type == "application/json":
                body = await response.json()
            else:
                body = await response.text()
            return response.status, response.headers, body

    return asyncio.run(scenario())


def test_index(portal):
    status, _, body = request(portal.transport, "/", auth=None)
    assert status == 200
    assert body == "Hello, World!"


def test_list_classes(portal):
    status, _, body = request(portal.transport, "/classes", {"url": BASE_URL})
    assert status == 200
    assert body == ["1.B", "2.A", "7.B"]
    assert portal.login_count == 1


def test_list_teachers_and_rooms(portal):
    assert request(portal.transport, "/teachers", {"url": BASE_URL})[2] == ["Kovář Petr", "Nováková Jana"]
    assert request(portal.transport, "/rooms", {"url": BASE_URL})[2] == ["207", "Tělocvična"]


def test_missing_basic_auth(portal):
    status, headers, body = request(portal.transport, "/classes", {"url": BASE_URL}, auth=None)
    assert status == 401
    assert "Basic" in headers["WWW-Authenticate"]
    assert portal.requests == []


def test_malformed_basic_auth(portal):
    status, _, _ = request(portal.transport, "/classes", {"url": BASE_URL}, auth=None,
                           headers={"Authorization": "Bearer abc"})
    assert status == 401


def test_missing_url(portal):
    status, _, body = request(portal.transport, "/classes")
    assert status == 400
    assert "url" in body["error"]


def test_wrong_password(portal):
    status, _, body = request(portal.transport, "/rooms", {"url": BASE_URL}, auth=BasicAuth("user", "nope"))
    assert status == 401
    assert "login failed" in body["error"]


def test_timetable(portal):
    params = {"url": BASE_URL, "kind": "class", "name": "2.A", "which": "next"}
    status, _, body = request(portal.transport, "/timetable", params)

    assert status == 200
    assert len(body["hours"]) == 3
    assert body["days"][1]["lessons"][1] == [{"type": "absent", "info": "Exkurze", "abbr": "EXK"}]
    assert portal.requests[-1].url.path == "/timetable/public/next/class/2A"


def test_timetable_unknown_name(portal):
    params = {"url": BASE_URL, "kind": "class", "name": "9.Z"}
    status, _, body = request(portal.transport, "/timetable", params)
    assert status == 404


def test_timetable_bad_query(portal):
    assert request(portal.transport, "/timetable", {"url": BASE_URL, "kind": "pupil", "name": "x"})[0] == 400
    assert request(portal.transport, "/timetable", {"url": BASE_URL, "kind": "class"})[0] == 400
    assert request(portal.transport, "/timetable", {"url": BASE_URL, "kind": "class", "name": "2.A",
                                                    "which": "last"})[0] == 400


def test_portal_failure_is_bad_gateway():
    def handler(req):
        if req.url.path == "/Login":
            return httpx.Response(302, headers={"Set-Cookie": "BakaAuth=tok; path=/"})
        return httpx.Response(500, text="oops")

    transport = httpx.MockTransport(handler)
    status, _, body = request(transport, "/classes", {"url": BASE_URL})
    assert status == 502
    assert "unknown response" in body["error"]


def test_malformed_url_is_bad_request(portal):
    status, _, body = request(portal.transport, "/classes", {"url": "https://[::1"})
    assert status == 400
    assert "url" in body["error"]
    assert portal.requests == []
