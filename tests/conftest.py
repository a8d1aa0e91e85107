"""
Shared fixtures: HTML pages and a fake portal served through httpx.MockTransport.
"""
from pathlib import Path
from urllib.parse import parse_qs

import httpx
import pytest

FIXTURES = Path(__file__).resolve().parent / "fixtures"

BASE_URL = "https://bakalari.example.cz"


def load_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakePortal:
    """
    Minimal portal: login issues tok-1, tok-2, ... and pages require the
    latest token unless ``public`` is set.
    """

    def __init__(self, directory_html: str, timetable_html: str,
                 username: str = "user", password: str = "secret", public: bool = False):
        self.directory_html = directory_html
        self.timetable_html = timetable_html
        self.username = username
        self.password = password
        self.public = public
        self.login_count = 0
        self.issued = []
        self.requests = []
        self.transport = httpx.MockTransport(self.handle)

    @property
    def token(self):
        return self.issued[-1] if self.issued else None

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST" and path == "/Login":
            self.login_count += 1
            form = parse_qs(request.content.decode())
            if form.get("username") != [self.username] or form.get("password") != [self.password]:
                return httpx.Response(200, text="<html><form id='login'></form></html>")
            token = f"tok-{self.login_count}"
            self.issued.append(token)
            return httpx.Response(302, headers=[
                ("Location", "/dashboard"),
                ("Set-Cookie", "BakaCulture=cs-CZ; path=/"),
                ("Set-Cookie", f"BakaAuth={token}; path=/; HttpOnly"),
            ])

        if not self.public:
            cookie = request.headers.get("cookie")
            if cookie is None or cookie != f"BakaAuth={self.token}":
                return httpx.Response(302, headers={"Location": "/login?ReturnUrl=%2Ftimetable%2Fpublic"})

        if path == "/timetable/public":
            return httpx.Response(200, text=self.directory_html)
        if path.startswith("/timetable/public/"):
            return httpx.Response(200, text=self.timetable_html)
        return httpx.Response(404, text="not found")


@pytest.fixture
def directory_html():
    return load_fixture("directory.html")


@pytest.fixture
def timetable_html():
    return load_fixture("timetable_class.html")


@pytest.fixture
def portal(directory_html, timetable_html):
    return FakePortal(directory_html, timetable_html)


@pytest.fixture
def public_portal(directory_html, timetable_html):
    return FakePortal(directory_html, timetable_html, public=True)


@pytest.fixture
def clock():
    return FakeClock()
