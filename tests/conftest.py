from __future__ import annotations

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from moodle_crawler.http_client import HttpClient


def make_response(
    url: str,
    status_code: int = 200,
    body: bytes | str = b"",
    headers: dict[str, str] | None = None,
) -> requests.Response:
    resp = requests.Response()
    resp.url = url
    resp.status_code = status_code
    resp._content = body.encode("utf-8") if isinstance(body, str) else body
    resp.headers = CaseInsensitiveDict(headers or {})
    return resp


def html_page(body: str) -> str:
    return f"<html><head><title>t</title></head><body>{body}</body></html>"


class FakeSession:
    """Serves canned responses keyed by exact URL; unknown URLs are 404."""

    def __init__(self) -> None:
        self.routes: dict[str, requests.Response | Exception] = {}
        self.requested: list[str] = []
        self.calls: list[dict] = []

    def add(self, url: str, status_code: int = 200, body: bytes | str = b"",
            headers: dict[str, str] | None = None) -> None:
        self.routes[url] = make_response(url, status_code, body, headers)

    def add_html(self, url: str, body: str) -> None:
        self.add(url, body=html_page(body),
                 headers={"Content-Type": "text/html; charset=utf-8"})

    def fail(self, url: str, error: Exception) -> None:
        self.routes[url] = error

    def get(self, url: str, **kwargs) -> requests.Response:
        self.requested.append(url)
        self.calls.append(kwargs)
        route = self.routes.get(url)
        if isinstance(route, Exception):
            raise route
        if route is None:
            return make_response(url, 404, b"not found")
        return route


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def http(session: FakeSession) -> HttpClient:
    return HttpClient(session, timeout_s=5, backoff_base_s=0)  # type: ignore[arg-type]
